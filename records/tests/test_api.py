"""
Integration tests for the records API.

These exercise authentication, role checks and the HTTP contract of the
export, backup and DPR endpoints through DRF's APIClient.
"""
import datetime as dt
import io
import zipfile

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework.test import APIClient

from records.models import AuditEvent, IPDPage, IPDRegistration, OPDRegistration, PatientDetail, User
from records.services import dpr

from .conftest import make_page

pytestmark = pytest.mark.django_db


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def staff():
    return User.objects.create_user(username='staff1', password='P@ssw0rd1', role='staff')


@pytest.fixture
def admin():
    return User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin')


def body(resp):
    return b''.join(resp.streaming_content)


# -- auth ------------------------------------------------------------------
def test_login_returns_jwt_and_token(staff):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'staff1', 'password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 200
    assert r.data['token'] and r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['role'] == 'staff'
    assert AuditEvent.objects.filter(action='login', user=staff).exists()

    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    assert client.get(reverse('ipd_active')).status_code == 200


def test_login_cannot_pick_role(staff):
    r = APIClient().post(reverse('login_view'),
                         {'username': 'staff1', 'password': 'P@ssw0rd1', 'role': 'super'}, format='json')
    assert r.status_code == 200
    assert r.data['role'] == 'staff'


def test_login_rejects_bad_password(staff):
    r = APIClient().post(reverse('login_view'), {'username': 'staff1', 'password': 'nope'}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_logout_revokes_token(staff):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'staff1', 'password': 'P@ssw0rd1'}, format='json')
    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    out = client.post(reverse('jwt_logout'), {'refresh': r.data['jwt_refresh']}, format='json')
    assert out.status_code == 200
    assert out.data['blacklisted'] == 1
    assert client.get(reverse('ipd_active')).status_code == 401


def test_anonymous_is_rejected():
    assert APIClient().get(reverse('ipd_active')).status_code == 401


def test_healthz():
    r = APIClient().get(reverse('healthz'))
    assert r.status_code == 200
    assert r.json()['ok'] is True


# -- lists -----------------------------------------------------------------
def test_dashboard_requires_admin(staff, admin):
    params = {'startDate': '2024-03-01', 'endDate': '2024-06-01'}
    assert client_for(staff).get(reverse('billing_dashboard'), params).status_code == 403
    r = client_for(admin).get(reverse('billing_dashboard'), params)
    assert r.status_code == 200
    assert r.data['data']['clamped'] is True
    assert r.data['data']['endDate'] == '2024-03-31'


def test_discharged_search_needs_criterion(staff):
    r = client_for(staff).get(reverse('ipd_discharged'))
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_opd_list_and_delete(staff, admin, patient):
    appt = OPDRegistration.objects.create(patient=patient, date=dt.datetime(2024, 3, 5, 10, tzinfo=dt.timezone.utc))
    r = client_for(staff).get(reverse('opd_appointments'), {'tab': 'all', 'pageSize': 10})
    assert r.status_code == 200
    assert r.data['pagination']['total'] == 1
    assert r.data['data'][0]['opdId'] == appt.opd_id

    url = reverse('opd_appointment_delete', args=[appt.opd_id])
    assert client_for(staff).delete(url).status_code == 403
    assert client_for(admin).delete(url).status_code == 200
    assert client_for(admin).delete(url).status_code == 404


# -- exports ---------------------------------------------------------------
def test_record_pdf_without_pages_is_404(staff, registration):
    r = client_for(staff).get(reverse('ipd_record_pdf', args=[registration.ipd_id]))
    assert r.status_code == 404
    assert r.data['error']['code'] == 'no_records'


def test_record_pdf_unknown_registration(staff):
    assert client_for(staff).get(reverse('ipd_record_pdf', args=[424242])).status_code == 404


def test_record_pdf_legacy(staff, registration, health):
    r = client_for(staff).get(reverse('ipd_record_pdf', args=[registration.ipd_id]), {'source': 'legacy'})
    assert r.status_code == 200
    assert r['Content-Type'] == 'application/pdf'
    assert f'Asha Verma_{registration.ipd_id}.pdf' in r['Content-Disposition']
    assert body(r).startswith(b'%PDF')


def test_groups_and_group_pdf(staff, registration):
    IPDPage.objects.create(registration=registration, uhid=registration.patient_id,
                           group_name='Consent', page_number=1, canvas_data=make_page('Consent', 1))
    client = client_for(staff)
    groups = client.get(reverse('ipd_record_groups', args=[registration.ipd_id]))
    assert groups.data['data'] == ['Consent']

    empty = client.post(reverse('ipd_groups_pdf', args=[registration.ipd_id]), {'groups': []}, format='json')
    assert empty.status_code == 400

    r = client.post(reverse('ipd_groups_pdf', args=[registration.ipd_id]), {'groups': ['Consent']}, format='json')
    assert r.status_code == 200
    assert body(r).startswith(b'%PDF')


def test_preview_then_selected_pages(staff, registration, health):
    client = client_for(staff)
    preview = client.get(reverse('ipd_record_preview', args=[registration.ipd_id]))
    assert preview.status_code == 200
    names = [g['groupName'] for g in preview.data['data']]
    assert names[:2] == ['Indoor Patient File', 'Progress Notes']
    key = preview.data['data'][1]['pages'][0]['key']

    r = client.post(reverse('ipd_pages_pdf', args=[registration.ipd_id]), {'keys': [key]}, format='json')
    assert r.status_code == 200
    assert body(r).startswith(b'%PDF')

    missing = client.post(reverse('ipd_pages_pdf', args=[registration.ipd_id]), {'keys': ['legacy-x-1-0']}, format='json')
    assert missing.status_code == 404


def test_discharge_summary_pdf(staff, registration, health):
    r = client_for(staff).get(reverse('ipd_discharge_summary', args=[registration.ipd_id]))
    assert r.status_code == 200
    assert body(r).startswith(b'%PDF')


def test_discharge_summary_missing(staff, registration):
    r = client_for(staff).get(reverse('ipd_discharge_summary', args=[registration.ipd_id]))
    assert r.status_code == 404


# -- backup ----------------------------------------------------------------
def _backup_payload(**extra):
    payload = {'startDate': '2024-03-01', 'endDate': '2024-03-31', 'source': 'legacy', 'password': 'P@ssw0rd1'}
    payload.update(extra)
    return payload


def test_backup_is_admin_only(staff):
    r = client_for(staff).post(reverse('ipd_backup'), _backup_payload(), format='json')
    assert r.status_code == 403


def test_backup_wrong_password(admin):
    r = client_for(admin).post(reverse('ipd_backup'), _backup_payload(password='medford'), format='json')
    assert r.status_code == 403
    assert AuditEvent.objects.filter(action='backup', detail__result='bad_password').exists()


def test_backup_empty_range(admin):
    r = client_for(admin).post(reverse('ipd_backup'), _backup_payload(), format='json')
    assert r.status_code == 200
    assert r.data['count'] == 0


def test_backup_reversed_range(admin):
    r = client_for(admin).post(reverse('ipd_backup'), _backup_payload(endDate='2024-02-01'), format='json')
    assert r.status_code == 400


def test_backup_zip(admin, registration, health):
    registration.discharge_date = dt.date(2024, 3, 10)
    registration.save(update_fields=['discharge_date'])
    r = client_for(admin).post(reverse('ipd_backup'), _backup_payload(), format='json')
    assert r.status_code == 200
    assert r['Content-Type'] == 'application/zip'
    assert 'IPD_Backup_2024-03-01_to_2024-03-31_Full.zip' in r['Content-Disposition']
    with zipfile.ZipFile(io.BytesIO(body(r))) as zf:
        assert zf.namelist() == ['Asha_Verma_Discharge_2024-03-10.pdf']


# -- DPR -------------------------------------------------------------------
def test_dpr_missing_fields(admin):
    r = client_for(admin).post(reverse('dpr_send'), {'caption': 'DPR'}, format='multipart')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Missing required fields.'


def test_dpr_send(admin, monkeypatch):
    captured = {}

    def fake_send_document(media_url, caption, filename, number=None):
        captured.update(media_url=media_url, caption=caption, filename=filename)
        return {'status': 'PENDING'}

    monkeypatch.setattr(dpr, 'send_document', fake_send_document)
    upload = SimpleUploadedFile('dpr.pdf', b'%PDF-1.4 test', content_type='application/pdf')
    r = client_for(admin).post(reverse('dpr_send'), {
        'pdfFile': upload, 'caption': 'Daily report', 'filename': 'DPR 5 March',
    }, format='multipart')
    assert r.status_code == 200
    assert r.data['message'] == 'DPR sent successfully'
    assert captured['filename'] == 'DPR_5_March.pdf'
    assert captured['media_url'].endswith('/media/dpr/DPR_5_March.pdf')
    assert r.data['whatsappResult'] == {'status': 'PENDING'}


def test_dpr_upstream_failure(admin, monkeypatch):
    class Rejected:
        status_code = 400
        ok = False
        text = ''

        def json(self):
            return {'message': 'invalid number'}

    monkeypatch.setattr(dpr.requests, 'post', lambda *a, **kw: Rejected())
    upload = SimpleUploadedFile('dpr.pdf', b'%PDF-1.4 test', content_type='application/pdf')
    r = client_for(admin).post(reverse('dpr_send'), {
        'pdfFile': upload, 'caption': 'Daily report', 'filename': 'dpr.pdf',
    }, format='multipart')
    assert r.status_code == 400
    assert 'invalid number' in r.data['error']['message']

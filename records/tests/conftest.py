import datetime as dt

import pytest
from django.core.cache import cache

from records.models import IPDRegistration, PatientDetail, UserHealthDetail


@pytest.fixture(autouse=True)
def _isolated_settings(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.LETTERHEAD_PATH = (tmp_path / 'missing-letterhead.png').as_posix()
    settings.CHANNEL_LAYERS = {'default': {'BACKEND': 'channels.layers.InMemoryChannelLayer'}}
    settings.CACHES = {'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache', 'LOCATION': 'tests'}}
    settings.WHATSAPP_API_URL = 'https://gateway.test/message/sendMedia/medford'
    settings.WHATSAPP_API_KEY = 'test-key'
    settings.DPR_RECIPIENT_NUMBER = '919000000000'
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def patient(db):
    return PatientDetail.objects.create(uhid='MF202410001', name='Asha Verma', number='9876543210',
                                        age=42, age_unit='years', gender='female')


@pytest.fixture
def registration(patient):
    return IPDRegistration.objects.create(patient=patient, admission_date=dt.date(2024, 3, 1))


def make_page(group, number, **extra):
    page = {
        'id': f'{group}-{number}',
        'pageNumber': number,
        'pageName': f'{group} {number}',
        'groupName': group,
        'templateImageUrl': '',
        'lines': [{'points': [1000, 1000, 500, 500], 'colorValue': 4278190080, 'strokeWidth': 2}],
        'texts': [],
        'images': [],
    }
    page.update(extra)
    return page


@pytest.fixture
def health(registration):
    return UserHealthDetail.objects.create(
        registration=registration,
        patient_uhid=registration.patient_id,
        progress_notes_data=[make_page('Progress Notes', 2), make_page('Progress Notes', 1)],
        indoor_patient_file_data=[make_page('Indoor Patient File', 1)],
        custom_groups_data=[
            {'groupName': 'Zeta Sheet', 'pages': [make_page('Zeta Sheet', 1)]},
            {'groupName': 'Feedback form', 'pages': [make_page('Feedback form', 1)]},
        ],
        discharge_summary_written=[{'patientName': 'Asha Verma', 'finalDiagnosis': 'Dengue fever'}],
    )

import datetime as dt

import pytest
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from records.models import BedManagement, DischargeSummary, IPDRegistration, OPDRegistration, PatientDetail
from records.services import billing


PAYMENTS = [
    {'amount': 5000, 'amountType': 'advance', 'paymentType': 'cash'},
    {'amount': '1000', 'amountType': 'Deposit', 'paymentType': 'online'},
    {'amount': 500, 'type': 'refund', 'amountType': 'refund', 'paymentType': 'cash'},
    {'amount': 'n/a', 'amountType': 'settlement'},
]


def test_deposits_and_refunds():
    assert billing.total_deposits(PAYMENTS) == 6000
    assert billing.total_refunds(PAYMENTS) == 500


@pytest.mark.parametrize('discharge_date, discharge_type, expected', [
    (None, None, billing.STATUS_ACTIVE),
    (None, 'Discharge Partially', billing.STATUS_PARTIAL),
    (dt.date(2024, 3, 1), None, billing.STATUS_DISCHARGED),
    (dt.date(2024, 3, 1), 'Death', billing.STATUS_DEATH),
    (dt.date(2024, 3, 1), 'Discharge Partially', billing.STATUS_DISCHARGED),
])
def test_registration_status(discharge_date, discharge_type, expected):
    assert billing.registration_status(discharge_date, discharge_type) == expected


def test_format_room_type():
    assert billing.format_room_type('GENERAL_WARD') == 'General_ward'
    assert billing.format_room_type(None) == 'N/A'


def test_clamp_range():
    start = dt.date(2024, 1, 1)
    assert billing.clamp_range(start, dt.date(2024, 1, 10)) == (start, dt.date(2024, 1, 10), False)
    assert billing.clamp_range(start, dt.date(2024, 3, 1)) == (start, dt.date(2024, 1, 31), True)
    with pytest.raises(ValidationError):
        billing.clamp_range(start, dt.date(2023, 12, 31))


def test_opd_helpers():
    assert billing.opd_total_amount({'cashAmount': '300', 'onlineAmount': 200}) == 500
    assert billing.opd_total_amount(None) == 0
    services = [{'type': 'consultation'}, {'type': 'consultation'}, {'type': 'xray'}]
    assert billing.opd_appointment_type(services) == 'consultation, xray'
    assert billing.opd_appointment_type([]) == 'N/A'


@pytest.fixture
def ward_data(db):
    icu = BedManagement.objects.create(room_type='icu', bed_number='7')
    general = BedManagement.objects.create(room_type='general_ward', bed_number='12')
    p1 = PatientDetail.objects.create(uhid='MF202410001', name='Asha Verma', number='9876543210')
    p2 = PatientDetail.objects.create(uhid='MF202410002', name='Rahul Singh', number='9123456780')
    p3 = PatientDetail.objects.create(uhid='MF202455555', name='Meena Gupta', number='9000000001')

    active = IPDRegistration.objects.create(patient=p1, bed=icu, tpa=True, payment_detail=PAYMENTS)
    partial = IPDRegistration.objects.create(patient=p2, bed=general, tpa=False)
    DischargeSummary.objects.create(registration=partial, discharge_type='Discharge Partially')
    discharged = IPDRegistration.objects.create(patient=p3, bed=general, discharge_date=dt.date(2024, 3, 5))
    DischargeSummary.objects.create(registration=discharged, discharge_type='Discharge')
    return {'active': active, 'partial': partial, 'discharged': discharged}


def test_active_tabs(ward_data):
    active = billing.active_records(tab=billing.TAB_ACTIVE)
    assert [r.ipdId for r in active] == [str(ward_data['active'].ipd_id)]
    record = active[0]
    assert record.depositAmount == 5500
    assert record.roomType == 'Icu'
    assert record.status == billing.STATUS_ACTIVE

    partial = billing.active_records(tab=billing.TAB_PARTIAL)
    assert [r.ipdId for r in partial] == [str(ward_data['partial'].ipd_id)]
    assert partial[0].dischargeType == 'Discharge Partially'


def test_active_filters(ward_data):
    assert billing.active_records(tpa='Yes')[0].name == 'Asha Verma'
    assert billing.active_records(tpa='No') == []
    assert billing.active_records(ward='icu')[0].name == 'Asha Verma'
    assert billing.active_records(search='asha')[0].uhid == 'MF202410001'
    assert billing.active_records(search='nobody') == []
    assert billing.ward_names() == ['General_ward', 'Icu']


def test_discharged_search(ward_data):
    by_phone = billing.discharged_records(phone='9000000001')
    assert [r.name for r in by_phone] == ['Meena Gupta']
    assert by_phone[0].status == billing.STATUS_DISCHARGED
    assert [r.name for r in billing.discharged_records(uhid='55555')] == ['Meena Gupta']
    assert [r.name for r in billing.discharged_records(name='meena')] == ['Meena Gupta']
    # 在院患者不会出现在出院查询中
    assert billing.discharged_records(name='asha') == []


def test_discharged_search_requires_criterion(ward_data):
    with pytest.raises(ValidationError):
        billing.discharged_records()
    with pytest.raises(ValidationError):
        billing.discharged_records(uhid='123')


@pytest.mark.django_db
def test_billing_summary(patient):
    when = timezone.make_aware(dt.datetime(2024, 3, 5, 11, 30))
    OPDRegistration.objects.create(
        patient=patient, date=when,
        service_info=[{'type': 'consultation', 'doctor': 'Dr. Mehta'}],
        payment_info={'cashAmount': 300, 'onlineAmount': 200},
    )
    OPDRegistration.objects.create(
        patient=patient, date=when + dt.timedelta(days=60),
        payment_info={'cashAmount': 999},
    )
    IPDRegistration.objects.create(patient=patient, admission_date=dt.date(2024, 3, 6), payment_detail=PAYMENTS)

    data = billing.billing_summary(dt.date(2024, 3, 1), dt.date(2024, 3, 10))
    assert data['clamped'] is False
    assert data['totalOpdCount'] == 1
    assert data['totalOpdAmount'] == 500
    assert data['opdCash'] == 300
    assert data['totalIpdCount'] == 1
    assert data['totalIpdAmount'] == 5500
    assert data['overallIpdRefunds'] == 500
    assert data['ipdCash'] == 5000
    assert data['ipdOnline'] == 1000
    assert data['totalRevenue'] == 6000
    assert data['doctorConsultations'] == [{'doctorName': 'Dr. Mehta', 'count': 1}]

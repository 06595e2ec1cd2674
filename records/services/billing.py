"""
IPD billing records, the admission lists built on them, and the
revenue summary shown on the dashboard.
"""
from __future__ import annotations

import datetime as dt
import re
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional

from django.db.models import Prefetch, QuerySet
from rest_framework.exceptions import ValidationError

from records.models import DischargeSummary, IPDRegistration, OPDRegistration

DEPOSIT_TYPES = {'advance', 'deposit', 'settlement'}

STATUS_ACTIVE = 'Active'
STATUS_DISCHARGED = 'Discharged'
STATUS_PARTIAL = 'Discharged Partially'
STATUS_DEATH = 'Death'

TAB_ACTIVE = 'non-discharge'
TAB_PARTIAL = 'discharge-partially'
TAB_STATUS = {TAB_ACTIVE: STATUS_ACTIVE, TAB_PARTIAL: STATUS_PARTIAL}

MAX_SUMMARY_DAYS = 30
UHID_SUFFIX_RE = re.compile(r'^\d{5}$')


@dataclass
class BillingRecord:
    ipdId: str
    uhid: str
    patientId: Any
    name: str
    mobileNumber: str
    depositAmount: float
    roomType: str
    bedNumber: Any
    status: str
    dischargeDate: Optional[str]
    dischargeType: Optional[str]
    age: Optional[int]
    gender: Optional[str]
    address: Optional[str]
    ageUnit: Optional[str]
    dob: Optional[str]
    paymentDetails: list
    underCareOfDoctor: Optional[str]
    tpa: Optional[bool]

    def to_dict(self) -> dict:
        return asdict(self)


def _amount(payment: dict) -> float:
    try:
        return float(payment.get('amount') or 0)
    except (TypeError, ValueError):
        return 0.0


def _lower(value: Any) -> str:
    return str(value).lower() if value else ''


def _payments(registration: IPDRegistration) -> list[dict]:
    return [p for p in (registration.payment_detail or []) if isinstance(p, dict)]


def total_deposits(payments: Iterable[dict]) -> float:
    return sum(_amount(p) for p in payments if _lower(p.get('amountType')) in DEPOSIT_TYPES)


def total_refunds(payments: Iterable[dict]) -> float:
    return sum(_amount(p) for p in payments if _lower(p.get('type')) == 'refund')


def format_room_type(room_type: Optional[str]) -> str:
    if not room_type:
        return 'N/A'
    return room_type[:1].upper() + room_type[1:].lower()


def registration_status(discharge_date, discharge_type: Optional[str]) -> str:
    if discharge_date:
        return STATUS_DEATH if discharge_type == 'Death' else STATUS_DISCHARGED
    if discharge_type == 'Discharge Partially':
        return STATUS_PARTIAL
    return STATUS_ACTIVE


def _discharge_type(registration: IPDRegistration) -> Optional[str]:
    summaries = list(registration.discharge_summaries.all())
    return summaries[0].discharge_type if summaries else None


def to_billing_record(registration: IPDRegistration) -> BillingRecord:
    payments = _payments(registration)
    discharge_type = _discharge_type(registration)
    patient = registration.patient
    bed = registration.bed
    return BillingRecord(
        ipdId=str(registration.ipd_id),
        uhid=registration.patient_id,
        patientId=patient.patient_id if patient else 'N/A',
        name=(patient.name if patient else '') or 'Unknown',
        mobileNumber=str(patient.number) if patient and patient.number else 'N/A',
        depositAmount=total_deposits(payments) - total_refunds(payments),
        roomType=format_room_type(bed.room_type if bed else None),
        bedNumber=(bed.bed_number if bed else None) or 'N/A',
        status=registration_status(registration.discharge_date, discharge_type),
        dischargeDate=registration.discharge_date.isoformat() if registration.discharge_date else None,
        dischargeType=discharge_type,
        age=patient.age if patient else None,
        gender=(patient.gender or None) if patient else None,
        address=(patient.address or None) if patient else None,
        ageUnit=(patient.age_unit or None) if patient else None,
        dob=patient.dob.isoformat() if patient and patient.dob else None,
        paymentDetails=registration.payment_detail or [],
        underCareOfDoctor=registration.under_care_of_doctor or None,
        tpa=registration.tpa,
    )


def registrations() -> QuerySet:
    return IPDRegistration.objects.select_related('patient', 'bed').prefetch_related(
        Prefetch('discharge_summaries', queryset=DischargeSummary.objects.order_by('created_at'))
    )


def filter_records(records: Iterable[BillingRecord], *, ward: str = 'All', tpa: str = 'All',
                   search: str = '') -> list[BillingRecord]:
    out = list(records)
    if ward and ward != 'All':
        out = [r for r in out if r.roomType.lower() == ward.lower()]
    if tpa and tpa != 'All':
        want = tpa == 'Yes'
        out = [r for r in out if r.tpa is want]
    term = (search or '').strip().lower()
    if term:
        out = [
            r for r in out
            if term in r.ipdId.lower()
            or term in r.name.lower()
            or term in (r.mobileNumber or '').lower()
            or term in r.uhid.lower()
        ]
    return out


def active_records(*, tab: str = TAB_ACTIVE, ward: str = 'All', tpa: str = 'All',
                   search: str = '') -> list[BillingRecord]:
    """Admissions still in hospital, split by tab into active and partially discharged."""
    status = TAB_STATUS.get(tab, STATUS_ACTIVE)
    qs = registrations().filter(discharge_date__isnull=True).order_by('-created_at')
    records = [r for r in map(to_billing_record, qs) if r.status == status]
    return filter_records(records, ward=ward, tpa=tpa, search=search)


def discharged_records(*, phone: str = '', uhid: str = '', name: str = '',
                       ward: str = 'All', tpa: str = 'All') -> list[BillingRecord]:
    """Search discharged admissions by phone, then UHID suffix, then name.

    Only the first criterion given is applied.
    """
    if not (phone or uhid or name):
        raise ValidationError({'detail': 'Please enter a Phone Number, UHID, or Name to search.'})
    if uhid and not UHID_SUFFIX_RE.match(uhid):
        raise ValidationError({'uhid': 'UHID search requires the last 5 digits.'})

    qs = registrations().filter(discharge_date__isnull=False)
    if phone:
        qs = qs.filter(patient__number=phone)
    elif uhid:
        qs = qs.filter(patient__uhid__endswith=uhid)
    else:
        qs = qs.filter(patient__name__icontains=name)
    records = [to_billing_record(r) for r in qs.order_by('-created_at')]
    return filter_records(records, ward=ward, tpa=tpa)


def ward_names() -> list[str]:
    rooms = registrations().filter(discharge_date__isnull=True).values_list('bed__room_type', flat=True)
    return sorted({format_room_type(r) for r in rooms if r})


# ---------------------------------------------------------------------------
# Revenue summary
# ---------------------------------------------------------------------------
def _money(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def opd_total_amount(payment_info: Optional[dict]) -> float:
    if not isinstance(payment_info, dict):
        return 0.0
    return _money(payment_info.get('cashAmount')) + _money(payment_info.get('onlineAmount'))


def opd_appointment_type(service_info: Optional[list]) -> str:
    if not service_info:
        return 'N/A'
    types: list[str] = []
    for s in service_info:
        t = s.get('type') if isinstance(s, dict) else None
        if t not in types:
            types.append(t)
    return ', '.join(str(t) for t in types)


def clamp_range(start: dt.date, end: dt.date) -> tuple[dt.date, dt.date, bool]:
    """Bound ``end`` to ``start`` + 30 days; the flag reports clamping."""
    if end < start:
        raise ValidationError({'endDate': 'End date must not be before start date.'})
    limit = start + dt.timedelta(days=MAX_SUMMARY_DAYS)
    if end > limit:
        return start, limit, True
    return start, end, False


def billing_summary(start: dt.date, end: dt.date) -> dict:
    """OPD and IPD revenue for admissions/appointments dated in ``[start, end]``."""
    start, end, clamped = clamp_range(start, end)

    opd = list(OPDRegistration.objects.filter(date__date__gte=start, date__date__lte=end))
    opd_cash = sum(_money((o.payment_info or {}).get('cashAmount')) for o in opd if isinstance(o.payment_info, dict))
    opd_online = sum(_money((o.payment_info or {}).get('onlineAmount')) for o in opd if isinstance(o.payment_info, dict))
    opd_amount = opd_cash + opd_online

    doctors: Counter = Counter()
    for o in opd:
        for s in o.service_info or []:
            if isinstance(s, dict) and s.get('type') == 'consultation' and s.get('doctor'):
                doctors[s['doctor']] += 1

    ipd = list(IPDRegistration.objects.filter(admission_date__gte=start, admission_date__lte=end))
    deposits = refunds = ipd_cash = ipd_online = 0.0
    for reg in ipd:
        payments = _payments(reg)
        deposits += total_deposits(payments)
        refunds += total_refunds(payments)
        for p in payments:
            if _lower(p.get('amountType')) not in DEPOSIT_TYPES:
                continue
            method = _lower(p.get('paymentType'))
            if method == 'cash':
                ipd_cash += _amount(p)
            elif method == 'online':
                ipd_online += _amount(p)
    net_deposit = deposits - refunds

    return {
        'startDate': start.isoformat(),
        'endDate': end.isoformat(),
        'clamped': clamped,
        'totalOpdCount': len(opd),
        'totalOpdAmount': opd_amount,
        'opdCash': opd_cash,
        'opdOnline': opd_online,
        'totalIpdCount': len(ipd),
        'totalIpdAmount': net_deposit,
        'overallIpdRefunds': refunds,
        'ipdCash': ipd_cash,
        'ipdOnline': ipd_online,
        'totalRevenue': opd_amount + net_deposit,
        'doctorConsultations': [
            {'doctorName': name, 'count': count} for name, count in doctors.most_common(10)
        ],
    }

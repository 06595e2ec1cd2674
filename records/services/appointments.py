"""
OPD appointment listing.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from django.db.models import Q, QuerySet
from django.utils import timezone
from rest_framework.exceptions import NotFound

from records.models import OPDRegistration
from records.services.billing import opd_appointment_type, opd_total_amount

TAB_TODAY = 'today'
TAB_WEEK = 'week'
TAB_ALL = 'all'
TABS = (TAB_TODAY, TAB_WEEK, TAB_ALL)


def tab_range(tab: str, today: Optional[dt.date] = None) -> Optional[tuple[dt.date, dt.date]]:
    """Inclusive date range for a tab; ``None`` means unbounded.

    Weeks run Monday to Sunday.
    """
    today = today or timezone.localdate()
    if tab == TAB_TODAY:
        return today, today
    if tab == TAB_WEEK:
        monday = today - dt.timedelta(days=today.weekday())
        return monday, monday + dt.timedelta(days=6)
    return None


def list_appointments(tab: str = TAB_TODAY, search: str = '', today: Optional[dt.date] = None) -> QuerySet:
    qs = OPDRegistration.objects.select_related('patient').order_by('-date')
    bounds = tab_range(tab, today)
    if bounds:
        qs = qs.filter(date__date__gte=bounds[0], date__date__lte=bounds[1])
    term = (search or '').strip()
    if term:
        cond = (
            Q(patient__name__icontains=term)
            | Q(patient__number__icontains=term)
            | Q(patient__uhid__icontains=term)
        )
        if term.isdigit():
            cond |= Q(opd_id__icontains=term)
        qs = qs.filter(cond)
    return qs


def serialize_appointment(appt: OPDRegistration) -> dict:
    patient = appt.patient
    return {
        'opdId': appt.opd_id,
        'uhid': appt.patient_id,
        'date': timezone.localtime(appt.date).isoformat() if timezone.is_aware(appt.date) else appt.date.isoformat(),
        'createdAt': appt.created_at.isoformat() if appt.created_at else None,
        'referBy': appt.refer_by or None,
        'additionalNotes': appt.additional_notes or None,
        'appointmentType': opd_appointment_type(appt.service_info),
        'totalAmount': opd_total_amount(appt.payment_info),
        'serviceInfo': appt.service_info or [],
        'paymentInfo': appt.payment_info or {},
        'patient': {
            'patientId': patient.patient_id,
            'name': patient.name,
            'number': patient.number or None,
            'age': patient.age,
            'ageUnit': patient.age_unit or None,
            'gender': patient.gender or None,
            'address': patient.address or None,
        } if patient else None,
    }


def delete_appointment(opd_id: int) -> None:
    deleted, _ = OPDRegistration.objects.filter(opd_id=opd_id).delete()
    if not deleted:
        raise NotFound('appointment not found')

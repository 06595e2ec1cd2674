"""
Collect and order the drawing pages of an admission.

Pages come from one of two stores:

* ``legacy``: :class:`~records.models.UserHealthDetail`, one JSON column
  per built-in group plus ``custom_groups_data``;
* ``granular``: one :class:`~records.models.IPDPage` row per page.

Whatever the source, documents are assembled in :data:`GROUP_ORDER` and
then by page number.
"""
from __future__ import annotations

from typing import Iterable, Optional

from records.models import IPDPage, IPDRegistration, UserHealthDetail
from records.services.drawing import DrawingPage

SOURCE_GRANULAR = 'granular'
SOURCE_LEGACY = 'legacy'
SOURCES = (SOURCE_GRANULAR, SOURCE_LEGACY)

UNKNOWN_GROUP_INDEX = 999

GROUP_COLUMNS: dict[str, str] = {
    'Indoor Patient Progress Digital': 'indoor_patient_progress_digital_data',
    'Daily Drug Chart': 'daily_drug_chart_data',
    'Dr Visit Form': 'dr_visit_form_data',
    'Patient Charges Form': 'patient_charges_form_data',
    'Glucose Monitoring Sheet': 'glucose_monitoring_sheet_data',
    'Pt Admission Assessment (Nursing)': 'pt_admission_assessment_nursing_data',
    'Clinical Notes': 'clinical_notes_data',
    'Investigation Sheet': 'investigation_sheet_data',
    'Progress Notes': 'progress_notes_data',
    'Consent': 'consent_data',
    'OT': 'ot_data',
    'Nursing Notes': 'nursing_notes_data',
    'TPR / Intake / Output': 'tpr_intake_output_data',
    "TPR / Intake / Output'": 'tpr_intake_output_data',
    'Discharge / Dama': 'discharge_dama_data',
    'Casualty Note': 'casualty_note_data',
    'Indoor Patient File': 'indoor_patient_file_data',
    'Icu chart': 'icu_chart_data',
    'Transfer Summary': 'transfer_summary_data',
    'Prescription Sheet': 'prescription_sheet_data',
    'Billing Consent': 'billing_consent_data',
}

# Document order of the printed admission file. Several names are
# spelling variants written by older versions of the drawing client.
GROUP_ORDER: list[str] = [
    'Indoor Patient File',
    'Pt Admission Assessment (Nursing)',
    'Casualty Note',
    'Clinical Notes',
    'Dr Visit Form',
    'Indoor Patient Progress Digital',
    'Progress Notes',
    'Nursing Notes',
    'Daily Drug Chart',
    'Prescription Sheet',
    'Icu chart',
    'TPR / Intake / Output',
    "TPR / Intake / Output'",
    'Glucose Monitoring Sheet',
    'Investigation Sheet',
    'Consent',
    'GEN CONSENT',
    'Consent Form',
    'TPA Consent Form',
    'Traveling Consern',
    'Intravenous Thrombolytic therapy consent',
    'CONSENT FORM - Transfusin of Blood or Blood Components',
    'OT',
    'OT Form',
    'Billing Consent',
    'Patient Charges Form',
    'General word Charges',
    'Delux Charges',
    'Suite Room Charges',
    'Twin Sharing',
    'Nicu Charges',
    'Package Form',
    'FTND Packages',
    'Transfer Summary',
    'Discharge / Dama',
    'Discharge',
    'Dama',
    'Newborn foot print record',
    'BLOOD TRANSFUSION RECORD',
    'Feedback form',
    'sheet',
]

_GROUP_INDEX = {name: i for i, name in enumerate(GROUP_ORDER)}


def group_index(group_name: str) -> int:
    return _GROUP_INDEX.get(group_name, UNKNOWN_GROUP_INDEX)


def legacy_key(group_name: str, page_number: int, idx: int) -> str:
    return f'legacy-{group_name}-{page_number}-{idx}'


def granular_key(row_id) -> str:
    return f'granular-{row_id}'


def _builtin_groups() -> Iterable[tuple[str, str]]:
    """Built-in ``(group, column)`` pairs in document order.

    A column is visited once even when several spellings map onto it.
    """
    seen: set[str] = set()
    for group_name in GROUP_ORDER:
        column = GROUP_COLUMNS.get(group_name)
        if not column or column in seen:
            continue
        seen.add(column)
        yield group_name, column


def legacy_groups(health: Optional[UserHealthDetail]) -> list[tuple[str, list[dict]]]:
    """Raw ``(group_name, pages)`` pairs from a legacy health row."""
    if health is None:
        return []
    out: list[tuple[str, list[dict]]] = []
    for group_name, column in _builtin_groups():
        pages = getattr(health, column, None)
        if isinstance(pages, list):
            out.append((group_name, [p for p in pages if isinstance(p, dict)]))
    custom = health.custom_groups_data
    if isinstance(custom, list):
        for group in custom:
            if not isinstance(group, dict):
                continue
            pages = group.get('pages') or []
            if isinstance(pages, list):
                out.append((group.get('groupName') or '', [p for p in pages if isinstance(p, dict)]))
    return out


def legacy_pages(health: Optional[UserHealthDetail], groups: Optional[Iterable[str]] = None) -> list[DrawingPage]:
    """Pages of a legacy health row, stamped with their group name.

    When ``groups`` is given only pages of those groups are returned.
    """
    wanted = set(groups) if groups is not None else None
    pages: list[DrawingPage] = []
    for group_name, raw_pages in legacy_groups(health):
        if wanted is not None and group_name not in wanted:
            continue
        for idx, raw in enumerate(raw_pages):
            page = DrawingPage.from_json(raw, group_name=group_name)
            page.key = legacy_key(group_name, page.page_number, idx)
            pages.append(page)
    return pages


def page_from_row(row: IPDPage) -> DrawingPage:
    canvas = row.canvas_data
    data = canvas if isinstance(canvas, dict) else {}
    if isinstance(canvas, list):
        # 早期客户端直接把笔画数组存入 canvas_data
        lines = canvas
    else:
        lines = data.get('lines') or []
    return DrawingPage(
        id=str(row.pk),
        template_image_url=row.template_image_url or data.get('template_image_url') or '',
        page_number=row.page_number or 0,
        page_name=row.page_name or 'Unnamed Page',
        group_name=row.group_name or 'Uncategorized',
        lines=lines if isinstance(lines, list) else [],
        texts=data.get('texts') if isinstance(data.get('texts'), list) else [],
        images=data.get('images') if isinstance(data.get('images'), list) else [],
        location_tag=row.location_tag or data.get('location_tag') or '',
        key=granular_key(row.pk),
    )


def granular_pages(rows: Iterable[IPDPage]) -> list[DrawingPage]:
    return [page_from_row(row) for row in rows]


def sort_pages(pages: list[DrawingPage]) -> list[DrawingPage]:
    """Stable sort by group position and then page number."""
    return sorted(pages, key=lambda p: (group_index(p.group_name), p.page_number or 0))


def group_pages(pages: Iterable[DrawingPage]) -> list[tuple[str, list[DrawingPage]]]:
    """Bucket pages by group; groups in document order, pages by number."""
    buckets: dict[str, list[DrawingPage]] = {}
    for page in pages:
        buckets.setdefault(page.group_name, []).append(page)
    for bucket in buckets.values():
        bucket.sort(key=lambda p: p.page_number or 0)
    return sorted(buckets.items(), key=lambda item: group_index(item[0]))


def health_detail_for(registration: IPDRegistration) -> Optional[UserHealthDetail]:
    return UserHealthDetail.objects.filter(
        registration=registration, patient_uhid=registration.patient_id,
    ).first()


def page_rows_for(registration: IPDRegistration):
    return IPDPage.objects.filter(registration=registration, uhid=registration.patient_id)


def available_groups(registration: IPDRegistration, source: str = SOURCE_GRANULAR) -> list[str]:
    """Distinct non-empty group names holding at least one page."""
    found: set[str] = set()
    if source == SOURCE_LEGACY:
        for group_name, raw_pages in legacy_groups(health_detail_for(registration)):
            if group_name and raw_pages:
                found.add(group_name)
    else:
        for name in page_rows_for(registration).values_list('group_name', flat=True).distinct():
            if name:
                found.add(name)
    return sorted(found, key=lambda name: (group_index(name), name))


def collect_pages(registration: IPDRegistration, source: str = SOURCE_GRANULAR,
                  groups: Optional[Iterable[str]] = None) -> list[DrawingPage]:
    """All pages of an admission from ``source``, in document order."""
    if source == SOURCE_LEGACY:
        pages = legacy_pages(health_detail_for(registration), groups)
    else:
        rows = page_rows_for(registration)
        if groups is not None:
            rows = rows.filter(group_name__in=list(groups))
        pages = granular_pages(rows.order_by('id'))
    return sort_pages(pages)


def preview_groups(registration: IPDRegistration, source: Optional[str] = None) -> list[tuple[str, list[DrawingPage]]]:
    """Grouped pages from both stores, each page carrying its selection key.

    ``source`` restricts the preview to one store.
    """
    pages: list[DrawingPage] = []
    if source in (None, SOURCE_LEGACY):
        pages.extend(legacy_pages(health_detail_for(registration)))
    if source in (None, SOURCE_GRANULAR):
        pages.extend(granular_pages(page_rows_for(registration).order_by('id')))
    return group_pages(pages)


def select_pages(registration: IPDRegistration, keys: Iterable[str],
                 source: Optional[str] = None) -> list[DrawingPage]:
    """Pages whose key is in ``keys``, in preview order."""
    wanted = set(keys)
    return [
        page
        for _, pages in preview_groups(registration, source)
        for page in pages
        if page.key in wanted
    ]

import pytest

from records.models import IPDPage, UserHealthDetail
from records.services import pages as page_service

from .conftest import make_page

pytestmark = pytest.mark.django_db


def test_legacy_pages_follow_document_order(registration, health):
    pages = page_service.collect_pages(registration, page_service.SOURCE_LEGACY)
    assert [(p.group_name, p.page_number) for p in pages] == [
        ('Indoor Patient File', 1),
        ('Progress Notes', 1),
        ('Progress Notes', 2),
        ('Feedback form', 1),
        ('Zeta Sheet', 1),
    ]


def test_legacy_pages_filtered_by_group(registration, health):
    pages = page_service.collect_pages(registration, page_service.SOURCE_LEGACY, ['Progress Notes'])
    assert {p.group_name for p in pages} == {'Progress Notes'}
    assert len(pages) == 2


def test_spelling_variants_do_not_duplicate_pages(registration):
    health = UserHealthDetail.objects.create(
        registration=registration, patient_uhid=registration.patient_id,
        tpr_intake_output_data=[make_page('TPR / Intake / Output', 1)],
    )
    groups = page_service.legacy_groups(health)
    tpr = [name for name, pages in groups if pages]
    assert tpr == ['TPR / Intake / Output']


def test_health_row_of_other_patient_is_ignored(registration):
    UserHealthDetail.objects.create(
        registration=registration, patient_uhid='SOMEONE-ELSE',
        consent_data=[make_page('Consent', 1)],
    )
    assert page_service.collect_pages(registration, page_service.SOURCE_LEGACY) == []


def test_granular_row_defaults_and_template_fallback(registration):
    row = IPDPage.objects.create(
        registration=registration, uhid=registration.patient_id,
        canvas_data={'template_image_url': 'uploads/t.png', 'lines': [{'points': [0, 0, 10, 10]}]},
    )
    page = page_service.page_from_row(row)
    assert page.page_name == 'Unnamed Page'
    assert page.group_name == 'Uncategorized'
    assert page.page_number == 0
    assert page.template_image_url == 'uploads/t.png'
    assert page.key == f'granular-{row.pk}'
    assert len(page.lines) == 1


def test_granular_row_template_wins_over_canvas(registration):
    row = IPDPage.objects.create(
        registration=registration, uhid=registration.patient_id, template_image_url='row.png',
        canvas_data={'template_image_url': 'canvas.png'},
    )
    assert page_service.page_from_row(row).template_image_url == 'row.png'


def test_granular_bare_stroke_list(registration):
    row = IPDPage.objects.create(
        registration=registration, uhid=registration.patient_id, group_name='Consent',
        canvas_data=[{'points': [0, 0, 10, 10]}, {'points': [5, 5, 1, 1]}],
    )
    page = page_service.page_from_row(row)
    assert len(page.lines) == 2
    assert page.texts == []


def _granular(registration, group, number):
    return IPDPage.objects.create(
        registration=registration, uhid=registration.patient_id,
        group_name=group, page_number=number, page_name=f'{group} {number}',
    )


def test_available_groups_per_source(registration, health):
    _granular(registration, 'Daily Drug Chart', 1)
    _granular(registration, 'Consent', 1)
    _granular(registration, '', 1)
    assert page_service.available_groups(registration, page_service.SOURCE_GRANULAR) == ['Daily Drug Chart', 'Consent']
    legacy = page_service.available_groups(registration, page_service.SOURCE_LEGACY)
    assert legacy[:2] == ['Indoor Patient File', 'Progress Notes']
    assert 'Zeta Sheet' in legacy


def test_preview_merges_both_stores_and_selects_by_key(registration, health):
    row = _granular(registration, 'Progress Notes', 3)
    grouped = dict(page_service.preview_groups(registration))
    assert [p.page_number for p in grouped['Progress Notes']] == [1, 2, 3]

    keys = [
        page_service.legacy_key('Progress Notes', 2, 0),
        page_service.granular_key(row.pk),
        'granular-999999',
    ]
    selected = page_service.select_pages(registration, keys)
    assert [p.key for p in selected] == [keys[0], keys[1]]


def test_preview_restricted_to_one_source(registration, health):
    _granular(registration, 'Consent', 1)
    grouped = dict(page_service.preview_groups(registration, page_service.SOURCE_GRANULAR))
    assert list(grouped) == ['Consent']

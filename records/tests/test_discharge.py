import io

from PIL import Image

from records.services import discharge
from records.services.pdfcanvas import PageCanvas

SUMMARY = {
    'patientName': 'Asha Verma',
    'ageSex': '42 / F',
    'uhidIpdNumber': 'MF202410001 / 17',
    'consultantInCharge': 'Dr. Mehta',
    'admissionDateAndTime': '2024-03-01 10:00',
    'dischargeDateAndTime': '2024-03-05 12:00',
    'typeOfDischarge': 'Discharge',
    'detailedAddress': '12 Park Street',
    'finalDiagnosis': 'Dengue fever',
    'dischargeMedications': 'Tab PCM 650 mg SOS\nORS',
    'reportImmediatelyIf': 'Bleeding or high fever',
    'summaryPreparedBy': 'Dr. Iyer',
}


def test_summary_from():
    assert discharge.summary_from(None) is None
    assert discharge.summary_from([]) is None
    assert discharge.summary_from({}) is None
    assert discharge.summary_from([{'a': 1}, {'b': 2}]) == {'a': 1}
    assert discharge.summary_from({'a': 1}) == {'a': 1}


def test_render_standalone():
    assert discharge.render_discharge_pdf(SUMMARY).startswith(b'%PDF')


def test_long_sections_break_pages():
    pc = PageCanvas()
    data = dict(SUMMARY, hospitalCourse='\n'.join(f'Day {i}: afebrile, vitals stable.' for i in range(120)))
    discharge.append_discharge_summary(pc, data)
    # first page is the caller's, the summary starts on the second
    assert pc.page_count > 2
    assert pc.finish().startswith(b'%PDF')


def test_letterhead_missing_returns_none(tmp_path):
    assert discharge.load_letterhead((tmp_path / 'nope.png').as_posix()) is None


def test_letterhead_is_drawn_when_present(tmp_path):
    path = tmp_path / 'letterhead.png'
    Image.new('RGB', (210, 297), (255, 255, 255)).save(path)
    letterhead = discharge.load_letterhead(path.as_posix())
    assert letterhead is not None
    buf = io.BytesIO(discharge.render_discharge_pdf(SUMMARY, letterhead))
    assert buf.getvalue().startswith(b'%PDF')

"""
Discharge summary rendering.

Lays the written discharge summary out on the hospital letterhead: a
patient card, three titled blocks of clinical sections, a medications
box, an emergency warning box and the signature footer.  The layout
works top-down with a running ``y`` in millimetres and starts a new
letterhead page whenever the next block would run into the bottom
margin.
"""
from __future__ import annotations

import os
from typing import Any, Optional

from django.conf import settings
from PIL import Image

from records.services.pdfcanvas import PageCanvas
from records.structured_logging import get_logger

logger = get_logger(__name__)

PRIMARY = (23, 117, 137)
ACCENT = (250, 250, 250)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GREY = (200, 200, 200)
MUTED = (100, 100, 100)
WARN_FILL = (254, 242, 242)
WARN_INK = (153, 27, 27)

MARGIN_X = 10
TOP_Y = 62
CONTINUATION_Y = 45
BOTTOM_MARGIN = 20
LINE_STEP = 4.5


def summary_from(raw: Any) -> Optional[dict]:
    """Normalise the stored summary: a list holds the summary as its first entry."""
    if isinstance(raw, list):
        raw = raw[0] if raw else None
    if isinstance(raw, dict) and raw:
        return raw
    return None


def _s(data: dict, key: str) -> str:
    v = data.get(key)
    return '' if v is None else str(v)


def _joined(data: dict, *keys: str) -> str:
    return '\n'.join(_s(data, k) for k in keys).strip()


def load_letterhead(path: Optional[str] = None) -> Optional[Image.Image]:
    path = path or settings.LETTERHEAD_PATH
    if not path or not os.path.exists(path):
        logger.warning('letterhead_missing', path=path)
        return None
    try:
        img = Image.open(path)
        img.load()
        return img
    except OSError:
        logger.warning('letterhead_unreadable', path=path, exc_info=True)
        return None


class DischargeSummaryRenderer:
    """Draws one discharge summary onto a :class:`PageCanvas`."""

    def __init__(self, pc: PageCanvas, data: dict, letterhead: Optional[Image.Image] = None):
        self.pc = pc
        self.data = data
        self.letterhead = letterhead
        self.y = TOP_Y
        self.content_width = pc.width - MARGIN_X * 2

    # -- layout helpers ----------------------------------------------------
    def add_background(self) -> None:
        if self.letterhead is not None:
            self.pc.image(self.letterhead, 0, 0, self.pc.width, self.pc.height)

    def check_page_break(self, needed: float) -> None:
        if self.y + needed > self.pc.height - BOTTOM_MARGIN:
            self.pc.new_page()
            self.add_background()
            self.y = CONTINUATION_Y

    def section_header(self, title: str) -> None:
        pc = self.pc
        self.check_page_break(10)
        pc.set_fill_color(PRIMARY)
        pc.round_rect(MARGIN_X, self.y, self.content_width, 6, 1)
        pc.set_text_color(WHITE)
        pc.set_font(9, bold=True)
        pc.text(title.upper(), MARGIN_X + 2, self.y + 4.5)
        self.y += 14

    def section(self, label: str, value: str) -> None:
        """A labelled block of text with a grey rule down its left edge."""
        if not value or not value.strip():
            return
        pc = self.pc
        lines = value.split('\n')
        self.check_page_break(len(lines) * 5 + 6)

        pc.set_text_color(PRIMARY)
        pc.set_font(9, bold=True)
        pc.text(label, MARGIN_X, self.y)
        self.y += 4

        pc.set_text_color(BLACK)
        pc.set_font(9)
        for line in lines:
            if not line.strip():
                self.y += 2
                continue
            wrapped = pc.split(line, self.content_width - 4)
            block = len(wrapped) * LINE_STEP
            self.check_page_break(block)
            pc.set_draw_color(GREY)
            pc.set_line_width(0.5)
            pc.line(MARGIN_X, self.y - 3, MARGIN_X, self.y + block - 3)
            pc.text_lines(wrapped, MARGIN_X + 2, self.y)
            self.y += block + 1
        self.y += 2

    def info_item(self, label: str, value: str, x: float, y: float, width: float) -> None:
        pc = self.pc
        pc.set_text_color(PRIMARY)
        pc.set_font(7, bold=True)
        pc.text(label.upper(), x, y)
        pc.set_text_color(BLACK)
        pc.set_font(9, bold=True)
        pc.text_lines(pc.split(value or '', width), x, y + 4)

    # -- blocks ------------------------------------------------------------
    def title(self) -> None:
        pc = self.pc
        centre = pc.width / 2
        pc.set_text_color(PRIMARY)
        pc.set_font(16, bold=True)
        pc.text('DISCHARGE SUMMARY', centre, 55, align='center')
        pc.set_line_width(0.5)
        pc.set_draw_color(PRIMARY)
        pc.line(centre - 30, 56, centre + 30, 56)

    def patient_card(self) -> None:
        pc, d = self.pc, self.data
        half = self.content_width / 2
        address = f"{_s(d, 'detailedAddress')} {_s(d, 'detailedAddress2')}"
        address_width = half - 5
        pc.set_font(9, bold=True)
        address_lines = pc.split(address, address_width)
        extra = (len(address_lines) - 1) * 5 if len(address_lines) > 1 else 0
        box_height = 38 + extra

        pc.set_fill_color(ACCENT)
        pc.set_draw_color(PRIMARY)
        pc.set_line_width(0.1)
        pc.round_rect(MARGIN_X, self.y, self.content_width, box_height, 1, fill=True, stroke=True)

        col1 = MARGIN_X + 4
        col2 = MARGIN_X + half + 4
        card_y = self.y + 5

        self.info_item('PATIENT NAME', _s(d, 'patientName'), col1, card_y, half - 5)
        self.info_item('AGE / SEX', _s(d, 'ageSex'), col2, card_y, half - 5)

        card_y += 8
        pc.set_draw_color(GREY)
        pc.line(MARGIN_X + 2, card_y - 2, MARGIN_X + self.content_width - 2, card_y - 2)
        self.info_item('UHID / IPD NO.', _s(d, 'uhidIpdNumber'), col1, card_y, half - 5)
        self.info_item('CONSULTANT', _s(d, 'consultantInCharge'), col2, card_y, half - 5)

        card_y += 8
        pc.line(MARGIN_X + 2, card_y - 2, MARGIN_X + self.content_width - 2, card_y - 2)
        self.info_item('ADMISSION DATE', _s(d, 'admissionDateAndTime'), col1, card_y, half - 5)
        self.info_item('DISCHARGE DATE', _s(d, 'dischargeDateAndTime'), col2, card_y, half - 5)

        card_y += 8
        self.info_item('DISCHARGE TYPE', _s(d, 'typeOfDischarge'), col1, card_y, half - 5)
        self.info_item('ADDRESS', address, col2, card_y, address_width)

        self.y += box_height + 8

    def medications(self) -> None:
        meds = _s(self.data, 'dischargeMedications')
        if not meds:
            return
        pc = self.pc
        self.check_page_break(30)
        pc.set_text_color(PRIMARY)
        pc.set_font(9, bold=True)
        pc.text('Discharge Medications', MARGIN_X, self.y)
        self.y += 2

        wrapped = pc.split(meds, self.content_width - 4)
        box_height = len(wrapped) * LINE_STEP + 4
        self.check_page_break(box_height)
        pc.set_fill_color(ACCENT)
        pc.set_draw_color(GREY)
        pc.round_rect(MARGIN_X, self.y, self.content_width, box_height, 1, fill=True, stroke=True)
        pc.set_text_color(BLACK)
        pc.set_font(9)
        pc.text_lines(wrapped, MARGIN_X + 2, self.y + 4)
        self.y += box_height + 4

    def warning(self) -> None:
        warn = _s(self.data, 'reportImmediatelyIf')
        if not warn:
            return
        pc = self.pc
        self.check_page_break(25)
        self.y += 2
        pc.set_fill_color(WARN_FILL)
        pc.set_draw_color(WARN_INK)
        pc.set_line_width(0.3)
        pc.set_font(9)
        wrapped = pc.split(warn, self.content_width - 15)
        height = len(wrapped) * 4 + 10
        pc.round_rect(MARGIN_X, self.y, self.content_width, height, 1, fill=True, stroke=True)

        pc.set_text_color(WARN_INK)
        pc.set_font(14, bold=True)
        pc.text('!', MARGIN_X + 3, self.y + 6)
        pc.set_font(9, bold=True)
        pc.text('EMERGENCY: REPORT IMMEDIATELY IF:', MARGIN_X + 10, self.y + 5)
        pc.set_font(9)
        pc.text_lines(wrapped, MARGIN_X + 10, self.y + 9)
        self.y += height + 5

    def footer(self) -> None:
        pc, d = self.pc, self.data
        self.check_page_break(40)
        pc.set_draw_color(GREY)
        pc.set_line_width(0.1)
        pc.line(MARGIN_X, self.y, pc.width - MARGIN_X, self.y)
        self.y += 5

        footer_y = self.y
        pc.set_font(9)
        contact = _s(d, 'emergencyContact')
        if contact:
            pc.set_font(9, bold=True)
            pc.set_text_color(BLACK)
            pc.text(f'Emergency Contact: {contact}', MARGIN_X, footer_y + 5)
        pc.set_font(9)
        pc.set_text_color(MUTED)
        pc.text(f"Date: {_s(d, 'date')}   Time: {_s(d, 'time')}", MARGIN_X, footer_y + 10)

        sig_y = footer_y
        right = pc.width - MARGIN_X
        for label, key in (
            ('Prepared By', 'summaryPreparedBy'),
            ('Verified By', 'summaryVerifiedBy'),
            ('Explained By', 'summaryExplainedBy'),
            ('Explained To', 'summaryExplainedTo'),
        ):
            value = _s(d, key)
            if not value:
                continue
            pc.set_font(9)
            pc.set_text_color(MUTED)
            pc.text(f'{label}: ', right - 40, sig_y + 5, align='right')
            pc.set_font(9, bold=True)
            pc.set_text_color(BLACK)
            pc.text(value, right, sig_y + 5, align='right')
            sig_y += 4

        sig_y += 10
        pc.set_font(8)
        pc.set_text_color(MUTED)
        pc.text('Authorized Signatory', right, sig_y, align='right')

    def render(self) -> None:
        d = self.data
        self.add_background()
        self.title()
        self.patient_card()

        self.section_header('Clinical Diagnosis')
        self.section('Provisional Diagnosis', _s(d, 'provisionalDiagnosis'))
        self.section('Final Diagnosis', _joined(d, 'finalDiagnosis', 'finalDiagnosis2'))
        self.section('Procedure / Surgeries', _joined(d, 'procedure', 'procedure2', 'surgeryProcedureDetails'))

        self.section_header('Clinical Summary')
        self.section('History of Present Illness', _s(d, 'historyOfPresentIllness'))
        self.section('General Physical Examination', _s(d, 'generalPhysicalExamination'))
        self.section('Systemic Examination', _s(d, 'systemicExamination'))
        self.section('Investigations', _s(d, 'investigations'))
        self.section('Treatment Given', _s(d, 'treatmentGiven'))
        self.section('Hospital Course', _s(d, 'hospitalCourse'))

        self.section_header('Discharge Advice')
        self.section('Condition at Discharge', _s(d, 'conditionAtDischarge'))
        self.medications()
        self.section('Follow Up', _s(d, 'followUp'))
        self.section('Instructions', _s(d, 'dischargeInstruction'))
        self.warning()
        self.footer()


def append_discharge_summary(pc: PageCanvas, data: dict, letterhead: Optional[Image.Image] = None) -> None:
    """Start a new page on ``pc`` and draw the summary from there."""
    pc.new_page()
    DischargeSummaryRenderer(pc, data, letterhead).render()


def render_discharge_pdf(data: dict, letterhead: Optional[Image.Image] = None) -> bytes:
    """Render a standalone discharge summary document."""
    pc = PageCanvas(title='Discharge Summary')
    DischargeSummaryRenderer(pc, data, letterhead).render()
    return pc.finish()

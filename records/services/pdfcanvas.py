"""
A thin wrapper over a reportlab canvas working in page millimetres.

Layout code in this package measures from the top-left corner of an A4
sheet in millimetres; reportlab measures in points from the bottom-left.
:class:`PageCanvas` does that conversion in one place.
"""
from __future__ import annotations

import io
from typing import Iterable, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from records.services.drawing import PAGE_HEIGHT_MM, PAGE_WIDTH_MM

FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'
# spacing between lines of a text block, as a multiple of the font size
LINE_HEIGHT_FACTOR = 1.15

RGB = Sequence[int]


class PageCanvas:
    """Top-left, millimetre based drawing surface for one PDF document."""

    width = PAGE_WIDTH_MM
    height = PAGE_HEIGHT_MM

    def __init__(self, title: str = ''):
        self._buf = io.BytesIO()
        self._c = canvas.Canvas(self._buf, pagesize=A4, pageCompression=1)
        if title:
            self._c.setTitle(title)
        self._font = FONT_REGULAR
        self._font_size = 10.0
        self._c.setFont(self._font, self._font_size)
        self._page_open = True
        self.page_count = 1

    # -- pages -------------------------------------------------------------
    def new_page(self) -> None:
        self._c.showPage()
        self._c.setFont(self._font, self._font_size)
        self._page_open = True
        self.page_count += 1

    def finish(self) -> bytes:
        """Close the last page and return the PDF bytes."""
        if self._page_open:
            self._c.showPage()
            self._page_open = False
        self._c.save()
        return self._buf.getvalue()

    # -- state -------------------------------------------------------------
    def _y(self, y_mm: float) -> float:
        return (self.height - y_mm) * mm

    def set_font(self, size: float, bold: bool = False) -> None:
        self._font = FONT_BOLD if bold else FONT_REGULAR
        self._font_size = size
        self._c.setFont(self._font, size)

    def set_text_color(self, rgb: RGB) -> None:
        r, g, b = rgb[:3]
        self._c.setFillColorRGB(r / 255, g / 255, b / 255)

    def set_fill_color(self, rgb: RGB) -> None:
        self.set_text_color(rgb)

    def set_draw_color(self, rgb: RGB) -> None:
        r, g, b = rgb[:3]
        self._c.setStrokeColorRGB(r / 255, g / 255, b / 255)

    def set_line_width(self, width_mm: float) -> None:
        self._c.setLineWidth(width_mm * mm)

    @property
    def line_height(self) -> float:
        """Distance between baselines of a text block, in mm."""
        return self._font_size * LINE_HEIGHT_FACTOR / mm

    # -- primitives --------------------------------------------------------
    def text(self, s: str, x: float, y: float, align: str = 'left', top: bool = False) -> None:
        """Draw one line of text.

        ``y`` is the baseline unless ``top`` is set, in which case it is
        the top of the glyph box.
        """
        base = self._y(y)
        if top:
            base -= pdfmetrics.getAscent(self._font, self._font_size)
        if align == 'right':
            self._c.drawRightString(x * mm, base, s)
        elif align == 'center':
            self._c.drawCentredString(x * mm, base, s)
        else:
            self._c.drawString(x * mm, base, s)

    def text_lines(self, lines: Iterable[str], x: float, y: float, top: bool = False) -> None:
        step = self.line_height
        for i, s in enumerate(lines):
            self.text(s, x, y + i * step, top=top)

    def split(self, s: str, width: float) -> list[str]:
        """Wrap ``s`` to ``width`` mm with the current font."""
        out: list[str] = []
        for para in (s or '').split('\n'):
            out.extend(simpleSplit(para, self._font, self._font_size, width * mm) or [''])
        return out

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def round_rect(self, x: float, y: float, w: float, h: float, r: float,
                   fill: bool = True, stroke: bool = False) -> None:
        self._c.roundRect(x * mm, self._y(y + h), w * mm, h * mm, r * mm,
                          stroke=int(stroke), fill=int(fill))

    def image(self, img, x: float, y: float, w: float, h: float) -> None:
        """Place a PIL image or image file with its top-left corner at (x, y)."""
        if w <= 0 or h <= 0:
            return
        reader = img if isinstance(img, ImageReader) else ImageReader(img)
        self._c.drawImage(reader, x * mm, self._y(y + h), w * mm, h * mm)


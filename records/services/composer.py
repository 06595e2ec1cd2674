"""
Render drawing pages into PDF documents.

Each drawing page becomes one A4 page, painted in four passes: the form
template, user placed images, text annotations, then freehand ink.
Remote images are loaded through :mod:`records.services.assets`; an
image that cannot be loaded is logged and skipped so the rest of the
page still prints.
"""
from __future__ import annotations

from typing import Iterable, Optional

from records.services import assets
from records.services.assets import Compression
from records.services.drawing import (
    SCALE_X, SCALE_Y, DrawingPage, _as_float, decode_stroke, fit_centered, font_size_pt,
    line_segments, stroke_width_mm, unpack_argb,
)
from records.services.pdfcanvas import PageCanvas
from records.structured_logging import get_logger

logger = get_logger(__name__)

NO_PAGES_MESSAGE = 'No daily monitoring records found from the selected database.'


def _position(item: dict) -> tuple[float, float]:
    pos = item.get('position') or {}
    if not isinstance(pos, dict):
        pos = {}
    return _as_float(pos.get('dx')) * SCALE_X, _as_float(pos.get('dy')) * SCALE_Y


def draw_template(pc: PageCanvas, page: DrawingPage, compression: Optional[Compression]) -> None:
    if not page.template_image_url:
        return
    try:
        img = assets.load_image(page.template_image_url, compression)
        x, y, w, h = fit_centered(*img.size)
        pc.image(img, x, y, w, h)
    except Exception:
        logger.warning('template_load_failed', page=page.key or page.id, url=page.template_image_url, exc_info=True)


def draw_images(pc: PageCanvas, page: DrawingPage, compression: Optional[Compression]) -> None:
    for item in page.images:
        try:
            img = assets.load_image(item['imageUrl'], compression)
            x, y = _position(item)
            pc.image(img, x, y, _as_float(item.get('width')) * SCALE_X, _as_float(item.get('height')) * SCALE_Y)
        except Exception:
            logger.warning('image_load_failed', page=page.key or page.id, exc_info=True)


def draw_texts(pc: PageCanvas, page: DrawingPage) -> None:
    for item in page.texts:
        if not isinstance(item, dict) or not item.get('text'):
            continue
        try:
            x, y = _position(item)
            r, g, b, _ = unpack_argb(item.get('colorValue'))
            pc.set_text_color((r, g, b))
            pc.set_font(font_size_pt(item.get('fontSize')))
            # 多行备注：每行下移一个行高，顶部对齐只作用于首行基线
            pc.text_lines(str(item['text']).splitlines(), x, y, top=True)
        except Exception:
            logger.warning('text_draw_failed', page=page.key or page.id, exc_info=True)


def draw_lines(pc: PageCanvas, page: DrawingPage) -> None:
    for stroke in page.lines:
        if not isinstance(stroke, dict):
            continue
        r, g, b, _ = unpack_argb(stroke.get('colorValue'))
        pc.set_draw_color((r, g, b))
        pc.set_line_width(stroke_width_mm(stroke.get('strokeWidth')))
        for x1, y1, x2, y2 in line_segments(decode_stroke(stroke.get('points'))):
            pc.line(x1, y1, x2, y2)


def compose_page(pc: PageCanvas, page: DrawingPage, compression: Optional[Compression] = None) -> None:
    draw_template(pc, page, compression)
    draw_images(pc, page, compression)
    draw_texts(pc, page)
    draw_lines(pc, page)


def compose_pages(pc: PageCanvas, pages: Iterable[DrawingPage], compression: Optional[Compression] = None) -> int:
    """Draw ``pages`` onto ``pc``.

    The first drawing page uses the canvas' current (blank) page; every
    further one starts a new page.  Returns the number of pages drawn.
    """
    count = 0
    for page in pages:
        if count:
            pc.new_page()
        compose_page(pc, page, compression)
        count += 1
    return count


def draw_no_pages(pc: PageCanvas) -> None:
    pc.set_text_color((0, 0, 0))
    pc.set_font(16)
    pc.text(NO_PAGES_MESSAGE, 10, 10)


def render_pages_pdf(pages: list[DrawingPage], compression: Optional[Compression] = None, title: str = '') -> bytes:
    """Render ``pages`` to PDF bytes; an empty list yields a notice page."""
    pc = PageCanvas(title=title)
    if pages:
        compose_pages(pc, pages, compression)
    else:
        draw_no_pages(pc)
    return pc.finish()

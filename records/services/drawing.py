"""
Drawing-page data model and canvas geometry.

The bedside client draws on a fixed 1000 x 1414 unit canvas that keeps
the proportions of an A4 sheet.  Everything here converts that canvas
space onto a 210 x 297 mm page and decodes the compact encodings the
client uses for colours and ink strokes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 1414
PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297

SCALE_X = PAGE_WIDTH_MM / CANVAS_WIDTH
SCALE_Y = PAGE_HEIGHT_MM / CANVAS_HEIGHT

# 0xFF000000: opaque black
DEFAULT_COLOR = 4278190080
DEFAULT_FONT_SIZE = 16
DEFAULT_STROKE_WIDTH = 2
# canvas font units -> points, canvas stroke units -> mm
POINTS_PER_MM = 2.835
STROKE_FACTOR = 0.8


@dataclass
class DrawingPage:
    """One page of a clinical document as drawn by the client.

    ``lines``, ``images`` and ``texts`` keep the raw JSON dictionaries
    saved by the client; the composer reads them lazily so a malformed
    element only affects itself.
    """
    id: str
    template_image_url: str = ''
    page_number: int = 0
    page_name: str = ''
    group_name: str = ''
    lines: list = field(default_factory=list)
    images: list = field(default_factory=list)
    texts: list = field(default_factory=list)
    location_tag: str = ''
    key: str = ''

    @classmethod
    def from_json(cls, data: dict, *, group_name: str = '', key: str = '') -> 'DrawingPage':
        """Build a page from a legacy JSON page dictionary."""
        return cls(
            id=str(data.get('id') or ''),
            template_image_url=data.get('templateImageUrl') or '',
            page_number=_as_int(data.get('pageNumber')),
            page_name=data.get('pageName') or '',
            group_name=group_name or data.get('groupName') or '',
            lines=_as_list(data.get('lines')),
            images=_as_list(data.get('images')),
            texts=_as_list(data.get('texts')),
            location_tag=data.get('locationTag') or '',
            key=key,
        )

    def to_preview(self) -> dict:
        return {
            'key': self.key,
            'id': self.id,
            'pageNumber': self.page_number,
            'pageName': self.page_name,
            'groupName': self.group_name,
            'templateImageUrl': self.template_image_url,
            'locationTag': self.location_tag,
            'lineCount': len(self.lines),
            'imageCount': len(self.images),
            'textCount': len(self.texts),
        }


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def unpack_argb(value: Optional[int]) -> tuple[int, int, int, float]:
    """Split a packed 32-bit ARGB integer into ``(r, g, b, alpha)``.

    ``alpha`` is returned in ``[0, 1]``; a missing value is opaque black.
    """
    v = DEFAULT_COLOR if value is None else _as_int(value, DEFAULT_COLOR)
    v &= 0xFFFFFFFF
    r = (v >> 16) & 255
    g = (v >> 8) & 255
    b = v & 255
    a = ((v >> 24) & 255) / 255
    return r, g, b, a


def decode_stroke(points: Any) -> list[tuple[float, float]]:
    """Decode a stroke's point list into absolute canvas coordinates.

    Two encodings are accepted:

    * a flat list of numbers: the first pair (divided by 100) is the
      starting point and every following pair is a delta, also divided
      by 100, added to the previous point; a trailing odd value is
      ignored.
    * a list of ``{"dx": .., "dy": ..}`` objects holding absolute
      coordinates; missing coordinates count as 0.

    Anything with fewer than two entries produces no points.
    """
    if not isinstance(points, list) or len(points) < 2:
        return []

    if isinstance(points[0], (int, float)) and not isinstance(points[0], bool):
        decoded: list[tuple[float, float]] = []
        x = _as_float(points[0]) / 100
        y = _as_float(points[1]) / 100
        decoded.append((x, y))
        for i in range(2, len(points) - 1, 2):
            x += _as_float(points[i]) / 100
            y += _as_float(points[i + 1]) / 100
            decoded.append((x, y))
        return decoded

    decoded = []
    for p in points:
        if not isinstance(p, dict):
            continue
        decoded.append((_as_float(p.get('dx')), _as_float(p.get('dy'))))
    return decoded


def to_page(x: float, y: float) -> tuple[float, float]:
    """Map canvas units onto page millimetres."""
    return x * SCALE_X, y * SCALE_Y


def fit_centered(img_w: float, img_h: float) -> tuple[float, float, float, float]:
    """Scale an image uniformly to fit the page and centre it.

    Returns ``(x, y, w, h)`` in millimetres from the top-left corner.
    """
    if img_w <= 0 or img_h <= 0:
        return 0.0, 0.0, float(PAGE_WIDTH_MM), float(PAGE_HEIGHT_MM)
    scale = min(PAGE_WIDTH_MM / img_w, PAGE_HEIGHT_MM / img_h)
    w = img_w * scale
    h = img_h * scale
    return (PAGE_WIDTH_MM - w) / 2, (PAGE_HEIGHT_MM - h) / 2, w, h


def font_size_pt(font_size: Any) -> float:
    return (_as_float(font_size) or DEFAULT_FONT_SIZE) * SCALE_X * POINTS_PER_MM


def stroke_width_mm(stroke_width: Any) -> float:
    return (_as_float(stroke_width) or DEFAULT_STROKE_WIDTH) * SCALE_X * STROKE_FACTOR


def line_segments(points: Iterable[tuple[float, float]]) -> list[tuple[float, float, float, float]]:
    """Page-space segments joining consecutive canvas points."""
    pts = [to_page(x, y) for x, y in points]
    return [(x1, y1, x2, y2) for (x1, y1), (x2, y2) in zip(pts, pts[1:])]

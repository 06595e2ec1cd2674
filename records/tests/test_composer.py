import base64
import io
import re
import zlib

import pytest
import requests
from PIL import Image
from reportlab.pdfbase import pdfmetrics

from records.services import assets, composer
from records.services.assets import AssetError, EXPORT_COMPRESSION
from records.services.drawing import DrawingPage, font_size_pt
from records.services.pdfcanvas import PageCanvas

TM = re.compile(rb'1 0 0 1 (-?[\d.]+) (-?[\d.]+) Tm')


def _png(size=(40, 20), color=(200, 10, 10, 255)):
    buf = io.BytesIO()
    Image.new('RGBA', size, color).save(buf, format='PNG')
    return buf.getvalue()


def _page(**kw):
    defaults = dict(
        id='p1',
        page_number=1,
        group_name='Consent',
        lines=[{'points': [10000, 10000, 2000, 1500, -500, 800], 'colorValue': 4294901760, 'strokeWidth': 3}],
        texts=[{'text': 'Pulse 72', 'position': {'dx': 100, 'dy': 200}, 'fontSize': 20}],
    )
    defaults.update(kw)
    return DrawingPage(**defaults)


def _content(pdf):
    """Decoded page content streams of a reportlab PDF, joined together."""
    out = []
    for raw in re.findall(rb'stream\r?\n(.*?)endstream', pdf, re.S):
        data = raw.strip()
        if data.endswith(b'~>'):
            try:
                data = base64.a85decode(data[:-2])
            except ValueError:
                continue
        try:
            out.append(zlib.decompress(data))
        except zlib.error:
            continue
    return b'\n'.join(out)


def _origins(stream):
    return [(float(x), float(y)) for x, y in TM.findall(stream)]


class RecordingCanvas(PageCanvas):
    def __init__(self):
        super().__init__()
        self.calls = []

    def image(self, img, x, y, w, h):
        self.calls.append('image')
        super().image(img, x, y, w, h)

    def text(self, s, x, y, align='left', top=False):
        self.calls.append('text')
        super().text(s, x, y, align=align, top=top)

    def line(self, x1, y1, x2, y2):
        self.calls.append('line')
        super().line(x1, y1, x2, y2)


def test_empty_document_carries_notice():
    stream = _content(composer.render_pages_pdf([]))
    assert b'(No daily monitoring records found from the selected database.) Tj' in stream


def test_every_page_becomes_one_pdf_page():
    pc = PageCanvas()
    assert composer.compose_pages(pc, [_page(), _page(id='p2', page_number=2)]) == 2
    assert pc.page_count == 2
    assert pc.finish().startswith(b'%PDF')


def test_layers_are_painted_template_images_texts_lines(monkeypatch):
    monkeypatch.setattr(assets, 'fetch', lambda url: _png())
    pc = RecordingCanvas()
    page = _page(
        template_image_url='templates/consent.png',
        images=[{'imageUrl': 'uploads/sign.png', 'position': {'dx': 10, 'dy': 10}, 'width': 100, 'height': 50}],
    )
    composer.compose_page(pc, page, EXPORT_COMPRESSION)
    first_line = pc.calls.index('line')
    assert pc.calls[:3] == ['image', 'image', 'text']
    assert set(pc.calls[first_line:]) == {'line'}


def test_text_hangs_from_its_top_edge():
    stream = _content(composer.render_pages_pdf([_page(lines=[])]))
    size = font_size_pt(20)
    (x, y), = _origins(stream)
    assert b'(Pulse 72) Tj' in stream
    assert x == pytest.approx(100 * 0.21 * 72 / 25.4, abs=0.01)
    expected = (297 - 200 * 297 / 1414) * 72 / 25.4 - pdfmetrics.getAscent('Helvetica', size)
    assert y == pytest.approx(expected, abs=0.01)


def test_multiline_text_advances_one_line_per_row():
    page = _page(lines=[], texts=[{'text': 'BP 120\nPulse 72', 'position': {'dx': 100, 'dy': 200}}])
    stream = _content(composer.render_pages_pdf([page]))
    assert b'(BP 120) Tj' in stream
    assert b'(Pulse 72) Tj' in stream
    (x1, y1), (x2, y2) = _origins(stream)
    assert x1 == x2
    assert y1 - y2 == pytest.approx(font_size_pt(None) * 1.15, abs=0.01)


def test_argb_colours_reach_fill_and_stroke():
    page = _page(texts=[{'text': 'Temp', 'colorValue': 4278190335, 'position': {'dx': 5, 'dy': 5}}])
    stream = _content(composer.render_pages_pdf([page]))
    assert b'0 0 1 rg' in stream
    assert b'1 0 0 RG' in stream
    assert re.search(rb' l\s', stream)


def test_empty_text_is_skipped():
    page = _page(lines=[], texts=[{'text': ''}, {'text': None}, {'text': 'ok'}])
    stream = _content(composer.render_pages_pdf([page]))
    assert stream.count(b' Tj') == 1
    assert b'(ok) Tj' in stream


def test_numeric_string_positions_are_coerced():
    as_numbers = _page(lines=[], texts=[{'text': 'x', 'position': {'dx': 100, 'dy': 200}}])
    as_strings = _page(lines=[], texts=[{'text': 'x', 'position': {'dx': '100', 'dy': '200'}}])
    assert _origins(_content(composer.render_pages_pdf([as_strings]))) == \
        _origins(_content(composer.render_pages_pdf([as_numbers])))


def test_broken_text_item_does_not_abort_the_page():
    class Unprintable:
        def __str__(self):
            raise RuntimeError('cannot render')

    page = _page(lines=[], texts=[{'text': Unprintable()}, {'text': 'still here'}])
    stream = _content(composer.render_pages_pdf([page]))
    assert b'(still here) Tj' in stream


def test_images_are_embedded(monkeypatch):
    calls = []

    def fake_fetch(url):
        calls.append(url)
        return _png()

    monkeypatch.setattr(assets, 'fetch', fake_fetch)
    page = _page(
        template_image_url='templates/consent.png',
        images=[{'imageUrl': 'uploads/sign.png', 'position': {'dx': 10, 'dy': 10}, 'width': 100, 'height': 50}],
    )
    pdf = composer.render_pages_pdf([page], EXPORT_COMPRESSION)
    assert pdf.startswith(b'%PDF')
    assert calls == ['templates/consent.png', 'uploads/sign.png']


def test_image_failure_skips_only_that_image(monkeypatch):
    def broken(url, compression=None):
        raise AssetError(f'fetch failed for {url}')

    monkeypatch.setattr(assets, 'load_image', broken)
    page = _page(template_image_url='missing.png', images=[{'imageUrl': 'gone.png'}, {'no_url': True}])
    pdf = composer.render_pages_pdf([page], EXPORT_COMPRESSION)
    assert pdf.startswith(b'%PDF')


def test_malformed_texts_and_lines_are_ignored():
    page = _page(texts=['oops', {'text': ''}, {'text': 'ok'}], lines=['bad', {'points': [1]}])
    assert composer.render_pages_pdf([page]).startswith(b'%PDF')


def test_compress_bounds_longest_side():
    out = assets.compress(_png(size=(2400, 1200)), 0.5, 1200)
    img = Image.open(io.BytesIO(out))
    assert img.format == 'JPEG'
    assert img.size == (1200, 600)


def test_compress_keeps_size_without_bound():
    img = Image.open(io.BytesIO(assets.compress(_png(size=(300, 500)), 0.3)))
    assert img.size == (300, 500)


def test_compress_passes_through_undecodable_bytes():
    assert assets.compress(b'not an image', 0.5) == b'not an image'


class FakeResponse:
    def __init__(self, content=b'', status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')


def test_fetch_resolves_relative_urls_and_caches(monkeypatch, settings):
    settings.ASSET_BASE_URL = 'https://assets.test/base'
    seen = []

    def fake_get(url, timeout=None):
        seen.append(url)
        return FakeResponse(b'png-bytes')

    monkeypatch.setattr(assets.requests, 'get', fake_get)
    assert assets.fetch('/img/a.png') == b'png-bytes'
    assert assets.fetch('/img/a.png') == b'png-bytes'
    assert seen == ['https://assets.test/base/img/a.png']


def test_fetch_error_raises_asset_error(monkeypatch):
    monkeypatch.setattr(assets.requests, 'get', lambda url, timeout=None: FakeResponse(status_code=404))
    with pytest.raises(AssetError):
        assets.fetch('https://assets.test/missing.png')

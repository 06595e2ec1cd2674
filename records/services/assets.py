"""
Fetching and compressing the images placed on drawing pages.
"""
from __future__ import annotations

import hashlib
import io
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings
from django.core.cache import cache
from PIL import Image, UnidentifiedImageError

from records.structured_logging import get_logger

logger = get_logger(__name__)

BACKUP_QUALITY = 0.5
BACKUP_MAX_DIM = 1200
EXPORT_QUALITY = 0.3


@dataclass(frozen=True)
class Compression:
    """JPEG re-encoding applied to every image before it is embedded."""
    quality: float
    max_dim: Optional[int] = None


BACKUP_COMPRESSION = Compression(BACKUP_QUALITY, BACKUP_MAX_DIM)
EXPORT_COMPRESSION = Compression(EXPORT_QUALITY)


class AssetError(Exception):
    pass


def resolve_url(url: str) -> str:
    """Absolute URLs pass through; relative paths hang off ``ASSET_BASE_URL``."""
    if url.startswith('http'):
        return url
    base = settings.ASSET_BASE_URL
    if not base.endswith('/'):
        base += '/'
    return base + url.lstrip('/')


def _cache_key(url: str) -> str:
    return 'asset:' + hashlib.sha1(url.encode('utf-8')).hexdigest()


def fetch(url: str) -> bytes:
    """Download an image, reusing the cached bytes when present.

    Template images repeat on every page of a form, so the bytes are
    kept in the Django cache for ``ASSET_CACHE_SECONDS``.
    """
    full = resolve_url(url)
    key = _cache_key(full)
    data = cache.get(key)
    if data is not None:
        return data
    try:
        r = requests.get(full, timeout=settings.ASSET_TIMEOUT)
        r.raise_for_status()
    except requests.RequestException as e:
        raise AssetError(f'fetch failed for {full}: {e}') from e
    data = r.content
    cache.set(key, data, settings.ASSET_CACHE_SECONDS)
    return data


def compress(data: bytes, quality: float, max_dim: Optional[int] = None) -> bytes:
    """Flatten onto white and re-encode as JPEG.

    ``quality`` is the 0..1 factor used by the drawing client.  When
    ``max_dim`` is given the longer side is bounded to it, keeping the
    aspect ratio.  Bytes Pillow cannot decode are returned untouched.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        return data

    width, height = img.size
    if max_dim:
        if width > height and width > max_dim:
            height = height * max_dim / width
            width = max_dim
        elif width <= height and height > max_dim:
            width = width * max_dim / height
            height = max_dim
        size = (max(1, round(width)), max(1, round(height)))
        if size != img.size:
            img = img.resize(size, Image.LANCZOS)

    rgba = img.convert('RGBA')
    flat = Image.new('RGB', rgba.size, (255, 255, 255))
    flat.paste(rgba, mask=rgba.split()[3])

    out = io.BytesIO()
    flat.save(out, format='JPEG', quality=max(1, min(95, int(quality * 100))))
    return out.getvalue()


def load_image(url: str, compression: Optional[Compression] = None) -> Image.Image:
    """Fetch ``url`` and return a decoded image ready for embedding."""
    data = fetch(url)
    if compression is not None:
        data = compress(data, compression.quality, compression.max_dim)
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise AssetError(f'undecodable image at {url}') from e
    return img

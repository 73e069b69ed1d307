from __future__ import annotations

import io
import logging
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from blockpic.errors import SourceUnavailableError, UnsupportedFormatError, UnsupportedSchemeError

LOG = logging.getLogger(__name__)

FILE_SCHEME = "file://"
HTTP_SCHEMES = ("http://", "https://")
HTTP_TIMEOUT = 30.0


def _decode(fp, name: str) -> Image.Image:
    try:
        image = Image.open(fp)
        image.load()
    except UnidentifiedImageError as e:
        raise UnsupportedFormatError(f"Cannot identify image data in {name}") from e
    except Image.DecompressionBombError as e:
        raise UnsupportedFormatError(f"Refusing to decode {name}: {e}") from e
    except OSError as e:
        # truncated or corrupt data past the header
        raise UnsupportedFormatError(f"Cannot decode {name}: {e}") from e
    LOG.debug("Decoded %s: %s %dx%d", name, image.mode, image.width, image.height)
    return image


def load_image_from_bytes(data: bytes, name: str = "<bytes>") -> Image.Image:
    return _decode(io.BytesIO(data), name)


def load_image_from_file(path: str | Path) -> Image.Image:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SourceUnavailableError(f"Cannot read {path}: {e.strerror or e}") from e
    return load_image_from_bytes(data, str(path))


def load_image_from_url(url: str, timeout: float = HTTP_TIMEOUT) -> Image.Image:
    LOG.debug("Fetching %s", url)
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise SourceUnavailableError(f"Cannot fetch {url}: {e}") from e
    return load_image_from_bytes(response.content, url)


def load_image(uri: str) -> Image.Image:
    """Load and decode an image from a local path, a ``file://`` URI or an ``http(s)://`` URL."""
    if "://" not in uri:
        return load_image_from_file(uri)
    if uri.startswith(FILE_SCHEME):
        return load_image(uri[len(FILE_SCHEME) :])
    if uri.startswith(HTTP_SCHEMES):
        return load_image_from_url(uri)
    scheme = uri.split("://", 1)[0]
    raise UnsupportedSchemeError(scheme, uri)

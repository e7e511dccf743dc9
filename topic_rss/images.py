"""
Image lookup for synthesized items.

Providers are tried in order. The first result whose width falls inside the
configured range wins; when nothing fits, any result is better than none and
the earliest provider's pick is returned.
"""
from __future__ import annotations

import json
import logging
import re
import struct
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

import requests

from .fetcher import DEFAULT_HEADERS, http_get
from .models import ImageResult

logger = logging.getLogger(__name__)

MIN_IMAGE_WIDTH = 1000
MAX_IMAGE_WIDTH = 1600
PROBE_MAX_BYTES = 512000

Dimensions = Tuple[int, int]
Prober = Callable[[str], Optional[Dimensions]]


class ImageProvider(Protocol):
    name: str

    def search(self, query: str) -> List[ImageResult]:  # pragma: no cover - interface
        ...


def _as_int(value: object) -> Optional[int]:
    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


class SerpApiImageProvider:
    """Google Images through SerpAPI's JSON endpoint."""

    name = "serpapi"
    endpoint = "https://serpapi.com/search.json"

    def __init__(self, api_key: str, *, timeout: float = 20.0,
                 session: Optional[requests.Session] = None) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def search(self, query: str) -> List[ImageResult]:
        params = {
            "q": query,
            "engine": "google_images",
            "hl": "en",
            "tbm": "isch",
            "safe": "active",
            "api_key": self.api_key,
            # bias toward larger images
            "tbs": "isz:l",
        }
        resp = self.session.get(self.endpoint, params=params, headers=DEFAULT_HEADERS, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        results: List[ImageResult] = []
        if not isinstance(data, dict):
            return results
        for img in data.get("images_results") or []:
            src = img.get("original") or img.get("thumbnail")
            if not src:
                continue
            results.append(ImageResult(
                url=src,
                width=_as_int(img.get("original_width")),
                height=_as_int(img.get("original_height")),
            ))
        return results


_OU_PATTERN = re.compile(r'"ou":"(https?://[^"]+)","ow":(\d+),"oh":(\d+)')
_DIRECT_IMAGE = re.compile(r'(https?://[^\\\s"]+\.(?:jpg|jpeg|png|webp))', re.IGNORECASE)


def parse_google_images_html(html: str) -> List[ImageResult]:
    """
    Pull image URLs out of a Google Images results page.

    Older pages embed ``"ou":url,"ow":w,"oh":h`` records; otherwise fall back to
    any direct image URL not hosted on gstatic thumbnails.
    """
    results: List[ImageResult] = []
    for url, w, h in _OU_PATTERN.findall(html):
        results.append(ImageResult(url=_unescape(url), width=_as_int(w), height=_as_int(h)))
    if results:
        return results
    for candidate in _DIRECT_IMAGE.findall(html):
        url = _unescape(candidate)
        if "gstatic.com" in url:
            continue
        results.append(ImageResult(url=url))
    return results


def _unescape(url: str) -> str:
    url = url.replace("\\/", "/")
    try:
        return json.loads(f'"{url}"')
    except ValueError:
        return url.replace("\\", "")


class GoogleImagesScrapeProvider:
    """Best-effort scrape of the public Google Images results page."""

    name = "google-images"
    search_url = "https://www.google.com/search"

    def __init__(self, *, timeout: float = 20.0, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self.session = session

    def search(self, query: str) -> List[ImageResult]:
        resp = http_get(
            self.search_url,
            params={"tbm": "isch", "q": query, "safe": "active", "tbs": "isz:l"},
            headers={"Referer": "https://www.google.com/", "Cache-Control": "no-cache"},
            timeout=self.timeout,
            session=self.session,
        )
        return parse_google_images_html(resp.text)


# --------------- dimension probing ---------------

def image_size_from_bytes(data: bytes) -> Optional[Dimensions]:
    """Read (width, height) from the header of a PNG, GIF, JPEG, WebP or BMP prefix."""
    if len(data) >= 24 and data.startswith(b"\x89PNG\r\n\x1a\n") and data[12:16] == b"IHDR":
        w, h = struct.unpack(">II", data[16:24])
        return _positive(w, h)
    if len(data) >= 10 and data[:6] in (b"GIF87a", b"GIF89a"):
        w, h = struct.unpack("<HH", data[6:10])
        return _positive(w, h)
    if len(data) >= 26 and data[:2] == b"BM":
        w, h = struct.unpack("<ii", data[18:26])
        return _positive(w, abs(h))
    if len(data) >= 30 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return _webp_size(data)
    if data[:2] == b"\xff\xd8":
        return _jpeg_size(data)
    return None


def _positive(w: int, h: int) -> Optional[Dimensions]:
    if w > 0 and h > 0:
        return w, h
    return None


def _webp_size(data: bytes) -> Optional[Dimensions]:
    chunk = data[12:16]
    if chunk == b"VP8 " and data[23:26] == b"\x9d\x01\x2a":
        w, h = struct.unpack("<HH", data[26:30])
        return _positive(w & 0x3FFF, h & 0x3FFF)
    if chunk == b"VP8L" and data[20:21] == b"\x2f" and len(data) >= 25:
        b = data[21:25]
        w = 1 + (((b[1] & 0x3F) << 8) | b[0])
        h = 1 + (((b[3] & 0x0F) << 10) | (b[2] << 2) | ((b[1] & 0xC0) >> 6))
        return _positive(w, h)
    if chunk == b"VP8X":
        w = 1 + int.from_bytes(data[24:27], "little")
        h = 1 + int.from_bytes(data[27:30], "little")
        return _positive(w, h)
    return None


# Start-of-frame markers carrying the frame dimensions (excludes DHT/JPG/DAC).
_SOF_MARKERS = {0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF}


def _jpeg_size(data: bytes) -> Optional[Dimensions]:
    i = 2
    n = len(data)
    while i + 4 <= n:
        if data[i] != 0xFF:
            i += 1
            continue
        marker = data[i + 1]
        if marker == 0xFF:
            i += 1
            continue
        if marker in (0xD8, 0x01) or 0xD0 <= marker <= 0xD7:
            i += 2
            continue
        seg_len = struct.unpack(">H", data[i + 2:i + 4])[0]
        if marker in _SOF_MARKERS:
            if i + 9 > n:
                return None
            h, w = struct.unpack(">HH", data[i + 5:i + 9])
            return _positive(w, h)
        i += 2 + seg_len
    return None


def fetch_prefix(url: str, max_bytes: int = PROBE_MAX_BYTES, *, timeout: float = 20.0,
                 session: Optional[requests.Session] = None) -> Optional[bytes]:
    """Download at most ``max_bytes`` of ``url``; None on any failure."""
    headers = dict(DEFAULT_HEADERS)
    headers["Accept"] = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"
    headers["Range"] = f"bytes=0-{max(0, max_bytes - 1)}"
    client = session or requests
    try:
        with client.get(url, headers=headers, timeout=timeout, stream=True) as resp:
            if resp.status_code >= 400:
                return None
            buf = bytearray()
            for chunk in resp.iter_content(chunk_size=16384):
                buf.extend(chunk)
                if len(buf) >= max_bytes:
                    break
            return bytes(buf[:max_bytes])
    except requests.RequestException as e:
        logger.debug("Image prefix fetch failed for %s: %s", url, e)
        return None


def probe_image_dimensions(url: str) -> Optional[Dimensions]:
    raw = fetch_prefix(url)
    if not raw:
        return None
    return image_size_from_bytes(raw)


# --------------- resolution chain ---------------

class ImageResolver:
    def __init__(
        self,
        providers: Sequence[ImageProvider],
        *,
        min_width: int = MIN_IMAGE_WIDTH,
        max_width: int = MAX_IMAGE_WIDTH,
        probe: Optional[Prober] = probe_image_dimensions,
    ) -> None:
        self.providers = list(providers)
        self.min_width = min_width
        self.max_width = max_width
        self.probe = probe

    def _fits(self, img: ImageResult) -> bool:
        return img.width_within(self.min_width, self.max_width)

    def _probed(self, img: ImageResult) -> ImageResult:
        if self.probe is None:
            return img
        try:
            dims = self.probe(img.url)
        except Exception as e:
            logger.debug("Probe failed for %s: %s", img.url, e)
            return img
        if not dims:
            return img
        return ImageResult(url=img.url, width=dims[0], height=dims[1])

    def pick(self, candidates: Sequence[ImageResult]) -> Tuple[Optional[ImageResult], bool]:
        """
        Apply the width rule to one provider's candidates.
        Returns (best result or None, whether it satisfies the width range).
        """
        if not candidates:
            return None, False
        for img in candidates:
            if self._fits(img):
                return img, True
        first = candidates[0]
        if not any(c.has_dimensions for c in candidates):
            first = self._probed(first)
        return first, self._fits(first)

    def resolve(self, query: str) -> Optional[ImageResult]:
        fallback: Optional[ImageResult] = None
        for provider in self.providers:
            try:
                candidates = provider.search(query)
            except Exception as e:
                logger.warning("Image provider %s failed for %r: %s", getattr(provider, "name", provider), query, e)
                candidates = []
            best, fits = self.pick(candidates)
            if best is not None and fits:
                return best
            if fallback is None:
                fallback = best
        return fallback


def build_image_resolver(*, serpapi_key: Optional[str], timeout: float = 20.0,
                         min_width: int = MIN_IMAGE_WIDTH, max_width: int = MAX_IMAGE_WIDTH) -> ImageResolver:
    providers: List[ImageProvider] = []
    if serpapi_key:
        providers.append(SerpApiImageProvider(serpapi_key, timeout=timeout))
    providers.append(GoogleImagesScrapeProvider(timeout=timeout))
    return ImageResolver(providers, min_width=min_width, max_width=max_width)

"""Remote image retrieval with retry/backoff, re-encoding and caching."""

from __future__ import annotations

import io
import logging
import time
from typing import Callable, Optional

import requests

from .cache import AssetCache, CachedAsset, cache_key
from .errors import AssetFetchError

logger = logging.getLogger(__name__)

USER_AGENT = "slideforge/0.1"

MAX_IMAGE_WIDTH = 1920
JPEG_QUALITY = 82


def _requests_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def fetch_asset(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    max_retries: int = 3,
    base_timeout: float = 5.0,
    timeout_step: float = 1.5,
    base_delay: float = 0.2,
    sleep: Callable[[float], None] = time.sleep,
) -> CachedAsset:
    """GET ``url`` and return the image payload.

    4xx responses and non-image content types fail immediately. 5xx responses
    and network errors are retried up to ``max_retries`` times; the timeout
    grows by ``timeout_step`` per attempt and the pause before the next
    attempt doubles from ``base_delay``.
    """
    if not url:
        raise AssetFetchError(url, "No URL given", permanent=True)

    session = session or _requests_session()
    last_error = AssetFetchError(url, "No fetch attempts made")

    for attempt in range(max_retries + 1):
        timeout = base_timeout + attempt * timeout_step
        try:
            resp = session.get(url, timeout=timeout)
        except requests.RequestException as exc:
            last_error = AssetFetchError(url, f"Network error: {exc}")
        else:
            status = resp.status_code
            if 400 <= status < 500:
                raise AssetFetchError(url, f"HTTP {status}", status=status, permanent=True)
            if status >= 500:
                last_error = AssetFetchError(url, f"HTTP {status}", status=status)
            else:
                content_type = resp.headers.get("content-type", "")
                if not content_type.lower().startswith("image/"):
                    raise AssetFetchError(url, f"Not an image: {content_type or 'unknown'}", permanent=True)
                return CachedAsset(data=resp.content, content_type=content_type.split(";")[0].strip())

        if attempt < max_retries:
            delay = base_delay * 2**attempt
            logger.info("Fetch attempt %d/%d failed for %s; retrying in %.2fs", attempt + 1, max_retries + 1, url, delay)
            sleep(delay)

    raise last_error


def is_decodable(data: bytes) -> bool:
    """True when Pillow can identify and verify ``data`` as an image."""
    from PIL import Image

    try:
        with Image.open(io.BytesIO(data)) as im:
            im.verify()
    except (OSError, ValueError, SyntaxError):
        return False
    return True


def _has_alpha(im) -> bool:
    return im.mode in {"RGBA", "LA", "PA"} or (im.mode == "P" and "transparency" in im.info)


def optimize_image(asset: CachedAsset, max_width: int = MAX_IMAGE_WIDTH, quality: int = JPEG_QUALITY) -> CachedAsset:
    """Downscale to ``max_width`` and re-encode: PNG when transparent, JPEG otherwise.

    Bytes Pillow cannot decode are returned unchanged.
    """
    from PIL import Image

    try:
        with Image.open(io.BytesIO(asset.data)) as im:
            im.load()
            if im.width > max_width:
                height = max(1, round(im.height * max_width / im.width))
                im = im.resize((max_width, height), Image.LANCZOS)

            out = io.BytesIO()
            if _has_alpha(im):
                im.convert("RGBA").save(out, format="PNG", optimize=True)
                content_type = "image/png"
            else:
                im.convert("RGB").save(out, format="JPEG", quality=quality, optimize=True, progressive=True)
                content_type = "image/jpeg"
    except (OSError, ValueError) as exc:
        logger.debug("Image re-encode skipped: %s", exc)
        return asset

    return CachedAsset(data=out.getvalue(), content_type=content_type)


class AssetLoader:
    """Cache lookup, then fetch, optimize and store.

    ``load`` never raises for fetch problems: it returns None so the caller
    can draw a placeholder instead.
    """

    def __init__(
        self,
        cache: Optional[AssetCache] = None,
        fetch: Callable[[str], CachedAsset] = fetch_asset,
        optimize: Callable[[CachedAsset], CachedAsset] = optimize_image,
    ):
        self.cache = cache if cache is not None else AssetCache()
        self.fetch = fetch
        self.optimize = optimize
        self.failures: list[str] = []

    def load(self, url: Optional[str]) -> Optional[CachedAsset]:
        if not url:
            return None
        key = cache_key(url)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            raw = self.fetch(url)
        except AssetFetchError as exc:
            logger.warning("Asset unavailable, using placeholder: %s", exc)
            self.failures.append(url)
            return None

        asset = self.optimize(raw)
        if not is_decodable(asset.data):
            logger.warning("Asset unavailable, using placeholder: undecodable image data (%s)", url)
            self.failures.append(url)
            return None
        self.cache.put(key, asset)
        return asset

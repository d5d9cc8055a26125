from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
import requests
from PIL import Image

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from slideforge.assets import AssetLoader, fetch_asset, optimize_image  # noqa: E402
from slideforge.cache import AssetCache, CachedAsset  # noqa: E402
from slideforge.errors import AssetFetchError  # noqa: E402


class FakeResponse:
    def __init__(self, status_code: int, content_type: str = "image/png", content: bytes = b"img"):
        self.status_code = status_code
        self.headers = {"content-type": content_type}
        self.content = content


class FakeSession:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.timeouts: list[float] = []

    def get(self, url, timeout):
        self.timeouts.append(timeout)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _png(size=(40, 20), mode="RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, (10, 20, 30, 128) if mode == "RGBA" else (10, 20, 30)).save(buf, format="PNG")
    return buf.getvalue()


def test_fetch_retries_server_errors_with_backoff() -> None:
    session = FakeSession([FakeResponse(503), FakeResponse(200, content=b"ok")])
    sleeps: list[float] = []

    asset = fetch_asset("https://x/a.png", session=session, sleep=sleeps.append)

    assert asset.data == b"ok"
    assert asset.content_type == "image/png"
    assert sleeps == [pytest.approx(0.2)]
    assert session.timeouts == [pytest.approx(5.0), pytest.approx(6.5)]


def test_fetch_client_error_is_permanent() -> None:
    session = FakeSession([FakeResponse(404), FakeResponse(200)])
    sleeps: list[float] = []

    with pytest.raises(AssetFetchError) as exc:
        fetch_asset("https://x/missing.png", session=session, sleep=sleeps.append)

    assert exc.value.permanent is True
    assert exc.value.status == 404
    assert len(session.timeouts) == 1
    assert sleeps == []


def test_fetch_rejects_non_image_content() -> None:
    session = FakeSession([FakeResponse(200, content_type="text/html; charset=utf-8")])
    with pytest.raises(AssetFetchError) as exc:
        fetch_asset("https://x/page", session=session, sleep=lambda s: None)
    assert exc.value.permanent is True
    assert "Not an image" in str(exc.value)


def test_fetch_gives_up_after_retry_ceiling() -> None:
    errors = [requests.ConnectionError("down") for _ in range(4)]
    session = FakeSession(errors)
    sleeps: list[float] = []

    with pytest.raises(AssetFetchError) as exc:
        fetch_asset("https://x/a.png", session=session, max_retries=3, sleep=sleeps.append)

    assert exc.value.permanent is False
    assert len(session.timeouts) == 4
    assert sleeps == [pytest.approx(0.2), pytest.approx(0.4), pytest.approx(0.8)]


def test_optimize_downscales_and_uses_jpeg_for_opaque_images() -> None:
    out = optimize_image(CachedAsset(_png((3000, 100)), "image/png"))
    assert out.content_type == "image/jpeg"
    with Image.open(io.BytesIO(out.data)) as im:
        assert im.format == "JPEG"
        assert im.width == 1920


def test_optimize_keeps_png_for_transparency() -> None:
    out = optimize_image(CachedAsset(_png((50, 50), "RGBA"), "image/png"))
    assert out.content_type == "image/png"
    with Image.open(io.BytesIO(out.data)) as im:
        assert im.format == "PNG"
        assert im.size == (50, 50)


def test_optimize_passes_through_undecodable_bytes() -> None:
    original = CachedAsset(b"definitely not an image", "image/png")
    assert optimize_image(original) is original


def test_loader_caches_successful_fetches() -> None:
    calls: list[str] = []

    def fetch(url: str) -> CachedAsset:
        calls.append(url)
        return CachedAsset(_png(), "image/png")

    loader = AssetLoader(AssetCache(), fetch=fetch)
    first = loader.load("https://x/a.png")
    second = loader.load("https://x/a.png")

    assert first is not None and second is first
    assert calls == ["https://x/a.png"]


def test_loader_rejects_undecodable_payload_without_caching() -> None:
    loader = AssetLoader(AssetCache(), fetch=lambda url: CachedAsset(b"corrupt bytes", "image/png"))

    assert loader.load("https://x/bad.png") is None
    assert loader.failures == ["https://x/bad.png"]
    assert len(loader.cache) == 0


def test_loader_returns_none_on_fetch_failure() -> None:
    def fetch(url: str) -> CachedAsset:
        raise AssetFetchError(url, "HTTP 404", status=404, permanent=True)

    loader = AssetLoader(AssetCache(), fetch=fetch)
    assert loader.load("https://x/gone.png") is None
    assert loader.failures == ["https://x/gone.png"]
    assert loader.load(None) is None

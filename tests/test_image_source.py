from __future__ import annotations

import base64
from typing import Any

import pytest
import requests

from bill_analyzer import image_source


def test_decodes_base64_photo() -> None:
    payload = base64.b64encode(b"\xff\xd8jpeg-bytes").decode("ascii")
    assert image_source.load_image(payload) == b"\xff\xd8jpeg-bytes"


def test_strips_data_url_prefix() -> None:
    payload = "data:image/jpeg;base64," + base64.b64encode(b"abc").decode("ascii")
    assert image_source.load_image(payload) == b"abc"


def test_invalid_base64() -> None:
    with pytest.raises(image_source.ImageDecodeError, match="invalid_base64"):
        image_source.load_image("not base64!!")


def test_missing_image() -> None:
    with pytest.raises(image_source.ImageDecodeError, match="missing_image"):
        image_source.load_image()


def test_too_large() -> None:
    payload = base64.b64encode(b"x" * 11).decode("ascii")
    with pytest.raises(image_source.ImageDecodeError, match="image_too_large"):
        image_source.load_image(payload, max_bytes=10)


def test_fetches_url(monkeypatch: pytest.MonkeyPatch) -> None:
    class FakeResponse:
        content = b"remote-bytes"

        def raise_for_status(self) -> None:
            return None

    captured: dict[str, Any] = {}

    def fake_get(url: str, timeout: int) -> FakeResponse:
        captured["url"] = url
        captured["timeout"] = timeout
        return FakeResponse()

    monkeypatch.setattr(image_source.requests, "get", fake_get)

    assert image_source.load_image(image_url=" https://example.com/r.jpg ") == b"remote-bytes"
    assert captured == {"url": "https://example.com/r.jpg", "timeout": image_source.FETCH_TIMEOUT}


def test_fetch_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(*_: Any, **__: Any) -> None:
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(image_source.requests, "get", fake_get)

    with pytest.raises(image_source.ImageFetchError, match="fetch_failed"):
        image_source.load_image(image_url="https://example.com/r.jpg")


def test_rejects_non_http_url() -> None:
    with pytest.raises(image_source.ImageFetchError, match="unsupported_url"):
        image_source.load_image(image_url="file:///etc/passwd")


def test_decodes_line_wrapped_base64() -> None:
    raw = b"\xff\xd8" + b"x" * 200
    wrapped = base64.encodebytes(raw).decode("ascii")
    assert "\n" in wrapped.strip()
    assert image_source.load_image(wrapped) == raw


def test_decodes_crlf_wrapped_base64() -> None:
    raw = b"\xff\xd8" + b"y" * 120
    encoded = base64.b64encode(raw).decode("ascii")
    wrapped = "\r\n".join(encoded[i : i + 76] for i in range(0, len(encoded), 76))
    assert image_source.load_image(wrapped) == raw

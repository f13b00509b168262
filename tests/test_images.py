"""Tests for image acquisition helpers."""

import base64
from pathlib import Path

import pytest

from calorie_estimator.domain.errors import InvalidInputError
from calorie_estimator.services.images import (
    detect_mime_type,
    from_bytes,
    from_data_url,
    from_path,
)
from tests.conftest import PNG_BYTES


def test_from_bytes_keeps_reported_type() -> None:
    payload = from_bytes(b"jpeg-bytes", "image/webp")

    assert payload.mime_type == "image/webp"


def test_from_bytes_sniffs_missing_type() -> None:
    assert from_bytes(PNG_BYTES).mime_type == "image/png"
    assert from_bytes(PNG_BYTES, "application/octet-stream").mime_type == "image/png"


def test_from_bytes_strips_content_type_params() -> None:
    assert from_bytes(PNG_BYTES, "image/PNG; charset=binary").mime_type == "image/png"


def test_from_bytes_rejects_empty() -> None:
    with pytest.raises(InvalidInputError):
        from_bytes(b"", "image/png")


def test_detect_mime_type_defaults_to_jpeg() -> None:
    assert detect_mime_type(b"unknown") == "image/jpeg"
    assert detect_mime_type(b"GIF89a....") == "image/gif"
    assert detect_mime_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"


def test_from_data_url_parses_payload() -> None:
    encoded = base64.b64encode(PNG_BYTES).decode()

    payload = from_data_url(f"data:image/png;base64,{encoded}")

    assert payload.data == PNG_BYTES
    assert payload.mime_type == "image/png"
    assert payload.to_data_url() == f"data:image/png;base64,{encoded}"


def test_from_data_url_without_mime_uses_octet_stream() -> None:
    encoded = base64.b64encode(PNG_BYTES).decode()

    payload = from_data_url(f"data:;base64,{encoded}")

    assert payload.mime_type == "application/octet-stream"


@pytest.mark.parametrize(
    "url",
    ["not-a-data-url", "data:image/png,plain-text", "data:image/png;base64,@@@"],
)
def test_from_data_url_rejects_malformed(url: str) -> None:
    with pytest.raises(InvalidInputError):
        from_data_url(url)


def test_from_path_uses_extension(tmp_path: Path) -> None:
    image_path = tmp_path / "meal.webp"
    image_path.write_bytes(b"webp-bytes")

    payload = from_path(image_path)

    assert payload.mime_type == "image/webp"
    assert payload.data == b"webp-bytes"


def test_from_path_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError):
        from_path(tmp_path / "missing.jpg")

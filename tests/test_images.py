"""Tests for image helpers."""

from io import BytesIO

from PIL import Image

from snap_merch.services.images import (
    compress_data_url,
    create_thumbnail,
    decode_data_url,
    detect_mime_type,
    is_data_url,
    to_data_url,
)
from tests.conftest import make_image_data_url


def _size(data_url: str) -> tuple[int, int]:
    raw, _ = decode_data_url(data_url)
    with Image.open(BytesIO(raw)) as image:
        return image.size


def test_compress_downscales_and_reencodes_as_jpeg() -> None:
    compressed = compress_data_url(make_image_data_url(1600, 800), max_size=400)

    assert compressed.startswith("data:image/jpeg;base64,")
    assert _size(compressed) == (400, 200)


def test_compress_never_upscales() -> None:
    compressed = compress_data_url(make_image_data_url(120, 90), max_size=1200)

    assert _size(compressed) == (120, 90)


def test_compress_returns_input_for_undecodable_data() -> None:
    assert compress_data_url("data:image/png;base64,ZmFrZQ==") == (
        "data:image/png;base64,ZmFrZQ=="
    )
    assert compress_data_url("not an image at all!") == "not an image at all!"


def test_create_thumbnail_fits_in_300px() -> None:
    thumbnail = create_thumbnail(make_image_data_url(900, 600, fmt="JPEG"))

    assert max(_size(thumbnail)) == 300


def test_decode_bare_base64_defaults_to_jpeg() -> None:
    raw, mime = decode_data_url("ZmFrZQ==")

    assert raw == b"fake"
    assert mime == "image/jpeg"


def test_data_url_helpers() -> None:
    png = b"\x89PNG\r\n\x1a\nrest"

    assert detect_mime_type(png) == "image/png"
    assert detect_mime_type(b"\xff\xd8\xffrest") == "image/jpeg"
    assert to_data_url(b"fake").startswith("data:image/jpeg;base64,")
    assert is_data_url("data:image/png;base64,AAAA")
    assert not is_data_url("https://cdn.example.com/a.png")
    assert not is_data_url(None)

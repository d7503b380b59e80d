from __future__ import annotations

import base64
from io import BytesIO

import pytest
from PIL import Image

from stock_service import errors
from stock_service.codec import to_base64


def _size(png: bytes):
    return Image.open(BytesIO(png)).size


@pytest.mark.parametrize("text", ["INV:42:Laptop", "hello world", "https://example.com/items/7", "0", "Café", "INV:8:Crème brûlée"])
def test_qr_round_trip(codec, text):
    assert codec.decode(codec.encode_qr(text)) == text


@pytest.mark.parametrize("text", ["ITEM000042", "000123", "Hello-128"])
def test_barcode_round_trip(codec, text):
    assert codec.decode(codec.encode_barcode(text)) == text


def test_encoded_images_are_png(codec):
    assert codec.encode_qr("abc").startswith(b"\x89PNG")
    assert codec.encode_barcode("abc").startswith(b"\x89PNG")


def test_qr_uses_requested_size(codec):
    assert _size(codec.encode_qr("INV:1:Laptop")) == (300, 300)
    assert _size(codec.encode_qr("INV:1:Laptop", 250, 180)) == (250, 180)


def test_qr_grows_when_requested_size_is_too_small(codec):
    # Version 1 symbol is 21 modules plus a 4 module border on each side
    assert _size(codec.encode_qr("hello", 10, 10)) == (29, 29)


def test_qr_label_is_printable_size(codec):
    png = codec.encode_qr_label("INV:3:Keyboard")
    assert _size(png) == (400, 400)
    assert codec.decode(png) == "INV:3:Keyboard"


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_text_cannot_be_encoded(codec, text):
    with pytest.raises(errors.EncodingError):
        codec.encode_qr(text)
    with pytest.raises(errors.EncodingError):
        codec.encode_barcode(text)


def test_barcode_rejects_non_ascii(codec):
    with pytest.raises(errors.EncodingError):
        codec.encode_barcode("Café")


def test_qr_rejects_oversized_text(codec):
    with pytest.raises(errors.EncodingError):
        codec.encode_qr("x" * 5000)


def test_decode_rejects_non_image(codec):
    with pytest.raises(errors.DecodeError):
        codec.decode(b"definitely not a png")
    with pytest.raises(errors.DecodeError):
        codec.decode(b"")


def test_decode_blank_image_finds_nothing(codec):
    buffer = BytesIO()
    Image.new("L", (200, 200), 255).save(buffer, format="PNG")
    with pytest.raises(errors.DecodeError):
        codec.decode(buffer.getvalue())


def test_decode_base64_accepts_data_url(codec):
    encoded = to_base64(codec.encode_qr("INV:9:Webcam"))
    assert codec.decode_base64(encoded) == "INV:9:Webcam"
    assert codec.decode_base64(f"data:image/png;base64,{encoded}") == "INV:9:Webcam"


def test_decode_base64_rejects_bad_input(codec):
    with pytest.raises(errors.DecodeError):
        codec.decode_base64("not base64 at all!")
    with pytest.raises(errors.DecodeError):
        codec.decode_base64(base64.b64encode(b"plain text").decode())


def test_codec_delegates_item_identity(codec):
    assert codec.unique_barcode(5) == "ITEM000005"
    assert codec.qr_payload(5, "Desk") == "INV:5:Desk"

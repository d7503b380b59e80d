import base64
import binascii
import logging
import re
from io import BytesIO
from typing import Optional

import qrcode
import zxingcpp
from barcode import Code128
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter
from PIL import Image, ImageDraw, UnidentifiedImageError
from qrcode.exceptions import DataOverflowError

from . import codes, errors
from .config import settings

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

# Quiet zone around a QR symbol, in modules
QR_BORDER = 4
# Quiet zone either side of a linear barcode, in modules
BARCODE_QUIET_MODULES = 10

_DATA_URL_PREFIX = re.compile(r"^data:[^;,]*;base64,", re.IGNORECASE)


class BarcodeCodec:
    """Renders Code 128 / QR images as PNG bytes and reads them back.

    Encoding goes through python-barcode and qrcode, decoding through zxing-cpp.
    Instances hold only rendering parameters, so one instance can be shared
    across requests.
    """

    def __init__(
        self,
        qr_width: int = settings.qr_code_width,
        qr_height: int = settings.qr_code_height,
        label_size: int = settings.qr_label_size,
        error_correction: str = settings.qr_error_correction,
        module_width: float = settings.barcode_module_width,
        module_height: float = settings.barcode_module_height,
        dpi: int = settings.barcode_dpi,
    ):
        if error_correction not in ERROR_CORRECTION_LEVELS:
            raise ValueError(f"Unknown QR error correction level: {error_correction}")
        self.qr_width = qr_width
        self.qr_height = qr_height
        self.label_size = label_size
        self.error_correction = ERROR_CORRECTION_LEVELS[error_correction]
        self.barcode_options = {
            "module_width": module_width,
            "module_height": module_height,
            "quiet_zone": module_width * BARCODE_QUIET_MODULES,
            "dpi": dpi,
            "write_text": False,
        }

    # Item identity

    def unique_barcode(self, item_id: int) -> str:
        return codes.format_barcode(item_id)

    def qr_payload(self, item_id: int, name: str) -> str:
        return codes.format_qr_payload(item_id, name)

    # Encoding

    def encode_barcode(self, text: str) -> bytes:
        """Render text as a Code 128 PNG"""
        if not text or not text.strip():
            raise errors.EncodingError("Barcode text must not be empty")
        if any(ord(char) > 127 for char in text):
            raise errors.EncodingError("Code 128 only supports ASCII characters")

        try:
            image = Code128(text, writer=ImageWriter()).render(writer_options=self.barcode_options)
        except (BarcodeError, KeyError, ValueError) as exc:
            raise errors.EncodingError(f"Cannot encode {text!r} as Code 128: {exc}") from exc
        return _to_png(image)

    def encode_qr(self, text: str, width: Optional[int] = None, height: Optional[int] = None) -> bytes:
        """Render text as a QR code PNG of (at least) width x height pixels"""
        if not text or not text.strip():
            raise errors.EncodingError("QR code text must not be empty")
        width = width or self.qr_width
        height = height or self.qr_height
        if width <= 0 or height <= 0:
            raise errors.EncodingError(f"Invalid QR code size {width}x{height}")

        qr = qrcode.QRCode(error_correction=self.error_correction, border=QR_BORDER)
        qr.add_data(text)
        try:
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as exc:
            raise errors.EncodingError("Text is too long for a QR code") from exc

        return _to_png(_draw_matrix(qr.get_matrix(), width, height))

    def encode_qr_label(self, payload: str) -> bytes:
        """Render a QR payload at printable label size"""
        return self.encode_qr(payload, self.label_size, self.label_size)

    # Decoding

    def decode(self, data: bytes) -> str:
        """Read the first barcode or QR code found in an image"""
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
            raise errors.DecodeError("Uploaded data is not a readable image") from exc

        gray = image.convert("L")
        result = zxingcpp.read_barcode(gray, try_rotate=True, try_downscale=True, is_pure=True)
        if result is None:
            # Not a bare symbol; scan the whole scene instead
            logger.debug("Pure-symbol pass found nothing, retrying with a full scan")
            result = zxingcpp.read_barcode(gray, try_rotate=True, try_downscale=True)
        if result is None or not result.text:
            raise errors.DecodeError("No barcode or QR code found in image")

        logger.debug(f"Decoded {result.format} symbol")
        return result.text

    def decode_base64(self, data: str) -> str:
        """Decode a Base64 image (optionally a data: URL) and read it"""
        payload = _DATA_URL_PREFIX.sub("", (data or "").strip())
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise errors.DecodeError("Image is not valid Base64") from exc
        return self.decode(raw)


def to_base64(image: bytes) -> str:
    return base64.b64encode(image).decode("ascii")


def _to_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _draw_matrix(matrix, width: int, height: int) -> Image.Image:
    """Scale a module matrix by a whole factor and center it on a white canvas"""
    size = len(matrix)
    out_width = max(width, size)
    out_height = max(height, size)
    scale = max(1, min(out_width // size, out_height // size))
    left = (out_width - size * scale) // 2
    top = (out_height - size * scale) // 2

    image = Image.new("L", (out_width, out_height), 255)
    draw = ImageDraw.Draw(image)
    for y, row in enumerate(matrix):
        for x, dark in enumerate(row):
            if dark:
                x0 = left + x * scale
                y0 = top + y * scale
                draw.rectangle([x0, y0, x0 + scale - 1, y0 + scale - 1], fill=0)
    return image

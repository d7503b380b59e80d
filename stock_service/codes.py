import re
from typing import Optional, Tuple

from . import errors

BARCODE_PREFIX = "ITEM"
QR_PAYLOAD_TAG = "INV"

_DIGITS = re.compile(r"^[0-9]+$")
_GENERATED_BARCODE = re.compile(rf"^{BARCODE_PREFIX}[0-9]{{6,}}$")


def is_valid_barcode(value: Optional[str]) -> bool:
    """Return True if value is a non-blank, digits-only barcode payload"""
    if value is None or not value.strip():
        return False
    return bool(_DIGITS.match(value.strip()))


def is_generated_barcode(value: str) -> bool:
    """Return True if value falls in the namespace reserved for id-derived barcodes"""
    return bool(_GENERATED_BARCODE.match(value or ""))


def format_barcode(item_id: int) -> str:
    """Build the barcode assigned to an item, e.g. 42 -> ITEM000042"""
    if item_id is None or item_id < 0:
        raise errors.ValidationError(f"Cannot build a barcode for item id {item_id!r}")
    return f"{BARCODE_PREFIX}{item_id:06d}"


def format_qr_payload(item_id: int, name: str) -> str:
    """Build the QR payload for an item, e.g. INV:42:Laptop"""
    return f"{QR_PAYLOAD_TAG}:{item_id}:{name}"


def parse_qr_payload(payload: str) -> Tuple[int, str]:
    """Split a QR payload back into (item_id, name)"""
    parts = (payload or "").split(":", 2)
    if len(parts) != 3 or parts[0] != QR_PAYLOAD_TAG:
        raise errors.ValidationError(f"Not an inventory QR payload: {payload!r}")
    try:
        item_id = int(parts[1])
    except ValueError:
        raise errors.ValidationError(f"Invalid item id in QR payload: {payload!r}")
    return item_id, parts[2]

"""Exceptions raised by the stock service core.

Routes translate these into HTTP responses; nothing here is fatal to the process.
"""


class InventoryError(Exception):
    """Base class for stock service errors"""


class ValidationError(InventoryError):
    """Input is missing or malformed (negative quantity, blank name, ...)"""


class NotFoundError(InventoryError):
    """Referenced item does not exist"""


class EncodingError(InventoryError):
    """Text cannot be rendered as the requested symbol"""


class DecodeError(InventoryError):
    """Image is unreadable or contains no recognizable symbol"""

from typing import Dict, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import settings


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


class InventoryItemBase(BaseModel):
    """Base schema for inventory items"""
    name: str = Field(..., min_length=1, max_length=200, examples=["Laptop"])
    quantity: int = Field(..., ge=0, examples=[15])
    category: str = Field(..., min_length=1, max_length=100, examples=["Electronics"])
    image: Optional[str] = Field(None, max_length=500, examples=["https://via.placeholder.com/150x150?text=Laptop"])

    @field_validator("name", "category")
    @classmethod
    def must_not_be_blank(cls, v):
        return _not_blank(v)


class InventoryItemCreate(InventoryItemBase):
    """Schema for creating an inventory item"""
    barcode: Optional[str] = Field(None, max_length=100, examples=["ITEM000001"])
    low_stock_threshold: Optional[int] = Field(None, ge=0, examples=[10])

    @field_validator("barcode")
    @classmethod
    def blank_barcode_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class InventoryItemUpdate(InventoryItemBase):
    """Schema for replacing an inventory item's editable fields"""
    low_stock_threshold: int = Field(settings.low_stock_threshold, ge=0, examples=[10])


class InventoryItem(InventoryItemBase):
    """Schema for reading an inventory item"""
    id: int
    barcode: Optional[str]
    qr_code: Optional[str]
    low_stock_threshold: int
    low_stock: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    """Point-in-time inventory summary"""
    total_items: int = 0
    total_quantity: int = 0
    low_stock_items: int = 0
    category_counts: Dict[str, int] = Field(default_factory=dict)


class TextRequest(BaseModel):
    """Text to render as a barcode"""
    text: Optional[str] = Field(None, examples=["ITEM000001"])


class QRCodeRequest(TextRequest):
    """Text to render as a QR code, with an optional pixel size"""
    width: Optional[int] = Field(None, gt=0, le=2000)
    height: Optional[int] = Field(None, gt=0, le=2000)


class BarcodeImage(BaseModel):
    barcode: str
    text: str


class QRCodeImage(BaseModel):
    qr_code: str
    text: str


class Base64ImageRequest(BaseModel):
    """Base64-encoded image, optionally as a data: URL"""
    image: Optional[str] = None


class DecodeResult(BaseModel):
    success: bool
    decoded_text: Optional[str] = None
    inventory_item: Optional[InventoryItem] = None
    error: Optional[str] = None


class QRLabel(BaseModel):
    qr_code: str
    item_name: str
    item_id: int
    barcode: Optional[str]


class BarcodeValidationRequest(BaseModel):
    barcode: Optional[str] = None


class BarcodeValidationResult(BaseModel):
    valid: bool
    barcode: Optional[str]
    exists: Optional[bool] = None
    existing_item: Optional[InventoryItem] = None

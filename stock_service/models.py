from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.sql import func

from .config import settings
from .database import Base


class InventoryItem(Base):
    """Inventory item database model"""
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_inventory_items_threshold_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=False, index=True)
    image = Column(String, nullable=True)
    barcode = Column(String, unique=True, index=True, nullable=True)
    qr_code = Column(String, index=True, nullable=True)
    low_stock_threshold = Column(Integer, nullable=False, default=settings.low_stock_threshold)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def low_stock(self) -> bool:
        """True when quantity has fallen to or below the item's threshold"""
        if self.quantity is None or self.low_stock_threshold is None:
            return False
        return self.quantity <= self.low_stock_threshold

    def __repr__(self):
        return f"<InventoryItem id={self.id} name={self.name!r} barcode={self.barcode!r}>"

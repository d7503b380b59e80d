from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models

Item = models.InventoryItem


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ItemStore:
    """Query surface over the inventory_items table for one session"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Item)

    # Lookups

    def get_all(self) -> List[Item]:
        return self._query().order_by(Item.id).all()

    def get(self, item_id: int) -> Optional[Item]:
        return self._query().filter(Item.id == item_id).first()

    def get_by_barcode(self, barcode: str) -> Optional[Item]:
        return self._query().filter(Item.barcode == barcode).first()

    def get_by_qr_code(self, qr_code: str) -> Optional[Item]:
        return self._query().filter(Item.qr_code == qr_code).first()

    def get_by_category(self, category: str) -> List[Item]:
        return self._query().filter(Item.category == category).order_by(Item.id).all()

    def search_by_name(self, fragment: str) -> List[Item]:
        """Case-insensitive substring match on name"""
        pattern = f"%{_escape_like(fragment.lower())}%"
        return (
            self._query()
            .filter(func.lower(Item.name).like(pattern, escape="\\"))
            .order_by(Item.id)
            .all()
        )

    def get_low_stock(self) -> List[Item]:
        return (
            self._query()
            .filter(Item.quantity <= Item.low_stock_threshold)
            .order_by(Item.id)
            .all()
        )

    def get_low_stock_by_threshold(self, threshold: int) -> List[Item]:
        return self._query().filter(Item.quantity <= threshold).order_by(Item.id).all()

    def exists_by_barcode(self, barcode: str) -> bool:
        return self.db.query(self._query().filter(Item.barcode == barcode).exists()).scalar()

    def exists_by_qr_code(self, qr_code: str) -> bool:
        return self.db.query(self._query().filter(Item.qr_code == qr_code).exists()).scalar()

    # Aggregates

    def count(self) -> int:
        return self.db.query(func.count(Item.id)).scalar()

    def total_quantity(self) -> int:
        return self.db.query(func.coalesce(func.sum(Item.quantity), 0)).scalar()

    def count_low_stock(self) -> int:
        return (
            self.db.query(func.count(Item.id))
            .filter(Item.quantity <= Item.low_stock_threshold)
            .scalar()
        )

    def count_by_category(self) -> Dict[str, int]:
        rows = self.db.query(Item.category, func.count(Item.id)).group_by(Item.category).all()
        return {category: count for category, count in rows}

    # Persistence

    def add(self, item: Item) -> Item:
        """Stage a new item and flush so the database assigns its id"""
        self.db.add(item)
        self.db.flush()
        return item

    def save(self, item: Item) -> Item:
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item: Item) -> None:
        self.db.delete(item)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

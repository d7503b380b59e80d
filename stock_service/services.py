import logging
from typing import List, Optional

from . import codes, errors, models, schemas
from .codec import BarcodeCodec
from .config import settings
from .store import ItemStore

logger = logging.getLogger(__name__)


def _validate_fields(name, quantity, category, threshold):
    if name is None or not str(name).strip():
        raise errors.ValidationError("Name is required")
    if category is None or not str(category).strip():
        raise errors.ValidationError("Category is required")
    if quantity is None:
        raise errors.ValidationError("Quantity is required")
    if quantity < 0:
        raise errors.ValidationError("Quantity must be non-negative")
    if threshold is not None and threshold < 0:
        raise errors.ValidationError("Low stock threshold must be non-negative")


class ItemService:
    """Creates, updates and deletes items, keeping their barcode and QR payload
    consistent with the database id.

    An item has no codes until its first flush assigns an id; ``create`` then
    derives the barcode (unless the caller supplied one) and the QR payload and
    commits both in the same transaction.
    """

    def __init__(self, store: ItemStore, codec: BarcodeCodec, default_threshold: int = settings.low_stock_threshold):
        self.store = store
        self.codec = codec
        self.default_threshold = default_threshold

    # Reads

    def get(self, item_id: int) -> models.InventoryItem:
        item = self.store.get(item_id)
        if item is None:
            raise errors.NotFoundError(f"Inventory item {item_id} not found")
        return item

    def get_by_barcode(self, barcode: str) -> models.InventoryItem:
        item = self.store.get_by_barcode(barcode)
        if item is None:
            raise errors.NotFoundError(f"No inventory item with barcode {barcode}")
        return item

    def get_by_qr_code(self, qr_code: str) -> models.InventoryItem:
        item = self.store.get_by_qr_code(qr_code)
        if item is None:
            raise errors.NotFoundError(f"No inventory item with QR code {qr_code}")
        return item

    def find_by_scan(self, text: str) -> Optional[models.InventoryItem]:
        """Match decoded scanner text against barcodes first, then QR payloads"""
        return self.store.get_by_barcode(text) or self.store.get_by_qr_code(text)

    def list_low_stock(self, threshold: Optional[int] = None) -> List[models.InventoryItem]:
        if threshold is None:
            return self.store.get_low_stock()
        if threshold < 0:
            raise errors.ValidationError("Threshold must be non-negative")
        return self.store.get_low_stock_by_threshold(threshold)

    # Writes

    def create(self, draft: schemas.InventoryItemCreate) -> models.InventoryItem:
        threshold = draft.low_stock_threshold
        if threshold is None:
            threshold = self.default_threshold
        _validate_fields(draft.name, draft.quantity, draft.category, threshold)

        barcode = draft.barcode.strip() if draft.barcode and draft.barcode.strip() else None
        if barcode and codes.is_generated_barcode(barcode):
            raise errors.ValidationError(f"Barcode {barcode} is reserved for generated item barcodes")
        if barcode and self.store.exists_by_barcode(barcode):
            raise errors.ValidationError(f"Barcode {barcode} is already in use")

        item = models.InventoryItem(
            name=draft.name.strip(),
            quantity=draft.quantity,
            category=draft.category.strip(),
            image=draft.image,
            barcode=barcode,
            low_stock_threshold=threshold,
        )
        self.store.add(item)

        if not item.barcode:
            generated = self.codec.unique_barcode(item.id)
            if self.store.exists_by_barcode(generated):
                self.store.rollback()
                raise errors.ValidationError(f"Generated barcode {generated} is already in use")
            item.barcode = generated
        item.qr_code = self.codec.qr_payload(item.id, item.name)

        item = self.store.save(item)
        logger.info(f"Created inventory item {item.id} with barcode {item.barcode}")
        return item

    def update(self, item_id: int, changes: schemas.InventoryItemUpdate) -> models.InventoryItem:
        item = self.get(item_id)
        _validate_fields(changes.name, changes.quantity, changes.category, changes.low_stock_threshold)

        new_name = changes.name.strip()
        renamed = new_name != item.name

        item.name = new_name
        item.quantity = changes.quantity
        item.category = changes.category.strip()
        item.image = changes.image
        item.low_stock_threshold = changes.low_stock_threshold
        if renamed:
            item.qr_code = self.codec.qr_payload(item.id, new_name)
            logger.info(f"Regenerated QR payload for renamed item {item.id}")

        return self.store.save(item)

    def update_quantity(self, item_id: int, quantity: int) -> models.InventoryItem:
        item = self.get(item_id)
        if quantity is None or quantity < 0:
            raise errors.ValidationError("Quantity must be non-negative")
        item.quantity = quantity
        return self.store.save(item)

    def delete(self, item_id: int) -> bool:
        """Delete an item; returns False if it did not exist"""
        item = self.store.get(item_id)
        if item is None:
            return False
        self.store.delete(item)
        logger.info(f"Deleted inventory item {item_id}")
        return True


class DashboardService:
    """Recomputes dashboard figures from the store on every call.

    The four reads are not wrapped in a transaction, so a concurrent write can
    make the figures disagree slightly.
    """

    def __init__(self, store: ItemStore):
        self.store = store

    def compute_stats(self) -> schemas.DashboardStats:
        return schemas.DashboardStats(
            total_items=self.store.count(),
            total_quantity=self.store.total_quantity(),
            low_stock_items=self.store.count_low_stock(),
            category_counts=self.store.count_by_category(),
        )

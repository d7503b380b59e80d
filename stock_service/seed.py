import logging

from sqlalchemy.orm import Session

from . import schemas
from .codec import BarcodeCodec
from .services import ItemService
from .store import ItemStore

logger = logging.getLogger(__name__)

SAMPLE_ITEMS = [
    ("Laptop", 15, "Electronics"),
    ("Mouse", 50, "Electronics"),
    ("Keyboard", 25, "Electronics"),
    ("Monitor", 8, "Electronics"),
    ("Desk Chair", 12, "Furniture"),
    ("Office Desk", 5, "Furniture"),
    ("Printer Paper", 200, "Office Supplies"),
    ("Pens", 150, "Office Supplies"),
    ("Notebooks", 75, "Office Supplies"),
    ("Coffee Mug", 30, "Kitchen"),
    ("Water Bottle", 45, "Kitchen"),
    ("USB Cable", 100, "Electronics"),
    ("Headphones", 20, "Electronics"),
    ("Webcam", 10, "Electronics"),
    ("Stapler", 25, "Office Supplies"),
]


def _placeholder_image(name: str) -> str:
    return f"https://via.placeholder.com/150x150?text={name.split()[-1]}"


def load_sample_data(db: Session, codec: BarcodeCodec) -> int:
    """Populate an empty inventory with sample items; returns how many were created"""
    store = ItemStore(db)
    if store.count() > 0:
        logger.info("Inventory already populated, skipping sample data")
        return 0

    service = ItemService(store, codec)
    for name, quantity, category in SAMPLE_ITEMS:
        service.create(
            schemas.InventoryItemCreate(
                name=name,
                quantity=quantity,
                category=category,
                image=_placeholder_image(name),
                low_stock_threshold=10,
            )
        )
    logger.info(f"Loaded {len(SAMPLE_ITEMS)} sample inventory items")
    return len(SAMPLE_ITEMS)

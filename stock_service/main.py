import logging
from contextlib import asynccontextmanager
from typing import List
from fastapi import FastAPI, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session
from fastapi.middleware.cors import CORSMiddleware

from . import database, errors, models, schemas
from .codec import BarcodeCodec, to_base64
from .codes import is_valid_barcode
from .config import settings
from .database import get_db
from .seed import load_sample_data
from .services import DashboardService, ItemService
from .store import ItemStore

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

codec = BarcodeCodec()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    models.Base.metadata.create_all(bind=database.engine)
    if settings.seed_sample_data:
        db = database.SessionLocal()
        try:
            load_sample_data(db, codec)
        finally:
            db.close()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Stock Service",
    description="Tracks inventory items and their barcodes and QR codes",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_codec() -> BarcodeCodec:
    return codec


def get_item_service(db: Session = Depends(get_db)) -> ItemService:
    return ItemService(ItemStore(db), codec)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(ItemStore(db))


def _reject(status_code: int, exc: Exception) -> HTTPException:
    logger.warning(str(exc))
    return HTTPException(status_code=status_code, detail=str(exc))


@app.get("/", tags=["Root"])
def read_root():
    """Root endpoint for health checks"""
    return {"status": "ok", "service": "stock-service"}


# Items

@app.get("/items", response_model=List[schemas.InventoryItem], tags=["Items"])
def read_items(service: ItemService = Depends(get_item_service)):
    """Get all inventory items"""
    logger.info("Fetching all inventory items")
    return service.store.get_all()


@app.post("/items", response_model=schemas.InventoryItem, status_code=status.HTTP_201_CREATED, tags=["Items"])
def create_item(item: schemas.InventoryItemCreate, service: ItemService = Depends(get_item_service)):
    """Create an item and assign its barcode and QR payload"""
    logger.info(f"Creating inventory item: {item.name}")
    try:
        return service.create(item)
    except errors.ValidationError as exc:
        raise _reject(status.HTTP_400_BAD_REQUEST, exc)


@app.get("/items/low-stock", response_model=List[schemas.InventoryItem], tags=["Items"])
def read_low_stock_items(service: ItemService = Depends(get_item_service)):
    """Get items at or below their own low stock threshold"""
    logger.info("Fetching low stock items")
    return service.list_low_stock()


@app.get("/items/low-stock/{threshold}", response_model=List[schemas.InventoryItem], tags=["Items"])
def read_low_stock_items_by_threshold(threshold: int, service: ItemService = Depends(get_item_service)):
    """Get items at or below the given quantity, ignoring per-item thresholds"""
    logger.info(f"Fetching items with quantity <= {threshold}")
    try:
        return service.list_low_stock(threshold)
    except errors.ValidationError as exc:
        raise _reject(status.HTTP_400_BAD_REQUEST, exc)


@app.get("/items/search", response_model=List[schemas.InventoryItem], tags=["Items"])
def search_items(name: str = Query(..., min_length=1), service: ItemService = Depends(get_item_service)):
    """Search items by name (case-insensitive substring)"""
    logger.info(f"Searching inventory items for name: {name}")
    return service.store.search_by_name(name)


@app.get("/items/category/{category}", response_model=List[schemas.InventoryItem], tags=["Items"])
def read_items_by_category(category: str, service: ItemService = Depends(get_item_service)):
    """Get items in a category (exact match)"""
    logger.info(f"Fetching inventory items in category: {category}")
    return service.store.get_by_category(category)


@app.get("/items/dashboard/stats", response_model=schemas.DashboardStats, tags=["Items"])
def read_dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    """Summary figures for the dashboard"""
    logger.info("Computing dashboard stats")
    return service.compute_stats()


@app.get("/items/barcode/{barcode}", response_model=schemas.InventoryItem, tags=["Items"])
def read_item_by_barcode(barcode: str, service: ItemService = Depends(get_item_service)):
    """Get item by barcode"""
    logger.info(f"Fetching inventory item with barcode: {barcode}")
    try:
        return service.get_by_barcode(barcode)
    except errors.NotFoundError as exc:
        raise _reject(status.HTTP_404_NOT_FOUND, exc)


@app.get("/items/qr/{qr_code:path}", response_model=schemas.InventoryItem, tags=["Items"])
def read_item_by_qr_code(qr_code: str, service: ItemService = Depends(get_item_service)):
    """Get item by QR payload"""
    logger.info(f"Fetching inventory item with QR code: {qr_code}")
    try:
        return service.get_by_qr_code(qr_code)
    except errors.NotFoundError as exc:
        raise _reject(status.HTTP_404_NOT_FOUND, exc)


@app.get("/items/{item_id}", response_model=schemas.InventoryItem, tags=["Items"])
def read_item(item_id: int, service: ItemService = Depends(get_item_service)):
    """Get item by ID"""
    logger.info(f"Fetching inventory item with ID: {item_id}")
    try:
        return service.get(item_id)
    except errors.NotFoundError as exc:
        raise _reject(status.HTTP_404_NOT_FOUND, exc)


@app.put("/items/{item_id}", response_model=schemas.InventoryItem, tags=["Items"])
def update_item(item_id: int, item: schemas.InventoryItemUpdate, service: ItemService = Depends(get_item_service)):
    """Replace an item's editable fields"""
    logger.info(f"Updating inventory item with ID: {item_id}")
    try:
        return service.update(item_id, item)
    except errors.NotFoundError as exc:
        raise _reject(status.HTTP_404_NOT_FOUND, exc)
    except errors.ValidationError as exc:
        raise _reject(status.HTTP_400_BAD_REQUEST, exc)


@app.patch("/items/{item_id}/quantity", response_model=schemas.InventoryItem, tags=["Items"])
def update_item_quantity(item_id: int, quantity: int, service: ItemService = Depends(get_item_service)):
    """Set an item's quantity"""
    logger.info(f"Setting quantity of inventory item {item_id} to {quantity}")
    try:
        return service.update_quantity(item_id, quantity)
    except errors.NotFoundError as exc:
        raise _reject(status.HTTP_404_NOT_FOUND, exc)
    except errors.ValidationError as exc:
        raise _reject(status.HTTP_400_BAD_REQUEST, exc)


@app.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Items"])
def delete_item(item_id: int, service: ItemService = Depends(get_item_service)):
    """Delete an item"""
    logger.info(f"Deleting inventory item with ID: {item_id}")
    if not service.delete(item_id):
        logger.warning(f"Inventory item {item_id} not found")
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return None


# Barcodes

@app.post("/barcode/generate", response_model=schemas.BarcodeImage, tags=["Barcodes"])
def generate_barcode(request: schemas.TextRequest, codec: BarcodeCodec = Depends(get_codec)):
    """Render text as a Base64 PNG Code 128 barcode"""
    if not request.text or not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    try:
        image = codec.encode_barcode(request.text)
    except errors.EncodingError as exc:
        raise _reject(status.HTTP_400_BAD_REQUEST, exc)
    return {"barcode": to_base64(image), "text": request.text}


@app.post("/barcode/qr/generate", response_model=schemas.QRCodeImage, tags=["Barcodes"])
def generate_qr_code(request: schemas.QRCodeRequest, codec: BarcodeCodec = Depends(get_codec)):
    """Render text as a Base64 PNG QR code"""
    if not request.text or not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    try:
        image = codec.encode_qr(request.text, request.width, request.height)
    except errors.EncodingError as exc:
        raise _reject(status.HTTP_400_BAD_REQUEST, exc)
    return {"qr_code": to_base64(image), "text": request.text}


def _decode_and_match(decode, data, service: ItemService) -> schemas.DecodeResult:
    try:
        text = decode(data)
    except errors.DecodeError as exc:
        logger.warning(f"Failed to decode barcode: {exc}")
        return schemas.DecodeResult(success=False, error=f"Failed to decode barcode: {exc}")

    item = service.find_by_scan(text)
    return schemas.DecodeResult(
        success=True,
        decoded_text=text,
        inventory_item=schemas.InventoryItem.model_validate(item) if item else None,
    )


@app.post("/barcode/decode", response_model=schemas.DecodeResult, tags=["Barcodes"])
async def decode_barcode_upload(
    image: UploadFile = File(...),
    codec: BarcodeCodec = Depends(get_codec),
    service: ItemService = Depends(get_item_service),
):
    """Decode a barcode or QR code from an uploaded image file"""
    data = await image.read()
    if not data:
        raise HTTPException(status_code=400, detail="Image is required")
    logger.info(f"Decoding uploaded image {image.filename} ({len(data)} bytes)")
    return _decode_and_match(codec.decode, data, service)


@app.post("/barcode/decode/base64", response_model=schemas.DecodeResult, tags=["Barcodes"])
def decode_barcode_base64(
    request: schemas.Base64ImageRequest,
    codec: BarcodeCodec = Depends(get_codec),
    service: ItemService = Depends(get_item_service),
):
    """Decode a barcode or QR code from a Base64 image"""
    if not request.image or not request.image.strip():
        raise HTTPException(status_code=400, detail="Image is required")
    logger.info("Decoding Base64 image")
    return _decode_and_match(codec.decode_base64, request.image, service)


@app.get("/barcode/items/{item_id}/qr-label", response_model=schemas.QRLabel, tags=["Barcodes"])
def read_qr_label(
    item_id: int,
    codec: BarcodeCodec = Depends(get_codec),
    service: ItemService = Depends(get_item_service),
):
    """Printable QR label for an item"""
    logger.info(f"Building QR label for inventory item {item_id}")
    try:
        item = service.get(item_id)
    except errors.NotFoundError as exc:
        raise _reject(status.HTTP_404_NOT_FOUND, exc)

    payload = codec.qr_payload(item.id, item.name)
    try:
        image = codec.encode_qr_label(payload)
    except errors.EncodingError as exc:
        raise _reject(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)
    return {
        "qr_code": to_base64(image),
        "item_name": item.name,
        "item_id": item.id,
        "barcode": item.barcode,
    }


@app.post("/barcode/validate", response_model=schemas.BarcodeValidationResult, tags=["Barcodes"])
def validate_barcode(request: schemas.BarcodeValidationRequest, service: ItemService = Depends(get_item_service)):
    """Check a barcode's format and whether an item already uses it"""
    valid = is_valid_barcode(request.barcode)
    result = schemas.BarcodeValidationResult(valid=valid, barcode=request.barcode)
    if valid:
        existing = service.store.get_by_barcode(request.barcode.strip())
        result.exists = existing is not None
        if existing is not None:
            result.existing_item = schemas.InventoryItem.model_validate(existing)
    return result


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stock_service.main:app", host="0.0.0.0", port=8000, reload=True)

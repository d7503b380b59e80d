import os


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    """Environment-driven settings for the stock service"""

    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./inventory.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    cors_origins: list = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    # Stock levels
    low_stock_threshold: int = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
    seed_sample_data: bool = _get_bool("SEED_SAMPLE_DATA", "true")

    # QR code rendering (pixels)
    qr_code_width: int = int(os.getenv("QR_CODE_WIDTH", "300"))
    qr_code_height: int = int(os.getenv("QR_CODE_HEIGHT", "300"))
    qr_label_size: int = int(os.getenv("QR_LABEL_SIZE", "400"))
    qr_error_correction: str = os.getenv("QR_ERROR_CORRECTION", "L").upper()

    # Linear barcode rendering (millimetres at BARCODE_DPI)
    barcode_module_width: float = float(os.getenv("BARCODE_MODULE_WIDTH", "0.254"))
    barcode_module_height: float = float(os.getenv("BARCODE_MODULE_HEIGHT", "8.47"))
    barcode_dpi: int = int(os.getenv("BARCODE_DPI", "300"))


settings = Settings()

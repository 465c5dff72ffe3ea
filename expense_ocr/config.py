from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Expense OCR"
    DEBUG: bool = False

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # OCR
    TESSERACT_CMD: str = "tesseract"
    OCR_LANGUAGE: str = "eng"
    OCR_CONFIG: str = r"--oem 3 --psm 6"
    MAX_IMAGE_MB: int = 10

    # Acceptance policy for parsed receipts
    MIN_OVERALL_CONFIDENCE: int = 40
    RAW_TEXT_PREVIEW_CHARS: int = 500

    # Exchange rates (free tier: 1,500 requests/month)
    EXCHANGE_RATE_API_BASE: str = "https://open.exchangerate-api.com/v6/latest"
    EXCHANGE_RATE_CACHE_SECONDS: int = 3600
    EXCHANGE_RATE_TIMEOUT: float = 10.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

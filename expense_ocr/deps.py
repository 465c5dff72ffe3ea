"""
Service providers for FastAPI dependency injection.

Tests swap these out through ``app.dependency_overrides``.
"""

from functools import lru_cache

from expense_ocr.services.exchange_rates import ExchangeRateService
from expense_ocr.services.ocr import OCRService
from expense_ocr.services.parser import ReceiptParser


def get_parser() -> ReceiptParser:
    return ReceiptParser()


def get_ocr_service() -> OCRService:
    return OCRService()


@lru_cache(maxsize=1)
def get_exchange_rate_service() -> ExchangeRateService:
    # Shared so the rate cache survives across requests
    return ExchangeRateService()

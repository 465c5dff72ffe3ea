"""
Pydantic models for the receipt analysis API.

Field names are serialized in camelCase for the portal frontend.
"""

import datetime as dt
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional

from expense_ocr.models.parsed_receipt import ParsedReceipt


class CamelModel(BaseModel):
    """Base model that reads snake_case and writes camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeReceiptRequest(CamelModel):
    """Model for a receipt analysis request."""
    image: Optional[str] = None  # base64 data URL


class ReceiptData(CamelModel):
    """Extracted receipt fields."""
    amount: Optional[float] = None
    currency: str = "USD"
    date: Optional[dt.date] = None
    vendor_name: str = ""
    payment_method: str = "Unknown"
    amount_usd: Optional[float] = Field(default=None, alias="amountUSD")

    @classmethod
    def from_parsed(cls, parsed: ParsedReceipt, amount_usd=None) -> "ReceiptData":
        return cls(
            amount=float(parsed.amount) if parsed.amount is not None else None,
            currency=parsed.currency,
            date=parsed.date,
            vendor_name=parsed.vendor_name,
            payment_method=parsed.payment_method,
            amount_usd=float(amount_usd) if amount_usd is not None else None,
        )


class ConfidenceBreakdown(CamelModel):
    """Overall and per-field confidence, each 0-100."""
    overall: int
    amount: int
    date: int
    vendor: int
    payment: int


class PartialData(CamelModel):
    """What was read from a rejected receipt, for manual entry."""
    text: str
    parsed: ReceiptData
    confidence: Dict[str, int]


class AnalyzeReceiptResponse(CamelModel):
    """Model for a successful analysis."""
    success: bool = True
    data: ReceiptData
    confidence: ConfidenceBreakdown
    ocr_confidence: float
    raw_text: str


class AnalysisFailure(CamelModel):
    """Model for a rejected analysis."""
    success: bool = False
    error: str
    message: str
    confidence: Optional[int] = None
    partial_data: Optional[PartialData] = None


class CurrencyOptionResponse(CamelModel):
    """A supported currency."""
    code: str
    name: str
    symbol: str


class CurrencyList(CamelModel):
    """Model for the supported currency list."""
    currencies: List[CurrencyOptionResponse]


class ConversionResponse(CamelModel):
    """Model for a USD conversion."""
    amount: float
    currency: str
    amount_usd: float = Field(alias="amountUSD")
    rate: float
    formatted: str

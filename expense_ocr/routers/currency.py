"""
Currency API router: supported currencies and USD conversion.
"""

from decimal import Decimal
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from expense_ocr.deps import get_exchange_rate_service
from expense_ocr.models.receipt import ConversionResponse, CurrencyList, CurrencyOptionResponse
from expense_ocr.services.exchange_rates import ExchangeRateService
from expense_ocr.utils.money import SUPPORTED_CURRENCIES, format_money, get_currency

router = APIRouter(prefix="/currencies", tags=["currencies"])
logger = logging.getLogger(__name__)


@router.get("", response_model=CurrencyList)
def list_currencies():
    """List the currencies accepted on expense reports."""
    return CurrencyList(currencies=[
        CurrencyOptionResponse(code=c.code, name=c.name, symbol=c.symbol)
        for c in SUPPORTED_CURRENCIES
    ])


@router.get("/convert", response_model=ConversionResponse)
def convert_to_usd(
    amount: Decimal = Query(..., ge=0),
    currency: str = Query(..., min_length=3, max_length=3),
    rates: ExchangeRateService = Depends(get_exchange_rate_service),
):
    """
    Convert an amount in a supported currency to USD.

    Args:
        amount: Amount in the source currency
        currency: ISO code of the source currency

    Returns:
        Converted amount, the rate used and a display string
    """
    option = get_currency(currency)
    if option is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported currency: {currency}"
        )

    amount_usd = rates.convert_to_usd(amount, option.code)

    logger.info("Converted amount to USD", extra={
        "currency": option.code,
        "amount": str(amount),
        "amount_usd": str(amount_usd),
    })

    return ConversionResponse(
        amount=float(amount),
        currency=option.code,
        amount_usd=float(amount_usd),
        rate=rates.get_rate(option.code),
        formatted=format_money(amount_usd, 'USD'),
    )

"""
Receipt analysis API router.

Takes a photo of a receipt, runs OCR and parsing, and decides whether the
extracted data is good enough to prefill an expense reimbursement form.
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from expense_ocr.config import settings
from expense_ocr.deps import get_exchange_rate_service, get_ocr_service, get_parser
from expense_ocr.models.parsed_receipt import ParsedReceipt
from expense_ocr.models.receipt import (
    AnalysisFailure,
    AnalyzeReceiptRequest,
    AnalyzeReceiptResponse,
    ConfidenceBreakdown,
    PartialData,
    ReceiptData,
)
from expense_ocr.services.exchange_rates import ExchangeRateService
from expense_ocr.services.ocr import OCRService, decode_data_url
from expense_ocr.services.parser import ReceiptParser
from expense_ocr.utils.scoring import REJECT_INVALID, evaluate, overall_confidence

router = APIRouter(tags=["analyze"])
logger = logging.getLogger(__name__)


def _failure(error: str, message: str, **kwargs) -> JSONResponse:
    body = AnalysisFailure(error=error, message=message, **kwargs)
    return JSONResponse(
        status_code=400,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def _partial_data(text: str, parsed: ParsedReceipt) -> PartialData:
    return PartialData(
        text=text,
        parsed=ReceiptData.from_parsed(parsed),
        confidence=parsed.confidence.as_dict(),
    )


@router.post(
    "/analyze-receipt",
    response_model=AnalyzeReceiptResponse,
    responses={400: {"model": AnalysisFailure}},
)
def analyze_receipt(
    request: AnalyzeReceiptRequest,
    parser: ReceiptParser = Depends(get_parser),
    ocr: OCRService = Depends(get_ocr_service),
    rates: ExchangeRateService = Depends(get_exchange_rate_service),
):
    """
    Analyze a receipt photo.

    This endpoint:
    1. Validates the base64 image data URL
    2. Runs OCR on the image
    3. Parses amount, currency, date, vendor and payment method
    4. Rejects receipts without an amount or with low overall confidence
    5. Returns the extracted data with a confidence breakdown

    Args:
        request: Body with ``image`` as a base64 data URL

    Returns:
        Extracted receipt data, or a 400 body with ``success: false``
    """
    if not request.image:
        raise HTTPException(status_code=400, detail="No image provided")

    try:
        mime_type, image_data = decode_data_url(request.image)
    except ValueError as e:
        logger.info("Rejected malformed image upload", extra={"error": str(e)})
        raise HTTPException(
            status_code=400,
            detail="Invalid image format. Expected base64 data URL"
        )

    size_mb = len(image_data) / (1024 * 1024)
    if size_mb > settings.MAX_IMAGE_MB:
        raise HTTPException(
            status_code=413,
            detail=f"Image too large: {size_mb:.2f}MB. Maximum: {settings.MAX_IMAGE_MB}MB"
        )

    try:
        started = time.monotonic()
        ocr_result = ocr.extract(image_data)

        logger.info("Receipt OCR finished", extra={
            "mime_type": mime_type,
            "size_kb": round(len(image_data) / 1024, 2),
            "seconds": round(time.monotonic() - started, 2),
            "ocr_confidence": ocr_result.confidence,
        })

        text = ocr_result.text
        if not text or not text.strip():
            return _failure(
                "No text detected in image",
                "Please upload a clearer image of your receipt",
            )

        parsed = parser.parse(text)
        overall = overall_confidence(parsed)
        rejection = evaluate(parsed, settings.MIN_OVERALL_CONFIDENCE)

        logger.info("Receipt parsed", extra={
            "amount": str(parsed.amount) if parsed.amount is not None else None,
            "currency": parsed.currency,
            "vendor": parsed.vendor_name,
            "date": parsed.date.isoformat() if parsed.date else None,
            "confidence": overall,
            "rejection": rejection,
        })

        if rejection == REJECT_INVALID:
            return _failure(
                "Could not extract required information",
                "Unable to find the total amount. Please upload a clearer receipt or enter manually.",
                partial_data=_partial_data(text, parsed),
            )

        if rejection is not None:
            return _failure(
                "Low confidence in extracted data",
                "The image quality is too low. Please upload a clearer photo.",
                confidence=overall,
                partial_data=_partial_data(text, parsed),
            )

        amount_usd = rates.convert_to_usd(parsed.amount, parsed.currency)

        return AnalyzeReceiptResponse(
            data=ReceiptData.from_parsed(parsed, amount_usd=amount_usd),
            confidence=ConfidenceBreakdown(overall=overall, **parsed.confidence.as_dict()),
            ocr_confidence=ocr_result.confidence,
            raw_text=text[:settings.RAW_TEXT_PREVIEW_CHARS],
        )

    except Exception as e:
        logger.error("Receipt analysis failed", extra={
            "error": str(e),
        }, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to analyze receipt: {str(e)}"
        )

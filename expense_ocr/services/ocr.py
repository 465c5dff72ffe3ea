"""
OCR service for extracting text from receipt photos.
"""

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

import pytesseract
from PIL import Image

from expense_ocr.config import settings

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r'^data:(image/[\w.+-]+);base64,(.*)$', re.DOTALL)


class OCRError(Exception):
    """Raised when the OCR engine cannot read an image."""


@dataclass(frozen=True)
class OCRResult:
    """Raw engine output: recognized text and mean word confidence (0-100)."""
    text: str
    confidence: float


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    Decode a base64 image data URL.

    Args:
        data_url: String like "data:image/jpeg;base64,/9j/4AAQ..."

    Returns:
        Tuple of (mime_type, image_bytes)

    Raises:
        ValueError: If the string is not a base64 image data URL
    """
    match = DATA_URL_PATTERN.match(data_url or '')
    if not match:
        raise ValueError("Expected a base64 image data URL")

    mime_type, payload = match.groups()
    try:
        image_data = base64.b64decode(payload.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image payload: {e}") from e

    if not image_data:
        raise ValueError("Empty image payload")

    return mime_type, image_data


def mean_word_confidence(data: Dict[str, List]) -> float:
    """
    Average Tesseract confidence over recognized words.

    Tesseract reports -1 for layout rows (blocks, lines) that carry no word;
    those and blank words are ignored.
    """
    scores = []
    for word, conf in zip(data.get('text', []), data.get('conf', [])):
        try:
            value = float(conf)
        except (TypeError, ValueError):
            continue
        if value < 0 or not str(word).strip():
            continue
        scores.append(value)

    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 2)


class OCRService:
    """Service for extracting text from receipt images."""

    def __init__(self):
        """Initialize OCR service with Tesseract configuration."""
        pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD
        self.language = settings.OCR_LANGUAGE
        self.config = settings.OCR_CONFIG

    def extract(self, image_data: bytes) -> OCRResult:
        """
        Extract text from an image using Tesseract OCR.

        Args:
            image_data: Raw image bytes (JPEG, PNG, WEBP)

        Returns:
            OCRResult with the recognized text and engine confidence

        Raises:
            OCRError: If the image cannot be opened or Tesseract fails
        """
        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()

            text = pytesseract.image_to_string(image, lang=self.language, config=self.config)
            data = pytesseract.image_to_data(
                image,
                lang=self.language,
                config=self.config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, OSError) as e:
            logger.error("OCR failed", extra={
                "bytes": len(image_data),
                "error": str(e),
            }, exc_info=True)
            raise OCRError(str(e)) from e

        result = OCRResult(text=text.strip(), confidence=mean_word_confidence(data))

        logger.info("OCR completed", extra={
            "characters": len(result.text),
            "ocr_confidence": result.confidence,
        })

        return result

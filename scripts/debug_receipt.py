"""
Debug script to see what the parser makes of OCR text.

Usage:
    python scripts/debug_receipt.py receipt.txt
    python scripts/debug_receipt.py --image receipt.jpg
"""

import argparse
import sys
from pathlib import Path

from expense_ocr.config import settings
from expense_ocr.services.ocr import OCRService
from expense_ocr.services.parser import ReceiptParser
from expense_ocr.utils.money import format_money
from expense_ocr.utils.scoring import evaluate, is_valid, overall_confidence


def main():
    parser = argparse.ArgumentParser(description="Run the receipt parser on OCR text or an image")
    parser.add_argument("path", help="Text file with OCR output, or an image with --image")
    parser.add_argument("--image", action="store_true", help="Run Tesseract on the file first")
    args = parser.parse_args()

    path = Path(args.path)
    if args.image:
        result = OCRService().extract(path.read_bytes())
        text = result.text
        print(f"OCR confidence: {result.confidence}")
    else:
        text = path.read_text(encoding="utf-8")

    print("=" * 60)
    print("EXTRACTED TEXT:")
    print("-" * 60)
    print(text)
    print("-" * 60)
    print(f"Text length: {len(text)} characters")

    parsed = ReceiptParser().parse(text)

    print("\n" + "=" * 60)
    print("PARSING ATTEMPT:")
    print("=" * 60)
    print(f"Vendor: {parsed.vendor_name or '(none)'}")
    print(f"Amount: {format_money(parsed.amount, parsed.currency)}")
    print(f"Currency: {parsed.currency}")
    print(f"Date: {parsed.date.isoformat() if parsed.date else '(none)'}")
    print(f"Payment: {parsed.payment_method}")
    print(f"Confidence: {parsed.confidence.as_dict()} overall={overall_confidence(parsed)}")
    print(f"Valid: {is_valid(parsed)}")

    rejection = evaluate(parsed, settings.MIN_OVERALL_CONFIDENCE)
    print(f"Decision: {'accept' if rejection is None else rejection}")

    return 0 if rejection is None else 1


if __name__ == "__main__":
    sys.exit(main())

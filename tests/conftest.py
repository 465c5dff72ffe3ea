from datetime import date

import pytest

from expense_ocr.services.parser import ReceiptParser

# Fixed "today" so date range checks are deterministic
TODAY = date(2024, 6, 1)


@pytest.fixture
def parser():
    return ReceiptParser(today=lambda: TODAY)

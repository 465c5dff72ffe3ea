"""
Expense OCR

Turns photographed receipts into prefilled expense reimbursement data.
"""

__version__ = "0.1.0"

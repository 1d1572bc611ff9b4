from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class Currency(str, Enum):
    EUR = "EUR"
    USD = "USD"


class DocumentType(str, Enum):
    QUOTE = "quote"
    INVOICE = "invoice"
    RECEIPT = "receipt"


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CLOSED = "closed"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    PARTIALLY_PAID = "partial-paid"
    OVERDUE = "overdue"
    CLOSED = "closed"


class QuantityType(str, Enum):
    IMPLICIT = "implicit"
    EXPLICIT = "explicit"


class ReceiptDateSource(str, Enum):
    """Which date places a receipt on the timeline of its lineage."""

    RECEIPT_DATE = "receipt_date"
    INVOICE_ISSUE_DATE = "invoice_issue_date"


class NegativeTotalPolicy(str, Enum):
    """What to do when discounts push the subtotal below zero."""

    ALLOW = "allow"
    CLAMP = "clamp"
    REJECT = "reject"


class DateBase(str, Enum):
    """Bucket key formats for date based document numbers."""

    YYYYMMDD = "yyyyMMdd"
    YYYYQ = "yyyyQ"
    YYQ = "yyQ"
    YYQQ = "yyQQ"
    YY = "yy"


MINOR_UNIT = Decimal("1")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric input to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Booleans are not numbers here")
    return Decimal(str(value))


def round_minor_units(amount: Decimal | int) -> int:
    """Round an exact amount to whole minor currency units.

    Halves round away from zero (ROUND_HALF_UP in Decimal terms), so
    12.5 becomes 13 and -12.5 becomes -13.
    """
    if isinstance(amount, int):
        return amount
    return int(amount.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP))

from invoice_ledger.domain.discounts import Discount, FixedDiscount, PercentageDiscount
from invoice_ledger.domain.documents import (
    Document,
    Invoice,
    LineItem,
    Quote,
    Receipt,
    invoice_from_quote,
    receipt_from_invoice,
    relevant_date,
)
from invoice_ledger.domain.summary import (
    DiscountLine,
    PaidLine,
    SubtotalKind,
    SubtotalLine,
    SummaryLine,
    TotalLine,
    VatLine,
)
from invoice_ledger.domain.value_objects import (
    Currency,
    DocumentType,
    InvoiceStatus,
    QuoteStatus,
)

__all__ = [
    "Currency",
    "Discount",
    "DiscountLine",
    "Document",
    "DocumentType",
    "FixedDiscount",
    "Invoice",
    "InvoiceStatus",
    "LineItem",
    "PaidLine",
    "PercentageDiscount",
    "Quote",
    "QuoteStatus",
    "Receipt",
    "SubtotalKind",
    "SubtotalLine",
    "SummaryLine",
    "TotalLine",
    "VatLine",
    "invoice_from_quote",
    "receipt_from_invoice",
    "relevant_date",
]

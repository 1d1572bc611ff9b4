from invoice_ledger.domain.discounts import Discount, FixedDiscount, PercentageDiscount
from invoice_ledger.domain.documents import Document, Invoice, LineItem, Quote, Receipt
from invoice_ledger.domain.value_objects import InvoiceStatus, QuoteStatus
from invoice_ledger.services.lineage import DocumentLineage, resolve_lineage, squash_documents
from invoice_ledger.services.numbering import DateBasedStrategy, IncrementStrategy
from invoice_ledger.services.summary import summarize

__all__ = [
    "DateBasedStrategy",
    "Discount",
    "Document",
    "DocumentLineage",
    "FixedDiscount",
    "IncrementStrategy",
    "Invoice",
    "InvoiceStatus",
    "LineItem",
    "PercentageDiscount",
    "Quote",
    "QuoteStatus",
    "Receipt",
    "resolve_lineage",
    "squash_documents",
    "summarize",
]

__version__ = "0.1.0"

"""Ingestion of quote, invoice and receipt records.

Records refer to each other by id (``quote_id`` on invoices, ``invoice_id`` on
receipts). Every reference must resolve to a record of the right type in the
same payload; a dangling reference is reported here rather than left for the
lineage resolver to trip over.
"""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from invoice_ledger.domain.discounts import Discount, FixedDiscount, PercentageDiscount
from invoice_ledger.domain.documents import Document, Invoice, LineItem, Quote, Receipt
from invoice_ledger.exceptions import (
    DanglingReferenceError,
    IngestionError,
    UnhandledVariantError,
)
from invoice_ledger.logging_config import get_logger
from invoice_ledger.schemas import (
    DiscountRecord,
    DocumentFile,
    FixedDiscountRecord,
    InvoiceRecord,
    LineItemRecord,
    PercentageDiscountRecord,
    QuoteRecord,
    ReceiptRecord,
)

logger = get_logger(__name__)


def _discount(record: DiscountRecord) -> Discount:
    match record:
        case PercentageDiscountRecord():
            return PercentageDiscount(value=record.value, reason=record.reason)
        case FixedDiscountRecord(quantity=None):
            return FixedDiscount(value=record.value, reason=record.reason)
        case FixedDiscountRecord():
            return FixedDiscount.per_unit(record.value, record.quantity, reason=record.reason)
        case _:
            raise UnhandledVariantError(type(record).__name__, ["percentage", "fixed"])


def _discounts(records: Sequence[DiscountRecord]) -> tuple[Discount, ...]:
    return tuple(_discount(record) for record in records)


def _item(record: LineItemRecord) -> LineItem:
    return LineItem(
        description=record.description,
        unit_price=record.unit_price,
        quantity=record.quantity,
        tax_rate=record.tax_rate,
        discounts=_discounts(record.discounts),
    )


def _items(records: Sequence[LineItemRecord]) -> tuple[LineItem, ...]:
    return tuple(_item(record) for record in records)


def _parse(payload: Mapping[str, Any] | Sequence[Any]) -> DocumentFile:
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        payload = {"documents": list(payload)}
    try:
        return DocumentFile.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        raise IngestionError(
            f"Invalid document data: {exc.error_count()} error(s)",
            context={"errors": errors},
        ) from exc


def load_documents(payload: Mapping[str, Any] | Sequence[Any]) -> list[Document]:
    """Build domain documents from a ``{"documents": [...]}`` payload or a list.

    Documents are returned in record order. Records sharing an id resolve
    references to the first of them.
    """
    parsed = _parse(payload)

    quotes: dict[str, Quote] = {}
    invoices: dict[str, Invoice] = {}
    built: dict[int, Document] = {}

    # Quotes before invoices before receipts, so references are always built first
    for position, record in enumerate(parsed.documents):
        if isinstance(record, QuoteRecord):
            quote = Quote(
                id=record.id,
                number=record.number,
                client_id=record.client_id,
                account_id=record.account_id,
                quote_date=record.quote_date,
                quote_expiration_date=record.quote_expiration_date,
                status=record.status,
                items=_items(record.items),
                discounts=_discounts(record.discounts),
                note=record.note,
            )
            quotes.setdefault(quote.id, quote)
            built[position] = quote

    for position, record in enumerate(parsed.documents):
        if isinstance(record, InvoiceRecord):
            quote = None
            if record.quote_id is not None:
                quote = quotes.get(record.quote_id)
                if quote is None:
                    raise DanglingReferenceError(record.id, "quote_id", record.quote_id)
            invoice = Invoice(
                id=record.id,
                number=record.number,
                client_id=record.client_id,
                account_id=record.account_id,
                issue_date=record.issue_date,
                due_date=record.due_date,
                status=record.status,
                paid_at=record.paid_at,
                quote=quote,
                items=_items(record.items),
                discounts=_discounts(record.discounts),
                note=record.note,
            )
            invoices.setdefault(invoice.id, invoice)
            built[position] = invoice

    for position, record in enumerate(parsed.documents):
        if isinstance(record, ReceiptRecord):
            invoice = invoices.get(record.invoice_id)
            if invoice is None:
                raise DanglingReferenceError(record.id, "invoice_id", record.invoice_id)
            built[position] = Receipt(
                id=record.id,
                number=record.number,
                client_id=record.client_id,
                account_id=record.account_id,
                receipt_date=record.receipt_date,
                invoice=invoice,
                items=invoice.items if record.items is None else _items(record.items),
                discounts=(
                    invoice.discounts
                    if record.discounts is None
                    else _discounts(record.discounts)
                ),
                note=record.note,
            )

    documents = [built[position] for position in range(len(parsed.documents))]
    logger.info(
        "documents_loaded",
        document_count=len(documents),
        quote_count=len(quotes),
        invoice_count=len(invoices),
    )
    return documents


def load_documents_file(path: Path | str) -> list[Document]:
    """Read documents from a JSON file."""
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise IngestionError(
            f"Cannot read document file: {path}", context={"path": str(path)}
        ) from exc
    except UnicodeDecodeError as exc:
        raise IngestionError(
            f"Document file is not UTF-8 text: {path} (byte {exc.start})",
            context={"path": str(path), "position": exc.start},
        ) from exc
    except json.JSONDecodeError as exc:
        raise IngestionError(
            f"Document file is not valid JSON: {path} (line {exc.lineno})",
            context={"path": str(path), "line": exc.lineno},
        ) from exc

    logger.debug("document_file_read", path=str(path))
    return load_documents(payload)


__all__ = ["load_documents", "load_documents_file"]

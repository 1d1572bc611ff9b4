"""Quote, invoice and receipt domain models.

Documents are immutable once built. Status changes produce a new value via
dataclasses.replace; a receipt keeps its own copy of the invoice's items and
discounts so that it is unaffected by anything that happens to the invoice
afterwards.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import uuid4

from invoice_ledger.domain.discounts import Discount, FixedDiscount, PercentageDiscount
from invoice_ledger.domain.value_objects import (
    DocumentType,
    InvoiceStatus,
    QuoteStatus,
    ReceiptDateSource,
    to_decimal,
)
from invoice_ledger.exceptions import (
    InvalidDocumentError,
    InvalidLineItemError,
    InvoiceNotPaidError,
    MixedTaxRateDiscountError,
    QuoteNotAcceptedError,
    UnhandledVariantError,
)


def _new_id() -> str:
    return str(uuid4())


def _as_discounts(values: Iterable[Any]) -> tuple[Discount, ...] | None:
    result = tuple(values)
    if all(isinstance(value, (PercentageDiscount, FixedDiscount)) for value in result):
        return result
    return None


@dataclass(frozen=True)
class LineItem:
    """A priced line on a document.

    unit_price is in minor currency units; tax_rate is a fraction where 0
    means the line is untaxed.
    """

    description: str
    unit_price: int
    quantity: Decimal = Decimal("1")
    tax_rate: Decimal = Decimal("0")
    discounts: tuple[Discount, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.description, str) or not self.description.strip():
            raise InvalidLineItemError("description", self.description, "must not be empty")

        if isinstance(self.unit_price, bool) or not isinstance(self.unit_price, int):
            raise InvalidLineItemError(
                "unit_price", self.unit_price, "must be an integer amount of minor units"
            )

        # Negative quantities are allowed for correction lines
        object.__setattr__(self, "quantity", self._number("quantity", self.quantity))

        tax_rate = self._number("tax_rate", self.tax_rate)
        if not Decimal("0") <= tax_rate <= Decimal("1"):
            raise InvalidLineItemError("tax_rate", self.tax_rate, "must be between 0 and 1")
        object.__setattr__(self, "tax_rate", tax_rate)

        discounts = _as_discounts(self.discounts)
        if discounts is None:
            raise InvalidLineItemError(
                "discounts", self.discounts, "must contain Discount values"
            )
        object.__setattr__(self, "discounts", discounts)

    @staticmethod
    def _number(name: str, value: Any) -> Decimal:
        try:
            result = to_decimal(value)
        except (TypeError, ArithmeticError):
            raise InvalidLineItemError(name, value, "must be a number") from None
        if not result.is_finite():
            raise InvalidLineItemError(name, value, "must be finite")
        return result

    @property
    def is_taxed(self) -> bool:
        return self.tax_rate != 0


def _is_calendar_date(value: Any) -> bool:
    # datetime subclasses date but cannot be ordered against one
    return isinstance(value, date) and not isinstance(value, datetime)


def _validate_common(document: Any, date_fields: Iterable[str]) -> None:
    """Shared checks for every document type."""
    type_name = document.document_type.value

    for name in ("id", "number", "client_id", "account_id"):
        value = getattr(document, name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidDocumentError(type_name, name, "must be a non-empty string")

    for name in date_fields:
        if not _is_calendar_date(getattr(document, name)):
            raise InvalidDocumentError(type_name, name, "must be a date without a time")

    items = tuple(document.items)
    for item in items:
        if not isinstance(item, LineItem):
            raise InvalidDocumentError(type_name, "items", "must contain LineItem values")
    object.__setattr__(document, "items", items)

    discounts = _as_discounts(document.discounts)
    if discounts is None:
        raise InvalidDocumentError(type_name, "discounts", "must contain Discount values")
    object.__setattr__(document, "discounts", discounts)

    if document.note is not None and not isinstance(document.note, str):
        raise InvalidDocumentError(type_name, "note", "must be a string or None")


def _reject_discounts_with_mixed_rates(document: Any) -> None:
    # Multi-rate VAT is computed on pre-discount amounts.
    if not document.discounts:
        return
    rates = distinct_tax_rates(document.items)
    if len(rates) > 1:
        raise MixedTaxRateDiscountError(document.document_type.value, rates)


def distinct_tax_rates(items: Iterable[LineItem]) -> list[Decimal]:
    """Nonzero tax rates in order of first appearance."""
    rates: list[Decimal] = []
    for item in items:
        if item.tax_rate != 0 and item.tax_rate not in rates:
            rates.append(item.tax_rate)
    return rates


@dataclass(frozen=True)
class Quote:
    """A priced offer sent to a client before any work is invoiced."""

    document_type: ClassVar[DocumentType] = DocumentType.QUOTE

    number: str
    client_id: str
    account_id: str
    quote_date: date
    quote_expiration_date: date
    items: tuple[LineItem, ...] = ()
    discounts: tuple[Discount, ...] = ()
    note: str | None = None
    status: QuoteStatus = QuoteStatus.DRAFT
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        _validate_common(self, ("quote_date", "quote_expiration_date"))
        try:
            object.__setattr__(self, "status", QuoteStatus(self.status))
        except ValueError:
            raise InvalidDocumentError(
                "quote", "status", f"unknown status {self.status!r}"
            ) from None
        _reject_discounts_with_mixed_rates(self)

    @property
    def is_accepted(self) -> bool:
        return self.status == QuoteStatus.ACCEPTED


@dataclass(frozen=True)
class Invoice:
    """A request for payment, optionally created from an accepted quote."""

    document_type: ClassVar[DocumentType] = DocumentType.INVOICE

    number: str
    client_id: str
    account_id: str
    issue_date: date
    due_date: date
    items: tuple[LineItem, ...] = ()
    discounts: tuple[Discount, ...] = ()
    note: str | None = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    paid_at: date | None = None
    quote: Quote | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        _validate_common(self, ("issue_date", "due_date"))
        try:
            object.__setattr__(self, "status", InvoiceStatus(self.status))
        except ValueError:
            raise InvalidDocumentError(
                "invoice", "status", f"unknown status {self.status!r}"
            ) from None
        if self.paid_at is not None and not _is_calendar_date(self.paid_at):
            raise InvalidDocumentError(
                "invoice", "paid_at", "must be a date without a time or None"
            )
        if self.quote is not None and not isinstance(self.quote, Quote):
            raise InvalidDocumentError("invoice", "quote", "must be a Quote or None")
        _reject_discounts_with_mixed_rates(self)

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID


@dataclass(frozen=True)
class Receipt:
    """Proof of payment for a paid invoice."""

    document_type: ClassVar[DocumentType] = DocumentType.RECEIPT

    number: str
    client_id: str
    account_id: str
    receipt_date: date
    invoice: Invoice
    items: tuple[LineItem, ...] = ()
    discounts: tuple[Discount, ...] = ()
    note: str | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        _validate_common(self, ("receipt_date",))
        if not isinstance(self.invoice, Invoice):
            raise InvalidDocumentError("receipt", "invoice", "must be an Invoice")


Document = Quote | Invoice | Receipt


def relevant_date(
    document: Document,
    receipt_date_source: ReceiptDateSource = ReceiptDateSource.RECEIPT_DATE,
) -> date:
    """Return the date that places a document on its lineage timeline."""
    match document:
        case Quote():
            return document.quote_date
        case Invoice():
            return document.issue_date
        case Receipt():
            match receipt_date_source:
                case ReceiptDateSource.RECEIPT_DATE:
                    return document.receipt_date
                case ReceiptDateSource.INVOICE_ISSUE_DATE:
                    return document.invoice.issue_date
                case _:
                    raise UnhandledVariantError(
                        receipt_date_source,
                        [source.value for source in ReceiptDateSource],
                    )
        case _:
            raise UnhandledVariantError(
                type(document).__name__,
                [doc_type.value for doc_type in DocumentType],
            )


def invoice_from_quote(
    quote: Quote,
    *,
    number: str,
    issue_date: date,
    due_date: date,
    id: str | None = None,
) -> Invoice:
    """Create a draft invoice from an accepted quote."""
    if not quote.is_accepted:
        raise QuoteNotAcceptedError(quote.id, quote.status.value)

    return Invoice(
        number=number,
        client_id=quote.client_id,
        account_id=quote.account_id,
        issue_date=issue_date,
        due_date=due_date,
        items=quote.items,
        discounts=quote.discounts,
        note=quote.note,
        quote=quote,
        id=id or _new_id(),
    )


def receipt_from_invoice(
    invoice: Invoice,
    *,
    number: str | None = None,
    receipt_date: date | None = None,
    id: str | None = None,
) -> Receipt:
    """Create a receipt for a paid invoice.

    The receipt copies the invoice's items and discounts at this moment.
    Defaults: number is ``<invoice number>-01`` and the receipt date is the
    invoice's payment date.
    """
    if not invoice.is_paid:
        raise InvoiceNotPaidError(invoice.id, invoice.status.value)

    receipt_date = receipt_date or invoice.paid_at
    if receipt_date is None:
        raise InvalidDocumentError(
            "receipt", "receipt_date", "required when the invoice has no payment date"
        )

    return Receipt(
        number=number or f"{invoice.number}-01",
        client_id=invoice.client_id,
        account_id=invoice.account_id,
        receipt_date=receipt_date,
        invoice=invoice,
        items=tuple(invoice.items),
        discounts=tuple(invoice.discounts),
        note=invoice.note,
        id=id or _new_id(),
    )


__all__ = [
    "Document",
    "Invoice",
    "LineItem",
    "Quote",
    "Receipt",
    "distinct_tax_rates",
    "invoice_from_quote",
    "receipt_from_invoice",
    "relevant_date",
]

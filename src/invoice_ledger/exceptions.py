"""Exceptions raised by Invoice Ledger.

Everything derives from InvoiceLedgerError, which carries a machine-readable
error_code and a context dict. The CLI catches the base class; library callers
can catch the narrower validation, lineage and ingestion families.
"""

from collections.abc import Iterable
from typing import Any


class InvoiceLedgerError(Exception):
    """Base exception for all Invoice Ledger errors.

    Includes an error_code for machine-readable output and extra context.
    """

    error_code: str = "INVL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class UnhandledVariantError(InvoiceLedgerError):
    """Raised when a tagged variant dispatch meets a value it has no branch for.

    This is a programming or schema error, never a user-facing condition.
    """

    error_code = "UNHANDLED_VARIANT"

    def __init__(self, value: Any, handled: Iterable[str] = ()) -> None:
        handled = list(handled)
        expected = ", ".join(f'"{name}"' for name in handled)
        message = f'Tried to handle "{value}" but there is no handler defined.'
        if expected:
            message += f" Only defined handlers are: {expected}."
        super().__init__(
            message,
            context={"value": repr(value), "handled": handled},
        )


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(InvoiceLedgerError):
    """Base exception for validation errors."""

    error_code = "VALIDATION_ERROR"


class InvalidDiscountError(ValidationError):
    """Raised when a discount is constructed with invalid values."""

    error_code = "INVALID_DISCOUNT"

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(
            f"Invalid discount {field} {value!r}: {reason}",
            context={"field": field, "value": str(value), "reason": reason},
        )


class InvalidLineItemError(ValidationError):
    """Raised when a line item is constructed with invalid values."""

    error_code = "INVALID_LINE_ITEM"

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(
            f"Invalid line item {field} {value!r}: {reason}",
            context={"field": field, "value": str(value), "reason": reason},
        )


class InvalidDocumentError(ValidationError):
    """Raised when a quote, invoice or receipt is missing required data."""

    error_code = "INVALID_DOCUMENT"

    def __init__(self, document_type: str, field: str, reason: str) -> None:
        super().__init__(
            f"Invalid {document_type} {field}: {reason}",
            context={"document_type": document_type, "field": field, "reason": reason},
        )


class MixedTaxRateDiscountError(ValidationError):
    """Raised when document discounts are combined with several tax rates."""

    error_code = "MIXED_TAX_RATE_DISCOUNT"

    def __init__(self, document_type: str, tax_rates: Iterable[Any]) -> None:
        rates = [str(rate) for rate in tax_rates]
        super().__init__(
            f"Discounts on a {document_type} with mixed tax rates are not supported "
            f"(rates: {', '.join(rates)})",
            context={"document_type": document_type, "tax_rates": rates},
        )


class InvoiceNotPaidError(ValidationError):
    """Raised when creating a receipt for an invoice that is not paid."""

    error_code = "INVOICE_NOT_PAID"

    def __init__(self, invoice_id: str, status: str) -> None:
        super().__init__(
            f"Cannot create a receipt from invoice {invoice_id}: status is {status}, expected paid",
            context={"invoice_id": invoice_id, "status": status},
        )


class QuoteNotAcceptedError(ValidationError):
    """Raised when converting a quote that was not accepted into an invoice."""

    error_code = "QUOTE_NOT_ACCEPTED"

    def __init__(self, quote_id: str, status: str) -> None:
        super().__init__(
            f"Cannot convert quote {quote_id} to an invoice: status is {status}, expected accepted",
            context={"quote_id": quote_id, "status": status},
        )


# =============================================================================
# Summary Errors
# =============================================================================


class NegativeTotalError(InvoiceLedgerError):
    """Raised when discounts exceed the subtotal and negative totals are rejected."""

    error_code = "NEGATIVE_TOTAL"

    def __init__(self, subtotal: int) -> None:
        super().__init__(
            f"Discounts exceed the subtotal: discounted subtotal would be {subtotal}",
            context={"subtotal": subtotal},
        )


# =============================================================================
# Lineage Errors
# =============================================================================


class LineageError(InvoiceLedgerError):
    """Base exception for document lineage errors."""

    error_code = "LINEAGE_ERROR"


class DanglingReferenceError(LineageError):
    """Raised when a document references another document that does not exist."""

    error_code = "DANGLING_REFERENCE"

    def __init__(self, document_id: str, reference_field: str, missing_id: str) -> None:
        super().__init__(
            f"Document {document_id} references unknown {reference_field} {missing_id}",
            context={
                "document_id": document_id,
                "reference_field": reference_field,
                "missing_id": missing_id,
            },
        )


class LineageIntegrityError(LineageError):
    """Raised when a document is referenced by more than one successor."""

    error_code = "LINEAGE_INTEGRITY"

    def __init__(self, document_id: str, referenced_by: Iterable[str]) -> None:
        referrers = list(referenced_by)
        super().__init__(
            f"Document {document_id} is referenced by more than one document: "
            f"{', '.join(referrers)}",
            context={"document_id": document_id, "referenced_by": referrers},
        )


class DocumentNotFoundError(LineageError):
    """Raised when a document id is not part of a resolved lineage."""

    error_code = "DOCUMENT_NOT_FOUND"

    def __init__(self, document_id: str) -> None:
        super().__init__(
            f"Document not found: {document_id}",
            context={"document_id": document_id},
        )


# =============================================================================
# Ingestion Errors
# =============================================================================


class IngestionError(InvoiceLedgerError):
    """Raised when a document file cannot be read or parsed."""

    error_code = "INGESTION_ERROR"

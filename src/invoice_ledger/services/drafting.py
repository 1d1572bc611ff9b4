"""Drafting service for new quotes, invoices and receipts.

Assigns document numbers from the configured numbering strategies and fills
in default expiration and due dates.
"""

from collections.abc import Sequence
from datetime import date, timedelta

from invoice_ledger.config import Settings
from invoice_ledger.domain.discounts import Discount
from invoice_ledger.domain.documents import (
    Invoice,
    LineItem,
    Quote,
    Receipt,
    invoice_from_quote,
    receipt_from_invoice,
)
from invoice_ledger.exceptions import QuoteNotAcceptedError
from invoice_ledger.logging_config import get_logger
from invoice_ledger.services.numbering import (
    DateBasedStrategy,
    NumberStrategy,
    build_number_strategy,
)

logger = get_logger(__name__)


class DocumentDraftingService:
    def __init__(
        self,
        quote_numbers: NumberStrategy | None = None,
        invoice_numbers: NumberStrategy | None = None,
        quote_validity_days: int = 30,
        invoice_net_days: int = 30,
    ) -> None:
        self._quote_numbers = quote_numbers or DateBasedStrategy()
        self._invoice_numbers = invoice_numbers or DateBasedStrategy()
        self._quote_validity = timedelta(days=quote_validity_days)
        self._invoice_net = timedelta(days=invoice_net_days)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentDraftingService":
        return cls(
            quote_numbers=build_number_strategy(
                settings.quote_number_strategy,
                settings.number_digits,
                settings.date_number_base,
            ),
            invoice_numbers=build_number_strategy(
                settings.invoice_number_strategy,
                settings.number_digits,
                settings.date_number_base,
            ),
            quote_validity_days=settings.quote_validity_days,
            invoice_net_days=settings.invoice_net_days,
        )

    def draft_quote(
        self,
        *,
        client_id: str,
        account_id: str,
        quote_date: date,
        items: Sequence[LineItem] = (),
        discounts: Sequence[Discount] = (),
        note: str | None = None,
        number: str | None = None,
        quote_expiration_date: date | None = None,
    ) -> Quote:
        quote = Quote(
            number=number or self._quote_numbers.next(quote_date),
            client_id=client_id,
            account_id=account_id,
            quote_date=quote_date,
            quote_expiration_date=quote_expiration_date or quote_date + self._quote_validity,
            items=tuple(items),
            discounts=tuple(discounts),
            note=note,
        )
        logger.info(
            "document_drafted",
            document_type="quote",
            document_id=quote.id,
            number=quote.number,
        )
        return quote

    def draft_invoice(
        self,
        *,
        client_id: str,
        account_id: str,
        issue_date: date,
        items: Sequence[LineItem] = (),
        discounts: Sequence[Discount] = (),
        note: str | None = None,
        number: str | None = None,
        due_date: date | None = None,
    ) -> Invoice:
        invoice = Invoice(
            number=number or self._invoice_numbers.next(issue_date),
            client_id=client_id,
            account_id=account_id,
            issue_date=issue_date,
            due_date=due_date or issue_date + self._invoice_net,
            items=tuple(items),
            discounts=tuple(discounts),
            note=note,
        )
        logger.info(
            "document_drafted",
            document_type="invoice",
            document_id=invoice.id,
            number=invoice.number,
        )
        return invoice

    def invoice_from_quote(
        self,
        quote: Quote,
        *,
        issue_date: date,
        number: str | None = None,
        due_date: date | None = None,
    ) -> Invoice:
        # A rejected conversion must not consume a number
        if not quote.is_accepted:
            raise QuoteNotAcceptedError(quote.id, quote.status.value)

        invoice = invoice_from_quote(
            quote,
            number=number or self._invoice_numbers.next(issue_date),
            issue_date=issue_date,
            due_date=due_date or issue_date + self._invoice_net,
        )
        logger.info(
            "document_drafted",
            document_type="invoice",
            document_id=invoice.id,
            number=invoice.number,
            quote_id=quote.id,
        )
        return invoice

    def receipt_for(
        self,
        invoice: Invoice,
        *,
        receipt_date: date | None = None,
        number: str | None = None,
    ) -> Receipt:
        receipt = receipt_from_invoice(invoice, number=number, receipt_date=receipt_date)
        logger.info(
            "document_drafted",
            document_type="receipt",
            document_id=receipt.id,
            number=receipt.number,
            invoice_id=invoice.id,
        )
        return receipt


__all__ = ["DocumentDraftingService"]

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from invoice_ledger.domain.discounts import FixedDiscount, PercentageDiscount
from invoice_ledger.domain.documents import (
    Invoice,
    LineItem,
    Quote,
    Receipt,
    distinct_tax_rates,
    invoice_from_quote,
    receipt_from_invoice,
    relevant_date,
)
from invoice_ledger.domain.value_objects import (
    DocumentType,
    InvoiceStatus,
    QuoteStatus,
    ReceiptDateSource,
)
from invoice_ledger.exceptions import (
    InvalidDocumentError,
    InvalidLineItemError,
    InvoiceNotPaidError,
    MixedTaxRateDiscountError,
    QuoteNotAcceptedError,
    UnhandledVariantError,
)


def make_quote(**overrides) -> Quote:
    fields = {
        "number": "Q-1",
        "client_id": "client-1",
        "account_id": "account-1",
        "quote_date": date(2023, 1, 1),
        "quote_expiration_date": date(2023, 1, 31),
    }
    fields.update(overrides)
    return Quote(**fields)


class TestLineItem:
    def test_defaults(self):
        item = LineItem(description="Hosting", unit_price=1500)

        assert item.quantity == Decimal("1")
        assert item.tax_rate == Decimal("0")
        assert item.discounts == ()
        assert item.is_taxed is False

    def test_converts_numbers_to_decimal(self):
        item = LineItem(description="Hours", unit_price=8000, quantity=1.5, tax_rate="0.21")

        assert item.quantity == Decimal("1.5")
        assert item.tax_rate == Decimal("0.21")
        assert item.is_taxed is True

    def test_discounts_become_a_tuple(self):
        discounts = [PercentageDiscount(Decimal("0.1"))]

        item = LineItem(description="Hours", unit_price=8000, discounts=discounts)

        assert item.discounts == (PercentageDiscount(Decimal("0.1")),)

    def test_allows_negative_quantity(self):
        item = LineItem(description="Correction", unit_price=1000, quantity=-1)

        assert item.quantity == Decimal("-1")

    def test_rejects_empty_description(self):
        with pytest.raises(InvalidLineItemError, match="must not be empty"):
            LineItem(description="  ", unit_price=100)

    @pytest.mark.parametrize("unit_price", [10.5, "100", True])
    def test_rejects_non_integer_unit_price(self, unit_price):
        with pytest.raises(InvalidLineItemError) as exc_info:
            LineItem(description="Hosting", unit_price=unit_price)

        assert exc_info.value.context["field"] == "unit_price"

    @pytest.mark.parametrize("tax_rate", [Decimal("-0.1"), Decimal("1.5")])
    def test_rejects_tax_rate_out_of_range(self, tax_rate):
        with pytest.raises(InvalidLineItemError, match="between 0 and 1"):
            LineItem(description="Hosting", unit_price=100, tax_rate=tax_rate)

    def test_rejects_infinite_quantity(self):
        with pytest.raises(InvalidLineItemError, match="must be finite"):
            LineItem(description="Hosting", unit_price=100, quantity="Infinity")

    def test_rejects_non_discount_values(self):
        with pytest.raises(InvalidLineItemError, match="Discount values"):
            LineItem(description="Hosting", unit_price=100, discounts=[0.1])


class TestDocumentValidation:
    def test_generates_id(self):
        first = make_quote()
        second = make_quote()

        assert first.id
        assert first.id != second.id

    def test_document_type(self, sample_quote, sample_invoice, sample_receipt):
        assert sample_quote.document_type == DocumentType.QUOTE
        assert sample_invoice.document_type == DocumentType.INVOICE
        assert sample_receipt.document_type == DocumentType.RECEIPT

    @pytest.mark.parametrize("field", ["number", "client_id", "account_id", "id"])
    def test_rejects_blank_identifiers(self, field):
        with pytest.raises(InvalidDocumentError) as exc_info:
            make_quote(**{field: ""})

        assert exc_info.value.context == {
            "document_type": "quote",
            "field": field,
            "reason": "must be a non-empty string",
        }

    def test_rejects_missing_date(self):
        with pytest.raises(InvalidDocumentError, match="quote_date"):
            make_quote(quote_date="2023-01-01")

    def test_rejects_datetime(self):
        with pytest.raises(InvalidDocumentError, match="without a time"):
            make_quote(quote_date=datetime(2024, 1, 1, 9))

    def test_invoice_rejects_datetime_payment(self):
        with pytest.raises(InvalidDocumentError, match="paid_at"):
            Invoice(
                number="I-1",
                client_id="client-1",
                account_id="account-1",
                issue_date=date(2024, 1, 5),
                due_date=date(2024, 2, 4),
                status=InvoiceStatus.PAID,
                paid_at=datetime(2024, 1, 20, 14, 30),
            )

    def test_rejects_non_item_values(self):
        with pytest.raises(InvalidDocumentError, match="LineItem"):
            make_quote(items=[{"description": "Hosting"}])

    def test_rejects_unknown_status(self):
        with pytest.raises(InvalidDocumentError, match="unknown status"):
            make_quote(status="pending")

    def test_status_from_string(self):
        assert make_quote(status="accepted").status == QuoteStatus.ACCEPTED

    def test_items_become_a_tuple(self, consulting_item):
        quote = make_quote(items=[consulting_item])

        assert quote.items == (consulting_item,)

    def test_rejects_discounts_with_mixed_tax_rates(self):
        items = [
            LineItem(description="Books", unit_price=2000, tax_rate=Decimal("0.06")),
            LineItem(description="Design", unit_price=5000, tax_rate=Decimal("0.21")),
        ]

        with pytest.raises(MixedTaxRateDiscountError) as exc_info:
            make_quote(items=items, discounts=[FixedDiscount(100)])

        assert exc_info.value.context["tax_rates"] == ["0.06", "0.21"]

    def test_allows_discounts_with_taxed_and_untaxed_items(self, consulting_item, untaxed_item):
        quote = make_quote(
            items=[consulting_item, untaxed_item], discounts=[FixedDiscount(100)]
        )

        assert len(quote.discounts) == 1

    def test_invoice_rejects_non_quote_reference(self):
        with pytest.raises(InvalidDocumentError, match="must be a Quote"):
            Invoice(
                number="I-1",
                client_id="client-1",
                account_id="account-1",
                issue_date=date(2023, 1, 1),
                due_date=date(2023, 1, 31),
                quote="q-1",
            )

    def test_receipt_requires_invoice(self):
        with pytest.raises(InvalidDocumentError, match="must be an Invoice"):
            Receipt(
                number="R-1",
                client_id="client-1",
                account_id="account-1",
                receipt_date=date(2023, 1, 1),
                invoice=None,
            )

    def test_status_transition_with_replace(self, unpaid_invoice):
        paid = replace(unpaid_invoice, status=InvoiceStatus.PAID, paid_at=date(2023, 3, 1))

        assert paid.is_paid is True
        assert unpaid_invoice.is_paid is False
        assert paid.id == unpaid_invoice.id


class TestDistinctTaxRates:
    def test_first_appearance_order_without_zero(self):
        items = [
            LineItem(description="A", unit_price=1, tax_rate=Decimal("0.21")),
            LineItem(description="B", unit_price=1),
            LineItem(description="C", unit_price=1, tax_rate=Decimal("0.06")),
            LineItem(description="D", unit_price=1, tax_rate=Decimal("0.21")),
        ]

        assert distinct_tax_rates(items) == [Decimal("0.21"), Decimal("0.06")]


class TestRelevantDate:
    def test_quote_and_invoice(self, sample_quote, sample_invoice):
        assert relevant_date(sample_quote) == date(2023, 1, 10)
        assert relevant_date(sample_invoice) == date(2023, 1, 20)

    def test_receipt_uses_receipt_date_by_default(self, sample_receipt):
        assert relevant_date(sample_receipt) == date(2023, 2, 1)

    def test_receipt_can_use_invoice_issue_date(self, sample_receipt):
        result = relevant_date(sample_receipt, ReceiptDateSource.INVOICE_ISSUE_DATE)

        assert result == date(2023, 1, 20)

    def test_unknown_document_type(self):
        with pytest.raises(UnhandledVariantError, match="no handler defined"):
            relevant_date("not a document")


class TestInvoiceFromQuote:
    def test_copies_quote(self, sample_quote):
        invoice = invoice_from_quote(
            sample_quote,
            number="I-1",
            issue_date=date(2023, 1, 20),
            due_date=date(2023, 2, 19),
        )

        assert invoice.quote is sample_quote
        assert invoice.items == sample_quote.items
        assert invoice.discounts == sample_quote.discounts
        assert invoice.client_id == sample_quote.client_id
        assert invoice.status == InvoiceStatus.DRAFT

    def test_requires_accepted_quote(self, sample_quote):
        sent = replace(sample_quote, status=QuoteStatus.SENT)

        with pytest.raises(QuoteNotAcceptedError) as exc_info:
            invoice_from_quote(
                sent, number="I-1", issue_date=date(2023, 1, 20), due_date=date(2023, 2, 19)
            )

        assert exc_info.value.context == {"quote_id": "q-1", "status": "sent"}


class TestReceiptFromInvoice:
    def test_defaults_from_invoice(self, sample_invoice):
        receipt = receipt_from_invoice(sample_invoice)

        assert receipt.number == "2023001-01"
        assert receipt.receipt_date == date(2023, 2, 1)
        assert receipt.invoice is sample_invoice
        assert receipt.items == sample_invoice.items

    def test_explicit_number_and_date(self, sample_invoice):
        receipt = receipt_from_invoice(
            sample_invoice, number="R-7", receipt_date=date(2023, 2, 3), id="r-7"
        )

        assert receipt.id == "r-7"
        assert receipt.number == "R-7"
        assert receipt.receipt_date == date(2023, 2, 3)

    def test_snapshot_is_not_affected_by_later_invoice_changes(self, sample_invoice):
        receipt = receipt_from_invoice(sample_invoice)

        changed = replace(
            sample_invoice,
            items=(LineItem(description="Extra", unit_price=999),),
            discounts=(FixedDiscount(100),),
        )

        assert changed.items != receipt.items
        assert receipt.items == sample_invoice.items
        assert receipt.discounts == ()

    def test_unpaid_invoice_is_rejected(self, unpaid_invoice):
        with pytest.raises(InvoiceNotPaidError) as exc_info:
            receipt_from_invoice(unpaid_invoice)

        assert exc_info.value.context == {"invoice_id": "i-1", "status": "sent"}
        assert "i-1" in exc_info.value.message

    def test_paid_invoice_without_payment_date_needs_a_date(self, sample_invoice):
        invoice = replace(sample_invoice, paid_at=None)

        with pytest.raises(InvalidDocumentError, match="receipt_date"):
            receipt_from_invoice(invoice)

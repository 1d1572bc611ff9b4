from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from invoice_ledger.config import get_settings
from invoice_ledger.domain.discounts import FixedDiscount, PercentageDiscount
from invoice_ledger.domain.documents import Invoice, LineItem, Quote, Receipt
from invoice_ledger.domain.value_objects import InvoiceStatus, QuoteStatus


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def consulting_item() -> LineItem:
    return LineItem(
        description="Consulting",
        unit_price=10000,
        quantity=Decimal("2"),
        tax_rate=Decimal("0.21"),
    )


@pytest.fixture
def untaxed_item() -> LineItem:
    return LineItem(description="Travel expenses", unit_price=4550)


@pytest.fixture
def ten_percent_off() -> PercentageDiscount:
    return PercentageDiscount(value=Decimal("0.10"), reason="Loyal client")


@pytest.fixture
def fifty_off() -> FixedDiscount:
    return FixedDiscount(value=5000, reason="Goodwill")


@pytest.fixture
def sample_quote(consulting_item) -> Quote:
    return Quote(
        id="q-1",
        number="2023001",
        client_id="client-1",
        account_id="account-1",
        quote_date=date(2023, 1, 10),
        quote_expiration_date=date(2023, 2, 9),
        items=(consulting_item,),
        status=QuoteStatus.ACCEPTED,
    )


@pytest.fixture
def sample_invoice(sample_quote) -> Invoice:
    return Invoice(
        id="i-1",
        number="2023001",
        client_id="client-1",
        account_id="account-1",
        issue_date=date(2023, 1, 20),
        due_date=date(2023, 2, 19),
        items=sample_quote.items,
        status=InvoiceStatus.PAID,
        paid_at=date(2023, 2, 1),
        quote=sample_quote,
    )


@pytest.fixture
def sample_receipt(sample_invoice) -> Receipt:
    return Receipt(
        id="r-1",
        number="2023001-01",
        client_id="client-1",
        account_id="account-1",
        receipt_date=date(2023, 2, 1),
        invoice=sample_invoice,
        items=sample_invoice.items,
    )


@pytest.fixture
def standalone_invoice(untaxed_item) -> Invoice:
    return Invoice(
        id="i-2",
        number="2023002",
        client_id="client-2",
        account_id="account-1",
        issue_date=date(2023, 3, 1),
        due_date=date(2023, 3, 31),
        items=(untaxed_item,),
        status=InvoiceStatus.SENT,
    )


@pytest.fixture
def unpaid_invoice(sample_invoice) -> Invoice:
    return replace(sample_invoice, status=InvoiceStatus.SENT, paid_at=None)


@pytest.fixture
def documents_payload() -> dict:
    return {
        "documents": [
            {
                "type": "receipt",
                "id": "r-1",
                "number": "2023001-01",
                "client_id": "client-1",
                "account_id": "account-1",
                "receipt_date": "2023-02-01",
                "invoice_id": "i-1",
            },
            {
                "type": "invoice",
                "id": "i-1",
                "number": "2023001",
                "client_id": "client-1",
                "account_id": "account-1",
                "issue_date": "2023-01-20",
                "due_date": "2023-02-19",
                "status": "paid",
                "paid_at": "2023-02-01",
                "quote_id": "q-1",
                "items": [
                    {
                        "description": "Consulting",
                        "unit_price": 10000,
                        "quantity": "2",
                        "tax_rate": "0.21",
                    }
                ],
                "discounts": [{"type": "percentage", "value": "0.10"}],
            },
            {
                "type": "quote",
                "id": "q-1",
                "number": "2023001",
                "client_id": "client-1",
                "account_id": "account-1",
                "quote_date": "2023-01-10",
                "quote_expiration_date": "2023-02-09",
                "status": "accepted",
                "items": [
                    {
                        "description": "Consulting",
                        "unit_price": 10000,
                        "quantity": "2",
                        "tax_rate": "0.21",
                    }
                ],
            },
            {
                "type": "invoice",
                "id": "i-2",
                "number": "2023002",
                "client_id": "client-2",
                "account_id": "account-1",
                "issue_date": "2023-03-01",
                "due_date": "2023-03-31",
                "status": "sent",
                "items": [{"description": "Travel expenses", "unit_price": 4550}],
            },
        ]
    }

"""Pydantic v2 schemas for document records read from JSON files."""

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from invoice_ledger.domain.value_objects import InvoiceStatus, QuoteStatus


class _Record(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


# Discount Schemas
class PercentageDiscountRecord(_Record):
    type: Literal["percentage"]
    value: Decimal = Field(..., ge=0, le=1)
    reason: str | None = None


class FixedDiscountRecord(_Record):
    """Fixed discount in minor units. Giving a quantity makes it explicit."""

    type: Literal["fixed"]
    value: int
    quantity: Decimal | None = Field(default=None, gt=0)
    reason: str | None = None


DiscountRecord = Annotated[
    PercentageDiscountRecord | FixedDiscountRecord,
    Field(discriminator="type"),
]


# Line Item Schema
class LineItemRecord(_Record):
    description: str = Field(..., min_length=1)
    unit_price: int
    quantity: Decimal = Decimal("1")
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=1)
    discounts: list[DiscountRecord] = Field(default_factory=list)


# Document Schemas
class _DocumentRecord(_Record):
    id: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)
    note: str | None = None


class QuoteRecord(_DocumentRecord):
    type: Literal["quote"]
    quote_date: date
    quote_expiration_date: date
    status: QuoteStatus = QuoteStatus.DRAFT
    items: list[LineItemRecord] = Field(default_factory=list)
    discounts: list[DiscountRecord] = Field(default_factory=list)


class InvoiceRecord(_DocumentRecord):
    type: Literal["invoice"]
    issue_date: date
    due_date: date
    status: InvoiceStatus = InvoiceStatus.DRAFT
    paid_at: date | None = None
    quote_id: str | None = None
    items: list[LineItemRecord] = Field(default_factory=list)
    discounts: list[DiscountRecord] = Field(default_factory=list)


class ReceiptRecord(_DocumentRecord):
    """Receipt record. Items and discounts default to the invoice's."""

    type: Literal["receipt"]
    receipt_date: date
    invoice_id: str = Field(..., min_length=1)
    items: list[LineItemRecord] | None = None
    discounts: list[DiscountRecord] | None = None


DocumentRecord = Annotated[
    QuoteRecord | InvoiceRecord | ReceiptRecord,
    Field(discriminator="type"),
]


class DocumentFile(_Record):
    documents: list[DocumentRecord] = Field(default_factory=list)

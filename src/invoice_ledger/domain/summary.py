"""Summary lines produced for the totals block of a document.

The order of a summary is part of its meaning: it is the order in which the
lines are displayed.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from invoice_ledger.domain.discounts import Discount


class SubtotalKind(str, Enum):
    DISCOUNTS = "discounts"


@dataclass(frozen=True, slots=True)
class SubtotalLine:
    kind: ClassVar[str] = "subtotal"

    value: int
    subtype: SubtotalKind | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.kind, "value": self.value}
        if self.subtype is not None:
            result["subtype"] = self.subtype.value
        return result


@dataclass(frozen=True, slots=True)
class DiscountLine:
    """A document discount together with the amount it took off."""

    kind: ClassVar[str] = "discount"

    discount: Discount
    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "discount": self.discount.to_dict(), "value": self.value}


@dataclass(frozen=True, slots=True)
class VatLine:
    kind: ClassVar[str] = "vat"

    rate: Decimal
    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "rate": str(self.rate), "value": self.value}


@dataclass(frozen=True, slots=True)
class TotalLine:
    kind: ClassVar[str] = "total"

    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "value": self.value}


@dataclass(frozen=True, slots=True)
class PaidLine:
    """The document was settled for exactly its total."""

    kind: ClassVar[str] = "paid"

    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "value": self.value}


SummaryLine = SubtotalLine | DiscountLine | VatLine | TotalLine | PaidLine


__all__ = [
    "DiscountLine",
    "PaidLine",
    "SubtotalKind",
    "SubtotalLine",
    "SummaryLine",
    "TotalLine",
    "VatLine",
]

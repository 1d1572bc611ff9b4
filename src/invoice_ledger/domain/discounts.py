"""Discount value objects.

A discount is either a percentage of the running amount or a fixed amount in
minor currency units. Both carry an optional free-text reason. Discounts in a
list are applied in order; each one is computed against the amount left by the
previous ones.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar

from invoice_ledger.domain.value_objects import QuantityType, to_decimal
from invoice_ledger.exceptions import InvalidDiscountError


def _normalize_reason(reason: Any) -> str | None:
    if reason is None:
        return None
    if not isinstance(reason, str):
        raise InvalidDiscountError("reason", reason, "must be a string or None")
    return reason


@dataclass(frozen=True, slots=True)
class PercentageDiscount:
    """Takes a fraction (0..1) off the running amount."""

    kind: ClassVar[str] = "percentage"

    value: Decimal
    reason: str | None = None

    def __post_init__(self) -> None:
        try:
            value = to_decimal(self.value)
        except (TypeError, ArithmeticError):
            raise InvalidDiscountError("value", self.value, "must be a number") from None
        if not value.is_finite() or not Decimal("0") <= value <= Decimal("1"):
            raise InvalidDiscountError("value", self.value, "must be between 0 and 1")
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "reason", _normalize_reason(self.reason))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "value": str(self.value), "reason": self.reason}


@dataclass(frozen=True, slots=True)
class FixedDiscount:
    """Takes an absolute amount, in minor units, off the running amount.

    The amount is multiplied by a quantity. When the quantity is implicit and
    the discount sits on a line item, the item's own quantity is used instead.
    """

    kind: ClassVar[str] = "fixed"

    value: int
    quantity: Decimal = Decimal("1")
    quantity_type: QuantityType = QuantityType.IMPLICIT
    reason: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _minor_units(self.value))
        try:
            quantity = to_decimal(self.quantity)
        except (TypeError, ArithmeticError):
            raise InvalidDiscountError(
                "quantity", self.quantity, "must be a number"
            ) from None
        if not quantity.is_finite() or quantity <= 0:
            raise InvalidDiscountError("quantity", self.quantity, "must be positive")
        object.__setattr__(self, "quantity", quantity)
        try:
            object.__setattr__(self, "quantity_type", QuantityType(self.quantity_type))
        except ValueError:
            raise InvalidDiscountError(
                "quantity_type", self.quantity_type, "must be implicit or explicit"
            ) from None
        object.__setattr__(self, "reason", _normalize_reason(self.reason))

    @classmethod
    def per_unit(
        cls,
        value: int,
        quantity: Decimal | int | float | str,
        reason: str | None = None,
    ) -> "FixedDiscount":
        """Create a fixed discount with an explicit quantity."""
        return cls(
            value=value,
            quantity=to_decimal(quantity),
            quantity_type=QuantityType.EXPLICIT,
            reason=reason,
        )

    @property
    def is_explicit(self) -> bool:
        return self.quantity_type == QuantityType.EXPLICIT

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "value": self.value,
            "quantity": str(self.quantity),
            "quantity_type": self.quantity_type.value,
            "reason": self.reason,
        }


Discount = PercentageDiscount | FixedDiscount


def _minor_units(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidDiscountError("value", value, "must be an integer amount")
    if isinstance(value, int):
        return value
    try:
        decimal_value = to_decimal(value)
    except (TypeError, ArithmeticError):
        raise InvalidDiscountError("value", value, "must be an integer amount") from None
    if not decimal_value.is_finite() or decimal_value != decimal_value.to_integral_value():
        raise InvalidDiscountError(
            "value", value, "must be a whole number of minor units"
        )
    return int(decimal_value)


__all__ = [
    "Discount",
    "FixedDiscount",
    "PercentageDiscount",
]

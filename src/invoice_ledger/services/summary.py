"""Financial summary engine.

Turns the items and discounts of a document into the ordered lines of its
totals block: subtotal, discounts, VAT per rate, total and paid.

All amounts are integers in minor currency units. Intermediate products are
exact Decimals and every derived amount is rounded to whole minor units, half
away from zero, at the moment it is derived. Summing rounded discount lines
therefore always gives the rounded discount total.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from invoice_ledger.config import Settings
from invoice_ledger.domain.discounts import Discount, FixedDiscount, PercentageDiscount
from invoice_ledger.domain.documents import (
    Document,
    Invoice,
    LineItem,
    Quote,
    Receipt,
    distinct_tax_rates,
)
from invoice_ledger.domain.summary import (
    DiscountLine,
    PaidLine,
    SubtotalKind,
    SubtotalLine,
    SummaryLine,
    TotalLine,
    VatLine,
)
from invoice_ledger.domain.value_objects import (
    InvoiceStatus,
    NegativeTotalPolicy,
    QuoteStatus,
    round_minor_units,
)
from invoice_ledger.exceptions import NegativeTotalError, UnhandledVariantError
from invoice_ledger.logging_config import get_logger

logger = get_logger(__name__)

_DISCOUNT_KINDS = [PercentageDiscount.kind, FixedDiscount.kind]


@dataclass(frozen=True)
class SummaryConfig:
    """Explicit configuration for the summary engine."""

    negative_totals: NegativeTotalPolicy = NegativeTotalPolicy.ALLOW

    @classmethod
    def from_settings(cls, settings: Settings) -> "SummaryConfig":
        return cls(negative_totals=settings.negative_totals)


def discount_amount(
    discount: Discount, base: int, default_quantity: Decimal = Decimal("1")
) -> int:
    """Amount a single discount takes off ``base``.

    ``default_quantity`` applies to fixed discounts without an explicit
    quantity; for line items it is the item quantity.
    """
    match discount:
        case PercentageDiscount(value=rate):
            return round_minor_units(base * rate)
        case FixedDiscount():
            quantity = discount.quantity if discount.is_explicit else default_quantity
            return round_minor_units(discount.value * quantity)
        case _:
            raise UnhandledVariantError(type(discount).__name__, _DISCOUNT_KINDS)


def item_net_amount(item: LineItem) -> int:
    """Net amount of a line item after its own discounts."""
    net = round_minor_units(item.unit_price * item.quantity)
    for discount in item.discounts:
        net -= discount_amount(discount, net, item.quantity)
    return net


class SummaryEngine:
    def __init__(self, config: SummaryConfig | None = None) -> None:
        self._config = config or SummaryConfig()

    @property
    def config(self) -> SummaryConfig:
        return self._config

    def summarize(
        self,
        items: Sequence[LineItem],
        discounts: Sequence[Discount] = (),
        status: InvoiceStatus | QuoteStatus | None = None,
    ) -> list[SummaryLine]:
        result: list[SummaryLine] = []

        has_discounts = len(discounts) > 0
        has_vat = any(item.tax_rate != 0 for item in items)

        subtotal = sum((item_net_amount(item) for item in items), 0)
        if has_discounts or has_vat:
            result.append(SubtotalLine(subtotal))

        discount_total = 0
        for discount in discounts:
            value = discount_amount(discount, subtotal)
            result.append(DiscountLine(discount=discount, value=value))
            discount_total += value
            subtotal -= value

        is_single_fixed_discount = len(discounts) == 1 and isinstance(
            discounts[0], FixedDiscount
        )
        if has_discounts and not is_single_fixed_discount:
            result.append(SubtotalLine(discount_total, subtype=SubtotalKind.DISCOUNTS))

        subtotal = self._apply_negative_policy(subtotal)

        vats = self._vat_by_rate(items, subtotal, has_discounts)
        vat_total = sum(vats.values(), 0)

        if vat_total > 0 and discount_total > 0:
            result.append(SubtotalLine(subtotal))

        for rate, value in vats.items():
            result.append(VatLine(rate=rate, value=value))

        total_value = subtotal + vat_total
        result.append(TotalLine(total_value))

        if status == InvoiceStatus.PAID:
            result.append(PaidLine(total_value))

        return result

    def summarize_document(self, document: Document) -> list[SummaryLine]:
        match document:
            case Quote() | Invoice():
                status = document.status
            case Receipt():
                status = None
            case _:
                raise UnhandledVariantError(
                    type(document).__name__, ["quote", "invoice", "receipt"]
                )
        return self.summarize(document.items, document.discounts, status)

    def total(
        self, items: Sequence[LineItem], discounts: Sequence[Discount] = ()
    ) -> int:
        return next(
            line.value
            for line in self.summarize(items, discounts)
            if isinstance(line, TotalLine)
        )

    def _apply_negative_policy(self, subtotal: int) -> int:
        if subtotal >= 0:
            return subtotal
        match self._config.negative_totals:
            case NegativeTotalPolicy.ALLOW:
                return subtotal
            case NegativeTotalPolicy.CLAMP:
                return 0
            case NegativeTotalPolicy.REJECT:
                raise NegativeTotalError(subtotal)
            case _:
                raise UnhandledVariantError(
                    self._config.negative_totals,
                    [policy.value for policy in NegativeTotalPolicy],
                )

    def _vat_by_rate(
        self, items: Iterable[LineItem], subtotal: int, has_discounts: bool
    ) -> dict[Decimal, int]:
        items = list(items)
        rates = distinct_tax_rates(items)
        if not rates:
            return {}

        # dict keeps first-encounter order of the rates
        if all(item.tax_rate == rates[0] for item in items):
            return {rates[0]: round_minor_units(subtotal * rates[0])}

        if has_discounts:
            logger.warning(
                "vat_computed_before_discounts",
                reason="mixed_tax_rates" if len(rates) > 1 else "untaxed_items",
                tax_rates=rates,
            )

        exact: dict[Decimal, Decimal] = {rate: Decimal("0") for rate in rates}
        for item in items:
            if item.tax_rate == 0:
                continue
            exact[item.tax_rate] += item.unit_price * item.quantity * item.tax_rate
        return {rate: round_minor_units(value) for rate, value in exact.items()}


def summarize(
    items: Sequence[LineItem],
    discounts: Sequence[Discount] = (),
    status: InvoiceStatus | QuoteStatus | None = None,
    config: SummaryConfig | None = None,
) -> list[SummaryLine]:
    """Summarize items and document discounts into ordered display lines."""
    return SummaryEngine(config).summarize(items, discounts, status)


def summarize_document(
    document: Document, config: SummaryConfig | None = None
) -> list[SummaryLine]:
    return SummaryEngine(config).summarize_document(document)


def total(items: Sequence[LineItem], discounts: Sequence[Discount] = ()) -> int:
    return SummaryEngine().total(items, discounts)


__all__ = [
    "SummaryConfig",
    "SummaryEngine",
    "discount_amount",
    "item_net_amount",
    "summarize",
    "summarize_document",
    "total",
]

"""Numbering strategies for new quotes and invoices.

Counters live for the lifetime of the process only. Retracted numbers are
never reused and gaps are never filled.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date

from invoice_ledger.domain.value_objects import DateBase
from invoice_ledger.exceptions import UnhandledVariantError

DEFAULT_INCREMENT_DIGITS = 4
DEFAULT_DATE_DIGITS = 3


def _quarter(value: date) -> int:
    return (value.month - 1) // 3 + 1


DATE_BASES: dict[DateBase, Callable[[date], str]] = {
    DateBase.YYYYMMDD: lambda d: f"{d.year:04d}{d.month:02d}{d.day:02d}",
    DateBase.YYYYQ: lambda d: f"{d.year:04d}{_quarter(d)}",
    DateBase.YYQ: lambda d: f"{d.year % 100:02d}{_quarter(d)}",
    DateBase.YYQQ: lambda d: f"{d.year % 100:02d}{_quarter(d):02d}",
    DateBase.YY: lambda d: f"{d.year % 100:02d}",
}


def _check_digits(significant_digits: int) -> int:
    if isinstance(significant_digits, bool) or not isinstance(significant_digits, int):
        raise ValueError(f"significant_digits must be an integer, got {significant_digits!r}")
    if significant_digits < 1:
        raise ValueError(f"significant_digits must be at least 1, got {significant_digits}")
    return significant_digits


class NumberStrategy(ABC):
    """Produces the next human-visible document number.

    Calls to next() are serialized with a lock, so a strategy can be shared
    between threads without handing out the same number twice.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @abstractmethod
    def next(self, reference_date: date | None = None) -> str:
        pass


class IncrementStrategy(NumberStrategy):
    """0001, 0002, 0003, ... regardless of the reference date."""

    def __init__(self, significant_digits: int = DEFAULT_INCREMENT_DIGITS) -> None:
        super().__init__()
        self._significant_digits = _check_digits(significant_digits)
        self._count = 0

    def next(self, reference_date: date | None = None) -> str:
        with self._lock:
            self._count += 1
            count = self._count
        return str(count).zfill(self._significant_digits)


class DateBasedStrategy(NumberStrategy):
    """Bucket key derived from the date followed by a per-bucket counter.

    With the default base, 2023-02-01 yields 20230201001, 20230201002, ...
    Dates that map to the same key share a counter.
    """

    def __init__(
        self,
        base: DateBase | str | Callable[[date], str] = DateBase.YYYYMMDD,
        significant_digits: int = DEFAULT_DATE_DIGITS,
    ) -> None:
        super().__init__()
        self._base = self._resolve_base(base)
        self._significant_digits = _check_digits(significant_digits)
        self._counts_by_key: dict[str, int] = {}

    @staticmethod
    def _resolve_base(
        base: DateBase | str | Callable[[date], str],
    ) -> Callable[[date], str]:
        if callable(base):
            return base
        try:
            return DATE_BASES[DateBase(base)]
        except ValueError:
            raise UnhandledVariantError(base, [b.value for b in DateBase]) from None

    def next(self, reference_date: date | None = None) -> str:
        key = self._base(reference_date or date.today())
        with self._lock:
            count = self._counts_by_key.get(key, 0) + 1
            self._counts_by_key[key] = count
        return f"{key}{str(count).zfill(self._significant_digits)}"


def build_number_strategy(
    name: str,
    significant_digits: int | None = None,
    base: DateBase | str | Callable[[date], str] = DateBase.YYYYMMDD,
) -> NumberStrategy:
    """Create a strategy by name: ``"increment"`` or ``"date"``."""
    match name:
        case "increment":
            if significant_digits is None:
                significant_digits = DEFAULT_INCREMENT_DIGITS
            return IncrementStrategy(significant_digits)
        case "date":
            if significant_digits is None:
                significant_digits = DEFAULT_DATE_DIGITS
            return DateBasedStrategy(base, significant_digits)
        case _:
            raise UnhandledVariantError(name, ["increment", "date"])


__all__ = [
    "DATE_BASES",
    "DateBasedStrategy",
    "IncrementStrategy",
    "NumberStrategy",
    "build_number_strategy",
]

"""Value objects returned by the MNB services.

All of them are frozen and rebuilt from every response; nothing here is
cached or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterator

from .codec import format_date, format_decimal


class DomainError(ValueError):
    """A value object was built with inconsistent data."""


@dataclass(frozen=True)
class Rate:
    """Exchange rate of `unit` pieces of `currency`, in HUF."""

    currency: str
    unit: int
    rate: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.currency, str) or not self.currency.strip():
            raise DomainError("currency cannot be empty")
        if not isinstance(self.unit, int) or self.unit < 1:
            raise DomainError(f"unit must be a positive int, got {self.unit!r}")
        if not isinstance(self.rate, Decimal):
            raise DomainError("rate must be a Decimal")


@dataclass(frozen=True)
class DayRates:
    day: date
    rates: tuple[Rate, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # accept any iterable, store as tuple
        object.__setattr__(self, "rates", tuple(self.rates))

    def get(self, currency: str) -> Rate | None:
        code = (currency or "").strip().upper()
        for r in self.rates:
            if r.currency == code:
                return r
        return None

    def as_rows(self) -> Iterator[dict[str, Any]]:
        """Yield flat {day, currency, unit, rate} rows for presentation."""
        day = format_date(self.day)
        for r in self.rates:
            yield {
                "day": day,
                "currency": r.currency,
                "unit": r.unit,
                "rate": format_decimal(r.rate),
            }


@dataclass(frozen=True)
class BaseRate:
    """Central bank base rate, valid from its publication date."""

    publication: date
    rate: Decimal

    def as_dict(self) -> dict[str, str]:
        return {
            "publication": format_date(self.publication),
            "rate": format_decimal(self.rate),
        }


@dataclass(frozen=True)
class ServiceInfo:
    first_date: date
    last_date: date
    currencies: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "currencies", tuple(self.currencies))


@dataclass(frozen=True)
class DateInterval:
    start: date
    end: date


@dataclass(frozen=True)
class CurrencyUnit:
    currency: str
    unit: Decimal

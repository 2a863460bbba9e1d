"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class CategoryId:
    """Unique identifier for a ParkingCategory."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ReservationId:
    """Unique identifier for a Reservation."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0"))

    def quantized(self) -> Self:
        return type(self)(amount=self.amount.quantize(CENTS, rounding=ROUND_HALF_UP))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class Percentage:
    """A percentage between 0 and 100 inclusive."""

    value: Decimal

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.value <= Decimal("100"):
            raise ValueError("Percentage must be between 0 and 100")

    def of(self, amount: Decimal) -> Decimal:
        return amount * self.value / Decimal("100")


@dataclass(frozen=True)
class TimeInterval:
    """Half-open datetime interval ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("Interval end must be after its start")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("Date range end cannot precede its start")

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def span_days(self) -> int:
        return (self.end - self.start).days + 1

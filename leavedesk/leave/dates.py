"""Whole-day date range arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


def total_days(start: date, end: date) -> int:
    """Inclusive day count between *start* and *end*; ``0`` when reversed."""
    if end < start:
        return 0
    return (end - start).days + 1


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @property
    def total_days(self) -> int:
        return total_days(self.start, self.end)

    @property
    def is_valid(self) -> bool:
        return self.total_days > 0

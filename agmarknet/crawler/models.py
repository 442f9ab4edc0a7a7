"""Value types shared by the crawler components."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

NOT_REPORTED_TOKEN = "NR"


@dataclass(frozen=True)
class CalendarDate:
    """One report instance: a (day, month name, year) triple.

    Equality and hashing are structural. No calendar validation is performed;
    the remote calendar is the authority on which days exist.
    """

    day: int
    month: str
    year: int

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "month": self.month, "year": self.year}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CalendarDate":
        return cls(
            day=int(payload["day"]),
            month=str(payload["month"]),
            year=int(payload["year"]),
        )

    def __str__(self) -> str:
        return f"{self.day} {self.month} {self.year}"


@dataclass(frozen=True)
class Arrivals:
    """Arrival quantity for a market row.

    ``quantity`` is ``None`` only for the "not reported" value, so a reported
    zero and ``NOT_REPORTED`` never compare equal.
    """

    quantity: Optional[float]

    @property
    def is_reported(self) -> bool:
        return self.quantity is not None

    @classmethod
    def parse(cls, text: str) -> "Arrivals":
        """Parse a non-blank arrivals cell; raises ``ValueError`` on junk."""

        if text == NOT_REPORTED_TOKEN:
            return NOT_REPORTED
        return cls(parse_number(text))

    def __str__(self) -> str:
        if self.quantity is None:
            return NOT_REPORTED_TOKEN
        return format_number(self.quantity)


NOT_REPORTED = Arrivals(None)


def parse_number(text: str) -> float:
    """Parse a numeric table cell, rejecting blanks and non-finite values."""

    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"non-finite number: {text!r}")
    return value


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass(frozen=True)
class Record:
    """One harvested market row, tagged with its region and date."""

    region: str
    date: CalendarDate
    group: Optional[str]
    crop: Optional[str]
    market: Optional[str]
    arrivals: Optional[Arrivals]
    unit_arrival: str
    variety: str
    min_price: float
    max_price: float
    modal_price: float
    unit_price: str

    def as_row(self) -> list[str]:
        """Return the CSV row for this record in output column order."""

        return [
            self.region,
            str(self.date.day),
            self.date.month,
            str(self.date.year),
            self.group or "",
            self.crop or "",
            self.market or "",
            "" if self.arrivals is None else str(self.arrivals),
            self.unit_arrival,
            self.variety,
            format_number(self.min_price),
            format_number(self.max_price),
            format_number(self.modal_price),
            self.unit_price,
        ]


__all__ = [
    "CalendarDate",
    "Arrivals",
    "NOT_REPORTED",
    "NOT_REPORTED_TOKEN",
    "Record",
    "parse_number",
    "format_number",
]

"""Clock-time recognition and normalization.

A time expression is an hour (``[1-9]`` optionally followed by a second
digit) with either minutes after a ``:``, ``.`` or space separator, or an
am/pm marker, or both. The first match in the text wins.

Hours without am/pm are read on the 24-hour clock: ``10:30`` is morning,
``12:15`` is just after noon and ``14:05`` is early afternoon.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from timeteller.exceptions import InvalidTimeError

TIME_RX = re.compile(
    r"(?P<hour>[1-9]\d?)"
    r"(?:[:. ](?P<minute>\d{2})(?: ?(?P<meridiem>[ap]m))?"
    r"|(?: ?(?P<bare_meridiem>[ap]m)))",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class TimeExpression:
    """A clock-time substring found in message text."""

    text: str
    hour: int
    minute: int | None = None
    meridiem: str | None = None


@dataclass(frozen=True)
class NormalizedTime:
    """A validated wall-clock time, rendered as ``h:mm AM/PM``."""

    hour: int
    minute: int

    @property
    def hour12(self) -> int:
        return self.hour % 12 or 12

    @property
    def meridiem(self) -> str:
        return "PM" if self.hour >= 12 else "AM"

    def __str__(self) -> str:
        return f"{self.hour12}:{self.minute:02d} {self.meridiem}"


def find_time(text: str) -> TimeExpression | None:
    """Scan ``text`` once and return the leftmost time expression, if any."""
    match = TIME_RX.search(text or "")
    if match is None:
        return None

    minute = match.group("minute")
    meridiem = match.group("meridiem") or match.group("bare_meridiem")
    return TimeExpression(
        text=match.group(0),
        hour=int(match.group("hour")),
        minute=int(minute) if minute is not None else None,
        meridiem=meridiem.lower() if meridiem else None,
    )


def detect(text: str) -> bool:
    return find_time(text) is not None


def extract(text: str) -> TimeExpression | None:
    return find_time(text)


def normalize(expr: TimeExpression) -> NormalizedTime:
    """Resolve hour, minute and meridiem into a 24-hour time.

    Raises:
        InvalidTimeError: If the hour or minute is out of range.
    """
    minute = expr.minute if expr.minute is not None else 0
    if not 0 <= minute <= 59:
        raise InvalidTimeError(expr.text, f"minute {minute} is out of range")

    if expr.meridiem is None:
        hour = expr.hour
        if not 0 <= hour <= 23:
            raise InvalidTimeError(expr.text, f"hour {hour} is out of range")
        return NormalizedTime(hour=hour, minute=minute)

    if not 1 <= expr.hour <= 12:
        raise InvalidTimeError(
            expr.text, f"hour {expr.hour} is out of range for {expr.meridiem}"
        )

    hour = expr.hour % 12
    if expr.meridiem == "pm":
        hour += 12
    return NormalizedTime(hour=hour, minute=minute)


def normalize_time(text: str) -> str:
    """Return the canonical ``h:mm AM/PM`` form of the first time in ``text``.

    Raises:
        InvalidTimeError: If ``text`` holds no time or an out-of-range one.
    """
    expr = find_time(text)
    if expr is None:
        raise InvalidTimeError(text, "no time expression found")
    return str(normalize(expr))

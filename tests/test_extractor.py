from __future__ import annotations

import pytest

from timeteller.exceptions import InvalidTimeError
from timeteller.modules.time_teller.extractor import (
    NormalizedTime,
    detect,
    extract,
    find_time,
    normalize,
    normalize_time,
)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "no numbers here",
        "I have 3 cats",
        "Room 42",
        "version 0.5",
        "see you at noon",
    ],
)
def test_detect_rejects_text_without_clock_time(text: str) -> None:
    assert detect(text) is False
    assert extract(text) is None


def test_extract_time_with_minutes_and_meridiem() -> None:
    expr = extract("Let's meet at 3:30pm")

    assert expr is not None
    assert expr.text == "3:30pm"
    assert (expr.hour, expr.minute, expr.meridiem) == (3, 30, "pm")
    assert str(normalize(expr)) == "3:30 PM"


def test_extract_hour_with_meridiem_only() -> None:
    expr = extract("call me at 9am")

    assert expr is not None
    assert expr.minute is None
    assert str(normalize(expr)) == "9:00 AM"


def test_leftmost_match_wins() -> None:
    expr = find_time("either 3pm or 5pm works")

    assert expr is not None
    assert expr.text == "3pm"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("standup at 10.15", "10:15 AM"),
        ("lunch at 12 30", "12:30 PM"),
        ("deploy at 14:05", "2:05 PM"),
        ("ping me at 9 PM", "9:00 PM"),
        ("ON AIR 7:45AM", "7:45 AM"),
        ("midnight is 12am", "12:00 AM"),
        ("noon is 12pm", "12:00 PM"),
        ("at 11:59 pm sharp", "11:59 PM"),
    ],
)
def test_normalize_time(text: str, expected: str) -> None:
    assert detect(text) is True
    assert normalize_time(text) == expected


def test_bare_hours_read_on_24_hour_clock() -> None:
    assert normalize_time("8:00") == "8:00 AM"
    assert normalize_time("12:00") == "12:00 PM"
    assert normalize_time("23:10") == "11:10 PM"


@pytest.mark.parametrize("text", ["at 25:00", "the 13pm train", "at 9:75", "24:00"])
def test_out_of_range_values_are_invalid(text: str) -> None:
    expr = extract(text)

    assert expr is not None
    with pytest.raises(InvalidTimeError):
        normalize(expr)


def test_normalize_time_without_a_time_raises() -> None:
    with pytest.raises(InvalidTimeError):
        normalize_time("nothing to see")


def test_normalized_form_is_stable() -> None:
    for hour in range(24):
        for minute in (0, 5, 30, 59):
            canonical = str(NormalizedTime(hour=hour, minute=minute))
            assert normalize_time(canonical) == canonical

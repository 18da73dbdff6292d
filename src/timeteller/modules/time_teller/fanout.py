"""Convert a normalized time into every distinct member timezone."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from timeteller.modules.time_teller.extractor import NormalizedTime
from timeteller.modules.time_teller.models import (
    ConversionResult,
    TimezoneGroup,
    WorkspaceMember,
)


def clock_emoji(hour: int) -> str:
    """Return the clock-face shortcode for an hour of the day (0-23)."""
    return f":clock{hour % 12 or 12}:"


def timezone_groups(
    members: Iterable[WorkspaceMember],
    sender_id: int,
) -> list[TimezoneGroup]:
    """Deduplicate recipients by (offset, label), keeping first-seen order."""
    groups: dict[tuple[float, str], TimezoneGroup] = {}
    for member in members:
        if member.id == sender_id:
            continue
        key = (member.utc_offset_minutes / 60, member.timezone_label)
        if key not in groups:
            groups[key] = TimezoneGroup(offset_hours=key[0], label=key[1])
    return list(groups.values())


def sender_instant(
    normalized: NormalizedTime,
    sender_tz: ZoneInfo,
    now: datetime | None = None,
) -> datetime:
    """Place ``normalized`` on today's date in the sender's timezone."""
    today = (now or datetime.now(timezone.utc)).astimezone(sender_tz).date()
    return datetime(
        today.year,
        today.month,
        today.day,
        normalized.hour,
        normalized.minute,
        tzinfo=sender_tz,
    )


def format_local(moment: datetime) -> str:
    """Format as ``YYYY-MM-DD h:mm AM/PM``."""
    hour12 = moment.hour % 12 or 12
    meridiem = "PM" if moment.hour >= 12 else "AM"
    return f"{moment:%Y-%m-%d} {hour12}:{moment.minute:02d} {meridiem}"


def respond(
    normalized: NormalizedTime,
    sender_timezone_id: str,
    members: Iterable[WorkspaceMember],
    *,
    sender_id: int,
    now: datetime | None = None,
) -> Iterator[ConversionResult]:
    """Yield one conversion per distinct timezone among the other members.

    Args:
        normalized: The time the sender wrote.
        sender_timezone_id: IANA timezone the time is interpreted in.
        members: Full member list, sender included.
        sender_id: Member excluded from the audience.
        now: Reference instant for "today"; defaults to the current time.
    """
    instant = sender_instant(normalized, ZoneInfo(sender_timezone_id), now)
    for group in timezone_groups(members, sender_id):
        offset = timezone(timedelta(hours=group.offset_hours))
        yield ConversionResult(group=group, local_time=format_local(instant.astimezone(offset)))


def format_reply(normalized: NormalizedTime, result: ConversionResult) -> str:
    return f"**{normalized}** is **{result.local_time}** in **{result.group.label}**."

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UserTimezone:
    """A member's saved IANA timezone."""

    user_id: int
    timezone: str

    def to_firestore(self) -> dict:
        return {
            "user_id": self.user_id,
            "timezone": self.timezone,
        }

    @classmethod
    def from_firestore(cls, data: dict) -> UserTimezone:
        return cls(
            user_id=data["user_id"],
            timezone=data["timezone"],
        )


@dataclass(frozen=True)
class WorkspaceMember:
    """Directory snapshot of one member and their current UTC offset."""

    id: int
    utc_offset_minutes: int
    timezone_label: str
    timezone_id: str


@dataclass(frozen=True)
class InboundMessage:
    """A chat message as seen by the handler."""

    sender_id: int
    channel_id: int
    workspace_id: int
    text: str
    bot_id: int | None = None


@dataclass(frozen=True)
class TimezoneGroup:
    """One distinct (offset, label) pair among the recipients."""

    offset_hours: float
    label: str


@dataclass(frozen=True)
class ConversionResult:
    group: TimezoneGroup
    local_time: str

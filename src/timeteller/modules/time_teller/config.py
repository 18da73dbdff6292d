from __future__ import annotations

from dataclasses import asdict, dataclass

from timeteller.utils import drop_none

DEFAULT_REPLY_USERNAME = "Tell my timezone"


@dataclass
class TimeTellerConfig:
    """Guild-level configuration for the Time Teller module."""

    guild_id: int
    enabled: bool = False
    reply_username: str = DEFAULT_REPLY_USERNAME

    def to_firestore(self) -> dict:
        return drop_none(asdict(self))

    @classmethod
    def from_firestore(cls, data: dict) -> TimeTellerConfig:
        return cls(
            guild_id=data["guild_id"],
            enabled=data.get("enabled", False),
            reply_username=data.get("reply_username") or DEFAULT_REPLY_USERNAME,
        )

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import pytest

from timeteller.modules.time_teller.handler import handle_message
from timeteller.modules.time_teller.models import InboundMessage, WorkspaceMember

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
BOT_ID = 99
SENDER_ID = 1
CHANNEL_ID = 500
GUILD_ID = 700


class FakeDirectory:
    def __init__(self, members: Sequence[WorkspaceMember]) -> None:
        self.members = list(members)
        self.calls: list[int] = []

    async def lookup(self, workspace_id: int) -> Sequence[WorkspaceMember]:
        self.calls.append(workspace_id)
        return self.members


class FakeSender:
    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.sent: list[tuple[int, str, str, str]] = []

    async def send(
        self, channel_id: int, text: str, display_name: str, icon_id: str
    ) -> None:
        if self.fail_on and self.fail_on in text:
            raise RuntimeError("send failed")
        self.sent.append((channel_id, text, display_name, icon_id))


def _member(user_id: int, offset_minutes: int, label: str, tz: str) -> WorkspaceMember:
    return WorkspaceMember(
        id=user_id,
        utc_offset_minutes=offset_minutes,
        timezone_label=label,
        timezone_id=tz,
    )


MEMBERS = [
    _member(SENDER_ID, 0, "UTC", "UTC"),
    _member(2, -300, "EST", "America/New_York"),
    _member(3, -300, "EST", "America/Detroit"),
    _member(4, 60, "CET", "Europe/Paris"),
]


def _event(text: str, sender_id: int = SENDER_ID) -> InboundMessage:
    return InboundMessage(
        sender_id=sender_id,
        channel_id=CHANNEL_ID,
        workspace_id=GUILD_ID,
        text=text,
        bot_id=BOT_ID,
    )


async def test_replies_once_per_distinct_timezone() -> None:
    directory = FakeDirectory(MEMBERS)
    sender = FakeSender()

    sent = await handle_message(
        _event("Let's meet at 3:30pm"),
        directory,
        sender,
        display_name="Tell my timezone",
        now=NOW,
    )

    assert sent == 2
    assert directory.calls == [GUILD_ID]
    assert sender.sent == [
        (
            CHANNEL_ID,
            "**3:30 PM** is **2026-10-19 10:30 AM** in **EST**.",
            "Tell my timezone",
            ":clock3:",
        ),
        (
            CHANNEL_ID,
            "**3:30 PM** is **2026-10-19 4:30 PM** in **CET**.",
            "Tell my timezone",
            ":clock3:",
        ),
    ]


async def test_message_without_time_makes_no_external_calls() -> None:
    directory = FakeDirectory(MEMBERS)
    sender = FakeSender()

    sent = await handle_message(
        _event("nothing to convert"), directory, sender, display_name="x"
    )

    assert sent == 0
    assert directory.calls == []
    assert sender.sent == []


async def test_messages_from_the_bot_are_ignored() -> None:
    directory = FakeDirectory(MEMBERS)

    sent = await handle_message(
        _event("at 9am", sender_id=BOT_ID), directory, FakeSender(), display_name="x"
    )

    assert sent == 0
    assert directory.calls == []


async def test_invalid_time_is_silent() -> None:
    sender = FakeSender()

    sent = await handle_message(
        _event("platform 25:10"), FakeDirectory(MEMBERS), sender, display_name="x"
    )

    assert sent == 0
    assert sender.sent == []


@pytest.mark.parametrize(
    "members",
    [
        [],
        [_member(SENDER_ID, 0, "UTC", "UTC")],
        [_member(2, -300, "EST", "America/New_York")],
    ],
)
async def test_empty_audience_or_unknown_sender_sends_nothing(
    members: list[WorkspaceMember],
) -> None:
    sender = FakeSender()

    sent = await handle_message(
        _event("at 9am"), FakeDirectory(members), sender, display_name="x", now=NOW
    )

    assert sent == 0
    assert sender.sent == []


async def test_one_failed_send_does_not_stop_the_others(caplog) -> None:
    sender = FakeSender(fail_on="EST")

    sent = await handle_message(
        _event("at 9am"),
        FakeDirectory(MEMBERS),
        sender,
        display_name="x",
        now=NOW,
    )

    assert sent == 1
    assert [text for _, text, _, _ in sender.sent] == [
        "**9:00 AM** is **2026-10-19 10:00 AM** in **CET**."
    ]
    assert "Failed to send reply" in caplog.text


async def test_sender_timezone_drives_the_conversion() -> None:
    members = [
        _member(SENDER_ID, -300, "EST", "America/New_York"),
        _member(2, 0, "UTC", "UTC"),
    ]
    sender = FakeSender()

    await handle_message(
        _event("standup at 12am"), FakeDirectory(members), sender, display_name="x", now=NOW
    )

    # Midnight in New York on Oct 19 (EDT, UTC-4) is 04:00 UTC
    assert sender.sent[0][1] == "**12:00 AM** is **2026-10-19 4:00 AM** in **UTC**."
    assert sender.sent[0][3] == ":clock12:"

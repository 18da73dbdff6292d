"""Platform-independent message handling for the time teller."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfoNotFoundError

from timeteller.exceptions import InvalidTimeError
from timeteller.modules.time_teller.extractor import find_time, normalize
from timeteller.modules.time_teller.fanout import clock_emoji, format_reply, respond
from timeteller.modules.time_teller.models import InboundMessage, WorkspaceMember

LOGGER = logging.getLogger(__name__)


class MemberDirectory(Protocol):
    async def lookup(self, workspace_id: int) -> Sequence[WorkspaceMember]: ...


class MessageSender(Protocol):
    async def send(
        self, channel_id: int, text: str, display_name: str, icon_id: str
    ) -> None: ...


async def handle_message(
    event: InboundMessage,
    directory: MemberDirectory,
    sender: MessageSender,
    *,
    display_name: str,
    now: datetime | None = None,
) -> int:
    """Reply with the message's time in every other member timezone.

    Returns:
        The number of replies that were sent successfully.
    """
    if event.bot_id is not None and event.sender_id == event.bot_id:
        return 0

    expr = find_time(event.text)
    if expr is None:
        return 0

    members = await directory.lookup(event.workspace_id)
    author = next((m for m in members if m.id == event.sender_id), None)
    if author is None or not author.timezone_id:
        LOGGER.debug(
            "No timezone for sender %s in workspace %s",
            event.sender_id,
            event.workspace_id,
        )
        return 0

    try:
        normalized = normalize(expr)
    except InvalidTimeError as exc:
        LOGGER.debug("Ignoring message: %s", exc)
        return 0

    try:
        replies = [
            format_reply(normalized, result)
            for result in respond(
                normalized,
                author.timezone_id,
                members,
                sender_id=event.sender_id,
                now=now,
            )
        ]
    except ZoneInfoNotFoundError:
        LOGGER.warning(
            "Unknown timezone %r for sender %s", author.timezone_id, event.sender_id
        )
        return 0
    if not replies:
        LOGGER.debug("No other timezones in workspace %s", event.workspace_id)
        return 0

    icon_id = clock_emoji(normalized.hour)
    outcomes = await asyncio.gather(
        *(
            sender.send(event.channel_id, text, display_name, icon_id)
            for text in replies
        ),
        return_exceptions=True,
    )

    sent = 0
    for text, outcome in zip(replies, outcomes):
        if isinstance(outcome, BaseException):
            LOGGER.warning(
                "Failed to send reply to channel %s: %s",
                event.channel_id,
                text,
                exc_info=outcome,
            )
        else:
            sent += 1
    return sent

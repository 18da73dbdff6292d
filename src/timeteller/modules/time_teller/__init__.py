# Time Teller Module
# Replies to clock times in chat with the same moment in every
# member's local timezone.

from timeteller.modules.time_teller.extractor import (
    NormalizedTime,
    TimeExpression,
    detect,
    extract,
    normalize,
    normalize_time,
)
from timeteller.modules.time_teller.fanout import clock_emoji, respond
from timeteller.modules.time_teller.models import (
    ConversionResult,
    InboundMessage,
    TimezoneGroup,
    UserTimezone,
    WorkspaceMember,
)

__all__ = [
    "ConversionResult",
    "InboundMessage",
    "NormalizedTime",
    "TimeExpression",
    "TimezoneGroup",
    "UserTimezone",
    "WorkspaceMember",
    "clock_emoji",
    "detect",
    "extract",
    "normalize",
    "normalize_time",
    "respond",
]

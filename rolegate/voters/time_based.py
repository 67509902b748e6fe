"""
ROLEGATE - Time Based Voter

Example voter: allows access only inside a daily time window.

The window is inclusive on both ends and evaluated in the configured
timezone. A window whose end is before its start (e.g. 22:00-06:00)
crosses midnight.
"""

import re
from datetime import datetime, time, timedelta, timezone as dt_timezone
from typing import Any, Callable, Optional, Tuple
from zoneinfo import ZoneInfo

from rolegate.core.vote import VoteResult
from rolegate.voters.base import UserId, Voter

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_time(value: str) -> Tuple[int, int]:
    """Parse "HH:MM". Malformed values fall back to 00:00."""
    match = TIME_PATTERN.match(value)
    if match is None:
        return 0, 0
    return int(match.group(1)), int(match.group(2))


class TimeBasedVoter(Voter):
    """
    Allow during business hours.

    Args:
        clock: Callable returning the current aware datetime
        start_time: Window start, "HH:MM"
        end_time: Window end, "HH:MM"
        timezone: IANA zone name the window is expressed in
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        start_time: str = "09:00",
        end_time: str = "17:00",
        timezone: str = "UTC",
    ):
        self._clock = clock or (lambda: datetime.now(dt_timezone.utc))
        self.start_time = start_time
        self.end_time = end_time
        self.timezone = timezone

    def vote(self, user_id: UserId, permission: Any, subject: Any = None) -> VoteResult:
        tz = ZoneInfo(self.timezone)
        now = self._clock().astimezone(tz)

        start_hour, start_minute = parse_time(self.start_time)
        end_hour, end_minute = parse_time(self.end_time)

        start = datetime.combine(now.date(), time(start_hour, start_minute), tzinfo=tz)
        end = datetime.combine(now.date(), time(end_hour, end_minute), tzinfo=tz)

        if end < start:
            # Window crosses midnight
            if now < start:
                start -= timedelta(days=1)
            else:
                end += timedelta(days=1)

        window = f"{start:%H:%M}-{end:%H:%M}"
        if start <= now <= end:
            return VoteResult.allow(
                f"Access granted during business hours ({window}). Current: {now:%H:%M}"
            )

        return VoteResult.deny(
            f"Access denied outside business hours ({window}). Current: {now:%H:%M}"
        )


__all__ = ["TimeBasedVoter", "parse_time"]

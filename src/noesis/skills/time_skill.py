"""Time skill — current date and time for prompts.

Built-in skill, always registered. Pure local clock, no network.
Templates use it as ``{{time.today}}``, ``{{time.now}}`` and so on.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from noesis.kernel.skills import skill_function


class TimeSkill:
    """Date and time helpers. ``clock`` is injectable for tests."""

    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now().astimezone())

    def _now(self) -> datetime:
        return self._clock()

    @skill_function(description="Current date, e.g. 'Sunday, 18 October, 2026'")
    def date(self) -> str:
        return self._now().strftime("%A, %d %B, %Y")

    @skill_function(description="Current date (alias of date)")
    def today(self) -> str:
        return self.date()

    @skill_function(description="Current date and time in the local timezone")
    def now(self) -> str:
        return self._now().strftime("%A, %B %d, %Y %I:%M %p")

    @skill_function(description="Current UTC date and time")
    def utc_now(self) -> str:
        return self._now().astimezone(timezone.utc).strftime("%A, %B %d, %Y %H:%M")

    @skill_function(description="Current time, e.g. '09:15 AM'")
    def time(self) -> str:
        return self._now().strftime("%I:%M %p")

    @skill_function(description="Current year")
    def year(self) -> str:
        return self._now().strftime("%Y")

    @skill_function(description="Current month name")
    def month(self) -> str:
        return self._now().strftime("%B")

    @skill_function(description="Current day of the month")
    def day(self) -> str:
        return self._now().strftime("%d")

    @skill_function(description="Current day of the week")
    def day_of_week(self) -> str:
        return self._now().strftime("%A")

    @skill_function(description="Current hour, 12-hour clock with AM/PM")
    def hour(self) -> str:
        return self._now().strftime("%I %p")

    @skill_function(description="Current minute")
    def minute(self) -> str:
        return self._now().strftime("%M")

    @skill_function(description="Name of the local timezone")
    def timezone_name(self) -> str:
        return self._now().tzname() or "UTC"

    @skill_function(description="Date N days ago; input is the number of days")
    def days_ago(self, input: str) -> str:
        try:
            days = int(input.strip())
        except ValueError:
            raise ValueError(f"days_ago expects a whole number of days, got '{input}'")
        return (self._now() - timedelta(days=days)).strftime("%A, %d %B, %Y")

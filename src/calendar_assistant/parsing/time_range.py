"""Resolve time expressions ("tomorrow", "next week", ...) into query windows.

Common phrases are answered from a fixed table without touching the text
generator; everything else is delegated to it.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Callable

import structlog

from calendar_assistant.agent.protocols import TextGenerator
from calendar_assistant.exceptions import ParseError, ValidationError
from calendar_assistant.models import Confidence, TimeRange
from calendar_assistant.parsing.prompt import build_time_range_prompt
from calendar_assistant.utils import get_zone

logger = structlog.get_logger()

END_OF_DAY = time(23, 59, 59)

Span = tuple[date, date, str]


def _single_day(offset: int, label: str) -> Callable[[date], Span]:
    def span(today: date) -> Span:
        day = today + timedelta(days=offset)
        return day, day, label

    return span


def _this_week(today: date) -> Span:
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6), "this week"


def _next_week(today: date) -> Span:
    monday = today - timedelta(days=today.weekday()) + timedelta(weeks=1)
    return monday, monday + timedelta(days=6), "next week"


def _this_weekend(today: date) -> Span:
    # Next occurring Saturday; today counts when today is Saturday.
    saturday = today + timedelta(days=(5 - today.weekday()) % 7)
    return saturday, saturday + timedelta(days=1), "this weekend"


SHORTCUTS: dict[str, Callable[[date], Span]] = {
    "today": _single_day(0, "today"),
    "tomorrow": _single_day(1, "tomorrow"),
    "yesterday": _single_day(-1, "yesterday"),
    "this week": _this_week,
    "week": _this_week,
    "next week": _next_week,
    "this weekend": _this_weekend,
}


def localize(now: datetime | None, zone: tzinfo) -> datetime:
    """Express ``now`` in ``zone``; naive values are taken as already local."""
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return now.replace(tzinfo=zone)
    return now.astimezone(zone)


def resolve_shortcut(expression: str, zone: tzinfo, now: datetime) -> TimeRange | None:
    """Resolve a literal shortcut phrase, or return None if it is not one."""
    key = (expression or "").strip().lower()
    span = SHORTCUTS.get(key)
    if span is None:
        return None

    first, last, label = span(localize(now, zone).date())
    return TimeRange(
        start=datetime.combine(first, time.min, zone),
        end=datetime.combine(last, END_OF_DAY, zone),
        description=label,
        confidence=Confidence.HIGH,
    )


def _parse_date(value: Any, field: str) -> date:
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ParseError(f"Invalid {field}: {value!r}") from exc


def _parse_time(value: Any, default: time, field: str) -> time:
    if value is None or not str(value).strip():
        return default
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ParseError(f"Invalid {field}: {value!r}") from exc


class TimeRangeResolver:
    """Turns a time phrase into a ``TimeRange``."""

    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    async def resolve(self, expression: str, timezone: str, now: datetime | None = None) -> TimeRange:
        """Resolve ``expression`` relative to ``now`` in ``timezone``.

        Raises:
            ParseError: If the generator's answer cannot be used.
            ValidationError: If the answer describes a range that ends before it starts.
            GeneratorError: If the generator is unavailable.
        """
        zone = get_zone(timezone)
        local_now = localize(now, zone)

        shortcut = resolve_shortcut(expression, zone, local_now)
        if shortcut is not None:
            logger.debug("time_range_shortcut", expression=expression, description=shortcut.description)
            return shortcut

        prompt = build_time_range_prompt(expression=expression, timezone=timezone, now=local_now)
        result = await self.generator.generate_structured(prompt)

        if not result.get("startDate") or not result.get("endDate"):
            raise ParseError("Failed to parse time range: missing required date fields")

        start = datetime.combine(
            _parse_date(result["startDate"], "startDate"),
            _parse_time(result.get("startTime"), time.min, "startTime").replace(second=0, microsecond=0),
            zone,
        )
        end = datetime.combine(
            _parse_date(result["endDate"], "endDate"),
            _parse_time(result.get("endTime"), END_OF_DAY, "endTime").replace(second=59, microsecond=0),
            zone,
        )
        if start > end:
            raise ValidationError(f"Time range ends before it starts: {start.isoformat()} > {end.isoformat()}")

        time_range = TimeRange(
            start=start,
            end=end,
            description=str(result.get("description") or expression.strip()),
            confidence=Confidence.coerce(result.get("confidence")),
        )
        logger.info(
            "time_range_resolved",
            description=time_range.description,
            confidence=time_range.confidence.value,
        )
        return time_range

"""Event-detail extraction.

Turns a free-text event description into an ``EventDraft`` via the text
generator, then applies the checks that must hold before a draft is shown
to the user.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Any

import structlog

from calendar_assistant.agent.protocols import TextGenerator
from calendar_assistant.exceptions import ValidationError
from calendar_assistant.models import Confidence, EventDraft
from calendar_assistant.parsing.prompt import build_event_details_prompt
from calendar_assistant.parsing.time_range import localize
from calendar_assistant.utils import get_zone

logger = structlog.get_logger()

PAST_DATE_NOTE = "Event date appears to be in the past"

REQUIRED_FIELDS = ("summary", "date", "startTime", "endTime")


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _clean_ambiguities(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [s for s in (_clean_str(v) for v in value) if s]


def _normalize_hhmm(value: str, field: str) -> str:
    """Normalize ``9:00`` / ``09:00:00`` to ``09:00``."""
    try:
        parsed = time.fromisoformat(value)
    except ValueError:
        try:
            parsed = datetime.strptime(value, "%H:%M").time()
        except ValueError as exc:
            raise ValidationError(f"{field} must be in HH:MM format, got {value!r}") from exc
    return parsed.strftime("%H:%M")


def build_draft(raw: dict[str, Any]) -> EventDraft:
    """Build a draft from the generator's JSON object.

    Raises:
        ValidationError: If required fields are missing or malformed, or the
            event does not end after it starts.
    """
    missing = [f for f in REQUIRED_FIELDS if not _clean_str(raw.get(f))]
    if missing:
        raise ValidationError(f"Missing required fields in parsed event: {', '.join(missing)}")

    draft = EventDraft(
        summary=_clean_str(raw["summary"]),
        description=_clean_str(raw.get("description")),
        date=_clean_str(raw["date"]),
        start_time=_normalize_hhmm(_clean_str(raw["startTime"]), "startTime"),
        end_time=_normalize_hhmm(_clean_str(raw["endTime"]), "endTime"),
        confidence=Confidence.coerce(raw.get("confidence")),
        ambiguities=_clean_ambiguities(raw.get("ambiguities")),
    )

    if time.fromisoformat(draft.end_time) <= time.fromisoformat(draft.start_time):
        raise ValidationError("End time must be after start time")
    return draft


class EventDetailExtractor:
    """Turns an event description into an ``EventDraft``."""

    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    async def extract(self, text: str, timezone: str, now: datetime | None = None) -> EventDraft:
        """Extract an event draft from ``text``.

        A draft that starts before ``now`` is kept, but flagged: an ambiguity
        note is added and confidence is forced to low.

        Raises:
            ParseError: If the generator's answer is not a JSON object.
            ValidationError: If required fields are missing or malformed, or
                ``endTime <= startTime``.
            GeneratorError: If the generator is unavailable.
        """
        zone = get_zone(timezone)
        local_now = localize(now, zone)

        prompt = build_event_details_prompt(text=text, timezone=timezone, now=local_now)
        raw = await self.generator.generate_structured(prompt)

        draft = build_draft(raw)
        try:
            starts_at = draft.start_at(zone)
        except ValueError as exc:
            raise ValidationError(f"Event date is not a valid calendar date: {draft.date!r}") from exc

        if starts_at < local_now:
            draft.add_ambiguity(PAST_DATE_NOTE)
            draft.confidence = Confidence.LOW

        logger.info(
            "event_parsed",
            summary=draft.summary,
            date=draft.date,
            confidence=draft.confidence.value,
            ambiguity_count=len(draft.ambiguities),
        )
        return draft

"""Keyword-based routing of free-text messages.

This is a heuristic: "Schedule a dentist visit" contains "schedule" and is
routed as a query. The rules are plain data so a richer classifier can take
over without touching call sites.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping


class Intent(str, Enum):
    """What a free-text message is asking for."""

    QUERY = "query"
    ADD_EVENT = "add_event"


DEFAULT_RULES: dict[Intent, frozenset[str]] = {
    Intent.QUERY: frozenset(
        {"what", "show", "plans", "schedule", "calendar", "do i have", "any events"}
    ),
}


class IntentClassifier:
    """Classify text by phrase containment.

    Rules are checked in mapping order; the first intent with a phrase
    contained in the lowercased text wins, otherwise ``default`` is returned.
    """

    def __init__(
        self,
        rules: Mapping[Intent, Iterable[str]] | None = None,
        default: Intent = Intent.ADD_EVENT,
    ) -> None:
        source = DEFAULT_RULES if rules is None else rules
        self.rules: dict[Intent, frozenset[str]] = {
            intent: frozenset(p.lower() for p in phrases) for intent, phrases in source.items()
        }
        self.default = default

    def classify(self, text: str) -> Intent:
        lowered = (text or "").lower()
        for intent, phrases in self.rules.items():
            if any(phrase in lowered for phrase in phrases):
                return intent
        return self.default

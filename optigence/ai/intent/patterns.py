"""
Keyword tables for network-free intent classification.

Rules are scanned in order against the lowercased text; the first rule
with a matching keyword decides the intent and its routing defaults.
Modifiers are applied afterwards to every result, whatever the intent.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from optigence.ai.intent.schemas import (
    Backend,
    Complexity,
    EmotionalTone,
    IntentType,
    Urgency,
)


@dataclass(frozen=True)
class IntentRule:
    """One row of the ordered keyword table."""
    intent: IntentType
    keywords: Tuple[str, ...]
    backend: Backend
    overrides: Dict[str, object] = field(default_factory=dict)

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule(IntentType.FOLLOW_UP, ("follow up", "follow-up"), Backend.OPENAI),
    IntentRule(
        IntentType.THANK_YOU, ("thank", "gratitude"), Backend.CLAUDE,
        {"emotional_tone": EmotionalTone.POSITIVE},
    ),
    IntentRule(
        IntentType.APOLOGY, ("apolog", "sorry"), Backend.CLAUDE,
        {"emotional_tone": EmotionalTone.NEGATIVE, "complexity": Complexity.COMPLEX},
    ),
    IntentRule(
        IntentType.SUMMARIZE, ("summar", "digest"), Backend.CLAUDE,
        {"complexity": Complexity.COMPLEX},
    ),
    IntentRule(IntentType.REPLY, ("reply", "respond"), Backend.CLAUDE),
    IntentRule(IntentType.REWRITE, ("rewrite", "improve"), Backend.OPENAI),
    IntentRule(
        IntentType.SCHEDULE, ("schedule", "meeting"), Backend.GEMINI,
        {"needs_real_time_info": True},
    ),
)

DEFAULT_INTENT = IntentType.OTHER
DEFAULT_BACKEND = Backend.OPENAI
FALLBACK_CONFIDENCE = 0.7

# Secondary checks, applied after the primary rule
URGENT_KEYWORDS = ("urgent", "asap", "immediately")
NEGATIVE_TONE_KEYWORDS = ("angry", "frustrated", "disappointed")
POSITIVE_TONE_KEYWORDS = ("excited", "pleased", "happy")
REAL_TIME_KEYWORDS = ("current", "latest", "recent", "news")

DEFAULT_CONTEXT = {
    "urgency": Urgency.MEDIUM,
    "complexity": Complexity.MODERATE,
    "emotional_tone": EmotionalTone.NEUTRAL,
    "needs_real_time_info": False,
}

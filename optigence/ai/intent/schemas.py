"""
Intent Schemas - Pydantic models for intent classification.

IntentClassification is what /intent returns and what the router and the
suggestion engine consume. RemoteClassificationPayload is the shape the
classification prompt asks the provider for; anything that does not
validate against it is treated as a parse failure and the keyword
classifier takes over.
"""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from optigence.schemas import CamelModel, FrozenCamelModel


class IntentType(str, Enum):
    """
    Coarse classification of what the user's text asks for.

    The first eight are reachable from the keyword classifier; the rest
    only come back from a provider.
    """
    FOLLOW_UP = "follow_up"
    THANK_YOU = "thank_you"
    APOLOGY = "apology"
    SUMMARIZE = "summarize"
    REPLY = "reply"
    REWRITE = "rewrite"
    SCHEDULE = "schedule"
    OTHER = "other"
    COMPOSE = "compose"
    INTRODUCTION = "introduction"
    COMPLAINT = "complaint"
    REQUEST = "request"


class Backend(str, Enum):
    """LLM backends a request can be routed to."""
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"
    COHERE = "cohere"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class EmotionalTone(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


def clamp_confidence(value: Any) -> float:
    """Coerce to float and clamp into [0, 1]; NaN becomes 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError("confidence must be a number")
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def _normalize_backend(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip().lower()
        if value == "anthropic":
            return Backend.CLAUDE.value
    return value


class IntentContext(FrozenCamelModel):
    """Routing hints that travel with a classification."""
    urgency: Urgency = Urgency.MEDIUM
    complexity: Complexity = Complexity.MODERATE
    emotional_tone: EmotionalTone = EmotionalTone.NEUTRAL
    needs_real_time_info: bool = False


class IntentClassification(FrozenCamelModel):
    """
    Result of classifying one utterance.

    Immutable; confidence is always within [0, 1].
    """
    intent: IntentType
    confidence: float = Field(..., description="Classifier confidence in [0, 1]")
    suggested_backend: Backend
    context: IntentContext = Field(default_factory=IntentContext)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> float:
        return clamp_confidence(value)


class RemoteClassificationPayload(CamelModel):
    """
    JSON the classification prompt asks the provider to return:

        {"intent": "...", "confidence": 0.0-1.0,
         "suggestedLLM": "openai|claude|gemini|cohere",
         "context": {"urgency": ..., "complexity": ...,
                     "emotionalTone": ..., "needsRealTimeInfo": ...}}
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    intent: IntentType
    confidence: float
    suggested_llm: Backend = Field(..., alias="suggestedLLM")
    context: Optional[IntentContext] = None

    @field_validator("intent", mode="before")
    @classmethod
    def _lower_intent(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("suggested_llm", mode="before")
    @classmethod
    def _backend(cls, value: Any) -> Any:
        return _normalize_backend(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> float:
        return clamp_confidence(value)

    def to_classification(self) -> IntentClassification:
        return IntentClassification(
            intent=self.intent,
            confidence=self.confidence,
            suggested_backend=self.suggested_llm,
            context=self.context or IntentContext(),
        )

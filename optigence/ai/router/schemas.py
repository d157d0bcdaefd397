"""
Router Schemas - Value objects passed through the email orchestrator.

EmailRequest and EmailResponse are frozen dataclasses: the orchestrator
never mutates a request, and tier enhancement returns a new response.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from optigence.ai.emotion import EmotionalAnalysis
from optigence.ai.intent.schemas import IntentClassification


class Tier(str, Enum):
    FREE = "free"
    PRO = "pro"
    ELITE = "elite"


@dataclass(frozen=True)
class EmailRequest:
    """
    Attributes:
        user_input: what the user typed (the email's purpose)
        original_email: email being replied to or rewritten
        requested_tone: professional, casual, friendly, formal, empathetic...
        action: capability checked against the tier (compose, rewrite...)
    """
    user_input: str
    original_email: Optional[str] = None
    email_thread: Optional[str] = None
    requested_tone: Optional[str] = None
    user_id: Optional[str] = None
    tier: Tier = Tier.FREE
    action: str = "compose"
    context: Tuple[Tuple[str, Any], ...] = ()


@dataclass(frozen=True)
class EmailResponse:
    content: str
    used_llm: str
    confidence: float
    intent: IntentClassification
    emotional_analysis: EmotionalAnalysis
    suggestions: List[str] = field(default_factory=list)
    processing_time_ms: float = 0.0
    fallback_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """camelCase JSON shape returned by /optimail/process."""
        return {
            "content": self.content,
            "usedLLM": self.used_llm,
            "confidence": self.confidence,
            "intent": self.intent.model_dump(mode="json", by_alias=True),
            "emotionalAnalysis": self.emotional_analysis.model_dump(mode="json", by_alias=True),
            "suggestions": list(self.suggestions),
            "processingTimeMs": self.processing_time_ms,
            "fallbackUsed": self.fallback_used,
        }


@dataclass(frozen=True)
class RealtimeSuggestions:
    suggestions: List[str]
    tone_recommendations: List[str]
    predicted_content: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestions": list(self.suggestions),
            "toneRecommendations": list(self.tone_recommendations),
            "predictedContent": self.predicted_content,
        }

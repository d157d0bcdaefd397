"""Pydantic models for emotional analysis results."""

from enum import Enum
from typing import Dict, List

from pydantic import Field

from optigence.schemas import FrozenCamelModel


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class EmotionalAnalysis(FrozenCamelModel):
    """Lexicon-based read of the emotional content of a message."""
    dominant_emotion: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    emotions: Dict[str, float]
    sentiment: Sentiment
    arousal: float = Field(..., ge=0.0, le=1.0)
    valence: float = Field(..., ge=-1.0, le=1.0)
    suggestions: List[str] = Field(default_factory=list)


class ToneAdjustment(FrozenCamelModel):
    """Suggested tone change for an existing draft."""
    current_tone: str
    suggested_tone: str
    reasoning: str
    adjusted_content: str

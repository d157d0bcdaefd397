"""
Intent Module - classification of user utterances.

    from optigence.ai.intent import IntentClassifier, KeywordClassificationStrategy
"""

from optigence.ai.intent.classifier import (
    ClassificationStrategy,
    IntentClassifier,
    KeywordClassificationStrategy,
    RemoteClassificationStrategy,
    build_intent_classifier,
)
from optigence.ai.intent.schemas import (
    Backend,
    Complexity,
    EmotionalTone,
    IntentClassification,
    IntentContext,
    IntentType,
    Urgency,
)

__all__ = [
    "ClassificationStrategy",
    "IntentClassifier",
    "KeywordClassificationStrategy",
    "RemoteClassificationStrategy",
    "build_intent_classifier",
    "Backend",
    "Complexity",
    "EmotionalTone",
    "IntentClassification",
    "IntentContext",
    "IntentType",
    "Urgency",
]

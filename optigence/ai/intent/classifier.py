"""
Intent Classifier - turns free text into an IntentClassification.

Two strategies sit behind one interface:

    RemoteClassificationStrategy   asks an LLM (Cohere by default) for JSON
    KeywordClassificationStrategy  ordered keyword table, no network

IntentClassifier runs the primary strategy and, on ANY ProviderUnavailable
or Parse error, answers from the fallback immediately. There is no retry:
one failure costs one round-trip, then the keyword table answers.

    ┌──────────┐   ok    ┌──────────────────────┐
    │  remote  │───────▶ │ IntentClassification │
    └────┬─────┘         └──────────────────────┘
         │ ProviderUnavailableError / ParseError        ▲
         ▼                                              │
    ┌──────────┐                                        │
    │ keywords │────────────────────────────────────────┘
    └──────────┘   confidence fixed at 0.7
"""

import json
import logging
import time
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError as SchemaValidationError

from optigence.ai.intent.patterns import (
    DEFAULT_BACKEND,
    DEFAULT_CONTEXT,
    DEFAULT_INTENT,
    FALLBACK_CONFIDENCE,
    INTENT_RULES,
    NEGATIVE_TONE_KEYWORDS,
    POSITIVE_TONE_KEYWORDS,
    REAL_TIME_KEYWORDS,
    URGENT_KEYWORDS,
)
from optigence.ai.intent.schemas import (
    Backend,
    EmotionalTone,
    IntentClassification,
    IntentContext,
    RemoteClassificationPayload,
    Urgency,
)
from optigence.ai.monitoring import ai_monitor
from optigence.ai.prompts.intent_prompts import (
    INTENT_CLASSIFICATION_SYSTEM_PROMPT,
    build_classification_prompt,
)
from optigence.ai.providers.base import AIProvider, strip_code_fence
from optigence.core.errors import ParseError, ProviderUnavailableError

logger = logging.getLogger("optigence.ai.intent")


class ClassificationStrategy(ABC):
    """One way of producing an IntentClassification."""

    name: str = "strategy"

    @abstractmethod
    async def classify(self, text: str) -> IntentClassification:
        """
        Classify text.

        Raises:
            ProviderUnavailableError: the backing provider failed
            ParseError: the provider answered with an unusable shape
        """


class KeywordClassificationStrategy(ClassificationStrategy):
    """
    Deterministic, network-free classifier.

    Never raises. The same text always yields the same classification.
    """

    name = "keyword"

    async def classify(self, text: str) -> IntentClassification:
        return self.classify_sync(text)

    def classify_sync(self, text: str) -> IntentClassification:
        lowered = (text or "").lower()

        intent = DEFAULT_INTENT
        backend = DEFAULT_BACKEND
        context = dict(DEFAULT_CONTEXT)

        for rule in INTENT_RULES:
            if rule.matches(lowered):
                intent = rule.intent
                backend = rule.backend
                context.update(rule.overrides)
                break

        # Secondary checks escalate regardless of the primary intent
        if any(keyword in lowered for keyword in URGENT_KEYWORDS):
            context["urgency"] = Urgency.HIGH

        if any(keyword in lowered for keyword in NEGATIVE_TONE_KEYWORDS):
            context["emotional_tone"] = EmotionalTone.NEGATIVE
        elif any(keyword in lowered for keyword in POSITIVE_TONE_KEYWORDS):
            context["emotional_tone"] = EmotionalTone.POSITIVE

        if any(keyword in lowered for keyword in REAL_TIME_KEYWORDS):
            context["needs_real_time_info"] = True
            backend = Backend.GEMINI

        return IntentClassification(
            intent=intent,
            confidence=FALLBACK_CONFIDENCE,
            suggested_backend=backend,
            context=IntentContext(**context),
        )


class RemoteClassificationStrategy(ClassificationStrategy):
    """
    LLM-backed classifier.

    Sends the classification prompt once (temperature 0.1, 500 tokens) and
    validates the JSON answer with RemoteClassificationPayload.
    """

    name = "remote"

    def __init__(self, provider: AIProvider, temperature: float = 0.1, max_tokens: int = 500):
        self.provider = provider
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def classify(self, text: str) -> IntentClassification:
        response = await self.provider.generate_json(
            prompt=build_classification_prompt(text),
            system_prompt=INTENT_CLASSIFICATION_SYSTEM_PROMPT,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        if not response.success:
            error = response.error or "unknown error"
            if response.invalid_json:
                raise ParseError(error, raw=response.content)
            raise ProviderUnavailableError(self.provider.provider_type.value, error)

        return self.parse(response.content)

    @staticmethod
    def parse(content: str) -> IntentClassification:
        """Validate raw provider output; raise ParseError on any mismatch."""
        try:
            data = json.loads(strip_code_fence(content or ""))
        except json.JSONDecodeError as e:
            raise ParseError(f"Classifier returned invalid JSON: {e}", raw=content)

        if not isinstance(data, dict):
            raise ParseError("Classifier JSON is not an object", raw=content)

        try:
            payload = RemoteClassificationPayload.model_validate(data)
        except SchemaValidationError as e:
            raise ParseError(f"Classifier JSON failed validation: {e.error_count()} error(s)", raw=content)

        return payload.to_classification()


class IntentClassifier:
    """
    Classifies text with a primary strategy and a deterministic fallback.

    Usage:
        classifier = IntentClassifier(
            primary=RemoteClassificationStrategy(cohere_provider),
        )
        result = await classifier.classify_intent("Thanks for the quick turnaround!")
    """

    def __init__(
        self,
        primary: Optional[ClassificationStrategy] = None,
        fallback: Optional[ClassificationStrategy] = None,
    ):
        self.fallback = fallback or KeywordClassificationStrategy()
        self.primary = primary or self.fallback

    async def classify_intent(self, text: str, request_id: Optional[str] = None) -> IntentClassification:
        request_id = request_id or str(uuid.uuid4())[:8]
        start_time = time.time()
        strategy = self.primary

        try:
            result = await self.primary.classify(text)
        except (ProviderUnavailableError, ParseError) as e:
            logger.warning(f"[{request_id}] {self.primary.name} classification failed, using {self.fallback.name}: {e}")
            strategy = self.fallback
            result = await self.fallback.classify(text)

        ai_monitor.track_classification(
            request_id=request_id,
            text=text or "",
            intent=result.intent.value,
            confidence=result.confidence,
            strategy=strategy.name,
            backend=result.suggested_backend.value,
            processing_time_ms=(time.time() - start_time) * 1000,
        )
        return result


def build_intent_classifier(registry, strategy: str = "remote", provider_name: str = "cohere") -> IntentClassifier:
    """
    Build the classifier selected by configuration.

    "local" (or an unknown/unconfigured provider) means keyword-only.
    """
    if strategy == "local":
        return IntentClassifier()

    provider = registry.get(provider_name)
    if provider is None or not provider.is_configured:
        logger.warning(f"Classifier provider '{provider_name}' unavailable - using keyword classification only")
        return IntentClassifier()

    return IntentClassifier(primary=RemoteClassificationStrategy(provider))

"""
Tests for intent classification.

This module tests:
- The ordered keyword table and its modifiers
- Parsing and clamping of provider JSON
- Fallback from the remote strategy to keywords
- Which strategy the monitor records
"""

import pytest

from optigence.ai.intent import (
    Backend,
    Complexity,
    EmotionalTone,
    IntentClassification,
    IntentClassifier,
    IntentType,
    KeywordClassificationStrategy,
    RemoteClassificationStrategy,
    Urgency,
    build_intent_classifier,
)
from optigence.ai.monitoring import ai_monitor
from optigence.ai.providers import ProviderRegistry
from optigence.ai.providers.base import ProviderType
from optigence.core.errors import ParseError, ProviderUnavailableError


@pytest.fixture
def keywords():
    return KeywordClassificationStrategy()


# ---------------------------------------------------------------------------
# KEYWORD STRATEGY
# ---------------------------------------------------------------------------

class TestKeywordClassification:
    """Ordered keyword rules; first match wins."""

    @pytest.mark.parametrize(
        "text,intent,backend",
        [
            ("Can you follow up with the vendor?", IntentType.FOLLOW_UP, Backend.OPENAI),
            ("Send a thank you note", IntentType.THANK_YOU, Backend.CLAUDE),
            ("I need to apologize for the delay", IntentType.APOLOGY, Backend.CLAUDE),
            ("Summarize this thread", IntentType.SUMMARIZE, Backend.CLAUDE),
            ("Reply to Sam", IntentType.REPLY, Backend.CLAUDE),
            ("Rewrite this paragraph", IntentType.REWRITE, Backend.OPENAI),
            ("Schedule a call for Tuesday", IntentType.SCHEDULE, Backend.GEMINI),
            ("Hello world", IntentType.OTHER, Backend.OPENAI),
        ],
    )
    def test_primary_rules(self, keywords, text, intent, backend):
        result = keywords.classify_sync(text)

        assert result.intent == intent
        assert result.suggested_backend == backend
        assert result.confidence == 0.7

    def test_rule_order(self, keywords):
        """'follow up' is checked before 'thank', so it wins."""
        result = keywords.classify_sync("Thanks, please follow up next week")

        assert result.intent == IntentType.FOLLOW_UP

    def test_apology_overrides(self, keywords):
        result = keywords.classify_sync("So sorry about yesterday")

        assert result.context.emotional_tone == EmotionalTone.NEGATIVE
        assert result.context.complexity == Complexity.COMPLEX

    def test_schedule_needs_real_time(self, keywords):
        result = keywords.classify_sync("Set up a meeting")

        assert result.context.needs_real_time_info is True

    def test_defaults(self, keywords):
        result = keywords.classify_sync("Hello world")

        assert result.context.urgency == Urgency.MEDIUM
        assert result.context.complexity == Complexity.MODERATE
        assert result.context.emotional_tone == EmotionalTone.NEUTRAL
        assert result.context.needs_real_time_info is False

    def test_urgency_modifier(self, keywords):
        """Urgent keywords escalate whatever the intent."""
        result = keywords.classify_sync("Reply ASAP please")

        assert result.intent == IntentType.REPLY
        assert result.context.urgency == Urgency.HIGH

    def test_negative_tone_modifier_beats_rule(self, keywords):
        """'frustrated' overrides the positive tone of the thank-you rule."""
        result = keywords.classify_sync("Thank them, though I am frustrated")

        assert result.intent == IntentType.THANK_YOU
        assert result.context.emotional_tone == EmotionalTone.NEGATIVE

    def test_positive_tone_modifier(self, keywords):
        result = keywords.classify_sync("I am excited about the launch")

        assert result.context.emotional_tone == EmotionalTone.POSITIVE

    def test_real_time_switches_to_gemini(self, keywords):
        """Real-time keywords route to Gemini even for a Claude intent."""
        result = keywords.classify_sync("Reply with the latest numbers")

        assert result.intent == IntentType.REPLY
        assert result.suggested_backend == Backend.GEMINI
        assert result.context.needs_real_time_info is True

    def test_empty_text(self, keywords):
        result = keywords.classify_sync("")

        assert result.intent == IntentType.OTHER
        assert result.suggested_backend == Backend.OPENAI

    def test_deterministic(self, keywords):
        text = "Please summarize the latest report, urgent"

        assert keywords.classify_sync(text) == keywords.classify_sync(text)


# ---------------------------------------------------------------------------
# REMOTE STRATEGY
# ---------------------------------------------------------------------------

class TestRemoteParsing:
    """RemoteClassificationStrategy.parse validates provider JSON."""

    def test_parse_valid_payload(self):
        content = (
            '{"intent": "Reply", "confidence": 0.91, "suggestedLLM": "anthropic",'
            ' "context": {"urgency": "high", "emotionalTone": "positive"}}'
        )

        result = RemoteClassificationStrategy.parse(content)

        assert result.intent == IntentType.REPLY
        assert result.confidence == 0.91
        assert result.suggested_backend == Backend.CLAUDE
        assert result.context.urgency == Urgency.HIGH
        assert result.context.emotional_tone == EmotionalTone.POSITIVE

    @pytest.mark.parametrize("raw,expected", [(1.7, 1.0), (-0.3, 0.0), ("0.5", 0.5)])
    def test_confidence_clamped(self, raw, expected):
        content = f'{{"intent": "compose", "confidence": {raw!r}, "suggestedLLM": "openai"}}'.replace("'", '"')

        result = RemoteClassificationStrategy.parse(content)

        assert result.confidence == expected

    def test_fenced_json(self):
        content = '```json\n{"intent": "apology", "confidence": 0.8, "suggestedLLM": "claude"}\n```'

        assert RemoteClassificationStrategy.parse(content).intent == IntentType.APOLOGY

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            "[1, 2, 3]",
            '{"intent": "dance", "confidence": 0.9, "suggestedLLM": "openai"}',
            '{"intent": "reply", "confidence": 0.9, "suggestedLLM": "llama"}',
            '{"intent": "reply", "suggestedLLM": "openai"}',
        ],
    )
    def test_invalid_payloads_raise_parse_error(self, content):
        with pytest.raises(ParseError):
            RemoteClassificationStrategy.parse(content)

    def test_classification_is_frozen(self):
        result = RemoteClassificationStrategy.parse(
            '{"intent": "reply", "confidence": 0.9, "suggestedLLM": "openai"}'
        )

        with pytest.raises(Exception):
            result.confidence = 0.1

    def test_camel_case_dump(self):
        result = IntentClassification(intent=IntentType.REPLY, confidence=0.9, suggested_backend=Backend.CLAUDE)

        data = result.model_dump(by_alias=True, mode="json")

        assert data["suggestedBackend"] == "claude"
        assert data["context"]["needsRealTimeInfo"] is False


class TestRemoteStrategy:
    """Remote strategy error mapping."""

    @pytest.mark.asyncio
    async def test_success(self, provider_factory):
        provider = provider_factory(
            ProviderType.COHERE,
            '{"intent": "summarize", "confidence": 0.88, "suggestedLLM": "claude"}',
        )
        strategy = RemoteClassificationStrategy(provider)

        result = await strategy.classify("tl;dr this thread")

        assert result.intent == IntentType.SUMMARIZE
        kwargs = provider.generate_json.call_args.kwargs
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 500
        assert "tl;dr this thread" in kwargs["prompt"]

    @pytest.mark.asyncio
    async def test_provider_failure(self, provider_factory):
        provider = provider_factory(ProviderType.COHERE, success=False, error="Cohere API error 500: boom")

        with pytest.raises(ProviderUnavailableError):
            await RemoteClassificationStrategy(provider).classify("hello")

    @pytest.mark.asyncio
    async def test_invalid_json_error_is_parse_error(self, provider_factory):
        provider = provider_factory(ProviderType.COHERE, success=False, error="Invalid JSON response: x")
        provider.generate_json.return_value.invalid_json = True

        with pytest.raises(ParseError):
            await RemoteClassificationStrategy(provider).classify("hello")

    @pytest.mark.asyncio
    async def test_error_text_alone_is_not_a_parse_error(self, provider_factory):
        """Only the invalid_json flag marks malformed output."""
        provider = provider_factory(ProviderType.COHERE, success=False, error="Invalid JSON credentials")

        with pytest.raises(ProviderUnavailableError):
            await RemoteClassificationStrategy(provider).classify("hello")


# ---------------------------------------------------------------------------
# CLASSIFIER WITH FALLBACK
# ---------------------------------------------------------------------------

class TestIntentClassifier:
    """Primary strategy with keyword fallback."""

    @pytest.mark.asyncio
    async def test_remote_result_used(self, provider_factory):
        provider = provider_factory(
            ProviderType.COHERE,
            '{"intent": "complaint", "confidence": 0.95, "suggestedLLM": "claude"}',
        )
        classifier = IntentClassifier(primary=RemoteClassificationStrategy(provider))

        result = await classifier.classify_intent("This is unacceptable")

        assert result.intent == IntentType.COMPLAINT
        assert result.confidence == 0.95
        assert ai_monitor.get_stats().classifications_by_strategy == {"remote": 1}

    @pytest.mark.asyncio
    async def test_falls_back_on_provider_failure(self, provider_factory):
        """One failed call, then the keyword table answers."""
        provider = provider_factory(ProviderType.COHERE, success=False, error="timeout")
        classifier = IntentClassifier(primary=RemoteClassificationStrategy(provider))

        result = await classifier.classify_intent("Please reply to the client")

        assert result.intent == IntentType.REPLY
        assert result.confidence == 0.7
        assert provider.generate_json.await_count == 1
        assert ai_monitor.get_stats().classifications_by_strategy == {"keyword": 1}

    @pytest.mark.asyncio
    async def test_falls_back_on_parse_error(self, provider_factory):
        provider = provider_factory(ProviderType.COHERE, content='{"nope": true}')
        classifier = IntentClassifier(primary=RemoteClassificationStrategy(provider))

        result = await classifier.classify_intent("Rewrite this")

        assert result.intent == IntentType.REWRITE

    @pytest.mark.asyncio
    async def test_keyword_only_by_default(self):
        classifier = IntentClassifier()

        result = await classifier.classify_intent("Schedule a meeting")

        assert result.intent == IntentType.SCHEDULE
        assert result.suggested_backend == Backend.GEMINI


class TestBuildIntentClassifier:
    """Configuration picks the strategy."""

    def test_local_strategy(self, registry):
        classifier = build_intent_classifier(registry, strategy="local")

        assert isinstance(classifier.primary, KeywordClassificationStrategy)

    def test_remote_strategy(self, registry):
        classifier = build_intent_classifier(registry, strategy="remote", provider_name="cohere")

        assert isinstance(classifier.primary, RemoteClassificationStrategy)

    def test_unconfigured_provider_uses_keywords(self, provider_factory):
        registry = ProviderRegistry({ProviderType.COHERE: provider_factory(ProviderType.COHERE, configured=False)})

        classifier = build_intent_classifier(registry, strategy="remote", provider_name="cohere")

        assert isinstance(classifier.primary, KeywordClassificationStrategy)

    def test_unknown_provider_uses_keywords(self, registry):
        classifier = build_intent_classifier(registry, strategy="remote", provider_name="mystery")

        assert isinstance(classifier.primary, KeywordClassificationStrategy)

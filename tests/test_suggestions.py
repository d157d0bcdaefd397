"""
Tests for the live suggestion pipeline.

This module tests:
- Ranking (confidence, then source priority) and primary-action selection
- Each source's contribution for typical contexts
- Degradation: a failing source, a failing ranking step
- Debounced refreshes (only the last context is delivered)
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from optigence.ai.suggestions import (
    LiveSuggestionEngine,
    SuggestionCategory,
    SuggestionContext,
    SuggestionPipelineResult,
    SuggestionRefresher,
)
from optigence.services.cross_module_service import CrossModuleRouter, PendingActionRegistry


@pytest.fixture
def pending():
    return PendingActionRegistry()


@pytest.fixture
def engine(pending):
    return LiveSuggestionEngine(CrossModuleRouter(pending), primary_threshold=0.8, max_suggestions=6)


def make_context(**overrides) -> SuggestionContext:
    data = {"userInput": "Please reply to Sam", "intent": "reply", "confidence": 0.9}
    data.update(overrides)
    return SuggestionContext.model_validate(data)


def ids(suggestions):
    return [suggestion.id for suggestion in suggestions]


# ---------------------------------------------------------------------------
# RANKING AND PRIMARY ACTION
# ---------------------------------------------------------------------------

class TestRanking:
    """Ordering and primary selection."""

    @pytest.mark.asyncio
    async def test_confident_reply_becomes_primary(self, engine):
        """A primary candidate above the threshold is lifted out of the list."""
        result = await engine.generate_suggestions(make_context())

        assert result.primary_action is not None
        assert result.primary_action.id == "reply_draft"
        assert result.primary_action.confidence == 0.9
        assert "reply_draft" not in ids(result.suggestions)
        assert result.reasoning == 'Detected "reply" intent with 90% confidence.'

    @pytest.mark.asyncio
    async def test_primary_is_not_necessarily_top_ranked(self, engine):
        """A 0.9 contextual candidate outranks the 0.85 primary, which is still promoted."""
        context = make_context(confidence=0.85, extraction={"urgency": "high"})

        result = await engine.generate_suggestions(context)

        assert result.primary_action.id == "reply_draft"
        assert result.suggestions[0].id == "priority_response"
        assert "High urgency detected - Priority response templates available" in result.contextual_hints

    @pytest.mark.asyncio
    async def test_below_threshold_stays_in_list(self, engine):
        result = await engine.generate_suggestions(make_context(confidence=0.6))

        assert result.primary_action is None
        assert ids(result.suggestions) == ["reply_draft"]
        assert result.contextual_hints == [
            "Intent confidence: 60% - Consider rephrasing for better suggestions"
        ]

    @pytest.mark.asyncio
    async def test_equal_confidence_uses_source_priority(self, engine):
        """At 0.9 each, the intent source's candidate precedes the contextual one."""
        context = make_context(
            confidence=0.5,
            extraction={"urgency": "high"},
            userProfile={"signature": "-- Sam"},
        )

        result = await engine.generate_suggestions(context)

        assert ids(result.suggestions)[:2] == ["add_signature", "priority_response"]

    @pytest.mark.asyncio
    async def test_list_is_capped(self, pending):
        engine = LiveSuggestionEngine(CrossModuleRouter(pending), max_suggestions=2)
        context = make_context(
            confidence=0.5,
            extraction={
                "urgency": "high",
                "people": [{"name": "Ana"}],
                "locations": [{"name": "Paris"}],
            },
            userProfile={"signature": "-- Sam"},
        )

        result = await engine.generate_suggestions(context)

        assert len(result.suggestions) == 2

    @pytest.mark.asyncio
    async def test_zero_cap_returns_no_list(self, pending):
        engine = LiveSuggestionEngine(CrossModuleRouter(pending), max_suggestions=0)
        context = make_context(confidence=0.5, userProfile={"signature": "-- Sam"})

        result = await engine.generate_suggestions(context)

        assert result.suggestions == []

    @pytest.mark.asyncio
    async def test_same_context_same_result(self, engine):
        context = make_context(extraction={"urgency": "high", "topics": ["flight"]})

        first = await engine.generate_suggestions(context)
        second = await engine.generate_suggestions(context)

        assert first.model_dump(exclude={"processing_time_ms"}) == second.model_dump(exclude={"processing_time_ms"})


# ---------------------------------------------------------------------------
# SOURCES
# ---------------------------------------------------------------------------

class TestSources:
    """What each source contributes."""

    @pytest.mark.asyncio
    async def test_cross_module_detection_not_registered(self, engine, pending):
        """Live detection shows the action but never stores it as pending."""
        context = make_context(userInput="Booking my flight to Paris", intent="other", confidence=0.8)

        result = await engine.generate_suggestions(context)

        handoff = next(s for s in result.suggestions if s.id == "create_trip_from_email")
        assert handoff.category == SuggestionCategory.CROSS_MODULE
        assert handoff.requires_confirmation is True
        assert handoff.parameters["targetModule"] == "optitrip"
        assert len(pending) == 0

    @pytest.mark.asyncio
    async def test_topic_routes(self, engine):
        context = make_context(intent="other", confidence=0.8, extraction={"topics": ["Job interview", "Hotel"]})

        result = await engine.generate_suggestions(context)

        assert {"route_optitrip", "route_optihire"} <= set(ids(result.suggestions))
        assert "Cross-module opportunities identified based on topic analysis." in result.reasoning

    @pytest.mark.asyncio
    async def test_negative_emotion_suggests_softening(self, engine):
        context = make_context(userInput="I am so frustrated with this", intent="other", confidence=0.8)

        result = await engine.generate_suggestions(context)

        soften = next(s for s in result.suggestions if s.id == "soften_tone")
        assert soften.parameters == {"tone": "empathetic"}
        assert "Emotional tone reads as negative (frustration)." in result.reasoning
        assert "Consider acknowledging concerns while maintaining a constructive tone" in result.contextual_hints

    @pytest.mark.asyncio
    async def test_schedule_with_dates(self, engine):
        context = make_context(
            intent="schedule",
            extraction={"datesTimes": [{"text": "Friday 3pm"}, {"text": "Monday"}]},
            calendarContext={"hasCalendarAccess": True},
        )

        result = await engine.generate_suggestions(context)

        assert result.primary_action.id == "add_to_calendar"
        assert "check_availability" in ids(result.suggestions)
        assert "2 time references found - Calendar integration recommended" in result.contextual_hints

    @pytest.mark.asyncio
    async def test_schedule_without_dates(self, engine):
        result = await engine.generate_suggestions(make_context(intent="schedule", confidence=0.6))

        assert ids(result.suggestions) == ["propose_times"]

    @pytest.mark.asyncio
    async def test_auto_send_for_trusted_contact(self, engine):
        context = make_context(
            confidence=0.95,
            userProfile={"autoSendEnabled": True, "confidenceAutoSend": 80},
            contactProfile={"email": "sam@example.com", "trustLevel": 90},
        )

        result = await engine.generate_suggestions(context)

        auto_send = next(
            s for s in [result.primary_action, *result.suggestions] if s.id == "auto_send"
        )
        assert auto_send.confidence == pytest.approx(0.855)
        assert "High trust contact (90%) - Auto-send available" in result.contextual_hints

    @pytest.mark.asyncio
    async def test_contact_tone(self, engine):
        context = make_context(
            userProfile={"defaultTone": "professional"},
            contactProfile={"email": "new@example.com", "trustLevel": 20},
        )

        result = await engine.generate_suggestions(context)

        tone = next(s for s in result.suggestions if s.id == "adjust_tone")
        assert tone.parameters == {"tone": "formal"}

    @pytest.mark.asyncio
    async def test_translate_target_language(self, engine):
        context = make_context(intent="translate", userProfile={"primaryLanguage": "es"})

        result = await engine.generate_suggestions(context)

        assert result.primary_action.description == "Translate to es"


# ---------------------------------------------------------------------------
# DEGRADATION
# ---------------------------------------------------------------------------

class TestDegradation:
    """Failures inside the pipeline never surface to the caller."""

    @pytest.mark.asyncio
    async def test_failing_source_is_skipped(self, engine):
        with patch.object(engine, "_intent_source", AsyncMock(side_effect=RuntimeError("boom"))):
            result = await engine.generate_suggestions(make_context(extraction={"urgency": "high"}))

        assert result.primary_action is None
        assert ids(result.suggestions) == ["priority_response"]
        assert "Detected" not in result.reasoning

    @pytest.mark.asyncio
    async def test_ranking_error_returns_fallback(self, engine):
        with patch.object(engine, "_rank", side_effect=ValueError("bad ranking")):
            result = await engine.generate_suggestions(make_context())

        assert ids(result.suggestions) == ["fallback_reply"]
        assert result.suggestions[0].confidence == 0.5
        assert result.primary_action is None
        assert result.contextual_hints == ["Using basic suggestions due to processing error"]
        assert result.reasoning == "Fallback mode due to error"

    def test_generic_fallback(self):
        suggestions = LiveSuggestionEngine.fallback_suggestions("something_else")

        assert ids(suggestions) == ["fallback_general"]
        assert suggestions[0].confidence == 0.3


# ---------------------------------------------------------------------------
# DEBOUNCED REFRESH
# ---------------------------------------------------------------------------

class TestSuggestionRefresher:
    """Only the last submitted context reaches the engine."""

    @pytest.fixture
    def mock_engine(self):
        engine = MagicMock()
        engine.generate_suggestions = AsyncMock(
            side_effect=lambda context: SuggestionPipelineResult(reasoning=context.user_input)
        )
        return engine

    @pytest.mark.asyncio
    async def test_superseded_context_is_cancelled(self, mock_engine):
        delivered = []

        async def on_result(result):
            delivered.append(result.reasoning)

        refresher = SuggestionRefresher(mock_engine, on_result=on_result, quiet_period_ms=20)

        first = refresher.submit(make_context(userInput="Hel"))
        second = refresher.submit(make_context(userInput="Hello"))
        result = await second

        assert first.cancelled()
        assert result.reasoning == "Hello"
        assert delivered == ["Hello"]
        mock_engine.generate_suggestions.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_cancels_pending(self, mock_engine):
        refresher = SuggestionRefresher(mock_engine, quiet_period_ms=1000)
        refresher.submit(make_context())

        assert refresher.pending is True

        await refresher.close()

        assert refresher.pending is False
        mock_engine.generate_suggestions.assert_not_awaited()
        with pytest.raises(RuntimeError):
            refresher.submit(make_context())

    def test_quiet_period_from_settings(self, mock_engine):
        refresher = SuggestionRefresher(mock_engine)

        assert refresher.quiet_period == 0.5

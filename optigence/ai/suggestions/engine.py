"""
Live Suggestion Engine - Ranked next-step suggestions for the compose box.

Pipeline
========

    SuggestionContext
          │
          ├──▶ cross_module  ─┐
          ├──▶ intent        ─┤  asyncio.gather (fan-out / fan-in)
          ├──▶ emotional     ─┤  a source that raises contributes nothing
          └──▶ contextual    ─┘
                               │
                               ▼
              dedupe by id (first registered wins)
              sort: confidence desc, source priority, registration order
                               │
                               ▼
              primary action = first candidate with
              confidence > threshold AND category == primary
              (removed from the list), list capped at MAX_SUGGESTIONS

Every source returns candidates, an explanation fragment and optional
hints. The final `reasoning` joins the non-empty fragments in source
order. For the same context the result is always the same (only
processingTimeMs varies).
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from optigence.ai.emotion import EmotionalAnalyzer, Sentiment
from optigence.ai.suggestions.schemas import (
    SOURCE_PRIORITY,
    ActionSuggestion,
    SuggestionCategory,
    SuggestionContext,
    SuggestionPipelineResult,
    SuggestionSource,
)
from optigence.core.config import settings
from optigence.services.cross_module_service import CrossModuleRouter

logger = logging.getLogger("optigence.ai.suggestions")


TRAVEL_TOPICS = ("travel", "trip", "flight", "hotel", "vacation", "visit", "airport")
SHOPPING_TOPICS = ("buy", "purchase", "product", "shop", "order", "price", "deal")
JOB_TOPICS = ("job", "interview", "hire", "career", "resume", "position", "salary")

FALLBACK_HINT = "Using basic suggestions due to processing error"

MODULE_LABELS = {"optihire": "OptiHire", "optitrip": "OptiTrip", "optishop": "OptiShop"}


@dataclass
class SourceResult:
    """What one suggestion source contributed."""
    source: SuggestionSource
    candidates: List[ActionSuggestion] = field(default_factory=list)
    reasoning: str = ""
    hints: List[str] = field(default_factory=list)


def _topic_match(topics: List[str], keywords: Tuple[str, ...]) -> bool:
    return any(keyword in topic.lower() for topic in topics for keyword in keywords)


class LiveSuggestionEngine:
    """
    Usage:
        engine = LiveSuggestionEngine(CrossModuleRouter(registry))
        result = await engine.generate_suggestions(context)
    """

    def __init__(
        self,
        cross_module_router: CrossModuleRouter,
        analyzer: Optional[EmotionalAnalyzer] = None,
        primary_threshold: Optional[float] = None,
        max_suggestions: Optional[int] = None,
    ):
        self.cross_module_router = cross_module_router
        self.analyzer = analyzer or EmotionalAnalyzer()
        self.primary_threshold = (
            primary_threshold if primary_threshold is not None else settings.PRIMARY_ACTION_THRESHOLD
        )
        self.max_suggestions = max_suggestions if max_suggestions is not None else settings.MAX_SUGGESTIONS

    async def generate_suggestions(self, context: SuggestionContext) -> SuggestionPipelineResult:
        start_time = time.time()

        sources = (
            (SuggestionSource.CROSS_MODULE, self._cross_module_source),
            (SuggestionSource.INTENT, self._intent_source),
            (SuggestionSource.EMOTIONAL, self._emotional_source),
            (SuggestionSource.CONTEXTUAL, self._contextual_source),
        )

        outcomes = await asyncio.gather(
            *(producer(context) for _, producer in sources),
            return_exceptions=True,
        )

        results: List[SourceResult] = []
        for (source, _), outcome in zip(sources, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Suggestion source '{source.value}' failed: {outcome}")
                continue
            results.append(outcome)

        try:
            ranked = self._rank(results)
            primary, remaining = self._select_primary(ranked)
        except Exception as e:
            logger.error(f"Suggestion ranking failed: {e}", exc_info=True)
            return SuggestionPipelineResult(
                suggestions=self.fallback_suggestions(context.intent),
                contextual_hints=[FALLBACK_HINT],
                reasoning="Fallback mode due to error",
                processing_time_ms=(time.time() - start_time) * 1000,
            )

        hints = [hint for result in results for hint in result.hints]
        reasoning = " ".join(result.reasoning for result in results if result.reasoning)

        return SuggestionPipelineResult(
            suggestions=remaining[: self.max_suggestions],
            primary_action=primary,
            contextual_hints=hints,
            reasoning=reasoning,
            processing_time_ms=(time.time() - start_time) * 1000,
        )

    # -------------------------------------------------------------------------
    # RANKING
    # -------------------------------------------------------------------------

    def _rank(self, results: List[SourceResult]) -> List[ActionSuggestion]:
        ordered = sorted(results, key=lambda r: SOURCE_PRIORITY[r.source])

        seen = set()
        entries = []
        for result in ordered:
            for candidate in result.candidates:
                if candidate.id in seen:
                    continue
                seen.add(candidate.id)
                entries.append((candidate, SOURCE_PRIORITY[result.source], len(entries)))

        entries.sort(key=lambda entry: (-entry[0].confidence, entry[1], entry[2]))
        return [candidate for candidate, _, _ in entries]

    def _select_primary(
        self, ranked: List[ActionSuggestion]
    ) -> Tuple[Optional[ActionSuggestion], List[ActionSuggestion]]:
        for index, candidate in enumerate(ranked):
            if candidate.category == SuggestionCategory.PRIMARY and candidate.confidence > self.primary_threshold:
                return candidate, ranked[:index] + ranked[index + 1:]
        return None, ranked

    # -------------------------------------------------------------------------
    # SOURCES
    # -------------------------------------------------------------------------

    async def _cross_module_source(self, context: SuggestionContext) -> SourceResult:
        extraction = context.extraction
        candidates = []

        if _topic_match(extraction.topics, TRAVEL_TOPICS) or extraction.locations:
            candidates.append(ActionSuggestion(
                id="route_optitrip",
                label="Open OptiTrip",
                icon="✈️",
                description="Plan travel with AI assistance",
                confidence=0.8,
                category=SuggestionCategory.CROSS_MODULE,
                action="route_to_optitrip",
                parameters={"prefilled": True, "query": context.user_input, "locations": extraction.locations},
                tooltip="Switch to OptiTrip with current context",
            ))

        if _topic_match(extraction.topics, SHOPPING_TOPICS):
            candidates.append(ActionSuggestion(
                id="route_optishop",
                label="Open OptiShop",
                icon="🛒",
                description="Find and compare products",
                confidence=0.8,
                category=SuggestionCategory.CROSS_MODULE,
                action="route_to_optishop",
                parameters={"prefilled": True, "query": context.user_input, "products": extraction.topics},
                tooltip="Switch to OptiShop for product search",
            ))

        if _topic_match(extraction.topics, JOB_TOPICS):
            candidates.append(ActionSuggestion(
                id="route_optihire",
                label="Open OptiHire",
                icon="💼",
                description="Job search and career assistance",
                confidence=0.8,
                category=SuggestionCategory.CROSS_MODULE,
                action="route_to_optihire",
                parameters={"prefilled": True, "query": context.user_input, "skills": extraction.topics},
                tooltip="Switch to OptiHire for job-related tasks",
            ))

        thread = context.thread_context
        detected = self.cross_module_router.analyze_for_cross_module_intent(
            context.user_input,
            thread.last_message if thread else None,
            register=False,
        )
        for action in detected:
            module = MODULE_LABELS.get(action.target_module, action.target_module)
            candidates.append(ActionSuggestion(
                id=action.action_type,
                label=f"Send to {module}",
                icon="🔀",
                description=f"Create a {module} item from this email",
                confidence=0.75,
                category=SuggestionCategory.CROSS_MODULE,
                action="execute_cross_module_action",
                parameters={
                    "targetModule": action.target_module,
                    "actionType": action.action_type,
                    "payload": action.payload,
                },
                tooltip=f"Hand this email over to {module}",
                requires_confirmation=True,
            ))

        reasoning = "Cross-module opportunities identified based on topic analysis." if candidates else ""
        return SourceResult(SuggestionSource.CROSS_MODULE, candidates, reasoning)

    async def _intent_source(self, context: SuggestionContext) -> SourceResult:
        intent = context.intent
        confidence = context.confidence
        extraction = context.extraction
        candidates = []

        if intent == "reply":
            candidates.append(ActionSuggestion(
                id="reply_draft",
                label="Draft Reply",
                icon="↩️",
                description="Generate AI-powered email reply",
                confidence=confidence,
                category=SuggestionCategory.PRIMARY,
                action="generate_reply",
                tooltip="Creates a contextual reply based on the conversation",
                estimated_time="5-10 seconds",
            ))
            if extraction.sentiment == "positive":
                candidates.append(ActionSuggestion(
                    id="reply_thank",
                    label="Thank You Reply",
                    icon="🙏",
                    description="Generate grateful response",
                    confidence=0.8,
                    category=SuggestionCategory.SECONDARY,
                    action="generate_thank_you",
                    tooltip="Quick thank you message template",
                ))

        elif intent == "summarize":
            candidates.append(ActionSuggestion(
                id="summarize_thread",
                label="Summarize Thread",
                icon="📋",
                description="Create concise summary of conversation",
                confidence=confidence,
                category=SuggestionCategory.PRIMARY,
                action="summarize_conversation",
                tooltip="AI-generated bullet-point summary",
                estimated_time="3-5 seconds",
            ))
            thread = context.thread_context
            if thread and thread.message_count > 5:
                candidates.append(ActionSuggestion(
                    id="summarize_key_points",
                    label="Extract Key Points",
                    icon="🎯",
                    description="Highlight important decisions and action items",
                    confidence=0.9,
                    category=SuggestionCategory.CONTEXTUAL,
                    action="extract_action_items",
                    tooltip="Focus on actionable items and decisions",
                ))

        elif intent == "translate":
            candidates.append(ActionSuggestion(
                id="translate_text",
                label="Translate",
                icon="🌐",
                description=f"Translate to {self._target_language(context)}",
                confidence=confidence,
                category=SuggestionCategory.PRIMARY,
                action="translate_message",
                tooltip="Professional translation maintaining tone",
            ))

        elif intent in ("calendar", "schedule"):
            if extraction.dates_times:
                candidates.append(ActionSuggestion(
                    id="add_to_calendar",
                    label="Add to Calendar",
                    icon="📅",
                    description="Create calendar event",
                    confidence=0.9,
                    category=SuggestionCategory.PRIMARY,
                    action="create_calendar_event",
                    parameters={"dates": extraction.dates_times},
                    tooltip="Creates event with detected time and participants",
                    requires_confirmation=True,
                ))
            else:
                candidates.append(ActionSuggestion(
                    id="propose_times",
                    label="Propose Times",
                    icon="🕐",
                    description="Suggest meeting times",
                    confidence=0.8,
                    category=SuggestionCategory.PRIMARY,
                    action="propose_meeting_times",
                    tooltip="AI-generated time suggestions based on availability",
                ))

        elif intent == "template":
            candidates.append(ActionSuggestion(
                id="save_template",
                label="Save Template",
                icon="💾",
                description="Create reusable template",
                confidence=confidence,
                category=SuggestionCategory.PRIMARY,
                action="save_as_template",
                tooltip="Save this pattern for future use",
            ))

        candidates.extend(self._personalized_candidates(context))

        reasoning = f'Detected "{intent}" intent with {round(confidence * 100)}% confidence.'
        return SourceResult(SuggestionSource.INTENT, candidates, reasoning)

    def _personalized_candidates(self, context: SuggestionContext) -> List[ActionSuggestion]:
        user = context.user_profile
        contact = context.contact_profile
        candidates = []

        if user and user.auto_send_enabled and contact and contact.trust_level > 70:
            total_confidence = context.confidence * (contact.trust_level / 100)
            if total_confidence > user.confidence_auto_send / 100:
                candidates.append(ActionSuggestion(
                    id="auto_send",
                    label="Auto-Send",
                    icon="⚡",
                    description=f"High confidence ({round(total_confidence * 100)}%)",
                    confidence=min(total_confidence, 1.0),
                    category=SuggestionCategory.PRIMARY,
                    action="auto_send_with_countdown",
                    parameters={"countdown": 3000},
                    tooltip="Trusted contact + high confidence = auto-send option",
                ))

        if user and user.signature and context.intent == "reply":
            candidates.append(ActionSuggestion(
                id="add_signature",
                label="Add Signature",
                icon="✍️",
                description="Include your email signature",
                confidence=0.9,
                category=SuggestionCategory.SECONDARY,
                action="include_signature",
                tooltip="Your saved signature will be added automatically",
            ))

        return candidates

    async def _emotional_source(self, context: SuggestionContext) -> SourceResult:
        thread = context.thread_context
        analysis = self.analyzer.analyze_emotional_context(
            context.user_input,
            (thread.last_message if thread else None) or "",
            context.requested_tone,
        )
        candidates = []

        if analysis.sentiment == Sentiment.NEGATIVE:
            candidates.append(ActionSuggestion(
                id="soften_tone",
                label="Soften Tone",
                icon="🕊️",
                description=f"{analysis.dominant_emotion.capitalize()} detected - rephrase constructively",
                confidence=0.75,
                category=SuggestionCategory.SECONDARY,
                action="adjust_tone",
                parameters={"tone": self.analyzer.map_emotion_to_tone(analysis.dominant_emotion, analysis)},
                tooltip="Keeps your point while lowering the temperature",
            ))

        if context.requested_tone and analysis.dominant_emotion != "neutral":
            suggested = self.analyzer.map_emotion_to_tone(analysis.dominant_emotion, analysis)
            if suggested != context.requested_tone:
                candidates.append(ActionSuggestion(
                    id="match_tone",
                    label=f"Use {suggested} Tone",
                    icon="🎭",
                    description=f"Better fit for the {analysis.dominant_emotion} in this message",
                    confidence=0.65,
                    category=SuggestionCategory.CONTEXTUAL,
                    action="adjust_tone",
                    parameters={"tone": suggested},
                    tooltip=f"You asked for {context.requested_tone}, the content reads {analysis.sentiment.value}",
                ))

        # No lexicon hits: nothing worth surfacing beyond the generic line
        if analysis.dominant_emotion == "neutral":
            return SourceResult(SuggestionSource.EMOTIONAL, candidates)

        reasoning = f"Emotional tone reads as {analysis.sentiment.value} ({analysis.dominant_emotion})."
        return SourceResult(SuggestionSource.EMOTIONAL, candidates, reasoning, list(analysis.suggestions))

    async def _contextual_source(self, context: SuggestionContext) -> SourceResult:
        extraction = context.extraction
        thread = context.thread_context
        calendar = context.calendar_context
        user = context.user_profile
        contact = context.contact_profile
        candidates = []
        fragments = []

        if extraction.people:
            candidates.append(ActionSuggestion(
                id="cc_participants",
                label=f"CC {len(extraction.people)} People",
                icon="👥",
                description="Include all participants in reply",
                confidence=0.7,
                category=SuggestionCategory.CONTEXTUAL,
                action="include_participants",
                parameters={"people": extraction.people},
                tooltip="Automatically add detected participants to the email",
            ))
            fragments.append(f"Found {len(extraction.people)} participants, suggesting collaborative actions.")

        if extraction.urgency == "high":
            candidates.append(ActionSuggestion(
                id="priority_response",
                label="Priority Response",
                icon="🚨",
                description="Generate urgent reply",
                confidence=0.9,
                category=SuggestionCategory.CONTEXTUAL,
                action="generate_urgent_reply",
                tooltip="High-priority response template with urgent tone",
            ))
            fragments.append("High urgency detected, prioritizing immediate response options.")

        if extraction.dates_times and calendar and calendar.has_calendar_access:
            candidates.append(ActionSuggestion(
                id="check_availability",
                label="Check Availability",
                icon="🗓️",
                description="Verify calendar conflicts",
                confidence=0.8,
                category=SuggestionCategory.CONTEXTUAL,
                action="check_calendar_availability",
                tooltip="Cross-reference with your calendar",
            ))

        if extraction.locations:
            candidates.append(ActionSuggestion(
                id="location_details",
                label="Location Info",
                icon="📍",
                description="Get venue details and directions",
                confidence=0.6,
                category=SuggestionCategory.CONTEXTUAL,
                action="fetch_location_info",
                parameters={"locations": extraction.locations},
                tooltip="Address, directions, and venue information",
            ))

        if thread and thread.has_history and thread.message_count > 3:
            candidates.append(ActionSuggestion(
                id="reference_history",
                label="Reference Previous",
                icon="🔗",
                description="Include conversation context",
                confidence=0.7,
                category=SuggestionCategory.CONTEXTUAL,
                action="include_thread_context",
                tooltip="Reference relevant parts of the conversation",
            ))

        if contact and contact.email and user and user.default_tone:
            tone = self._tone_for_contact(contact.trust_level, contact.response_time_avg, user.default_tone)
            if tone != user.default_tone:
                who = contact.name or contact.email
                candidates.append(ActionSuggestion(
                    id="adjust_tone",
                    label=f"Use {tone} Tone",
                    icon="🎭",
                    description=f"Better fit for {who}",
                    confidence=0.8,
                    category=SuggestionCategory.CONTEXTUAL,
                    action="adjust_tone",
                    parameters={"tone": tone},
                    tooltip=f"Based on your relationship with {contact.name or 'this contact'}",
                ))

        return SourceResult(
            SuggestionSource.CONTEXTUAL,
            candidates,
            " ".join(fragments),
            self._hints(context),
        )

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def _hints(self, context: SuggestionContext) -> List[str]:
        extraction = context.extraction
        contact = context.contact_profile
        hints = []

        if context.confidence < 0.7:
            hints.append(
                f"Intent confidence: {round(context.confidence * 100)}% - Consider rephrasing for better suggestions"
            )
        if contact and contact.trust_level > 80:
            hints.append(f"High trust contact ({contact.trust_level:g}%) - Auto-send available")
        if len(extraction.people) > 3:
            hints.append(f"{len(extraction.people)} participants detected - Consider group reply options")
        if extraction.urgency == "high":
            hints.append("High urgency detected - Priority response templates available")
        if len(extraction.dates_times) > 1:
            hints.append(f"{len(extraction.dates_times)} time references found - Calendar integration recommended")

        return hints

    @staticmethod
    def _target_language(context: SuggestionContext) -> str:
        language = context.extraction.language
        primary = context.user_profile.primary_language if context.user_profile else None
        if language != "en" and primary == "en":
            return "English"
        if language == "en" and primary != "en":
            return primary or "Spanish"
        return "target language"

    @staticmethod
    def _tone_for_contact(trust_level: float, response_time_avg: Optional[float], default_tone: str) -> str:
        if trust_level > 80 and response_time_avg is not None and response_time_avg < 2:
            return "casual"
        if trust_level < 50:
            return "formal"
        return default_tone

    @staticmethod
    def fallback_suggestions(intent: str) -> List[ActionSuggestion]:
        """Basic per-intent suggestions used when ranking fails."""
        fallbacks = {
            "reply": ("fallback_reply", "Generate Reply", "↩️", "Basic reply generation",
                      "generate_basic_reply", "Simple reply template"),
            "summarize": ("fallback_summarize", "Summarize", "📋", "Create summary",
                          "basic_summarize", "Basic text summarization"),
            "translate": ("fallback_translate", "Translate", "🌐", "Language translation",
                          "basic_translate", "Basic translation service"),
        }
        if intent in fallbacks:
            suggestion_id, label, icon, description, action, tooltip = fallbacks[intent]
            confidence = 0.5
        else:
            suggestion_id, label, icon, description, action, tooltip = (
                "fallback_general", "Process Request", "⚙️", "General processing",
                "general_process", "General AI assistance",
            )
            confidence = 0.3

        return [ActionSuggestion(
            id=suggestion_id,
            label=label,
            icon=icon,
            description=description,
            confidence=confidence,
            category=SuggestionCategory.PRIMARY,
            action=action,
            tooltip=tooltip,
        )]

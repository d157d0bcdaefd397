"""
Intelligent Router - Drafts an email with the backend the classifier picked.

Routing Flow:
=============

    EmailRequest
         │
         ▼
    tier check ─────────────── not allowed ──▶ TierRestrictedError (403)
         │
         ▼
    classify intent (remote → keyword fallback)
         │
         ├── recall memory (limit 5, similarity ≥ 0.7)
         └── emotional analysis
         │
         ▼
    suggested backend ──fail──▶ OpenAI ──fail──▶ static template (opt-in)
         │                        │                     │
         │                  confidence × 0.8            └─ else AllSystemsFailedError
         ▼                  usedLLM "...-fallback"
    EmailResponse (+ tier enhancement)

Each provider gets exactly one attempt. There is no retry with backoff;
the next link in the chain is the retry.
"""

import logging
import time
import uuid
from typing import List, Optional, Tuple

from optigence.ai.emotion import EmotionalAnalysis, EmotionalAnalyzer
from optigence.ai.intent import IntentClassifier
from optigence.ai.intent.schemas import EmotionalTone, IntentClassification, IntentContext, Urgency
from optigence.ai.memory import InteractionMemory
from optigence.ai.monitoring import ai_monitor
from optigence.ai.prompts.email_prompts import build_system_prompt, format_request, render_static_template
from optigence.ai.providers import AIProvider, ProviderRegistry, ProviderType, resolve_backend
from optigence.ai.router.schemas import EmailRequest, EmailResponse
from optigence.ai.router.tiers import TierPolicy
from optigence.core.config import settings
from optigence.core.errors import AllSystemsFailedError, ProviderUnavailableError

logger = logging.getLogger("optigence.ai.router")


# Labels reported in EmailResponse.used_llm
USED_LLM_LABELS = {
    ProviderType.OPENAI: "gpt-4-turbo",
    ProviderType.ANTHROPIC: "claude-3-sonnet",
    ProviderType.GEMINI: "gemini-1.5-pro",
    ProviderType.COHERE: "command-r-plus",
}

STATIC_TEMPLATE_LABEL = "static-template"
FALLBACK_CONFIDENCE_FACTOR = 0.8
STATIC_CONFIDENCE_FACTOR = 0.5
FALLBACK_NOTICE = "Response generated using fallback system"
STATIC_NOTICE = "This response was generated from a static template"

COMPOSE_TEMPERATURE = 0.7
COMPOSE_MAX_TOKENS = 1500


def _feedback_label(rating: int) -> str:
    if rating >= 4:
        return "positive"
    if rating <= 2:
        return "negative"
    return "neutral"


class IntelligentRouter:
    """
    Usage:
        router = IntelligentRouter(registry, classifier, memory)
        response = await router.process_email_request(
            EmailRequest(user_input="Reply and thank Anna for the notes", tier=Tier.PRO)
        )
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        classifier: IntentClassifier,
        memory: InteractionMemory,
        analyzer: Optional[EmotionalAnalyzer] = None,
        tier_policy: Optional[TierPolicy] = None,
        static_template_fallback: Optional[bool] = None,
    ):
        self.registry = registry
        self.classifier = classifier
        self.memory = memory
        self.analyzer = analyzer or EmotionalAnalyzer()
        self.tier_policy = tier_policy or TierPolicy(self.analyzer, memory)
        self.static_template_fallback = (
            static_template_fallback
            if static_template_fallback is not None
            else settings.STATIC_TEMPLATE_FALLBACK
        )

    async def process_email_request(self, request: EmailRequest) -> EmailResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        self.tier_policy.enforce(request.action, request.tier)

        classification = await self.classifier.classify_intent(request.user_input, request_id=request_id)

        remembered = self.memory.retrieve_relevant_context(
            request.user_id, request.user_input, limit=5, threshold=0.7
        )

        analysis = self.analyzer.analyze_emotional_context(
            request.user_input,
            request.original_email or "",
            request.requested_tone,
        )

        tone = request.requested_tone or "professional"
        intent = classification.intent.value
        system_prompt = build_system_prompt(
            intent,
            tone,
            memory_snippets=[entry.summary or entry.content for entry in remembered],
            dominant_emotion=analysis.dominant_emotion,
            emotion_confidence=analysis.confidence,
        )
        prompt = format_request(
            intent,
            request.user_input,
            tone=request.requested_tone,
            original_email=request.original_email,
            email_thread=request.email_thread,
        )

        content, used_llm, confidence, fallback_used = await self._route(
            request_id, classification, prompt, system_prompt, request.user_input
        )

        if fallback_used:
            suggestions = [STATIC_NOTICE if used_llm == STATIC_TEMPLATE_LABEL else FALLBACK_NOTICE]
        else:
            suggestions = self.generate_smart_suggestions(content, intent, classification.context)

        self.memory.store_interaction(
            request.user_id,
            request.user_input,
            content,
            intent=intent,
            tone=tone,
            success=not fallback_used,
        )

        response = EmailResponse(
            content=content,
            used_llm=used_llm,
            confidence=confidence,
            intent=classification,
            emotional_analysis=analysis,
            suggestions=suggestions,
            processing_time_ms=(time.time() - start_time) * 1000,
            fallback_used=fallback_used,
        )
        return self.tier_policy.enhance_response_for_tier(response, request.tier)

    # -------------------------------------------------------------------------
    # ROUTING
    # -------------------------------------------------------------------------

    async def _route(
        self,
        request_id: str,
        classification: IntentClassification,
        prompt: str,
        system_prompt: str,
        user_input: str,
    ) -> Tuple[str, str, float, bool]:
        """Walk the fallback chain. Returns (content, used_llm, confidence, fallback_used)."""
        intent = classification.intent.value
        preferred = classification.suggested_backend.value
        preferred_type = resolve_backend(preferred)
        chain = self.registry.fallback_chain(preferred)

        for provider_type, provider in chain:
            is_fallback = provider_type != preferred_type
            try:
                content = await self._attempt(request_id, provider, prompt, system_prompt)
            except ProviderUnavailableError as e:
                logger.warning(f"[{request_id}] {provider_type.value} failed: {e}")
                continue

            label = USED_LLM_LABELS[provider_type]
            confidence = classification.confidence
            if is_fallback:
                label = f"{label}-fallback"
                confidence *= FALLBACK_CONFIDENCE_FACTOR

            ai_monitor.track_routing(request_id, intent, provider_type.value, confidence, fallback_used=is_fallback)
            return content, label, confidence, is_fallback

        if self.static_template_fallback:
            logger.warning(f"[{request_id}] All providers failed, answering from static template")
            confidence = classification.confidence * STATIC_CONFIDENCE_FACTOR
            ai_monitor.track_routing(request_id, intent, STATIC_TEMPLATE_LABEL, confidence, fallback_used=True)
            return render_static_template(user_input), STATIC_TEMPLATE_LABEL, confidence, True

        ai_monitor.track_error(
            request_id,
            "All LLM systems failed",
            stage="routing",
            metadata={"intent": intent, "preferred": preferred, "chain": [t.value for t, _ in chain]},
        )
        raise AllSystemsFailedError(f"No provider answered for intent '{intent}' (preferred {preferred})")

    async def _attempt(
        self,
        request_id: str,
        provider: AIProvider,
        prompt: str,
        system_prompt: str,
    ) -> str:
        response = await provider.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=COMPOSE_TEMPERATURE,
            max_tokens=COMPOSE_MAX_TOKENS,
        )
        ai_monitor.track_response(request_id, response)
        if not response.success:
            raise ProviderUnavailableError(provider.provider_type.value, response.error or "")
        return response.content

    # -------------------------------------------------------------------------
    # SUGGESTIONS & FEEDBACK
    # -------------------------------------------------------------------------

    def generate_smart_suggestions(self, content: str, intent: str, context: IntentContext) -> List[str]:
        suggestions = []

        if len(content) > 1000:
            suggestions.append("Consider shortening for better readability")
        elif len(content) < 100:
            suggestions.append("Consider adding more detail or context")

        if intent == "compose":
            suggestions.append("Add a call-to-action if appropriate")
            if "Best regards" not in content and "Sincerely" not in content:
                suggestions.append("Consider adding a professional closing")
        elif intent == "reply":
            suggestions.append("Review all points from the original email are addressed")
        elif intent == "apology":
            lowered = content.lower()
            if "sorry" not in lowered and "apologize" not in lowered:
                suggestions.append("Ensure the apology is clearly stated")
            suggestions.append("Consider offering a solution or next steps")
        elif intent == "thank_you":
            suggestions.append("Consider mentioning specific actions you're grateful for")

        if context.urgency == Urgency.HIGH:
            suggestions.append("Consider indicating urgency in subject line")

        if context.emotional_tone == EmotionalTone.NEGATIVE:
            suggestions.append("Review tone to ensure it's constructive and empathetic")

        return suggestions[:3]

    def provide_feedback(
        self,
        request: EmailRequest,
        response: str,
        rating: int,
        notes: Optional[str] = None,
    ) -> str:
        """
        Record a rating for a generated draft.

        Stored as a new memory entry; past responses are never re-scored.
        Notes mentioning "tone" also go to the tone model.
        """
        feedback = _feedback_label(rating)
        self.memory.store_feedback(
            request.user_id,
            request.user_input,
            feedback,
            rating=rating,
            tone=request.requested_tone,
            improvements=notes,
        )

        if notes and "tone" in notes.lower():
            self.analyzer.update_tone_model(request.user_input, feedback, notes)

        ai_monitor.track_event(
            str(uuid.uuid4())[:8],
            "feedback_received",
            {"rating": rating, "feedback": feedback, "response_length": len(response)},
        )
        return feedback

    def analyze_emotion(self, user_input: str, original_email: str = "", tone: Optional[str] = None) -> EmotionalAnalysis:
        return self.analyzer.analyze_emotional_context(user_input, original_email, tone)

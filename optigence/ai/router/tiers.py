"""
Tier Policy - Which OptiMail capabilities each subscription tier gets.

    free   compose, reply, summarize
    pro    + rewrite, voice, emotion, tone_analysis
    elite  + real_time, advanced_ai, multi_llm

enforce() runs before any provider call; a disallowed action raises
TierRestrictedError (HTTP 403).
"""

import dataclasses
import logging
from typing import Dict, FrozenSet, List, Optional

from optigence.ai.emotion import EmotionalAnalysis, EmotionalAnalyzer, Sentiment
from optigence.ai.memory import InteractionMemory
from optigence.ai.router.schemas import EmailResponse, RealtimeSuggestions, Tier
from optigence.core.errors import TierRestrictedError

logger = logging.getLogger("optigence.ai.router.tiers")

_FREE = frozenset({"compose", "reply", "summarize"})
_PRO = _FREE | {"rewrite", "voice", "emotion", "tone_analysis"}
_ELITE = _PRO | {"real_time", "advanced_ai", "multi_llm"}

TIER_FEATURES: Dict[Tier, FrozenSet[str]] = {
    Tier.FREE: _FREE,
    Tier.PRO: _PRO,
    Tier.ELITE: _ELITE,
}

PRO_TIP = "Pro tip: Consider A/B testing different versions"
UPGRADE_MESSAGE = "Upgrade to Pro for real-time suggestions"

# Deterministic continuation when no keyword-specific one applies
DEFAULT_CONTINUATION = "I hope this email finds you well."


class TierPolicy:
    """Capability checks and tier-specific response shaping."""

    def __init__(
        self,
        analyzer: Optional[EmotionalAnalyzer] = None,
        memory: Optional[InteractionMemory] = None,
    ):
        self.analyzer = analyzer or EmotionalAnalyzer()
        self.memory = memory

    def is_feature_available(self, feature: str, tier: Tier) -> bool:
        return feature in TIER_FEATURES[Tier(tier)]

    def enforce(self, action: str, tier: Tier) -> None:
        if not self.is_feature_available(action, tier):
            logger.info(f"Blocked '{action}' for {Tier(tier).value} tier")
            raise TierRestrictedError(action, Tier(tier).value)

    def get_capabilities(self, tier: Tier) -> Dict[str, bool]:
        tier = Tier(tier)
        return {
            "compose": True,
            "reply": True,
            "summarize": True,
            "rewrite": tier != Tier.FREE,
            "voiceInteraction": tier != Tier.FREE,
            "emotionalAnalysis": tier != Tier.FREE,
            "multiModalInput": tier == Tier.ELITE,
        }

    def enhance_response_for_tier(self, response: EmailResponse, tier: Tier) -> EmailResponse:
        if Tier(tier) == Tier.PRO:
            return dataclasses.replace(response, suggestions=[*response.suggestions, PRO_TIP])
        return response

    def get_realtime_suggestions(
        self,
        partial_input: str,
        tier: Tier,
        existing_content: str = "",
        user_id: Optional[str] = None,
    ) -> RealtimeSuggestions:
        if Tier(tier) == Tier.FREE:
            return RealtimeSuggestions(
                suggestions=[UPGRADE_MESSAGE],
                tone_recommendations=["professional"],
                predicted_content="",
            )

        analysis = self.analyzer.analyze_emotional_context(partial_input, existing_content)

        suggestions = [
            *analysis.suggestions,
            "Consider adding a specific call to action",
            "Review for clarity and conciseness",
        ]
        if self.memory is not None:
            remembered = self.memory.retrieve_relevant_context(user_id, partial_input, limit=3, threshold=0.6)
            if remembered:
                suggestions.insert(0, f"Similar to a previous {remembered[0].intent} request")

        return RealtimeSuggestions(
            suggestions=suggestions[:5],
            tone_recommendations=self._tone_recommendations(analysis),
            predicted_content=self._predict_next_content(partial_input),
        )

    @staticmethod
    def _tone_recommendations(analysis: EmotionalAnalysis) -> List[str]:
        recommendations = ["professional", "friendly"]
        if analysis.sentiment == Sentiment.NEGATIVE:
            recommendations.insert(0, "empathetic")
        elif analysis.sentiment == Sentiment.POSITIVE:
            recommendations.insert(0, "enthusiastic")
        return recommendations[:3]

    @staticmethod
    def _predict_next_content(partial_input: str) -> str:
        lowered = partial_input.lower()
        if "follow up" in lowered:
            return "I wanted to follow up on our previous conversation regarding..."
        if "thank" in lowered:
            return "Thank you for your time and consideration. I appreciate..."
        return DEFAULT_CONTINUATION

"""
Emotional Analyzer - lexicon-scored sentiment, arousal and valence.

analyze_emotional_context() is a pure function of its inputs and the
static lexicon: the same input always produces an identical result. The
only mutable state is the tone feedback log, written exclusively through
update_tone_model().

Algorithm:
1. Concatenate input + prior email, lowercase, split on whitespace,
   strip non-word characters from each token.
2. Count lexicon hits per emotion, normalized by token count.
3. Dominant emotion = argmax; confidence = min(score * 5, 1).
4. Sentiment needs a margin (default 1.2x) over the opposite polarity.
5. Arousal/valence averaged over lexicon hits only.
6. Up to three suggestions from a fixed rule list.
"""

import logging
import re
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional

from optigence.ai.emotion.lexicon import (
    CONFIDENCE_SCALE,
    DEFAULT_AROUSAL,
    DEFAULT_VALENCE,
    EMOTION_CATEGORIES,
    EMOTION_LEXICON,
    EMOTION_TO_TONE,
    NEGATIVE_EMOTIONS,
    POSITIVE_EMOTIONS,
    TONE_MISMATCHES,
    TONE_PATTERNS,
    TONE_REPLACEMENTS,
)
from optigence.ai.emotion.schemas import EmotionalAnalysis, Sentiment, ToneAdjustment
from optigence.core.config import settings

logger = logging.getLogger("optigence.ai.emotion")

_NON_WORD = re.compile(r"[^\w]")

NO_SIGNAL_CONFIDENCE = 0.5
NO_SIGNAL_SUGGESTION = "Use a balanced, professional tone"
MAX_SUGGESTIONS = 3
TONE_LOG_SIZE = 100


@dataclass
class ToneFeedback:
    """One entry of the tone feedback log."""
    input: str
    feedback: str
    improvements: Optional[str]
    timestamp: datetime


class EmotionalAnalyzer:
    """
    Usage:
        analyzer = EmotionalAnalyzer()
        analysis = analyzer.analyze_emotional_context(
            "I'm really frustrated about the delay",
            original_email="",
            requested_tone="professional",
        )
    """

    def __init__(self, sentiment_margin: Optional[float] = None, log_size: int = TONE_LOG_SIZE):
        self.sentiment_margin = sentiment_margin if sentiment_margin is not None else settings.SENTIMENT_MARGIN
        self._tone_log: Deque[ToneFeedback] = deque(maxlen=log_size)

    # -------------------------------------------------------------------------
    # ANALYSIS
    # -------------------------------------------------------------------------

    def analyze_emotional_context(
        self,
        user_input: str,
        original_email: str = "",
        requested_tone: Optional[str] = None,
    ) -> EmotionalAnalysis:
        text = f"{user_input or ''} {original_email or ''}".lower()
        tokens = [_NON_WORD.sub("", token) for token in text.split()]
        hits = [EMOTION_LEXICON[token] for token in tokens if token in EMOTION_LEXICON]

        emotions = {emotion: 0.0 for emotion in EMOTION_CATEGORIES}

        if not hits:
            emotions["neutral"] = 1.0
            return EmotionalAnalysis(
                dominant_emotion="neutral",
                confidence=NO_SIGNAL_CONFIDENCE,
                emotions=emotions,
                sentiment=Sentiment.NEUTRAL,
                arousal=DEFAULT_AROUSAL,
                valence=DEFAULT_VALENCE,
                suggestions=[NO_SIGNAL_SUGGESTION],
            )

        for entry in hits:
            emotions[entry.emotion] += 1
        total_tokens = len(tokens)
        for emotion in emotions:
            emotions[emotion] = emotions[emotion] / total_tokens

        dominant, score = self._dominant_emotion(emotions)
        confidence = min(score * CONFIDENCE_SCALE, 1.0)
        sentiment = self._sentiment(emotions)
        arousal = sum(entry.arousal for entry in hits) / len(hits)
        valence = sum(entry.valence for entry in hits) / len(hits)

        suggestions = self._suggestions(dominant, confidence, sentiment, arousal, requested_tone)

        return EmotionalAnalysis(
            dominant_emotion=dominant,
            confidence=confidence,
            emotions=emotions,
            sentiment=sentiment,
            arousal=arousal,
            valence=valence,
            suggestions=suggestions,
        )

    def _dominant_emotion(self, emotions: Dict[str, float]):
        dominant, best = "neutral", 0.0
        for emotion in EMOTION_CATEGORIES:
            if emotions[emotion] > best:
                dominant, best = emotion, emotions[emotion]
        return dominant, best

    def _sentiment(self, emotions: Dict[str, float]) -> Sentiment:
        positive = sum(emotions[emotion] for emotion in POSITIVE_EMOTIONS)
        negative = sum(emotions[emotion] for emotion in NEGATIVE_EMOTIONS)
        if positive > negative * self.sentiment_margin:
            return Sentiment.POSITIVE
        if negative > positive * self.sentiment_margin:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL

    def _suggestions(
        self,
        dominant: str,
        confidence: float,
        sentiment: Sentiment,
        arousal: float,
        requested_tone: Optional[str],
    ) -> List[str]:
        suggestions = []

        if confidence < 0.5:
            suggestions.append(
                "Emotional context is unclear - consider being more explicit about your feelings or intent"
            )

        if sentiment == Sentiment.NEGATIVE:
            suggestions.append("Consider acknowledging concerns while maintaining a constructive tone")
            if dominant in ("anger", "frustration"):
                suggestions.append("Take a moment to review tone - aim for firm but professional")
        elif sentiment == Sentiment.POSITIVE:
            suggestions.append("Great emotional tone - maintain the positive energy")
        elif requested_tone in ("friendly", "empathetic"):
            suggestions.append("Consider adding warmer language to match the requested tone")

        if arousal > 0.7:
            suggestions.append("High energy detected - ensure it comes across as enthusiasm rather than urgency")
        elif arousal < 0.3:
            suggestions.append("Consider adding more engagement or energy to the message")

        if requested_tone:
            mismatch = TONE_MISMATCHES.get(f"{dominant}-{requested_tone}")
            if mismatch:
                suggestions.append(mismatch)

        return suggestions[:MAX_SUGGESTIONS]

    # -------------------------------------------------------------------------
    # TONE
    # -------------------------------------------------------------------------

    def detect_current_tone(self, content: str) -> str:
        """Tone whose patterns match the content most often ("neutral" if none)."""
        detected, best = "neutral", 0
        for tone, patterns in TONE_PATTERNS.items():
            matches = sum(len(pattern.findall(content)) for pattern in patterns)
            if matches > best:
                detected, best = tone, matches
        return detected

    def map_emotion_to_tone(self, emotion: str, analysis: EmotionalAnalysis) -> str:
        tone = EMOTION_TO_TONE.get(emotion)
        if tone:
            return tone
        if analysis.sentiment == Sentiment.POSITIVE:
            return "friendly"
        if analysis.sentiment == Sentiment.NEGATIVE:
            return "empathetic"
        return "professional"

    def adjust_tone_for_emotion(
        self,
        content: str,
        target_emotion: str,
        analysis: EmotionalAnalysis,
    ) -> ToneAdjustment:
        """Suggest a tone for the emotional context and apply simple phrase swaps."""
        current = self.detect_current_tone(content)
        suggested = self.map_emotion_to_tone(target_emotion, analysis)

        if current == suggested:
            reasoning = f"Current tone ({current}) is well-matched to the emotional context"
        else:
            reasoning = (
                f"Detected {analysis.dominant_emotion} with {analysis.sentiment.value} sentiment. "
                f"Suggesting {suggested} tone instead of {current} for better emotional alignment."
            )

        adjusted = content
        for pattern, replacement in TONE_REPLACEMENTS.get(suggested, []):
            adjusted = pattern.sub(replacement, adjusted)

        return ToneAdjustment(
            current_tone=current,
            suggested_tone=suggested,
            reasoning=reasoning,
            adjusted_content=adjusted,
        )

    # -------------------------------------------------------------------------
    # FEEDBACK
    # -------------------------------------------------------------------------

    def update_tone_model(self, input_text: str, feedback: str, improvements: Optional[str] = None) -> None:
        """Append tone feedback to the bounded log (oldest entries drop first)."""
        self._tone_log.append(ToneFeedback(
            input=input_text,
            feedback=feedback,
            improvements=improvements,
            timestamp=datetime.now(timezone.utc),
        ))
        logger.info(f"Tone feedback recorded ({feedback}), log size {len(self._tone_log)}")

    @property
    def tone_feedback(self) -> List[ToneFeedback]:
        return list(self._tone_log)

"""
Emotion Module - lexicon-based emotional and tone analysis.

    from optigence.ai.emotion import EmotionalAnalyzer
"""

from optigence.ai.emotion.analyzer import EmotionalAnalyzer
from optigence.ai.emotion.schemas import EmotionalAnalysis, Sentiment, ToneAdjustment

__all__ = ["EmotionalAnalyzer", "EmotionalAnalysis", "Sentiment", "ToneAdjustment"]

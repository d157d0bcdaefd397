"""
Static tables for the emotional analyzer.

EMOTION_LEXICON maps a cleaned, lowercased token to its emotion and the
(valence, arousal) pair it contributes. TONE_PATTERNS are the regexes used
to guess the tone of an existing draft.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple


@dataclass(frozen=True)
class LexiconEntry:
    emotion: str
    valence: float
    arousal: float


EMOTION_LEXICON: Dict[str, LexiconEntry] = {
    "happy": LexiconEntry("joy", 0.8, 0.6),
    "excited": LexiconEntry("excitement", 0.9, 0.9),
    "pleased": LexiconEntry("satisfaction", 0.7, 0.4),
    "grateful": LexiconEntry("gratitude", 0.8, 0.3),
    "confident": LexiconEntry("confidence", 0.6, 0.5),
    "proud": LexiconEntry("pride", 0.7, 0.4),
    "angry": LexiconEntry("anger", -0.8, 0.8),
    "frustrated": LexiconEntry("frustration", -0.6, 0.7),
    "disappointed": LexiconEntry("disappointment", -0.7, 0.3),
    "worried": LexiconEntry("anxiety", -0.5, 0.6),
    "sad": LexiconEntry("sadness", -0.7, 0.2),
    "sorry": LexiconEntry("regret", -0.4, 0.3),
    "professional": LexiconEntry("professional", 0.1, 0.3),
    "formal": LexiconEntry("formal", 0.0, 0.2),
    "urgent": LexiconEntry("urgency", 0.0, 0.8),
    "important": LexiconEntry("importance", 0.2, 0.6),
}

# Scan order for the dominant emotion; earlier entries win ties
EMOTION_CATEGORIES: Tuple[str, ...] = (
    "joy", "excitement", "satisfaction", "gratitude", "confidence", "pride",
    "anger", "frustration", "disappointment", "anxiety", "sadness", "regret",
    "professional", "formal", "urgency", "importance", "neutral",
)

POSITIVE_EMOTIONS = frozenset({"joy", "excitement", "satisfaction", "gratitude", "confidence", "pride"})
NEGATIVE_EMOTIONS = frozenset({"anger", "frustration", "disappointment", "anxiety", "sadness", "regret"})

# Scaling from a normalized score to a confidence
CONFIDENCE_SCALE = 5.0

DEFAULT_AROUSAL = 0.5
DEFAULT_VALENCE = 0.0

# Keyed "{emotion}-{requested tone}"
TONE_MISMATCHES: Dict[str, str] = {
    "anger-professional": "Anger detected but professional tone requested - consider reframing concerns constructively",
    "sadness-casual": "Sadness detected but casual tone requested - ensure appropriate level of formality",
    "excitement-formal": "High enthusiasm detected but formal tone requested - moderate the energy level",
    "anxiety-confident": "Worry detected but confident tone needed - focus on solutions and positive outcomes",
}

EMOTION_TO_TONE: Dict[str, str] = {
    "anger": "professional",
    "frustration": "empathetic",
    "disappointment": "empathetic",
    "anxiety": "reassuring",
    "sadness": "supportive",
    "regret": "apologetic",
    "joy": "friendly",
    "excitement": "enthusiastic",
    "satisfaction": "appreciative",
    "gratitude": "warm",
    "confidence": "professional",
    "urgency": "direct",
}


def _compile(*patterns: str) -> List[Pattern]:
    return [re.compile(pattern, re.IGNORECASE) for pattern in patterns]


TONE_PATTERNS: Dict[str, List[Pattern]] = {
    "professional": _compile(
        r"\b(dear|sincerely|regards|respectfully)\b",
        r"\b(please|kindly|would you|could you)\b",
        r"\b(pursuant to|in accordance with|as per)\b",
    ),
    "casual": _compile(
        r"\b(hey|hi|hello|thanks|great)\b",
        r"\b(awesome|cool|nice|sure thing)\b",
        r"(?<!!)!{1,2}(?!!)",
    ),
    "friendly": _compile(
        r"\b(hope you're well|hope this finds you|looking forward)\b",
        r"\b(wonderful|fantastic|excellent|appreciate)\b",
    ),
    "urgent": _compile(
        r"\b(urgent|asap|immediately|priority|rush)\b",
        r"\b(need|require|must have|deadline)\b",
        r"!{2,}",
    ),
    "empathetic": _compile(
        r"\b(understand|realize|appreciate|sympathize)\b",
        r"\b(difficult|challenging|sorry to hear|my apologies)\b",
        r"\b(feel|concern|worry|care)\b",
    ),
    "persuasive": _compile(
        r"\b(benefit|advantage|opportunity|value)\b",
        r"\b(consider|imagine|picture|think about)\b",
        r"\b(proven|guaranteed|successful|effective)\b",
    ),
}

# Phrase replacements per target tone, applied in order
TONE_REPLACEMENTS: Dict[str, List[Tuple[Pattern, str]]] = {
    "professional": [
        (re.compile(r"\bhey\b", re.IGNORECASE), "Dear"),
        (re.compile(r"\bthanks\b", re.IGNORECASE), "Thank you"),
        (re.compile(r"\byeah\b", re.IGNORECASE), "Yes"),
        (re.compile(r"!+"), "."),
    ],
    "empathetic": [
        (re.compile(r"\bI understand\b", re.IGNORECASE), "I completely understand"),
        (re.compile(r"\bsorry\b", re.IGNORECASE), "I sincerely apologize"),
        (re.compile(r"\bproblem\b", re.IGNORECASE), "concern"),
    ],
    "friendly": [
        (re.compile(r"\bDear\b", re.IGNORECASE), "Hi"),
        (re.compile(r"\bRegards\b", re.IGNORECASE), "Best wishes"),
        (re.compile(r"\bThank you\b", re.IGNORECASE), "Thanks so much"),
    ],
}

"""
Suggestions Module - Live ranked suggestions for the compose box.

    from optigence.ai.suggestions import LiveSuggestionEngine, SuggestionRefresher
"""

from optigence.ai.suggestions.debounce import SuggestionRefresher
from optigence.ai.suggestions.engine import LiveSuggestionEngine
from optigence.ai.suggestions.schemas import (
    ActionSuggestion,
    SuggestionCategory,
    SuggestionContext,
    SuggestionPipelineResult,
)

__all__ = [
    "LiveSuggestionEngine",
    "SuggestionRefresher",
    "ActionSuggestion",
    "SuggestionCategory",
    "SuggestionContext",
    "SuggestionPipelineResult",
]

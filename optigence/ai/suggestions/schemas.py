"""
Suggestion Schemas - Request context and ranked output of the live
suggestion pipeline.

Everything here is camelCase on the wire so the front-end can post its
context snapshot unchanged.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from optigence.schemas import CamelModel


class SuggestionCategory(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    CONTEXTUAL = "contextual"
    CROSS_MODULE = "cross_module"


class SuggestionSource(str, Enum):
    """Candidate sources, in tie-break priority order."""
    CROSS_MODULE = "cross_module"
    INTENT = "intent"
    EMOTIONAL = "emotional"
    CONTEXTUAL = "contextual"


SOURCE_PRIORITY: Dict[SuggestionSource, int] = {
    source: index for index, source in enumerate(SuggestionSource)
}


class ActionSuggestion(CamelModel):
    """A ranked candidate next step for the UI."""
    id: str
    category: SuggestionCategory
    action: str
    label: str
    icon: str = ""
    description: str = ""
    tooltip: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)
    requires_confirmation: bool = False
    estimated_time: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# CONTEXT SNAPSHOT
# ---------------------------------------------------------------------------

class Extraction(CamelModel):
    ask: str = ""
    people: List[Dict[str, Any]] = Field(default_factory=list)
    dates_times: List[Dict[str, Any]] = Field(default_factory=list)
    locations: List[Dict[str, Any]] = Field(default_factory=list)
    sentiment: str = "neutral"
    urgency: str = "medium"
    topics: List[str] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    language: str = "en"


class UserProfile(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    default_tone: str = "professional"
    signature: Optional[str] = None
    confidence_auto_send: float = 90
    auto_send_enabled: bool = False
    primary_language: Optional[str] = None


class ContactProfile(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    trust_level: float = 0
    response_time_avg: Optional[float] = None


class ThreadContext(CamelModel):
    has_history: bool = False
    message_count: int = 0
    last_message: Optional[str] = None
    participants: List[str] = Field(default_factory=list)
    status: str = "active"


class CalendarContext(CamelModel):
    has_calendar_access: bool = False
    upcoming_events: int = 0
    available_slots: List[Dict[str, Any]] = Field(default_factory=list)


class SuggestionContext(CamelModel):
    """Snapshot of everything the UI knows when the user pauses typing."""
    user_input: str
    intent: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    requested_tone: Optional[str] = None
    extraction: Extraction = Field(default_factory=Extraction)
    user_profile: Optional[UserProfile] = None
    contact_profile: Optional[ContactProfile] = None
    thread_context: Optional[ThreadContext] = None
    calendar_context: Optional[CalendarContext] = None


class SuggestionPipelineResult(CamelModel):
    suggestions: List[ActionSuggestion] = Field(default_factory=list)
    primary_action: Optional[ActionSuggestion] = None
    contextual_hints: List[str] = Field(default_factory=list)
    reasoning: str = ""
    processing_time_ms: float = 0.0

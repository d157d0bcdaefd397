"""
Router Module - The email orchestrator and tier gating.
"""

from optigence.ai.router.orchestrator import IntelligentRouter
from optigence.ai.router.schemas import EmailRequest, EmailResponse, RealtimeSuggestions, Tier
from optigence.ai.router.tiers import TierPolicy

__all__ = [
    "IntelligentRouter",
    "EmailRequest",
    "EmailResponse",
    "RealtimeSuggestions",
    "Tier",
    "TierPolicy",
]

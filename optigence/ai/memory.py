"""
Interaction Memory - Per-user recall of past requests and feedback.

A bounded in-process store: at most MEMORY_MAX_USERS users, each with at
most MEMORY_MAX_ENTRIES entries. A user's entries expire together once the
user has gone MEMORY_USER_TTL_SECONDS without a new entry. Each entry keeps
the keyword set of its request; retrieval scores entries against the query
with Jaccard similarity (|A ∩ B| / |A ∪ B|) and returns the best matches
above a threshold.

Memory is advisory: any failure while reading it degrades to an empty
context instead of failing the request.
"""

import logging
import re
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from cachetools import TTLCache

from optigence.core.config import settings

logger = logging.getLogger("optigence.ai.memory")

ANONYMOUS_USER = "anonymous"

_WORD = re.compile(r"[a-z0-9']+")

STOPWORDS = frozenset({
    "the", "and", "for", "you", "your", "with", "that", "this", "are", "was",
    "but", "not", "have", "has", "had", "can", "will", "would", "could", "should",
    "about", "from", "they", "them", "their", "our", "all", "any", "please",
    "just", "into", "out", "too", "very", "its", "it's", "i'm", "we're",
})


def extract_keywords(text: str) -> FrozenSet[str]:
    """Lowercased content words of three letters or more."""
    words = _WORD.findall((text or "").lower())
    return frozenset(word for word in words if len(word) >= 3 and word not in STOPWORDS)


def jaccard_similarity(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


@dataclass
class MemoryEntry:
    id: str
    user_id: str
    content: str
    summary: str
    intent: str
    tone: str
    success: bool
    keywords: FrozenSet[str]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    feedback: Optional[str] = None
    rating: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "summary": self.summary,
            "intent": self.intent,
            "tone": self.tone,
            "success": self.success,
            "feedback": self.feedback,
            "rating": self.rating,
            "timestamp": self.timestamp.isoformat(),
        }


def summarize(request: str, response: str) -> str:
    request_words = " ".join(request.split()[:10])
    response_words = " ".join(response.split()[:15])
    return f"Request: {request_words}... Response: {response_words}..."


class InteractionMemory:
    """
    Usage:
        memory = InteractionMemory()
        memory.store_interaction("user-1", "reply to the budget email", draft, intent="reply")
        context = memory.retrieve_relevant_context("user-1", "budget email reply")
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        max_users: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries or settings.MEMORY_MAX_ENTRIES
        # When full, the least recently used user is evicted
        self._entries: TTLCache = TTLCache(
            maxsize=max_users or settings.MEMORY_MAX_USERS,
            ttl=ttl_seconds or settings.MEMORY_USER_TTL_SECONDS,
            timer=timer,
        )

    def _append(self, entry: MemoryEntry) -> None:
        bucket = self._entries.get(entry.user_id)
        if bucket is None:
            bucket = deque(maxlen=self.max_entries)
        bucket.append(entry)
        # Re-inserting restarts the user's idle timer
        self._entries[entry.user_id] = bucket

    def __len__(self) -> int:
        return len(self._entries)

    # -------------------------------------------------------------------------
    # WRITE
    # -------------------------------------------------------------------------

    def store_interaction(
        self,
        user_id: Optional[str],
        request: str,
        response: str,
        intent: str,
        tone: str = "professional",
        success: bool = True,
    ) -> MemoryEntry:
        entry = MemoryEntry(
            id=f"mem_{uuid.uuid4().hex[:12]}",
            user_id=user_id or ANONYMOUS_USER,
            content=request,
            summary=summarize(request, response),
            intent=intent,
            tone=tone,
            success=success,
            keywords=extract_keywords(request),
        )
        self._append(entry)
        return entry

    def store_feedback(
        self,
        user_id: Optional[str],
        request: str,
        feedback: str,
        rating: Optional[int] = None,
        tone: Optional[str] = None,
        improvements: Optional[str] = None,
    ) -> MemoryEntry:
        """feedback is one of positive / negative / neutral."""
        entry = MemoryEntry(
            id=f"mem_{uuid.uuid4().hex[:12]}",
            user_id=user_id or ANONYMOUS_USER,
            content=request,
            summary=f"User feedback: {feedback}. {improvements or ''}".strip(),
            intent="feedback",
            tone=tone or "neutral",
            success=feedback == "positive",
            keywords=extract_keywords(request),
            feedback=feedback,
            rating=rating,
        )
        self._append(entry)
        return entry

    # -------------------------------------------------------------------------
    # READ
    # -------------------------------------------------------------------------

    def retrieve_relevant_context(
        self,
        user_id: Optional[str],
        query: str,
        limit: int = 5,
        threshold: float = 0.7,
        intent_filter: Optional[str] = None,
    ) -> List[MemoryEntry]:
        """Best matches for the query, most similar first."""
        try:
            query_keywords = extract_keywords(query)
            scored = []
            for entry in self._entries.get(user_id or ANONYMOUS_USER, ()):
                if intent_filter and entry.intent != intent_filter:
                    continue
                similarity = jaccard_similarity(query_keywords, entry.keywords)
                if similarity >= threshold:
                    scored.append((similarity, entry))
        except Exception as e:
            logger.warning(f"Memory retrieval failed, continuing without context: {e}")
            return []

        scored.sort(key=lambda item: item[0], reverse=True)
        return [entry for _, entry in scored[:limit]]

    def get_user_patterns(self, user_id: Optional[str]) -> Dict[str, Any]:
        entries = list(self._entries.get(user_id or ANONYMOUS_USER, ()))
        successful = [entry for entry in entries if entry.success]

        tones = Counter(entry.tone for entry in successful)
        intents = Counter(entry.intent for entry in successful if entry.intent != "feedback")
        ratings = [entry.rating for entry in entries if entry.rating is not None]

        return {
            "preferred_tones": [tone for tone, _ in tones.most_common(3)],
            "common_intents": [intent for intent, _ in intents.most_common(5)],
            "average_rating": round(sum(ratings) / len(ratings), 2) if ratings else None,
            "total_interactions": len(entries),
        }


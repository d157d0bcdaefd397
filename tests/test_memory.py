"""Tests for per-user interaction memory."""

import pytest

from optigence.ai.memory import InteractionMemory, extract_keywords, jaccard_similarity


@pytest.fixture
def memory():
    return InteractionMemory(max_entries=10)


class TestKeywords:

    def test_stopwords_and_short_words_dropped(self):
        assert extract_keywords("Please reply to the budget email") == frozenset({"reply", "budget", "email"})

    def test_jaccard(self):
        a = frozenset({"budget", "email", "reply"})
        b = frozenset({"budget", "email"})

        assert jaccard_similarity(a, b) == pytest.approx(2 / 3)
        assert jaccard_similarity(a, frozenset()) == 0.0


class TestRetrieval:
    """retrieve_relevant_context scoring and filtering."""

    def test_exact_match_returned(self, memory):
        memory.store_interaction("u1", "reply to the budget email", "Sure, here is a draft", intent="reply")

        entries = memory.retrieve_relevant_context("u1", "budget email reply")

        assert len(entries) == 1
        assert entries[0].intent == "reply"
        assert entries[0].summary.startswith("Request: reply to the budget email...")

    def test_below_threshold_excluded(self, memory):
        memory.store_interaction("u1", "reply to the budget email", "draft", intent="reply")

        assert memory.retrieve_relevant_context("u1", "budget spreadsheet") == []

    def test_users_are_isolated(self, memory):
        memory.store_interaction("u1", "budget email", "draft", intent="reply")

        assert memory.retrieve_relevant_context("u2", "budget email") == []

    def test_anonymous_bucket(self, memory):
        memory.store_interaction(None, "budget email", "draft", intent="reply")

        assert len(memory.retrieve_relevant_context(None, "budget email")) == 1

    def test_intent_filter_and_order(self, memory):
        memory.store_interaction("u1", "quarterly budget email", "draft", intent="summarize")
        memory.store_interaction("u1", "budget email", "draft", intent="reply")
        memory.store_interaction("u1", "budget email", "draft", intent="summarize")

        entries = memory.retrieve_relevant_context("u1", "budget email", threshold=0.5, intent_filter="summarize")

        assert [entry.content for entry in entries] == ["budget email", "quarterly budget email"]

    def test_bounded_per_user(self):
        memory = InteractionMemory(max_entries=2)
        for index in range(3):
            memory.store_interaction("u1", f"budget email {index}", "draft", intent="reply")

        assert memory.get_user_patterns("u1")["total_interactions"] == 2


class TestPatterns:

    def test_user_patterns(self, memory):
        memory.store_interaction("u1", "budget email", "draft", intent="reply", tone="friendly")
        memory.store_interaction("u1", "status update", "draft", intent="compose", tone="friendly")
        memory.store_interaction("u1", "angry client", "draft", intent="apology", tone="formal", success=False)
        memory.store_feedback("u1", "budget email", "positive", rating=5, tone="friendly")
        memory.store_feedback("u1", "status update", "negative", rating=2)

        patterns = memory.get_user_patterns("u1")

        assert patterns["preferred_tones"] == ["friendly"]
        assert set(patterns["common_intents"]) == {"reply", "compose"}
        assert patterns["average_rating"] == 3.5
        assert patterns["total_interactions"] == 5

    def test_feedback_entry(self, memory):
        entry = memory.store_feedback("u1", "budget email", "negative", rating=1, improvements="Be shorter")

        assert entry.success is False
        assert entry.summary == "User feedback: negative. Be shorter"
        assert entry.to_dict()["rating"] == 1


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestUserBound:
    """Users are capped and expire when idle."""

    def test_distinct_users_are_capped(self):
        memory = InteractionMemory(max_entries=5, max_users=10)
        for index in range(50):
            memory.store_feedback(f"user-{index}", "budget email", "positive", rating=5)

        assert len(memory) == 10
        assert memory.get_user_patterns("user-0")["total_interactions"] == 0
        assert memory.get_user_patterns("user-49")["total_interactions"] == 1

    def test_idle_user_expires(self):
        clock = FakeClock()
        memory = InteractionMemory(ttl_seconds=60, timer=clock)
        memory.store_interaction("u1", "budget email", "draft", intent="reply")

        clock.now = 61

        assert memory.retrieve_relevant_context("u1", "budget email") == []
        assert len(memory) == 0

    def test_new_entry_restarts_idle_timer(self):
        clock = FakeClock()
        memory = InteractionMemory(ttl_seconds=60, timer=clock)
        memory.store_interaction("u1", "budget email", "draft", intent="reply")
        clock.now = 50
        memory.store_interaction("u1", "status update", "draft", intent="compose")

        clock.now = 100

        assert memory.get_user_patterns("u1")["total_interactions"] == 2

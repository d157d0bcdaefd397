"""
AI Monitor - provider usage, classification and routing metrics.

Every event goes to the "optigence.ai" logger as one JSON line and, where it
counts towards a metric, into AggregatedMetrics:

    provider_call        tokens, latency, estimated cost   (track_response)
    intent_classified    per-strategy counters              (track_classification)
    routing_decision     fallbacks used                     (track_routing)
    pipeline_error       log only                           (track_error)
    anything else        log only                           (track_event)

Usage:
    from optigence.ai.monitoring import ai_monitor

    ai_monitor.track_response(request_id, response)
    stats = ai_monitor.get_stats()
"""

import json
import logging
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Deque, Dict, List, Optional

from optigence.ai.providers.base import AIResponse


# ---------------------------------------------------------------------------
# LOGGING SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("optigence.ai")
logger.setLevel(logging.INFO)

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(
        "[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(_handler)


# USD per 1M tokens (input, output), list prices of the default models
COST_PER_1M_TOKENS: Dict[str, tuple] = {
    "openai": (10.0, 30.0),       # gpt-4-turbo
    "anthropic": (3.0, 15.0),     # claude-3-sonnet
    "gemini": (1.25, 5.0),        # gemini-1.5-pro
    "cohere": (2.5, 10.0),        # command-r-plus
}


def estimate_cost(provider: str, prompt_tokens: int, completion_tokens: int) -> float:
    input_price, output_price = COST_PER_1M_TOKENS.get(provider.lower(), (0.0, 0.0))
    return (prompt_tokens * input_price + completion_tokens * output_price) / 1_000_000


# ---------------------------------------------------------------------------
# METRICS DATA CLASSES
# ---------------------------------------------------------------------------

@dataclass
class ProviderCall:
    """One provider round trip, as kept in the recent-call history."""
    request_id: str
    provider: str
    model: str
    prompt_tokens: int
    completion_tokens: int
    latency_ms: float
    success: bool
    estimated_cost: float = 0.0
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class AggregatedMetrics:
    """Counters since start-up or the last reset()."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_tokens: int = 0
    total_latency_ms: float = 0.0
    estimated_total_cost: float = 0.0
    requests_by_provider: Dict[str, int] = field(default_factory=dict)
    classifications_by_strategy: Dict[str, int] = field(default_factory=dict)
    fallbacks_used: int = 0

    @property
    def avg_latency_ms(self) -> float:
        return self.total_latency_ms / self.total_requests if self.total_requests else 0.0

    @property
    def success_rate(self) -> float:
        return 100.0 * self.successful_requests / self.total_requests if self.total_requests else 0.0

    def add_call(self, call: ProviderCall) -> None:
        self.total_requests += 1
        if call.success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        self.total_tokens += call.total_tokens
        self.total_latency_ms += call.latency_ms
        self.estimated_total_cost += call.estimated_cost
        self.requests_by_provider[call.provider] = self.requests_by_provider.get(call.provider, 0) + 1


# ---------------------------------------------------------------------------
# AI MONITOR
# ---------------------------------------------------------------------------

class AIMonitor:
    """Thread-safe collector behind the ai_monitor singleton."""

    def __init__(self, max_history: int = 1000):
        self._lock = Lock()
        self._max_history = max_history
        self._recent: Deque[ProviderCall] = deque(maxlen=max_history)
        self._aggregated = AggregatedMetrics()

    def _emit(self, level: int, event: str, request_id: str, **fields: Any) -> None:
        payload = {"event": event, "request_id": request_id, **fields}
        payload["timestamp"] = datetime.now(timezone.utc).isoformat()
        logger.log(level, json.dumps(payload, default=str))

    # -----------------------------------------------------------------------
    # TRACKING
    # -----------------------------------------------------------------------

    def track_response(
        self,
        request_id: str,
        response: AIResponse,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record one provider call, successful or not."""
        usage = response.usage
        provider = response.provider.value
        call = ProviderCall(
            request_id=request_id,
            provider=provider,
            model=response.model,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            latency_ms=response.latency_ms,
            success=response.success,
        )
        call.estimated_cost = estimate_cost(provider, call.prompt_tokens, call.completion_tokens)

        with self._lock:
            self._recent.append(call)
            self._aggregated.add_call(call)

        fields: Dict[str, Any] = {
            "provider": provider,
            "model": call.model,
            "success": call.success,
            "latency_ms": round(call.latency_ms, 2),
            "tokens": call.total_tokens,
            "estimated_cost": f"${call.estimated_cost:.6f}",
            "response_length": len(response.content or ""),
        }
        if response.error:
            fields["error"] = response.error
        if metadata:
            fields["metadata"] = metadata
        self._emit(logging.INFO if call.success else logging.WARNING, "provider_call", request_id, **fields)

    def track_classification(
        self,
        request_id: str,
        text: str,
        intent: str,
        confidence: float,
        strategy: str,
        backend: Optional[str] = None,
        processing_time_ms: float = 0.0,
    ) -> None:
        """Count which strategy classified the request."""
        with self._lock:
            counts = self._aggregated.classifications_by_strategy
            counts[strategy] = counts.get(strategy, 0) + 1

        self._emit(
            logging.INFO,
            "intent_classified",
            request_id,
            intent=intent,
            confidence=round(confidence, 3),
            strategy=strategy,
            suggested_backend=backend,
            processing_time_ms=round(processing_time_ms, 2),
            text=text if len(text) <= 50 else text[:50] + "...",
        )

    def track_routing(
        self,
        request_id: str,
        intent: str,
        target: str,
        confidence: float,
        fallback_used: bool = False,
    ) -> None:
        if fallback_used:
            with self._lock:
                self._aggregated.fallbacks_used += 1

        self._emit(
            logging.WARNING if fallback_used else logging.INFO,
            "routing_decision",
            request_id,
            intent=intent,
            target=target,
            confidence=round(confidence, 3),
            fallback_used=fallback_used,
        )

    def track_error(
        self,
        request_id: str,
        error: str,
        stage: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._emit(logging.ERROR, "pipeline_error", request_id, error=error, stage=stage, metadata=metadata or {})

    def track_event(self, request_id: str, event_type: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.INFO, event_type, request_id, **(data or {}))

    # -----------------------------------------------------------------------
    # READ / RESET
    # -----------------------------------------------------------------------

    def get_stats(self) -> AggregatedMetrics:
        with self._lock:
            return self._aggregated

    def get_recent_calls(self, limit: int = 10) -> List[ProviderCall]:
        """Most recent provider calls, newest first."""
        with self._lock:
            return list(self._recent)[-limit:][::-1]

    def reset(self) -> None:
        """Clear history and counters (tests call this between cases)."""
        with self._lock:
            self._recent = deque(maxlen=self._max_history)
            self._aggregated = AggregatedMetrics()


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_monitor = AIMonitor()

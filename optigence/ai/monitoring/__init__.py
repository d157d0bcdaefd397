"""
Monitoring Module - Unified logging and metrics tracking for AI operations.

Usage:
    from optigence.ai.monitoring import ai_monitor

    ai_monitor.track_response(request_id, response)
    stats = ai_monitor.get_stats()
"""

from optigence.ai.monitoring.monitor import AIMonitor, AggregatedMetrics, ai_monitor

__all__ = [
    "AIMonitor",
    "AggregatedMetrics",
    "ai_monitor",
]

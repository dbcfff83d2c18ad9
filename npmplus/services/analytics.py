"""Tool usage analytics.

Disabled unless ``NPMPLUS_ENABLE_ANALYTICS`` is set. Events are logged as
``[ANALYTICS]`` structured records and kept in memory for the summary
endpoint; client IPs are only ever stored as salted hashes.
"""

from __future__ import annotations

import hashlib
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Optional

from npmplus.constants import detect_editor_from_user_agent
from npmplus.logger import session_logger as logger

# Upper bound on retained events
MAX_EVENTS = 10000
SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class UsageEvent:
    timestamp: float
    tool: str
    success: bool
    response_time_ms: float
    editor: str
    client_hash: Optional[str] = None
    package: Optional[str] = None
    error: Optional[str] = None


class AnalyticsService:
    """Records tool calls and summarizes them over a window of days."""

    def __init__(
        self,
        enabled: bool = False,
        salt: str = "npmplus-2025",
        clock: Callable[[], float] = time.time,
        max_events: int = MAX_EVENTS,
    ):
        self._enabled = enabled
        self._salt = salt
        self._clock = clock
        self._events: Deque[UsageEvent] = deque(maxlen=max_events)

    def is_enabled(self) -> bool:
        return self._enabled

    def hash_ip(self, ip: str) -> str:
        return hashlib.sha256((ip + self._salt).encode("utf-8")).hexdigest()[:16]

    def track_tool_usage(
        self,
        tool: str,
        success: bool,
        response_time_ms: float,
        client_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        error: Optional[BaseException] = None,
        package_name: Optional[str] = None,
    ) -> None:
        if not self._enabled:
            return

        event = UsageEvent(
            timestamp=self._clock(),
            tool=tool,
            success=success,
            response_time_ms=response_time_ms,
            editor=detect_editor_from_user_agent(user_agent or ""),
            client_hash=self.hash_ip(client_ip) if client_ip else None,
            package=package_name,
            error=type(error).__name__ if error else None,
        )
        self._events.append(event)
        logger.info(
            "[ANALYTICS]",
            tool=event.tool,
            success=event.success,
            response_time_ms=round(event.response_time_ms, 2),
            editor=event.editor,
            client=event.client_hash,
            package=event.package,
            error_type=event.error,
        )

    def get_analytics_summary(self, days: int = 7) -> Dict[str, Any]:
        cutoff = self._clock() - days * SECONDS_PER_DAY
        events = [e for e in self._events if e.timestamp >= cutoff]
        total = len(events)

        summary: Dict[str, Any] = {
            "period": f"{days} days",
            "enabled": self._enabled,
            "total_calls": total,
            "avg_daily_calls": round(total / days, 2) if days else 0,
            "success_rate": 100.0,
            "avg_response_time": 0.0,
            "top_tools": {},
            "editors": {},
        }
        if not total:
            return summary

        successes = sum(1 for e in events if e.success)
        summary["success_rate"] = round(successes * 100.0 / total, 2)
        summary["avg_response_time"] = round(sum(e.response_time_ms for e in events) / total, 2)
        summary["top_tools"] = dict(Counter(e.tool for e in events).most_common(10))
        summary["editors"] = dict(Counter(e.editor for e in events))
        return summary

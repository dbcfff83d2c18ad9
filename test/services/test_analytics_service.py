"""Tests for AnalyticsService."""

from npmplus.services.analytics import AnalyticsService

DAY = 86400


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestDisabled:
    def test_tracking_is_noop(self):
        analytics = AnalyticsService(enabled=False)
        analytics.track_tool_usage("search_packages", True, 12.0, client_ip="10.0.0.1")

        summary = analytics.get_analytics_summary()
        assert summary["enabled"] is False
        assert summary["total_calls"] == 0
        assert summary["success_rate"] == 100.0


class TestHashing:
    def test_hash_is_short_and_salted(self):
        first = AnalyticsService(salt="a").hash_ip("127.0.0.1")
        second = AnalyticsService(salt="b").hash_ip("127.0.0.1")
        assert len(first) == 16
        assert first != second
        assert first == AnalyticsService(salt="a").hash_ip("127.0.0.1")


class TestSummary:
    def test_counts_and_rates(self):
        clock = FakeClock()
        analytics = AnalyticsService(enabled=True, clock=clock)
        analytics.track_tool_usage("search_packages", True, 10.0, user_agent="Cursor/0.42")
        analytics.track_tool_usage("search_packages", True, 20.0, user_agent="Claude Desktop/1.0")
        analytics.track_tool_usage("package_info", False, 30.0, error=ValueError("x"), package_name="lodash")
        analytics.track_tool_usage("search_packages", True, 40.0, user_agent="Cursor/0.42")

        summary = analytics.get_analytics_summary(days=2)

        assert summary["period"] == "2 days"
        assert summary["total_calls"] == 4
        assert summary["avg_daily_calls"] == 2.0
        assert summary["success_rate"] == 75.0
        assert summary["avg_response_time"] == 25.0
        assert summary["top_tools"] == {"search_packages": 3, "package_info": 1}
        assert summary["editors"] == {"cursor": 2, "claude": 1, "unknown": 1}

    def test_window_excludes_old_events(self):
        clock = FakeClock()
        analytics = AnalyticsService(enabled=True, clock=clock)
        analytics.track_tool_usage("old", True, 1.0)
        clock.now += 10 * DAY
        analytics.track_tool_usage("recent", True, 1.0)

        assert analytics.get_analytics_summary(days=7)["top_tools"] == {"recent": 1}
        assert analytics.get_analytics_summary(days=30)["total_calls"] == 2

    def test_event_buffer_is_bounded(self):
        analytics = AnalyticsService(enabled=True, clock=FakeClock(), max_events=3)
        for i in range(5):
            analytics.track_tool_usage(f"tool-{i}", True, 1.0)
        assert analytics.get_analytics_summary()["total_calls"] == 3

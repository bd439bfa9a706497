"""Tests for the manual frame scheduler."""

from lendergraph_cli.scheduler import ManualFrameScheduler


class TestManualFrameScheduler:
    """Tests for request/cancel/tick semantics."""

    def test_tick_runs_queued_callbacks_once(self):
        """Test each queued callback runs once per tick."""
        scheduler = ManualFrameScheduler()
        seen = []
        scheduler.request(seen.append)
        scheduler.request(seen.append)

        assert scheduler.tick(16.0) == 2
        assert seen == [16.0, 16.0]
        assert scheduler.pending == 0
        assert scheduler.tick(32.0) == 0

    def test_cancel_drops_callback(self):
        """Test cancelled callbacks never run."""
        scheduler = ManualFrameScheduler()
        seen = []
        handle = scheduler.request(seen.append)
        scheduler.cancel(handle)
        scheduler.cancel(9999)

        assert scheduler.tick(0) == 0
        assert seen == []

    def test_cancel_during_tick_skips_later_callback(self):
        """Test a callback cancelled mid-tick is skipped."""
        scheduler = ManualFrameScheduler()
        seen = []
        handles = {}

        def first(_ts):
            seen.append("first")
            scheduler.cancel(handles["second"])

        handles["first"] = scheduler.request(first)
        handles["second"] = scheduler.request(lambda _ts: seen.append("second"))

        assert scheduler.tick(0) == 1
        assert seen == ["first"]

    def test_requests_made_during_tick_wait_for_next_tick(self):
        """Test requests made inside a tick run on the next one."""
        scheduler = ManualFrameScheduler()
        seen = []

        def loop(ts):
            seen.append(ts)
            scheduler.request(loop)

        scheduler.request(loop)
        scheduler.tick(0)
        assert seen == [0]
        assert scheduler.pending == 1

        scheduler.run(3, fps=50, start_ms=100)
        assert seen == [0, 100, 120, 140]

    def test_handles_are_unique(self):
        """Test every request gets its own handle."""
        scheduler = ManualFrameScheduler()
        handles = {scheduler.request(lambda _ts: None) for _ in range(5)}
        assert len(handles) == 5

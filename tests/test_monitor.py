"""Tests for the refresh cycle"""

import pytest

from caddy_monitor.filters import FilterSpec
from caddy_monitor.monitor import (
    DEFAULT_LINES,
    MIN_FETCH,
    RefreshLoop,
    chrome_height,
)
from caddy_monitor.tail import last_lines
from caddy_monitor.tracker import GrowthTracker

from .conftest import make_line


class TestSizing:

    def test_explicit_line_count_wins(self, log_path):
        loop = RefreshLoop(str(log_path), FilterSpec(lines=25), dashboard=True, chrome=7)
        assert loop.display_count(40) == 25

    def test_one_shot_default(self, log_path):
        assert RefreshLoop(str(log_path), FilterSpec()).display_count() == DEFAULT_LINES

    def test_dashboard_fills_terminal(self, log_path):
        loop = RefreshLoop(str(log_path), FilterSpec(), dashboard=True, chrome=7)

        assert loop.display_count(40) == 33
        assert loop.display_count(3) == 1

    def test_show_all_without_count(self, log_path):
        assert RefreshLoop(str(log_path), FilterSpec(show_all=True)).display_count() == 0

    def test_fetch_leaves_headroom(self, log_path):
        loop = RefreshLoop(str(log_path), FilterSpec())

        assert loop.fetch_count(8) == 80
        assert loop.fetch_count(0) == MIN_FETCH

    def test_fetch_whole_history_for_show_all(self, log_path, append_lines):
        append_lines([make_line(ts=i) for i in range(500)])
        tracker = GrowthTracker(str(log_path))
        tracker.scan()
        loop = RefreshLoop(str(log_path), FilterSpec(show_all=True), tracker=tracker)

        assert loop.fetch_count(5) == 501

    def test_show_all_keeps_unterminated_last_line(self, log_path, append_lines):
        append_lines([make_line(ts=i) for i in range(11)])
        with log_path.open("a") as f:
            f.write(make_line(ts=11))
        loop = RefreshLoop(str(log_path), FilterSpec(show_all=True))

        frame = loop.tick()

        assert [e.timestamp for e in frame.visible] == [float(i) for i in range(12)]

    def test_chrome_height(self):
        assert chrome_height(FilterSpec()) == 8
        assert chrome_height(FilterSpec(host="x")) == 9
        assert chrome_height(FilterSpec(), status_bar=True) == 11


class TestTick:

    def test_first_tick_fetches(self, log_path, append_lines):
        append_lines([make_line(ts=i) for i in range(30)])
        loop = RefreshLoop(str(log_path), FilterSpec())

        frame = loop.tick()

        assert frame.refreshed
        assert len(frame.window.entries) == 30
        assert [e.timestamp for e in frame.visible] == list(range(20, 30))
        assert frame.cursor.lines == 30
        assert loop.offset == log_path.stat().st_size

    def test_unchanged_file_reuses_window(self, log_path, append_lines):
        append_lines([make_line(ts=i) for i in range(3)])
        loop = RefreshLoop(str(log_path), FilterSpec())
        first = loop.tick()

        second = loop.tick()

        assert not second.refreshed
        assert second.window is first.window

    def test_growth_refetches(self, log_path, append_lines):
        append_lines([make_line(ts=0)])
        loop = RefreshLoop(str(log_path), FilterSpec())
        loop.tick()

        append_lines([make_line(ts=1, status=500)])
        frame = loop.tick()

        assert frame.refreshed
        assert [e.status for e in frame.visible] == [200, 500]
        assert frame.cursor.lines == 2

    def test_resize_forces_refresh(self, log_path, append_lines):
        append_lines([make_line(ts=i) for i in range(50)])
        loop = RefreshLoop(str(log_path), FilterSpec(), dashboard=True, chrome=8)
        loop.tick((20, 80))
        assert not loop.tick((20, 80)).refreshed

        frame = loop.tick((30, 80))

        assert frame.refreshed
        assert frame.display_count == 22
        assert len(frame.visible) == 22

    def test_read_failure_keeps_previous_window(self, log_path, append_lines):
        append_lines([make_line(ts=1), make_line(ts=2)])
        calls = []

        def flaky_reader(path, n):
            calls.append(n)
            if len(calls) > 1:
                raise FileNotFoundError(path)
            return last_lines(path, n)

        loop = RefreshLoop(str(log_path), FilterSpec(), reader=flaky_reader)
        window = loop.tick().window

        append_lines([make_line(ts=3)])
        frame = loop.tick()

        assert frame.refreshed
        assert frame.window is window

    def test_forced_tick_reads_once(self, log_path, append_lines):
        append_lines([make_line(ts=i) for i in range(5)])
        calls = []

        def counting_reader(path, n):
            calls.append(n)
            return last_lines(path, n)

        loop = RefreshLoop(str(log_path), FilterSpec(), reader=counting_reader)
        loop.tick()
        assert not loop.tick().refreshed

        frame = loop.tick(force=True)

        assert frame.refreshed
        assert len(calls) == 2

    def test_end_to_end_stats(self, log_path, append_lines):
        append_lines([
            make_line(ts=0, status=200, duration=0.125, remote_ip="1.1.1.1"),
            make_line(ts=1, status=404, duration=0.25, remote_ip="2.2.2.2"),
            make_line(ts=2, status=200, duration=0.375, remote_ip="2.2.2.2"),
        ])
        loop = RefreshLoop(str(log_path), FilterSpec())

        stats = loop.tick().window.stats

        assert stats.rps == pytest.approx(1.5)
        assert round(stats.status_4xx) == 33
        assert round(stats.status_2xx) == 67
        assert stats.avg_latency_ms == 250
        assert stats.top_ip == "2.2.2.2"
        assert stats.top_ip_pct == 66

    def test_malformed_lines_do_not_break_the_window(self, log_path, append_lines):
        append_lines([make_line(ts=0), "{broken", make_line(ts=1)])
        with log_path.open("a") as f:
            f.write(make_line(ts=2)[:30])

        frame = RefreshLoop(str(log_path), FilterSpec()).tick()

        assert [e.timestamp for e in frame.visible] == [0, 1]

"""
Refresh cycle shared by the one-shot view and the dashboard
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from .filters import FilterSpec, select_entries
from .parser import LogEntry, parse_lines
from .stats import EMPTY_STATS, StatsSnapshot, compute_stats
from .tail import last_lines
from .tracker import FileCursor, GrowthTracker

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 1.0
DEFAULT_LINES = 10
FETCH_MULTIPLIER = 10
MIN_FETCH = 10

# Dashboard chrome: title bar, summary panel (4 rows + border), footer
SUMMARY_ROWS = 4
PANEL_BORDER = 2
STATUS_BAR_HEIGHT = 3


def chrome_height(filters: FilterSpec, status_bar: bool = False) -> int:
    """Rows of the dashboard not available to log entries"""
    rows = SUMMARY_ROWS + (1 if filters.has_text_filters else 0)
    height = 1 + rows + PANEL_BORDER + 1
    if status_bar:
        height += STATUS_BAR_HEIGHT
    return height


@dataclass(frozen=True)
class CachedWindow:
    """The last fetched entries (oldest first) and their statistics"""
    entries: Tuple[LogEntry, ...] = ()
    stats: StatsSnapshot = EMPTY_STATS


@dataclass(frozen=True)
class Frame:
    """Everything needed to draw one refresh"""
    window: CachedWindow
    visible: List[LogEntry]
    display_count: int
    refreshed: bool
    cursor: FileCursor


class RefreshLoop:
    """Decide when to re-read the log and what to show.

    Holds the growth tracker and the cached window for a single driver
    (the dashboard timer or the one-shot view). The window is replaced
    in one assignment and never mutated.
    """

    def __init__(
        self,
        path: str,
        filters: FilterSpec,
        dashboard: bool = False,
        tracker: Optional[GrowthTracker] = None,
        reader: Callable[[str, int], Tuple[List[str], int]] = last_lines,
        chrome: int = 0,
    ):
        self.path = path
        self.filters = filters
        self.dashboard = dashboard
        self.tracker = tracker or GrowthTracker(path)
        self.reader = reader
        self.chrome = chrome
        self.window = CachedWindow()
        self.offset = 0
        self._first = True
        self._last_size: Optional[Tuple[int, int]] = None

    def display_count(self, height: Optional[int] = None) -> int:
        lines = self.filters.lines
        if lines:
            return lines
        if self.dashboard and height is not None:
            return max(1, height - self.chrome)
        if not self.filters.show_all:
            return DEFAULT_LINES
        return 0

    def fetch_count(self, display: int) -> int:
        """Raw lines to read, leaving headroom for entries the filters drop"""
        if self.filters.show_all:
            # Newlines counted, plus an unterminated last line if there is one
            count = self.tracker.total_lines + 1
        else:
            count = display * FETCH_MULTIPLIER
        return max(count, MIN_FETCH)

    def refresh(self, display: int) -> CachedWindow:
        try:
            raw, size = self.reader(self.path, self.fetch_count(display))
        except OSError as exc:
            logger.debug("Keeping previous window, read of %s failed: %s", self.path, exc)
            return self.window

        entries = tuple(parse_lines(raw))
        self.window = CachedWindow(entries=entries, stats=compute_stats(entries))
        self.offset = size
        return self.window

    def tick(self, size: Optional[Tuple[int, int]] = None, force: bool = False) -> Frame:
        """Run one cycle. ``size`` is the terminal (height, width) when known."""
        changed = self.tracker.poll() or force
        if size is not None and size != self._last_size:
            self._last_size = size
            changed = True

        display = self.display_count(size[0] if size else None)
        refreshed = changed or self._first
        if refreshed:
            self.refresh(display)
        self._first = False

        window = self.window
        return Frame(
            window=window,
            visible=select_entries(window.entries, self.filters, display),
            display_count=display,
            refreshed=refreshed,
            cursor=replace(self.tracker.cursor),
        )

"""
Full-screen dashboard refreshed once per second
"""

import asyncio
import logging
import signal
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static
from rich.console import Group
from rich.panel import Panel
from rich.text import Text
from rich import box

from .filters import FilterSpec
from .monitor import REFRESH_INTERVAL, Frame, RefreshLoop, chrome_height
from .render import format_entry, status_line, summary_lines
from .system import ResourceSampler

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# TUI Widgets
# ═══════════════════════════════════════════════════════════════════════════════

class SummaryPanel(Static):
    """Watched file, active flags, log and file statistics"""

    def __init__(self, path: str, filters: FilterSpec, **kwargs):
        super().__init__(**kwargs)
        self.path = path
        self.filters = filters
        self.frame: Optional[Frame] = None

    def update_frame(self, frame: Frame):
        self.frame = frame
        self.refresh()

    def render(self) -> Panel:
        if not self.frame:
            return Panel("Loading...", title="📊 Overview", border_style="blue")

        return Panel(
            Group(*summary_lines(self.path, self.filters, self.frame, dashboard=True)),
            title="📊 Overview",
            border_style="blue",
            box=box.ROUNDED,
        )


class EntriesPanel(Static):
    """Most recent entries that pass the filters, newest at the bottom"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.frame: Optional[Frame] = None

    def update_frame(self, frame: Frame):
        self.frame = frame
        self.refresh()

    def render(self) -> Text:
        if not self.frame:
            return Text("Loading...", style="dim")
        if not self.frame.visible:
            return Text("No matching requests", style="dim")

        width = self.size.width or None
        return Text("\n").join(format_entry(entry, width) for entry in self.frame.visible)


class SystemPanel(Static):
    """Uptime, memory and CPU of this process"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.sampler = ResourceSampler()
        self.sample = self.sampler.sample()

    def update_sample(self):
        self.sample = self.sampler.sample()
        self.refresh()

    def render(self) -> Panel:
        return Panel(
            status_line(self.sample, dashboard=True),
            border_style="cyan",
            box=box.ROUNDED,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Main Application
# ═══════════════════════════════════════════════════════════════════════════════

class DashboardApp(App):
    """Main TUI Application"""

    CSS = """
    #summary-panel {
        height: auto;
    }

    #entries-panel {
        height: 1fr;
    }

    #system-panel {
        height: 3;
    }

    Header {
        dock: top;
        height: 1;
    }

    Footer {
        dock: bottom;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("r", "refresh", "Refresh"),
    ]

    TITLE = "Caddy Log Monitor"
    SUB_TITLE = "Real-time Dashboard"

    def __init__(self, path: str, filters: FilterSpec, status_bar: bool = False,
                 monitor: Optional[RefreshLoop] = None, **kwargs):
        super().__init__(**kwargs)
        self.path = path
        self.filters = filters
        self.status_bar = status_bar
        self.monitor = monitor or RefreshLoop(
            path, filters, dashboard=True, chrome=chrome_height(filters, status_bar)
        )
        self.frame: Optional[Frame] = None
        self._trapped_signals = []

    def compose(self) -> ComposeResult:
        yield Header()
        yield SummaryPanel(self.path, self.filters, id="summary-panel")
        yield EntriesPanel(id="entries-panel")
        if self.status_bar:
            yield SystemPanel(id="system-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Start the refresh timer and route termination signals to exit"""
        event_loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                event_loop.add_signal_handler(sig, self.exit)
            except NotImplementedError:
                logger.debug("Signal handlers unavailable on this platform")
                break
            self._trapped_signals.append(sig)

        self.refresh_data()
        self.set_interval(REFRESH_INTERVAL, self.refresh_data)

    def on_unmount(self) -> None:
        event_loop = asyncio.get_running_loop()
        for sig in self._trapped_signals:
            event_loop.remove_signal_handler(sig)
        self._trapped_signals.clear()

    def on_resize(self) -> None:
        # The first refresh happens on mount
        if self.frame is not None:
            self.refresh_data()

    def refresh_data(self, force: bool = False) -> None:
        """Run one refresh cycle and redraw every panel"""
        self.frame = self.monitor.tick((self.size.height, self.size.width), force=force)

        self.query_one("#summary-panel", SummaryPanel).update_frame(self.frame)
        self.query_one("#entries-panel", EntriesPanel).update_frame(self.frame)
        if self.status_bar:
            self.query_one("#system-panel", SystemPanel).update_sample()

    def action_refresh(self) -> None:
        """Manual refresh action"""
        self.refresh_data(force=True)
        self.notify("Data refreshed!")

"""
Rich text formatting for entries, summary and status lines
"""

from datetime import datetime, timedelta
from typing import List, Optional

from rich.text import Text

from .filters import FilterSpec
from .monitor import Frame
from .parser import LogEntry
from .system import ResourceSample

ACTIVE_STYLE = "green"
INACTIVE_STYLE = "red"
HEADING_STYLE = "bold white"


def format_bytes(b: int) -> str:
    """Format bytes to human readable"""
    if b < 1024:
        return f"{b} B"
    size = float(b)
    for unit in ["KB", "MB", "GB", "TB", "PB"]:
        size /= 1024
        if size < 1024:
            break
    return f"{size:.1f} {unit}"


def format_uptime(seconds: float) -> str:
    return str(timedelta(seconds=int(seconds)))


def format_entry(entry: LogEntry, width: Optional[int] = None) -> Text:
    """One display line; cut to ``width`` with an ellipsis when given"""
    stamp = datetime.fromtimestamp(int(entry.timestamp)).strftime("%Y-%m-%d | %H:%M:%S")
    status_style = INACTIVE_STYLE if entry.is_error else ACTIVE_STYLE

    line = Text(f"{stamp} | {entry.remote_ip:<15} | ")
    line.append(str(entry.status), style=status_style)
    line.append(f" | {entry.method:<6} | {entry.latency_ms:4d}ms | {entry.host}{entry.uri}")

    if width is not None and len(line) > width:
        line.truncate(max(width - 3, 0))
        line.append("...")
    return line


def label(text: str, active: bool) -> Text:
    return Text(text, style=ACTIVE_STYLE if active else INACTIVE_STYLE)


def heading(title: str) -> Text:
    return Text(f"{title}: ", style=HEADING_STYLE)


def flags_line(filters: FilterSpec, display_count: int, dashboard: bool) -> Text:
    if filters.show_all:
        lines_label = label("All History", True)
    else:
        lines_label = label(f"Lines {display_count}", display_count > 0)

    labels = [
        lines_label,
        label("Host", bool(filters.host)),
        label("Find", bool(filters.find)),
        label("Errors", filters.errors_only),
        label("Hide Assets", filters.hide_assets),
        label("Dashboard", dashboard),
    ]
    return heading("Active Flags") + Text(" | ").join(labels)


def stats_line(frame: Frame) -> Text:
    s = frame.window.stats
    return heading("Log Stats") + Text(
        f"RPS: {s.rps:.1f} | 1xx: {s.status_1xx:.0f}% | 2xx: {s.status_2xx:.0f}% | "
        f"3xx: {s.status_3xx:.0f}% | 4xx: {s.status_4xx:.0f}% | 5xx: {s.status_5xx:.0f}% | "
        f"Latency: {s.avg_latency_ms}ms | Top IP: {s.top_ip} ({s.top_ip_pct}%)"
    )


def summary_lines(path: str, filters: FilterSpec, frame: Frame, dashboard: bool) -> List[Text]:
    """Header block shown above the entries"""
    lines = [
        heading("Watching") + Text(path),
        flags_line(filters, frame.display_count, dashboard),
        stats_line(frame),
        heading("File Stats") + Text(
            f"{frame.cursor.lines:,} lines | {format_bytes(frame.cursor.size)}"
        ),
    ]
    if filters.has_text_filters:
        lines.append(heading("Filters") + Text(filters.describe()))
    return lines


def status_line(sample: ResourceSample, dashboard: bool) -> Text:
    return heading("System Stats") + Text.assemble(
        f"Uptime: {format_uptime(sample.uptime):<8} | ",
        f"Mem: {format_bytes(sample.memory):<9} | ",
        f"CPU: {sample.cpu_percent:<4.1f}% | Dashboard: ",
        label("Active", dashboard),
    )

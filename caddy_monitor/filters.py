"""
Display filters for access log entries
"""

from dataclasses import dataclass
from typing import List, Sequence

from .parser import LogEntry

ASSET_EXTENSIONS = frozenset({
    ".js", ".css", ".map", ".scss",
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif", ".svg", ".ico", ".cur",
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    ".mp4", ".webm", ".mov", ".ogv",
    ".mp3", ".wav", ".m4a", ".ogg", ".flac", ".aac",
    ".zip", ".gz", ".tar", ".pdf",
    ".webmanifest", ".xml", ".php",
})


@dataclass(frozen=True)
class FilterSpec:
    """User supplied filters, fixed for the lifetime of the process"""
    host: str = ""
    find: str = ""
    errors_only: bool = False
    hide_assets: bool = False
    show_all: bool = False
    lines: int = 0

    @property
    def has_text_filters(self) -> bool:
        return bool(self.host or self.find)

    def describe(self) -> str:
        details = []
        if self.host:
            details.append(f"Host: {self.host}")
        if self.find:
            details.append(f"Find: {self.find}")
        return " | ".join(details)


def is_asset(uri: str) -> bool:
    """True when the URI path ends in a static asset extension"""
    path = uri.split("?", 1)[0]
    dot = path.rfind(".")
    return dot != -1 and path[dot:].lower() in ASSET_EXTENSIONS


def _host_matches(entry: LogEntry, needle: str) -> bool:
    return needle in entry.remote_ip.lower() or needle in entry.host.lower()


def _text_matches(entry: LogEntry, needle: str) -> bool:
    return (
        needle in entry.uri.lower()
        or needle in entry.host.lower()
        or needle in entry.remote_ip.lower()
    )


def matches(entry: LogEntry, filters: FilterSpec) -> bool:
    """Predicate applied to each line delivered by live follow"""
    if filters.host and not _host_matches(entry, filters.host.lower()):
        return False
    if filters.hide_assets and is_asset(entry.uri):
        return False
    if filters.errors_only and entry.status < 400:
        return False
    if filters.find and not _text_matches(entry, filters.find.lower()):
        return False
    return True


def select_entries(entries: Sequence[LogEntry], filters: FilterSpec, count: int) -> List[LogEntry]:
    """Pick the entries to display from a window, oldest first.

    The window is walked from the newest entry backwards. Unless the whole
    history was requested, the walk stops once ``count`` entries have been
    accepted.
    """
    host = filters.host.lower()
    find = filters.find.lower()
    selected = []

    for entry in reversed(entries):
        if host and not _host_matches(entry, host):
            continue
        if not filters.show_all:
            if filters.hide_assets and is_asset(entry.uri):
                continue
            if len(selected) >= count:
                break
        if filters.errors_only and entry.status < 400:
            continue
        if find and not _text_matches(entry, find):
            continue
        selected.append(entry)

    selected.reverse()
    return selected

"""
Caddy JSON access log parsing
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

REQUEST_FIELDS = ("remote_ip", "method", "host", "uri")

# Range that datetime can render on every platform, with a day of slack for
# the local UTC offset
MAX_TIMESTAMP = datetime(9999, 12, 30, tzinfo=timezone.utc).timestamp()
MAX_DURATION = timedelta.max.total_seconds()


@dataclass(frozen=True)
class LogEntry:
    """A single request from the access log"""
    timestamp: float
    status: int
    duration: float
    remote_ip: str
    method: str
    host: str
    uri: str

    @property
    def latency_ms(self) -> int:
        return int(self.duration * 1000)

    @property
    def is_error(self) -> bool:
        return self.status >= 400


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _in_range(value, low: float, high: float) -> bool:
    # NaN fails both comparisons; overflowed literals arrive as inf
    return low <= value <= high


def parse_line(raw: Union[str, bytes]) -> Optional[LogEntry]:
    """Parse one access log line, returning None for anything malformed.

    The file is read while Caddy may still be writing to it, so a torn
    last line is expected and must never be fatal.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    raw = raw.strip()
    if not raw:
        return None

    try:
        obj = json.loads(raw)
    except ValueError:
        logger.debug("Skipping non-JSON line: %.80s", raw)
        return None

    if not isinstance(obj, dict):
        return None
    request = obj.get("request")
    if not isinstance(request, dict):
        return None

    ts, status, duration = obj.get("ts"), obj.get("status"), obj.get("duration")
    if not (_is_number(ts) and _is_number(duration)):
        return None
    if not (_in_range(ts, 0, MAX_TIMESTAMP) and _in_range(duration, -MAX_DURATION, MAX_DURATION)):
        logger.debug("Skipping line with out of range ts/duration: %.80s", raw)
        return None
    if not isinstance(status, int) or isinstance(status, bool):
        return None
    if not all(isinstance(request.get(name), str) for name in REQUEST_FIELDS):
        return None

    return LogEntry(
        timestamp=float(ts),
        status=status,
        duration=float(duration),
        remote_ip=request["remote_ip"],
        method=request["method"],
        host=request["host"],
        uri=request["uri"],
    )


def parse_lines(lines: Iterable[Union[str, bytes]]) -> List[LogEntry]:
    """Parse lines in order, dropping the ones that do not parse"""
    entries = []
    for line in lines:
        entry = parse_line(line)
        if entry:
            entries.append(entry)
    return entries

"""
Traffic statistics over the current window of entries
"""

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from .parser import LogEntry


@dataclass(frozen=True)
class StatsSnapshot:
    """Aggregates computed from one window of entries"""
    rps: float = 0.0
    status_1xx: float = 0.0
    status_2xx: float = 0.0
    status_3xx: float = 0.0
    status_4xx: float = 0.0
    status_5xx: float = 0.0
    avg_latency_ms: int = 0
    top_ip: str = ""
    top_ip_pct: int = 0
    requests: int = 0


EMPTY_STATS = StatsSnapshot()


def status_class(status: int) -> int:
    """Bucket a status code into 1..5; 0 for codes below 100"""
    if status >= 500:
        return 5
    if status < 100:
        return 0
    return status // 100


def compute_stats(entries: Sequence[LogEntry]) -> StatsSnapshot:
    """Compute a fresh snapshot from the full window.

    When several addresses share the top count, the one seen first in the
    window wins (``Counter.most_common`` keeps insertion order for ties).
    """
    if not entries:
        return EMPTY_STATS

    classes = Counter()
    ips = Counter()
    total_duration = 0.0
    min_ts = max_ts = entries[0].timestamp

    for entry in entries:
        min_ts = min(min_ts, entry.timestamp)
        max_ts = max(max_ts, entry.timestamp)
        total_duration += entry.duration
        ips[entry.remote_ip] += 1
        classes[status_class(entry.status)] += 1

    total = len(entries)
    span = max_ts - min_ts
    top_ip, top_count = ips.most_common(1)[0]

    def pct(bucket: int) -> float:
        return classes[bucket] / total * 100

    return StatsSnapshot(
        rps=total / span if span > 0 else 0.0,
        status_1xx=pct(1),
        status_2xx=pct(2),
        status_3xx=pct(3),
        status_4xx=pct(4),
        status_5xx=pct(5),
        avg_latency_ms=int(total_duration / total * 1000),
        top_ip=top_ip,
        top_ip_pct=int(top_count / total * 100),
        requests=total,
    )

"""
Shared fixtures: JSON-lines access logs written into tmp_path
"""

import json

import pytest

from caddy_monitor.parser import LogEntry


def make_line(ts=0.0, status=200, duration=0.01, remote_ip="10.0.0.1",
              method="GET", host="example.com", uri="/"):
    """One Caddy access log line (no trailing newline)"""
    return json.dumps({
        "level": "info",
        "ts": ts,
        "logger": "http.log.access",
        "msg": "handled request",
        "request": {
            "remote_ip": remote_ip,
            "method": method,
            "host": host,
            "uri": uri,
        },
        "status": status,
        "duration": duration,
    })


def make_entry(ts=0.0, status=200, duration=0.01, remote_ip="10.0.0.1",
               method="GET", host="example.com", uri="/"):
    return LogEntry(
        timestamp=ts, status=status, duration=duration, remote_ip=remote_ip,
        method=method, host=host, uri=uri,
    )


@pytest.fixture
def log_path(tmp_path):
    path = tmp_path / "access.log"
    path.write_text("")
    return path


@pytest.fixture
def append_lines(log_path):
    """Append raw lines (newline terminated) to the log"""
    def _append(lines):
        with log_path.open("a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
    return _append

"""
Process resource sampling for the dashboard status bar
"""

import time
from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class ResourceSample:
    """Point-in-time process metrics from psutil"""
    uptime: float
    memory: int
    cpu_percent: float


class ResourceSampler:
    """Sample this process; CPU usage is measured since the previous sample"""

    def __init__(self):
        self.started = time.monotonic()
        self.process = psutil.Process()
        # Prime the CPU counter so the first sample has a baseline
        self.process.cpu_percent(interval=None)

    def sample(self) -> ResourceSample:
        with self.process.oneshot():
            memory = self.process.memory_info().rss
            cpu = self.process.cpu_percent(interval=None)
        return ResourceSample(
            uptime=time.monotonic() - self.started,
            memory=memory,
            cpu_percent=cpu,
        )

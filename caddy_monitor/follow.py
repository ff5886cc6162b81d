"""
Live follow of lines appended to the log
"""

import logging
import os
import queue
from pathlib import Path
from typing import Iterator, List

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.5


class _ChangeHandler(FileSystemEventHandler):
    """Forward filesystem events that touch the followed file"""

    def __init__(self, path: Path, changes: queue.Queue):
        self.path = path
        self.changes = changes

    def on_any_event(self, event):
        paths = {event.src_path, getattr(event, "dest_path", "")}
        if any(p and Path(os.fsdecode(p)).resolve() == self.path for p in paths):
            self.changes.put_nowait(event.event_type)


class FileFollower:
    """Yield lines appended to a file after ``offset``, in file order.

    A watchdog observer wakes the reader when the file changes. Waits on
    the change queue are bounded by ``poll_interval`` so the consumer
    stays responsive to interrupts and still catches up if an event is
    missed.
    """

    def __init__(self, path: str, offset: int = 0, poll_interval: float = POLL_INTERVAL):
        self.path = Path(path).resolve()
        self.offset = offset
        self.poll_interval = poll_interval
        # Bytes of a line whose newline has not been written yet
        self.partial = b""
        self.changes: queue.Queue = queue.Queue()
        self.observer = Observer()
        self.observer.schedule(
            _ChangeHandler(self.path, self.changes), str(self.path.parent), recursive=False
        )

    def __enter__(self):
        self.observer.start()
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join()

    def read_new_lines(self) -> List[str]:
        """Read complete lines written since the last call"""
        try:
            size = self.path.stat().st_size
        except OSError:
            return []

        if size < self.offset:
            logger.debug("%s was truncated, following from the start", self.path)
            self.offset = 0
            self.partial = b""
        if size == self.offset:
            return []

        with self.path.open("rb") as f:
            f.seek(self.offset)
            data = f.read(size - self.offset)
        self.offset += len(data)

        chunks = (self.partial + data).split(b"\n")
        self.partial = chunks.pop()
        return [chunk.decode("utf-8", errors="replace") for chunk in chunks]

    def lines(self) -> Iterator[str]:
        """Infinite iterator over appended lines"""
        while True:
            yield from self.read_new_lines()
            try:
                self.changes.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            # Collapse a burst of events into one read
            while not self.changes.empty():
                self.changes.get_nowait()

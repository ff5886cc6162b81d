"""
Incremental line counting for a growing log file
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

CHUNK_SIZE = 32 * 1024


@dataclass
class FileCursor:
    """Last observed size, line count and inode of the watched file"""
    size: int = 0
    lines: int = 0
    inode: int = 0


class GrowthTracker:
    """Track the total line count of an append-only file without rescanning it.

    Appends are counted by reading only the new byte range. A file that
    shrank or was replaced by a different inode is recounted from zero.
    """

    def __init__(self, path: str, chunk_size: int = CHUNK_SIZE):
        self.path = path
        self.chunk_size = chunk_size
        self.cursor = FileCursor()
        # Read cost, observable by callers
        self.bytes_read = 0
        self.rescans = 0

    @property
    def total_lines(self) -> int:
        return self.cursor.lines

    @property
    def size(self) -> int:
        return self.cursor.size

    def _count_newlines(self, f, remaining: int) -> int:
        count = 0
        while remaining > 0:
            data = f.read(min(self.chunk_size, remaining))
            if not data:
                break
            count += data.count(b"\n")
            remaining -= len(data)
            self.bytes_read += len(data)
        return count

    def scan(self) -> Optional[FileCursor]:
        """Count every line from offset zero and reset the cursor.

        Returns None and keeps the previous cursor when the file cannot be read.
        """
        try:
            with open(self.path, "rb") as f:
                st = os.fstat(f.fileno())
                lines = self._count_newlines(f, st.st_size)
        except OSError as exc:
            logger.debug("Full scan of %s failed: %s", self.path, exc)
            return None

        self.rescans += 1
        self.cursor = FileCursor(size=st.st_size, lines=lines, inode=st.st_ino)
        return self.cursor

    def poll(self) -> bool:
        """Update the cursor; return True when the file changed since the last poll"""
        try:
            st = os.stat(self.path)
        except OSError:
            return False

        if not self.cursor.inode:
            # Never scanned, or the file was missing until now
            return self.scan() is not None

        replaced = st.st_ino != self.cursor.inode
        if st.st_size == self.cursor.size and not replaced:
            return False

        if st.st_size < self.cursor.size or replaced:
            logger.debug("%s was truncated or rotated, rescanning", self.path)
            return self.scan() is not None

        try:
            with open(self.path, "rb") as f:
                f.seek(self.cursor.size)
                added = self._count_newlines(f, st.st_size - self.cursor.size)
        except OSError as exc:
            logger.debug("Reading appended bytes of %s failed: %s", self.path, exc)
            return False

        self.cursor.lines += added
        self.cursor.size = st.st_size
        self.cursor.inode = st.st_ino
        return True

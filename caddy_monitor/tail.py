"""
Bounded reads of the last lines of a file
"""

import os
from typing import List, Tuple

CHUNK_SIZE = 4096


def last_lines(path: str, n: int, chunk_size: int = CHUNK_SIZE) -> Tuple[List[str], int]:
    """Return the last ``n`` lines of ``path`` (oldest first) and the file size.

    The file is read backwards from the end in windows that double on
    every pass, so the cost follows ``n`` rather than the file size. A
    line that straddles two windows is carried over and joined with the
    earlier bytes before being split.
    """
    with open(path, "rb") as f:
        size = os.fstat(f.fileno()).st_size
        if n <= 0 or size == 0:
            return [], size

        buf = b""
        pos = size
        window = chunk_size
        while pos > 0:
            step = min(window, pos)
            pos -= step
            f.seek(pos)
            buf = f.read(step) + buf

            # Every newline except a final trailing one starts a complete line
            end = len(buf) - 1 if buf.endswith(b"\n") else len(buf)
            if buf.count(b"\n", 0, end) >= n:
                break
            window *= 2

    lines = buf.split(b"\n")
    if buf.endswith(b"\n"):
        lines.pop()
    if pos > 0:
        # Leading fragment is the tail end of an unread line
        lines = lines[1:]

    return [line.decode("utf-8", errors="replace") for line in lines[-n:]], size

"""Console progress bar."""

from __future__ import annotations

import struct
import sys
from typing import TextIO


def _f32(x: float) -> float:
    return struct.unpack("f", struct.pack("f", x))[0]


def format_progress(current: int, total: int, bar_width: int = 40) -> str:
    """Render a carriage-return-prefixed progress bar line."""
    if total == 0:
        return "\r[error: total=0]"

    progress = _f32(_f32(float(current)) / _f32(float(total)))
    if progress > 1.0:
        progress = 1.0

    pos = int(_f32(_f32(float(bar_width)) * progress))
    bar = "".join("=" if i < pos else ">" if i == pos else " " for i in range(bar_width))
    percent = int(_f32(progress * _f32(100.0)))
    return f"\r[{bar}] {percent}% ({current}/{total})"


def print_progress(
    current: int, total: int, bar_width: int = 40, stream: TextIO | None = None
) -> None:
    """Write the progress bar to stream (standard output by default) and flush."""
    out = sys.stdout if stream is None else stream
    out.write(format_progress(current, total, bar_width))
    out.flush()
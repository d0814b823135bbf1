"""Dump of encoded bitstreams for offline inspection."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

import numpy as np

logger = logging.getLogger(__name__)

BITS_PER_LINE = 64
DEFAULT_DEBUG_DIRECTORY = "debug"


def write_bits_to_debug_file(
    bits: Iterable[int] | np.ndarray,
    directory: Path | str = DEFAULT_DEBUG_DIRECTORY,
    *,
    now: datetime | None = None,
) -> Path:
    """Write ``bits`` as text, 64 per line, prefixed with the bit offset.

    Returns the path of the created file. The directory is created if needed.
    """

    array = np.asarray(bits if isinstance(bits, np.ndarray) else list(bits), dtype=np.uint8)
    timestamp = now or datetime.now()
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"bits_{timestamp.strftime('%Y%m%d_%H%M%S_%f')}.txt"

    digits = "".join("1" if bit else "0" for bit in array.tolist())
    lines = [
        "# Bit Stream Debug Output",
        f"# Total bits: {array.size}",
        f"# Timestamp: {timestamp.isoformat()}",
        "#",
    ]
    for offset in range(0, len(digits), BITS_PER_LINE):
        lines.append(f"{offset:08d}: {digits[offset:offset + BITS_PER_LINE]}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info("Wrote %d bits to debug file %s", array.size, path)
    return path


__all__ = ["BITS_PER_LINE", "DEFAULT_DEBUG_DIRECTORY", "write_bits_to_debug_file"]

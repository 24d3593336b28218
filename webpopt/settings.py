from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


# "directory" prints one summary per directory (totals are not rolled up).
# "tree" rolls every directory into its parent and prints one summary at the root.
SummaryMode = Literal["directory", "tree"]

# What to do when <stem>.webp already exists next to the source.
CollisionPolicy = Literal["overwrite", "rename", "fail"]

DEFAULT_QUALITY = 80


@dataclass(frozen=True)
class ConvertSettings:
    """
    Every knob of a conversion run, in one place.

    Built once at the entry point and passed down unchanged. Components that
    need a variation (the walker turns off compare_size) derive a copy with
    dataclasses.replace instead of mutating it.
    """

    # ----- WebP encoding -----
    quality: int = DEFAULT_QUALITY  # 1-100, passed to Pillow as-is
    effort: int = 6  # Pillow "method" (0-6), higher = smaller but slower
    lossless: bool = False
    auto_orient: bool = True

    # ----- Keep / discard -----
    # Single-file mode only: drop the .webp if it came out bigger than the source.
    compare_size: bool = True

    # ----- Traversal -----
    recursive: bool = True
    summary_mode: SummaryMode = "directory"

    # ----- Output handling -----
    on_collision: CollisionPolicy = "overwrite"

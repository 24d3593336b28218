from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


def reduction_percent(original_bytes: int, new_bytes: int) -> float:
    """Percent of the original size that was saved (negative if output grew)."""
    if original_bytes <= 0:
        return 0.0
    return ((original_bytes - new_bytes) / original_bytes) * 100.0


@dataclass(frozen=True)
class ConversionResult:
    """
    Output of converting a single image.

    kept=False means the WebP candidate was bigger than the source and was
    thrown away; output_path then points back at the source.
    """
    source_path: Path
    output_path: Path
    original_bytes: int
    new_bytes: int
    kept: bool

    @property
    def saved_bytes(self) -> int:
        return self.original_bytes - self.new_bytes

    @property
    def reduction_percent(self) -> float:
        return reduction_percent(self.original_bytes, self.new_bytes)


@dataclass
class DirectoryTotals:
    directory: Path
    files_converted: int = 0
    total_original_bytes: int = 0
    total_new_bytes: int = 0

    def add(self, result: ConversionResult) -> None:
        self.files_converted += 1
        self.total_original_bytes += result.original_bytes
        self.total_new_bytes += result.new_bytes

    def merge(self, other: "DirectoryTotals") -> None:
        self.files_converted += other.files_converted
        self.total_original_bytes += other.total_original_bytes
        self.total_new_bytes += other.total_new_bytes

    @property
    def reduction_percent(self) -> float:
        return reduction_percent(self.total_original_bytes, self.total_new_bytes)

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Sequence

from .results import ConversionResult, DirectoryTotals
from .settings import ConvertSettings


KB = 1024
MB = 1024 * 1024


# ---------------- Console output ----------------

def format_file_result(result: ConversionResult, target_path: Path, detailed: bool = True) -> List[str]:
    """
    Lines printed after one conversion.

    target_path is where the WebP was (or would have been) written; for a
    discarded candidate result.output_path already points back at the source.
    """
    lines = [f"Successful conversion: {result.source_path} → {target_path}"]
    if not detailed:
        return lines

    lines.append(f"  Original size: {result.original_bytes / KB:.2f} KB")
    lines.append(f"  New size: {result.new_bytes / KB:.2f} KB")
    lines.append(f"  Size reduction: {result.reduction_percent:.2f}%")

    if not result.kept:
        lines.append("  WebP file is larger than the original, conversion canceled.")
    return lines


def format_directory_summary(totals: DirectoryTotals, tree: bool = False) -> List[str]:
    scope = "directory tree" if tree else "directory"
    return [
        "",
        f"Conversion results in {scope} {totals.directory}:",
        f"  Number of converted files: {totals.files_converted}",
        f"  Total original size: {totals.total_original_bytes / MB:.2f} MB",
        f"  Total new size: {totals.total_new_bytes / MB:.2f} MB",
        f"  Total size reduction: {totals.reduction_percent:.2f}%",
    ]


def print_file_result(result: ConversionResult, target_path: Path, detailed: bool = True) -> None:
    for line in format_file_result(result, target_path, detailed):
        print(line)


def print_directory_summary(totals: DirectoryTotals, tree: bool = False) -> None:
    for line in format_directory_summary(totals, tree):
        print(line)


# ---------------- JSON report ----------------

@dataclass(frozen=True)
class FileReport:
    source_path: str
    output_path: str
    original_bytes: int
    new_bytes: int
    saved_bytes: int
    reduction_percent: float
    kept: bool


@dataclass(frozen=True)
class DirectoryReport:
    directory: str
    files_converted: int
    total_original_bytes: int
    total_new_bytes: int
    reduction_percent: float


@dataclass(frozen=True)
class RunReport:
    created_utc: str
    settings: dict
    directories: List[DirectoryReport]
    files: List[FileReport]


def build_report(
    results: Sequence[ConversionResult],
    totals: Sequence[DirectoryTotals],
    settings: ConvertSettings,
) -> RunReport:
    created_utc = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

    files: List[FileReport] = []
    for r in results:
        files.append(
            FileReport(
                source_path=str(r.source_path),
                output_path=str(r.output_path),
                original_bytes=r.original_bytes,
                new_bytes=r.new_bytes,
                saved_bytes=r.saved_bytes,
                reduction_percent=round(r.reduction_percent, 2),
                kept=r.kept,
            )
        )

    directories = [
        DirectoryReport(
            directory=str(t.directory),
            files_converted=t.files_converted,
            total_original_bytes=t.total_original_bytes,
            total_new_bytes=t.total_new_bytes,
            reduction_percent=round(t.reduction_percent, 2),
        )
        for t in totals
    ]

    return RunReport(
        created_utc=created_utc,
        settings=asdict(settings),
        directories=directories,
        files=files,
    )


def save_report_json(report: RunReport, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(report), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

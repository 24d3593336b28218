from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterator, List

from .engine import convert_image, is_supported
from .errors import ConversionError
from .report import print_directory_summary
from .results import ConversionResult, DirectoryTotals
from .settings import DEFAULT_QUALITY, ConvertSettings


logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """A directory that has been opened but not fully processed yet."""
    totals: DirectoryTotals
    entries: Iterator[os.DirEntry]


def _open_frame(directory: Path) -> _Frame:
    try:
        # Snapshot the listing: we write .webp files into this directory
        # while walking it.
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        logger.error("Error processing directory %s: %s", directory, e)
        raise
    return _Frame(totals=DirectoryTotals(directory=directory), entries=iter(entries))


def walk_directory(
    root: Path,
    settings: ConvertSettings,
) -> tuple[List[ConversionResult], List[DirectoryTotals]]:
    """
    Convert every eligible image under root, depth-first.

    Entries are visited in listing order. A subdirectory is finished
    completely before its parent moves on to the next entry. Pending
    directories live on an explicit stack, so tree depth is not bounded
    by the interpreter's recursion limit.

    Returns the per-file results and the totals of each finished directory,
    children before parents. In "tree" summary mode only the root's totals
    are returned, with every subdirectory merged into them.
    """
    root = Path(root)

    # Directory runs always keep the WebP output.
    file_settings = replace(settings, compare_size=False)
    tree = settings.summary_mode == "tree"

    results: List[ConversionResult] = []
    finished: List[DirectoryTotals] = []
    stack: List[_Frame] = []

    try:
        stack.append(_open_frame(root))

        while stack:
            frame = stack[-1]
            entry = next(frame.entries, None)

            if entry is None:
                stack.pop()
                if tree and stack:
                    stack[-1].totals.merge(frame.totals)
                    continue

                finished.append(frame.totals)
                if frame.totals.files_converted > 0:
                    print_directory_summary(frame.totals, tree=tree)
                continue

            entry_path = Path(entry.path)

            if entry.is_dir(follow_symlinks=False):
                if settings.recursive:
                    stack.append(_open_frame(entry_path))
                continue

            if entry.is_file(follow_symlinks=False) and is_supported(entry_path):
                r = convert_image(entry_path, file_settings)
                results.append(r)
                frame.totals.add(r)

    except (OSError, ConversionError) as e:
        for frame in reversed(stack):
            logger.error("Error processing directory %s: %s", frame.totals.directory, e)
        raise

    return results, finished


def walk(directory: Path, quality: int = DEFAULT_QUALITY, recursive: bool = True) -> None:
    """Convert every eligible image under directory and print the summaries."""
    walk_directory(directory, ConvertSettings(quality=quality, recursive=recursive))


def process_path(
    path: Path,
    settings: ConvertSettings,
) -> tuple[List[ConversionResult], List[DirectoryTotals]]:
    """Entry point for one command-line path: a directory or a single image."""
    path = Path(path)

    # Raises FileNotFoundError for a missing path.
    path.stat()

    if path.is_dir():
        return walk_directory(path, settings)

    if not is_supported(path):
        print("Selected file is not a JPG or PNG image.")
        return [], []

    return [convert_image(path, settings)], []

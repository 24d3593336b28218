from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base class for errors raised while converting an image."""


class CodecError(ConversionError):
    """Pillow could not decode the source or encode the WebP output."""

    def __init__(self, source_path: Path, message: str) -> None:
        super().__init__(f"{source_path}: {message}")
        self.source_path = source_path

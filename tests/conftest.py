from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from webpopt import engine


def make_photo(path: Path, size: tuple[int, int] = (96, 64), mode: str = "RGB") -> Path:
    """Write a noisy gradient image, which compresses like a photo."""
    noise = Image.effect_noise(size, 40).convert("RGB")
    gradient = Image.linear_gradient("L").resize(size).convert("RGB")
    im = Image.blend(noise, gradient, 0.5)
    if mode != "RGB":
        im = im.convert(mode)

    path.parent.mkdir(parents=True, exist_ok=True)
    fmt = "JPEG" if path.suffix.lower() in (".jpg", ".jpeg") else "PNG"
    im.save(path, format=fmt)
    return path


def write_bytes(path: Path, n: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * n)
    return path


class FakeEncoder:
    """
    Stands in for the Pillow encoder and writes a fixed number of bytes.

    sizes maps a source file name to the output size; unknown names get
    half their source size.
    """

    def __init__(self) -> None:
        self.sizes: dict[str, int] = {}
        self.calls: list[Path] = []

    def __call__(self, src_path, dest_path, s) -> None:
        src_path = Path(src_path)
        self.calls.append(src_path)
        n = self.sizes.get(src_path.name, src_path.stat().st_size // 2)
        Path(dest_path).write_bytes(b"w" * n)


@pytest.fixture
def fake_encoder(monkeypatch) -> FakeEncoder:
    enc = FakeEncoder()
    monkeypatch.setattr(engine, "encode_webp", enc)
    return enc

from __future__ import annotations

import errno
import itertools
import logging
import os
import tempfile
from pathlib import Path

from PIL import Image, ImageOps

from .errors import CodecError, ConversionError
from .report import print_file_result
from .results import ConversionResult
from .settings import DEFAULT_QUALITY, ConvertSettings


logger = logging.getLogger(__name__)

SUPPORTED_EXTS = {".jpg", ".jpeg", ".png"}

WEBP_EXT = ".webp"

# Modes Pillow's WebP encoder takes without conversion.
WEBP_MODES = ("RGB", "RGBA")


def is_supported(path: Path) -> bool:
    return Path(path).suffix.lower() in SUPPORTED_EXTS


def output_path_for(src_path: Path) -> Path:
    # photo.JPG -> photo.webp, next to the source
    src_path = Path(src_path)
    return src_path.with_name(src_path.stem + WEBP_EXT)


def convert(source_path: Path, quality: int = DEFAULT_QUALITY, compare_size: bool = True) -> Path:
    """Convert one image and return the path the caller should use afterwards."""
    s = ConvertSettings(quality=quality, compare_size=compare_size)
    return convert_image(source_path, s).output_path


def convert_image(src_path: Path, s: ConvertSettings) -> ConversionResult:
    src_path = Path(src_path)
    try:
        return _convert(src_path, s)
    except (OSError, ConversionError) as e:
        logger.error("Error converting %s: %s", src_path, e)
        raise


def _convert(src_path: Path, s: ConvertSettings) -> ConversionResult:
    original_bytes = src_path.stat().st_size

    out_path = _resolve_output_path(output_path_for(src_path), s)

    # Encode next to the destination first so a failed or rejected
    # encode never leaves a half-written <stem>.webp behind.
    tmp_path = _encode_to_temp(src_path, out_path.parent, s)

    try:
        new_bytes = tmp_path.stat().st_size

        if s.compare_size and new_bytes > original_bytes:
            tmp_path.unlink()
            result = ConversionResult(
                source_path=src_path,
                output_path=src_path,
                original_bytes=original_bytes,
                new_bytes=new_bytes,
                kept=False,
            )
        else:
            _finalize_output(tmp_path, out_path)
            result = ConversionResult(
                source_path=src_path,
                output_path=out_path,
                original_bytes=original_bytes,
                new_bytes=new_bytes,
                kept=True,
            )
    finally:
        tmp_path.unlink(missing_ok=True)

    print_file_result(result, out_path, detailed=s.compare_size)
    return result


def _resolve_output_path(out_path: Path, s: ConvertSettings) -> Path:
    if not out_path.exists():
        return out_path

    if s.on_collision == "rename":
        return _next_available_name(out_path)

    if s.on_collision == "fail":
        raise FileExistsError(errno.EEXIST, "Output file already exists", str(out_path))

    return out_path


def _next_available_name(path: Path) -> Path:
    # photo.webp -> photo (1).webp, photo (2).webp, ...
    candidates = (path.with_name(f"{path.stem} ({i}){WEBP_EXT}") for i in itertools.count(1))
    return next(c for c in candidates if not c.exists())


def _encode_to_temp(src_path: Path, out_dir: Path, s: ConvertSettings) -> Path:
    fd, tmp_name = tempfile.mkstemp(prefix=".webpopt_", suffix=WEBP_EXT, dir=str(out_dir))
    os.close(fd)
    tmp_path = Path(tmp_name)

    try:
        encode_webp(src_path, tmp_path, s)
        # mkstemp creates 0600 files; match what open() would give under the umask.
        os.chmod(tmp_path, 0o666 & ~_current_umask())
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    return tmp_path


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def encode_webp(src_path: Path, dest_path: Path, s: ConvertSettings) -> None:
    """
    Decode src_path with Pillow and write it to dest_path as WebP.

    Anything Pillow raises on the way (unknown format, truncated data,
    a full disk while saving) is reported as a CodecError.
    """
    try:
        with Image.open(src_path) as im:
            im.load()

            if s.auto_orient:
                im = ImageOps.exif_transpose(im)

            im = _to_webp_mode(im)

            # Important: Pillow chooses encoder by format=... not extension alone
            im.save(dest_path, format="WEBP", **_build_save_kwargs(s))
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise CodecError(src_path, str(e) or e.__class__.__name__) from e


def _build_save_kwargs(s: ConvertSettings) -> dict:
    # Quality is handed over untouched; range checks belong to the encoder.
    return {
        "quality": int(s.quality),
        "method": int(s.effort),
        "lossless": bool(s.lossless),
    }


def _to_webp_mode(im: Image.Image) -> Image.Image:
    if im.mode in WEBP_MODES:
        return im
    return im.convert("RGBA" if _has_alpha(im) else "RGB")


def _has_alpha(im: Image.Image) -> bool:
    # RGBA, LA, PA carry an alpha band; P and L can mark a transparent colour.
    return "A" in im.getbands() or "transparency" in im.info


def _finalize_output(tmp_path: Path, out_path: Path) -> None:
    if out_path.exists():
        logger.warning("Overwriting existing file %s", out_path)
    tmp_path.replace(out_path)

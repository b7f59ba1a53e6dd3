# sprite_table/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image, ImageCms, ImageOps, UnidentifiedImageError

from .constants import ALPHA_THRESHOLD
from .core_types import ImageLoadError, OutputWriteError, U8Image, U8Mask

"""
Image source: decode any Pillow-readable file into sRGB + binary alpha, and
re-save a decoded grid for plain format conversion.
"""


def binarise_alpha(alpha: np.ndarray, threshold: int = ALPHA_THRESHOLD) -> U8Mask:
    """Alpha above threshold becomes 255, everything else 0."""
    a = np.asarray(alpha, dtype=np.uint8)
    return np.where(a > np.uint8(threshold), 255, 0).astype(np.uint8)


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")
    if not icc_bytes:
        return im.convert("RGBA")
    try:
        src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
        dst_prof = ImageCms.createProfile("sRGB")
        converted = ImageCms.profileToProfile(
            im.convert("RGBA"),
            src_prof,
            dst_prof,
            renderingIntent=ImageCms.Intent.PERCEPTUAL,
            outputMode="RGBA",
        )
    except (ImageCms.PyCMSError, OSError):
        return im.convert("RGBA")
    return converted if converted is not None else im.convert("RGBA")


def load_image_rgba(path: Path) -> Tuple[U8Image, U8Mask]:
    """Load an image with Pillow and return (rgb uint8 [H,W,3], alpha uint8 [H,W])."""
    if not path.is_file():
        raise ImageLoadError(f"input file not found: {path}")
    try:
        with Image.open(path) as im0:
            im = _convert_to_srgb_rgba(im0)
            arr = np.array(im, dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageLoadError(f"failed to load {path}: {exc}") from exc
    return np.ascontiguousarray(arr[..., :3]), binarise_alpha(arr[..., 3])


def save_image(path: Path, rgb: U8Image, alpha: U8Mask) -> Path:
    """
    Save an RGB + alpha grid; Pillow picks the container from the extension.
    Formats without alpha support receive the RGB channels only.
    """
    height, width, _ = rgb.shape
    out = np.zeros((height, width, 4), dtype=np.uint8)
    out[..., :3] = rgb
    out[..., 3] = alpha
    im = Image.fromarray(out)
    try:
        try:
            im.save(path)
        except OSError:
            # e.g. JPEG / BMP writers reject RGBA
            im.convert("RGB").save(path)
    except (KeyError, ValueError, OSError) as exc:
        raise OutputWriteError(f"failed to write {path}: {exc}") from exc
    return path


__all__ = ["binarise_alpha", "load_image_rgba", "save_image"]

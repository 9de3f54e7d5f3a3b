"""
Image color sampling.

Turns an uploaded image into ranked colors: decode, downscale, drop
transparent pixels, quantize to a small palette and rank the palette
entries by pixel count with the same routine used for CSS extraction.
"""

import io
from typing import List, Optional

import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from prizm.config import config

from .extraction import DEFAULT_LIMIT, USAGE_IMAGE, ExtractedColorEntry, rank_counted
from .model import Color


def decode_image(data: bytes) -> Image.Image:
    """
    Decode image bytes into an RGBA Pillow image.

    Raises:
        ValueError: If the bytes are not a decodable image
    """
    if not data:
        raise ValueError("Empty image payload")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError(f"Unable to decode image: {exc}") from exc
    return image.convert("RGBA")


def opaque_pixels(image: Image.Image, alpha_threshold: int = 128) -> np.ndarray:
    """Return (N, 3) uint8 RGB pixels whose alpha is at least ``alpha_threshold``."""
    rgba = np.asarray(image, dtype=np.uint8).reshape(-1, 4)
    keep = rgba[:, 3] >= alpha_threshold
    return rgba[keep, :3]


def quantize_pixels(pixels: np.ndarray, palette_size: int) -> List[tuple]:
    """
    Reduce pixels to at most ``palette_size`` representative colors.

    Returns:
        List of ((r, g, b), pixel_count) in order of first appearance
    """
    strip = Image.fromarray(np.ascontiguousarray(pixels.reshape(1, -1, 3)))
    quantized = strip.quantize(colors=palette_size, method=Image.Quantize.MEDIANCUT)
    palette = np.array(quantized.getpalette(), dtype=np.int32).reshape(-1, 3)
    indices = np.asarray(quantized).reshape(-1)

    counts = np.bincount(indices, minlength=len(palette))
    unique, first_seen = np.unique(indices, return_index=True)
    ordered = unique[np.argsort(first_seen, kind="stable")]
    return [(tuple(int(c) for c in palette[i]), int(counts[i])) for i in ordered]


def sample_image_colors(
    data: bytes,
    max_edge: Optional[int] = None,
    palette_size: Optional[int] = None,
    alpha_threshold: int = 128,
    limit: Optional[int] = DEFAULT_LIMIT,
) -> List[ExtractedColorEntry]:
    """
    Extract ranked colors from an image.

    Args:
        data: Encoded image bytes (PNG, JPEG, WebP, GIF, ...)
        max_edge: Longest edge after downscaling, defaults to config
        palette_size: Quantization palette size, defaults to config
        alpha_threshold: Pixels below this alpha are ignored
        limit: Maximum entries to return

    Returns:
        Color entries with usage "image", most frequent first; empty for a
        fully transparent image

    Raises:
        ValueError: If the image cannot be decoded
    """
    max_edge = max_edge or config.IMAGE_MAX_EDGE
    palette_size = palette_size or config.IMAGE_PALETTE_SIZE
    if not config.validate_palette_size(palette_size):
        raise ValueError(f"palette_size must be between 2 and 256, got {palette_size}")

    image = decode_image(data)
    original_size = image.size
    image.thumbnail((max_edge, max_edge))

    pixels = opaque_pixels(image, alpha_threshold)
    if pixels.size == 0:
        logger.info("No opaque pixels to sample")
        return []

    quantized = quantize_pixels(pixels, palette_size)
    logger.bind(size=original_size, sampled=len(pixels)).info(
        f"Quantized image to {len(quantized)} colors"
    )
    return rank_counted(
        ((Color.from_rgb255(*rgb), USAGE_IMAGE, count) for rgb, count in quantized),
        limit,
    )

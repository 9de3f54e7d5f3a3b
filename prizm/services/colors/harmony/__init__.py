"""
Prizm Color Harmony Engine

Hue and lightness primitives shared by palette, scheme and swatch
generation. Hue arithmetic is circular over [0, 360); lightness arithmetic
is clamped to [0, 1]. Both can run in HSL or OKLCH space.
"""

from enum import Enum
from typing import Tuple

from ..model import Color
from ..spaces import clamp01, normalize_hue


class HarmonySpace(str, Enum):
    """Color space used for hue rotation and lightness stepping."""
    HSL = "hsl"
    OKLCH = "oklch"


def rotate_hue(h: float, degrees: float) -> float:
    """
    Rotate hue by specified degrees.

    Args:
        h: Original hue in degrees
        degrees: Rotation in degrees (can be negative)

    Returns:
        Rotated hue in [0, 360) with proper wraparound
    """
    return normalize_hue(h + degrees)


def get_hue_separation(h1: float, h2: float) -> float:
    """
    Calculate the minimum angular separation between two hues.

    Returns:
        Minimum separation in degrees [0, 180]
    """
    diff = abs(normalize_hue(h1) - normalize_hue(h2))
    return min(diff, 360.0 - diff)


def decompose(color: Color, space: HarmonySpace) -> Tuple[float, float, float]:
    """
    Split a color into (hue, chroma-like, lightness) for ``space``.

    HSL yields (H, S, L); OKLCH yields (H, C, L).
    """
    if space is HarmonySpace.OKLCH:
        l, c, h = color.to_oklch()
        return h, c, l
    h, s, l = color.to_hsl()
    return h, s, l


def compose(space: HarmonySpace, hue: float, chroma: float, lightness: float,
            alpha: float = 1.0) -> Color:
    """Inverse of ``decompose``; OKLCH results are clipped to sRGB."""
    lightness = clamp01(lightness)
    if space is HarmonySpace.OKLCH:
        return Color.from_oklch(lightness, chroma, hue, alpha)
    return Color.from_hsl(hue, chroma, lightness, alpha)


def rotate(color: Color, degrees: float, space: HarmonySpace = HarmonySpace.HSL) -> Color:
    """Return ``color`` with its hue rotated, keeping chroma and lightness."""
    h, c, l = decompose(color, space)
    return compose(space, rotate_hue(h, degrees), c, l, color.alpha)


def with_lightness(color: Color, lightness: float,
                   space: HarmonySpace = HarmonySpace.HSL) -> Color:
    """Return ``color`` at an absolute lightness, clamped to [0, 1]."""
    h, c, _ = decompose(color, space)
    return compose(space, h, c, lightness, color.alpha)


def shift_lightness(color: Color, delta: float,
                    space: HarmonySpace = HarmonySpace.HSL) -> Color:
    """Return ``color`` lightened (positive delta) or darkened (negative)."""
    h, c, l = decompose(color, space)
    return compose(space, h, c, l + delta, color.alpha)


def lightness_of(color: Color, space: HarmonySpace = HarmonySpace.HSL) -> float:
    return decompose(color, space)[2]

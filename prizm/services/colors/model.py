"""
Canonical color model.

Every notation the service understands is parsed into a single immutable
``Color``: gamma-encoded sRGB channels plus alpha, all floats in [0, 1].
Channels are never quantized on the way in, so HEX/RGB/HSL strings convert
back to exactly the same string they came from. Colors built from OKLCH keep
their OKLCH coordinates alongside the clipped channels so an out-of-gamut
OKLCH string also renders back unchanged.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from . import spaces


class ColorFormat(str, Enum):
    """Output notations supported by the format converter."""
    HEX = "hex"
    RGB = "rgb"
    RGBA = "rgba"
    HSL = "hsl"
    HSLA = "hsla"
    OKLCH = "oklch"


class ParseError(ValueError):
    """Raised when a color string cannot be turned into a ``Color``."""

    UNRECOGNIZED = "unrecognized-syntax"
    OUT_OF_RANGE = "out-of-range"

    def __init__(self, reason: str, value: str, detail: Optional[str] = None):
        self.reason = reason
        self.value = value
        self.detail = detail
        message = f"{reason}: {value!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, like CSS serializers."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Color:
    """
    Immutable color value.

    Attributes:
        red: sRGB red channel [0, 1]
        green: sRGB green channel [0, 1]
        blue: sRGB blue channel [0, 1]
        alpha: Opacity [0, 1], 1.0 when the source notation has none
        source_oklch: (L, C, H) the color was built from, if any; not part
            of equality
    """
    red: float
    green: float
    blue: float
    alpha: float = 1.0
    source_oklch: Optional[Tuple[float, float, float]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_rgb255(cls, r: float, g: float, b: float, alpha: float = 1.0) -> "Color":
        return cls(r / 255.0, g / 255.0, b / 255.0, alpha)

    @classmethod
    def from_hsl(cls, h: float, s: float, l: float, alpha: float = 1.0) -> "Color":
        """Build from HSL with H in degrees and S/L in [0, 1]."""
        return cls(*spaces.hsl_to_rgb(h, s, l), alpha)

    @classmethod
    def from_hwb(cls, h: float, w: float, b: float, alpha: float = 1.0) -> "Color":
        return cls(*spaces.hwb_to_rgb(h, w, b), alpha)

    @classmethod
    def from_oklch(cls, l: float, c: float, h: float, alpha: float = 1.0) -> "Color":
        """Build from OKLCH, clipping out-of-gamut results to the sRGB cube."""
        r, g, b = (spaces.clamp01(v) for v in spaces.oklch_to_rgb(l, c, h))
        return cls(r, g, b, alpha, source_oklch=(l, c, spaces.normalize_hue(h)))

    @classmethod
    def from_unclipped(cls, rgb: Tuple[float, float, float], alpha: float = 1.0) -> "Color":
        """Build from sRGB channels that may lie outside the gamut."""
        r, g, b = (spaces.clamp01(c) for c in rgb)
        return cls(r, g, b, alpha)

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return self.red, self.green, self.blue

    @property
    def is_opaque(self) -> bool:
        return self.alpha >= 1.0

    def with_alpha(self, alpha: float) -> "Color":
        return replace(self, alpha=alpha)

    def to_rgb255(self) -> Tuple[int, int, int]:
        """Return 8-bit channel integers."""
        return tuple(max(0, min(255, round_half_up(c * 255))) for c in self.rgb)

    def to_hsl(self) -> Tuple[float, float, float]:
        """Return (H, S, L) with H in [0, 360) and S/L in [0, 1]."""
        return spaces.rgb_to_hsl(*self.rgb)

    def to_hwb(self) -> Tuple[float, float, float]:
        return spaces.rgb_to_hwb(*self.rgb)

    def to_oklch(self) -> Tuple[float, float, float]:
        """Return (L, C, H) with H in [0, 360)."""
        if self.source_oklch is not None:
            return self.source_oklch
        return spaces.rgb_to_oklch(*self.rgb)

    def hex_key(self) -> str:
        """
        Lowercase hex used as the grouping key for deduplication.

        Opaque colors give ``#rrggbb``; translucent ones ``#rrggbbaa``.
        """
        r, g, b = self.to_rgb255()
        key = f"#{r:02x}{g:02x}{b:02x}"
        if not self.is_opaque:
            key += f"{round_half_up(self.alpha * 255):02x}"
        return key

    def approx_equal(self, other: "Color", tolerance: float = 1 / 255) -> bool:
        """Compare channel-wise within ``tolerance``."""
        return all(
            abs(a - b) <= tolerance
            for a, b in zip(
                (self.red, self.green, self.blue, self.alpha),
                (other.red, other.green, other.blue, other.alpha),
            )
        )

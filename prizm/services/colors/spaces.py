"""
Color space conversion math.

Plain-float conversions between gamma-encoded sRGB and the spaces the
parser and harmony engine work in: HSL, HWB, OKLab/OKLCH, CIE Lab/LCH (D50)
and CIE XYZ. Every function takes and returns channel tuples; sRGB channels
are floats in [0, 1] and hues are degrees.
"""

import colorsys
import math
from typing import Sequence, Tuple

Triple = Tuple[float, float, float]

# CIE XYZ (D65) -> linear sRGB
XYZ_D65_TO_LINEAR_SRGB = (
    (3.2409699419045226, -1.537383177570094, -0.4986107602930034),
    (-0.9692436362808796, 1.8759675015077202, 0.04155505740717559),
    (0.05563007969699366, -0.20397695888897652, 1.0569715142428786),
)

# Bradford chromatic adaptation D50 -> D65
D50_TO_D65 = (
    (0.9554734527042182, -0.023098536874261423, 0.0632593086610217),
    (-0.028369706963208136, 1.0099954580058226, 0.021041398966943008),
    (0.012314001688319899, -0.020507696433477912, 1.3303659366080753),
)

D50_WHITE = (0.3457 / 0.3585, 1.0, (1.0 - 0.3457 - 0.3585) / 0.3585)

LAB_KAPPA = 24389 / 27
LAB_EPSILON = 216 / 24389


def clamp01(value: float) -> float:
    """Clamp a value into [0, 1]."""
    return max(0.0, min(1.0, value))


def normalize_hue(degrees: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    hue = math.fmod(degrees, 360.0)
    if hue < 0:
        hue += 360.0
    # fmod of a tiny negative number can land exactly on 360.0
    if hue >= 360.0:
        hue = 0.0
    return hue


def _mat_vec(matrix: Sequence[Sequence[float]], vector: Triple) -> Triple:
    x, y, z = vector
    return (
        matrix[0][0] * x + matrix[0][1] * y + matrix[0][2] * z,
        matrix[1][0] * x + matrix[1][1] * y + matrix[1][2] * z,
        matrix[2][0] * x + matrix[2][1] * y + matrix[2][2] * z,
    )


def srgb_to_linear(channel: float) -> float:
    """Remove the sRGB transfer curve from a single channel."""
    sign = -1.0 if channel < 0 else 1.0
    c = abs(channel)
    if c <= 0.04045:
        return channel / 12.92
    return sign * ((c + 0.055) / 1.055) ** 2.4


def linear_to_srgb(channel: float) -> float:
    """Apply the sRGB transfer curve to a single linear channel."""
    sign = -1.0 if channel < 0 else 1.0
    c = abs(channel)
    if c <= 0.0031308:
        return channel * 12.92
    return sign * (1.055 * c ** (1 / 2.4) - 0.055)


def rgb_to_hsl(r: float, g: float, b: float) -> Triple:
    """
    Convert sRGB to HSL.

    Returns:
        Tuple of (H, S, L) where H ∈ [0,360), S ∈ [0,1], L ∈ [0,1]
    """
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return normalize_hue(h * 360.0), s, l


def hsl_to_rgb(h: float, s: float, l: float) -> Triple:
    """Convert HSL (H in degrees, S/L in [0,1]) to sRGB."""
    return colorsys.hls_to_rgb(normalize_hue(h) / 360.0, l, s)


def rgb_to_hwb(r: float, g: float, b: float) -> Triple:
    """Convert sRGB to HWB (H in degrees, whiteness/blackness in [0,1])."""
    h, s, v = colorsys.rgb_to_hsv(r, g, b)
    return normalize_hue(h * 360.0), (1.0 - s) * v, 1.0 - v


def hwb_to_rgb(h: float, w: float, b: float) -> Triple:
    """
    Convert HWB to sRGB.

    Whiteness and blackness summing past 1 are scaled down proportionally,
    which yields the matching shade of grey.
    """
    total = w + b
    if total >= 1.0:
        grey = w / total if total > 0 else 0.0
        return grey, grey, grey
    v = 1.0 - b
    s = 1.0 - (w / v) if v > 0 else 0.0
    return colorsys.hsv_to_rgb(normalize_hue(h) / 360.0, s, v)


def rgb_to_oklab(r: float, g: float, b: float) -> Triple:
    """Convert sRGB to OKLab."""
    r_lin, g_lin, b_lin = srgb_to_linear(r), srgb_to_linear(g), srgb_to_linear(b)

    l = 0.4122214708 * r_lin + 0.5363325363 * g_lin + 0.0514459929 * b_lin
    m = 0.2119034982 * r_lin + 0.6806995451 * g_lin + 0.1073969566 * b_lin
    s = 0.0883024619 * r_lin + 0.2817188376 * g_lin + 0.6299787005 * b_lin

    l_, m_, s_ = (math.copysign(abs(v) ** (1 / 3), v) for v in (l, m, s))

    return (
        0.2104542553 * l_ + 0.7936177850 * m_ - 0.0040720468 * s_,
        1.9779984951 * l_ - 2.4285922050 * m_ + 0.4505937099 * s_,
        0.0259040371 * l_ + 0.7827717662 * m_ - 0.8086757660 * s_,
    )


def oklab_to_rgb(l: float, a: float, b: float) -> Triple:
    """Convert OKLab to (unclipped) sRGB."""
    l_ = l + 0.3963377774 * a + 0.2158037573 * b
    m_ = l - 0.1055613458 * a - 0.0638541728 * b
    s_ = l - 0.0894841775 * a - 1.2914855480 * b

    l3, m3, s3 = l_ ** 3, m_ ** 3, s_ ** 3

    r_lin = 4.0767416621 * l3 - 3.3077115913 * m3 + 0.2309699292 * s3
    g_lin = -1.2684380046 * l3 + 2.6097574011 * m3 - 0.3413193965 * s3
    b_lin = -0.0041960863 * l3 - 0.7034186147 * m3 + 1.7076147010 * s3

    return linear_to_srgb(r_lin), linear_to_srgb(g_lin), linear_to_srgb(b_lin)


def oklab_to_oklch(l: float, a: float, b: float) -> Triple:
    c = math.hypot(a, b)
    h = normalize_hue(math.degrees(math.atan2(b, a)))
    return l, c, h


def oklch_to_oklab(l: float, c: float, h: float) -> Triple:
    rad = math.radians(h)
    return l, c * math.cos(rad), c * math.sin(rad)


def rgb_to_oklch(r: float, g: float, b: float) -> Triple:
    """Convert sRGB to OKLCH (L ∈ [0,1], C ≥ 0, H ∈ [0,360))."""
    l, c, h = oklab_to_oklch(*rgb_to_oklab(r, g, b))
    # Achromatic colors have no meaningful hue
    if c < 1e-7:
        return l, 0.0, 0.0
    return l, c, h


def oklch_to_rgb(l: float, c: float, h: float) -> Triple:
    """Convert OKLCH to (unclipped) sRGB."""
    return oklab_to_rgb(*oklch_to_oklab(l, c, h))


def lch_to_lab(l: float, c: float, h: float) -> Triple:
    rad = math.radians(h)
    return l, c * math.cos(rad), c * math.sin(rad)


def lab_to_xyz_d50(l: float, a: float, b: float) -> Triple:
    """Convert CIE Lab (D50 white) to CIE XYZ (D50)."""
    f1 = (l + 16) / 116
    f0 = a / 500 + f1
    f2 = f1 - b / 200

    x = f0 ** 3 if f0 ** 3 > LAB_EPSILON else (116 * f0 - 16) / LAB_KAPPA
    y = f1 ** 3 if l > LAB_KAPPA * LAB_EPSILON else l / LAB_KAPPA
    z = f2 ** 3 if f2 ** 3 > LAB_EPSILON else (116 * f2 - 16) / LAB_KAPPA

    return x * D50_WHITE[0], y * D50_WHITE[1], z * D50_WHITE[2]


def xyz_d65_to_rgb(x: float, y: float, z: float) -> Triple:
    """Convert CIE XYZ (D65) to (unclipped) sRGB."""
    r_lin, g_lin, b_lin = _mat_vec(XYZ_D65_TO_LINEAR_SRGB, (x, y, z))
    return linear_to_srgb(r_lin), linear_to_srgb(g_lin), linear_to_srgb(b_lin)


def xyz_d50_to_rgb(x: float, y: float, z: float) -> Triple:
    """Convert CIE XYZ (D50) to (unclipped) sRGB via Bradford adaptation."""
    return xyz_d65_to_rgb(*_mat_vec(D50_TO_D65, (x, y, z)))


def lab_to_rgb(l: float, a: float, b: float) -> Triple:
    """Convert CIE Lab (D50) to (unclipped) sRGB."""
    return xyz_d50_to_rgb(*lab_to_xyz_d50(l, a, b))


def lch_to_rgb(l: float, c: float, h: float) -> Triple:
    """Convert CIE LCH (D50) to (unclipped) sRGB."""
    return lab_to_rgb(*lch_to_lab(l, c, h))

"""
Prizm Color Harmony Orchestrator

Derives palettes, schemes and swatches from a single base color. Every
variant has a fixed output length and a deterministic order so results can
be displayed and compared reproducibly.
"""

from enum import Enum
from typing import Callable, Dict, List, Sequence, Union

from loguru import logger

from . import (
    HarmonySpace, rotate, shift_lightness, with_lightness, lightness_of,
)
from ..model import Color
from ..parser import parse


class GenerationMode(str, Enum):
    PALETTE = "palette"
    SCHEME = "scheme"
    SWATCH = "swatch"


class PaletteType(str, Enum):
    ANALOGOUS = "analogous"
    MONOCHROMATIC = "monochromatic"
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"


class SchemeType(str, Enum):
    ANALOGOUS = "analogous"
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"


# Hue offsets applied after the base color, in output order
SCHEME_OFFSETS: Dict[SchemeType, Sequence[float]] = {
    SchemeType.COMPLEMENTARY: (180.0,),
    SchemeType.TRIADIC: (120.0, 240.0),
    SchemeType.ANALOGOUS: (-30.0, 30.0),
}

ANALOGOUS_PALETTE_OFFSETS = (-30.0, -15.0, 15.0, 30.0)

# Lightness step used for tints/shades in complementary and triadic palettes
PALETTE_LIGHTNESS_STEP = 0.15

MONOCHROMATIC_LEVELS = (0.80, 0.65, 0.50, 0.35, 0.20)

SWATCH_LEVELS = (0.90, 0.80, 0.70, 0.60, 0.50, 0.40, 0.30, 0.20, 0.10)


def generate_scheme(base: Color, scheme_type: SchemeType,
                    space: HarmonySpace = HarmonySpace.HSL) -> List[Color]:
    """
    Generate a minimal color scheme: the base plus its hue partners.

    Returns:
        complementary -> 2 colors, triadic -> 3, analogous -> 3
    """
    offsets = SCHEME_OFFSETS[SchemeType(scheme_type)]
    return [base] + [rotate(base, degrees, space) for degrees in offsets]


def _analogous_palette(base: Color, space: HarmonySpace) -> List[Color]:
    return [base] + [rotate(base, d, space) for d in ANALOGOUS_PALETTE_OFFSETS]


def _complementary_palette(base: Color, space: HarmonySpace) -> List[Color]:
    complement = rotate(base, 180.0, space)
    colors = []
    for anchor in (base, complement):
        colors.extend([
            anchor,
            shift_lightness(anchor, PALETTE_LIGHTNESS_STEP, space),
            shift_lightness(anchor, -PALETTE_LIGHTNESS_STEP, space),
        ])
    return colors


def _triadic_palette(base: Color, space: HarmonySpace) -> List[Color]:
    hues = generate_scheme(base, SchemeType.TRIADIC, space)
    tints = [shift_lightness(color, PALETTE_LIGHTNESS_STEP, space) for color in hues]
    return hues + tints


def _ramp_with_base(base: Color, levels: Sequence[float],
                    space: HarmonySpace) -> List[Color]:
    """
    Build a lightness ramp at the base hue/chroma.

    The level closest to the base's own lightness is replaced by the base
    itself, so the ramp always contains the original color and stays
    monotonic.
    """
    base_lightness = lightness_of(base, space)
    nearest = min(range(len(levels)), key=lambda i: abs(levels[i] - base_lightness))
    return [
        base if index == nearest else with_lightness(base, level, space)
        for index, level in enumerate(levels)
    ]


def _monochromatic_palette(base: Color, space: HarmonySpace) -> List[Color]:
    return _ramp_with_base(base, MONOCHROMATIC_LEVELS, space)


PALETTE_BUILDERS: Dict[PaletteType, Callable[[Color, HarmonySpace], List[Color]]] = {
    PaletteType.ANALOGOUS: _analogous_palette,
    PaletteType.MONOCHROMATIC: _monochromatic_palette,
    PaletteType.COMPLEMENTARY: _complementary_palette,
    PaletteType.TRIADIC: _triadic_palette,
}


def generate_palette(base: Color, palette_type: PaletteType,
                     space: HarmonySpace = HarmonySpace.HSL) -> List[Color]:
    """
    Generate a denser palette around the base color.

    Returns:
        analogous -> 5 colors, monochromatic -> 5, complementary -> 6,
        triadic -> 6
    """
    return PALETTE_BUILDERS[PaletteType(palette_type)](base, space)


def generate_swatch(base: Color, space: HarmonySpace = HarmonySpace.HSL) -> List[Color]:
    """Generate a 9-step light-to-dark ramp containing the base color."""
    return _ramp_with_base(base, SWATCH_LEVELS, space)


def generate_colors(
    base: Union[Color, str],
    mode: Union[GenerationMode, str],
    palette_type: Union[PaletteType, str] = PaletteType.ANALOGOUS,
    scheme_type: Union[SchemeType, str] = SchemeType.COMPLEMENTARY,
    space: Union[HarmonySpace, str] = HarmonySpace.HSL,
) -> List[Color]:
    """
    Generate related colors from one base color.

    Args:
        base: Base Color or any parseable color string
        mode: palette, scheme or swatch
        palette_type: Variant used when mode is palette
        scheme_type: Variant used when mode is scheme
        space: hsl or oklch hue/lightness arithmetic

    Returns:
        Ordered list of colors; length is fixed per mode and variant

    Raises:
        ParseError: If ``base`` is a string that does not parse
    """
    if isinstance(base, str):
        base = parse(base)
    mode = GenerationMode(mode)
    space = HarmonySpace(space)

    if mode is GenerationMode.PALETTE:
        colors = generate_palette(base, PaletteType(palette_type), space)
    elif mode is GenerationMode.SCHEME:
        colors = generate_scheme(base, SchemeType(scheme_type), space)
    else:
        colors = generate_swatch(base, space)

    logger.bind(base=base.hex_key(), space=space.value).debug(
        f"Generated {len(colors)} colors for {mode.value}"
    )
    return colors

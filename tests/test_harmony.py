"""
Unit tests for the color harmony engine.

Tests hue rotation, lightness ramps and the fixed output shape of every
palette, scheme and swatch variant.
"""

import pytest

from prizm.services.colors.harmony import (
    HarmonySpace, get_hue_separation, lightness_of, rotate, rotate_hue, shift_lightness,
)
from prizm.services.colors.harmony.orchestrator import (
    MONOCHROMATIC_LEVELS, SWATCH_LEVELS, GenerationMode, PaletteType, SchemeType,
    generate_colors, generate_palette, generate_scheme, generate_swatch,
)
from prizm.services.colors.model import ParseError
from prizm.services.colors.parser import parse


class TestHueRotation:
    """Test hue rotation mathematics."""

    def test_complementary_rotation(self):
        assert rotate_hue(0.0, 180) == 180.0
        assert rotate_hue(240.0, 180) == 60.0

    def test_wraparound(self):
        assert rotate_hue(350.0, 180) == 170.0
        assert rotate_hue(10.0, -30) == 340.0
        assert rotate_hue(0.0, 360) == 0.0

    def test_hue_separation(self):
        assert get_hue_separation(10, 350) == 20
        assert get_hue_separation(0, 180) == 180
        assert get_hue_separation(90, 90) == 0

    def test_rotate_color_preserves_saturation_and_lightness(self):
        base = parse("hsl(350, 60%, 40%)")
        rotated = rotate(base, 180)
        h, s, l = rotated.to_hsl()
        assert abs(h - 170.0) < 1e-6
        assert abs(s - 0.6) < 1e-6
        assert abs(l - 0.4) < 1e-6

    def test_rotate_in_oklch_keeps_lightness(self):
        base = parse("#3498db")
        rotated = rotate(base, 30, HarmonySpace.OKLCH)
        assert abs(lightness_of(rotated, HarmonySpace.OKLCH)
                   - lightness_of(base, HarmonySpace.OKLCH)) < 0.02

    def test_shift_lightness_clamps(self):
        white = parse("#ffffff")
        assert shift_lightness(white, 0.2).hex_key() == "#ffffff"
        black = parse("#000000")
        assert shift_lightness(black, -0.2).hex_key() == "#000000"


class TestSchemes:
    """Test base-first schemes of fixed length."""

    @pytest.mark.parametrize("scheme_type,length", [
        (SchemeType.COMPLEMENTARY, 2),
        (SchemeType.TRIADIC, 3),
        (SchemeType.ANALOGOUS, 3),
    ])
    def test_scheme_lengths(self, scheme_type, length):
        colors = generate_scheme(parse("#3498db"), scheme_type)
        assert len(colors) == length

    def test_triadic_hues(self):
        base = parse("#3498db")
        colors = generate_scheme(base, SchemeType.TRIADIC)
        assert colors[0] == base
        base_hue = base.to_hsl()[0]
        assert get_hue_separation(colors[1].to_hsl()[0], base_hue + 120) < 1e-6
        assert get_hue_separation(colors[2].to_hsl()[0], base_hue + 240) < 1e-6

    def test_complementary_wraps_hue(self):
        colors = generate_scheme(parse("hsl(350, 80%, 50%)"), SchemeType.COMPLEMENTARY)
        assert abs(colors[1].to_hsl()[0] - 170.0) < 1e-6

    def test_analogous_order(self):
        colors = generate_scheme(parse("hsl(100, 80%, 50%)"), SchemeType.ANALOGOUS)
        hues = [c.to_hsl()[0] for c in colors]
        assert abs(hues[1] - 70.0) < 1e-6
        assert abs(hues[2] - 130.0) < 1e-6


class TestPalettes:
    """Test palette variants."""

    @pytest.mark.parametrize("palette_type,length", [
        (PaletteType.ANALOGOUS, 5),
        (PaletteType.MONOCHROMATIC, 5),
        (PaletteType.COMPLEMENTARY, 6),
        (PaletteType.TRIADIC, 6),
    ])
    @pytest.mark.parametrize("space", [HarmonySpace.HSL, HarmonySpace.OKLCH])
    def test_palette_lengths_and_base_first(self, palette_type, length, space):
        base = parse("#3498db")
        colors = generate_palette(base, palette_type, space)
        assert len(colors) == length
        assert base in colors
        if palette_type is not PaletteType.MONOCHROMATIC:
            assert colors[0] == base

    def test_monochromatic_contains_base_and_is_monotonic(self):
        base = parse("hsl(204, 70%, 53%)")
        colors = generate_palette(base, PaletteType.MONOCHROMATIC)
        lightness = [c.to_hsl()[2] for c in colors]
        assert base in colors
        assert lightness == sorted(lightness, reverse=True)
        assert len(lightness) == len(MONOCHROMATIC_LEVELS)

    def test_complementary_palette_structure(self):
        base = parse("hsl(30, 60%, 50%)")
        colors = generate_palette(base, PaletteType.COMPLEMENTARY)
        hues = [round(c.to_hsl()[0]) for c in colors]
        assert hues == [30, 30, 30, 210, 210, 210]
        assert colors[1].to_hsl()[2] > colors[0].to_hsl()[2] > colors[2].to_hsl()[2]


class TestSwatch:
    def test_swatch_has_nine_steps_with_base(self):
        base = parse("#3498db")
        colors = generate_swatch(base)
        assert len(colors) == len(SWATCH_LEVELS) == 9
        assert base in colors

    def test_swatch_light_to_dark(self):
        colors = generate_swatch(parse("hsl(120, 50%, 42%)"))
        lightness = [c.to_hsl()[2] for c in colors]
        assert lightness == sorted(lightness, reverse=True)

    def test_swatch_oklch(self):
        colors = generate_swatch(parse("#3498db"), HarmonySpace.OKLCH)
        assert len(colors) == 9


class TestGenerateColors:
    """Test the single generation entry point."""

    def test_accepts_strings(self):
        colors = generate_colors("#3498db", "scheme", scheme_type="triadic")
        assert len(colors) == 3
        assert colors[0].hex_key() == "#3498db"

    @pytest.mark.parametrize("mode, kwargs", [
        (GenerationMode.PALETTE, {"palette_type": PaletteType.TRIADIC}),
        (GenerationMode.SCHEME, {"scheme_type": SchemeType.TRIADIC}),
        (GenerationMode.SWATCH, {}),
    ])
    @pytest.mark.parametrize("space", [HarmonySpace.HSL, HarmonySpace.OKLCH])
    def test_deterministic(self, mode, kwargs, space):
        first = generate_colors("#3498db", mode, space=space, **kwargs)
        second = generate_colors("#3498db", mode, space=space, **kwargs)
        assert first == second
        assert [c.hex_key() for c in first] == [c.hex_key() for c in second]

    def test_swatch_mode(self):
        assert len(generate_colors("#3498db", GenerationMode.SWATCH)) == 9

    def test_invalid_base(self):
        with pytest.raises(ParseError):
            generate_colors("#XYZ", GenerationMode.PALETTE)

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            generate_colors("#3498db", "gradient")

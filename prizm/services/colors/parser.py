"""
Color string parser.

Detects the notation of an arbitrary CSS color string and converts it into
the canonical ``Color``. Out-of-range channels are rejected rather than
clamped, uniformly across every notation; hues are angles and always wrap.
Colors from spaces wider than sRGB (OKLCH, Lab, LCH, OKLab, color()) are
clipped to the sRGB gamut after conversion.
"""

import math
import re
from typing import Callable, Dict, List, Optional, Tuple

from . import spaces
from .model import Color, ParseError
from .named import NAMED_COLORS, TRANSPARENT

HEX_RE = re.compile(r"^#([0-9a-f]{8}|[0-9a-f]{6}|[0-9a-f]{4}|[0-9a-f]{3})$")
FUNCTION_RE = re.compile(r"^([a-z-]+)\(\s*(.*?)\s*\)$", re.DOTALL)
NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?$")
ANGLE_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)(deg|turn|rad|grad)?$")

ANGLE_UNITS = {
    None: 1.0,
    "deg": 1.0,
    "turn": 360.0,
    "rad": 180.0 / math.pi,
    "grad": 0.9,
}

# Tolerance for float noise on range checks, e.g. "100.0000001%"
_EPS = 1e-9


class _Args:
    """Split arguments of one functional notation."""

    def __init__(self, source: str, channels: List[str], alpha: Optional[str]):
        self.source = source
        self.channels = channels
        self.alpha = alpha


def _split_arguments(source: str, body: str) -> _Args:
    """Split legacy comma syntax or modern space/slash syntax."""
    if "," in body:
        if "/" in body:
            raise ParseError(ParseError.UNRECOGNIZED, source, "mixed comma and slash syntax")
        parts = [p.strip() for p in body.split(",")]
        if any(not p for p in parts):
            raise ParseError(ParseError.UNRECOGNIZED, source, "empty argument")
        if len(parts) == 4:
            return _Args(source, parts[:3], parts[3])
        return _Args(source, parts, None)

    alpha = None
    if "/" in body:
        head, _, tail = body.partition("/")
        alpha = tail.strip()
        if not alpha or "/" in alpha:
            raise ParseError(ParseError.UNRECOGNIZED, source, "bad alpha separator")
        body = head
    return _Args(source, body.split(), alpha)


def _number(source: str, token: str) -> float:
    if not NUMBER_RE.match(token):
        raise ParseError(ParseError.UNRECOGNIZED, source, f"not a number: {token}")
    return float(token)


def _check_range(source: str, value: float, low: float, high: float, name: str) -> float:
    if value < low - _EPS or value > high + _EPS:
        raise ParseError(
            ParseError.OUT_OF_RANGE, source, f"{name}={value:g} outside [{low:g}, {high:g}]"
        )
    return min(max(value, low), high)


def _unit_interval(source: str, token: str, number_max: float, name: str) -> float:
    """
    Parse a channel that may be a percentage or a bare number.

    Percentages are 0-100%; bare numbers are 0-``number_max``. Both map to
    [0, 1].
    """
    if token.endswith("%"):
        value = _number(source, token[:-1])
        return _check_range(source, value, 0.0, 100.0, name) / 100.0
    value = _number(source, token)
    return _check_range(source, value, 0.0, number_max, name) / number_max


def _alpha(source: str, token: Optional[str]) -> float:
    if token is None:
        return 1.0
    return _unit_interval(source, token, 1.0, "alpha")


def parse_hue(source: str, token: str) -> float:
    """Parse a hue with optional angle unit, normalized into [0, 360)."""
    match = ANGLE_RE.match(token)
    if not match:
        raise ParseError(ParseError.UNRECOGNIZED, source, f"not an angle: {token}")
    value = float(match.group(1)) * ANGLE_UNITS[match.group(2)]
    return spaces.normalize_hue(value)


def _expect(args: _Args, count: int) -> List[str]:
    if len(args.channels) != count:
        raise ParseError(
            ParseError.UNRECOGNIZED,
            args.source,
            f"expected {count} channels, got {len(args.channels)}",
        )
    return args.channels


def _parse_hex(source: str, digits: str) -> Color:
    if len(digits) in (3, 4):
        digits = "".join(d * 2 for d in digits)
    r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    alpha = int(digits[6:8], 16) / 255.0 if len(digits) == 8 else 1.0
    return Color.from_rgb255(r, g, b, alpha)


def _parse_rgb(args: _Args) -> Color:
    channels = _expect(args, 3)
    r, g, b = (
        _unit_interval(args.source, token, 255.0, name)
        for token, name in zip(channels, ("red", "green", "blue"))
    )
    return Color(r, g, b, _alpha(args.source, args.alpha))


def _parse_hsl(args: _Args) -> Color:
    h_tok, s_tok, l_tok = _expect(args, 3)
    h = parse_hue(args.source, h_tok)
    s = _unit_interval(args.source, s_tok, 100.0, "saturation")
    l = _unit_interval(args.source, l_tok, 100.0, "lightness")
    return Color.from_hsl(h, s, l, _alpha(args.source, args.alpha))


def _parse_hwb(args: _Args) -> Color:
    h_tok, w_tok, b_tok = _expect(args, 3)
    h = parse_hue(args.source, h_tok)
    w = _unit_interval(args.source, w_tok, 100.0, "whiteness")
    b = _unit_interval(args.source, b_tok, 100.0, "blackness")
    return Color.from_hwb(h, w, b, _alpha(args.source, args.alpha))


def _parse_oklch(args: _Args) -> Color:
    l_tok, c_tok, h_tok = _expect(args, 3)
    l = _unit_interval(args.source, l_tok, 1.0, "lightness")
    c = _scaled_nonnegative(args.source, c_tok, 0.4, "chroma")
    h = parse_hue(args.source, h_tok)
    return Color.from_oklch(l, c, h, _alpha(args.source, args.alpha))


def _parse_oklab(args: _Args) -> Color:
    l_tok, a_tok, b_tok = _expect(args, 3)
    l = _unit_interval(args.source, l_tok, 1.0, "lightness")
    a = _scaled(args.source, a_tok, 0.4)
    b = _scaled(args.source, b_tok, 0.4)
    return Color.from_unclipped(spaces.oklab_to_rgb(l, a, b), _alpha(args.source, args.alpha))


def _parse_lab(args: _Args) -> Color:
    l_tok, a_tok, b_tok = _expect(args, 3)
    l = _unit_interval(args.source, l_tok, 100.0, "lightness") * 100.0
    a = _scaled(args.source, a_tok, 125.0)
    b = _scaled(args.source, b_tok, 125.0)
    return Color.from_unclipped(spaces.lab_to_rgb(l, a, b), _alpha(args.source, args.alpha))


def _parse_lch(args: _Args) -> Color:
    l_tok, c_tok, h_tok = _expect(args, 3)
    l = _unit_interval(args.source, l_tok, 100.0, "lightness") * 100.0
    c = _scaled_nonnegative(args.source, c_tok, 150.0, "chroma")
    h = parse_hue(args.source, h_tok)
    return Color.from_unclipped(spaces.lch_to_rgb(l, c, h), _alpha(args.source, args.alpha))


_PREDEFINED_SPACES: Dict[str, Callable[[float, float, float], Tuple[float, float, float]]] = {
    "srgb": lambda r, g, b: (r, g, b),
    "srgb-linear": lambda r, g, b: (
        spaces.linear_to_srgb(r), spaces.linear_to_srgb(g), spaces.linear_to_srgb(b)
    ),
    "xyz": spaces.xyz_d65_to_rgb,
    "xyz-d65": spaces.xyz_d65_to_rgb,
    "xyz-d50": spaces.xyz_d50_to_rgb,
}


def _parse_color_function(args: _Args) -> Color:
    if not args.channels:
        raise ParseError(ParseError.UNRECOGNIZED, args.source, "missing color space")
    space, channels = args.channels[0], args.channels[1:]
    convert = _PREDEFINED_SPACES.get(space)
    if convert is None:
        raise ParseError(ParseError.UNRECOGNIZED, args.source, f"unsupported space: {space}")
    if len(channels) != 3:
        raise ParseError(ParseError.UNRECOGNIZED, args.source, "expected 3 channels")
    values = tuple(
        _unit_interval(args.source, token, 1.0, f"{space}[{i}]")
        for i, token in enumerate(channels)
    )
    return Color.from_unclipped(convert(*values), _alpha(args.source, args.alpha))


def _scaled(source: str, token: str, percent_reference: float) -> float:
    """Signed axis value where 100% equals ``percent_reference``."""
    if token.endswith("%"):
        return _number(source, token[:-1]) / 100.0 * percent_reference
    return _number(source, token)


def _scaled_nonnegative(source: str, token: str, percent_reference: float, name: str) -> float:
    value = _scaled(source, token, percent_reference)
    if value < 0:
        raise ParseError(ParseError.OUT_OF_RANGE, source, f"{name}={value:g} is negative")
    return value


_FUNCTIONS: Dict[str, Callable[[_Args], Color]] = {
    "rgb": _parse_rgb,
    "rgba": _parse_rgb,
    "hsl": _parse_hsl,
    "hsla": _parse_hsl,
    "hwb": _parse_hwb,
    "oklch": _parse_oklch,
    "oklab": _parse_oklab,
    "lab": _parse_lab,
    "lch": _parse_lch,
    "color": _parse_color_function,
}


def parse(text: str) -> Color:
    """
    Parse any supported CSS color notation.

    Args:
        text: Color string, e.g. "#3498db", "rgb(52 152 219 / 50%)",
            "hsl(204deg, 70%, 53%)", "oklch(0.65 0.13 240)" or "navy"

    Returns:
        Canonical Color value

    Raises:
        ParseError: reason "unrecognized-syntax" when no notation matches,
            "out-of-range" when a channel lies outside its legal domain
    """
    if not isinstance(text, str):
        raise ParseError(ParseError.UNRECOGNIZED, repr(text), "not a string")

    source = text.strip()
    lowered = source.lower()

    match = HEX_RE.match(lowered)
    if match:
        return _parse_hex(source, match.group(1))

    if lowered in NAMED_COLORS:
        return _parse_hex(source, NAMED_COLORS[lowered][1:])
    if lowered == TRANSPARENT:
        return Color(0.0, 0.0, 0.0, 0.0)

    match = FUNCTION_RE.match(lowered)
    if match:
        handler = _FUNCTIONS.get(match.group(1))
        if handler is not None:
            return handler(_split_arguments(source, match.group(2)))

    raise ParseError(ParseError.UNRECOGNIZED, source)


def is_valid_color(text: str) -> bool:
    """Return True when ``text`` parses as a color."""
    try:
        parse(text)
    except ParseError:
        return False
    return True

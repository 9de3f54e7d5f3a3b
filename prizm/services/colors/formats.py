"""
Color format rendering and export text generation.

Renders canonical ``Color`` values into CSS strings and builds the two
export blocks offered by the UI: CSS custom properties and a Tailwind
theme extension.
"""

import re
from typing import Dict, List, Optional, Sequence, Union

from .model import Color, ColorFormat, round_half_up

SLUG_RE = re.compile(r"[^a-z0-9]+")


def format_number(value: float, decimals: int) -> str:
    """Fixed-precision number with trailing zeros stripped ("0.50" -> "0.5")."""
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def _alpha_text(alpha: float) -> str:
    return format_number(alpha, 3)


def _functional(name: str, parts: List[str], alpha: Optional[float], modern: bool) -> str:
    """
    Assemble a functional notation string.

    Legacy syntax appends an "a" to the function name when alpha is present
    (rgba/hsla); modern syntax keeps the name and uses " / alpha".
    """
    if modern:
        body = " ".join(parts)
        if alpha is not None:
            body = f"{body} / {_alpha_text(alpha)}"
        return f"{name}({body})"
    if alpha is not None:
        return f"{name}a({', '.join(parts + [_alpha_text(alpha)])})"
    return f"{name}({', '.join(parts)})"


def to_hex(color: Color) -> str:
    return color.hex_key()


def to_rgb(color: Color, include_alpha: bool = False, modern: bool = False) -> str:
    r, g, b = color.to_rgb255()
    alpha = color.alpha if include_alpha or not color.is_opaque else None
    return _functional("rgb", [str(r), str(g), str(b)], alpha, modern)


def to_hsl(color: Color, include_alpha: bool = False, modern: bool = False) -> str:
    h, s, l = color.to_hsl()
    hue = round_half_up(h) % 360
    parts = [str(hue), f"{round_half_up(s * 100)}%", f"{round_half_up(l * 100)}%"]
    alpha = color.alpha if include_alpha or not color.is_opaque else None
    return _functional("hsl", parts, alpha, modern)


def to_oklch(color: Color) -> str:
    l, c, h = color.to_oklch()
    chroma = format_number(c, 3)
    # Powerless hue once chroma rounds away
    hue = 0.0 if chroma == "0" else float(format_number(h, 1)) % 360
    body = f"{format_number(l, 3)} {chroma} {format_number(hue, 1)}"
    if not color.is_opaque:
        body = f"{body} / {_alpha_text(color.alpha)}"
    return f"oklch({body})"


def format_color(color: Color, target: Union[ColorFormat, str], modern: bool = False) -> str:
    """
    Render a color in the requested notation.

    Args:
        color: Color to render
        target: One of hex, rgb, rgba, hsl, hsla, oklch
        modern: Use space-separated CSS Color 4 syntax for rgb/hsl

    Returns:
        CSS color string. Non-alpha variants still carry alpha when the
        color is translucent, so no information is dropped.
    """
    target = ColorFormat(target)
    if target is ColorFormat.HEX:
        return to_hex(color)
    if target is ColorFormat.RGB:
        return to_rgb(color, modern=modern)
    if target is ColorFormat.RGBA:
        return to_rgb(color, include_alpha=True, modern=modern)
    if target is ColorFormat.HSL:
        return to_hsl(color, modern=modern)
    if target is ColorFormat.HSLA:
        return to_hsl(color, include_alpha=True, modern=modern)
    return to_oklch(color)


def get_color_formats(color: Color) -> Dict[str, str]:
    """Return the display strings shown for each working color."""
    return {
        "hex": to_hex(color),
        "rgb": to_rgb(color),
        "hsl": to_hsl(color),
        "oklch": to_oklch(color),
    }


def slugify_name(name: str) -> str:
    """Turn a display name into a custom-property safe identifier."""
    return SLUG_RE.sub("-", name.lower()).strip("-")


def resolve_names(colors: Sequence[Color], names: Optional[Sequence[str]]) -> List[str]:
    """
    Pair every color with a slug, defaulting to "color-<n>".

    Missing, blank or unsluggable names fall back to the default so every
    color gets exactly one declaration.
    """
    names = list(names or [])
    resolved = []
    for index in range(len(colors)):
        raw = names[index] if index < len(names) and names[index] else ""
        slug = slugify_name(raw) or slugify_name(f"Color {index + 1}")
        resolved.append(slug)
    return resolved


def to_css_variables(
    colors: Sequence[Color],
    names: Optional[Sequence[str]] = None,
    format: Union[ColorFormat, str] = ColorFormat.HEX,
    use_modern_syntax: bool = True,
    selector: str = ":root",
) -> str:
    """
    Build a CSS custom-properties block.

    Example:
        :root {
          --primary: #3498db;
        }
    """
    lines = [f"{selector} {{"]
    for slug, color in zip(resolve_names(colors, names), colors):
        value = format_color(color, format, modern=use_modern_syntax)
        lines.append(f"  --{slug}: {value};")
    lines.append("}")
    return "\n".join(lines)


def to_tailwind_config(
    colors: Sequence[Color],
    names: Optional[Sequence[str]] = None,
    format: Union[ColorFormat, str] = ColorFormat.HEX,
) -> str:
    """Build a tailwind.config.js theme extension mapping names to values."""
    entries = [
        f"        '{slug}': '{format_color(color, format)}',"
        for slug, color in zip(resolve_names(colors, names), colors)
    ]
    return "\n".join(
        [
            "module.exports = {",
            "  theme: {",
            "    extend: {",
            "      colors: {",
            *entries,
            "      },",
            "    },",
            "  },",
            "};",
        ]
    )

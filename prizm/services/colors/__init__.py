"""
Prizm Colors Module

Provides color parsing and format conversion, palette/scheme/swatch
generation, CSS and image color extraction, and color-vision simulation.
"""

__version__ = "1.0.0"

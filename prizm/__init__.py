"""
Prizm Color Service

Color-format conversion, harmony generation, CSS color extraction and
color-vision simulation behind a small FastAPI backend.
"""

__version__ = "1.0.0"

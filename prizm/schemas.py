"""
Prizm API Schemas
Pydantic models for color conversion, generation, export and extraction
request/response validation.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from prizm.config import config
from prizm.services.colors.harmony import HarmonySpace
from prizm.services.colors.harmony.orchestrator import GenerationMode, PaletteType, SchemeType
from prizm.services.colors.model import ColorFormat
from prizm.services.colors.vision import VisionKind

HEX_PATTERN = r"^#[0-9a-f]{6}([0-9a-f]{2})?$"


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("prizm-colors", description="Service name")


# ============================================================================
# CONVERSION
# ============================================================================

class ConvertRequest(BaseModel):
    color: str = Field(..., min_length=1, max_length=200, description="Color in any supported notation")
    modern: bool = Field(False, description="Use space-separated CSS Color 4 syntax for rgb/hsl")


class ConvertResponse(BaseModel):
    input: str
    hex: str = Field(..., pattern=HEX_PATTERN)
    rgb: str
    rgba: str
    hsl: str
    hsla: str
    oklch: str
    alpha: float = Field(..., ge=0.0, le=1.0)


# ============================================================================
# GENERATION
# ============================================================================

class GenerateRequest(BaseModel):
    color: str = Field(..., min_length=1, max_length=200, description="Base color")
    mode: GenerationMode = Field(GenerationMode.PALETTE, description="palette, scheme or swatch")
    palette_type: PaletteType = Field(PaletteType.ANALOGOUS, description="Used when mode is palette")
    scheme_type: SchemeType = Field(SchemeType.COMPLEMENTARY, description="Used when mode is scheme")
    space: HarmonySpace = Field(HarmonySpace.HSL, description="Hue/lightness arithmetic space")
    format: ColorFormat = Field(ColorFormat.HEX, description="Output notation")


class GenerateResponse(BaseModel):
    base: str = Field(..., description="Base color as hex")
    mode: GenerationMode
    variant: Optional[str] = Field(None, description="Palette or scheme type, if any")
    colors: List[str] = Field(..., description="Generated colors in display order")


# ============================================================================
# VISION SIMULATION
# ============================================================================

class SimulateRequest(BaseModel):
    colors: List[str] = Field(..., min_length=1, max_length=256)
    kind: VisionKind = Field(VisionKind.NORMAL)


class SimulateResponse(BaseModel):
    kind: VisionKind
    colors: List[str] = Field(..., description="Simulated colors; unparseable inputs are echoed back")


# ============================================================================
# EXPORT
# ============================================================================

class ExportRequest(BaseModel):
    colors: List[str] = Field(..., min_length=1, max_length=256)
    names: Optional[List[str]] = Field(None, description="Display names, defaults to 'Color <n>'")
    format: ColorFormat = Field(ColorFormat.HEX)
    use_modern_syntax: bool = Field(True, description="CSS export only")


class ExportResponse(BaseModel):
    content: str


# ============================================================================
# EXTRACTION
# ============================================================================

class ExtractedColor(BaseModel):
    """Single deduplicated color with occurrence count."""
    hex: str = Field(..., pattern=HEX_PATTERN, description="Canonical hex of the color")
    count: int = Field(..., ge=1, description="How many literals mapped to this color")
    usage: str = Field(..., description="inline, css, style or image")


class ExtractTextRequest(BaseModel):
    text: str = Field(..., min_length=1, description="HTML document or CSS text")
    limit: int = Field(config.EXTRACT_LIMIT, ge=1, le=64)


class ExtractUrlRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)
    limit: int = Field(config.EXTRACT_LIMIT, ge=1, le=64)


class ExtractResponse(BaseModel):
    colors: List[ExtractedColor]
    page_title: Optional[str] = None
    url: Optional[str] = None
    debug: Dict[str, float] = Field(default_factory=dict)


# ============================================================================
# WORKING PALETTE
# ============================================================================

class PaletteColorRequest(BaseModel):
    color: str = Field(..., min_length=1, max_length=200)


class RenameRequest(BaseModel):
    name: str = Field(..., max_length=100)


class PaletteEntry(BaseModel):
    name: str
    hex: str = Field(..., pattern=HEX_PATTERN)
    formats: Dict[str, str]


class PaletteResponse(BaseModel):
    session: str
    colors: List[PaletteEntry]
    added: Optional[bool] = None

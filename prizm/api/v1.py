"""
Prizm v1 API Routes
Color conversion, generation, simulation, export, extraction and the
per-session working palette.
"""
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, HTTPException, UploadFile

from prizm import __version__
from prizm.config import config
from prizm.schemas import (
    ConvertRequest, ConvertResponse, ExportRequest, ExportResponse,
    ExtractedColor, ExtractResponse, ExtractTextRequest, ExtractUrlRequest,
    GenerateRequest, GenerateResponse, HealthResponse, PaletteColorRequest,
    PaletteEntry, PaletteResponse, RenameRequest, SimulateRequest, SimulateResponse,
)
from prizm.services.colors.extraction import (
    ExtractedColorEntry, ExtractionResult, extract_css_colors, extract_from_text,
)
from prizm.services.colors.fetch import NetworkExtractionError, is_fetchable_url
from prizm.services.colors.formats import (
    format_color, get_color_formats, to_css_variables, to_tailwind_config,
)
from prizm.services.colors.harmony.orchestrator import GenerationMode, generate_colors
from prizm.services.colors.image_sampling import sample_image_colors
from prizm.services.colors.model import Color, ColorFormat, ParseError
from prizm.services.colors.parser import parse
from prizm.services.colors.vision import simulate_many
from prizm.services.store import InMemoryColorStore, session_stores
from prizm.services.uploads import read_upload
from prizm.utils.ids import generate_request_id
from prizm.utils.logging import get_logger
from prizm.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Colors"])
logger = get_logger()

NETWORK_ERROR_MESSAGE = (
    "Could not load that website. It may be blocking access or unavailable; "
    "check the URL and try again."
)


def _record(operation: str, start_time: float, error_type: Optional[str] = None):
    """Update request counters and timings for one route call."""
    if not config.METRICS_ENABLED:
        return
    metrics = get_metrics()
    metrics.increment_request_count(operation)
    if error_type:
        metrics.increment_failure_count(operation, error_type)
    metrics.record_timing(operation, (time.time() - start_time) * 1000)


def _parse_error(error: ParseError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"reason": error.reason, "value": error.value, "message": str(error)},
    )


def _parse_all(values: List[str]) -> List[Color]:
    try:
        return [parse(value) for value in values]
    except ParseError as e:
        raise _parse_error(e)


def _internal_error(request_id: str, operation: str, error: Exception) -> HTTPException:
    logger.error(f"{operation} failed: {str(error)}",
                 extra={"request_id": request_id, "error_type": type(error).__name__})
    return HTTPException(
        status_code=500,
        detail=f"Internal server error. Request ID: {request_id}"
    )


def _extracted(entries: List[ExtractedColorEntry]) -> List[ExtractedColor]:
    return [ExtractedColor(hex=e.hex, count=e.count, usage=e.usage) for e in entries]


def _extract_response(result: ExtractionResult) -> ExtractResponse:
    return ExtractResponse(
        colors=_extracted(result.colors),
        page_title=result.page_title,
        url=result.url,
        debug={
            "raw_matches": float(result.raw_matches),
            "rejected_matches": float(result.rejected_matches),
            **{f"ms_{name}": ms for name, ms in result.timings_ms.items()},
        },
    )


# ============================================================================
# CONVERSION / GENERATION / SIMULATION
# ============================================================================

@router.post("/convert", response_model=ConvertResponse,
             summary="Convert a color",
             description="Parse any supported notation and render it in every output format")
async def convert_color(body: ConvertRequest) -> ConvertResponse:
    start_time = time.time()
    try:
        color = parse(body.color)
    except ParseError as e:
        _record("convert", start_time, "parse")
        raise _parse_error(e)

    response = ConvertResponse(
        input=body.color,
        alpha=color.alpha,
        **{fmt.value: format_color(color, fmt, modern=body.modern) for fmt in ColorFormat},
    )
    _record("convert", start_time)
    return response


@router.post("/generate", response_model=GenerateResponse,
             summary="Generate harmonies",
             description="Generate a palette, scheme or lightness swatch from a base color")
async def generate(body: GenerateRequest) -> GenerateResponse:
    start_time = time.time()
    try:
        base = parse(body.color)
    except ParseError as e:
        _record("generate", start_time, "parse")
        raise _parse_error(e)

    colors = generate_colors(base, body.mode, body.palette_type, body.scheme_type, body.space)
    variant = None
    if body.mode is GenerationMode.PALETTE:
        variant = body.palette_type.value
    elif body.mode is GenerationMode.SCHEME:
        variant = body.scheme_type.value

    _record("generate", start_time)
    return GenerateResponse(
        base=base.hex_key(),
        mode=body.mode,
        variant=variant,
        colors=[format_color(c, body.format) for c in colors],
    )


@router.post("/simulate", response_model=SimulateResponse,
             summary="Simulate color-vision deficiency")
async def simulate(body: SimulateRequest) -> SimulateResponse:
    start_time = time.time()
    colors = simulate_many(body.colors, body.kind)
    _record("simulate", start_time)
    return SimulateResponse(kind=body.kind, colors=colors)


# ============================================================================
# EXPORT
# ============================================================================

@router.post("/export/css", response_model=ExportResponse,
             summary="Export CSS custom properties")
async def export_css(body: ExportRequest) -> ExportResponse:
    start_time = time.time()
    colors = _parse_all(body.colors)
    content = to_css_variables(colors, body.names, body.format, body.use_modern_syntax)
    _record("export_css", start_time)
    return ExportResponse(content=content)


@router.post("/export/tailwind", response_model=ExportResponse,
             summary="Export Tailwind theme colors")
async def export_tailwind(body: ExportRequest) -> ExportResponse:
    start_time = time.time()
    colors = _parse_all(body.colors)
    content = to_tailwind_config(colors, body.names, body.format)
    _record("export_tailwind", start_time)
    return ExportResponse(content=content)


# ============================================================================
# EXTRACTION
# ============================================================================

@router.post("/extract/text", response_model=ExtractResponse,
             summary="Extract colors from HTML or CSS text")
async def extract_text(body: ExtractTextRequest) -> ExtractResponse:
    start_time = time.time()
    request_id = generate_request_id("extract")
    try:
        result = extract_from_text(body.text, body.limit)
    except Exception as e:
        _record("extract_text", start_time, type(e).__name__.lower())
        raise _internal_error(request_id, "extract_text", e)

    logger.info(f"Extracted {len(result.colors)} colors from text",
                extra={"request_id": request_id, "raw_matches": result.raw_matches})
    _record("extract_text", start_time)
    return _extract_response(result)


@router.post("/extract/url", response_model=ExtractResponse,
             summary="Extract colors from a webpage",
             description="Fetch a page through the configured CORS proxies and rank its colors")
def extract_url(body: ExtractUrlRequest) -> ExtractResponse:
    # Plain def: the blocking fetch runs in the threadpool
    start_time = time.time()
    request_id = generate_request_id("extract")

    if not is_fetchable_url(body.url):
        _record("extract_url", start_time, "invalid_url")
        raise HTTPException(status_code=400, detail="Please enter a valid website URL")

    try:
        result = extract_css_colors(body.url, body.limit)
    except NetworkExtractionError as e:
        logger.warning(f"Page fetch failed: {str(e)}",
                       extra={"request_id": request_id, "attempts": e.attempts})
        _record("extract_url", start_time, "network")
        raise HTTPException(status_code=502, detail=NETWORK_ERROR_MESSAGE)
    except Exception as e:
        _record("extract_url", start_time, type(e).__name__.lower())
        raise _internal_error(request_id, "extract_url", e)

    logger.info(f"Extracted {len(result.colors)} colors from {result.url}",
                extra={"request_id": request_id, "title": result.page_title})
    _record("extract_url", start_time)
    return _extract_response(result)


@router.post("/extract/image", response_model=ExtractResponse,
             summary="Extract colors from an image")
async def extract_image(
    file: UploadFile = File(..., description="PNG, JPEG, WebP or GIF image")
) -> ExtractResponse:
    start_time = time.time()
    request_id = generate_request_id("image")

    try:
        data = await read_upload(file)
        entries = sample_image_colors(data, limit=config.EXTRACT_LIMIT)
    except HTTPException as e:
        _record("extract_image", start_time, f"http_{e.status_code}")
        raise
    except ValueError as e:
        _record("extract_image", start_time, "decode")
        raise HTTPException(status_code=400, detail=f"Invalid image: {str(e)}")
    except Exception as e:
        _record("extract_image", start_time, type(e).__name__.lower())
        raise _internal_error(request_id, "extract_image", e)

    logger.info(f"Sampled {len(entries)} colors from image",
                extra={"request_id": request_id, "upload_filename": file.filename})
    _record("extract_image", start_time)
    return ExtractResponse(
        colors=_extracted(entries),
        debug={"ms_total": (time.time() - start_time) * 1000},
    )


# ============================================================================
# WORKING PALETTE
# ============================================================================

def _palette_response(session: str, added: Optional[bool] = None) -> PaletteResponse:
    store = session_stores.peek(session)
    if store is None:
        return PaletteResponse(session=session, colors=[], added=added)
    entries = [
        PaletteEntry(name=name, hex=color.hex_key(), formats=get_color_formats(color))
        for color, name in zip(store.colors(), store.names())
    ]
    return PaletteResponse(session=session, colors=entries, added=added)


def _existing_store(session: str, index: int) -> InMemoryColorStore:
    store = session_stores.peek(session)
    if store is None:
        raise HTTPException(status_code=404, detail=f"No color at index {index}")
    return store


@router.get("/palette/{session}", response_model=PaletteResponse)
async def get_palette(session: str) -> PaletteResponse:
    """Read a palette; unknown sessions read as empty and are not created."""
    return _palette_response(session)


@router.post("/palette/{session}/colors", response_model=PaletteResponse)
async def add_palette_color(session: str, body: PaletteColorRequest) -> PaletteResponse:
    """Add a color; adding one already present is a no-op with added=false."""
    try:
        color = parse(body.color)
    except ParseError as e:
        raise _parse_error(e)
    added = session_stores.get(session).add(color)
    return _palette_response(session, added)


@router.delete("/palette/{session}/colors/{index}", response_model=PaletteResponse)
async def remove_palette_color(session: str, index: int) -> PaletteResponse:
    try:
        _existing_store(session, index).remove(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _palette_response(session)


@router.delete("/palette/{session}/colors", response_model=PaletteResponse)
async def clear_palette(session: str) -> PaletteResponse:
    session_stores.drop(session)
    return _palette_response(session)


@router.put("/palette/{session}/colors/{index}/name", response_model=PaletteResponse)
async def rename_palette_color(session: str, index: int, body: RenameRequest) -> PaletteResponse:
    try:
        _existing_store(session, index).rename(index, body.name)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _palette_response(session)


# ============================================================================
# SERVICE
# ============================================================================

@router.get("/healthz", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(ok=True, version=__version__)


@router.get("/metrics",
            summary="Service metrics",
            description="In-process request counters and timing percentiles")
async def metrics_summary() -> Dict[str, Any]:
    if not config.METRICS_ENABLED:
        return {"enabled": False}
    return {"enabled": True, **get_metrics().get_summary()}

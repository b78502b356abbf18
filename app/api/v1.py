"""
Palette Service v1 API Routes
Implements /v1/palette extraction endpoints and supporting routes.
"""
import time
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from app.config import config
from app.schemas import (
    ErrorResponse, FormattedColorResponse, HealthResponse, PaletteRequestB64, PaletteResponse
)
from app.services.colors import __version__
from app.services.colors.conversions import COLOR_FORMATS, format_color, hex_to_rgb
from app.services.colors.errors import ImageDecodeError, NoValidPixelsError
from app.services.colors.extract_api import decode_base64_payload, handle_extract
from app.services.colors.extraction import palette_entry_from_rgb
from app.services.imaging import read_upload
from app.services.reliability import OperationTimeoutError, RequestSupersededError
from app.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Palette Extraction"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Image could not be decoded"},
    409: {"model": ErrorResponse, "description": "Superseded by a newer request"},
    415: {"model": ErrorResponse, "description": "Unsupported media type"},
    422: {"model": ErrorResponse, "description": "No valid pixels in image"},
    504: {"model": ErrorResponse, "description": "Extraction timed out"},
}


def _raise_http_error(error: Exception) -> NoReturn:
    """Map extraction failures onto HTTP status codes with the reason verbatim."""
    if isinstance(error, ImageDecodeError):
        raise HTTPException(status_code=400, detail=str(error))
    if isinstance(error, NoValidPixelsError):
        raise HTTPException(status_code=422, detail=str(error))
    if isinstance(error, RequestSupersededError):
        raise HTTPException(status_code=409, detail=str(error))
    if isinstance(error, OperationTimeoutError):
        raise HTTPException(status_code=504, detail=str(error))
    raise HTTPException(status_code=500, detail="Internal palette extraction error")


@router.post("/palette",
             response_model=PaletteResponse,
             responses=ERROR_RESPONSES,
             summary="Extract Palette",
             description="Extract a ranked color palette from an uploaded image")
async def extract_palette_upload(
    file: UploadFile = File(..., description="Image file (PNG, JPEG, GIF, WEBP, BMP)"),
    colors: int = Query(config.DEFAULT_COLORS, ge=config.MIN_COLORS, le=config.MAX_COLORS,
                        description="Number of palette colors"),
    include_swatch: bool = Query(False, description="Render a swatch strip artifact"),
    session_id: Optional[str] = Query(None, max_length=128,
                                      description="Client session for superseding stale requests")
) -> PaletteResponse:
    """
    Extract a palette from a multipart image upload.

    - **file**: image to analyse
    - **colors**: palette size (3-12)
    - **include_swatch**: add a base64 PNG swatch strip to the response
    - **session_id**: a newer request with the same id cancels this one (409)
    """
    image_bytes = await read_upload(file)

    try:
        return await handle_extract(
            image_bytes, colors, mode="multipart",
            include_swatch=include_swatch, session_id=session_id
        )
    except HTTPException:
        raise
    except Exception as e:
        _raise_http_error(e)


@router.post("/palette/b64",
             response_model=PaletteResponse,
             responses=ERROR_RESPONSES,
             summary="Extract Palette (base64)",
             description="Extract a ranked color palette from a base64-encoded image")
async def extract_palette_b64(request: PaletteRequestB64) -> PaletteResponse:
    """Extract a palette from a JSON body carrying the image as base64."""
    try:
        image_bytes = decode_base64_payload(request.image_b64)
        return await handle_extract(
            image_bytes, request.colors, mode="b64",
            include_swatch=request.include_swatch, session_id=request.session_id
        )
    except HTTPException:
        raise
    except Exception as e:
        _raise_http_error(e)


@router.get("/palette/format",
            response_model=FormattedColorResponse,
            summary="Format Color",
            description="Render a hex color as the hex, rgb() or hsl() string a client copies")
async def format_palette_color(
    hex_color: str = Query(..., alias="hex", description="Color as #rrggbb, rrggbb or #rgb"),
    fmt: str = Query("hex", pattern=f"^({'|'.join(COLOR_FORMATS)})$", description="Output format")
) -> FormattedColorResponse:
    """Format a single color for copying."""
    try:
        r, g, b = hex_to_rgb(hex_color)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    entry = palette_entry_from_rgb(r, g, b)
    return FormattedColorResponse(hex=entry.hex, format=fmt, value=format_color(entry, fmt))


@router.get("/healthz",
            response_model=HealthResponse,
            summary="Health Check",
            description="Liveness check for the palette service")
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(ok=True, version=f"v{__version__}", service="palette-extractor")


@router.get("/metrics",
            summary="Service Metrics",
            description="In-process request counters and stage timings")
async def get_service_metrics() -> Dict[str, Any]:
    """Get palette service metrics."""
    if not config.METRICS_ENABLED:
        raise HTTPException(status_code=404, detail="Metrics disabled")

    summary = get_metrics().get_summary()
    summary["timestamp"] = int(time.time())
    return summary

"""
Palette Service API Schemas
Pydantic models for palette extraction request/response validation.
"""
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.config import config


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("palette-extractor", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Human-readable failure reason")


# ============================================================================
# PALETTE EXTRACTION SCHEMAS
# ============================================================================

class HSLValue(BaseModel):
    """HSL representation with integer components."""
    h: int = Field(..., ge=0, lt=360, description="Hue in degrees [0, 360)")
    s: int = Field(..., ge=0, le=100, description="Saturation percent [0, 100]")
    l: int = Field(..., ge=0, le=100, description="Lightness percent [0, 100]")


class PaletteColor(BaseModel):
    """Single palette color in every supported representation."""
    model_config = ConfigDict(populate_by_name=True)

    r: int = Field(..., ge=0, le=255, description="Red channel")
    g: int = Field(..., ge=0, le=255, description="Green channel")
    b: int = Field(..., ge=0, le=255, description="Blue channel")
    hex: str = Field(
        ...,
        pattern=r"^#[0-9a-f]{6}$",
        description="Lowercase hex color code in format #rrggbb"
    )
    hsl: HSLValue = Field(..., description="HSL components")
    contrast: Literal["#000000", "#ffffff"] = Field(
        ...,
        description="Readable text color on this background"
    )
    rgb_string: str = Field(..., alias="rgbString", description="CSS rgb() notation")
    hsl_string: str = Field(..., alias="hslString", description="CSS hsl() notation")


class PaletteArtifacts(BaseModel):
    """Optional rendered artifacts."""
    swatch_png_b64: Optional[str] = Field(
        None,
        description="Base64-encoded PNG strip with one labelled chip per palette color"
    )


class PaletteRequestB64(BaseModel):
    """JSON request carrying a base64-encoded image."""
    image_b64: str = Field(
        ...,
        min_length=1,
        description="Base64-encoded image bytes; a data URL prefix is allowed"
    )
    colors: int = Field(
        config.DEFAULT_COLORS,
        ge=config.MIN_COLORS,
        le=config.MAX_COLORS,
        description="Number of palette colors to return"
    )
    include_swatch: bool = Field(False, description="Render a swatch strip artifact")
    session_id: Optional[str] = Field(
        None,
        max_length=128,
        description="Client session; a newer request with the same id supersedes this one"
    )


class PaletteResponse(BaseModel):
    """Main palette extraction response."""
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(..., description="Request ID for log correlation")
    width: int = Field(..., description="Sampled image width after downscaling")
    height: int = Field(..., description="Sampled image height after downscaling")
    colors_requested: int = Field(..., description="Requested palette size")
    depth: int = Field(..., description="Median-cut depth used")
    sampled_pixels: int = Field(..., description="Pixels kept after filtering")
    bucket_count: int = Field(..., description="Non-empty median-cut buckets produced")
    palette: List[PaletteColor] = Field(
        ...,
        description="Palette ordered by vibrancy-weighted score, highest first"
    )
    timings_ms: Dict[str, float] = Field(default_factory=dict, description="Stage timings")
    artifacts: Optional[PaletteArtifacts] = Field(None, description="Optional artifacts")


class FormattedColorResponse(BaseModel):
    """A color rendered in a single copyable format."""
    hex: str = Field(..., pattern=r"^#[0-9a-f]{6}$", description="Normalised input color")
    format: Literal["hex", "rgb", "hsl"] = Field(..., description="Requested format")
    value: str = Field(..., description="Formatted color value")

"""
Palette Extraction API Orchestrator

Handles multipart and base64 input modes for palette extraction. Coordinates
request tracking, cancellation, timeouts, optional swatch rendering, logging
and metrics around the synchronous extraction pipeline.
"""

import base64
import binascii
import time
from typing import Optional

from app.config import config
from app.schemas import PaletteArtifacts, PaletteColor, PaletteResponse
from app.services.colors.errors import ImageDecodeError, PaletteError
from app.services.colors.extraction import extract_palette
from app.services.colors.swatches import render_swatch_strip
from app.services.reliability import (
    OperationTimeoutError, RequestSupersededError, superseding_runner, timeout_manager
)
from app.utils.ids import generate_request_id
from app.utils.logging import get_logger, request_context
from app.utils.metrics import get_metrics


def decode_base64_payload(b64_data: str) -> bytes:
    """
    Decode a base64 image payload, tolerating a ``data:...;base64,`` prefix.

    Raises:
        ImageDecodeError: If the payload is not valid base64
    """
    if "," in b64_data:
        b64_data = b64_data.split(",", 1)[1]

    try:
        return base64.b64decode(b64_data.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Failed to load image: invalid base64 data ({str(e)})")


async def handle_extract(
    image_bytes: bytes,
    colors: int,
    mode: str,
    include_swatch: bool = False,
    session_id: Optional[str] = None
) -> PaletteResponse:
    """
    Main orchestrator for palette extraction.

    Args:
        image_bytes: Encoded image bytes
        colors: Requested palette size, already validated to [3, 12]
        mode: Input mode for logs and metrics ("multipart" or "b64")
        include_swatch: Whether to render the swatch strip artifact
        session_id: Optional client session; a newer request supersedes older ones

    Returns:
        PaletteResponse with the ranked palette

    Raises:
        PaletteError: For decode failures or images without usable pixels
        RequestSupersededError: If a newer request for the session arrived
        OperationTimeoutError: If the configured extraction timeout elapsed
    """
    request_id = generate_request_id("pal")

    with request_context(request_id, mode=mode, session_id=session_id):
        return await _tracked_extract(request_id, image_bytes, colors, mode, include_swatch, session_id)


async def _tracked_extract(
    request_id: str,
    image_bytes: bytes,
    colors: int,
    mode: str,
    include_swatch: bool,
    session_id: Optional[str]
) -> PaletteResponse:
    start_time = time.time()
    logger = get_logger()
    metrics = get_metrics()

    logger.bind(colors=colors, bytes=len(image_bytes)).info("Starting palette extraction")
    metrics.increment_request_count(mode)

    try:
        async with timeout_manager.timeout("extraction"):
            result = await superseding_runner.run(session_id, extract_palette, image_bytes, colors)

        artifacts = None
        if include_swatch:
            swatch_b64 = None
            try:
                swatch_b64 = render_swatch_strip(result.entries, chip_size=config.SWATCH_CHIP_SIZE)
            except Exception as e:
                logger.warning(f"Swatch generation failed: {str(e)}")
            artifacts = PaletteArtifacts(swatch_png_b64=swatch_b64)

        total_time = (time.time() - start_time) * 1000
        timings = {**result.timings_ms, "ms_total": total_time}

        response = PaletteResponse(
            request_id=request_id,
            width=result.width,
            height=result.height,
            colors_requested=colors,
            depth=result.depth,
            sampled_pixels=result.sampled_pixels,
            bucket_count=result.bucket_count,
            palette=[PaletteColor.model_validate(entry.to_dict()) for entry in result.entries],
            timings_ms=timings,
            artifacts=artifacts
        )

        logger.bind(
            dims=f"{result.width}x{result.height}",
            colors=colors,
            depth=result.depth,
            sampled_pixels=result.sampled_pixels,
            bucket_count=result.bucket_count,
            palette=[entry.hex for entry in result.entries],
            result="ok",
            **timings
        ).info("Palette extraction completed successfully")

        metrics.increment_success_count()
        metrics.record_timing("total", total_time)
        for stage in ("ms_decode", "ms_sample", "ms_partition", "ms_rank"):
            if stage in timings:
                metrics.record_timing(stage[3:], timings[stage])
        metrics.record_palette(len(result.entries), result.bucket_count)

        return response

    except RequestSupersededError:
        logger.bind(result="superseded").info("Palette extraction superseded")
        metrics.increment_superseded_count()
        raise

    except (PaletteError, OperationTimeoutError) as e:
        logger.bind(
            ms_total=(time.time() - start_time) * 1000,
            result="error",
            error_type=e.error_type
        ).warning(f"Palette extraction failed: {str(e)}")
        metrics.increment_failure_count(e.error_type)
        raise

    except Exception as e:
        logger.bind(
            ms_total=(time.time() - start_time) * 1000,
            result="error",
            error_type="unexpected"
        ).error(f"Unexpected error in palette extraction: {str(e)}")
        metrics.increment_failure_count("unexpected")
        raise

#!/usr/bin/env python3
"""Palette Extractor - Web API with FastAPI."""
import asyncio
import io
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from extractors.color_extractor import ColorExtractor
from generators.export_generator import EXPORT_FORMATS, export_palette
from generators.swatch_generator import SwatchGenerator
from models.palette import (
    ExtractorConfig, FALLBACK_STRATEGIES, NORMALIZATION_POLICIES, OKLCH_MODES,
    SCAN_STRATEGIES, PaletteData,
)
from utils.errors import PaletteExtractionError
from utils.logger import setup_logger

app = FastAPI(title="Palette Extractor")
logger = setup_logger("palette_app")

MEDIA_TYPES = {
    'tailwind': 'text/javascript',
    'css': 'text/css',
    'json': 'application/json',
    'table': 'text/plain',
}


def create_extractor(
    policy: str = "pattern",
    fallback: str = "defaults",
    oklch: str = "approximate",
    scan: str = "soup",
) -> ColorExtractor:
    """Create a ColorExtractor for one request (nothing is shared between requests)."""
    config = ExtractorConfig(policy=policy, fallback=fallback, oklch_mode=oklch, scan=scan)
    return ColorExtractor(config)


def error_response(error: Exception, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": str(error)},
    )


def no_palette_response() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": "No colors found in the website"},
    )


async def _extract(url: str, policy: str, fallback: str, oklch: str, scan: str) -> Optional[PaletteData]:
    """Run one extraction; None when the allow-list policy finds nothing."""
    with create_extractor(policy, fallback, oklch, scan) as extractor:
        return await extractor.extract_from_url_async(url)


@app.get("/formats")
async def get_formats():
    """Return the available options."""
    return {
        "export_formats": EXPORT_FORMATS,
        "policies": NORMALIZATION_POLICIES,
        "fallbacks": FALLBACK_STRATEGIES,
        "oklch_modes": OKLCH_MODES,
        "scan_strategies": SCAN_STRATEGIES,
    }


@app.get("/extract")
async def extract_colors(
    url: str = Query(...),
    policy: str = Query("pattern"),
    fallback: str = Query("defaults"),
    oklch: str = Query("approximate"),
    scan: str = Query("soup"),
):
    """Extract the palette of a URL as JSON."""
    try:
        palette = await _extract(url, policy, fallback, oklch, scan)
    except (PaletteExtractionError, ValueError) as e:
        return error_response(e)

    if palette is None:
        return no_palette_response()
    return {"success": True, **palette.to_dict()}


@app.get("/export")
async def export_colors(
    url: str = Query(...),
    format: str = Query("css"),
    policy: str = Query("pattern"),
    fallback: str = Query("defaults"),
    oklch: str = Query("approximate"),
    scan: str = Query("soup"),
):
    """Extract and render in one of the export formats."""
    if format not in EXPORT_FORMATS:
        return error_response(ValueError(f"Unknown export format '{format}'"))
    try:
        palette = await _extract(url, policy, fallback, oklch, scan)
    except (PaletteExtractionError, ValueError) as e:
        return error_response(e)

    if palette is None:
        return no_palette_response()
    return PlainTextResponse(export_palette(palette, format), media_type=MEDIA_TYPES[format])


def _generate_swatch_sync(palette: PaletteData) -> bytes:
    """Render swatch PNG in sync context (for thread pool)."""
    img = SwatchGenerator(palette).generate()
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@app.get("/swatch")
async def swatch(
    url: str = Query(...),
    policy: str = Query("pattern"),
    fallback: str = Query("defaults"),
):
    """Extract and return a PNG swatch sheet."""
    try:
        palette = await _extract(url, policy, fallback, "approximate", "soup")
    except (PaletteExtractionError, ValueError) as e:
        return error_response(e)

    if palette is None:
        return no_palette_response()

    png_bytes = await asyncio.to_thread(_generate_swatch_sync, palette)
    return StreamingResponse(io.BytesIO(png_bytes), media_type="image/png")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

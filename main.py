from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import router as v1_router
from app.config import config
from app.services.colors import __version__
from app.utils.logging import get_logger

logger = get_logger()

app = FastAPI(
    title=config.API_TITLE or "Palette Extractor",
    description="Median-cut color palette extraction with vibrancy-weighted ranking",
    version=__version__
)

# Add CORS middleware with basic configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"]
)

app.include_router(v1_router)


@app.get("/healthz")
def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "palette-extractor",
        "version": __version__
    }


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Palette Extractor API",
        "version": __version__,
        "docs": "/docs"
    }


logger.bind(
    max_edge=config.MAX_EDGE,
    colors_range=f"{config.MIN_COLORS}-{config.MAX_COLORS}"
).info("Palette service initialised")

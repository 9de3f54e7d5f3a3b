"""
Prizm Color Service
FastAPI application exposing color conversion, harmony generation,
vision simulation, export and extraction.
"""
import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prizm import __version__
from prizm.api.v1 import router as v1_router
from prizm.config import config
from prizm.utils.logging import get_logger

logger = get_logger()

app = FastAPI(
    title="Prizm Color Service",
    description="Color conversion, palettes and extraction API",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(v1_router)


@app.get("/healthz")
def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "prizm-colors",
        "version": __version__,
    }


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Prizm Color Service API",
        "version": __version__,
        "docs": "/docs"
    }


def run():
    """Console entry point: serve the app with uvicorn."""
    host = os.environ.get("PRIZM_HOST", "127.0.0.1")
    port = int(os.environ.get("PRIZM_PORT", "8000"))
    logger.info(f"Starting Prizm on {host}:{port}", extra={"version": __version__})
    uvicorn.run("prizm.main:app", host=host, port=port)


if __name__ == "__main__":
    run()

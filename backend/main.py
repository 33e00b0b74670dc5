#!/usr/bin/env python3
"""
Thai Document Stamping API
FastAPI server for stamping and composing official documents

Features:
- Registry-number and command/signature stamps on PDFs and images
- Leave request forms and leave summary reports
- Font warm-up on startup, health reporting
"""

from fastapi import Depends, FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import get_settings
from core.logger import get_logger
from api.document_stamping import router as stamping_router, get_generator
from services.document_stamping import DocumentGenerator

log = get_logger("main")

app = FastAPI(
    title="Thai Document Stamping API",
    description="Stamps registry numbers, commands and signatures onto documents and composes leave forms",
    version="1.0.0"
)

app.include_router(stamping_router)


# === STARTUP EVENT: Load the Thai font ===
@app.on_event("startup")
async def startup_event():
    """Warm the font cache so the first request does not pay for the download. Runs off the event loop."""
    if not get_settings().warm_on_startup:
        log.info("Font warm-up disabled")
        return
    if await run_in_threadpool(get_generator().warm_up):
        log.info("Font ready")


# CORS middleware for frontend connection
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health_check(generator: DocumentGenerator = Depends(get_generator)):
    """
    Health check endpoint.
    Degraded until the font has been loaded; stamping still works and
    loads it on first use.
    """
    font_ok = generator.fonts.is_warm

    return {
        "status": "healthy" if font_ok else "degraded",
        "checks": {
            "font": {
                "ok": font_ok,
                "name": generator.fonts.font_name,
                "message": "Loaded" if font_ok else "Not loaded yet",
            },
        },
    }


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "message": "Thai Document Stamping API",
        "docs": "/docs",
        "health_endpoint": "/api/health"
    }


if __name__ == "__main__":
    log.info("Starting stamping API on http://localhost:8000 (docs at /docs)")
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""
FastAPI application factory for the frame classifier control surface.

Routes:
- /api/status -> pipeline status snapshot
- /api/devices, /api/models, /api/backends -> selectable options
- /api/source, /api/model, /api/backend, /api/threshold -> queue changes
- /api/frame.jpg -> latest frame
"""

from __future__ import annotations

import logging
import threading

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import api


def create_app(engine) -> FastAPI:
    """Create the FastAPI app bound to a running ClassifierEngine."""
    app = FastAPI(
        title="Frame Classifier",
        version="0.1.0",
        description="Live frame classification control surface",
    )

    # CORS for development (Vite dev server)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.engine = engine
    app.include_router(api.router, prefix="/api")
    return app


def start_web_thread(engine, host: str = "0.0.0.0", port: int = 5000) -> threading.Thread:
    """Serve the control surface from a daemon thread."""
    app = create_app(engine)

    def run_web_app():
        uvicorn.run(app, host=host, port=port, log_level="info")

    web_thread = threading.Thread(target=run_web_app, daemon=True)
    web_thread.start()
    logging.info(f"Web interface started on port {port}")
    return web_thread

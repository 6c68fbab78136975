"""
Provenance Overlay Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import annotate, config
from services.config_manager import ConfigManager

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    print("[Backend] Starting Provenance Overlay Backend...")
    settings = ConfigManager.get_instance().get_settings()
    print(f"[Backend] ConfigManager initialized (GitHub integration: {settings.github_integration})")

    yield
    # Shutdown: drop every page session and its caches
    annotate.sessions.clear()
    print("[Backend] Shutting down Provenance Overlay Backend...")


app = FastAPI(
    title="Provenance Overlay Backend",
    description="Annotates GitHub diffs with the provenance of each changed character range",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for the browser extension
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(annotate.router, prefix="/api/annotate", tags=["annotate"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "provenance-overlay-backend"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)

"""
daoscript API - FastAPI Application

Run with: uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from daoscript import __version__
from api.routes.interpret import router as interpret_router
from api.routes.validate import router as validate_router
from api.routes.health import router as health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("daoscript API starting...")
    yield
    logger.info("daoscript API shutting down...")


app = FastAPI(
    title="daoscript API",
    description="Compile governance scripts into ordered transaction batches",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(validate_router, prefix="/api/v1", tags=["Validation"])
app.include_router(interpret_router, prefix="/api/v1", tags=["Interpretation"])


@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "name": "daoscript API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

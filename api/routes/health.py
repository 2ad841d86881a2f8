"""Health check endpoint."""

from fastapi import APIRouter

from daoscript import __version__
from daoscript.modules import MODULES

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "service": "daoscript-api"
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check endpoint."""
    return {
        "ready": True,
        "checks": {
            "schema": True,
            "modules": sorted(MODULES),
        }
    }

"""
Health check endpoints
"""
from fastapi import APIRouter
import time

from survey_insights.stage2_analyst.prompt_builder import PROMPTS_DIR

from ..config import settings

router = APIRouter()

# Track startup time
_startup_time = time.time()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.
    Returns service status and uptime.
    """
    return {
        "status": "healthy",
        "version": "1.0.0",
        "uptime_seconds": round(time.time() - _startup_time, 2)
    }


@router.get("/health/ready")
async def readiness_check():
    """
    Readiness check for container orchestration.
    Verifies the LLM backend is configured and prompt templates are bundled.
    """
    checks = {
        "api_key": bool(settings.LLM_API_KEY),
        "prompts": PROMPTS_DIR.exists()
    }

    return {
        "ready": all(checks.values()),
        "checks": checks
    }


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check - simple ping to verify service is running.
    """
    return {"alive": True}

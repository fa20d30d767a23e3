"""
Health check endpoint.
"""
import time
from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for load balancers and uptime probes"""
    return {"status": "healthy", "timestamp": time.time()}

"""
Health check endpoint.
Verifies the content store is reachable with the configured credentials.
"""
from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_store
from app.storage.sanity_client import SanityClient, SanityError

router = APIRouter()


@router.get("")
async def health_check(store: SanityClient = Depends(get_store)):
    """
    Health check endpoint.
    Returns status of the Sanity connection.
    """
    health_status = {
        "status": "healthy",
        "store": "unknown"
    }

    try:
        await store.ping()
        health_status["store"] = "connected"
    except SanityError as e:
        health_status["store"] = f"error: {str(e)}"
        health_status["status"] = "unhealthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status

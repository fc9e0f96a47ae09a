"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from threatscope.api.dependencies import get_lookup_cache
from threatscope.cache.lookup_cache import LookupCache

router = APIRouter()


@router.get("/health")
async def health(cache: LookupCache = Depends(get_lookup_cache)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "profiles": ["transaction", "contract", "social"],
        "lookup_cache": cache.stats(),
    }

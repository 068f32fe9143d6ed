"""
Health Routes - System health, status and warmup endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends

from teamsearch import __version__
from teamsearch.domains.search import TeamSearchEngine
from teamsearch.interfaces.api.deps import get_search_engine

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "teamsearch"}


@router.get("/api")
async def api_info(engine: TeamSearchEngine = Depends(get_search_engine)) -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "TeamSearch API",
        "version": __version__,
        "description": "Hybrid semantic + lexical search over the team catalog",
        "vectors_enabled": engine.configured,
        "docs": "/docs",
    }


@router.get("/warmup")
async def warmup(engine: TeamSearchEngine = Depends(get_search_engine)) -> dict[str, bool]:
    """
    Prime the vector index and embedding connection.

    Always answers ``ok``; ``warm`` reports whether priming succeeded.
    """
    warm = await engine.warmup()
    return {"ok": True, "warm": warm}

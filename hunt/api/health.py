"""
Health check and system status endpoints
"""
from fastapi import APIRouter

from hunt import __version__, state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    key = state.PASS_KEYS.get_current_key()
    return {
        "status": "ok",
        "message": "Treasure Hunt Server",
        "version": __version__,
        "total_teams": len(state.TEAMS.list_teams()),
        "pass_key_set": key is not None
    }

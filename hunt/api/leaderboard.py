"""
Leaderboard endpoints

Rows come back already ranked and scored; clients must not re-sort.
"""
from fastapi import APIRouter

from hunt import state


router = APIRouter(tags=["leaderboard"])


@router.get("/api/leaderboard-data")
async def get_leaderboard_data():
    """
    Live leaderboard

    Returns:
    - Ranked teams (accuracy desc, then earliest submission)
    - Per-question breakdown for each team
    - Summary (total, perfect, average, top)
    - Current pass key (admin view)
    """
    return state.LEADERBOARD.get_leaderboard_data()


@router.post("/api/leaderboard/refresh")
async def refresh_leaderboard():
    """Force a rebuild"""
    rows = state.LEADERBOARD.refresh()
    return {"success": True, "total_teams": len(rows)}

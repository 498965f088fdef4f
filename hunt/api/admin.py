"""
Admin endpoints for teams and the pass key
"""
import logging

from fastapi import APIRouter, HTTPException

from hunt import state
from hunt.config import update_settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/teams")
async def add_team(payload: dict):
    """
    Admin: Create a team

    Request:
        {"username": "team7", "team_name": "Seven Seas"}
    """
    username = payload.get("username")
    team_name = payload.get("team_name") or payload.get("teamName")
    if not username or not team_name:
        raise HTTPException(status_code=400, detail="username and team_name are required")

    team = state.TEAMS.add_team(username, team_name)
    return {
        "success": True,
        "team": team.model_dump(mode="json"),
        "message": f"Team {team.team_name} created"
    }


@router.get("/teams")
async def list_teams():
    """All teams with their current submission state"""
    teams = state.LEADERBOARD.team_overview()
    return {
        "teams": teams,
        "total_teams": len(teams),
        "final_submissions": sum(1 for t in teams if t["status"] == "FINAL")
    }


@router.patch("/teams/{team_id}")
async def update_team(team_id: str, payload: dict):
    """
    Admin: Edit username and/or display name

    Request:
        {"username": "...", "team_name": "..."}  # either key optional
    """
    if "username" not in payload and "team_name" not in payload:
        raise HTTPException(status_code=400, detail="username or team_name required")

    team = state.TEAMS.update_team(
        team_id,
        username=payload.get("username"),
        team_name=payload.get("team_name")
    )
    return {"success": True, "team": team.model_dump(mode="json")}


@router.delete("/teams/{team_id}")
async def delete_team(team_id: str):
    """Admin: Delete a team and all its submissions"""
    removed = state.TEAMS.delete_team(team_id)
    return {
        "success": True,
        "team_id": team_id,
        "removed_submissions": removed
    }


@router.put("/pass-key")
async def set_pass_key(payload: dict):
    """
    Admin: Publish a new pass key

    Request:
        {"pass_key": "ABCDEFGHIJ"}
    """
    value = payload.get("pass_key") or payload.get("value")
    if value is None:
        raise HTTPException(status_code=400, detail="pass_key required")

    record = state.PASS_KEYS.set_key(value)
    return {
        "success": True,
        "version": record.id,
        "created_at": record.created_at.isoformat(),
        "message": "Pass key updated"
    }


@router.get("/pass-key")
async def get_pass_key():
    record = state.PASS_KEYS.get_current_key()
    if record is None:
        return {"pass_key": None, "version": None, "created_at": None}
    return {
        "pass_key": record.value,
        "version": record.id,
        "created_at": record.created_at.isoformat()
    }


@router.get("/pass-key/history")
async def pass_key_history():
    """Every published pass key, oldest first"""
    return {"keys": [r.model_dump(mode="json") for r in state.PASS_KEYS.history()]}


@router.put("/settings/case-policy")
async def set_case_policy(payload: dict):
    """
    Admin: Change how answers are compared with the pass key

    Request:
        {"case_policy": "upper" | "lower" | "exact"}
    """
    case_policy = payload.get("case_policy")
    if not case_policy:
        raise HTTPException(status_code=400, detail="case_policy required")

    try:
        settings = update_settings({"case_policy": case_policy})
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    state.SETTINGS = state.SETTINGS.model_copy(update={"case_policy": settings.case_policy})
    state.LEADERBOARD.case_policy = settings.case_policy
    state.LEADERBOARD.refresh()
    logger.info(f"Case policy set to {settings.case_policy}")
    return {"success": True, "case_policy": settings.case_policy}

"""
Configuration endpoints
"""
from fastapi import APIRouter

from hunt import state


router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config():
    """Current server settings"""
    return {
        "settings": state.SETTINGS.model_dump(),
        "snapshot_writes": state.SNAPSHOT_WRITER.writes if state.SNAPSHOT_WRITER else 0
    }

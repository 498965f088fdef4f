"""
Team-facing endpoints: autosave, drafts, final submission, progress

team_id is trusted as supplied; authentication happens upstream.
"""
import logging

from fastapi import APIRouter, HTTPException

from hunt import state
from hunt.models import QUESTION_COUNT


router = APIRouter(prefix="/teams", tags=["submission"])
logger = logging.getLogger(__name__)


def _submission_response(submission) -> dict:
    return {
        "team_id": submission.team_id,
        "answers": submission.answers,
        "is_final": submission.is_final,
        "status": submission.status.value,
        "answered_count": submission.answered_count,
        "submitted_at": submission.submitted_at.isoformat()
    }


def _answers_from(payload: dict):
    answers = payload.get("answers")
    if answers is None:
        raise HTTPException(status_code=400, detail="answers required")
    return answers


@router.put("/{team_id}/answers/{question_index}")
async def set_answer(team_id: str, question_index: int, payload: dict):
    """
    Autosave a single answer

    Request:
        {"value": "Z"}   # "" clears the slot
    """
    state.TEAMS.get_team(team_id)
    submission = state.MACHINE.set_answer(team_id, question_index, payload.get("value", ""))
    return _submission_response(submission)


@router.put("/{team_id}/draft")
async def save_draft(team_id: str, payload: dict):
    """
    Save all answers as draft

    Request:
        {"answers": ["A", "", "C", ...]}  # exactly 10 slots
    """
    state.TEAMS.get_team(team_id)
    submission = state.MACHINE.save_draft(team_id, _answers_from(payload))
    return {
        **_submission_response(submission),
        "message": "Your answers have been saved as draft."
    }


@router.post("/{team_id}/submit")
async def submit_final(team_id: str, payload: dict):
    """
    Final submission; no changes are accepted afterwards

    Request:
        {"answers": ["A", "B", ...]}  # all 10 slots filled
    """
    state.TEAMS.get_team(team_id)
    submission = state.MACHINE.submit_final(team_id, _answers_from(payload))
    return {
        **_submission_response(submission),
        "message": "Your final answers have been submitted successfully."
    }


@router.get("/{team_id}/submission")
async def get_submission(team_id: str):
    state.TEAMS.get_team(team_id)
    submission = state.MACHINE.get_current(team_id)
    if submission is None:
        return {
            "team_id": team_id,
            "answers": [""] * QUESTION_COUNT,
            "is_final": False,
            "status": "NO_SUBMISSION",
            "answered_count": 0,
            "submitted_at": None
        }
    return _submission_response(submission)


@router.get("/{team_id}/progress")
async def get_progress(team_id: str):
    team = state.TEAMS.get_team(team_id)
    progress = state.LEADERBOARD.team_progress(team_id)
    return {"team_name": team.team_name, **progress.model_dump(mode="json")}

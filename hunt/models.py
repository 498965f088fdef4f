"""
Data models for the treasure hunt server
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Number of questions, which is also the pass key length
QUESTION_COUNT = 10

CASE_POLICIES = ("upper", "lower", "exact")


def empty_answers() -> List[str]:
    return [""] * QUESTION_COUNT


class SubmissionStatus(str, Enum):
    NO_SUBMISSION = "NO_SUBMISSION"
    DRAFT = "DRAFT"
    FINAL = "FINAL"


class Team(BaseModel):
    """Team identity record (credentials live elsewhere)"""
    id: str
    username: str
    team_name: str
    created_at: datetime


class Submission(BaseModel):
    """Current answer set of one team"""
    team_id: str
    answers: List[str] = Field(default_factory=empty_answers)
    is_final: bool = False
    submitted_at: datetime

    @field_validator("answers")
    @classmethod
    def check_slots(cls, value: List[str]) -> List[str]:
        if len(value) != QUESTION_COUNT:
            raise ValueError(f"answers must have exactly {QUESTION_COUNT} slots, got {len(value)}")
        for slot in value:
            if len(slot) > 1:
                raise ValueError(f"each slot holds at most one character, got {slot!r}")
        return value

    @property
    def status(self) -> SubmissionStatus:
        return SubmissionStatus.FINAL if self.is_final else SubmissionStatus.DRAFT

    @property
    def answered_count(self) -> int:
        return sum(1 for slot in self.answers if slot)


class ReferenceKey(BaseModel):
    """One published pass key; never mutated after creation"""
    model_config = ConfigDict(frozen=True)

    id: int                   # surrogate id, breaks created_at ties
    value: str
    created_at: datetime


class SlotResult(BaseModel):
    """Per-question comparison used by the admin report"""
    index: int
    answer: str
    expected: str
    status: str  # "correct" | "wrong" | "empty"


class LeaderboardRow(BaseModel):
    """Derived ranking entry; recomputed on every query, never stored"""
    team_id: str
    team_name: str
    answered_key: str          # empty slots omitted
    answered_count: int
    accuracy_percentage: float
    band: str
    submitted_at: datetime
    is_final: bool


class LeaderboardSummary(BaseModel):
    total_teams: int = 0
    perfect_scores: int = 0
    final_submissions: int = 0
    average_accuracy: float = 0.0
    top_accuracy: float = 0.0


class TeamProgress(BaseModel):
    """What a team sees on its own progress page"""
    team_id: str
    status: SubmissionStatus
    answers: List[str] = Field(default_factory=empty_answers)
    answered_count: int = 0
    completion_percentage: float = 0.0
    submitted_at: Optional[datetime] = None
    accuracy_percentage: Optional[float] = None  # only once final
    rank: Optional[int] = None                   # only once final


class HuntSettings(BaseModel):
    """Server settings loaded from config/hunt.yaml"""
    question_count: int = QUESTION_COUNT
    case_policy: str = "upper"
    snapshot_path: Optional[str] = None
    keep_history: bool = True
    log_level: str = "INFO"

    @field_validator("question_count")
    @classmethod
    def check_question_count(cls, value: int) -> int:
        if value != QUESTION_COUNT:
            raise ValueError(f"question_count is fixed at {QUESTION_COUNT}")
        return value

    @field_validator("case_policy")
    @classmethod
    def check_case_policy(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in CASE_POLICIES:
            raise ValueError(f"case_policy must be one of {', '.join(CASE_POLICIES)}")
        return value

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        return value.strip().upper()

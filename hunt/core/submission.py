"""
Submission state machine

    NO_SUBMISSION -> DRAFT -> DRAFT -> ... -> FINAL (terminal)

Every mutation is a read-modify-write done under the team's own lock, so two
concurrent single-slot updates for one team never lose each other. Different
teams never share a lock. The team registry takes the same lock to delete a
team, so a write either lands before the delete (and is removed with it) or
sees the team gone.
"""
import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from hunt.core.store import SubmissionStore, utcnow
from hunt.errors import FinalizedError, IncompleteError, NotFoundError, ValidationError, storage_call
from hunt.models import QUESTION_COUNT, Submission, SubmissionStatus, empty_answers


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TeamLocks:
    """Lazily created lock per team_id"""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def for_team(self, team_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(team_id)
            if lock is None:
                lock = self._locks[team_id] = threading.Lock()
            return lock


def validate_char(char) -> str:
    """A slot value is "" or exactly one character"""
    if char is None:
        return ""
    if not isinstance(char, str):
        raise ValidationError(f"Answer must be a string, got {type(char).__name__}")
    if len(char) > 1:
        raise ValidationError(f"Answer must be a single character, got {len(char)} characters")
    return char


def validate_index(question_index) -> int:
    if isinstance(question_index, bool) or not isinstance(question_index, int):
        raise ValidationError(f"Question index must be an integer, got {question_index!r}")
    if not 0 <= question_index < QUESTION_COUNT:
        raise ValidationError(
            f"Question index must be in 0..{QUESTION_COUNT - 1}, got {question_index}"
        )
    return question_index


def validate_answers(answers) -> List[str]:
    if answers is None or isinstance(answers, str) or not isinstance(answers, Sequence):
        raise ValidationError("answers must be a list of single characters")
    if len(answers) != QUESTION_COUNT:
        raise ValidationError(f"answers must have exactly {QUESTION_COUNT} slots, got {len(answers)}")
    return [validate_char(char) for char in answers]


class SubmissionStateMachine:
    """Legal transitions of a team's submission"""

    def __init__(
        self,
        store: SubmissionStore,
        clock: Clock = utcnow,
        locks: Optional[TeamLocks] = None,
        team_exists: Optional[Callable[[str], bool]] = None
    ):
        self.store = store
        self.clock = clock
        # Shared with the team registry so deletes serialize with writes
        self.locks = locks or TeamLocks()
        # None trusts every team_id
        self.team_exists = team_exists

    def get_current(self, team_id: str) -> Optional[Submission]:
        """Team's current submission or None"""
        with storage_call("get_latest_submission"):
            return self.store.get_latest_submission(team_id)

    def status(self, team_id: str) -> SubmissionStatus:
        current = self.get_current(team_id)
        return current.status if current else SubmissionStatus.NO_SUBMISSION

    def set_answer(self, team_id: str, question_index: int, char: str) -> Submission:
        """
        Autosave one slot

        Creates the draft on first use. Only the targeted slot changes.

        Args:
            team_id: Team ID (trusted, authenticated upstream)
            question_index: 0..9
            char: "" to clear, or one character

        Returns:
            The persisted draft

        Raises:
            ValidationError: bad index or character
            FinalizedError: submission already final
            NotFoundError: team not registered
        """
        question_index = validate_index(question_index)
        char = validate_char(char)

        with self.locks.for_team(team_id):
            self._ensure_registered(team_id, "set_answer")
            current = self.get_current(team_id)
            self._ensure_mutable(team_id, current, "set_answer")

            answers = list(current.answers) if current else empty_answers()
            answers[question_index] = char
            saved = self._persist(team_id, answers, is_final=False)

        logger.debug(f"Team {team_id} | Q{question_index + 1} = {char!r}")
        return saved

    def save_draft(self, team_id: str, answers: Sequence[str]) -> Submission:
        """
        Bulk upsert all 10 slots as a draft

        Raises:
            ValidationError: malformed answers
            FinalizedError: submission already final
            NotFoundError: team not registered
        """
        answers = validate_answers(answers)

        with self.locks.for_team(team_id):
            self._ensure_registered(team_id, "save_draft")
            current = self.get_current(team_id)
            self._ensure_mutable(team_id, current, "save_draft")
            saved = self._persist(team_id, answers, is_final=False)

        logger.info(f"💾 Team {team_id} | Draft saved ({saved.answered_count}/{QUESTION_COUNT} answered)")
        return saved

    def submit_final(self, team_id: str, answers: Sequence[str]) -> Submission:
        """
        Freeze the team's answers

        One-way: once this succeeds no further mutation is accepted.

        Raises:
            ValidationError: malformed answers
            FinalizedError: submission already final
            IncompleteError: some slot is empty (nothing is persisted)
            NotFoundError: team not registered
        """
        answers = validate_answers(answers)

        with self.locks.for_team(team_id):
            self._ensure_registered(team_id, "submit_final")
            current = self.get_current(team_id)
            self._ensure_mutable(team_id, current, "submit_final")

            empty_slots = [i for i, char in enumerate(answers) if not char]
            if empty_slots:
                logger.warning(f"⚠️ Team {team_id} | Final submission rejected, empty slots {empty_slots}")
                raise IncompleteError(
                    f"Answer all {QUESTION_COUNT} questions before submitting",
                    empty_slots=empty_slots
                )

            saved = self._persist(team_id, answers, is_final=True)

        logger.info(f"✅ Team {team_id} | Final submission recorded")
        return saved

    def _ensure_registered(self, team_id: str, operation: str) -> None:
        if self.team_exists is not None and not self.team_exists(team_id):
            logger.warning(f"⚠️ Team {team_id} | {operation} rejected, team not registered")
            raise NotFoundError(f"Team {team_id} not found")

    def _ensure_mutable(self, team_id: str, current: Optional[Submission], operation: str) -> None:
        if current and current.is_final:
            logger.warning(f"⚠️ Team {team_id} | {operation} rejected, submission is final")
            raise FinalizedError("Final answers already submitted and cannot be changed")

    def _persist(self, team_id: str, answers: List[str], is_final: bool) -> Submission:
        with storage_call("upsert_submission"):
            return self.store.upsert_submission(team_id, answers, is_final, self.clock())

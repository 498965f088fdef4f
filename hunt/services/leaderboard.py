"""
Leaderboard service - Assemble and cache leaderboard data

Writes to any store push an invalidation through the ChangeNotifier; the next
read rebuilds the board. Readers never lock anything beyond the stores.
"""
import logging
import threading
from typing import Dict, List, NamedTuple, Optional

from hunt.core.events import ChangeEvent, ChangeNotifier
from hunt.core.leaderboard import build_leaderboard, latest_per_team, rank_of, summarize
from hunt.core.passkey import PassKeyService
from hunt.core.scoring import answer_breakdown, score
from hunt.core.store import SubmissionStore
from hunt.errors import storage_call
from hunt.models import QUESTION_COUNT, LeaderboardRow, ReferenceKey, SubmissionStatus, TeamProgress
from hunt.services.team_registry import TeamRegistry


logger = logging.getLogger(__name__)


class Board(NamedTuple):
    """Ranked rows plus the exact inputs they were scored from"""
    rows: List[LeaderboardRow]
    answers: Dict[str, List[str]]    # team_id -> answers behind each row
    key: Optional[ReferenceKey]
    case_policy: str


class LeaderboardService:
    def __init__(
        self,
        submissions: SubmissionStore,
        passkeys: PassKeyService,
        teams: TeamRegistry,
        notifier: Optional[ChangeNotifier] = None,
        case_policy: str = "upper"
    ):
        self.submissions = submissions
        self.passkeys = passkeys
        self.teams = teams
        self.case_policy = case_policy
        self._board: Optional[Board] = None
        self._version = 0
        self._lock = threading.Lock()
        if notifier:
            notifier.subscribe(self.on_change)

    def on_change(self, event: ChangeEvent) -> None:
        with self._lock:
            self._board = None
            self._version += 1

    def board(self) -> Board:
        """Cached board, rebuilt if anything changed since the last build"""
        with self._lock:
            board, version = self._board, self._version
        if board is not None:
            return board

        board = self._build()
        with self._lock:
            # Only cache if nothing changed while building
            if self._version == version:
                self._board = board
        return board

    def rows(self) -> List[LeaderboardRow]:
        return list(self.board().rows)

    def refresh(self) -> List[LeaderboardRow]:
        """Manual refresh: drop the cache and rebuild"""
        with self._lock:
            self._board = None
            self._version += 1
        return self.rows()

    def get_leaderboard_data(self) -> Dict:
        """
        Get leaderboard data for display

        Rows, breakdowns and pass key all come from one board, so every
        breakdown agrees with its row's accuracy.

        Returns:
            Rows with per-slot breakdown, summary and the current pass key
        """
        board = self.board()
        key_value = board.key.value if board.key else None

        teams = []
        for rank, row in enumerate(board.rows, start=1):
            entry = row.model_dump(mode="json")
            entry["rank"] = rank
            entry["breakdown"] = [
                slot.model_dump()
                for slot in answer_breakdown(board.answers[row.team_id], key_value, board.case_policy)
            ]
            teams.append(entry)

        return {
            "pass_key": key_value,
            "pass_key_version": board.key.id if board.key else None,
            "summary": summarize(board.rows).model_dump(),
            "teams": teams,
            "total_teams": len(teams)
        }

    def team_progress(self, team_id: str) -> TeamProgress:
        """
        Progress view of one team

        Accuracy and rank are revealed only after the final submission.
        """
        with storage_call("get_latest_submission"):
            submission = self.submissions.get_latest_submission(team_id)

        if submission is None:
            return TeamProgress(team_id=team_id, status=SubmissionStatus.NO_SUBMISSION)

        progress = TeamProgress(
            team_id=team_id,
            status=submission.status,
            answers=submission.answers,
            answered_count=submission.answered_count,
            completion_percentage=round(submission.answered_count / QUESTION_COUNT * 100, 2),
            submitted_at=submission.submitted_at
        )
        if submission.is_final:
            progress.accuracy_percentage = score(
                submission.answers, self.passkeys.current_value(), self.case_policy
            )
            progress.rank = rank_of(self.rows(), team_id)
        return progress

    def team_overview(self) -> List[Dict]:
        """
        Admin team list: identity plus submission state

        Accuracy is reported for final submissions only.
        """
        key_value = self.passkeys.current_value()
        overview = []
        for team in self.teams.list_teams():
            with storage_call("history"):
                history = self.submissions.history(team.id)
                latest = self.submissions.get_latest_submission(team.id)

            accuracy = None
            if latest and latest.is_final:
                accuracy = score(latest.answers, key_value, self.case_policy)

            entry = team.model_dump(mode="json")
            entry.update({
                "submission_count": len(history),
                "status": latest.status.value if latest else SubmissionStatus.NO_SUBMISSION.value,
                "answered_count": latest.answered_count if latest else 0,
                "accuracy_percentage": accuracy,
                "submitted_at": latest.submitted_at.isoformat() if latest else None
            })
            overview.append(entry)
        return overview

    def _build(self) -> Board:
        with storage_call("list_latest_submissions_per_team"):
            submissions = self.submissions.list_latest_submissions_per_team()
        key = self.passkeys.get_current_key()

        latest = latest_per_team(submissions)
        rows = build_leaderboard(
            latest.values(),
            key.value if key else None,
            team_names=self.teams.team_names(),
            case_policy=self.case_policy
        )
        answers = {team_id: list(submission.answers) for team_id, submission in latest.items()}
        logger.debug(f"Leaderboard rebuilt with {len(rows)} teams")
        return Board(rows=rows, answers=answers, key=key, case_policy=self.case_policy)

"""
Leaderboard aggregation

Pure reduction over submissions: one row per team, scored against the
current pass key, sorted by accuracy (desc) then submission time (asc).
Rank is the 1-based position in the returned list.
"""
from typing import Dict, Iterable, List, Mapping, Optional

from hunt.core.scoring import accuracy_band, score
from hunt.models import LeaderboardRow, LeaderboardSummary, Submission


def latest_per_team(submissions: Iterable[Submission]) -> Dict[str, Submission]:
    """
    Keep the newest submission of each team

    Drafts and finals are both eligible. On identical timestamps the one that
    appears later in the input wins.
    """
    latest: Dict[str, Submission] = {}
    for submission in submissions:
        seen = latest.get(submission.team_id)
        if seen is None or submission.submitted_at >= seen.submitted_at:
            latest[submission.team_id] = submission
    return latest


def build_leaderboard(
    submissions: Iterable[Submission],
    reference_key: Optional[str],
    team_names: Optional[Mapping[str, str]] = None,
    case_policy: str = "upper"
) -> List[LeaderboardRow]:
    """
    Ranked leaderboard rows

    Inputs are not mutated; calling this repeatedly is safe.

    Args:
        submissions: Any number of submissions, possibly several per team
        reference_key: Current pass key value, None if unset
        team_names: team_id -> display name (falls back to team_id)
        case_policy: Normalization used by the scoring engine

    Returns:
        Rows in rank order
    """
    team_names = team_names or {}
    rows = []

    for team_id, submission in latest_per_team(submissions).items():
        accuracy = score(submission.answers, reference_key, case_policy)
        rows.append(LeaderboardRow(
            team_id=team_id,
            team_name=team_names.get(team_id, team_id),
            answered_key="".join(slot for slot in submission.answers if slot),
            answered_count=submission.answered_count,
            accuracy_percentage=accuracy,
            band=accuracy_band(accuracy),
            submitted_at=submission.submitted_at,
            is_final=submission.is_final
        ))

    # Sort by accuracy (desc), then time (asc); team_id keeps exact ties stable
    rows.sort(key=lambda r: (-r.accuracy_percentage, r.submitted_at, r.team_id))
    return rows


def rank_of(rows: List[LeaderboardRow], team_id: str) -> Optional[int]:
    for position, row in enumerate(rows, start=1):
        if row.team_id == team_id:
            return position
    return None


def summarize(rows: List[LeaderboardRow]) -> LeaderboardSummary:
    """Headline numbers shown above the leaderboard"""
    if not rows:
        return LeaderboardSummary()

    accuracies = [row.accuracy_percentage for row in rows]
    return LeaderboardSummary(
        total_teams=len(rows),
        perfect_scores=sum(1 for a in accuracies if a == 100),
        final_submissions=sum(1 for row in rows if row.is_final),
        average_accuracy=round(sum(accuracies) / len(accuracies), 2),
        top_accuracy=max(accuracies)
    )

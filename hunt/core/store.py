"""
In-process stores for submissions and pass keys

SubmissionStore holds exactly one current record per team (keyed map) with an
optional append-only history behind it. ReferenceKeyStore keeps every pass key
ever published; the latest one is authoritative.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from hunt.core.events import REFERENCE_KEY, SUBMISSION, ChangeEvent, ChangeNotifier
from hunt.models import ReferenceKey, Submission


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionStore:
    """team_id -> current Submission, plus per-team history"""

    def __init__(self, notifier: Optional[ChangeNotifier] = None, keep_history: bool = True):
        self.notifier = notifier
        self.keep_history = keep_history
        self._current: Dict[str, Submission] = {}
        self._history: Dict[str, List[Submission]] = {}
        self._lock = threading.Lock()

    def upsert_submission(
        self,
        team_id: str,
        answers: Sequence[str],
        is_final: bool,
        submitted_at: Optional[datetime] = None
    ) -> Submission:
        """
        Overwrite the team's current submission

        Args:
            team_id: Team ID
            answers: All 10 slots
            is_final: Finality flag
            submitted_at: Timestamp (defaults to now)

        Returns:
            Copy of the stored record
        """
        record = Submission(
            team_id=team_id,
            answers=list(answers),
            is_final=is_final,
            submitted_at=submitted_at or utcnow()
        )
        with self._lock:
            self._current[team_id] = record
            if self.keep_history:
                self._history.setdefault(team_id, []).append(record.model_copy(deep=True))

        self._notify(team_id)
        return record.model_copy(deep=True)

    def get_latest_submission(self, team_id: str) -> Optional[Submission]:
        with self._lock:
            record = self._current.get(team_id)
            return record.model_copy(deep=True) if record else None

    def list_latest_submissions_per_team(self) -> List[Submission]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._current.values()]

    def history(self, team_id: str) -> List[Submission]:
        """Every persisted write for a team, oldest first"""
        with self._lock:
            return [record.model_copy(deep=True) for record in self._history.get(team_id, [])]

    def delete_team(self, team_id: str) -> int:
        """
        Drop a team's current record and history

        Returns:
            Number of submission records removed (history length, or 1
            when only the current record was kept)
        """
        with self._lock:
            current = self._current.pop(team_id, None)
            history = self._history.pop(team_id, [])
        removed = len(history) or (1 if current else 0)

        if removed:
            self._notify(team_id)
        return removed

    def dump(self) -> dict:
        with self._lock:
            return {
                "current": [r.model_dump(mode="json") for r in self._current.values()],
                "history": {
                    team_id: [r.model_dump(mode="json") for r in records]
                    for team_id, records in self._history.items()
                },
            }

    def load(self, data: dict) -> None:
        """Replace contents with a dump() payload"""
        current = [Submission(**item) for item in data.get("current", [])]
        history = {
            team_id: [Submission(**item) for item in records]
            for team_id, records in (data.get("history") or {}).items()
        }
        with self._lock:
            self._current = {record.team_id: record for record in current}
            self._history = history
        logger.info(f"Loaded {len(current)} submissions")

    def _notify(self, team_id: Optional[str]) -> None:
        if self.notifier:
            self.notifier.publish(ChangeEvent(topic=SUBMISSION, team_id=team_id))


class ReferenceKeyStore:
    """Append-only versions of the pass key"""

    def __init__(self, notifier: Optional[ChangeNotifier] = None):
        self.notifier = notifier
        self._records: List[ReferenceKey] = []
        self._latest: Optional[ReferenceKey] = None
        self._next_id = 1
        self._lock = threading.Lock()

    def create_reference_key(self, value: str, created_at: Optional[datetime] = None) -> ReferenceKey:
        """
        Publish a new pass key version

        The record is built in full before it becomes visible to readers.
        """
        created_at = created_at or utcnow()
        with self._lock:
            record = ReferenceKey(id=self._next_id, value=value, created_at=created_at)
            self._next_id += 1
            self._records.append(record)
            if self._latest is None or _key_order(record) > _key_order(self._latest):
                self._latest = record

        if self.notifier:
            self.notifier.publish(ChangeEvent(topic=REFERENCE_KEY))
        return record

    def get_latest_reference_key(self) -> Optional[ReferenceKey]:
        """Max created_at wins; identical timestamps resolve to the highest id"""
        with self._lock:
            return self._latest

    def history(self) -> List[ReferenceKey]:
        with self._lock:
            return sorted(self._records, key=_key_order)

    def dump(self) -> dict:
        with self._lock:
            return {"keys": [r.model_dump(mode="json") for r in self._records]}

    def load(self, data: dict) -> None:
        records = [ReferenceKey(**item) for item in data.get("keys", [])]
        with self._lock:
            self._records = records
            self._latest = max(records, key=_key_order) if records else None
            self._next_id = max((r.id for r in records), default=0) + 1
        logger.info(f"Loaded {len(records)} pass key versions")


def _key_order(record: ReferenceKey):
    return (record.created_at, record.id)

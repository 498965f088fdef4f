"""
YAML snapshots of teams, submissions and pass keys

The writer rewrites the whole file on every change event. Data is small
(one row per team, 10 characters each), so a full rewrite is fine.
"""
import logging
import os
import threading
from pathlib import Path
from typing import Optional

import yaml

from hunt.core.events import ChangeEvent
from hunt.core.store import ReferenceKeyStore, SubmissionStore
from hunt.services.team_registry import TeamRegistry


logger = logging.getLogger(__name__)


def build_snapshot(teams: TeamRegistry, submissions: SubmissionStore, keys: ReferenceKeyStore) -> dict:
    return {
        "teams": teams.dump()["teams"],
        "submissions": submissions.dump(),
        "pass_keys": keys.dump()["keys"],
    }


def write_snapshot(path: str, data: dict) -> None:
    """Write to a temp file then swap it in, so readers never see half a file"""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(target.suffix + ".tmp")

    with open(tmp, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True)
    os.replace(tmp, target)


def load_snapshot(
    path: str,
    teams: TeamRegistry,
    submissions: SubmissionStore,
    keys: ReferenceKeyStore
) -> bool:
    """
    Restore all stores from a snapshot file

    Returns:
        False if the file does not exist yet
    """
    target = Path(path)
    if not target.exists():
        logger.info(f"No snapshot at {target}, starting empty")
        return False

    with open(target, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    teams.load({"teams": data.get("teams", [])})
    submissions.load(data.get("submissions") or {})
    keys.load({"keys": data.get("pass_keys", [])})
    logger.info(f"✅ Restored snapshot from {target}")
    return True


class SnapshotWriter:
    """ChangeNotifier subscriber that persists every change"""

    def __init__(
        self,
        path: str,
        teams: TeamRegistry,
        submissions: SubmissionStore,
        keys: ReferenceKeyStore
    ):
        self.path = path
        self.teams = teams
        self.submissions = submissions
        self.keys = keys
        self._lock = threading.Lock()
        self.writes = 0

    def __call__(self, event: Optional[ChangeEvent] = None) -> None:
        with self._lock:
            write_snapshot(self.path, build_snapshot(self.teams, self.submissions, self.keys))
            self.writes += 1

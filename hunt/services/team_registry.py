"""Team registration and management"""
import logging
import threading
import uuid
from typing import Dict, List, Optional

from hunt.core.events import TEAM, ChangeEvent, ChangeNotifier
from hunt.core.store import SubmissionStore, utcnow
from hunt.core.submission import TeamLocks
from hunt.errors import NotFoundError, ValidationError, storage_call
from hunt.models import Team


logger = logging.getLogger(__name__)


def _generate_team_id(team_name: str) -> str:
    slug = team_name.strip().lower().replace(' ', '-')[:20]
    unique_suffix = uuid.uuid4().hex[:6]
    return f"team-{slug}-{unique_suffix}" if slug else f"team-{unique_suffix}"


def _clean(value: Optional[str], field: str) -> str:
    clean = (value or "").strip()
    if not clean:
        raise ValidationError(f"{field} required")
    return clean


class TeamRegistry:
    def __init__(
        self,
        submissions: SubmissionStore,
        notifier: Optional[ChangeNotifier] = None,
        locks: Optional[TeamLocks] = None
    ):
        self.submissions = submissions
        self.notifier = notifier
        # Same per-team locks as the submission state machine
        self.locks = locks or TeamLocks()
        self._teams: Dict[str, Team] = {}
        self._lock = threading.Lock()

    def add_team(self, username: str, team_name: str) -> Team:
        username = _clean(username, "username")
        team_name = _clean(team_name, "team_name")

        with self._lock:
            self._check_username_free(username)
            team = Team(
                id=_generate_team_id(team_name),
                username=username,
                team_name=team_name,
                created_at=utcnow()
            )
            self._teams[team.id] = team

        logger.info(f"👥 Team added: {team.team_name} ({team.id})")
        self._notify(team.id)
        return team

    def get_team(self, team_id: str) -> Team:
        with self._lock:
            team = self._teams.get(team_id)
        if team is None:
            raise NotFoundError(f"Team {team_id} not found")
        return team

    def exists(self, team_id: str) -> bool:
        with self._lock:
            return team_id in self._teams

    def list_teams(self) -> List[Team]:
        with self._lock:
            return sorted(self._teams.values(), key=lambda t: (t.created_at, t.id))

    def team_names(self) -> Dict[str, str]:
        with self._lock:
            return {team_id: team.team_name for team_id, team in self._teams.items()}

    def update_team(
        self,
        team_id: str,
        username: Optional[str] = None,
        team_name: Optional[str] = None
    ) -> Team:
        """Only username and display name are editable"""
        changes = {}
        if username is not None:
            changes["username"] = _clean(username, "username")
        if team_name is not None:
            changes["team_name"] = _clean(team_name, "team_name")

        with self._lock:
            team = self._teams.get(team_id)
            if team is None:
                raise NotFoundError(f"Team {team_id} not found")
            if "username" in changes:
                self._check_username_free(changes["username"], exclude=team_id)
            team = team.model_copy(update=changes)
            self._teams[team_id] = team

        logger.info(f"✏️ Team updated: {team_id} {sorted(changes)}")
        self._notify(team_id)
        return team

    def delete_team(self, team_id: str) -> int:
        """
        Remove a team and everything it submitted

        Runs under the team lock, so a write already in flight finishes
        first and is removed too; later writes see the team gone.

        Returns:
            Number of submission records removed
        """
        with self.locks.for_team(team_id):
            with self._lock:
                if self._teams.pop(team_id, None) is None:
                    raise NotFoundError(f"Team {team_id} not found")

            with storage_call("delete_team"):
                removed = self.submissions.delete_team(team_id)

        logger.info(f"🗑️ Team deleted: {team_id} ({removed} submission records)")
        self._notify(team_id)
        return removed

    def dump(self) -> dict:
        with self._lock:
            return {"teams": [t.model_dump(mode="json") for t in self._teams.values()]}

    def load(self, data: dict) -> None:
        teams = [Team(**item) for item in data.get("teams", [])]
        with self._lock:
            self._teams = {team.id: team for team in teams}
        logger.info(f"Loaded {len(teams)} teams")

    def _check_username_free(self, username: str, exclude: Optional[str] = None) -> None:
        wanted = username.lower()
        for team in self._teams.values():
            if team.id != exclude and team.username.lower() == wanted:
                raise ValidationError(f"Username {username} already taken")

    def _notify(self, team_id: str) -> None:
        if self.notifier:
            self.notifier.publish(ChangeEvent(topic=TEAM, team_id=team_id))

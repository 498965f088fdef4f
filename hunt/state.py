"""
Global application state
Shared resources accessible across all API modules
"""
import logging
from typing import Optional

from hunt.core.events import ChangeNotifier
from hunt.core.passkey import PassKeyService
from hunt.core.store import ReferenceKeyStore, SubmissionStore
from hunt.core.submission import SubmissionStateMachine, TeamLocks
from hunt.models import HuntSettings
from hunt.services.leaderboard import LeaderboardService
from hunt.services.snapshot import SnapshotWriter, load_snapshot
from hunt.services.team_registry import TeamRegistry


logger = logging.getLogger(__name__)

SETTINGS: HuntSettings = HuntSettings()

# Fires on every write; leaderboard cache and snapshot writer listen
NOTIFIER: ChangeNotifier = None

SUBMISSIONS: SubmissionStore = None
REFERENCE_KEYS: ReferenceKeyStore = None

MACHINE: SubmissionStateMachine = None
PASS_KEYS: PassKeyService = None
TEAMS: TeamRegistry = None
LEADERBOARD: LeaderboardService = None

SNAPSHOT_WRITER: Optional[SnapshotWriter] = None


def init_state(settings: Optional[HuntSettings] = None) -> None:
    """(Re)build every shared component from settings"""
    global SETTINGS, NOTIFIER, SUBMISSIONS, REFERENCE_KEYS
    global MACHINE, PASS_KEYS, TEAMS, LEADERBOARD, SNAPSHOT_WRITER

    SETTINGS = settings or HuntSettings()
    NOTIFIER = ChangeNotifier()

    SUBMISSIONS = SubmissionStore(NOTIFIER, keep_history=SETTINGS.keep_history)
    REFERENCE_KEYS = ReferenceKeyStore(NOTIFIER)

    locks = TeamLocks()
    TEAMS = TeamRegistry(SUBMISSIONS, NOTIFIER, locks=locks)
    MACHINE = SubmissionStateMachine(SUBMISSIONS, locks=locks, team_exists=TEAMS.exists)
    PASS_KEYS = PassKeyService(REFERENCE_KEYS)
    LEADERBOARD = LeaderboardService(
        SUBMISSIONS, PASS_KEYS, TEAMS, NOTIFIER, case_policy=SETTINGS.case_policy
    )

    SNAPSHOT_WRITER = None
    if SETTINGS.snapshot_path:
        # Restore before subscribing so loading does not trigger a rewrite
        load_snapshot(SETTINGS.snapshot_path, TEAMS, SUBMISSIONS, REFERENCE_KEYS)
        SNAPSHOT_WRITER = SnapshotWriter(SETTINGS.snapshot_path, TEAMS, SUBMISSIONS, REFERENCE_KEYS)
        NOTIFIER.subscribe(SNAPSHOT_WRITER)

    logger.info(f"State initialized (case_policy={SETTINGS.case_policy}, snapshot={SETTINGS.snapshot_path})")


init_state()

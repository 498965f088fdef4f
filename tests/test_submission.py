"""
Tests for the submission state machine
"""
import threading
import time

import pytest

from hunt.core.store import SubmissionStore
from hunt.core.submission import SubmissionStateMachine
from hunt.errors import FinalizedError, IncompleteError, StorageError, ValidationError
from hunt.models import SubmissionStatus


FULL = list("ABCDEFGHIJ")


def test_fresh_team_has_no_submission(machine):
    assert machine.get_current("team-1") is None
    assert machine.status("team-1") == SubmissionStatus.NO_SUBMISSION


def test_set_answer_on_fresh_team(machine):
    """Q4 = 'Z' creates a draft with only that slot set"""
    submission = machine.set_answer("team-1", 3, "Z")
    assert submission.answers == ["", "", "", "Z", "", "", "", "", "", ""]
    assert submission.is_final is False
    assert machine.status("team-1") == SubmissionStatus.DRAFT


def test_set_answer_touches_only_target_slot(machine):
    machine.save_draft("team-1", FULL)
    submission = machine.set_answer("team-1", 0, "q")
    assert submission.answers == ["q"] + FULL[1:]


def test_set_answer_empty_clears_slot(machine):
    machine.set_answer("team-1", 2, "C")
    submission = machine.set_answer("team-1", 2, "")
    assert submission.answers[2] == ""


def test_set_answer_refreshes_timestamp(machine):
    first = machine.set_answer("team-1", 0, "A")
    second = machine.set_answer("team-1", 1, "B")
    assert second.submitted_at > first.submitted_at


@pytest.mark.parametrize("char", ["AB", "xyz", 7])
def test_set_answer_rejects_bad_char(machine, char):
    with pytest.raises(ValidationError):
        machine.set_answer("team-1", 0, char)
    assert machine.get_current("team-1") is None


@pytest.mark.parametrize("index", [-1, 10, 42, "3", True])
def test_set_answer_rejects_bad_index(machine, index):
    with pytest.raises(ValidationError):
        machine.set_answer("team-1", index, "A")


def test_save_draft(machine):
    answers = ["A", "", "C", "", "", "", "", "", "", "J"]
    submission = machine.save_draft("team-1", answers)
    assert submission.answers == answers
    assert submission.is_final is False
    assert submission.answered_count == 3


def test_save_draft_overwrites(machine, store):
    machine.save_draft("team-1", FULL)
    machine.save_draft("team-1", [""] * 10)
    assert store.get_latest_submission("team-1").answers == [""] * 10
    assert len(store.list_latest_submissions_per_team()) == 1


@pytest.mark.parametrize("answers", [
    ["A"] * 9,
    ["A"] * 11,
    ["AB"] + ["A"] * 9,
    "ABCDEFGHIJ",
    None,
])
def test_save_draft_rejects_malformed(machine, answers):
    with pytest.raises(ValidationError):
        machine.save_draft("team-1", answers)


def test_submit_final(machine):
    submission = machine.submit_final("team-1", FULL)
    assert submission.is_final is True
    assert submission.answers == FULL
    assert machine.status("team-1") == SubmissionStatus.FINAL


def test_submit_final_incomplete_persists_nothing(machine, store):
    """Empty slot → IncompleteError, store untouched"""
    answers = FULL[:]
    answers[5] = ""
    answers[8] = ""
    with pytest.raises(IncompleteError) as exc_info:
        machine.submit_final("team-1", answers)
    assert exc_info.value.empty_slots == [5, 8]
    assert store.get_latest_submission("team-1") is None


def test_submit_final_incomplete_keeps_draft(machine, store):
    draft = machine.save_draft("team-1", ["A"] + [""] * 9)
    with pytest.raises(IncompleteError):
        machine.submit_final("team-1", ["A"] + [""] * 9)
    assert store.get_latest_submission("team-1") == draft


def test_final_is_terminal(machine, store):
    """After final: set_answer, save_draft, submit_final all fail, answers unchanged"""
    machine.submit_final("team-1", FULL)

    with pytest.raises(FinalizedError):
        machine.set_answer("team-1", 0, "Z")
    with pytest.raises(FinalizedError):
        machine.save_draft("team-1", list("ZZZZZZZZZZ"))
    with pytest.raises(FinalizedError):
        machine.submit_final("team-1", list("ZZZZZZZZZZ"))
    with pytest.raises(FinalizedError):
        machine.submit_final("team-1", FULL)

    current = store.get_latest_submission("team-1")
    assert current.answers == FULL
    assert current.is_final is True


def test_submit_final_from_draft_same_answers(machine):
    """Re-submitting identical draft answers only moves the timestamp"""
    draft = machine.save_draft("team-1", FULL)
    final = machine.submit_final("team-1", FULL)
    assert final.answers == draft.answers
    assert final.submitted_at > draft.submitted_at


def test_teams_are_independent(machine):
    machine.submit_final("team-1", FULL)
    submission = machine.set_answer("team-2", 0, "A")
    assert submission.is_final is False


def test_returned_record_is_a_copy(machine, store):
    submission = machine.set_answer("team-1", 0, "A")
    submission.answers[0] = "Z"
    assert store.get_latest_submission("team-1").answers[0] == "A"


class SlowStore(SubmissionStore):
    """Widens the read-modify-write window so races would show"""

    def get_latest_submission(self, team_id):
        record = super().get_latest_submission(team_id)
        time.sleep(0.01)
        return record


def test_concurrent_set_answer_no_lost_update(clock):
    """Parallel single-slot writes for one team all survive"""
    store = SlowStore()
    machine = SubmissionStateMachine(store, clock=clock)
    start = threading.Barrier(10)

    def write(index):
        start.wait()
        machine.set_answer("team-1", index, "ABCDEFGHIJ"[index])

    threads = [threading.Thread(target=write, args=(i,)) for i in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get_latest_submission("team-1").answers == FULL
    assert len(store.history("team-1")) == 10


class BrokenStore(SubmissionStore):
    def upsert_submission(self, *args, **kwargs):
        raise IOError("disk full")


def test_storage_failure_surfaces_as_storage_error(clock):
    machine = SubmissionStateMachine(BrokenStore(), clock=clock)
    with pytest.raises(StorageError) as exc_info:
        machine.set_answer("team-1", 0, "A")
    assert isinstance(exc_info.value.__cause__, IOError)
    assert exc_info.value.kind == "storage"

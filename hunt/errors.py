"""
Error taxonomy for the hunt core

Every error carries a `kind` so callers (and the HTTP layer) can tell them
apart without isinstance chains.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional


logger = logging.getLogger(__name__)


class HuntError(Exception):
    """Base class for recoverable hunt errors"""
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class ValidationError(HuntError):
    """Malformed character, slot index, answer array or key length"""
    kind = "validation"


class FinalizedError(HuntError):
    """Attempted mutation of a final (terminal) submission"""
    kind = "finalized"


class IncompleteError(HuntError):
    """Final submission attempted while some slots are still empty"""
    kind = "incomplete"

    def __init__(self, message: str, empty_slots: Optional[List[int]] = None):
        super().__init__(message)
        self.empty_slots = list(empty_slots or [])

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["empty_slots"] = self.empty_slots
        return data


class NotFoundError(HuntError):
    """Team or record does not exist"""
    kind = "not_found"


class StorageError(HuntError):
    """Persistence collaborator failed; the original error is chained"""
    kind = "storage"


@contextmanager
def storage_call(operation: str) -> Iterator[None]:
    """
    Wrap a call into the persistence collaborator

    HuntErrors pass through untouched, anything else is re-raised as
    StorageError chained from the original. No retries happen here.

    Args:
        operation: Name of the store operation (used in the message)
    """
    try:
        yield
    except HuntError:
        raise
    except Exception as exc:
        logger.error(f"❌ Storage failure during {operation}: {exc}", exc_info=True)
        raise StorageError(f"{operation} failed: {exc}") from exc

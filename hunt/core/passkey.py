"""
Pass key (reference key) management
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from hunt.core.store import ReferenceKeyStore, utcnow
from hunt.errors import ValidationError, storage_call
from hunt.models import QUESTION_COUNT, ReferenceKey


logger = logging.getLogger(__name__)


class PassKeyService:
    """Admin-only writes, frequent reads; only the latest version counts"""

    def __init__(self, store: ReferenceKeyStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    def set_key(self, value: str) -> ReferenceKey:
        """
        Publish a new pass key

        Older versions are kept as an audit trail.

        Raises:
            ValidationError: value is not exactly 10 characters
        """
        if not isinstance(value, str):
            raise ValidationError("Pass key must be a string")

        value = value.strip()
        if len(value) != QUESTION_COUNT:
            raise ValidationError(
                f"Pass key must be exactly {QUESTION_COUNT} characters, got {len(value)}"
            )

        with storage_call("create_reference_key"):
            record = self.store.create_reference_key(value, self.clock())

        logger.info(f"🔑 Pass key version {record.id} published")
        return record

    def get_current_key(self) -> Optional[ReferenceKey]:
        with storage_call("get_latest_reference_key"):
            return self.store.get_latest_reference_key()

    def current_value(self) -> Optional[str]:
        record = self.get_current_key()
        return record.value if record else None

    def history(self) -> List[ReferenceKey]:
        with storage_call("reference_key_history"):
            return self.store.history()

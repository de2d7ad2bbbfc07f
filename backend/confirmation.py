import logging
import threading
from enum import Enum
from typing import Optional

from store import EntryStore

logger = logging.getLogger(__name__)


class DeleteState(str, Enum):
    IDLE = "idle"
    PENDING = "pending_confirmation"
    COMMITTING = "committing"


class DeleteConfirmation:
    """Gate for deleting an entry: request, then confirm or cancel.

    One pending target at a time; a new request replaces it. After confirm the
    flow always ends back in IDLE, whatever the outcome of the delete.
    """

    def __init__(self, store: EntryStore):
        self.store = store
        self.state = DeleteState.IDLE
        self.pending_id: Optional[int] = None
        self.last_failed_id: Optional[int] = None
        # guards state transitions only; never held across the remote delete
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self.state == DeleteState.COMMITTING

    def request(self, entry_id: int) -> None:
        with self._lock:
            if self.busy:
                logger.warning("Delete of %s in flight, ignoring request for %s", self.pending_id, entry_id)
                return
            self.pending_id = entry_id
            self.state = DeleteState.PENDING

    def cancel(self) -> None:
        with self._lock:
            if self.busy:
                return
            self.pending_id = None
            self.state = DeleteState.IDLE

    def confirm(self) -> bool:
        with self._lock:
            if self.state != DeleteState.PENDING:
                return False
            self.state = DeleteState.COMMITTING
            entry_id = self.pending_id
        ok = False
        try:
            ok = self.store.delete(entry_id)
        except Exception:
            logger.exception("Unexpected error deleting mood %s", entry_id)
        finally:
            with self._lock:
                self.state = DeleteState.IDLE
                self.pending_id = None
                self.last_failed_id = None if ok else entry_id
        return ok

import logging
import threading
from datetime import tzinfo
from typing import Dict, List, Optional, Tuple

from database import CollaboratorError, MoodTable
from schemas import MoodEntry
from timeconv import local_to_utc, resolve_timezone

logger = logging.getLogger(__name__)


class InvalidEntry(ValueError):
    """Form input rejected before anything was sent to the moods table."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class EntryStore:
    """Local mirror of the moods table for one journal session.

    Every mutation goes to the table first; the mirror only changes after the
    call succeeded. Failures are logged and kept in `last_error` for display,
    never raised to the caller.
    """

    def __init__(self, table: MoodTable, tz: Optional[tzinfo] = None):
        self.table = table
        self.tz = tz or resolve_timezone()
        self.sort_ascending = False
        self.last_error: Optional[str] = None
        self.last_failure: Optional[Exception] = None
        self._entries: List[MoodEntry] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def entries(self) -> Tuple[MoodEntry, ...]:
        return tuple(self._entries)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def _dropped(self, op: str) -> bool:
        if self._closed:
            logger.debug("Ignoring %s result after close", op)
            return True
        return False

    def load(self, sort_ascending: bool = False) -> bool:
        try:
            rows = self.table.select(ascending=sort_ascending)
            entries = [MoodEntry(**r) for r in rows]
        except (CollaboratorError, ValueError) as e:
            logger.error("Error loading moods: %s", e)
            if not self._dropped("load"):
                self.last_failure = e
                self.last_error = "Could not load entries. Please try again."
            return False
        if self._dropped("load"):
            return False
        with self._lock:
            self._entries = entries
            self.sort_ascending = sort_ascending
            self.last_error = None
            self.last_failure = None
        return True

    def validate(self, category: str, local_time: str) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        if not category or not category.strip():
            errors["category"] = "Pick a mood."
        try:
            local_to_utc(local_time, self.tz)
        except (TypeError, ValueError):
            errors["time"] = "Enter a valid date and time."
        return errors

    def insert(self, category: str, description: str, local_time: str) -> Optional[MoodEntry]:
        """Insert an entry; returns the persisted row or None when the call failed.

        Raises InvalidEntry when the input is rejected locally.
        """
        errors = self.validate(category, local_time)
        if errors:
            raise InvalidEntry(errors)

        utc_time = local_to_utc(local_time, self.tz)
        try:
            row = self.table.insert(category.strip(), description or "", utc_time)
            entry = MoodEntry(**row)
        except (CollaboratorError, ValueError) as e:
            logger.error("Error inserting mood: %s", e)
            if not self._dropped("insert"):
                self.last_failure = e
                self.last_error = "Could not save the entry. Your input was kept."
            return None
        if self._dropped("insert"):
            return entry
        with self._lock:
            self._merge(entry)
            self.last_error = None
            self.last_failure = None
        return entry

    def _merge(self, entry: MoodEntry) -> None:
        self._entries = [e for e in self._entries if e.id != entry.id]
        for i, existing in enumerate(self._entries):
            if self.sort_ascending:
                if existing.time > entry.time:
                    self._entries.insert(i, entry)
                    return
            elif existing.time <= entry.time:
                self._entries.insert(i, entry)
                return
        self._entries.append(entry)

    def delete(self, entry_id: int) -> bool:
        try:
            self.table.delete(entry_id)
        except CollaboratorError as e:
            logger.error("Error deleting mood %s: %s", entry_id, e)
            if not self._dropped("delete"):
                self.last_failure = e
                self.last_error = "Could not delete the entry."
            return False
        if self._dropped("delete"):
            return True
        with self._lock:
            self._entries = [e for e in self._entries if e.id != entry_id]
            self.last_error = None
            self.last_failure = None
        return True

    def get(self, entry_id: int) -> Optional[MoodEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

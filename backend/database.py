import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017/")
DATABASE_NAME = os.getenv("DATABASE_NAME", "appdb")
MOODS_COLLECTION = os.getenv("MOODS_COLLECTION", "moods")

_client = MongoClient(DATABASE_URL, tz_aware=True, serverSelectionTimeoutMS=5000)
db = _client[DATABASE_NAME]


class CollaboratorError(Exception):
    """A call to the hosted moods table failed or was rejected."""


class NotFound(CollaboratorError):
    """The row addressed by id does not exist."""


def get_collection(name: str) -> Collection:
    return db[name]


def _row(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc.get("_id"),
        "category": doc.get("category"),
        "description": doc.get("description") or "",
        "time": doc.get("time"),
        "created_at": doc.get("created_at"),
    }


class MoodTable:
    """The `moods` table: ordered select, insert returning the row, delete by id.

    Ids are integers handed out by an atomic counter document so that rows keep
    the same shape as a relational table with a serial key.
    """

    def __init__(self, collection: Optional[Collection] = None, counters: Optional[Collection] = None):
        self.collection = collection if collection is not None else get_collection(MOODS_COLLECTION)
        self.counters = counters if counters is not None else get_collection("counters")

    def select(self, ascending: bool = False) -> List[Dict[str, Any]]:
        direction = ASCENDING if ascending else DESCENDING
        try:
            cursor = self.collection.find({}).sort("time", direction)
            return [_row(d) for d in cursor]
        except PyMongoError as e:
            raise CollaboratorError(f"select failed: {e}") from e

    def _next_id(self) -> int:
        counter = self.counters.find_one_and_update(
            {"_id": self.collection.name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    def insert(self, category: str, description: str, time: datetime) -> Dict[str, Any]:
        try:
            payload = {
                "_id": self._next_id(),
                "category": category,
                "description": description,
                "time": time,
                "created_at": datetime.now(timezone.utc),
            }
            self.collection.insert_one(payload)
        except PyMongoError as e:
            raise CollaboratorError(f"insert failed: {e}") from e
        logger.info("Inserted mood %s (%s)", payload["_id"], category)
        return _row(payload)

    def delete(self, entry_id: int) -> None:
        try:
            res = self.collection.delete_one({"_id": entry_id})
        except PyMongoError as e:
            raise CollaboratorError(f"delete failed: {e}") from e
        if res.deleted_count == 0:
            raise NotFound(f"no mood with id {entry_id}")
        logger.info("Deleted mood %s", entry_id)

    def ping(self) -> List[str]:
        try:
            return self.collection.database.list_collection_names()
        except PyMongoError as e:
            raise CollaboratorError(str(e)) from e

"""Repository pattern for database operations.

Repositories abstract the MongoDB collections behind small interfaces used by
the service layer. Driver errors are logged here and re-raised as
``PersistenceError`` so callers never depend on pymongo types.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError
from bson import ObjectId

from . import db
from .errors import PersistenceError
from .models import LoadedFile, Participant

logger = logging.getLogger(__name__)


class BaseRepository:
    """Base repository class with common database operations."""

    def __init__(self, collection_name: str):
        self.collection_name = collection_name

    @property
    def collection(self) -> Collection:
        try:
            database = db.get_db()
        except db.DatabaseError as e:
            raise PersistenceError() from e
        return database[self.collection_name]

    def find_one(self, filter_dict: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return self.collection.find_one(filter_dict)
        except PyMongoError as e:
            logger.error(f"Error finding document in {self.collection_name}: {e}")
            raise PersistenceError() from e

    def find_many(self, filter_dict: Dict[str, Any], limit: Optional[int] = None, sort: Optional[List[tuple]] = None) -> List[Dict[str, Any]]:
        try:
            cursor = self.collection.find(filter_dict)
            if sort:
                cursor = cursor.sort(sort)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error finding documents in {self.collection_name}: {e}")
            raise PersistenceError() from e

    def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        try:
            result = self.collection.insert_one(document)
            return result.inserted_id
        except DuplicateKeyError as e:
            logger.error(f"Duplicate key inserting into {self.collection_name}: {e}")
            raise PersistenceError() from e
        except PyMongoError as e:
            logger.error(f"Error inserting document in {self.collection_name}: {e}")
            raise PersistenceError() from e


class ParticipantsRepository(BaseRepository):
    LIVE = {'deletedAt': None}

    def __init__(self) -> None:
        super().__init__(db.PARTICIPANTS_COLLECTION)

    def create_participant(self, participant: Participant) -> Participant:
        now = datetime.now(timezone.utc)
        participant.created_at = participant.created_at or now
        participant.updated_at = now
        participant.id = self.insert_one(participant.to_document())
        return participant

    def find_all(self) -> List[Participant]:
        return [Participant.from_document(doc) for doc in self.find_many(dict(self.LIVE))]

    def find_by_code(self, code: str) -> Optional[Participant]:
        doc = self.find_one({'code': code, **self.LIVE})
        return Participant.from_document(doc) if doc else None


class LoadedFilesRepository(BaseRepository):
    def __init__(self) -> None:
        super().__init__(db.LOADED_FILES_COLLECTION)

    def create_file(self, loaded_file: LoadedFile) -> LoadedFile:
        loaded_file.created_at = loaded_file.created_at or datetime.now(timezone.utc)
        loaded_file.id = self.insert_one(loaded_file.to_document())
        return loaded_file

    def find_by_participant(self, code: str) -> List[LoadedFile]:
        docs = self.find_many({'participantCode': code}, sort=[('createdAt', -1)])
        return [LoadedFile.from_document(doc) for doc in docs]

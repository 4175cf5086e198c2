"""
Session Store
Persistence access for focus sessions, backed by a MongoDB collection
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from models.focus_session import FocusSession, SessionStatus
from services.errors import StoreError, StoreUnavailableError

logger = logging.getLogger("deepwork-tracker")

# Documents written before sessions carried a status stay open until they get an endTime
OPEN_SESSION = {"$or": [
    {"status": SessionStatus.IN_PROGRESS},
    {"status": {"$exists": False}, "endTime": {"$exists": False}},
]}


class SessionStore:
    """Document store for focus sessions.

    The client is created by the owner and connected explicitly before
    serving traffic; nothing here is shared at module level.
    """

    def __init__(self,
                 uri: str,
                 database: str = "deep_work_tracker",
                 collection: str = "sessions",
                 client: Optional[AsyncMongoClient] = None):
        """
        Initialize the session store.

        Args:
            uri: MongoDB connection string
            database: Database holding the sessions collection
            collection: Name of the sessions collection
            client: Pre-built client (mainly for tests)
        """
        self.uri = uri
        self.database_name = database
        self.collection_name = collection
        self._client = client
        self._collection = None

    async def connect(self):
        """Open the client and verify the server is reachable"""
        try:
            if self._client is None:
                self._client = AsyncMongoClient(self.uri, tz_aware=True)
            await self._client.admin.command("ping")
        except PyMongoError as e:
            raise StoreUnavailableError(f"Failed to connect to MongoDB: {e}") from e

        self._collection = self._client[self.database_name][self.collection_name]
        logger.info(f"Connected to MongoDB, using database {self.database_name}")

    async def close(self):
        """Close the client"""
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._collection = None
            logger.info("MongoDB connection closed")

    @property
    def collection(self):
        if self._collection is None:
            raise StoreUnavailableError("Session store is not connected")
        return self._collection

    async def insert(self, session: FocusSession) -> Any:
        """Insert a new session and record its assigned id"""
        try:
            result = await self.collection.insert_one(session.to_document())
        except PyMongoError as e:
            raise StoreError(f"Failed to insert session for user {session.user_id}") from e
        session.id = result.inserted_id
        return session.id

    async def close_if_in_progress(self, session: FocusSession) -> bool:
        """
        Write the terminal fields of a session, but only while the stored
        document is still in progress.

        Returns:
            True if the document transitioned, False if it was already closed
        """
        fields = {
            "status": session.status,
            "endTime": session.end_time,
            "duration": session.duration,
        }
        if session.reflection is not None:
            fields["reflection"] = session.reflection

        try:
            result = await self.collection.update_one(
                {"_id": session.id, **OPEN_SESSION},
                {"$set": fields},
            )
        except PyMongoError as e:
            raise StoreError(f"Failed to close session {session.id}") from e
        return result.matched_count == 1

    async def _find(self, query: dict) -> List[FocusSession]:
        try:
            documents = await self.collection.find(query).to_list(length=None)
        except PyMongoError as e:
            raise StoreError(f"Failed to query sessions: {e}") from e
        return [FocusSession.from_document(doc) for doc in documents]

    async def find_by_user(self, user_id: str) -> List[FocusSession]:
        """Get all sessions of a user"""
        return await self._find({"userId": user_id})

    async def find_active_for_user(self, user_id: str) -> Optional[FocusSession]:
        """Get the in-progress session of a user, if any"""
        sessions = await self.find_by_user(user_id)
        return next((s for s in sessions if s.is_active()), None)

    async def find_stale(self, cutoff: datetime) -> List[FocusSession]:
        """Get in-progress sessions started before the cutoff"""
        return await self._find({
            **OPEN_SESSION,
            "startTime": {"$lt": cutoff},
        })

    async def find_all(self) -> List[FocusSession]:
        """Get every stored session"""
        return await self._find({})

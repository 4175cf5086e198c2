import copy
import itertools
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from models.focus_session import FocusSession, SessionStatus, UserProfile
from services.errors import StoreError
from services.notifier import ChannelNotifier


T0 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


def is_open(doc):
    """Same rule as OPEN_SESSION: in progress, or legacy with neither status nor endTime"""
    if "status" in doc:
        return doc["status"] == SessionStatus.IN_PROGRESS
    return "endTime" not in doc


class InMemorySessionStore:
    """Session store fake keeping documents in a dict, same contract as SessionStore"""

    def __init__(self):
        self.documents = {}
        self._ids = itertools.count(1)
        self.fail_queries = False

    async def insert(self, session: FocusSession):
        session.id = next(self._ids)
        self.documents[session.id] = {"_id": session.id, **copy.deepcopy(session.to_document())}
        return session.id

    async def close_if_in_progress(self, session: FocusSession) -> bool:
        doc = self.documents.get(session.id)
        if doc is None or not is_open(doc):
            return False
        doc.update({
            "status": session.status,
            "endTime": session.end_time,
            "duration": session.duration,
        })
        if session.reflection is not None:
            doc["reflection"] = session.reflection
        return True

    async def _find(self, predicate):
        if self.fail_queries:
            raise StoreError("store unreachable")
        return [
            FocusSession.from_document(copy.deepcopy(doc))
            for doc in self.documents.values()
            if predicate(doc)
        ]

    async def find_by_user(self, user_id):
        return await self._find(lambda doc: doc["userId"] == user_id)

    async def find_active_for_user(self, user_id):
        sessions = await self.find_by_user(user_id)
        return next((s for s in sessions if s.is_active()), None)

    async def find_stale(self, cutoff):
        return await self._find(
            lambda doc: is_open(doc) and doc["startTime"] < cutoff
        )

    async def find_all(self):
        return await self._find(lambda doc: True)

    def active_count(self, user_id):
        return sum(
            1 for doc in self.documents.values()
            if doc["userId"] == user_id and is_open(doc)
        )


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    notifier = MagicMock(spec=ChannelNotifier)
    notifier.post = AsyncMock()
    notifier.post_ephemeral = AsyncMock()
    notifier.lookup_profile = AsyncMock(return_value=UserProfile(name="Ada Lovelace", email="ada@example.com"))
    return notifier


@pytest.fixture
def lookup_profile():
    return AsyncMock(return_value=UserProfile(name="Ada Lovelace", email="ada@example.com"))

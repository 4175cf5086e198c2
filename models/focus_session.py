"""
Focus Session Model
Tracks one deep work interval of a user, from start command to close
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class SessionStatus:
    """Lifecycle states of a focus session"""
    IN_PROGRESS = "in progress"
    CONCLUDED = "concluded"
    TIMED_OUT = "timed out"

    TERMINAL = (CONCLUDED, TIMED_OUT)


class CloseReason:
    """Who closed a session"""
    USER = "user"
    TIMEOUT = "timeout"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes read back from the store as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def compute_duration(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between two timestamps, halves rounded up"""
    minutes = (as_utc(end_time) - as_utc(start_time)).total_seconds() / 60
    return int(math.floor(minutes + 0.5))


@dataclass
class FocusSession:
    """Represents a user's focus session as persisted in the sessions collection"""
    user_id: str
    channel_id: str
    description: str
    start_time: datetime
    name: Optional[str] = None
    email: Optional[str] = None
    status: str = SessionStatus.IN_PROGRESS
    end_time: Optional[datetime] = None
    duration: Optional[int] = None
    reflection: Optional[str] = None
    id: Any = None

    def is_active(self) -> bool:
        """Check if session is still in progress"""
        return self.status == SessionStatus.IN_PROGRESS

    def elapsed_minutes(self, now: datetime) -> float:
        """Minutes since the session started"""
        return (as_utc(now) - as_utc(self.start_time)).total_seconds() / 60

    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored document (without the store identity)"""
        doc = {
            "userId": self.user_id,
            "name": self.name,
            "email": self.email,
            "channelId": self.channel_id,
            "description": self.description,
            "startTime": self.start_time,
            "status": self.status,
            "endTime": self.end_time,
            "duration": self.duration,
            "reflection": self.reflection,
        }
        return {key: value for key, value in doc.items() if value is not None}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'FocusSession':
        """Create from a stored document"""
        end_time = doc.get("endTime")
        status = doc.get("status")
        if status is None:
            # Written before sessions carried a status
            status = SessionStatus.CONCLUDED if end_time else SessionStatus.IN_PROGRESS

        return cls(
            id=doc.get("_id"),
            user_id=doc["userId"],
            name=doc.get("name"),
            email=doc.get("email"),
            channel_id=doc.get("channelId", ""),
            description=doc.get("description", ""),
            start_time=as_utc(doc["startTime"]),
            status=status,
            end_time=as_utc(end_time) if end_time else None,
            duration=doc.get("duration"),
            reflection=doc.get("reflection"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary for export"""
        data = self.to_document()
        data["startTime"] = as_utc(self.start_time).isoformat()
        if self.end_time is not None:
            data["endTime"] = as_utc(self.end_time).isoformat()
        if self.id is not None:
            data = {"_id": str(self.id), **data}
        return data


@dataclass
class UserProfile:
    """Snapshot of the chat user's profile taken at session start"""
    name: Optional[str] = None
    email: Optional[str] = None

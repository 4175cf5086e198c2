"""
Models package for deepwork-tracker
"""

from models.focus_session import (
    FocusSession,
    SessionStatus,
    CloseReason,
    UserProfile,
    compute_duration,
)

__all__ = [
    "FocusSession",
    "SessionStatus",
    "CloseReason",
    "UserProfile",
    "compute_duration",
]

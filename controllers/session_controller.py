"""
Session Controller
HTTP endpoints for exporting sessions and triggering the inactivity sweep
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

from services.inactivity_sweeper import InactivitySweeper
from services.session_store import SessionStore

logger = logging.getLogger("deepwork-tracker")


class SessionController:
    """Controller for the session HTTP surface"""

    def __init__(self, store: SessionStore, sweeper: InactivitySweeper):
        self.store = store
        self.sweeper = sweeper

        self.router = APIRouter(tags=["Sessions"])
        self.router.add_api_route("/export-sessions", self.export_sessions, methods=["GET"])
        self.router.add_api_route("/check-timeouts", self.check_timeouts, methods=["GET"])
        self.router.add_api_route("/health", self.health_check, methods=["GET"])

    async def export_sessions(self):
        """Dump every stored session as JSON"""
        try:
            sessions = await self.store.find_all()
        except Exception as e:
            logger.error(f"Failed to export sessions: {e}")
            return JSONResponse(status_code=500, content={"error": "Failed to export sessions"})
        return JSONResponse(content=[session.to_dict() for session in sessions])

    async def check_timeouts(self):
        """Run one sweep cycle synchronously"""
        try:
            result = await self.sweeper.sweep()
        except Exception as e:
            logger.error(f"Manual timeout check failed: {e}")
            return PlainTextResponse("Failed to check timeouts", status_code=500)
        return PlainTextResponse(
            f"Timeout check completed: {result.closed} session(s) timed out"
        )

    async def health_check(self):
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "deepwork-tracker",
            "sweeper": self.sweeper.stats,
        }

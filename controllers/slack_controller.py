"""
Slack Controller
Receives Slack slash commands and Events API callbacks over HTTP
"""

import json
import logging
from urllib.parse import parse_qs

from fastapi import APIRouter, BackgroundTasks, Request, Response
from fastapi.responses import PlainTextResponse
from slack_sdk.signature import SignatureVerifier

from controllers.command_controller import CommandController, CommandInvocation
from services.errors import ConfigError
from services.notifier import ChannelNotifier

logger = logging.getLogger("deepwork-tracker")


class SlackController:
    """Controller for the Slack request URL"""

    GREETING = "Hi there! Use `/deepwork <description>` to start a deep work session."

    def __init__(self,
                 command_controller: CommandController,
                 notifier: ChannelNotifier,
                 signing_secret: str,
                 command_name: str = "/deepwork"):
        """
        Initialize the Slack controller.

        Args:
            command_controller: Handles the deep work command
            notifier: Slack notifier used for profile lookups and greetings
            signing_secret: Slack signing secret every request is verified against
            command_name: Slash command routed to the command controller
        """
        self.command_controller = command_controller
        self.notifier = notifier
        self.command_name = command_name
        if not signing_secret:
            raise ConfigError("SLACK_SIGNING_SECRET not configured")
        self.verifier = SignatureVerifier(signing_secret)

        self.router = APIRouter(tags=["Slack"])
        self.router.add_api_route("/slack/events", self.slack_events, methods=["POST"])

    async def slack_events(self, request: Request, background_tasks: BackgroundTasks):
        """Single entry point for slash commands and event callbacks"""
        body = await request.body()

        if not self.verifier.is_valid_request(body, dict(request.headers)):
            logger.warning("Rejected Slack request with invalid signature")
            return PlainTextResponse("invalid signature", status_code=401)

        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/x-www-form-urlencoded"):
            form = {key: values[0] for key, values in parse_qs(body.decode("utf-8")).items()}
            return self.handle_command(form, background_tasks)

        try:
            payload = json.loads(body or b"{}")
        except ValueError:
            return PlainTextResponse("invalid payload", status_code=400)
        return self.handle_event(payload, background_tasks)

    def handle_command(self, form: dict, background_tasks: BackgroundTasks) -> Response:
        """Acknowledge a slash command and process it after the response is sent"""
        command = form.get("command")
        if command != self.command_name:
            logger.warning(f"Ignoring unknown slash command {command}")
            return PlainTextResponse(f"Unknown command {command}")

        invocation = CommandInvocation(
            user_id=form.get("user_id", ""),
            text=form.get("text", ""),
            channel_id=form.get("channel_id", ""),
            lookup_profile=self.notifier.lookup_profile,
        )
        # The empty 200 below is Slack's acknowledgment; the store is only
        # touched once the background task runs after it is sent.
        background_tasks.add_task(self.command_controller.handle, invocation)
        return Response(status_code=200)

    def handle_event(self, payload: dict, background_tasks: BackgroundTasks) -> Response:
        """Answer the URL verification handshake and mention events"""
        payload_type = payload.get("type")

        if payload_type == "url_verification":
            return PlainTextResponse(payload.get("challenge", ""))

        if payload_type == "event_callback":
            event = payload.get("event", {})
            if event.get("type") == "app_mention" and not event.get("bot_id"):
                background_tasks.add_task(self.greet, event.get("channel"))

        return Response(status_code=200)

    async def greet(self, channel_id: str):
        try:
            await self.notifier.post(channel_id, self.GREETING)
        except Exception as e:
            logger.error(f"Failed to answer mention in {channel_id}: {e}")

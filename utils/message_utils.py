"""
Message Utilities
Helpers for formatting tracker messages and splitting them for Discord
"""

import logging
from typing import Optional

logger = logging.getLogger("deepwork-tracker")

MAX_MESSAGE_LENGTH = 2000  # Discord's message limit


def mention(user_id: str) -> str:
    """Format a user mention (same syntax on Slack and Discord)"""
    return f"<@{user_id}>"


def split_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> list:
    """
    Split a long message into multiple chunks that fit within Discord's limit.

    Args:
        text: The text to split
        max_length: Maximum length of each chunk (default: 2000 for Discord)

    Returns:
        List of message chunks
    """
    if len(text) <= max_length:
        return [text]

    chunks = []
    remaining = text

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        # Prefer a newline for cleaner breaks
        split_pos = remaining.rfind('\n', 0, max_length)
        if split_pos <= 0:
            split_pos = max_length

        chunks.append(remaining[:split_pos])
        remaining = remaining[split_pos:].lstrip('\n')

    return chunks


async def send_message(destination, text: str, prefix: Optional[str] = None) -> bool:
    """
    Send a message to a Discord channel or user, splitting if necessary.

    Args:
        destination: Anything with an async send() (channel, user, member)
        text: The message text
        prefix: Optional prefix for the first chunk

    Returns:
        True if all chunks sent successfully, False otherwise
    """
    chunks = split_message(text)

    for i, chunk in enumerate(chunks):
        if prefix and i == 0:
            message = f"{prefix} {chunk}"
        elif i > 0:
            message = f"...{chunk}"
        else:
            message = chunk

        try:
            await destination.send(message)
        except Exception as e:
            logger.error(f"Error sending message chunk {i}: {e}")
            return False

    return True

"""
Report delivery to a Discord channel through an incoming webhook.

Discord rejects messages longer than 2000 characters, so reports are split
into chunks on paragraph, line or word boundaries and posted in order as
``{"content": chunk}``.  A chunk that fails is logged and skipped; the
remaining chunks are still sent.

Environment variables
---------------------
  DISCORD_WEBHOOK_URL   — incoming webhook of the target channel
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import httpx

from stock_analyst.utils.logging import get_logger

logger = get_logger(__name__)

DISCORD_MAX_LENGTH = 2000
_TIMEOUT = 15.0
_SEPARATORS = ("\n\n", "\n", " ")


def split_message(text: str, max_length: int = DISCORD_MAX_LENGTH) -> List[str]:
    """
    Split *text* into trimmed chunks of at most *max_length* characters.

    Breaks prefer paragraph boundaries, then line breaks, then spaces; a
    single word longer than *max_length* is the only thing ever cut mid-word.
    """
    if max_length < 1:
        raise ValueError("max_length must be positive")

    chunks: List[str] = []
    remaining = text.strip()
    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        window = remaining[: max_length + 1]
        cut, skip = max_length, 0
        for sep in _SEPARATORS:
            idx = window.rfind(sep)
            if idx > 0:
                cut, skip = idx, len(sep)
                break

        chunk = remaining[:cut].strip()
        if chunk:
            chunks.append(chunk)
        remaining = remaining[cut + skip:].lstrip()
    return chunks


class Notifier(ABC):
    name = "notifier"

    @abstractmethod
    async def send(self, text: str) -> int:
        """Deliver *text*; returns the number of messages delivered. Never raises."""


class DiscordNotifier(Notifier):
    """Posts reports to a Discord webhook in order-preserving chunks."""

    name = "discord"

    def __init__(
        self,
        webhook_url: Optional[str],
        max_length: int = DISCORD_MAX_LENGTH,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.webhook_url = (webhook_url or "").strip()
        self.max_length = max_length
        self._client = client

    async def _post(self, client: httpx.AsyncClient, chunk: str) -> bool:
        try:
            response = await client.post(self.webhook_url, json={"content": chunk}, timeout=_TIMEOUT)
        except httpx.HTTPError as exc:
            logger.error("An error occurred while sending a chunk to Discord: %s", exc)
            return False
        if response.is_error:
            logger.error(
                "Failed to send a chunk of the report to Discord: %s %s",
                response.status_code, response.text[:300],
            )
            return False
        return True

    async def send(self, text: str) -> int:
        if not self.webhook_url:
            logger.error("DISCORD_WEBHOOK_URL not found in environment variables.")
            return 0

        chunks = split_message(text, self.max_length)
        delivered = 0
        if self._client is not None:
            for chunk in chunks:
                delivered += await self._post(self._client, chunk)
        else:
            async with httpx.AsyncClient() as client:
                for chunk in chunks:
                    delivered += await self._post(client, chunk)

        logger.info("Report sent to Discord: %d/%d message(s) delivered.", delivered, len(chunks))
        return delivered

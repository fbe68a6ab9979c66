"""JSON-over-HTTP POST with automatic endpoint fallback."""
from __future__ import annotations

import logging
import ssl
from collections.abc import Sequence
from typing import Any

import aiohttp
import certifi

from ..errors import CollaboratorError

logger = logging.getLogger(__name__)


class FallbackPoster:
    """Posts a JSON payload to the first endpoint that answers cleanly.

    The endpoint that last succeeded is tried first on the next call.
    """

    def __init__(self, endpoints: Sequence[str], timeout: int = 30, name: str = "endpoint") -> None:
        if not endpoints:
            raise ValueError(f"No {name} endpoints configured")
        self.endpoints = list(endpoints)
        self.timeout = timeout
        self.name = name
        self.current_index = 0

    async def post(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Return the decoded JSON body; error bodies count as failures.

        Raises:
            CollaboratorError: every endpoint failed.
        """
        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            index = (self.current_index + attempt) % len(self.endpoints)
            url = self.endpoints[index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        body = await response.json()
                        if not isinstance(body, dict):
                            raise CollaboratorError(f"Unexpected response body: {body!r}")
                        if body.get("error") or body.get("errors"):
                            raise CollaboratorError(
                                f"{self.name} error: {body.get('error') or body.get('errors')}"
                            )

                        if index != self.current_index:
                            logger.info("Switched to %s: %s", self.name, url)
                            self.current_index = index
                        return body
            except Exception as e:
                last_error = e
                logger.warning("%s %s failed: %s", self.name, url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next %s...", self.name)
                continue

        raise CollaboratorError(f"All {self.name}s failed. Last error: {last_error}")

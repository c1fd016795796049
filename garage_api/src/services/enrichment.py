"""
Enrichment providers.

A provider returns a short display string attached to every composed
vehicle. Providers are allowed to fail; the relationship resolver bounds
them with a timeout and substitutes a fallback.
"""

import asyncio
from typing import Any, Mapping, Optional, Protocol

import aiohttp
import structlog

from garage_api.src.errors import EnrichmentError

logger = structlog.get_logger(__name__)


class EnrichmentProvider(Protocol):
    """Zero-argument async text source."""

    async def fetch(self) -> str:
        ...


def format_joke(payload: Any) -> str:
    """
    Render a joke API payload as ``"<setup> - <punchline>"``.

    Raises:
        EnrichmentError: If the payload is not an object with a non-empty
            setup and punchline
    """
    if not isinstance(payload, Mapping):
        raise EnrichmentError(f"Unexpected joke payload type: {type(payload).__name__}")

    setup = payload.get("setup")
    punchline = payload.get("punchline")
    if not isinstance(setup, str) or not isinstance(punchline, str) or not setup or not punchline:
        raise EnrichmentError("Joke payload lacks setup or punchline")

    return f"{setup} - {punchline}"


class JokeApiProvider:
    """Fetches a random joke over HTTP."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 3.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize provider.

        Args:
            url: Joke endpoint returning ``{"setup": ..., "punchline": ...}``
            timeout_seconds: Total HTTP timeout
            session: Shared client session; one is opened lazily when omitted
        """
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def _fetch_payload(self) -> Any:
        session = await self._get_session()
        async with session.get(self.url, timeout=self.timeout) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def fetch(self) -> str:
        """
        Fetch and format one joke.

        Raises:
            EnrichmentError: On HTTP, timeout, decoding or payload shape errors
        """
        try:
            payload = await self._fetch_payload()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise EnrichmentError(f"Joke API request failed: {e}") from e
        return format_joke(payload)

    async def close(self) -> None:
        """Close the HTTP session if this provider opened it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("enrichment_session_closed")


class StaticEnrichmentProvider:
    """Returns the same text every time (enrichment disabled, tests)."""

    def __init__(self, text: str):
        self.text = text

    async def fetch(self) -> str:
        return self.text

    async def close(self) -> None:
        return None

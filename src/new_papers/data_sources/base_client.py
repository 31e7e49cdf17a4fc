"""
Base client for external data source clients.

Provides: lazy aiohttp session management, a single in-flight request at a
time, structured logging, and a uniform DataSourceError for every failure.
Requests are attempted once; there is no retry or response cache.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
from pydantic import BaseModel

from new_papers.constants import DEFAULT_TIMEOUT

logger = logging.getLogger("new_papers.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ClientConfig(BaseModel):
    """HTTP client settings."""

    timeout_seconds: float = DEFAULT_TIMEOUT
    user_agent: str = "new-papers"


# ---------------------------------------------------------------------------
# Request context (for structured logging)
# ---------------------------------------------------------------------------


class RequestContext(BaseModel):
    """Metadata attached to every outgoing request for logging."""

    source: str  # e.g. "pubmed"
    method: str  # e.g. "search"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DataSourceError(Exception):
    """Base exception for data source failures."""

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class MarkupError(DataSourceError):
    """Raised when a markup payload cannot be decoded (malformed or truncated)."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        super().__init__("markup", message)


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for REST clients.

    Subclasses implement `_source_name` and their own typed methods that
    call `_rest_get()` (JSON) or `_rest_get_xml()` (raw bytes).
    """

    def __init__(self, config: ClientConfig | None = None):
        self.config = config or ClientConfig()
        self._session: aiohttp.ClientSession | None = None
        self._in_flight = asyncio.Lock()

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'pubmed'."""
        ...

    # -- Session management --------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout, headers={"User-Agent": self.config.user_agent}
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Core request ----------------------------------------------------------

    async def _request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        as_json: bool = True,
        context: RequestContext | None = None,
    ) -> Any:
        """
        Make a single GET request and return the decoded body.

        Parameters
        ----------
        url : str
            Full URL.
        params : dict, optional
            Query string parameters.
        as_json : bool
            Decode the body as JSON when True, return raw bytes otherwise.
        context : RequestContext, optional
            Logging context.

        Raises
        ------
        DataSourceError
            On HTTP status >= 400, timeout, connection failure or an
            undecodable JSON body.
        """
        ctx = context or RequestContext(source=self._source_name, method="unknown")
        start = time.monotonic()

        async with self._in_flight:
            session = await self._get_session()
            logger.info("Request [%s.%s] url=%s", ctx.source, ctx.method, url)

            try:
                resp = await session.get(url, params=params)

                if resp.status >= 400:
                    body = await resp.text()
                    logger.warning(
                        "HTTP %d from %s.%s: %s",
                        resp.status,
                        ctx.source,
                        ctx.method,
                        body[:200],
                    )
                    raise DataSourceError(
                        ctx.source,
                        f"HTTP {resp.status}: {body[:500]}",
                        status_code=resp.status,
                    )

                if as_json:
                    data = await resp.json(content_type=None)
                else:
                    data = await resp.read()

            except asyncio.TimeoutError as e:
                elapsed = time.monotonic() - start
                logger.warning(
                    "Timeout [%s.%s] elapsed=%.1fs", ctx.source, ctx.method, elapsed
                )
                raise DataSourceError(
                    ctx.source, f"Timeout after {elapsed:.1f}s"
                ) from e

            except aiohttp.ClientError as e:
                logger.warning(
                    "Connection error [%s.%s]: %s", ctx.source, ctx.method, e
                )
                raise DataSourceError(ctx.source, f"Connection error: {e}") from e

            except ValueError as e:
                # JSON decoding failure
                raise DataSourceError(ctx.source, f"Invalid JSON body: {e}") from e

        logger.info(
            "Success [%s.%s] elapsed=%.2fs",
            ctx.source,
            ctx.method,
            time.monotonic() - start,
        )
        return data

    # -- Convenience methods for subclasses ----------------------------------

    async def _rest_get(
        self,
        url: str,
        params: dict[str, Any],
        *,
        context: RequestContext | None = None,
    ) -> dict[str, Any]:
        """GET a JSON document (PubMed esearch)."""
        return await self._request(url, params=params, as_json=True, context=context)

    async def _rest_get_xml(
        self,
        url: str,
        params: dict[str, Any],
        *,
        context: RequestContext | None = None,
    ) -> bytes:
        """GET a raw XML payload (PubMed efetch)."""
        return await self._request(url, params=params, as_json=False, context=context)

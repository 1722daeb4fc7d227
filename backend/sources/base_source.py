"""
Base source class for the scraping pipeline

This module provides the abstract base class that all upstream source
adapters must implement. Each adapter has two stages:

1. Raw fetch: call the source's public API and return its raw job objects
2. Normalization: turn one raw job object into a RawPosting

Transport concerns (timeouts, retries with backoff, error mapping) live here
so adapters only describe the API shape.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TYPE_CHECKING

import httpx

from sources.config import SourceConfig
from sources.types import RawPosting
from utils.errors import SourceFetchError

if TYPE_CHECKING:
    from .enums import Source

logger = logging.getLogger(__name__)

# Status codes worth retrying; anything else fails fast
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def map_fetch_error(e: Exception) -> str:
    """Map fetch exceptions to operator-friendly error messages."""
    if isinstance(e, httpx.TimeoutException):
        return "Request timed out - source may be slow"
    elif isinstance(e, httpx.HTTPStatusError):
        status_code = e.response.status_code
        if status_code in (401, 403):
            return "Access denied - check API key or rate limiting"
        elif status_code == 404:
            return "Endpoint not found - API may have changed"
        elif status_code == 429:
            return "Rate limited by source"
        elif status_code >= 500:
            return "Source server error - try again later"
        else:
            return f"HTTP error: {status_code}"
    elif isinstance(e, httpx.TransportError):
        return f"Network error: {type(e).__name__}"
    elif isinstance(e, (KeyError, TypeError, ValueError)):
        return "Unexpected response format - API may have changed"
    else:
        return f"Fetch failed: {type(e).__name__}"


class BaseJobSource(ABC):
    """
    Abstract base class for job source adapters

    Each source adapter must define:
    1. NAME: Source enum value (e.g., Source.REMOTIVE)
    2. API_URL: The API endpoint (or base URL for multi-board sources)
    3. _fetch_raw_jobs(): Fetch raw job objects from the API
    4. _normalize(): Convert one raw job object to a RawPosting

    Optional:
    - ENV_KEY: settings key of a required API key; the registry skips the
      adapter when that key is not configured
    - SECRET_ENV_KEY: settings key of a second credential required together
      with ENV_KEY (app id + app key style APIs)
    - ENV_KEY_OPTIONAL: pass the key when configured but run without it
    """

    NAME: 'Source'
    API_URL: str
    ENV_KEY: Optional[str] = None
    SECRET_ENV_KEY: Optional[str] = None
    ENV_KEY_OPTIONAL: bool = False

    def __init__(self, config: Optional[SourceConfig] = None):
        for var in ('NAME', 'API_URL'):
            if not hasattr(self.__class__, var):
                raise NotImplementedError(
                    f"{self.__class__.__name__} must define {var} class variable"
                )
        self.config = config or SourceConfig()

    @property
    def name(self) -> str:
        return self.NAME.value

    @abstractmethod
    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Any]:
        """
        Fetch raw job objects from the source API.

        Raise on failure; fetch_postings() converts the exception into a
        SourceFetchError for the scraper.
        """
        pass

    @abstractmethod
    def _normalize(self, raw: Any) -> Optional[RawPosting]:
        """
        Convert one raw job object into a RawPosting.

        Return None to drop the job (missing company/title, filtered role).
        """
        pass

    async def fetch_postings(self, client: httpx.AsyncClient) -> List[RawPosting]:
        """
        Fetch and normalize postings, capped at config.max_postings.

        Any item whose normalization raises is counted as malformed and dropped.

        Raises:
            SourceFetchError: if the source could not be fetched
        """
        try:
            raw_jobs = await self._fetch_raw_jobs(client)
        except SourceFetchError:
            raise
        except Exception as e:
            logger.warning(f"[{self.name}] fetch failed: {e!r}")
            raise SourceFetchError(self.name, map_fetch_error(e)) from e

        postings: List[RawPosting] = []
        malformed = 0
        for raw in raw_jobs:
            try:
                posting = self._normalize(raw)
            except Exception as e:
                logger.debug(f"[{self.name}] malformed job skipped: {e!r}")
                malformed += 1
                continue
            if posting is None:
                continue
            postings.append(posting)
            if len(postings) >= self.config.max_postings:
                break

        if malformed:
            logger.warning(f"[{self.name}] dropped {malformed} malformed jobs")
        logger.info(f"[{self.name}] {len(raw_jobs)} raw jobs -> {len(postings)} postings")
        return postings

    def _headers(self) -> Dict[str, str]:
        return {"User-Agent": self.config.user_agent, "Accept": "application/json"}

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        auth: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET a JSON document with retry on transient failures.

        Retries timeouts, transport errors and RETRYABLE_STATUS_CODES up to
        config.retries attempts, doubling the delay between attempts.
        `headers` are sent on top of the default User-Agent/Accept headers.

        Raises:
            httpx.HTTPError: last error once attempts are exhausted
        """
        attempts = max(1, self.config.retries)
        delay = self.config.retry_delay
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                response = await client.get(
                    url,
                    params=params,
                    headers={**self._headers(), **(headers or {})},
                    auth=auth,
                    timeout=self.config.timeout,
                )
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                if e.response.status_code not in RETRYABLE_STATUS_CODES:
                    raise
                last_error = e
            except httpx.TransportError as e:
                last_error = e

            if attempt < attempts - 1:
                logger.info(
                    f"[{self.name}] attempt {attempt + 1}/{attempts} failed ({last_error!r}), "
                    f"retrying in {delay}s"
                )
                await asyncio.sleep(delay)
                delay *= 2

        raise last_error or httpx.HTTPError(f"GET {url} failed with no error details")

    async def _fetch_boards(
        self,
        boards: Sequence[str],
        fetch_board: Callable[[str], Awaitable[List[Any]]],
    ) -> List[Any]:
        """
        Fetch several boards of a multi-board source in parallel.

        A failing board is logged and skipped; only when every board fails
        is the first error re-raised.
        """
        results = await asyncio.gather(
            *(fetch_board(board) for board in boards),
            return_exceptions=True,
        )

        jobs: List[Any] = []
        errors: List[BaseException] = []
        for board, result in zip(boards, results):
            if isinstance(result, BaseException):
                logger.warning(f"[{self.name}] board '{board}' failed: {result!r}")
                errors.append(result)
            else:
                jobs.extend(result)

        if boards and len(errors) == len(boards):
            raise errors[0]
        return jobs

"""
HTTP client for the Skywatch data feeds and location services.
Author: Oliver Ernster

This module wraps aiohttp behind a small abstract interface so that feeds
and lookup services can be tested without network access, and defines the
exception hierarchy for transport and payload failures.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import aiohttp

from version import get_user_agent

logger = logging.getLogger(__name__)


class SkyAPIException(Exception):
    """Base exception for external API-related errors."""

    pass


class SkyNetworkException(SkyAPIException):
    """Exception for network-related errors."""

    pass


class SkyDataException(SkyAPIException):
    """Exception for response payload errors."""

    pass


@dataclass
class APIResponse:
    """Container for raw API response data."""

    status_code: int
    data: Union[Dict[str, Any], List[Any], str, None]
    timestamp: datetime
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HTTPClient(ABC):
    """Abstract HTTP client interface for dependency injection."""

    @abstractmethod
    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """Make HTTP GET request and decode a JSON body."""
        pass

    @abstractmethod
    async def get_text(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """Make HTTP GET request and return the body as text."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close HTTP client."""
        pass


class AioHttpClient(HTTPClient):
    """
    Concrete HTTP client implementation using aiohttp.

    Follows Dependency Inversion Principle - implements abstraction.
    """

    def __init__(self, timeout_seconds: int = 15):
        """Initialize HTTP client with timeout."""
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout, headers={"User-Agent": get_user_agent()}
            )
        return self._session

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """Make HTTP GET request and decode a JSON body."""
        session = await self._ensure_session()

        try:
            async with session.get(url, params=params, headers=headers) as response:
                if response.status >= 400:
                    return APIResponse(
                        status_code=response.status,
                        data=None,
                        timestamp=datetime.now(),
                        url=str(response.url),
                    )
                data = await response.json(content_type=None)
                return APIResponse(
                    status_code=response.status,
                    data=data,
                    timestamp=datetime.now(),
                    url=str(response.url),
                )
        except asyncio.TimeoutError as e:
            raise SkyNetworkException(f"Request to {url} timed out") from e
        except aiohttp.ClientError as e:
            raise SkyNetworkException(f"Network error: {e}") from e
        except json.JSONDecodeError as e:
            raise SkyDataException(f"Invalid JSON response: {e}") from e

    async def get_text(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """Make HTTP GET request and return the body as text."""
        session = await self._ensure_session()

        try:
            async with session.get(url, params=params, headers=headers) as response:
                text = await response.text()
                return APIResponse(
                    status_code=response.status,
                    data=text,
                    timestamp=datetime.now(),
                    url=str(response.url),
                )
        except asyncio.TimeoutError as e:
            raise SkyNetworkException(f"Request to {url} timed out") from e
        except aiohttp.ClientError as e:
            raise SkyNetworkException(f"Network error: {e}") from e
        except UnicodeDecodeError as e:
            raise SkyDataException(f"Undecodable response body: {e}") from e

    async def close(self) -> None:
        """Close HTTP client."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP client session closed")
        self._session = None

"""
Tests for the aiohttp based HTTP client.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from src.api.http_client import AioHttpClient, SkyDataException, SkyNetworkException
from conftest import make_response


def mock_session(status=200, payload=None, text="", json_error=None):
    """Build a session whose get() is an async context manager."""
    response = MagicMock()
    response.status = status
    response.url = "https://example.test/data"
    response.json = AsyncMock(return_value=payload, side_effect=json_error)
    response.text = AsyncMock(return_value=text)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get.return_value = context
    session.closed = False
    session.close = AsyncMock()
    return session


class TestAPIResponse:
    """Tests for APIResponse."""

    @pytest.mark.parametrize("status,ok", [(200, True), (204, True), (301, False), (404, False)])
    def test_ok(self, status, ok):
        assert make_response(None, status_code=status).ok is ok


class TestAioHttpClient:
    """Test cases for AioHttpClient class."""

    @pytest.mark.asyncio
    async def test_get_json(self):
        client = AioHttpClient()
        session = mock_session(payload={"kp": 3})
        with patch.object(client, "_ensure_session", AsyncMock(return_value=session)):
            response = await client.get_json("https://example.test/data", {"q": "x"})

        assert response.ok
        assert response.data == {"kp": 3}
        session.get.assert_called_once_with("https://example.test/data", params={"q": "x"}, headers=None)

    @pytest.mark.asyncio
    async def test_error_status_has_no_data(self):
        client = AioHttpClient()
        session = mock_session(status=404)
        with patch.object(client, "_ensure_session", AsyncMock(return_value=session)):
            response = await client.get_json("https://example.test/data")

        assert response.status_code == 404
        assert response.data is None

    @pytest.mark.asyncio
    async def test_invalid_json_raises_data_exception(self):
        client = AioHttpClient()
        session = mock_session(json_error=json.JSONDecodeError("Expecting value", "", 0))
        with patch.object(client, "_ensure_session", AsyncMock(return_value=session)):
            with pytest.raises(SkyDataException):
                await client.get_json("https://example.test/data")

    @pytest.mark.asyncio
    async def test_client_error_raises_network_exception(self):
        client = AioHttpClient()
        session = mock_session()
        session.get.side_effect = aiohttp.ClientConnectionError("refused")
        with patch.object(client, "_ensure_session", AsyncMock(return_value=session)):
            with pytest.raises(SkyNetworkException):
                await client.get_json("https://example.test/data")

    @pytest.mark.asyncio
    async def test_timeout_raises_network_exception(self):
        client = AioHttpClient()
        session = mock_session()
        session.get.side_effect = asyncio.TimeoutError()
        with patch.object(client, "_ensure_session", AsyncMock(return_value=session)):
            with pytest.raises(SkyNetworkException, match="timed out"):
                await client.get_text("https://example.test/data")

    @pytest.mark.asyncio
    async def test_get_text(self):
        client = AioHttpClient()
        session = mock_session(text="ISS (ZARYA)\n1 ...\n2 ...")
        with patch.object(client, "_ensure_session", AsyncMock(return_value=session)):
            response = await client.get_text("https://example.test/tle")
        assert response.data.startswith("ISS (ZARYA)")

    @pytest.mark.asyncio
    async def test_close(self):
        client = AioHttpClient()
        session = mock_session()
        client._session = session
        await client.close()
        session.close.assert_awaited_once()
        assert client._session is None

"""Legacy REST transport for GitHub endpoints the GraphQL API does not cover."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from repo_bot.libs.models import BotInfo
from repo_bot.utils.constants import PROJECT_API_PREVIEW_ACCEPT


def github_headers(bot_info: BotInfo) -> dict[str, str]:
    """Authorization and User-Agent headers sent with every REST call."""
    return {
        "Authorization": f"bearer {bot_info.github_token}",
        "User-Agent": bot_info.github_name,
    }


def project_api_preview_headers(bot_info: BotInfo) -> dict[str, str]:
    """Standard headers plus the project API preview flag needed by project columns."""
    return {"Accept": PROJECT_API_PREVIEW_ACCEPT, **github_headers(bot_info)}


class RestClient:
    """
    Thin async wrapper around ``httpx.AsyncClient``.

    Request bodies are passed as already-serialized JSON strings so the wire payload
    is exactly what the caller built. Responses are logged and returned; HTTP error
    statuses are not raised, transport failures (``httpx.HTTPError``) and malformed URLs
    (``httpx.InvalidURL``) are.
    """

    def __init__(self, bot_info: BotInfo, logger: logging.Logger, timeout: int = 30) -> None:
        self.bot_info = bot_info
        self.logger = logger
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> RestClient:
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(timeout=self.timeout)
                self.logger.debug("REST client initialized")
            return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            self.logger.debug("REST client closed")

    async def send_request(self, uri: str, body: str, headers: dict[str, str] | None = None) -> httpx.Response:
        """POST ``body`` to ``uri``; standard GitHub headers are used when none are given."""
        return await self._request("POST", uri, body, headers)

    async def patch(self, uri: str, body: str, headers: dict[str, str] | None = None) -> httpx.Response:
        return await self._request("PATCH", uri, body, headers)

    async def _request(self, method: str, uri: str, body: str, headers: dict[str, str] | None) -> httpx.Response:
        client = await self._ensure_client()
        response = await client.request(
            method,
            uri,
            content=body,
            headers=headers if headers is not None else github_headers(self.bot_info),
        )
        self._log_response(method, uri, response)
        return response

    def _log_response(self, method: str, uri: str, response: httpx.Response) -> None:
        if response.is_error:
            self.logger.warning(f"{method} {uri} returned {response.status_code}: {response.text}")
        else:
            self.logger.debug(f"{method} {uri} returned {response.status_code}")

"""GraphQL transport for the GitHub API with authentication, retries and error classification."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any

import aiohttp
from gql import Client, gql
from gql.transport.aiohttp import AIOHTTPTransport
from gql.transport.exceptions import (
    TransportError,
    TransportQueryError,
    TransportServerError,
)
from graphql import DocumentNode

from repo_bot.libs.models import BotInfo
from repo_bot.utils.constants import GRAPHQL_ACCEPT_HEADER


class GraphQLError(Exception):
    """Base exception for GraphQL client errors."""

    pass


class GraphQLAuthenticationError(GraphQLError):
    """Raised when authentication fails."""

    pass


class GraphQLRateLimitError(GraphQLError):
    """Raised when rate limit is exceeded."""

    pass


class GraphQLClient:
    """
    Async GraphQL client for the GitHub API.

    Provides:
    - Token-based authentication built from BotInfo
    - Retry with jittered exponential backoff on server errors and dropped connections
    - Classification of failures into GraphQLError subclasses

    Every failure surfaces as a GraphQLError (or subclass); cancellation is propagated untouched.

    Example:
        >>> async with GraphQLClient(bot_info=bot_info, logger=logger) as client:
        ...     result = await client.execute("query { viewer { login } }")
        >>> print(result["viewer"]["login"])
    """

    def __init__(
        self,
        bot_info: BotInfo,
        logger: logging.Logger,
        retry_count: int = 3,
        timeout: int = 90,
    ) -> None:
        """
        Initialize GraphQL client.

        Args:
            bot_info: Bot identity used for the Authorization and User-Agent headers
            logger: Logger instance for operation logging
            retry_count: Number of attempts for retryable failures (default: 3)
            timeout: Total request timeout in seconds (default: 90)
        """
        self.bot_info = bot_info
        self.logger = logger
        self.retry_count = max(1, retry_count)
        self.timeout = timeout
        self._client: Client | None = None
        self._session: Any = None
        self._transport: AIOHTTPTransport | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> GraphQLClient:
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Create and connect the gql client once; later calls reuse the pooled session."""
        async with self._client_lock:
            if self._client is not None:
                return

            self._transport = AIOHTTPTransport(
                url=self.bot_info.graphql_url,
                headers={
                    "Authorization": f"Bearer {self.bot_info.github_token}",
                    "Accept": GRAPHQL_ACCEPT_HEADER,
                    "User-Agent": self.bot_info.github_name,
                },
                ssl=True,
                client_session_args={"timeout": aiohttp.ClientTimeout(total=self.timeout)},
            )

            self._client = Client(
                transport=self._transport,
                fetch_schema_from_transport=False,
            )
            self._session = await self._client.connect_async()

            self.logger.debug(f"GraphQL client connected to {self.bot_info.graphql_url}")

    async def _reset_client(self) -> None:
        if self._client:
            try:
                await self._client.close_async()
            except Exception as ex:
                self.logger.debug(f"Ignoring error during client close: {ex}")
        self._client = None
        self._session = None
        self._transport = None

    async def close(self) -> None:
        """Close the GraphQL client and cleanup resources."""
        if self._client:
            await self._reset_client()
            self.logger.debug("GraphQL client closed")

    async def execute(
        self,
        query: str | DocumentNode,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query or mutation.

        Args:
            query: GraphQL query string or DocumentNode
            variables: Variables for the query (optional)

        Returns:
            Query result as a dictionary

        Raises:
            GraphQLAuthenticationError: If authentication fails
            GraphQLRateLimitError: If rate limit is exceeded
            GraphQLError: For other GraphQL errors
        """
        if isinstance(query, str):
            query = gql(query)

        for attempt in range(self.retry_count):
            try:
                await self._ensure_client()
                result = await self._session.execute(query, variable_values=variables)
                return dict(result) if result else {}

            except TransportQueryError as error:
                error_msg = str(error.errors[0] if error.errors else error)

                if "401" in error_msg or "Unauthorized" in error_msg or "Bad credentials" in error_msg:
                    self.logger.error(f"AUTH FAILED: GraphQL authentication failed: {error_msg}")
                    raise GraphQLAuthenticationError(f"Authentication failed: {error_msg}") from error

                if "rate limit" in error_msg.lower() or "RATE_LIMITED" in error_msg:
                    self.logger.error(f"RATE LIMIT: GraphQL rate limit exceeded: {error_msg}")
                    raise GraphQLRateLimitError(f"Rate limit exceeded: {error_msg}") from error

                self.logger.debug(f"GraphQL query error: {error_msg}")
                raise GraphQLError(f"GraphQL query failed: {error_msg}") from error

            except TransportServerError as error:
                error_msg = str(error)
                if attempt < self.retry_count - 1:
                    wait_seconds = (2**attempt) + random.uniform(0, 1)
                    self.logger.warning(
                        f"SERVER ERROR: GraphQL server error (attempt {attempt + 1}/{self.retry_count}): {error_msg}. "
                        f"Retrying in {wait_seconds:.1f}s...",
                    )
                    await asyncio.sleep(wait_seconds)
                    continue

                raise GraphQLError(f"GraphQL server error after {self.retry_count} attempts: {error_msg}") from error

            except TransportError as error:
                error_msg = str(error)
                await self._reset_client()
                if attempt < self.retry_count - 1:
                    self.logger.warning(
                        f"CONNECTION CLOSED: GraphQL connection closed "
                        f"(attempt {attempt + 1}/{self.retry_count}): {error_msg}. "
                        f"Recreating client and retrying...",
                    )
                    await asyncio.sleep(1)
                    continue

                raise GraphQLError(f"GraphQL connection closed: {error_msg}") from error

            except TimeoutError as error:
                await self._reset_client()
                raise GraphQLError(f"GraphQL query timeout after {self.timeout}s") from error

            except asyncio.CancelledError:
                self.logger.debug("GraphQL query cancelled")
                raise

            except Exception as error:
                error_type = type(error).__name__
                raise GraphQLError(f"Unexpected error [{error_type}]: {error}") from error

        # Unreachable while retry_count >= 1
        raise GraphQLError("Failed to execute query after all retries")

"""Tests for the check run lifecycle."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from repo_bot.libs.graphql.unified_api import UnifiedGitHubAPI
from repo_bot.libs.handlers.check_run_handler import CheckRunHandler
from repo_bot.libs.models import (
    CheckConclusion,
    CheckRunStatus,
    CreatedCheckRun,
    Error,
    GitHubID,
    MutationResult,
    Ok,
)

CHECK_RUN_RESPONSE = {"createCheckRun": {"checkRun": {"id": "CR_1", "url": "https://github.com/org/repo/runs/1"}}}


class TestCheckRunHandler:
    """Test suite for CheckRunHandler class."""

    @pytest.fixture
    def check_run_handler(
        self, initialized_api: UnifiedGitHubAPI, repo_id: GitHubID, mock_logger: MagicMock
    ) -> CheckRunHandler:
        """Create a CheckRunHandler over the mocked unified API."""
        return CheckRunHandler(unified_api=initialized_api, repo_id=repo_id, logger=mock_logger)

    @staticmethod
    async def _create(handler: CheckRunHandler, **kwargs: Any) -> MutationResult[CreatedCheckRun]:
        return await handler.create(
            head_sha="abc123",
            name="ci",
            title="Queued",
            summary="Waiting for runner",
            details_url="https://ci.example.com/1",
            **kwargs,
        )

    async def test_create_then_complete(
        self, check_run_handler: CheckRunHandler, mock_graphql_client: AsyncMock, mock_logger: MagicMock
    ) -> None:
        """Test that a created check run can be completed through its handle."""
        mock_graphql_client.execute.return_value = CHECK_RUN_RESPONSE

        result = await self._create(check_run_handler)

        assert result == Ok(CreatedCheckRun(id=GitHubID("CR_1"), url="https://github.com/org/repo/runs/1"))
        mock_logger.info.assert_any_call("Created a new check run: https://github.com/org/repo/runs/1")

        mock_graphql_client.execute.return_value = {}
        completed = await check_run_handler.complete(
            check_run_id=result.value.id,
            conclusion=CheckConclusion.SUCCESS,
            title="Passed",
            summary="All tests passed",
        )

        assert completed is True
        query, variables = mock_graphql_client.execute.call_args[0]
        assert "updateCheckRun" in query
        assert "status: COMPLETED" in query
        assert variables["checkRunId"] == "CR_1"
        assert variables["conclusion"] == "SUCCESS"

    async def test_default_status_is_queued(
        self, check_run_handler: CheckRunHandler, mock_graphql_client: AsyncMock
    ) -> None:
        mock_graphql_client.execute.return_value = CHECK_RUN_RESPONSE

        await self._create(check_run_handler)

        _, variables = mock_graphql_client.execute.call_args[0]
        assert variables["status"] == "QUEUED"

    async def test_complete_unknown_check_run_is_rejected(
        self, check_run_handler: CheckRunHandler, mock_graphql_client: AsyncMock, mock_logger: MagicMock
    ) -> None:
        """Test that completing a never-created check run sends nothing."""
        completed = await check_run_handler.complete(
            check_run_id=GitHubID("CR_never_created"),
            conclusion=CheckConclusion.FAILURE,
            title="Failed",
            summary="nope",
        )

        assert completed is False
        mock_graphql_client.execute.assert_not_called()
        mock_logger.error.assert_called_once()

    async def test_failed_create_gives_no_handle(
        self, check_run_handler: CheckRunHandler, mock_graphql_client: AsyncMock, mock_logger: MagicMock
    ) -> None:
        mock_graphql_client.execute.return_value = {"createCheckRun": {"checkRun": None}}

        result = await self._create(check_run_handler)

        assert isinstance(result, Error)
        mock_logger.error.assert_called_once_with(
            "Error while creating a check run: No new check run URL provided in GitHub answer."
        )
        assert not check_run_handler.is_known(GitHubID("CR_1"))

    async def test_completed_create_requires_conclusion(
        self, check_run_handler: CheckRunHandler, mock_graphql_client: AsyncMock
    ) -> None:
        """Test that a COMPLETED check run without a conclusion is refused locally."""
        result = await self._create(check_run_handler, status=CheckRunStatus.COMPLETED)

        assert isinstance(result, Error)
        mock_graphql_client.execute.assert_not_called()

    async def test_completed_create_with_conclusion(
        self, check_run_handler: CheckRunHandler, mock_graphql_client: AsyncMock
    ) -> None:
        mock_graphql_client.execute.return_value = CHECK_RUN_RESPONSE

        result = await self._create(
            check_run_handler, status=CheckRunStatus.COMPLETED, conclusion=CheckConclusion.SKIPPED
        )

        assert result.is_ok()
        _, variables = mock_graphql_client.execute.call_args[0]
        assert variables["status"] == "COMPLETED"
        assert variables["conclusion"] == "SKIPPED"

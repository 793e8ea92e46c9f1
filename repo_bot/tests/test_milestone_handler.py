"""Tests for reflecting the closing pull request milestone on issues."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from repo_bot.libs.handlers.milestone_handler import MilestoneHandler
from repo_bot.libs.models import Error, GitHubID, IssueCloserInfo, Ok
from repo_bot.utils.constants import (
    ISSUE_IN_RIGHT_MILESTONE_MSG,
    MILESTONE_CHANGED_COMMENT,
    PR_WITHOUT_MILESTONE_MSG,
)

ISSUE = GitHubID("I_1")
MILESTONE_M = GitHubID("MI_m")
MILESTONE_N = GitHubID("MI_n")
COMMENT_URL = "https://github.com/org/repo/issues/1#issuecomment-1"


class TestMilestoneHandler:
    """Test suite for MilestoneHandler class."""

    @pytest.fixture
    def unified_api(self) -> MagicMock:
        """Create a mock unified API exposing the milestone and comment mutations."""
        api = MagicMock()
        api.update_milestone = AsyncMock(return_value=None)
        api.post_comment = AsyncMock(return_value=Ok(COMMENT_URL))
        api.report_on_posting_comment = MagicMock()
        return api

    @pytest.fixture
    def milestone_handler(self, unified_api: MagicMock, mock_logger: MagicMock) -> MilestoneHandler:
        return MilestoneHandler(unified_api=unified_api, logger=mock_logger)

    async def test_pr_without_milestone(
        self, milestone_handler: MilestoneHandler, unified_api: MagicMock, mock_logger: MagicMock
    ) -> None:
        """Test that nothing is sent when the closing PR has no milestone."""
        await milestone_handler.reflect_pull_request_milestone(IssueCloserInfo(ISSUE, MILESTONE_N, None))

        unified_api.update_milestone.assert_not_called()
        unified_api.post_comment.assert_not_called()
        mock_logger.info.assert_called_once_with(PR_WITHOUT_MILESTONE_MSG)

    async def test_issue_without_milestone(self, milestone_handler: MilestoneHandler, unified_api: MagicMock) -> None:
        """Test that an issue without milestone gets the PR milestone silently."""
        await milestone_handler.reflect_pull_request_milestone(IssueCloserInfo(ISSUE, None, MILESTONE_M))

        unified_api.update_milestone.assert_awaited_once_with(ISSUE, MILESTONE_M)
        unified_api.post_comment.assert_not_called()

    async def test_same_milestone_is_idempotent(
        self, milestone_handler: MilestoneHandler, unified_api: MagicMock, mock_logger: MagicMock
    ) -> None:
        info = IssueCloserInfo(ISSUE, GitHubID("MI_m"), GitHubID("MI_m"))

        await milestone_handler.reflect_pull_request_milestone(info)
        await milestone_handler.reflect_pull_request_milestone(info)

        unified_api.update_milestone.assert_not_called()
        unified_api.post_comment.assert_not_called()
        assert mock_logger.info.call_count == 2
        mock_logger.info.assert_called_with(ISSUE_IN_RIGHT_MILESTONE_MSG)

    async def test_different_milestone_updates_and_comments(
        self, milestone_handler: MilestoneHandler, unified_api: MagicMock
    ) -> None:
        await milestone_handler.reflect_pull_request_milestone(IssueCloserInfo(ISSUE, MILESTONE_N, MILESTONE_M))

        unified_api.update_milestone.assert_awaited_once_with(ISSUE, MILESTONE_M)
        unified_api.post_comment.assert_awaited_once_with(ISSUE, MILESTONE_CHANGED_COMMENT)
        unified_api.report_on_posting_comment.assert_called_once_with(Ok(COMMENT_URL))

    async def test_different_milestone_reports_comment_failure(
        self, milestone_handler: MilestoneHandler, unified_api: MagicMock
    ) -> None:
        unified_api.post_comment.return_value = Error("forbidden")

        await milestone_handler.reflect_pull_request_milestone(IssueCloserInfo(ISSUE, MILESTONE_N, MILESTONE_M))

        unified_api.report_on_posting_comment.assert_called_once_with(Error("forbidden"))

    async def test_update_and_comment_run_concurrently(
        self, milestone_handler: MilestoneHandler, unified_api: MagicMock
    ) -> None:
        """Test that the milestone update and the comment are in flight at the same time."""
        comment_started = asyncio.Event()
        finished: list[str] = []

        async def update_milestone(issue_id: GitHubID, milestone_id: GitHubID) -> None:
            # Only completes if the comment was started while the update is pending
            await comment_started.wait()
            finished.append("update")

        async def post_comment(subject_id: GitHubID, message: str) -> Ok[str]:
            comment_started.set()
            finished.append("comment")
            return Ok(COMMENT_URL)

        unified_api.update_milestone = AsyncMock(side_effect=update_milestone)
        unified_api.post_comment = AsyncMock(side_effect=post_comment)

        await asyncio.wait_for(
            milestone_handler.reflect_pull_request_milestone(IssueCloserInfo(ISSUE, MILESTONE_N, MILESTONE_M)),
            timeout=5,
        )

        assert sorted(finished) == ["comment", "update"]

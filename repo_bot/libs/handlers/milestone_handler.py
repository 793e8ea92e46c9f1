from __future__ import annotations

import asyncio
import logging

from repo_bot.libs.graphql.unified_api import UnifiedGitHubAPI
from repo_bot.libs.models import IssueCloserInfo
from repo_bot.utils.constants import (
    ISSUE_IN_RIGHT_MILESTONE_MSG,
    MILESTONE_CHANGED_COMMENT,
    PR_WITHOUT_MILESTONE_MSG,
)


class MilestoneHandler:
    def __init__(self, unified_api: UnifiedGitHubAPI, logger: logging.Logger) -> None:
        self.unified_api = unified_api
        self.logger = logger

    async def reflect_pull_request_milestone(self, issue_closer_info: IssueCloserInfo) -> None:
        """
        Copy the milestone of the closing pull request onto the issue it closed.

        - PR without milestone: nothing to do
        - issue without milestone: set the PR milestone
        - same milestone: nothing to do
        - different milestone: set the PR milestone and explain the change in a comment,
          both sent concurrently
        """
        milestone = issue_closer_info.closer_milestone_id
        if milestone is None:
            self.logger.info(PR_WITHOUT_MILESTONE_MSG)
            return

        previous_milestone = issue_closer_info.milestone_id
        if previous_milestone is None:
            await self.unified_api.update_milestone(issue_closer_info.issue_id, milestone)
            return

        if previous_milestone == milestone:
            self.logger.info(ISSUE_IN_RIGHT_MILESTONE_MSG)
            return

        await asyncio.gather(
            self.unified_api.update_milestone(issue_closer_info.issue_id, milestone),
            self._post_milestone_changed_comment(issue_closer_info),
        )

    async def _post_milestone_changed_comment(self, issue_closer_info: IssueCloserInfo) -> None:
        result = await self.unified_api.post_comment(issue_closer_info.issue_id, MILESTONE_CHANGED_COMMENT)
        self.unified_api.report_on_posting_comment(result)

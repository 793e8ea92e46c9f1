from __future__ import annotations

import logging

from repo_bot.libs.graphql.unified_api import UnifiedGitHubAPI
from repo_bot.libs.models import (
    CheckConclusion,
    CheckRunStatus,
    CreatedCheckRun,
    Error,
    GitHubID,
    MutationResult,
    Ok,
)
from repo_bot.utils.helpers import format_check_run_report


class CheckRunHandler:
    """
    Two-phase check run lifecycle: ``create`` then ``complete``.

    Only ``create`` can bring a check run into existence; the ID it returns is the
    only handle ``complete`` accepts. IDs not created through this handler are rejected
    without calling GitHub.
    """

    def __init__(self, unified_api: UnifiedGitHubAPI, repo_id: GitHubID, logger: logging.Logger) -> None:
        self.unified_api = unified_api
        self.repo_id = repo_id
        self.logger = logger
        self._created: set[GitHubID] = set()

    async def create(
        self,
        head_sha: str,
        name: str,
        title: str,
        summary: str,
        details_url: str,
        status: CheckRunStatus = CheckRunStatus.QUEUED,
        conclusion: CheckConclusion | None = None,
        text: str | None = None,
        external_id: str | None = None,
    ) -> MutationResult[CreatedCheckRun]:
        if status is CheckRunStatus.COMPLETED and conclusion is None:
            return Error(f"Check run {name} cannot be created as {status.value} without a conclusion")

        result = await self.unified_api.create_check_run(
            repo_id=self.repo_id,
            head_sha=head_sha,
            name=name,
            status=status,
            title=title,
            summary=summary,
            details_url=details_url,
            conclusion=conclusion,
            text=text,
            external_id=external_id,
        )
        if isinstance(result, Ok):
            self._created.add(result.value.id)
            self.logger.info(format_check_run_report(result))
        else:
            self.logger.error(format_check_run_report(result))
        return result

    def is_known(self, check_run_id: GitHubID) -> bool:
        return check_run_id in self._created

    async def complete(
        self,
        check_run_id: GitHubID,
        conclusion: CheckConclusion,
        title: str,
        summary: str,
        details_url: str | None = None,
        text: str | None = None,
    ) -> bool:
        """
        Move a check run created by this handler to COMPLETED.

        Returns:
            False if ``check_run_id`` was not created by this handler (nothing is sent), True otherwise
        """
        if not self.is_known(check_run_id):
            self.logger.error(f"Refusing to update unknown check run {check_run_id}: create it first")
            return False

        await self.unified_api.update_check_run(
            check_run_id=check_run_id,
            repo_id=self.repo_id,
            conclusion=conclusion,
            title=title,
            summary=summary,
            details_url=details_url,
            text=text,
        )
        return True

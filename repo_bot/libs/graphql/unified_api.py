"""Unified GitHub mutation interface over the GraphQL and legacy REST transports.

Strategy:
- GraphQL: every mutation the GraphQL schema covers (cards, comments, milestones, PRs, check runs, labels)
- REST: status checks, adding pull requests to project columns, and the REST milestone endpoint

Each operation is bound to exactly one transport (see ``OPERATION_API_TYPES``); there is no
automatic fallback between them. Milestones are reachable through both on purpose, callers
pick ``update_milestone`` or ``update_milestone_rest`` depending on what the platform offers.

Result conventions:
- fire-and-log: failures are logged, nothing is returned
- fire-and-report: an ``Ok``/``Error`` result is returned for the caller to act on
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

import httpx

from repo_bot.libs.config import Config
from repo_bot.libs.exceptions import UnknownOperationError
from repo_bot.libs.graphql.graphql_builders import MutationBuilder
from repo_bot.libs.graphql.graphql_client import GraphQLClient, GraphQLError
from repo_bot.libs.models import (
    BotInfo,
    CheckConclusion,
    CheckRunStatus,
    CreatedCheckRun,
    Error,
    GitHubID,
    IssueReference,
    MergeMethod,
    MutationResult,
    Ok,
)
from repo_bot.libs.rest_client import RestClient, project_api_preview_headers
from repo_bot.utils.constants import (
    ADD_LABELS_STR,
    ADD_PR_TO_COLUMN_STR,
    CLOSE_PULL_REQUEST_STR,
    CREATE_CHECK_RUN_STR,
    MERGE_PULL_REQUEST_STR,
    MOVE_CARD_TO_COLUMN_STR,
    NO_CHECK_RUN_URL_MSG,
    NO_COMMENT_URL_MSG,
    POST_COMMENT_STR,
    PULL_REQUEST_CONTENT_TYPE,
    REMOVE_LABELS_STR,
    SEND_STATUS_CHECK_STR,
    UPDATE_CHECK_RUN_STR,
    UPDATE_MILESTONE_REST_STR,
    UPDATE_MILESTONE_STR,
)
from repo_bot.utils.helpers import format_comment_report

T = TypeVar("T")


class APIType(Enum):
    """API type for operations."""

    GRAPHQL = "graphql"
    REST = "rest"


OPERATION_API_TYPES: dict[str, APIType] = {
    MOVE_CARD_TO_COLUMN_STR: APIType.GRAPHQL,
    POST_COMMENT_STR: APIType.GRAPHQL,
    UPDATE_MILESTONE_STR: APIType.GRAPHQL,
    CLOSE_PULL_REQUEST_STR: APIType.GRAPHQL,
    MERGE_PULL_REQUEST_STR: APIType.GRAPHQL,
    CREATE_CHECK_RUN_STR: APIType.GRAPHQL,
    UPDATE_CHECK_RUN_STR: APIType.GRAPHQL,
    ADD_LABELS_STR: APIType.GRAPHQL,
    REMOVE_LABELS_STR: APIType.GRAPHQL,
    # Not covered by the GraphQL API
    UPDATE_MILESTONE_REST_STR: APIType.REST,
    SEND_STATUS_CHECK_STR: APIType.REST,
    ADD_PR_TO_COLUMN_STR: APIType.REST,
}


def get_api_type_for_operation(operation: str) -> APIType:
    """
    Determine which API serves an operation.

    Args:
        operation: Operation name

    Returns:
        API type to use

    Raises:
        UnknownOperationError: If the operation is not bound to a transport
    """
    try:
        return OPERATION_API_TYPES[operation]
    except KeyError:
        raise UnknownOperationError(f"No transport configured for operation '{operation}'") from None


def _get_nested(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _ignore_payload(response: dict[str, Any]) -> MutationResult[None]:
    return Ok(None)


def _parse_comment_url(response: dict[str, Any]) -> MutationResult[str]:
    url = _get_nested(response, "addComment", "commentEdge", "node", "url")
    if not isinstance(url, str) or not url:
        return Error(NO_COMMENT_URL_MSG)
    return Ok(url)


def _parse_created_check_run(response: dict[str, Any]) -> MutationResult[CreatedCheckRun]:
    check_run = _get_nested(response, "createCheckRun", "checkRun")
    if not isinstance(check_run, dict) or not check_run.get("url") or not check_run.get("id"):
        return Error(NO_CHECK_RUN_URL_MSG)
    return Ok(CreatedCheckRun(id=GitHubID.of_string(check_run["id"]), url=check_run["url"]))


class UnifiedGitHubAPI:
    """
    Mutation catalog for the bot.

    Example:
        >>> async with UnifiedGitHubAPI(bot_info=bot_info, logger=logger) as api:
        ...     result = await api.post_comment(GitHubID("I_kwDO..."), "Hello!")
        ...     api.report_on_posting_comment(result)
    """

    def __init__(
        self,
        bot_info: BotInfo,
        logger: logging.Logger,
        retry_count: int = 3,
        graphql_timeout: int = 90,
        rest_timeout: int = 30,
    ) -> None:
        """
        Initialize unified API client.

        Args:
            bot_info: Bot identity shared read-only by every call
            logger: Logger instance
            retry_count: Attempts for retryable GraphQL failures
            graphql_timeout: Total GraphQL request timeout in seconds
            rest_timeout: REST request timeout in seconds
        """
        self.bot_info = bot_info
        self.logger = logger
        self.retry_count = retry_count
        self.graphql_timeout = graphql_timeout
        self.rest_timeout = rest_timeout

        self.graphql_client: GraphQLClient | None = None
        self.rest_client: RestClient | None = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: Config, logger: logging.Logger) -> UnifiedGitHubAPI:
        return cls(
            bot_info=BotInfo.from_config(config),
            logger=logger,
            retry_count=config.get_value(value="graphql.retry-count", return_on_none=3),
            graphql_timeout=config.get_value(value="graphql.timeout", return_on_none=90),
            rest_timeout=config.get_value(value="rest.timeout", return_on_none=30),
        )

    async def initialize(self) -> None:
        """Initialize both GraphQL and REST clients."""
        async with self._init_lock:
            if self._initialized:
                return

            self.graphql_client = GraphQLClient(
                bot_info=self.bot_info,
                logger=self.logger,
                retry_count=self.retry_count,
                timeout=self.graphql_timeout,
            )
            self.rest_client = RestClient(bot_info=self.bot_info, logger=self.logger, timeout=self.rest_timeout)

            self._initialized = True
            self.logger.info(f"Unified GitHub API initialized for {self.bot_info.github_host} (GraphQL + REST)")

    async def close(self) -> None:
        """Close and cleanup API clients."""
        if self.graphql_client:
            await self.graphql_client.close()

        if self.rest_client:
            await self.rest_client.close()

        self._initialized = False
        self.logger.info("Unified GitHub API closed")

    async def __aenter__(self) -> UnifiedGitHubAPI:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    @staticmethod
    def _require_api_type(operation: str, api_type: APIType) -> None:
        selected = get_api_type_for_operation(operation)
        if selected is not api_type:
            raise UnknownOperationError(
                f"Operation '{operation}' is served by {selected.value}, not {api_type.value}"
            )

    # ===== Mutation invoker =====

    async def send_graphql_query(
        self,
        operation: str,
        query: str,
        variables: dict[str, Any],
        parse: Callable[[dict[str, Any]], MutationResult[T]],
    ) -> MutationResult[T]:
        """
        Execute one GraphQL mutation and classify its outcome.

        Exactly one call is made to the GraphQL client (which owns retries). Transport
        failures come back as ``Error`` and ``parse`` turns an incomplete success envelope
        into ``Error`` as well, so this never raises for either.

        Args:
            operation: Operation name, must be served by GraphQL
            query: Mutation document
            variables: Serialized variables
            parse: Maps the raw response to a result

        Returns:
            ``Ok`` with the parsed payload, or ``Error`` with a message
        """
        self._require_api_type(operation, APIType.GRAPHQL)
        await self._ensure_initialized()

        self.logger.debug(f"Sending {operation} mutation")
        try:
            response = await self.graphql_client.execute(query, variables)  # type: ignore[union-attr]
        except GraphQLError as ex:
            return Error(str(ex))

        return parse(response)

    def _log_failure(self, action: str, result: MutationResult[Any]) -> None:
        if isinstance(result, Error):
            self.logger.error(f"Error while {action}: {result.message}")

    # ===== GraphQL mutations =====

    async def move_card_to_column(self, card_id: GitHubID, column_id: GitHubID) -> None:
        mutation, variables = MutationBuilder.move_card_to_column(card_id, column_id)
        result = await self.send_graphql_query(MOVE_CARD_TO_COLUMN_STR, mutation, variables, _ignore_payload)
        self._log_failure("moving project card", result)

    async def post_comment(self, subject_id: GitHubID, message: str) -> MutationResult[str]:
        """
        Post a comment on an issue or pull request.

        Returns:
            ``Ok`` with the URL of the new comment, or ``Error``
        """
        mutation, variables = MutationBuilder.post_comment(subject_id, message)
        return await self.send_graphql_query(POST_COMMENT_STR, mutation, variables, _parse_comment_url)

    def report_on_posting_comment(self, result: MutationResult[str]) -> None:
        report = format_comment_report(result)
        if isinstance(result, Error):
            self.logger.error(report)
        else:
            self.logger.info(report)

    async def update_milestone(self, issue_id: GitHubID, milestone_id: GitHubID) -> None:
        mutation, variables = MutationBuilder.update_milestone(issue_id, milestone_id)
        result = await self.send_graphql_query(UPDATE_MILESTONE_STR, mutation, variables, _ignore_payload)
        self._log_failure("updating milestone", result)

    async def close_pull_request(self, pr_id: GitHubID) -> None:
        mutation, variables = MutationBuilder.close_pull_request(pr_id)
        result = await self.send_graphql_query(CLOSE_PULL_REQUEST_STR, mutation, variables, _ignore_payload)
        self._log_failure("closing PR", result)

    async def merge_pull_request(
        self,
        pr_id: GitHubID,
        merge_method: MergeMethod | None = None,
        commit_headline: str | None = None,
        commit_body: str | None = None,
    ) -> None:
        mutation, variables = MutationBuilder.merge_pull_request(
            pr_id, merge_method=merge_method, commit_headline=commit_headline, commit_body=commit_body
        )
        result = await self.send_graphql_query(MERGE_PULL_REQUEST_STR, mutation, variables, _ignore_payload)
        self._log_failure("merging PR", result)

    async def create_check_run(
        self,
        repo_id: GitHubID,
        head_sha: str,
        name: str,
        status: CheckRunStatus,
        title: str,
        summary: str,
        details_url: str,
        conclusion: CheckConclusion | None = None,
        text: str | None = None,
        external_id: str | None = None,
    ) -> MutationResult[CreatedCheckRun]:
        """
        Create a check run on ``head_sha``.

        Returns:
            ``Ok`` with the created check run (its ``id`` is required by ``update_check_run``),
            or ``Error`` when the call failed or GitHub did not return the new check run
        """
        mutation, variables = MutationBuilder.create_check_run(
            repo_id=repo_id,
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
        return await self.send_graphql_query(CREATE_CHECK_RUN_STR, mutation, variables, _parse_created_check_run)

    async def update_check_run(
        self,
        check_run_id: GitHubID,
        repo_id: GitHubID,
        conclusion: CheckConclusion,
        title: str,
        summary: str,
        details_url: str | None = None,
        text: str | None = None,
    ) -> None:
        mutation, variables = MutationBuilder.update_check_run(
            check_run_id=check_run_id,
            repo_id=repo_id,
            conclusion=conclusion,
            title=title,
            summary=summary,
            details_url=details_url,
            text=text,
        )
        result = await self.send_graphql_query(UPDATE_CHECK_RUN_STR, mutation, variables, _ignore_payload)
        self._log_failure("updating check run", result)

    async def add_labels(self, issue_id: GitHubID, label_ids: list[GitHubID]) -> None:
        # Outcome is discarded.
        mutation, variables = MutationBuilder.add_labels(issue_id, label_ids)
        await self.send_graphql_query(ADD_LABELS_STR, mutation, variables, _ignore_payload)

    async def remove_labels(self, issue_id: GitHubID, label_ids: list[GitHubID]) -> None:
        mutation, variables = MutationBuilder.remove_labels(issue_id, label_ids)
        await self.send_graphql_query(REMOVE_LABELS_STR, mutation, variables, _ignore_payload)

    # ===== REST-only operations (GraphQL not supported) =====

    async def _send_rest(
        self,
        operation: str,
        method: str,
        uri: str,
        body: str,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response | None:
        """Send a legacy REST request; transport failures are logged and reported as ``None``."""
        self._require_api_type(operation, APIType.REST)
        await self._ensure_initialized()

        try:
            if method == "PATCH":
                return await self.rest_client.patch(uri, body, headers)  # type: ignore[union-attr]
            return await self.rest_client.send_request(uri, body, headers)  # type: ignore[union-attr]
        except (httpx.HTTPError, httpx.InvalidURL):
            self.logger.exception(f"{operation} failed: {method} {uri}")
            return None

    async def update_milestone_rest(self, issue: IssueReference, milestone: int | None) -> None:
        """
        Set (or clear, with ``None``) the milestone of an issue through the REST API.

        Uses: REST
        Reason: fallback for hosts where the GraphQL ``updateIssue`` milestone input is unavailable
        """
        uri = f"{self.bot_info.api_url}/repos/{issue.owner}/{issue.repo}/issues/{issue.number}"
        body = json.dumps({"milestone": milestone})
        self.logger.info("Sending patch request.")
        await self._send_rest(UPDATE_MILESTONE_REST_STR, "PATCH", uri, body)

    async def remove_milestone_rest(self, issue: IssueReference) -> None:
        await self.update_milestone_rest(issue, None)

    async def send_status_check(
        self,
        repo_full_name: str,
        commit: str,
        state: str,
        url: str,
        context: str,
        description: str,
    ) -> None:
        """
        Create a commit status.

        Uses: REST
        Reason: commit statuses cannot be created through GraphQL
        """
        self.logger.info(f"Sending status check to {repo_full_name} (commit {commit}, state {state})")
        body = json.dumps({
            "state": state,
            "target_url": url,
            "description": description,
            "context": context,
        })
        uri = f"{self.bot_info.api_url}/repos/{repo_full_name}/statuses/{commit}"
        await self._send_rest(SEND_STATUS_CHECK_STR, "POST", uri, body)

    async def add_pr_to_column(self, pr_id: int, column_id: int) -> None:
        """
        Add a pull request to a project column.

        Uses: REST, with the project API preview header

        Args:
            pr_id: Pull request database ID (not the node ID)
            column_id: Project column database ID
        """
        body = json.dumps({"content_id": pr_id, "content_type": PULL_REQUEST_CONTENT_TYPE})
        uri = f"{self.bot_info.api_url}/projects/columns/{column_id}/cards"
        await self._send_rest(
            ADD_PR_TO_COLUMN_STR, "POST", uri, body, headers=project_api_preview_headers(self.bot_info)
        )

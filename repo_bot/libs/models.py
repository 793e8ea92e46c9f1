"""Domain types shared by the mutation layer.

- GitHubID: opaque node identifier, exchanged as a string on the wire
- BotInfo: immutable identity/authentication context for every outbound call
- Ok / Error: two-variant result returned by every GraphQL mutation
- CheckRunStatus, CheckConclusion, MergeMethod: closed wire vocabularies
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar, Union

from repo_bot.libs.exceptions import NoApiTokenError
from repo_bot.utils.constants import DEFAULT_GITHUB_HOST, DEFAULT_GITHUB_NAME

if TYPE_CHECKING:
    from repo_bot.libs.config import Config

T = TypeVar("T")


@dataclass(frozen=True)
class GitHubID:
    """Opaque GitHub GraphQL node ID (e.g. ``PR_kwDOABCD``)."""

    value: str

    @classmethod
    def of_string(cls, value: str) -> GitHubID:
        return cls(value)

    def to_string(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BotInfo:
    """Identity of the bot: token, name sent as User-Agent, and GitHub host."""

    github_token: str
    github_name: str = DEFAULT_GITHUB_NAME
    github_host: str = DEFAULT_GITHUB_HOST

    @property
    def api_url(self) -> str:
        return f"https://api.{self.github_host}"

    @property
    def graphql_url(self) -> str:
        return f"{self.api_url}/graphql"

    @classmethod
    def from_config(cls, config: Config) -> BotInfo:
        token = config.get_value(value="github-token")
        if not token:
            raise NoApiTokenError(f"Config {config.config_path} does not have `github-token`")

        return cls(
            github_token=token,
            github_name=config.get_value(value="github-name", return_on_none=DEFAULT_GITHUB_NAME),
            github_host=config.get_value(value="github-host", return_on_none=DEFAULT_GITHUB_HOST),
        )


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful mutation carrying its payload."""

    value: T

    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Error:
    """Failed mutation carrying a human-readable message."""

    message: str

    def is_ok(self) -> bool:
        return False


MutationResult = Union[Ok[T], Error]


class CheckRunStatus(Enum):
    QUEUED = "QUEUED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class CheckConclusion(Enum):
    ACTION_REQUIRED = "ACTION_REQUIRED"
    CANCELLED = "CANCELLED"
    FAILURE = "FAILURE"
    NEUTRAL = "NEUTRAL"
    SKIPPED = "SKIPPED"
    STALE = "STALE"
    SUCCESS = "SUCCESS"
    TIMED_OUT = "TIMED_OUT"


class MergeMethod(Enum):
    MERGE = "MERGE"
    REBASE = "REBASE"
    SQUASH = "SQUASH"


# Wire tokens are spelled out per member so a new enum value has to be added here too.
CHECK_RUN_STATUS_TOKENS: dict[CheckRunStatus, str] = {
    CheckRunStatus.QUEUED: "QUEUED",
    CheckRunStatus.IN_PROGRESS: "IN_PROGRESS",
    CheckRunStatus.COMPLETED: "COMPLETED",
}

CHECK_CONCLUSION_TOKENS: dict[CheckConclusion, str] = {
    CheckConclusion.ACTION_REQUIRED: "ACTION_REQUIRED",
    CheckConclusion.CANCELLED: "CANCELLED",
    CheckConclusion.FAILURE: "FAILURE",
    CheckConclusion.NEUTRAL: "NEUTRAL",
    CheckConclusion.SKIPPED: "SKIPPED",
    CheckConclusion.STALE: "STALE",
    CheckConclusion.SUCCESS: "SUCCESS",
    CheckConclusion.TIMED_OUT: "TIMED_OUT",
}

MERGE_METHOD_TOKENS: dict[MergeMethod, str] = {
    MergeMethod.MERGE: "MERGE",
    MergeMethod.REBASE: "REBASE",
    MergeMethod.SQUASH: "SQUASH",
}

for _enum, _tokens in (
    (CheckRunStatus, CHECK_RUN_STATUS_TOKENS),
    (CheckConclusion, CHECK_CONCLUSION_TOKENS),
    (MergeMethod, MERGE_METHOD_TOKENS),
):
    _missing = set(_enum) - set(_tokens)
    if _missing:
        raise RuntimeError(f"{_enum.__name__} members without wire token: {sorted(m.name for m in _missing)}")


def string_of_status(status: CheckRunStatus) -> str:
    return CHECK_RUN_STATUS_TOKENS[status]


def string_of_conclusion(conclusion: CheckConclusion) -> str:
    return CHECK_CONCLUSION_TOKENS[conclusion]


def string_of_merge_method(merge_method: MergeMethod) -> str:
    return MERGE_METHOD_TOKENS[merge_method]


@dataclass(frozen=True)
class CreatedCheckRun:
    """Check run returned by createCheckRun; ``id`` is the handle for later updates."""

    id: GitHubID
    url: str


@dataclass(frozen=True)
class IssueCloserInfo:
    """Milestones of a closed issue and of the pull request that closed it."""

    issue_id: GitHubID
    milestone_id: GitHubID | None
    closer_milestone_id: GitHubID | None


@dataclass(frozen=True)
class IssueReference:
    """Issue addressed by owner/repo/number, as the REST API needs it."""

    owner: str
    repo: str
    number: int

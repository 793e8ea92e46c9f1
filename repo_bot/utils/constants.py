DEFAULT_GITHUB_NAME: str = "repo-bot"
DEFAULT_GITHUB_HOST: str = "github.com"
GRAPHQL_ACCEPT_HEADER: str = "application/vnd.github.v4+json"
PROJECT_API_PREVIEW_ACCEPT: str = "application/vnd.github.inertia-preview+json"
PULL_REQUEST_CONTENT_TYPE: str = "PullRequest"

MILESTONE_CHANGED_COMMENT: str = (
    "The milestone of this issue was changed to reflect the one of the pull request that closed it."
)
PR_WITHOUT_MILESTONE_MSG: str = "PR closed without a milestone: doing nothing."
ISSUE_IN_RIGHT_MILESTONE_MSG: str = "Issue is already in the right milestone: doing nothing."
NO_COMMENT_URL_MSG: str = "Error while retrieving URL of posted comment."
NO_CHECK_RUN_URL_MSG: str = "No new check run URL provided in GitHub answer."

# Operation names understood by the transport selector
MOVE_CARD_TO_COLUMN_STR: str = "move_card_to_column"
POST_COMMENT_STR: str = "post_comment"
UPDATE_MILESTONE_STR: str = "update_milestone"
CLOSE_PULL_REQUEST_STR: str = "close_pull_request"
MERGE_PULL_REQUEST_STR: str = "merge_pull_request"
CREATE_CHECK_RUN_STR: str = "create_check_run"
UPDATE_CHECK_RUN_STR: str = "update_check_run"
ADD_LABELS_STR: str = "add_labels"
REMOVE_LABELS_STR: str = "remove_labels"
UPDATE_MILESTONE_REST_STR: str = "update_milestone_rest"
SEND_STATUS_CHECK_STR: str = "send_status_check"
ADD_PR_TO_COLUMN_STR: str = "add_pr_to_column"

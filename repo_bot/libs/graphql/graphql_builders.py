"""GraphQL mutation builders for the GitHub API.

Every builder returns a ``(mutation, variables)`` tuple. Node IDs are converted to their
wire string form here; optional inputs that were not supplied are left out of the
variables entirely instead of being sent as null.
"""

from __future__ import annotations

from typing import Any

from repo_bot.libs.models import (
    CheckConclusion,
    CheckRunStatus,
    GitHubID,
    MergeMethod,
    string_of_conclusion,
    string_of_merge_method,
    string_of_status,
)


def _without_none(variables: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in variables.items() if value is not None}


class MutationBuilder:
    """Builder for GraphQL mutations."""

    @staticmethod
    def move_card_to_column(card_id: GitHubID, column_id: GitHubID) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation moveCardToColumn($cardId: ID!, $columnId: ID!) {
                moveProjectCard(input: {cardId: $cardId, columnId: $columnId}) {
                    clientMutationId
                }
            }
        """
        variables = {
            "cardId": card_id.to_string(),
            "columnId": column_id.to_string(),
        }
        return mutation, variables

    @staticmethod
    def post_comment(subject_id: GitHubID, message: str) -> tuple[str, dict[str, Any]]:
        """
        Add a comment to an issue or pull request.

        Args:
            subject_id: The node ID of the issue or pull request
            message: Comment body

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation postComment($id: ID!, $message: String!) {
                addComment(input: {subjectId: $id, body: $message}) {
                    commentEdge {
                        node {
                            url
                        }
                    }
                }
            }
        """
        variables = {
            "id": subject_id.to_string(),
            "message": message,
        }
        return mutation, variables

    @staticmethod
    def update_milestone(issue_id: GitHubID, milestone_id: GitHubID) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation updateMilestone($issue: ID!, $milestone: ID!) {
                updateIssue(input: {id: $issue, milestoneId: $milestone}) {
                    clientMutationId
                }
            }
        """
        variables = {
            "issue": issue_id.to_string(),
            "milestone": milestone_id.to_string(),
        }
        return mutation, variables

    @staticmethod
    def close_pull_request(pr_id: GitHubID) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation closePullRequest($prId: ID!) {
                closePullRequest(input: {pullRequestId: $prId}) {
                    clientMutationId
                }
            }
        """
        variables = {"prId": pr_id.to_string()}
        return mutation, variables

    @staticmethod
    def merge_pull_request(
        pr_id: GitHubID,
        merge_method: MergeMethod | None = None,
        commit_headline: str | None = None,
        commit_body: str | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """
        Merge a pull request.

        Args:
            pr_id: PR node ID
            merge_method: MERGE, REBASE or SQUASH; the repository default when omitted
            commit_headline: Override for the merge commit headline
            commit_body: Override for the merge commit body

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation mergePullRequest(
                $prId: ID!, $commitHeadline: String, $commitBody: String, $mergeMethod: PullRequestMergeMethod
            ) {
                mergePullRequest(
                    input: {
                        pullRequestId: $prId
                        commitHeadline: $commitHeadline
                        commitBody: $commitBody
                        mergeMethod: $mergeMethod
                    }
                ) {
                    clientMutationId
                }
            }
        """
        variables = _without_none({
            "prId": pr_id.to_string(),
            "commitHeadline": commit_headline,
            "commitBody": commit_body,
            "mergeMethod": string_of_merge_method(merge_method) if merge_method else None,
        })
        return mutation, variables

    @staticmethod
    def create_check_run(
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
    ) -> tuple[str, dict[str, Any]]:
        """
        Create a check run on a commit.

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation newCheckRun(
                $name: String!, $repoId: ID!, $headSha: GitObjectID!, $status: RequestableCheckStatusState!,
                $title: String!, $text: String, $summary: String!, $url: URI!,
                $conclusion: CheckConclusionState, $externalId: String
            ) {
                createCheckRun(
                    input: {
                        status: $status
                        name: $name
                        repositoryId: $repoId
                        headSha: $headSha
                        conclusion: $conclusion
                        detailsUrl: $url
                        output: {title: $title, text: $text, summary: $summary}
                        externalId: $externalId
                    }
                ) {
                    checkRun {
                        id
                        url
                    }
                }
            }
        """
        variables = _without_none({
            "name": name,
            "repoId": repo_id.to_string(),
            "headSha": head_sha,
            "status": string_of_status(status),
            "title": title,
            "text": text,
            "summary": summary,
            "url": details_url,
            "conclusion": string_of_conclusion(conclusion) if conclusion else None,
            "externalId": external_id,
        })
        return mutation, variables

    @staticmethod
    def update_check_run(
        check_run_id: GitHubID,
        repo_id: GitHubID,
        conclusion: CheckConclusion,
        title: str,
        summary: str,
        details_url: str | None = None,
        text: str | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """
        Complete an existing check run with a conclusion.

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation updateCheckRun(
                $checkRunId: ID!, $repoId: ID!, $conclusion: CheckConclusionState!, $url: URI,
                $title: String!, $text: String, $summary: String!
            ) {
                updateCheckRun(
                    input: {
                        checkRunId: $checkRunId
                        repositoryId: $repoId
                        conclusion: $conclusion
                        detailsUrl: $url
                        status: COMPLETED
                        output: {title: $title, text: $text, summary: $summary}
                    }
                ) {
                    clientMutationId
                }
            }
        """
        variables = _without_none({
            "checkRunId": check_run_id.to_string(),
            "repoId": repo_id.to_string(),
            "conclusion": string_of_conclusion(conclusion),
            "url": details_url,
            "title": title,
            "text": text,
            "summary": summary,
        })
        return mutation, variables

    @staticmethod
    def add_labels(issue_id: GitHubID, label_ids: list[GitHubID]) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation labelIssue($issueId: ID!, $labelIds: [ID!]!) {
                addLabelsToLabelable(input: {labelableId: $issueId, labelIds: $labelIds}) {
                    clientMutationId
                }
            }
        """
        variables = {
            "issueId": issue_id.to_string(),
            "labelIds": [label_id.to_string() for label_id in label_ids],
        }
        return mutation, variables

    @staticmethod
    def remove_labels(issue_id: GitHubID, label_ids: list[GitHubID]) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation unlabelIssue($issueId: ID!, $labelIds: [ID!]!) {
                removeLabelsFromLabelable(input: {labelableId: $issueId, labelIds: $labelIds}) {
                    clientMutationId
                }
            }
        """
        variables = {
            "issueId": issue_id.to_string(),
            "labelIds": [label_id.to_string() for label_id in label_ids],
        }
        return mutation, variables

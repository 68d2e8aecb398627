"""Organization member activity retrieval over GitHub GraphQL.

Members are fetched in cursor-paginated pages of ``MEMBER_PAGE_SIZE``. Each
member's ``contributionsCollection`` is scoped to the organization and to the
resolved date window, and is turned into one ``ActivityRecord``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set

from .errors import ApiError, DataValidationError
from .github_client import GitHubClient
from .models import ActivityRecord, DateWindow

logger = logging.getLogger(__name__)

MEMBER_PAGE_SIZE = 25

ORGANIZATION_ID_QUERY = """
query ($org: String!) {
  organization(login: $org) {
    id
  }
}
"""

MEMBER_ACTIVITY_QUERY = """
query ($org: String!, $orgid: ID, $cursorID: String, $from: DateTime, $to: DateTime) {
  organization(login: $org) {
    membersWithRole(first: %d, after: $cursorID) {
      nodes {
        login
        contributionsCollection(organizationID: $orgid, from: $from, to: $to) {
          hasAnyContributions
          totalCommitContributions
          totalIssueContributions
          totalPullRequestContributions
          totalPullRequestReviewContributions
          totalRepositoriesWithContributedIssues
          totalRepositoriesWithContributedCommits
          totalRepositoriesWithContributedPullRequests
          totalRepositoriesWithContributedPullRequestReviews
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
""" % MEMBER_PAGE_SIZE


def _organization(data: Dict[str, Any], org: str) -> Dict[str, Any]:
    organization = data.get("organization")
    if not isinstance(organization, dict):
        raise ApiError(f"Organization '{org}' was not found or is not visible to this token.")
    return organization


def fetch_organization_id(client: GitHubClient, org: str) -> str:
    """Resolve an organization login to its GraphQL node ID.

    Raises:
        ApiError: If the organization does not exist.
    """
    data = client.graphql(ORGANIZATION_ID_QUERY, {"org": org})
    org_id = _organization(data, org).get("id")
    if not org_id:
        raise ApiError(f"Organization '{org}' was returned without an ID.")

    logger.info("Organization ID: %s", org_id)
    return str(org_id)


def _flag(contributions: Dict[str, Any], key: str, login: str) -> bool:
    value = contributions.get(key)
    if not isinstance(value, bool):
        raise DataValidationError(
            f"Contribution field '{key}' for member '{login}' is missing or invalid: {value!r}"
        )
    return value


def _count(contributions: Dict[str, Any], key: str, login: str) -> int:
    value = contributions.get(key)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise DataValidationError(
            f"Contribution field '{key}' for member '{login}' is missing or invalid: {value!r}"
        )
    return value


def parse_member(node: Dict[str, Any]) -> ActivityRecord:
    """Convert one ``membersWithRole`` node into an ``ActivityRecord``.

    Raises:
        DataValidationError: If the login or any contribution field is missing.
    """
    login = node.get("login")
    contributions = node.get("contributionsCollection")
    if not login or not isinstance(contributions, dict):
        raise DataValidationError(f"Member payload is missing required fields: {node}")

    return ActivityRecord(
        login=str(login),
        active=_flag(contributions, "hasAnyContributions", login),
        commits=_count(contributions, "totalCommitContributions", login),
        issues=_count(contributions, "totalIssueContributions", login),
        pull_requests=_count(contributions, "totalPullRequestContributions", login),
        pull_request_reviews=_count(contributions, "totalPullRequestReviewContributions", login),
        repositories_with_issues=_count(
            contributions, "totalRepositoriesWithContributedIssues", login
        ),
        repositories_with_commits=_count(
            contributions, "totalRepositoriesWithContributedCommits", login
        ),
        repositories_with_pull_requests=_count(
            contributions, "totalRepositoriesWithContributedPullRequests", login
        ),
        repositories_with_pull_request_reviews=_count(
            contributions, "totalRepositoriesWithContributedPullRequestReviews", login
        ),
    )


def fetch_member_activity(
    client: GitHubClient,
    org: str,
    org_id: str,
    window: DateWindow,
) -> List[ActivityRecord]:
    """Fetch one activity record per organization member.

    Pages are requested strictly one after another until the API reports no
    further page. Errors are not caught here: a failed page aborts the whole
    fetch and nothing accumulated so far is returned.
    """
    records: List[ActivityRecord] = []
    seen: Set[str] = set()
    cursor: Optional[str] = None
    pages = 0

    while True:
        data = client.graphql(
            MEMBER_ACTIVITY_QUERY,
            {
                "org": org,
                "orgid": org_id,
                "from": GitHubClient.format_datetime(window.start),
                "to": GitHubClient.format_datetime(window.end),
                "cursorID": cursor,
            },
        )
        pages += 1

        members = _organization(data, org).get("membersWithRole") or {}
        page_info = members.get("pageInfo") or {}

        for node in members.get("nodes") or []:
            if not node:
                logger.warning("Skipping empty member node on page %d", pages)
                continue
            record = parse_member(node)
            if record.login in seen:
                logger.warning("Skipping duplicate member %s", record.login)
                continue
            seen.add(record.login)

            logger.info(
                "%s: hasContrib=%s, commits=%d",
                record.login,
                record.active,
                record.commits,
            )
            records.append(record)

        if not page_info.get("hasNextPage"):
            break

        cursor = page_info.get("endCursor")
        if not cursor:
            raise DataValidationError(
                f"Member page {pages} for '{org}' reported more pages without an end cursor."
            )

    logger.debug(
        "Fetched member activity",
        extra={"org": org, "pages": pages, "members": len(records)},
    )
    return records

"""Domain models for organization member activity reporting.

These dataclasses model only the subset of GitHub GraphQL payload fields that
the CSV report needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SortField(str, Enum):
    """Metric names accepted as the report sort column."""

    ACTIVE = "activeContrib"
    COMMITS = "commitContrib"
    ISSUES = "issueContrib"
    PULL_REQUESTS = "prContrib"
    PULL_REQUEST_REVIEWS = "prreviewContrib"
    REPOSITORIES_WITH_ISSUES = "repoIssueContrib"
    REPOSITORIES_WITH_COMMITS = "repoCommitContrib"
    REPOSITORIES_WITH_PULL_REQUESTS = "repoPullRequestContrib"
    REPOSITORIES_WITH_PULL_REQUEST_REVIEWS = "repoPullRequestReviewContrib"


@dataclass(frozen=True, slots=True)
class ActivityRecord:
    """Contribution totals for one organization member inside a date window."""

    login: str
    active: bool
    commits: int
    issues: int
    pull_requests: int
    pull_request_reviews: int
    repositories_with_issues: int
    repositories_with_commits: int
    repositories_with_pull_requests: int
    repositories_with_pull_request_reviews: int


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Resolved contribution window and its display labels."""

    start: datetime
    end: datetime
    file_label: str
    log_label: str
    column_label: str

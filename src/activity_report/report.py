"""CSV rendering for member activity reports.

This module provides utilities for:
- Ordering activity records by one of the known contribution metrics.
- Building the header row with the resolved date-window label.
- Serializing the header and records as CSV text with ``TRUE``/``FALSE`` flags.
"""

from __future__ import annotations

import csv
import io
from typing import Callable, Dict, List, Sequence, Union

from .models import ActivityRecord, DateWindow, SortField

Cell = Union[str, int, bool]

SORT_ACCESSORS: Dict[SortField, Callable[[ActivityRecord], Union[int, bool]]] = {
    SortField.ACTIVE: lambda record: record.active,
    SortField.COMMITS: lambda record: record.commits,
    SortField.ISSUES: lambda record: record.issues,
    SortField.PULL_REQUESTS: lambda record: record.pull_requests,
    SortField.PULL_REQUEST_REVIEWS: lambda record: record.pull_request_reviews,
    SortField.REPOSITORIES_WITH_ISSUES: lambda record: record.repositories_with_issues,
    SortField.REPOSITORIES_WITH_COMMITS: lambda record: record.repositories_with_commits,
    SortField.REPOSITORIES_WITH_PULL_REQUESTS: lambda record: record.repositories_with_pull_requests,
    SortField.REPOSITORIES_WITH_PULL_REQUEST_REVIEWS: (
        lambda record: record.repositories_with_pull_request_reviews
    ),
}

# Column order shared by the header and every record row.
_COLUMN_TITLES = (
    "Has active contributions",
    "Commits created",
    "Issues opened",
    "PRs opened",
    "PR reviews",
    "Issue spread",
    "Commit spread",
    "PR spread",
    "PR review spread",
)


def sort_records(
    records: Sequence[ActivityRecord],
    sort_field: SortField = SortField.COMMITS,
) -> List[ActivityRecord]:
    """Sort records descending by ``sort_field``.

    ``sorted`` is stable with ``reverse=True`` too, so records with equal values
    keep their fetch order.
    """
    accessor = SORT_ACCESSORS[SortField(sort_field)]
    return sorted(records, key=accessor, reverse=True)


def build_header(column_label: str) -> List[str]:
    """Build the header row, embedding the window label in each metric column."""
    return ["Member"] + [f"{title} ({column_label})" for title in _COLUMN_TITLES]


def record_to_row(record: ActivityRecord) -> List[Cell]:
    """Flatten a record in header column order."""
    return [
        record.login,
        record.active,
        record.commits,
        record.issues,
        record.pull_requests,
        record.pull_request_reviews,
        record.repositories_with_issues,
        record.repositories_with_commits,
        record.repositories_with_pull_requests,
        record.repositories_with_pull_request_reviews,
    ]


def format_cell(value: Cell) -> Union[str, int]:
    """Render booleans as ``TRUE``/``FALSE``; pass other values through."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return value


def render_report(
    records: Sequence[ActivityRecord],
    window: DateWindow,
    sort_field: SortField = SortField.COMMITS,
) -> str:
    """Serialize the sorted records, preceded by the header row, as CSV text.

    Args:
        records: Activity records in fetch order.
        window: Resolved date window whose column label is used in the header.
        sort_field: Metric that orders the rows, highest first.

    Returns:
        CSV text with ``\\n`` line endings.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(build_header(window.column_label))

    for record in sort_records(records, sort_field):
        writer.writerow([format_cell(value) for value in record_to_row(record)])

    return buffer.getvalue()

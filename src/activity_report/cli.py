"""Command-line argument parsing for the member activity report."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import DEFAULT_COMMITTER_EMAIL, DEFAULT_COMMITTER_NAME
from .date_window import DEFAULT_DAYS
from .models import SortField


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for report generation.

    Returns:
        Parsed CLI arguments containing the organization, target repository,
        date window, sort metric and committer identity.
    """
    parser = argparse.ArgumentParser(
        prog="activity-report",
        description=(
            "Generate a CSV report of GitHub organization member contributions "
            "and commit it to a repository."
        ),
    )

    parser.add_argument(
        "--org",
        default=None,
        help="GitHub organization login (default: organization of the workflow event).",
    )
    parser.add_argument(
        "--repository",
        default=None,
        help="Target repository as owner/name (default: $GITHUB_REPOSITORY).",
    )
    parser.add_argument(
        "--from-date",
        default=None,
        help="Window start as YYYY-MM-DD. Used only together with --to-date.",
    )
    parser.add_argument(
        "--to-date",
        default=None,
        help="Window end as YYYY-MM-DD. Used only together with --from-date.",
    )
    parser.add_argument(
        "--days",
        type=_positive_int,
        default=DEFAULT_DAYS,
        help=f"Trailing window length in days when no date range is given (default: {DEFAULT_DAYS}).",
    )
    parser.add_argument(
        "--sort",
        choices=[field.value for field in SortField],
        default=SortField.COMMITS.value,
        help="Metric used to order the report, highest first (default: commitContrib).",
    )
    parser.add_argument(
        "--committer-name",
        default=DEFAULT_COMMITTER_NAME,
        help=f"Name recorded on the report commit (default: {DEFAULT_COMMITTER_NAME}).",
    )
    parser.add_argument(
        "--committer-email",
        default=DEFAULT_COMMITTER_EMAIL,
        help=f"Email recorded on the report commit (default: {DEFAULT_COMMITTER_EMAIL}).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)

"""Tests for command-line argument parsing."""

import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from activity_report.cli import parse_args


def test_parse_args_with_valid_arguments():
    """Verify CLI parsing succeeds when all options are provided."""
    args = parse_args(
        [
            "--org",
            "octo-org",
            "--repository",
            "octo-org/reports",
            "--from-date",
            "2024-01-01",
            "--to-date",
            "2024-01-31",
            "--days",
            "14",
            "--sort",
            "prContrib",
            "--committer-name",
            "bot",
            "--committer-email",
            "bot@example.com",
        ]
    )

    assert args.org == "octo-org"
    assert args.repository == "octo-org/reports"
    assert args.from_date == "2024-01-01"
    assert args.to_date == "2024-01-31"
    assert args.days == 14
    assert args.sort == "prContrib"
    assert args.committer_name == "bot"
    assert args.committer_email == "bot@example.com"
    assert args.verbose is False


def test_parse_args_defaults(monkeypatch):
    """Verify defaults when no options are given on the command line."""
    monkeypatch.setattr(sys, "argv", ["activity-report"])

    args = parse_args()

    assert args.org is None
    assert args.from_date is None
    assert args.to_date is None
    assert args.days == 30
    assert args.sort == "commitContrib"
    assert args.committer_name == "github-actions"
    assert args.committer_email == "github-actions@github.com"


@pytest.mark.parametrize("days", ["-1", "0", "ten"])
def test_parse_args_with_invalid_days_fails_validation(days):
    """Verify CLI parsing exits with an error when --days is not a positive integer."""
    with pytest.raises(SystemExit):
        parse_args(["--days", days])


def test_parse_args_with_unknown_sort_fails_validation():
    """Verify CLI parsing rejects sort names outside the known metrics."""
    with pytest.raises(SystemExit):
        parse_args(["--sort", "userName"])

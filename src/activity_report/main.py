"""Entry point for the organization member activity report."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

from .activity import fetch_member_activity, fetch_organization_id
from .cli import parse_args
from .config import load_config
from .date_window import resolve_date_window
from .errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    DataValidationError,
)
from .github_client import GitHubClient
from .publisher import build_report_path, publish_report
from .report import render_report

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_AUTHENTICATION_ERROR = 3
EXIT_API_ERROR = 4
EXIT_DATA_VALIDATION_ERROR = 5


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _fail(message: str, exit_code: int) -> int:
    print(f"ERROR: {message}", file=sys.stderr)
    return exit_code


def orchestrate_report_generation(argv: Optional[Sequence[str]] = None) -> int:
    """Run one report: resolve window, fetch activity, render CSV, publish.

    Nothing is published unless every previous step succeeded.

    Returns:
        Process exit code; ``0`` on success.
    """
    try:
        args = parse_args(argv)
        _configure_logging(args.verbose)

        config = load_config(
            organization=args.org,
            repository=args.repository,
            from_date=args.from_date,
            to_date=args.to_date,
            days=args.days,
            sort=args.sort,
            committer_name=args.committer_name,
            committer_email=args.committer_email,
        )
        client = GitHubClient(config=config)

        window = resolve_date_window(config.from_date, config.to_date, config.days)
        logger.info(
            "Generating report for %s from %s to %s (%s)",
            config.organization,
            GitHubClient.format_datetime(window.start),
            GitHubClient.format_datetime(window.end),
            window.log_label,
        )

        org_id = fetch_organization_id(client, config.organization)
        records = fetch_member_activity(client, config.organization, org_id, window)

        if not records:
            logger.warning("No contributions found for any members.")
        else:
            logger.info("Found contributions for %d members", len(records))

        csv_text = render_report(records, window, config.sort_field)

        run_time = datetime.now(timezone.utc)
        report_path = build_report_path(config.organization, window, run_time)
        publish_report(
            client,
            owner=config.owner,
            repo=config.repository,
            path=report_path,
            csv_text=csv_text,
            committer_name=config.committer_name,
            committer_email=config.committer_email,
            run_time=run_time,
        )
    except AuthenticationError as exc:
        return _fail(str(exc), EXIT_AUTHENTICATION_ERROR)
    except ConfigurationError as exc:
        return _fail(str(exc), EXIT_CONFIGURATION_ERROR)
    except ApiError as exc:
        logger.debug("GitHub API failure", exc_info=True)
        return _fail(str(exc), EXIT_API_ERROR)
    except DataValidationError as exc:
        logger.debug("Invalid GitHub payload", exc_info=True)
        return _fail(str(exc), EXIT_DATA_VALIDATION_ERROR)
    except Exception as exc:
        logger.exception("Unexpected failure while generating the report")
        return _fail(str(exc), EXIT_UNEXPECTED_ERROR)

    print(f"Report written to {report_path}")
    return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    return orchestrate_report_generation(argv)


if __name__ == "__main__":
    raise SystemExit(main())

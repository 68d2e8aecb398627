"""Publishing of the rendered CSV report into a GitHub repository."""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from .github_client import GitHubClient
from .models import DateWindow

logger = logging.getLogger(__name__)

REPORT_DIRECTORY = "reports"


def build_report_path(org: str, window: DateWindow, run_time: datetime) -> str:
    """Return ``reports/<org>-<run timestamp>-<window file label>.csv``."""
    timestamp = run_time.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    return f"{REPORT_DIRECTORY}/{org}-{timestamp}-{window.file_label}.csv"


def build_commit_message(run_time: datetime) -> str:
    return f"{run_time.astimezone(timezone.utc):%Y-%m-%d} Member contribution report"


def publish_report(
    client: GitHubClient,
    owner: str,
    repo: str,
    path: str,
    csv_text: str,
    committer_name: str,
    committer_email: str,
    run_time: datetime,
) -> Dict[str, Any]:
    """Commit the CSV report to ``owner/repo`` at ``path``.

    Conflicts and other host-side failures are not handled here; they surface
    as ``ApiError`` from the client.
    """
    content = base64.b64encode(csv_text.encode("utf-8")).decode("ascii")

    logger.info("Writing report to %s", path, extra={"owner": owner, "repo": repo})
    response = client.create_or_update_file_contents(
        owner=owner,
        repo=repo,
        path=path,
        message=build_commit_message(run_time),
        content=content,
        committer={"name": committer_name, "email": committer_email},
    )
    logger.info("Report successfully pushed to the repository.")
    return response

"""Configuration parsing and validation for the member activity report."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Optional

from .date_window import DEFAULT_DAYS
from .errors import AuthenticationError, ConfigurationError
from .models import SortField

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_COMMITTER_NAME = "github-actions"
DEFAULT_COMMITTER_EMAIL = "github-actions@github.com"


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the report generator."""

    organization: str
    owner: str
    repository: str
    token: str
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    days: int = DEFAULT_DAYS
    sort_field: SortField = SortField.COMMITS
    committer_name: str = DEFAULT_COMMITTER_NAME
    committer_email: str = DEFAULT_COMMITTER_EMAIL
    api_url: str = DEFAULT_API_URL


def _organization_from_event() -> Optional[str]:
    """Read ``organization.login`` from the triggering workflow event payload."""
    event_path = os.getenv("GITHUB_EVENT_PATH", "").strip()
    if not event_path:
        return None

    try:
        with open(event_path, encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Unable to read event payload from '{event_path}'.") from exc

    organization = payload.get("organization") if isinstance(payload, dict) else None
    if not isinstance(organization, dict):
        return None

    login = organization.get("login")
    return str(login) if login else None


def _parse_sort_field(value: Optional[str]) -> SortField:
    if not value:
        return SortField.COMMITS

    try:
        return SortField(value)
    except ValueError as exc:
        allowed = ", ".join(field.value for field in SortField)
        raise ConfigurationError(
            f"Invalid value for 'sort': '{value}'. Expected one of: {allowed}."
        ) from exc


def load_config(
    organization: Optional[str] = None,
    repository: Optional[str] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    days: int = DEFAULT_DAYS,
    sort: Optional[str] = None,
    committer_name: Optional[str] = None,
    committer_email: Optional[str] = None,
) -> Config:
    """Build and validate application configuration.

    Args:
        organization: GitHub organization login. Defaults to the organization of
            the workflow event at ``GITHUB_EVENT_PATH``.
        repository: Target ``owner/name`` repository for the report commit.
            Defaults to ``GITHUB_REPOSITORY``.
        from_date: Optional explicit window start (``YYYY-MM-DD``).
        to_date: Optional explicit window end (``YYYY-MM-DD``).
        days: Positive trailing window length used without explicit dates.
        sort: Metric name used to order the report.
        committer_name: Name recorded on the report commit.
        committer_email: Email recorded on the report commit.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If a value is missing or invalid.
        AuthenticationError: If ``GITHUB_TOKEN`` is not configured.
    """
    if days <= 0:
        raise ConfigurationError("Invalid value for 'days': expected an integer greater than 0.")

    sort_field = _parse_sort_field(sort)

    token: str = os.getenv("GITHUB_TOKEN", "").strip()
    if not token:
        raise AuthenticationError(
            "Missing required GitHub token. "
            "Set the 'GITHUB_TOKEN' environment variable before running the report."
        )

    org = (organization or "").strip() or _organization_from_event()
    if not org:
        raise ConfigurationError(
            "Missing organization. Pass --org or run from a workflow event that "
            "includes an organization."
        )

    target = (repository or "").strip() or os.getenv("GITHUB_REPOSITORY", "").strip()
    if not target:
        raise ConfigurationError(
            "Missing target repository. Pass --repository or set 'GITHUB_REPOSITORY'."
        )

    owner, _, repo_name = target.partition("/")
    if not owner or not repo_name or "/" in repo_name:
        raise ConfigurationError(
            f"Invalid value for 'repository': '{target}'. Expected 'owner/name'."
        )

    api_url = os.getenv("GITHUB_API_URL", "").strip() or DEFAULT_API_URL

    return Config(
        organization=org,
        owner=owner,
        repository=repo_name,
        token=token,
        from_date=from_date or None,
        to_date=to_date or None,
        days=days,
        sort_field=sort_field,
        committer_name=committer_name or DEFAULT_COMMITTER_NAME,
        committer_email=committer_email or DEFAULT_COMMITTER_EMAIL,
        api_url=api_url.rstrip("/"),
    )

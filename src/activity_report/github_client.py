"""GitHub GraphQL and REST client with rate-limit aware retries."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .errors import ApiError, RateLimitError

logger = logging.getLogger(__name__)

_ABUSE_MARKERS = ("secondary rate limit", "abuse detection")


class GitHubClient:
    """Small client for the GitHub endpoints used by the activity report.

    Every call goes through :meth:`_request`, which applies one retry policy:

    - A rate-limit response is retried once after the delay the server asks
      for; a second rate-limit response on the same request raises
      ``RateLimitError``.
    - Connection errors, timeouts and 5xx responses are retried up to
      ``_MAX_RETRIES`` times with capped exponential backoff.
    - Secondary (abuse) rate limits are logged and surface as ``ApiError``.
    """

    _API_VERSION = "2022-11-28"
    _MAX_RETRIES = 3
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including the token and API URL.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._config = config
        self._timeout_seconds = timeout_seconds
        self._base_url = config.api_url

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": self._API_VERSION,
                "User-Agent": "org-member-activity-report",
            }
        )

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the API root."""
        return f"{self._base_url}/{path.lstrip('/')}"

    @staticmethod
    def format_datetime(value: datetime) -> str:
        """Format a datetime as UTC ISO8601 suitable for GraphQL ``DateTime`` values."""
        utc_value = value.astimezone(timezone.utc)
        return utc_value.isoformat().replace("+00:00", "Z")

    def _backoff_seconds(self, failures: int) -> int:
        return min(self._MAX_BACKOFF_SECONDS, 2 ** (failures - 1))

    def _rate_limit_delay(self, response: requests.Response) -> int:
        """Seconds to wait before retrying a rate-limited request."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                return max(1, int(retry_after_header))
            except ValueError:
                pass

        reset_header = response.headers.get("X-RateLimit-Reset")
        if reset_header:
            try:
                return max(1, int(float(reset_header) - time.time()))
            except ValueError:
                pass

        return 1

    @staticmethod
    def _graphql_errors(response: requests.Response) -> List[Dict[str, Any]]:
        try:
            payload = response.json()
        except ValueError:
            return []
        if not isinstance(payload, dict):
            return []
        errors = payload.get("errors") or []
        return [error for error in errors if isinstance(error, dict)]

    def _is_abuse_limited(self, response: requests.Response) -> bool:
        if response.status_code != 403:
            return False
        body = (response.text or "").lower()
        return any(marker in body for marker in _ABUSE_MARKERS)

    def _is_rate_limited(self, response: requests.Response) -> bool:
        status_code = response.status_code
        if status_code == 429:
            return True
        if status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            return True
        if status_code == 200:
            return any(error.get("type") == "RATE_LIMITED" for error in self._graphql_errors(response))
        return False

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute one logical API request under the retry policy.

        Raises:
            RateLimitError: If the request is rate limited twice.
            ApiError: If transient failures outlast the retries, the API returns
                HTTP >= 400, or the response is not a JSON object.
        """
        url = self._build_url(path)
        transient_failures = 0
        rate_limit_retried = False

        while True:
            try:
                response = self._session.request(
                    method,
                    url,
                    json=body,
                    timeout=self._timeout_seconds,
                )
            except requests.RequestException as exc:
                transient_failures += 1
                if transient_failures > self._MAX_RETRIES:
                    raise ApiError(f"GitHub request failed after retries: {method} {url}") from exc
                logger.info(
                    "Retrying GitHub request after network error",
                    extra={"method": method, "url": url, "attempt": transient_failures},
                )
                time.sleep(self._backoff_seconds(transient_failures))
                continue

            status_code = response.status_code

            if self._is_abuse_limited(response):
                logger.warning("Abuse limit detected for %s %s", method, url)
            elif self._is_rate_limited(response):
                logger.warning("Rate limit hit for request %s %s", method, url)
                if rate_limit_retried:
                    raise RateLimitError(f"GitHub rate limit exceeded after retry: {method} {url}")
                rate_limit_retried = True
                delay = self._rate_limit_delay(response)
                logger.info("Retrying after %d seconds...", delay)
                time.sleep(delay)
                continue
            elif 500 <= status_code <= 599:
                transient_failures += 1
                if transient_failures <= self._MAX_RETRIES:
                    time.sleep(self._backoff_seconds(transient_failures))
                    continue

            if status_code >= 400:
                raise ApiError(
                    "GitHub API request failed: "
                    f"{method} {url} returned {status_code} - {response.text}"
                )

            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(f"GitHub API returned invalid JSON: {method} {url}") from exc

            if not isinstance(payload, dict):
                raise ApiError(f"GitHub API returned unexpected payload shape: {method} {url}")

            return payload

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        Raises:
            ApiError: If the response carries GraphQL errors or no data.
        """
        payload = self._request("POST", "graphql", body={"query": query, "variables": variables or {}})

        errors = payload.get("errors")
        if errors:
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in errors
            )
            raise ApiError(f"GitHub GraphQL query failed: {messages}")

        data = payload.get("data")
        if not isinstance(data, dict):
            raise ApiError("GitHub GraphQL response did not include a data object.")

        return data

    def create_or_update_file_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: str,
        committer: Dict[str, str],
    ) -> Dict[str, Any]:
        """Create or update one file in a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: File path inside the repository.
            message: Commit message.
            content: Base64-encoded file body.
            committer: Mapping with ``name`` and ``email``.

        Returns:
            The API response describing the new commit and content.
        """
        return self._request(
            "PUT",
            f"repos/{owner}/{repo}/contents/{path.lstrip('/')}",
            body={"message": message, "content": content, "committer": committer},
        )

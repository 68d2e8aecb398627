"""Tests for GitHub API client retry behavior with mocked HTTP."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from activity_report.config import Config
from activity_report.errors import ApiError, RateLimitError
from activity_report.github_client import GitHubClient


def _build_client() -> GitHubClient:
    config = Config(
        organization="octo-org",
        owner="octo-org",
        repository="reports",
        token="gh-token",
    )
    return GitHubClient(config=config)


def _response(status_code: int, payload=None, text: str = "", headers: dict | None = None):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.json.return_value = payload if payload is not None else {}
    return response


def test_session_sends_bearer_token_and_api_version_headers():
    """Verify the session is authenticated with the configured token."""
    client = _build_client()

    assert client._session.headers["Authorization"] == "Bearer gh-token"
    assert client._session.headers["X-GitHub-Api-Version"] == GitHubClient._API_VERSION


def test_format_datetime_uses_utc_z_suffix():
    """Verify datetimes are sent as UTC ISO8601 with a Z suffix."""
    value = datetime(2024, 3, 1, 5, 30, tzinfo=timezone(timedelta(hours=2)))

    assert GitHubClient.format_datetime(value) == "2024-03-01T03:30:00Z"


def test_graphql_posts_query_and_returns_data():
    """Verify graphql() posts query and variables and unwraps the data object."""
    client = _build_client()
    client._session.request = Mock(return_value=_response(200, {"data": {"organization": {"id": "O_1"}}}))

    data = client.graphql("query { x }", {"org": "octo-org"})

    assert data == {"organization": {"id": "O_1"}}
    args, kwargs = client._session.request.call_args
    assert args == ("POST", "https://api.github.com/graphql")
    assert kwargs["json"] == {"query": "query { x }", "variables": {"org": "octo-org"}}
    assert kwargs["timeout"] == 30


def test_graphql_errors_raise_api_error_with_messages():
    """Verify GraphQL error payloads surface their messages as ApiError."""
    client = _build_client()
    payload = {"data": None, "errors": [{"type": "NOT_FOUND", "message": "Could not resolve"}]}
    client._session.request = Mock(return_value=_response(200, payload))

    with pytest.raises(ApiError, match="Could not resolve"):
        client.graphql("query { x }")


def test_rate_limit_is_retried_once_after_retry_after_delay():
    """Verify a 429 response is retried once after the Retry-After delay."""
    client = _build_client()
    limited = _response(429, headers={"Retry-After": "7"})
    ok = _response(200, {"data": {"ok": True}})
    client._session.request = Mock(side_effect=[limited, ok])

    with patch("activity_report.github_client.time.sleep") as sleep_mock:
        data = client.graphql("query { ok }")

    assert data == {"ok": True}
    assert client._session.request.call_count == 2
    sleep_mock.assert_called_once_with(7)


def test_second_rate_limit_on_same_request_raises():
    """Verify a second consecutive rate-limit response is not retried."""
    client = _build_client()
    limited = _response(403, text="API rate limit exceeded", headers={"X-RateLimit-Remaining": "0", "Retry-After": "1"})
    client._session.request = Mock(side_effect=[limited, limited, _response(200, {"data": {}})])

    with patch("activity_report.github_client.time.sleep") as sleep_mock:
        with pytest.raises(RateLimitError):
            client.graphql("query { ok }")

    assert client._session.request.call_count == 2
    assert sleep_mock.call_count == 1


def test_graphql_rate_limited_error_uses_reset_header():
    """Verify RATE_LIMITED GraphQL errors wait until X-RateLimit-Reset before retrying."""
    client = _build_client()
    limited = _response(
        200,
        {"errors": [{"type": "RATE_LIMITED", "message": "API rate limit exceeded"}]},
        headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1060"},
    )
    ok = _response(200, {"data": {"ok": True}})
    client._session.request = Mock(side_effect=[limited, ok])

    with patch("activity_report.github_client.time.time", return_value=1000.0), patch(
        "activity_report.github_client.time.sleep"
    ) as sleep_mock:
        data = client.graphql("query { ok }")

    assert data == {"ok": True}
    sleep_mock.assert_called_once_with(60)


def test_server_errors_are_retried_three_times_then_raise():
    """Verify 5xx responses are retried up to the limit and then raise ApiError."""
    client = _build_client()
    server_error = _response(502, text="bad gateway")
    client._session.request = Mock(side_effect=[server_error] * (client._MAX_RETRIES + 1))

    with patch("activity_report.github_client.time.sleep") as sleep_mock:
        with pytest.raises(ApiError, match="502"):
            client.graphql("query { ok }")

    assert client._session.request.call_count == client._MAX_RETRIES + 1
    assert [call.args[0] for call in sleep_mock.call_args_list] == [1, 2, 4]


def test_network_error_is_retried_and_recovers():
    """Verify connection errors are retried with backoff before succeeding."""
    client = _build_client()
    client._session.request = Mock(
        side_effect=[requests.ConnectionError("reset"), _response(200, {"data": {"ok": True}})]
    )

    with patch("activity_report.github_client.time.sleep") as sleep_mock:
        data = client.graphql("query { ok }")

    assert data == {"ok": True}
    sleep_mock.assert_called_once_with(1)


def test_network_errors_exhaust_retries_and_raise_api_error():
    """Verify persistent network errors raise ApiError after the retries."""
    client = _build_client()
    client._session.request = Mock(side_effect=requests.Timeout("slow"))

    with patch("activity_report.github_client.time.sleep"):
        with pytest.raises(ApiError):
            client.graphql("query { ok }")

    assert client._session.request.call_count == client._MAX_RETRIES + 1


def test_abuse_limit_is_logged_and_not_retried(caplog):
    """Verify secondary rate limits log a warning and fail without retrying."""
    client = _build_client()
    abuse = _response(
        403,
        text="You have exceeded a secondary rate limit. Please wait a few minutes.",
        headers={"Retry-After": "60"},
    )
    client._session.request = Mock(return_value=abuse)

    with patch("activity_report.github_client.time.sleep") as sleep_mock:
        with pytest.raises(ApiError) as exc_info:
            client.graphql("query { ok }")

    assert not isinstance(exc_info.value, RateLimitError)
    assert client._session.request.call_count == 1
    sleep_mock.assert_not_called()
    assert "Abuse limit detected" in caplog.text


def test_client_error_is_not_retried():
    """Verify non-retryable 4xx responses raise immediately."""
    client = _build_client()
    client._session.request = Mock(return_value=_response(401, text="Bad credentials"))

    with patch("activity_report.github_client.time.sleep") as sleep_mock:
        with pytest.raises(ApiError, match="401 - Bad credentials"):
            client.graphql("query { ok }")

    sleep_mock.assert_not_called()


def test_create_or_update_file_contents_puts_to_contents_endpoint():
    """Verify the publish call targets the repository contents endpoint."""
    client = _build_client()
    client._session.request = Mock(return_value=_response(201, {"content": {"path": "reports/a.csv"}}))

    result = client.create_or_update_file_contents(
        owner="octo-org",
        repo="reports",
        path="reports/a.csv",
        message="msg",
        content="YQ==",
        committer={"name": "bot", "email": "bot@example.com"},
    )

    assert result == {"content": {"path": "reports/a.csv"}}
    args, kwargs = client._session.request.call_args
    assert args == ("PUT", "https://api.github.com/repos/octo-org/reports/contents/reports/a.csv")
    assert kwargs["json"] == {
        "message": "msg",
        "content": "YQ==",
        "committer": {"name": "bot", "email": "bot@example.com"},
    }


def test_create_or_update_file_contents_surfaces_conflict():
    """Verify host-reported conflicts surface as ApiError unchanged."""
    client = _build_client()
    client._session.request = Mock(return_value=_response(409, text="sha does not match"))

    with pytest.raises(ApiError, match="409"):
        client.create_or_update_file_contents(
            owner="o", repo="r", path="p.csv", message="m", content="", committer={}
        )


def test_transient_failure_between_rate_limits_does_not_reset_retry():
    """Verify a server error between two rate limits still exhausts the single rate-limit retry."""
    client = _build_client()
    limited = _response(429, headers={"Retry-After": "2"})
    server_error = _response(502, text="bad gateway")
    client._session.request = Mock(side_effect=[limited, server_error, limited, _response(200, {"data": {}})])

    with patch("activity_report.github_client.time.sleep") as sleep_mock:
        with pytest.raises(RateLimitError):
            client.graphql("query { ok }")

    assert client._session.request.call_count == 3
    assert [call.args[0] for call in sleep_mock.call_args_list] == [2, 1]

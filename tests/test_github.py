"""Tests for GitHub client module."""

import json
import threading
from unittest.mock import patch

import pytest
import requests
import responses

from release_mirror.errors import (
    ManifestDecodeError,
    ManifestFetchError,
    ReleaseCreateError,
    ReleaseFetchError,
)
from release_mirror.github import GitHubClient
from release_mirror.models import Release, ReleasePayload

from .conftest import DOWNSTREAM_URL, MANIFEST_URL, UPSTREAM_URL, releases_payload


class TestFetchReleases:
    """Test cases for GitHubClient.fetch_releases."""

    @responses.activate
    def test_fetch_releases_success(self) -> None:
        """Test releases are decoded in API order."""
        responses.add(
            responses.GET,
            UPSTREAM_URL,
            json=releases_payload(("v2.1", "new"), ("v2.0", "old")),
            status=200,
        )

        client = GitHubClient()
        releases = client.fetch_releases(UPSTREAM_URL)

        assert releases == [
            Release(tag_name="v2.1", body="new"),
            Release(tag_name="v2.0", body="old"),
        ]

    @responses.activate
    def test_fetch_releases_is_unauthenticated(self) -> None:
        """Test no Authorization header is sent when listing releases."""
        responses.add(responses.GET, UPSTREAM_URL, json=[], status=200)

        client = GitHubClient()
        assert client.fetch_releases(UPSTREAM_URL) == []

        assert len(responses.calls) == 1
        assert "Authorization" not in responses.calls[0].request.headers
        assert responses.calls[0].request.headers["User-Agent"].startswith(
            "release-mirror/"
        )

    @responses.activate
    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_fetch_releases_http_error(self, status: int) -> None:
        """Test HTTP errors carry the status code."""
        responses.add(responses.GET, UPSTREAM_URL, status=status)

        client = GitHubClient()
        with pytest.raises(ReleaseFetchError) as excinfo:
            client.fetch_releases(UPSTREAM_URL)

        assert excinfo.value.status_code == status
        assert excinfo.value.url == UPSTREAM_URL

    @responses.activate
    def test_fetch_releases_malformed_json(self) -> None:
        """Test a non-JSON body is a fetch error."""
        responses.add(responses.GET, UPSTREAM_URL, body="<html>", status=200)

        client = GitHubClient()
        with pytest.raises(ReleaseFetchError, match="invalid JSON"):
            client.fetch_releases(UPSTREAM_URL)

    @responses.activate
    def test_fetch_releases_not_an_array(self) -> None:
        """Test a JSON object instead of an array is a fetch error."""
        responses.add(
            responses.GET, UPSTREAM_URL, json={"message": "Not Found"}, status=200
        )

        client = GitHubClient()
        with pytest.raises(ReleaseFetchError, match="JSON array"):
            client.fetch_releases(UPSTREAM_URL)

    @responses.activate
    def test_fetch_releases_entry_without_tag(self) -> None:
        """Test an entry missing tag_name is a fetch error."""
        responses.add(responses.GET, UPSTREAM_URL, json=[{"body": "x"}], status=200)

        client = GitHubClient()
        with pytest.raises(ReleaseFetchError, match="tag_name"):
            client.fetch_releases(UPSTREAM_URL)

    @responses.activate
    def test_fetch_releases_connection_error(self) -> None:
        """Test transport failures are reported as fetch errors."""
        responses.add(
            responses.GET,
            UPSTREAM_URL,
            body=requests.exceptions.ConnectionError("connection refused"),
        )

        client = GitHubClient()
        with pytest.raises(ReleaseFetchError) as excinfo:
            client.fetch_releases(UPSTREAM_URL)

        assert excinfo.value.status_code is None


class TestFetchManifest:
    """Test cases for GitHubClient.fetch_manifest."""

    @responses.activate
    def test_fetch_manifest_success(self) -> None:
        """Test the manifest is returned as text."""
        responses.add(
            responses.GET, MANIFEST_URL, body="// swift-tools-version:5.3\n", status=200
        )

        client = GitHubClient()
        assert client.fetch_manifest(MANIFEST_URL) == "// swift-tools-version:5.3\n"

    @responses.activate
    def test_fetch_manifest_non_ascii(self) -> None:
        """Test UTF-8 content is decoded correctly."""
        responses.add(
            responses.GET, MANIFEST_URL, body="// café ✓".encode("utf-8"), status=200
        )

        client = GitHubClient()
        assert client.fetch_manifest(MANIFEST_URL) == "// café ✓"

    @responses.activate
    def test_fetch_manifest_empty_body(self) -> None:
        """Test an empty body is returned rather than raised."""
        responses.add(responses.GET, MANIFEST_URL, body="", status=200)

        client = GitHubClient()
        assert client.fetch_manifest(MANIFEST_URL) == ""

    @responses.activate
    def test_fetch_manifest_invalid_utf8(self) -> None:
        """Test binary content raises a decode error."""
        responses.add(responses.GET, MANIFEST_URL, body=b"\x89PNG\r\n\x1a\n\xff", status=200)

        client = GitHubClient()
        with pytest.raises(ManifestDecodeError):
            client.fetch_manifest(MANIFEST_URL)

    @responses.activate
    def test_fetch_manifest_http_error(self) -> None:
        """Test an error page is not returned as manifest content."""
        responses.add(responses.GET, MANIFEST_URL, body="404: Not Found", status=404)

        client = GitHubClient()
        with pytest.raises(ManifestFetchError) as excinfo:
            client.fetch_manifest(MANIFEST_URL)

        assert excinfo.value.status_code == 404

    @responses.activate
    def test_fetch_manifest_connection_error(self) -> None:
        """Test an unreachable endpoint raises a fetch error."""
        responses.add(
            responses.GET,
            MANIFEST_URL,
            body=requests.exceptions.Timeout("timed out"),
        )

        client = GitHubClient()
        with pytest.raises(ManifestFetchError, match="timed out"):
            client.fetch_manifest(MANIFEST_URL)


class TestCreateRelease:
    """Test cases for GitHubClient.create_release."""

    @responses.activate
    def test_create_release_success(self) -> None:
        """Test the release is posted with headers and snake_case body."""
        responses.add(
            responses.POST,
            DOWNSTREAM_URL,
            json={"id": 1, "tag_name": "v2.1"},
            status=201,
        )

        client = GitHubClient()
        payload = ReleasePayload(tag_name="v2.1", name="v2.1", body="new")
        data = client.create_release("ghp_test_token", DOWNSTREAM_URL, payload)

        assert data == {"id": 1, "tag_name": "v2.1"}
        assert len(responses.calls) == 1

        request = responses.calls[0].request
        assert request.headers["Authorization"] == "token ghp_test_token"
        assert request.headers["Accept"] == "application/vnd.github.v3+json"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.body) == {
            "tag_name": "v2.1",
            "name": "v2.1",
            "body": "new",
        }

    @responses.activate
    def test_create_release_token_not_kept(self) -> None:
        """Test the token is only sent with the release creation call."""
        responses.add(responses.POST, DOWNSTREAM_URL, json={}, status=201)
        responses.add(responses.GET, DOWNSTREAM_URL, json=[], status=200)

        client = GitHubClient()
        client.create_release(
            "ghp_test_token", DOWNSTREAM_URL, ReleasePayload("v1", "v1", "")
        )
        client.fetch_releases(DOWNSTREAM_URL)

        assert "Authorization" not in responses.calls[1].request.headers

    @responses.activate
    def test_create_release_validation_failed(self) -> None:
        """Test a duplicate tag rejection surfaces the status code."""
        responses.add(
            responses.POST,
            DOWNSTREAM_URL,
            json={"message": "Validation Failed"},
            status=422,
        )

        client = GitHubClient()
        with pytest.raises(ReleaseCreateError, match="Validation Failed") as excinfo:
            client.create_release(
                "ghp_test_token", DOWNSTREAM_URL, ReleasePayload("v2.1", "v2.1", "new")
            )

        assert excinfo.value.status_code == 422
        assert excinfo.value.tag_name == "v2.1"

    @responses.activate
    def test_create_release_unauthorized_without_json(self) -> None:
        """Test an error without a JSON body still raises."""
        responses.add(responses.POST, DOWNSTREAM_URL, body="Unauthorized", status=401)

        client = GitHubClient()
        with pytest.raises(ReleaseCreateError) as excinfo:
            client.create_release("bad", DOWNSTREAM_URL, ReleasePayload("v1", "v1", ""))

        assert excinfo.value.status_code == 401

    @responses.activate
    def test_create_release_empty_response(self) -> None:
        """Test a success response without a JSON body returns an empty dict."""
        responses.add(responses.POST, DOWNSTREAM_URL, body="", status=201)

        client = GitHubClient()
        data = client.create_release(
            "ghp_test_token", DOWNSTREAM_URL, ReleasePayload("v1", "v1", "")
        )
        assert data == {}


class TestGitHubClient:
    """Test cases for client lifecycle."""

    def test_timeout_configuration(self) -> None:
        """Test timeout configuration."""
        client = GitHubClient(timeout=60)
        assert client.timeout == 60

    def test_session_per_thread(self) -> None:
        """Test each thread gets its own session and close releases all of them."""
        client = GitHubClient(user_agent="release-mirror/test")
        main_session = client.session
        sessions = []

        worker = threading.Thread(target=lambda: sessions.append(client.session))
        worker.start()
        worker.join()

        assert client.session is main_session
        assert sessions[0] is not main_session
        assert sessions[0].headers["User-Agent"] == "release-mirror/test"

        with patch.object(main_session, "close") as main_close, patch.object(
            sessions[0], "close"
        ) as worker_close:
            client.close()

        main_close.assert_called_once()
        worker_close.assert_called_once()
        assert client.session is not main_session

    def test_context_manager(self) -> None:
        """Test GitHubClient as context manager."""
        with GitHubClient() as client:
            assert client.session is not None
            assert "Authorization" not in client.session.headers

"""GitHub API client for reading and creating releases.

This module provides the network side of a sync pass: listing releases of
a repository, downloading the raw manifest file and creating a release on
the downstream repository.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import requests

from .errors import (
    ManifestDecodeError,
    ManifestFetchError,
    ReleaseCreateError,
    ReleaseFetchError,
)
from .models import Release, ReleasePayload

logger = logging.getLogger(__name__)


class GitHubClient:
    """Client for the GitHub releases API and raw file content.

    Read calls are unauthenticated. Only release creation sends the
    access token, which is passed per call and never stored on the session.

    requests does not guarantee Session is thread-safe, so each thread that
    uses the client gets its own session.
    """

    ACCEPT_HEADER = "application/vnd.github.v3+json"

    def __init__(self, timeout: int = 30, user_agent: str = "release-mirror/1.0.0"):
        """Initialize the GitHub client.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._local = threading.local()
        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """HTTP session owned by the calling thread."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()

            # Set user agent for proper API usage
            session.headers.update({"User-Agent": self.user_agent})

            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def fetch_releases(self, url: str) -> list[Release]:
        """Fetch the first page of releases from a list endpoint.

        GitHub returns releases newest first, so the first element is the
        latest release.

        Args:
            url: Full URL of a "list releases" endpoint

        Returns:
            Releases in the order returned by the API

        Raises:
            ReleaseFetchError: If the request fails, returns HTTP >= 400 or
                the body is not a JSON array of releases
        """
        logger.debug(f"Fetching releases from {url}")

        try:
            response = self.session.get(
                url, headers={"Accept": self.ACCEPT_HEADER}, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise ReleaseFetchError(url, None, str(e)) from e

        if response.status_code >= 400:
            raise ReleaseFetchError(url, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ReleaseFetchError(url, response.status_code, "invalid JSON") from e

        if not isinstance(data, list):
            raise ReleaseFetchError(
                url, response.status_code, "expected a JSON array of releases"
            )

        try:
            releases = [Release.from_api(item) for item in data]
        except ValueError as e:
            raise ReleaseFetchError(url, response.status_code, str(e)) from e

        logger.debug(f"Fetched {len(releases)} releases from {url}")
        return releases

    def fetch_manifest(self, url: str) -> str:
        """Download a raw file and decode it as UTF-8 text.

        An empty body is returned as an empty string; callers decide
        whether that is acceptable.

        Raises:
            ManifestFetchError: If the request fails or returns HTTP >= 400
            ManifestDecodeError: If the content is not valid UTF-8
        """
        logger.debug(f"Downloading manifest from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ManifestFetchError(url, reason=str(e)) from e

        if response.status_code >= 400:
            raise ManifestFetchError(url, response.status_code)

        try:
            content = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ManifestDecodeError(url) from e

        logger.debug(f"Downloaded manifest ({len(response.content)} bytes)")
        return content

    def create_release(
        self, token: str, url: str, payload: ReleasePayload
    ) -> dict[str, Any]:
        """Create a release on the repository behind a list endpoint.

        A single attempt is made. Posting an existing tag again is rejected
        by GitHub with HTTP 422.

        Args:
            token: Access token with write access to the repository
            url: Full URL of the repository's releases endpoint
            payload: Release to create

        Returns:
            Decoded response body, or an empty dict if it is not JSON

        Raises:
            ReleaseCreateError: If the request fails or returns HTTP >= 400
        """
        headers = {
            "Accept": self.ACCEPT_HEADER,
            "Content-Type": "application/json",
            "Authorization": f"token {token}",
        }

        logger.debug(f"Posting release {payload.tag_name} to {url}")

        try:
            response = self.session.post(
                url, json=payload.to_json(), headers=headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise ReleaseCreateError(payload.tag_name, None, str(e)) from e

        if response.status_code >= 400:
            reason = ""
            try:
                reason = str(response.json().get("message", ""))
            except (ValueError, AttributeError):
                pass
            raise ReleaseCreateError(payload.tag_name, response.status_code, reason)

        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def close(self) -> None:
        """Close the HTTP sessions of every thread that used the client.

        Should be called when done using the client to clean up resources.
        """
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()

    def __enter__(self) -> GitHubClient:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

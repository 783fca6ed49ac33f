"""Exceptions raised by release-mirror.

Every failure of a sync pass is terminal. Each step raises one of the
errors below and the orchestrator records it in the sync result.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class ReleaseMirrorError(Exception):
    """Base class for all release-mirror failures."""


class NoAccessTokenError(ReleaseMirrorError):
    """No access token was passed on the command line."""

    def __init__(self) -> None:
        super().__init__("No access token provided (usage: release-mirror <access-token>)")


class ReleaseFetchError(ReleaseMirrorError):
    """A releases list could not be fetched or decoded."""

    def __init__(self, url: str, status_code: Optional[int], reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        message = f"Failed to fetch releases from {url}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class EmptyReleaseListError(ReleaseMirrorError):
    """One of the repositories has no releases."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"One of the repositories has no releases: {url}")


class ManifestFetchError(ReleaseMirrorError):
    """The upstream manifest could not be downloaded."""

    def __init__(
        self, url: str, status_code: Optional[int] = None, reason: str = ""
    ) -> None:
        self.url = url
        self.status_code = status_code
        message = f"Failed to fetch manifest from {url}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ManifestDecodeError(ManifestFetchError):
    """The upstream manifest is not valid UTF-8 text."""

    def __init__(self, url: str) -> None:
        super().__init__(url, reason="content is not valid UTF-8 text")


class ManifestEmptyError(ReleaseMirrorError):
    """The upstream manifest was fetched but is empty."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"New manifest not available (empty content at {url})")


class ManifestWriteError(ReleaseMirrorError):
    """The manifest could not be written to the working tree."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write manifest to {path}: {cause}")


class SourceControlError(ReleaseMirrorError):
    """A git invocation could not be started or exited with an error."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        reason: str = "",
    ) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed: {' '.join(self.command)}"
        if returncode is not None:
            message += f" (exit status {returncode})"
        if reason:
            message += f": {reason}"
        elif stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)


class ReleaseCreateError(ReleaseMirrorError):
    """The downstream release could not be created."""

    def __init__(
        self, tag_name: str, status_code: Optional[int], reason: str = ""
    ) -> None:
        self.tag_name = tag_name
        self.status_code = status_code
        message = f"Failed to create release {tag_name}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConfigurationError(ReleaseMirrorError):
    """A deployment setting cannot be used for this sync pass."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Invalid configuration '{key}': {reason}")

"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import Mock

import pytest

from release_mirror.config import MirrorConfig, build_config
from release_mirror.git import GitGateway
from release_mirror.github import GitHubClient

UPSTREAM_URL = "https://api.example.test/repos/upstream/lib/releases"
DOWNSTREAM_URL = "https://api.example.test/repos/mirror/lib/releases"
MANIFEST_URL = "https://raw.example.test/upstream/lib/master/Package.swift"


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    """Return the manifest location inside a temporary working tree."""
    return tmp_path / "Package.swift"


@pytest.fixture
def config(manifest_path: Path) -> MirrorConfig:
    """Return a configuration pointing at test URLs and a temporary manifest."""
    return build_config(
        upstream_releases_url=UPSTREAM_URL,
        downstream_releases_url=DOWNSTREAM_URL,
        manifest_url=MANIFEST_URL,
        manifest_path=str(manifest_path),
        git_executable="git",
    )


@pytest.fixture
def github_client() -> Mock:
    """Return a GitHub client double."""
    return Mock(spec=GitHubClient)


@pytest.fixture
def git_runner() -> Mock:
    """Return a subprocess.run double that always succeeds."""

    def _run(command, **kwargs):
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    return Mock(side_effect=_run)


@pytest.fixture
def git(git_runner: Mock) -> GitGateway:
    """Return a git gateway backed by the runner double."""
    return GitGateway(executable="git", runner=git_runner)


def releases_payload(*releases: tuple[str, str]) -> list[dict]:
    """Build a GitHub "list releases" response body."""
    return [
        {"tag_name": tag, "name": tag, "body": body, "draft": False, "id": i}
        for i, (tag, body) in enumerate(releases)
    ]

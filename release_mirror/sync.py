"""Release synchronization logic for release-mirror.

This module orchestrates one sync pass: compare the latest upstream and
downstream releases and, when they differ, update the manifest, push it
and publish the matching release downstream.
"""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from .config import DEFAULT_CONFIG, MirrorConfig
from .errors import (
    ConfigurationError,
    EmptyReleaseListError,
    ManifestEmptyError,
    ReleaseMirrorError,
)
from .git import GitGateway
from .github import GitHubClient
from .manifest import write_manifest
from .models import Release, ReleasePayload

logger = logging.getLogger(__name__)


class SyncState(enum.Enum):
    """Stages of a sync pass."""

    START = "start"
    COMPARING = "comparing"
    UP_TO_DATE = "up_to_date"
    DIVERGED = "diverged"
    FETCHING_MANIFEST = "fetching_manifest"
    MANIFEST_EMPTY = "manifest_empty"
    MANIFEST_READY = "manifest_ready"
    UPDATING = "updating"
    COMMITTING = "committing"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


SUCCESS_STATES = frozenset({SyncState.UP_TO_DATE, SyncState.DONE})


class SyncResult:
    """Outcome of a sync pass.

    Records every state the pass went through so an operator can tell how
    far the pipeline got before a failure.
    """

    def __init__(self):
        """Initialize a result in the START state."""
        self.history: list[SyncState] = [SyncState.START]
        self.upstream: Optional[Release] = None
        self.downstream: Optional[Release] = None
        self.error: Optional[ReleaseMirrorError] = None

    @property
    def state(self) -> SyncState:
        """Current (final, once the pass is over) state."""
        return self.history[-1]

    def transition(self, state: SyncState) -> None:
        logger.debug(f"State: {self.state.value} -> {state.value}")
        self.history.append(state)

    def fail(self, error: ReleaseMirrorError) -> None:
        self.error = error
        self.transition(SyncState.FAILED)

    @property
    def is_success(self) -> bool:
        """True if the pass ended up to date or with a published release."""
        return self.state in SUCCESS_STATES

    @property
    def exit_code(self) -> int:
        return 0 if self.is_success else 1

    def __str__(self) -> str:
        """String representation of the sync outcome."""
        if self.state is SyncState.UP_TO_DATE and self.downstream is not None:
            return f"Version {self.downstream.tag_name} is latest"
        if self.state is SyncState.DONE and self.upstream is not None:
            return f"Release {self.upstream.tag_name} mirrored successfully"
        if self.state is SyncState.FAILED:
            reached = self.history[-2].value
            return f"Sync failed after '{reached}': {self.error}"
        return f"Sync {self.state.value}"


class ReleaseMirror:
    """Main synchronization orchestrator.

    The two release lists are fetched concurrently. Every step after the
    comparison runs strictly in sequence and only if the previous one
    succeeded. Nothing is rolled back on failure.
    """

    def __init__(
        self,
        access_token: str,
        config: Optional[MirrorConfig] = None,
        github_client: Optional[GitHubClient] = None,
        git: Optional[GitGateway] = None,
    ):
        """Initialize the mirror.

        Args:
            access_token: Token used to create the downstream release
            config: Deployment settings, defaults to DEFAULT_CONFIG
            github_client: Optional GitHub client instance
            git: Optional git gateway instance
        """
        self.access_token = access_token
        self.config = config or DEFAULT_CONFIG
        self.github_client = github_client or GitHubClient(
            timeout=self.config["timeout"]
        )
        self._owns_client = github_client is None
        self.git = git or GitGateway(executable=self.config["git_executable"])

    def run(self) -> SyncResult:
        """Perform one sync pass.

        Failures do not propagate; they end the pass in the FAILED state
        with the error attached to the result.

        Returns:
            Result describing the final state of the pass

        Example:
            >>> with ReleaseMirror("ghp_token") as mirror:
            ...     result = mirror.run()
            >>> print(result)
            Version 17.0.0 is latest
        """
        result = SyncResult()
        try:
            self._run(result)
        except ReleaseMirrorError as e:
            logger.debug(f"Sync pass stopped: {e!r}")
            result.fail(e)
        return result

    def _run(self, result: SyncResult) -> None:
        config = self.config

        result.transition(SyncState.COMPARING)
        logger.info("Checking and comparing releases ...")
        upstream_releases, downstream_releases = self._fetch_release_lists()

        if not upstream_releases:
            raise EmptyReleaseListError(config["upstream_releases_url"])
        if not downstream_releases:
            raise EmptyReleaseListError(config["downstream_releases_url"])

        upstream = result.upstream = upstream_releases[0]
        downstream = result.downstream = downstream_releases[0]

        if upstream.tag_name == downstream.tag_name:
            result.transition(SyncState.UP_TO_DATE)
            return

        result.transition(SyncState.DIVERGED)
        logger.info(
            f"Upstream release {upstream.tag_name} differs from "
            f"mirrored release {downstream.tag_name}"
        )
        commit_message = self._commit_message(upstream.tag_name)

        result.transition(SyncState.FETCHING_MANIFEST)
        logger.info(f"Updating {config['manifest_path']} ...")
        manifest = self.github_client.fetch_manifest(config["manifest_url"])
        if manifest == "":
            result.transition(SyncState.MANIFEST_EMPTY)
            raise ManifestEmptyError(config["manifest_url"])
        result.transition(SyncState.MANIFEST_READY)

        result.transition(SyncState.UPDATING)
        write_manifest(Path(config["manifest_path"]), manifest)
        logger.info(f"✓ {config['manifest_path']} updated successfully")

        result.transition(SyncState.COMMITTING)
        logger.info("Pushing changes ...")
        self.git.push_changes(commit_message)
        logger.info("✓ Changes pushed successfully")

        result.transition(SyncState.PUBLISHING)
        logger.info(f"Creating release {upstream.tag_name} ...")
        self.github_client.create_release(
            self.access_token,
            config["downstream_releases_url"],
            ReleasePayload.from_release(upstream),
        )
        logger.info(f"✓ Release {upstream.tag_name} created successfully")

        result.transition(SyncState.DONE)

    def _commit_message(self, tag_name: str) -> str:
        """Render the commit message, before anything is written."""
        try:
            return self.config["commit_message_template"].format(tag=tag_name)
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError("commit_message_template", repr(e)) from e

    def _fetch_release_lists(self) -> tuple[list[Release], list[Release]]:
        """Fetch upstream and downstream releases concurrently.

        Both requests always run to completion before any error is raised;
        the upstream error wins if both fail.
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="releases") as pool:
            upstream_future = pool.submit(
                self.github_client.fetch_releases, self.config["upstream_releases_url"]
            )
            downstream_future = pool.submit(
                self.github_client.fetch_releases,
                self.config["downstream_releases_url"],
            )

        # Leaving the executor joined both futures
        return upstream_future.result(), downstream_future.result()

    def close(self) -> None:
        """Clean up resources.

        Should be called when done using the mirror.
        """
        if self._owns_client:
            self.github_client.close()

    def __enter__(self) -> ReleaseMirror:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

"""Git command execution for release-mirror.

Stages, commits and pushes the updated manifest in the local checkout by
running the git binary as a subprocess.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional, Union

from .errors import SourceControlError

logger = logging.getLogger(__name__)


class GitGateway:
    """Runs git commands against a working directory.

    Remote and push credentials must already be configured for the git
    binary; nothing is set up here.
    """

    def __init__(
        self,
        executable: str = "/usr/bin/git",
        cwd: Optional[Union[str, Path]] = None,
        runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
    ):
        """Initialize the gateway.

        Args:
            executable: Path to the git binary
            cwd: Working directory, defaults to the process's current directory
            runner: Function with the signature of subprocess.run, defaults to it
        """
        self.executable = executable
        self.cwd = cwd
        self._runner = runner or subprocess.run

    def run(self, *args: str) -> subprocess.CompletedProcess:
        """Run git with the given arguments and wait for it to finish.

        Raises:
            SourceControlError: If git cannot be started or exits non-zero
        """
        command = [self.executable, *args]
        logger.debug(f"Running: {' '.join(command)}")

        try:
            result = self._runner(
                command,
                cwd=self.cwd,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise SourceControlError(command, reason=str(e)) from e

        if result.returncode != 0:
            raise SourceControlError(command, result.returncode, result.stderr or "")

        return result

    def stage_all(self) -> None:
        self.run("add", ".")

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    def push(self) -> None:
        self.run("push")

    def push_changes(self, commit_message: str) -> None:
        """Stage everything, commit and push to the tracked branch.

        Steps run in order and the first failure stops the rest. Nothing
        is undone on failure.

        Args:
            commit_message: Message for the new commit

        Raises:
            SourceControlError: If any of the three git commands fails
        """
        self.stage_all()
        logger.info("✓ Staged changes")

        self.commit(commit_message)
        logger.info(f"✓ Committed: {commit_message}")

        self.push()
        logger.info("✓ Pushed changes")

"""Deployment settings for release-mirror.

The repositories, manifest location and git binary are fixed for a
deployment. They are bundled in a MirrorConfig so the orchestrator can be
pointed at other repositories without touching the pipeline code.
"""

from __future__ import annotations

import logging
from typing import Any

from typing_extensions import TypedDict

logger = logging.getLogger(__name__)


class MirrorConfig(TypedDict):
    """Settings for one mirrored repository pair.

    Release list URLs point at GitHub "list releases" endpoints. The
    downstream URL is also the endpoint new releases are posted to.
    """

    upstream_releases_url: str
    downstream_releases_url: str
    manifest_url: str
    manifest_path: str
    git_executable: str
    commit_message_template: str
    timeout: int


DEFAULT_CONFIG: MirrorConfig = {
    "upstream_releases_url": "https://api.github.com/repos/intercom/intercom-ios/releases",
    "downstream_releases_url": "https://api.github.com/repos/FelixHerrmann/intercom-ios/releases",
    "manifest_url": "https://raw.githubusercontent.com/intercom/intercom-ios/master/Package.swift",
    "manifest_path": "Package.swift",
    "git_executable": "/usr/bin/git",
    "commit_message_template": "Bump to {tag}",
    "timeout": 30,
}


def build_config(**overrides: Any) -> MirrorConfig:
    """Build a configuration from the defaults and validated overrides.

    Args:
        **overrides: Values replacing entries of DEFAULT_CONFIG

    Returns:
        New configuration dictionary

    Raises:
        ValueError: If an override key is unknown or a value is invalid

    Example:
        >>> config = build_config(timeout=10)
        >>> config["timeout"]
        10
    """
    config: MirrorConfig = {**DEFAULT_CONFIG}

    for key, value in overrides.items():
        if key not in DEFAULT_CONFIG:
            raise ValueError(f"Unknown configuration key: {key}")

        if key == "timeout":
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError("'timeout' must be a positive integer")
        elif not isinstance(value, str) or not value:
            raise ValueError(f"'{key}' must be a non-empty string")

        config[key] = value  # type: ignore[literal-required]

    template = config["commit_message_template"]
    if "{tag}" not in template:
        raise ValueError("'commit_message_template' must contain '{tag}'")
    try:
        template.format(tag="x")
    except (KeyError, IndexError, ValueError) as e:
        raise ValueError(
            f"'commit_message_template' is not a valid format string: {e!r}"
        ) from e

    if overrides:
        logger.debug(f"Configuration overrides applied: {sorted(overrides)}")

    return config

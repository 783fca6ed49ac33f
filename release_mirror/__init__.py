"""Release Mirror - mirror upstream GitHub releases into a downstream repository.

This package checks the latest release of an upstream repository and, when
it is newer than the one already mirrored, updates the manifest file,
pushes it and publishes a matching release.
"""

from .config import DEFAULT_CONFIG, MirrorConfig, build_config
from .errors import (
    ConfigurationError,
    EmptyReleaseListError,
    ManifestDecodeError,
    ManifestEmptyError,
    ManifestFetchError,
    ManifestWriteError,
    NoAccessTokenError,
    ReleaseCreateError,
    ReleaseFetchError,
    ReleaseMirrorError,
    SourceControlError,
)
from .git import GitGateway
from .github import GitHubClient
from .manifest import write_manifest
from .models import Release, ReleasePayload
from .sync import ReleaseMirror, SyncResult, SyncState

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_CONFIG",
    "MirrorConfig",
    "build_config",
    "ConfigurationError",
    "EmptyReleaseListError",
    "ManifestDecodeError",
    "ManifestEmptyError",
    "ManifestFetchError",
    "ManifestWriteError",
    "NoAccessTokenError",
    "ReleaseCreateError",
    "ReleaseFetchError",
    "ReleaseMirrorError",
    "SourceControlError",
    "GitGateway",
    "GitHubClient",
    "write_manifest",
    "Release",
    "ReleasePayload",
    "ReleaseMirror",
    "SyncResult",
    "SyncState",
]

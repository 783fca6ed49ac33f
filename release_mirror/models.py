"""Release data models for release-mirror.

This module defines the two record shapes exchanged with the GitHub
releases API: releases read from a list endpoint and the payload sent
when creating a new release.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Release:
    """A release as returned by a "list releases" endpoint.

    The tag name is treated as an opaque label; no version parsing is done.
    """

    tag_name: str
    body: str

    @classmethod
    def from_api(cls, data: Any) -> Release:
        """Create a Release from a decoded GitHub API object.

        Args:
            data: One element of the decoded releases array

        Returns:
            Release built from the ``tag_name`` and ``body`` keys

        Raises:
            ValueError: If the element is not an object or has no string tag
        """
        if not isinstance(data, dict):
            raise ValueError("Release entry must be a JSON object")

        tag_name = data.get("tag_name")
        if not isinstance(tag_name, str):
            raise ValueError("Release entry is missing 'tag_name'")

        # Releases created without notes come back with a null body
        body = data.get("body") or ""
        if not isinstance(body, str):
            raise ValueError(f"Release {tag_name}: 'body' must be a string")

        return cls(tag_name=tag_name, body=body)


@dataclass(frozen=True)
class ReleasePayload:
    """Request body for creating a release on the downstream repository."""

    tag_name: str
    name: str
    body: str

    @classmethod
    def from_release(cls, release: Release) -> ReleasePayload:
        """Mirror an upstream release, using its tag as the display name."""
        return cls(tag_name=release.tag_name, name=release.tag_name, body=release.body)

    def to_json(self) -> dict[str, str]:
        return {"tag_name": self.tag_name, "name": self.name, "body": self.body}

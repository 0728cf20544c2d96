"""Compute the next semantic version from a list of commit messages."""

from __future__ import annotations

from collections.abc import Iterable

from relplz.semver import Version
from relplz.version_increment import VersionIncrement


def next_version(version: Version, commits: Iterable[str]) -> Version:
    """Return the version that follows ``version`` given ``commits``.

    With no commits the version is unchanged; commits that do not follow
    conventional commits count as patches.
    """
    increment = VersionIncrement.from_commits(version, commits)
    if increment is None:
        return version
    return increment.bump(version)
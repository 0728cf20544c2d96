"""Decide which part of a version to increment from commit messages."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from relplz.semver import Version

_HEADER = re.compile(
    r"(?P<type>[A-Za-z]+)(?:\((?P<scope>[^()\r\n]+)\))?(?P<bang>!)?: (?P<summary>\S.*)"
)
_BREAKING_FOOTER = re.compile(r"^BREAKING[ -]CHANGE: ", re.MULTILINE)


@dataclass(frozen=True)
class ConventionalCommit:
    """A commit message that follows the conventional commits format."""

    commit_type: str
    summary: str
    scope: str | None = None
    body: str | None = None
    is_breaking_change: bool = False

    @property
    def is_feature(self) -> bool:
        return self.commit_type == "feat"


def parse_conventional_commit(message: str) -> ConventionalCommit:
    """Parse a commit message, raising ValueError if it is not conventional."""
    lines = message.splitlines()
    if not lines:
        raise ValueError("empty commit message")
    header = _HEADER.fullmatch(lines[0])
    if header is None:
        raise ValueError(f"not a conventional commit header: {lines[0]!r}")
    rest = lines[1:]
    if rest and rest[0].strip():
        raise ValueError("the body must be separated from the header by a blank line")
    body = "\n".join(rest[1:]).strip() or None
    breaking = header["bang"] is not None or (
        body is not None and _BREAKING_FOOTER.search(body) is not None
    )
    return ConventionalCommit(
        commit_type=header["type"],
        summary=header["summary"].strip(),
        scope=header["scope"],
        body=body,
        is_breaking_change=breaking,
    )


def _try_parse(message: str) -> ConventionalCommit | None:
    try:
        return parse_conventional_commit(message)
    except ValueError:
        return None


class VersionIncrement(Enum):
    """Part of a version to increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PRERELEASE = "prerelease"

    @classmethod
    def from_commits(
        cls, current_version: Version, commits: Iterable[str]
    ) -> VersionIncrement | None:
        """Analyze commits and decide what to increment.

        Returns None when there are no commits. Pre-release versions always
        get a pre-release increment; commits that are not conventional count
        as patches.
        """
        messages = list(commits)
        if not messages:
            return None
        if current_version.pre:
            return cls.PRERELEASE
        parsed = [c for c in map(_try_parse, messages) if c is not None]
        return cls._from_conventional_commits(current_version, parsed)

    @classmethod
    def breaking(cls, current_version: Version) -> VersionIncrement:
        """The increment that accounts for a breaking change."""
        if current_version.pre:
            return cls.PRERELEASE
        if current_version.major == 0 and current_version.minor == 0:
            return cls.PATCH
        if current_version.major == 0:
            return cls.MINOR
        return cls.MAJOR

    @classmethod
    def _from_conventional_commits(
        cls, current: Version, commits: list[ConventionalCommit]
    ) -> VersionIncrement:
        has_feature = any(c.is_feature for c in commits)
        has_breaking = any(c.is_breaking_change for c in commits)
        if current.major != 0 and has_breaking:
            return cls.MAJOR
        if (current.major != 0 and has_feature) or (
            current.major == 0 and current.minor != 0 and has_breaking
        ):
            return cls.MINOR
        return cls.PATCH

    def bump(self, version: Version) -> Version:
        """Apply this increment to ``version``."""
        match self:
            case VersionIncrement.MAJOR:
                return version.increment_major()
            case VersionIncrement.MINOR:
                return version.increment_minor()
            case VersionIncrement.PATCH:
                return version.increment_patch()
            case VersionIncrement.PRERELEASE:
                return version.increment_prerelease()
        raise AssertionError(f"unknown increment {self!r}")
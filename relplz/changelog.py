"""Generate and update keep-a-changelog style changelogs from commit messages."""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from relplz import changelog_parser
from relplz.changelog_parser import ChangelogParseError
from relplz.version_increment import parse_conventional_commit

CHANGELOG_HEADER = """# Changelog
All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]
"""

CHANGELOG_FILENAME = "CHANGELOG.md"

# Commit groups following the keep-a-changelog sections; first match wins.
_COMMIT_PARSERS = tuple(
    (re.compile(pattern), group)
    for pattern, group in (
        ("^feat", "added"),
        ("^changed", "changed"),
        ("^deprecated", "deprecated"),
        ("^removed", "removed"),
        ("^fix", "fixed"),
        ("^security", "security"),
        (".*", "other"),
    )
)


@dataclass(frozen=True)
class _Commit:
    message: str
    group: str
    scope: str | None = None
    breaking: bool = False


@dataclass(frozen=True)
class _Release:
    version: str
    commits: tuple[_Commit, ...]
    timestamp: int


def _process_commit(message: str) -> _Commit | None:
    group = next(
        (group for pattern, group in _COMMIT_PARSERS if pattern.search(message)), None
    )
    if group is None:
        return None
    try:
        conventional = parse_conventional_commit(message)
    except ValueError:
        return _Commit(message, group)
    return _Commit(
        conventional.summary,
        group,
        conventional.scope,
        conventional.is_breaking_change,
    )


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def _render_commit(commit: _Commit) -> str:
    scope = f"*({commit.scope})* " if commit.scope else ""
    breaking = "[**breaking**] " if commit.breaking else ""
    return f"- {scope}{breaking}{commit.message}\n"


def _render_release(release: _Release, release_link: str | None) -> str:
    version = release.version.lstrip("v")
    link = f"({release_link})" if release_link is not None else ""
    day = datetime.fromtimestamp(release.timestamp, timezone.utc).strftime("%Y-%m-%d")
    parts = [f"\n## [{version}]{link} - {day}\n"]
    groups: dict[str, list[_Commit]] = {}
    for commit in release.commits:
        groups.setdefault(commit.group, []).append(commit)
    for group in sorted(groups):
        parts.append(f"\n### {_upper_first(group)}\n")
        parts.extend(_render_commit(commit) for commit in groups[group])
    return "".join(parts)


@dataclass(frozen=True)
class Changelog:
    """The changelog entry of one release, ready to be written out."""

    release: _Release
    release_link: str | None = None

    def _render(self, header: str) -> str:
        return header + _render_release(self.release, self.release_link)

    def generate(self) -> str:
        """The full changelog: default header followed by this release."""
        return self._render(CHANGELOG_HEADER)

    def prepend(self, old_changelog: str) -> str:
        """Add this release on top of ``old_changelog``, keeping its header.

        If the old changelog already holds this version it is returned unchanged.
        """
        try:
            last_version = changelog_parser.last_version_from_str(old_changelog)
        except ChangelogParseError:
            last_version = None
        if last_version is not None and last_version == self.release.version:
            return old_changelog
        header = changelog_parser.parse_header(old_changelog) or CHANGELOG_HEADER
        return self._render(header) + old_changelog.replace(header, "", 1)


class ChangelogBuilder:
    """Collects commits, version, release date and link for a Changelog."""

    def __init__(self, commits: Iterable[str], version: str) -> None:
        self.commits = [str(commit) for commit in commits]
        self.version = str(version)
        self.release_date: date | None = None
        self.release_link: str | None = None

    def with_release_date(self, release_date: date) -> ChangelogBuilder:
        """Copy of this builder with a fixed release date."""
        builder = copy.copy(self)
        builder.release_date = release_date
        return builder

    def with_release_link(self, release_link: str) -> ChangelogBuilder:
        """Copy of this builder with a link for the release title."""
        builder = copy.copy(self)
        builder.release_link = str(release_link)
        return builder

    def _release_timestamp(self) -> int:
        if self.release_date is None:
            return int(datetime.now(timezone.utc).timestamp())
        midnight = datetime.combine(self.release_date, time(), tzinfo=timezone.utc)
        return int(midnight.timestamp())

    def build(self) -> Changelog:
        """Process the commits into a Changelog for this version."""
        commits = tuple(
            commit
            for commit in map(_process_commit, self.commits)
            if commit is not None
        )
        release = _Release(self.version, commits, self._release_timestamp())
        return Changelog(release, self.release_link)
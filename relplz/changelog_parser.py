"""Read headers, release titles and release notes out of markdown changelogs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

_FIRST_HEADER_RE = re.compile(
    r"^(# Changelog|# CHANGELOG|# changelog)(.*)(## Unreleased|## \[Unreleased\])",
    re.DOTALL,
)
_SECOND_HEADER_RE = re.compile(
    r"^(# Changelog|# CHANGELOG|# changelog)(.*)(\n## )",
    re.DOTALL,
)
_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*))?$")
_CLOSING_HASHES = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_VERSION = re.compile(
    r"(?i:unreleased)|v?\d+\.\d+\.\d+(?:-[\w.-]+)?(?:\+[\w.-]+)?"
)
_RELEASE_LEVEL = 2


class ChangelogParseError(ValueError):
    """Raised when a changelog cannot be read or holds no usable releases."""


def parse_header(changelog: str) -> str | None:
    """The header at the start of a changelog, if it has one.

    The header starts with ``# Changelog`` (or ``# CHANGELOG``, ``# changelog``)
    and ends with ``## Unreleased`` or ``## [Unreleased]``, which are included;
    failing that, it ends right before the last ``## `` heading.
    """
    match = _FIRST_HEADER_RE.match(changelog)
    if match is not None:
        return f"{match.group(0)}\n"
    match = _SECOND_HEADER_RE.match(changelog)
    if match is not None:
        return f"{match.group(1)}{match.group(2)}"
    return None


@dataclass(frozen=True)
class ChangelogRelease:
    """One release section of a changelog."""

    version: str
    title: str
    notes: str


def _extract_version(title: str) -> str | None:
    if title.startswith("["):
        end = title.find("]")
        if end == -1:
            return None
        candidate = title[1:end]
    else:
        candidate = title.split(maxsplit=1)[0] if title.split() else ""
    candidate = candidate.strip()
    return candidate if _VERSION.fullmatch(candidate) else None


def _heading_title(raw: str | None) -> str:
    title = (raw or "").strip()
    return _CLOSING_HASHES.sub("", title).strip()


@dataclass
class _OpenRelease:
    level: int
    version: str
    title: str
    lines: list[str]

    def close(self) -> ChangelogRelease:
        return ChangelogRelease(self.version, self.title, "\n".join(self.lines).strip())


def _parse_releases(text: str) -> dict[str, ChangelogRelease]:
    releases: dict[str, ChangelogRelease] = {}
    current: _OpenRelease | None = None
    fence: str | None = None

    def finish() -> None:
        nonlocal current
        if current is not None:
            releases[current.version] = current.close()
            current = None

    for line in text.splitlines():
        fence_match = _FENCE.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1)[0] == fence:
                fence = None
            if current is not None:
                current.lines.append(line)
            continue
        if fence_match:
            fence = fence_match.group(1)[0]
            if current is not None:
                current.lines.append(line)
            continue

        heading = _HEADING.match(line)
        if heading is None:
            if current is not None:
                current.lines.append(line)
            continue

        level = len(heading.group(1))
        title = _heading_title(heading.group(2))
        version = _extract_version(title) if level <= _RELEASE_LEVEL else None
        if current is not None and level <= current.level:
            finish()
        if version is not None:
            if version in releases:
                raise ChangelogParseError(
                    f"can't parse changelog: multiple releases for version {version}"
                )
            current = _OpenRelease(level, version, title, [])
        elif current is not None:
            current.lines.append(line)
    finish()
    return releases


class ChangelogParser:
    """A parsed changelog, with its releases in document order."""

    def __init__(self, changelog_text: str) -> None:
        self.releases = _parse_releases(changelog_text)
        if not self.releases:
            raise ChangelogParseError("can't parse changelog: no release was found")

    def last_release(self) -> ChangelogRelease | None:
        """The newest release, skipping an ``Unreleased`` section."""
        ordered = list(self.releases.values())
        first = ordered[0]
        if "unreleased" in first.version.lower():
            return ordered[1] if len(ordered) > 1 else None
        return first


def last_changes(path: str | Path) -> str | None:
    """Notes of the newest release in the changelog file at ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ChangelogParseError(f"can't read changelog file: {exc}") from exc
    return last_changes_from_str(text)


def last_changes_from_str(changelog: str) -> str | None:
    """Notes of the newest release in ``changelog``."""
    release = ChangelogParser(changelog).last_release()
    return release.notes if release is not None else None


def last_version_from_str(changelog: str) -> str | None:
    """Version of the newest release in ``changelog``."""
    release = ChangelogParser(changelog).last_release()
    return release.version if release is not None else None


def last_release_from_str(changelog: str) -> ChangelogRelease | None:
    """The newest release in ``changelog``."""
    return ChangelogParser(changelog).last_release()
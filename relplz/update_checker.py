"""Check whether a newer release of this tool has been published."""

from __future__ import annotations

import json
import urllib.error
import urllib.request

PROJECT = "release-plz/release-plz"
LATEST_RELEASE_URL = f"https://api.github.com/repos/{PROJECT}/releases/latest"
TAG_PREFIX = "release-plz-v"
USER_AGENT = "release-plz"
_TIMEOUT_SECONDS = 30


class UpdateCheckError(RuntimeError):
    """Raised when the latest version cannot be determined."""


def extract_version(tag: str) -> str | None:
    """Version part of a release tag, or None if the tag has another shape."""
    if tag.startswith(TAG_PREFIX):
        return tag[len(TAG_PREFIX):]
    return None


def get_latest_version() -> str:
    """Version of the latest published release."""
    request = urllib.request.Request(
        LATEST_RELEASE_URL,
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
    )
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT_SECONDS) as response:
            payload = response.read()
    except (urllib.error.URLError, OSError) as exc:
        raise UpdateCheckError(f"error while sending request: {exc}") from exc
    try:
        tag_name = json.loads(payload)["tag_name"]
    except (ValueError, KeyError, TypeError) as exc:
        raise UpdateCheckError("can't parse response") from exc
    if not isinstance(tag_name, str):
        raise UpdateCheckError("can't parse response")
    version = extract_version(tag_name)
    if version is None:
        raise UpdateCheckError(
            f"can't extract latest release-plz version from tag name {tag_name}"
        )
    return version


def check_update(current_version: str) -> None:
    """Print whether ``current_version`` is the latest release."""
    try:
        latest_version = get_latest_version()
    except UpdateCheckError as exc:
        raise UpdateCheckError(f"error while checking for updates: {exc}") from exc
    if latest_version != current_version:
        print(
            f"Your release-plz version is {current_version}. "
            f"A newer version ({latest_version}) is available."
        )
    else:
        print(f"Your release-plz version ({current_version}) is up to date")
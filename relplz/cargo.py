"""Run cargo and watch a registry index for published packages."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import threading
import time
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

SLEEP_SECONDS = 2.0
TIMEOUT_SECONDS = 300.0


class PublishTimeoutError(TimeoutError):
    """Raised when a package does not show up in the index in time."""


class RegistryIndex(Protocol):
    """A cached registry index that can be refreshed."""

    def crate_versions(self, name: str) -> Iterable[str] | None:
        """Versions of crate ``name`` in the cache, or None if it is unknown."""

    def update(self) -> None:
        """Refresh the cache from the registry."""


def _cargo_program() -> str:
    return os.environ.get("CARGO", "cargo")


def run_cargo(root: str | Path, args: Sequence[str]) -> tuple[str, str]:
    """Run cargo in ``root``; return its trimmed stdout and stderr.

    Stderr is echoed to this process's stderr line by line as it arrives.
    """
    logger.debug("cargo %s", " ".join(args))
    try:
        child = subprocess.Popen(
            [_cargo_program(), *args],
            cwd=root,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise RuntimeError(f"cannot run cargo: {exc}") from exc

    stdout_chunks: list[bytes] = []
    reader = threading.Thread(
        target=lambda: stdout_chunks.append(child.stdout.read()), daemon=True
    )
    reader.start()

    stderr_lines = []
    for raw in child.stderr:
        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        print(line, file=sys.stderr)
        stderr_lines.append(line)
    child.wait()
    reader.join()

    stdout = b"".join(stdout_chunks).decode("utf-8")
    stderr = "\n".join(stderr_lines)
    logger.debug("cargo stderr: %s", stderr)
    logger.debug("cargo stdout: %s", stdout)
    return stdout.strip(), stderr.strip()


def _is_in_cache(index: RegistryIndex, package: Mapping[str, Any]) -> bool:
    versions = index.crate_versions(package["name"])
    if versions is None:
        return False
    wanted = str(package["version"])
    return any(str(version) == wanted for version in versions)


def is_published(index: RegistryIndex, package: Mapping[str, Any]) -> bool:
    """True if ``package`` at its version is in the index, refreshing it if needed."""
    if _is_in_cache(index, package):
        return True
    index.update()
    return _is_in_cache(index, package)


def wait_until_published(index: RegistryIndex, package: Mapping[str, Any]) -> None:
    """Block until ``package`` is published, or raise PublishTimeoutError."""
    start = time.monotonic()
    logged = False
    while not is_published(index, package):
        if time.monotonic() - start > TIMEOUT_SECONDS:
            raise PublishTimeoutError(f"timeout while publishing {package['name']}")
        if not logged:
            logger.info(
                "waiting for the package %s to be published...", package["name"]
            )
            logged = True
        time.sleep(SLEEP_SECONDS)
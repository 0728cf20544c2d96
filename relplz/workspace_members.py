"""List the packages of a cargo workspace using ``cargo metadata``."""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any

from relplz.manifest import ManifestError


def _canonicalize(path: str) -> str:
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError):
        return path


def _canonical_package(package: dict[str, Any]) -> dict[str, Any]:
    package = dict(package)
    if package.get("manifest_path"):
        package["manifest_path"] = _canonicalize(package["manifest_path"])
    package["dependencies"] = [
        {**dependency, "path": _canonicalize(dependency["path"])}
        if dependency.get("path")
        else dependency
        for dependency in package.get("dependencies", [])
    ]
    return package


def workspace_members(manifest_path: str | Path | None = None) -> list[dict[str, Any]]:
    """Metadata of every member of the workspace, with canonical paths.

    Each package is the mapping ``cargo metadata`` reports for it.
    """
    command = [
        os.environ.get("CARGO", "cargo"),
        "metadata",
        "--format-version",
        "1",
        "--no-deps",
    ]
    if manifest_path is not None:
        command += ["--manifest-path", str(manifest_path)]
    try:
        completed = subprocess.run(command, capture_output=True, check=False)
    except OSError as exc:
        raise ManifestError(f"Invalid manifest: cannot run cargo: {exc}") from exc
    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        raise ManifestError(f"Invalid manifest: {stderr}")
    try:
        metadata = json.loads(completed.stdout)
    except ValueError as exc:
        raise ManifestError(f"Invalid manifest: bad cargo metadata output: {exc}") from exc

    members = set(metadata.get("workspace_members", []))
    return [
        _canonical_package(package)
        for package in metadata.get("packages", [])
        if package.get("id") in members
    ]
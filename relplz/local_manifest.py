"""A Cargo manifest stored on disk, with the edits release automation needs."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.items import Array, Bool, InlineTable

from relplz.dependency import DepTable
from relplz.manifest import Manifest, ManifestError
from relplz.semver import SemverError, Version

MANIFEST_FILENAME = "Cargo.toml"
_KIND_TABLES = frozenset(table.kind_table() for table in DepTable.KINDS)


class _FeatureStatus(IntEnum):
    NONE = 0
    DEP_FEATURE = 1
    FEATURE = 2


def _is_table_like(item: Any) -> bool:
    return isinstance(item, Mapping)


def _as_bool(item: Any) -> bool | None:
    if isinstance(item, bool):
        return item
    if isinstance(item, Bool):
        return item.value
    return None


def _get_path(container: Any, *keys: str) -> Any:
    for key in keys:
        if not _is_table_like(container):
            return None
        container = container.get(key)
    return container


def _ensure_table(container: MutableMapping, key: str) -> MutableMapping:
    existing = container.get(key)
    if existing is None:
        container[key] = tomlkit.table()
        return container[key]
    if not isinstance(existing, MutableMapping):
        raise ManifestError(f"`{key}` is not a table")
    return existing


@dataclass
class LocalManifest:
    """A Cargo manifest together with the absolute path it was read from."""

    path: Path
    manifest: Manifest

    @property
    def data(self):
        """The manifest TOML document."""
        return self.manifest.data

    def get_sections(self) -> list[tuple[DepTable, Any]]:
        return self.manifest.get_sections()

    def __str__(self) -> str:
        return str(self.manifest)

    @classmethod
    def find(cls, path: str | Path | None = None) -> LocalManifest:
        """Load the manifest at ``path``, or the one found by searching upwards."""
        return cls.try_new(find(path).resolve())

    @classmethod
    def try_new(cls, path: str | Path) -> LocalManifest:
        """Load the manifest at an absolute ``path``."""
        path = Path(path)
        if not path.is_absolute():
            raise ManifestError(f"can only edit absolute paths, got {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestError(f"Failed to read manifest contents: {exc}") from exc
        try:
            manifest = Manifest.parse(text)
        except ManifestError as exc:
            raise ManifestError(f"Unable to parse Cargo.toml: {exc}") from exc
        return cls(path=path, manifest=manifest)

    def write(self) -> None:
        """Write the manifest back to its file."""
        try:
            self.path.write_bytes(str(self.manifest).encode("utf-8"))
        except OSError as exc:
            raise ManifestError(f"Failed to write updated Cargo.toml: {exc}") from exc

    def get_dependency_tables(self) -> Iterator[MutableMapping]:
        """Yield every dependency table, wherever it lives, for editing."""
        for key, value in self.data.items():
            if key in _KIND_TABLES:
                if _is_table_like(value):
                    yield value
            elif key == "workspace":
                if not _is_table_like(value):
                    raise ManifestError("`workspace` is not a table")
                for inner_key, inner in value.items():
                    if inner_key == "dependencies" and _is_table_like(inner):
                        yield inner
            elif key == "target":
                if not _is_table_like(value):
                    raise ManifestError("`target` is not a table")
                for target_table in value.values():
                    if not _is_table_like(target_table):
                        continue
                    for inner_key, inner in target_table.items():
                        if inner_key in _KIND_TABLES and _is_table_like(inner):
                            yield inner

    def get_workspace_dependency_table(self) -> MutableMapping | None:
        """The ``[workspace.dependencies]`` table, if present."""
        table = _get_path(self.data, "workspace", "dependencies")
        return table if _is_table_like(table) else None

    def set_package_version(self, version: Version) -> None:
        """Override the package version."""
        package = _ensure_table(self.data, "package")
        package["version"] = str(version)

    def version_is_inherited(self) -> bool:
        """True if the package inherits the workspace version."""
        value = _as_bool(_get_path(self.data, "package", "version", "workspace"))
        return bool(value)

    def get_workspace_version(self) -> Version | None:
        """The workspace version, if present and valid."""
        version = _get_path(self.data, "workspace", "package", "version")
        if not isinstance(version, str):
            return None
        try:
            return Version.parse(str(version))
        except SemverError:
            return None

    def set_workspace_version(self, version: Version) -> None:
        """Override the workspace version."""
        workspace = _ensure_table(self.data, "workspace")
        package = _ensure_table(workspace, "package")
        package["version"] = str(version)

    def gc_dep(self, dep_key: str) -> None:
        """Remove feature activations of ``dep_key`` that no longer apply."""
        status = self._dep_feature(dep_key)
        if status is _FeatureStatus.FEATURE:
            return
        features = self.data.get("features")
        if not _is_table_like(features) or isinstance(features, InlineTable):
            return
        for activations in features.values():
            if isinstance(activations, Array):
                _remove_feature_activation(activations, dep_key, status)

    def _dep_feature(self, dep_key: str) -> _FeatureStatus:
        status = _FeatureStatus.NONE
        for _, table in self.get_sections():
            if isinstance(table, InlineTable):
                continue
            dependency = table.get(dep_key)
            if dependency is None:
                continue
            optional = dependency.get("optional") if _is_table_like(dependency) else None
            if _as_bool(optional):
                return _FeatureStatus.FEATURE
            status = _FeatureStatus.DEP_FEATURE
        return status


def _remove_feature_activation(
    activations: Array, dep: str, status: _FeatureStatus
) -> None:
    prefix = f"{dep}/"

    def matches(activation: Any) -> bool:
        if not isinstance(activation, str):
            return False
        match status:
            case _FeatureStatus.NONE:
                return activation == dep or activation.startswith(prefix)
            case _FeatureStatus.DEP_FEATURE:
                return activation == dep
            case _:
                return False

    doomed = [index for index, activation in enumerate(activations) if matches(activation)]
    # Delete from the back so earlier indexes stay valid.
    for index in reversed(doomed):
        del activations[index]


def find(specified: str | Path | None = None) -> Path:
    """Path of the manifest to use.

    A file path is returned as is; a directory is searched upwards; with
    nothing given the search starts from the current directory.
    """
    if specified is None:
        try:
            cwd = Path.cwd()
        except OSError as exc:
            raise ManifestError("Failed to get current directory") from exc
        return find_manifest_path(cwd)
    path = Path(specified)
    try:
        path.stat()
    except OSError as exc:
        raise ManifestError(f"Failed to get cargo file metadata: {exc}") from exc
    if path.is_file():
        return path
    return find_manifest_path(path)


def find_manifest_path(directory: str | Path) -> Path:
    """Search for Cargo.toml in ``directory`` and then in each parent."""
    directory = Path(directory)
    for candidate_dir in (directory, *directory.parents):
        manifest = candidate_dir / MANIFEST_FILENAME
        if manifest.exists():
            return manifest
    raise ManifestError(f"Unable to find Cargo.toml for {directory}")
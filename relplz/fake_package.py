"""Package and dependency metadata for tests, shaped like ``cargo metadata``."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from relplz.dependency import DepKind

_METADATA_KIND = {
    DepKind.NORMAL: None,
    DepKind.DEVELOPMENT: "dev",
    DepKind.BUILD: "build",
}


@dataclass(frozen=True)
class FakeDependency:
    """A dependency on ``name`` at version requirement 0.1.0."""

    name: str
    kind: DepKind = DepKind.NORMAL

    def dev(self) -> FakeDependency:
        """Copy of this dependency as a development dependency."""
        return replace(self, kind=DepKind.DEVELOPMENT)

    def to_metadata(self) -> dict[str, Any]:
        """The dependency as ``cargo metadata`` describes it."""
        return {
            "name": self.name,
            "req": "0.1.0",
            "kind": _METADATA_KIND[self.kind],
            "optional": False,
            "uses_default_features": True,
            "features": [],
        }


@dataclass(frozen=True)
class FakePackage:
    """A package ``name`` at version 0.1.0."""

    name: str
    dependencies: tuple[FakeDependency, ...] = ()

    def with_dependencies(self, dependencies: Iterable[FakeDependency]) -> FakePackage:
        """Copy of this package with ``dependencies``."""
        return replace(self, dependencies=tuple(dependencies))

    def to_metadata(self) -> dict[str, Any]:
        """The package as ``cargo metadata`` describes it."""
        return {
            "name": self.name,
            "version": "0.1.0",
            "id": self.name,
            "dependencies": [dep.to_metadata() for dep in self.dependencies],
            "features": {},
            "manifest_path": f"{self.name}/Cargo.toml",
            "targets": [],
        }
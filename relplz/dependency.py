"""Dependency tables of a Cargo manifest."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar


class DepKind(Enum):
    """Kind of dependency; the value is the manifest table that holds it."""

    NORMAL = "dependencies"
    DEVELOPMENT = "dev-dependencies"
    BUILD = "build-dependencies"


@dataclass(frozen=True)
class DepTable:
    """Reference to a dependency table, optionally for one target platform."""

    kind: DepKind = DepKind.NORMAL
    target: str | None = None

    KINDS: ClassVar[tuple[DepTable, ...]]

    def with_kind(self, kind: DepKind) -> DepTable:
        """Copy of this table reference with another dependency kind."""
        return replace(self, kind=kind)

    def with_target(self, target: str) -> DepTable:
        """Copy of this table reference restricted to ``target``."""
        return replace(self, target=str(target))

    def kind_table(self) -> str:
        """Name of the manifest table for this kind of dependency."""
        return self.kind.value


DepTable.KINDS = tuple(DepTable(kind) for kind in DepKind)
"""A Cargo manifest held as format-preserving TOML."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.toml_document import TOMLDocument

from relplz.dependency import DepTable


class ManifestError(RuntimeError):
    """Raised when a manifest cannot be found, read, parsed or written."""


def _is_table_like(item: Any) -> bool:
    return isinstance(item, Mapping)


@dataclass
class Manifest:
    """A Cargo manifest; ``data`` keeps the TOML with its formatting."""

    data: TOMLDocument

    @classmethod
    def parse(cls, text: str) -> Manifest:
        """Read manifest data from a string."""
        try:
            return cls(tomlkit.parse(text))
        except TOMLKitError as exc:
            raise ManifestError(f"Manifest not valid TOML: {exc}") from exc

    def get_sections(self) -> list[tuple[DepTable, Any]]:
        """Existing sections that may hold dependencies, with their table reference.

        Sections come from the three standard tables and from
        ``target.<target>.<kind>``; every returned item is table-like and is
        the live object inside ``data``.
        """
        sections: list[tuple[DepTable, Any]] = []
        targets = self.data.get("target")
        for table in DepTable.KINDS:
            name = table.kind_table()
            item = self.data.get(name)
            if _is_table_like(item):
                sections.append((table, item))
            if not _is_table_like(targets):
                continue
            for target_name, target_table in targets.items():
                if not _is_table_like(target_table):
                    continue
                dependencies = target_table.get(name)
                if _is_table_like(dependencies):
                    sections.append((table.with_target(target_name), dependencies))
        return sections

    def __str__(self) -> str:
        return self.data.as_string()
"""Find the index URL of a cargo registry from cargo configuration files."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

CRATES_IO_INDEX = "https://github.com/rust-lang/crates.io-index"
CRATES_IO_REGISTRY = "crates-io"


class RegistryError(RuntimeError):
    """Raised when a registry cannot be resolved from the cargo configuration."""


@dataclass
class _Source:
    registry: str | None = None
    replace_with: str | None = None


def cargo_home() -> Path:
    """Cargo home: ``$CARGO_HOME`` or ``~/.cargo``."""
    try:
        default = Path.home() / ".cargo"
    except RuntimeError as exc:
        raise RegistryError("Failed to read home directory") from exc
    configured = os.environ.get("CARGO_HOME")
    return Path(configured) if configured is not None else default


def _optional_str(value: Any, what: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise RegistryError(f"Invalid cargo config: {what} must be a string")


def _table(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise RegistryError(f"Invalid cargo config: {what} must be a table")
    return value


def _read_config(registries: dict[str, _Source], path: Path) -> None:
    try:
        config = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise RegistryError(f"Invalid cargo config: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise RegistryError(f"cannot read {path}: {exc}") from exc

    for key, value in _table(config.get("registries", {}), "registries").items():
        index = _optional_str(_table(value, f"registries.{key}").get("index"), "index")
        registries.setdefault(key, _Source(registry=index))
    for key, value in _table(config.get("source", {}), "source").items():
        value = _table(value, f"source.{key}")
        registries.setdefault(
            key,
            _Source(
                registry=_optional_str(value.get("registry"), "registry"),
                replace_with=_optional_str(value.get("replace-with"), "replace-with"),
            ),
        )


def _read_first_config(registries: dict[str, _Source], cargo_dir: Path) -> None:
    for name in ("config", "config.toml"):
        candidate = cargo_dir / name
        if candidate.is_file():
            _read_config(registries, candidate)
            return


def registry_url(manifest_path: str | Path, registry: str | None = None) -> str:
    """URL of the index of ``registry``, or of crates.io when none is given.

    Configuration is read from ``.cargo`` directories from the manifest's
    directory upwards, then from the cargo home; the nearest wins, and
    source replacements are followed to their end.
    """
    registries: dict[str, _Source] = {}
    work_dir = Path(manifest_path).parent
    for directory in (work_dir, *work_dir.parents):
        _read_first_config(registries, directory / ".cargo")
    _read_first_config(registries, cargo_home())

    if registry is None or registry == CRATES_IO_INDEX:
        source = registries.pop(CRATES_IO_REGISTRY, _Source())
        if source.registry is None:
            source.registry = CRATES_IO_INDEX
    else:
        try:
            source = registries.pop(registry)
        except KeyError:
            raise RegistryError(f"The registry '{registry}' could not be found") from None

    while source.replace_with is not None:
        replace_with = source.replace_with
        try:
            source = registries.pop(replace_with)
        except KeyError:
            raise RegistryError(f"The source '{replace_with}' could not be found") from None
        if replace_with == CRATES_IO_INDEX and source.registry is None:
            source.registry = CRATES_IO_INDEX

    url = source.registry
    if url is None or not urlsplit(url).scheme:
        raise RegistryError("Invalid cargo config")
    return url
"""The release configuration file: workspace defaults and per-package overrides."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import tomlkit

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "release-plz.toml"


class ConfigError(ValueError):
    """Raised when the configuration cannot be read or is not valid."""


class ReleaseType(Enum):
    """How the git release is marked."""

    PROD = "prod"
    """Ready for production."""
    PRE = "pre"
    """Not ready for production, i.e. a pre-release."""
    AUTO = "auto"
    """A pre-release only if the tag holds a semver pre-release."""


class SemverCheck(Enum):
    """Whether to run cargo-semver-checks (libraries only)."""

    YES = "yes"
    NO = "no"


def _pick(value: Any, default: Any) -> Any:
    return value if value is not None else default


def _opt_bool(table: Mapping[str, Any], key: str) -> bool | None:
    value = table.get(key)
    if value is None or isinstance(value, bool):
        return value
    raise ConfigError(f"invalid type for `{key}`: expected a boolean")


def _opt_str(table: Mapping[str, Any], key: str) -> str | None:
    value = table.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ConfigError(f"invalid type for `{key}`: expected a string")


def _opt_url(table: Mapping[str, Any], key: str) -> str | None:
    text = _opt_str(table, key)
    if text is None:
        return None
    parts = urlsplit(text)
    if not parts.scheme or not (parts.netloc or parts.path):
        raise ConfigError(f"invalid url for `{key}`: {text!r}")
    if parts.netloc and not parts.path:
        text += "/"
    return text


def _opt_release_type(table: Mapping[str, Any], key: str) -> ReleaseType | None:
    text = _opt_str(table, key)
    if text is None:
        return None
    try:
        return ReleaseType(text)
    except ValueError:
        variants = ", ".join(f"`{kind.value}`" for kind in ReleaseType)
        raise ConfigError(
            f"unknown variant `{text}` for `{key}`, expected one of {variants}"
        ) from None


def _str_list(table: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"invalid type for `{key}`: expected a list of strings")
    return tuple(value)


def _table(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"invalid type for `{what}`: expected a table")
    return value


def _present(pairs: Iterable[tuple[str, Any]]) -> Iterator[tuple[str, Any]]:
    for key, value in pairs:
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, tuple):
            value = list(value)
        yield key, value


def _render_table(header: str, pairs: Iterable[tuple[str, Any]]) -> str:
    lines = [header]
    lines.extend(f"{key} = {tomlkit.item(value).as_string()}" for key, value in pairs)
    return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class GitReleaseConfig:
    """Settings of the GitHub/Gitea/GitLab release."""

    enable: bool | None = None
    release_type: ReleaseType | None = None
    draft: bool | None = None

    def merge(self, default: GitReleaseConfig) -> GitReleaseConfig:
        """Fill unset values from ``default``."""
        return GitReleaseConfig(
            enable=_pick(self.enable, default.enable),
            release_type=_pick(self.release_type, default.release_type),
            draft=_pick(self.draft, default.draft),
        )

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> GitReleaseConfig:
        return cls(
            enable=_opt_bool(table, "git_release_enable"),
            release_type=_opt_release_type(table, "git_release_type"),
            draft=_opt_bool(table, "git_release_draft"),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        return _present(
            [
                ("git_release_enable", self.enable),
                ("git_release_type", self.release_type),
                ("git_release_draft", self.draft),
            ]
        )


@dataclass(frozen=True)
class ReleaseConfig:
    """Settings of ``cargo publish``."""

    publish: bool | None = None
    allow_dirty: bool | None = None
    no_verify: bool | None = None

    def merge(self, default: ReleaseConfig) -> ReleaseConfig:
        """Fill unset values from ``default``."""
        return ReleaseConfig(
            publish=_pick(self.publish, default.publish),
            allow_dirty=_pick(self.allow_dirty, default.allow_dirty),
            no_verify=_pick(self.no_verify, default.no_verify),
        )

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> ReleaseConfig:
        return cls(
            publish=_opt_bool(table, "publish"),
            allow_dirty=_opt_bool(table, "publish_allow_dirty"),
            no_verify=_opt_bool(table, "publish_no_verify"),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        return _present(
            [
                ("publish", self.publish),
                ("publish_allow_dirty", self.allow_dirty),
                ("publish_no_verify", self.no_verify),
            ]
        )


@dataclass(frozen=True)
class PackageReleaseConfig:
    """Options of the release command for one package."""

    git_release: GitReleaseConfig = field(default_factory=GitReleaseConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    def merge(self, default: PackageReleaseConfig) -> PackageReleaseConfig:
        """Fill unset values from ``default``."""
        return PackageReleaseConfig(
            git_release=self.git_release.merge(default.git_release),
            release=self.release.merge(default.release),
        )

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> PackageReleaseConfig:
        return cls(
            git_release=GitReleaseConfig._from_table(table),
            release=ReleaseConfig._from_table(table),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        yield from self.git_release._items()
        yield from self.release._items()


@dataclass(frozen=True)
class PackageUpdateConfig:
    """Options of the update command that a package may override."""

    semver_check: bool | None = None
    changelog_update: bool | None = None

    def merge(self, default: PackageUpdateConfig) -> PackageUpdateConfig:
        """Fill unset values from ``default``."""
        return PackageUpdateConfig(
            semver_check=_pick(self.semver_check, default.semver_check),
            changelog_update=_pick(self.changelog_update, default.changelog_update),
        )

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> PackageUpdateConfig:
        return cls(
            semver_check=_opt_bool(table, "semver_check"),
            changelog_update=_opt_bool(table, "changelog_update"),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        return _present(
            [
                ("semver_check", self.semver_check),
                ("changelog_update", self.changelog_update),
            ]
        )


@dataclass(frozen=True)
class PackageConfig:
    """Configuration applied to every package by default."""

    update: PackageUpdateConfig = field(default_factory=PackageUpdateConfig)
    release: PackageReleaseConfig = field(default_factory=PackageReleaseConfig)

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> PackageConfig:
        return cls(
            update=PackageUpdateConfig._from_table(table),
            release=PackageReleaseConfig._from_table(table),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        yield from self.update._items()
        yield from self.release._items()


@dataclass(frozen=True)
class PackageSpecificConfig:
    """Configuration at the ``[[package]]`` level."""

    update: PackageUpdateConfig = field(default_factory=PackageUpdateConfig)
    release: PackageReleaseConfig = field(default_factory=PackageReleaseConfig)
    changelog_path: str | None = None

    def merge(self, default: PackageConfig) -> PackageSpecificConfig:
        """Fill unset values from the workspace defaults."""
        return PackageSpecificConfig(
            update=self.update.merge(default.update),
            release=self.release.merge(default.release),
            changelog_path=self.changelog_path,
        )

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> PackageSpecificConfig:
        return cls(
            update=PackageUpdateConfig._from_table(table),
            release=PackageReleaseConfig._from_table(table),
            changelog_path=_opt_str(table, "changelog_path"),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        yield from self.update._items()
        yield from self.release._items()
        yield from _present([("changelog_path", self.changelog_path)])


@dataclass(frozen=True)
class PackageSpecificConfigWithName:
    """A package-specific configuration and the package it applies to."""

    name: str
    config: PackageSpecificConfig = field(default_factory=PackageSpecificConfig)

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> PackageSpecificConfigWithName:
        name = _opt_str(table, "name")
        if name is None:
            raise ConfigError("missing field `name` in `package`")
        return cls(name=name, config=PackageSpecificConfig._from_table(table))

    def _items(self) -> Iterator[tuple[str, Any]]:
        yield "name", self.name
        yield from self.config._items()


@dataclass(frozen=True)
class UpdateConfig:
    """Workspace-wide options of the update command."""

    dependencies_update: bool | None = None
    changelog_config: str | None = None
    allow_dirty: bool | None = None

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> UpdateConfig:
        return cls(
            dependencies_update=_opt_bool(table, "dependencies_update"),
            changelog_config=_opt_str(table, "changelog_config"),
            allow_dirty=_opt_bool(table, "allow_dirty"),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        return _present(
            [
                ("dependencies_update", self.dependencies_update),
                ("changelog_config", self.changelog_config),
                ("allow_dirty", self.allow_dirty),
            ]
        )


@dataclass(frozen=True)
class ReleasePrConfig:
    """Workspace-wide options of the release-pr command."""

    pr_labels: tuple[str, ...] = ()

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> ReleasePrConfig:
        return cls(pr_labels=_str_list(table, "pr_labels"))

    def _items(self) -> Iterator[tuple[str, Any]]:
        yield "pr_labels", list(self.pr_labels)


@dataclass(frozen=True)
class CommonCmdConfig:
    """Options shared among commands."""

    repo_url: str | None = None

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> CommonCmdConfig:
        return cls(repo_url=_opt_url(table, "repo_url"))

    def _items(self) -> Iterator[tuple[str, Any]]:
        return _present([("repo_url", self.repo_url)])


@dataclass(frozen=True)
class Workspace:
    """Global configuration, applied to all packages by default."""

    update: UpdateConfig = field(default_factory=UpdateConfig)
    release_pr: ReleasePrConfig = field(default_factory=ReleasePrConfig)
    common: CommonCmdConfig = field(default_factory=CommonCmdConfig)
    packages_defaults: PackageConfig = field(default_factory=PackageConfig)

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> Workspace:
        return cls(
            update=UpdateConfig._from_table(table),
            release_pr=ReleasePrConfig._from_table(table),
            common=CommonCmdConfig._from_table(table),
            packages_defaults=PackageConfig._from_table(table),
        )

    def _items(self) -> Iterator[tuple[str, Any]]:
        yield from self.update._items()
        yield from self.release_pr._items()
        yield from self.common._items()
        yield from self.packages_defaults._items()


_TOP_LEVEL_KEYS = ("workspace", "package")


@dataclass(frozen=True)
class Config:
    """The whole configuration file."""

    workspace: Workspace = field(default_factory=Workspace)
    package: tuple[PackageSpecificConfigWithName, ...] = ()

    @classmethod
    def from_toml(cls, text: str) -> Config:
        """Parse a configuration from TOML text."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML: {exc}") from exc
        unknown = [key for key in data if key not in _TOP_LEVEL_KEYS]
        if unknown:
            raise ConfigError(
                f"unknown field `{unknown[0]}`, expected `workspace` or `package`"
            )
        workspace = Workspace._from_table(_table(data.get("workspace", {}), "workspace"))
        packages = data.get("package", [])
        if not isinstance(packages, list):
            raise ConfigError("invalid type for `package`: expected an array of tables")
        return cls(
            workspace=workspace,
            package=tuple(
                PackageSpecificConfigWithName._from_table(_table(p, "package"))
                for p in packages
            ),
        )

    def to_toml(self) -> str:
        """Serialize the configuration as TOML text."""
        sections = [_render_table("[workspace]", self.workspace._items())]
        sections.extend(
            _render_table("[[package]]", package._items()) for package in self.package
        )
        return "\n".join(sections)

    def packages(self) -> dict[str, PackageSpecificConfig]:
        """Package-specific configurations, by package name."""
        return {package.name: package.config for package in self.package}


def load_config(path: str | Path | None = None) -> Config:
    """Load the configuration file, or the default configuration if it is missing."""
    config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_PATH)
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("release-plz config file not found, using default configuration")
        return Config()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"can't read {config_path}: {exc}") from exc
    logger.info("using release-plz config file %s", config_path)
    try:
        return Config.from_toml(text)
    except ConfigError as exc:
        raise ConfigError(f"invalid config file {config_path}: {exc}") from exc
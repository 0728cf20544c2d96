"""Release automation helpers for Cargo workspaces."""

__version__ = "0.1.0"

__all__ = [
    "cargo",
    "changelog",
    "changelog_parser",
    "config",
    "dependency",
    "fake_package",
    "git",
    "local_manifest",
    "log",
    "manifest",
    "next_version",
    "registry",
    "semver",
    "update_checker",
    "version_increment",
    "workspace_members",
]
# relplz

Building blocks for releasing Cargo workspaces:

- work out the next semantic version from a list of conventional commit messages
- raise version requirements in dependency declarations
- generate and update "Keep a Changelog" style changelogs
- read and edit `Cargo.toml` manifests while keeping their formatting
- resolve registry index URLs from Cargo configuration files
- list workspace members through `cargo metadata`
- drive `git` in a working copy (branches, commits, tags, pushes)
- load and merge `release-plz.toml` configuration

The package is a library: everything below is called from Python.

## Next version

```python
from relplz.semver import Version
from relplz.next_version import next_version

next_version(Version.parse("1.2.3"), ["my change"])          # 1.2.4
next_version(Version.parse("1.2.4"), ["feat: make coffee"])  # 1.3.0
next_version(Version.parse("1.2.4"), ["feat!: break user"])  # 2.0.0
next_version(Version.parse("0.4.4"), ["feat!: break user"])  # 0.5.0
next_version(Version.parse("1.0.0-beta"), ["fix: bug"])      # 1.0.0-beta.1
```

No commits means no change. Commits that do not follow the conventional
commit format count as a patch. In `0.0.x` versions the patch is always
raised, and pre-release versions only have their last pre-release
identifier raised (or `.1` appended). Build metadata is kept.

To see only which part of the version changes:

```python
from relplz.version_increment import VersionIncrement

increment = VersionIncrement.from_commits(Version.parse("1.3.3"), ["feat: x"])
increment.bump(Version.parse("1.3.3"))             # 1.4.0
VersionIncrement.breaking(Version.parse("0.3.3"))  # VersionIncrement.MINOR
```

`relplz.version_increment.parse_conventional_commit` parses a single message
into a `ConventionalCommit` and raises `ValueError` if it is not conventional.

## Version requirements

```python
from relplz.semver import Version, upgrade_requirement

upgrade_requirement("1.0", Version.parse("1.2.3"))   # "1.2"
upgrade_requirement("^1.0", Version.parse("2.0.0"))  # "^2.0"
upgrade_requirement("*", Version.parse("2.0.0"))     # None: already matches
```

Comparison operators such as `>=` or `<` cannot be rewritten and raise
`SemverError`. `VersionReq.parse` and `Version.parse` raise the same error
for malformed input.

## Changelogs

```python
from datetime import date
from relplz.changelog import ChangelogBuilder
from relplz.changelog_parser import last_changes_from_str, parse_header

changelog = (
    ChangelogBuilder(["fix: myfix", "simple update"], "1.1.1")
    .with_release_date(date(2015, 5, 15))
    .with_release_link("https://example.com/compare/v1.1.0...v1.1.1")
    .build()
)
text = changelog.generate()

last_changes_from_str(text)   # notes of the most recent release
parse_header(text)            # everything up to and including "## [Unreleased]"
```

`Changelog.prepend(old_text)` puts the new release on top of an existing
changelog, keeps a custom header, and returns the text untouched when its
latest release already has this version. Commits are grouped into Added,
Changed, Deprecated, Removed, Fixed, Security and Other.

## Manifests

```python
from relplz.local_manifest import LocalManifest
from relplz.semver import Version

manifest = LocalManifest.find(None)          # searches upward from the current directory
manifest.set_package_version(Version.parse("0.2.0"))
manifest.gc_dep("serde")                     # drop feature references to a removed dependency
manifest.write()
```

`Manifest.get_sections()` lists every dependency table with a `DepTable`
saying its kind and target; `LocalManifest.get_dependency_tables()` yields
them for editing, including `[workspace.dependencies]`.

## Registries and workspaces

```python
from relplz.registry import registry_url
from relplz.workspace_members import workspace_members

registry_url("path/to/Cargo.toml")            # crates.io index unless configured otherwise
registry_url("path/to/Cargo.toml", "my-reg")  # raises RegistryError if unknown
workspace_members("path/to/Cargo.toml")       # package mappings from `cargo metadata`
```

`relplz.cargo` runs cargo (`run_cargo`) and waits for a package to appear
in a registry index you supply (`wait_until_published`, which raises
`PublishTimeoutError` after five minutes).

## Git

```python
from relplz.git import Repo

repo = Repo("path/to/project")
repo.is_clean()                 # raises GitError on uncommitted changes
repo.add_all_and_commit("chore: release")
repo.tag("v0.2.0")
repo.tag_exists("v0.2.0")       # True
```

## Configuration

```python
from relplz.config import Config, load_config

config = load_config("release-plz.toml")   # default configuration if the file is missing
config = Config.from_toml("""
[workspace]
changelog_update = true
git_release_type = "prod"

[[package]]
name = "crate1"
semver_check = false
""")
print(config.to_toml())
```

Top-level tables other than `workspace` and `package` are rejected with
`ConfigError`, as are values of the wrong type. Package entries override
the workspace defaults through their `merge` methods.

## Other helpers

- `relplz.update_checker.check_update(current_version)` prints whether a newer
  release is published.
- `relplz.log.init(verbose)` sets up logging at `info`, or as the `RUST_LOG`
  variable asks.
- `relplz.fake_package` builds `cargo metadata`-shaped package data for tests.

## What it does not do

There is no command line program: nothing here publishes crates, opens
pull requests or creates hosted releases by itself. Those steps are left to
code built on top of these modules.

## Tests

Install the `test` extra and run pytest from the project directory. The
git tests need a `git` executable on `PATH`.
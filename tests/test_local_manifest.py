import pytest

from relplz.local_manifest import LocalManifest, find, find_manifest_path
from relplz.manifest import ManifestError
from relplz.semver import Version

SIMPLE = """\
[package]
name = "crate1"
version = "0.1.0"
"""

FEATURES = """\
[package]
name = "crate1"
version = "0.1.0"

[dependencies]
foo = { version = "1", optional = true }
bar = "1"

[features]
default = ["foo", "foo/extra", "bar", "bar/extra", "baz", "baz/extra", "qux"]
"""


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def _load(tmp_path, text):
    return LocalManifest.try_new(_write(tmp_path / "Cargo.toml", text))


def _features(manifest):
    return [str(item) for item in manifest.data["features"]["default"]]


def test_find_manifest_in_parent_directory(tmp_path):
    manifest = _write(tmp_path / "Cargo.toml", SIMPLE)
    nested = tmp_path / "src" / "deep"
    nested.mkdir(parents=True)
    assert find_manifest_path(nested) == manifest
    assert find(nested) == manifest


def test_find_returns_given_file(tmp_path):
    manifest = _write(tmp_path / "other.toml", SIMPLE)
    assert find(manifest) == manifest


def test_find_missing_path_fails(tmp_path):
    with pytest.raises(ManifestError):
        find(tmp_path / "missing")


def test_find_from_current_directory(tmp_path, monkeypatch):
    manifest = _write(tmp_path / "Cargo.toml", SIMPLE)
    sub = tmp_path / "sub"
    sub.mkdir()
    monkeypatch.chdir(sub)
    assert find().resolve() == manifest.resolve()
    assert LocalManifest.find().path == manifest.resolve()


def test_relative_path_is_rejected():
    with pytest.raises(ManifestError, match="absolute"):
        LocalManifest.try_new("Cargo.toml")


def test_invalid_manifest_is_rejected(tmp_path):
    path = _write(tmp_path / "Cargo.toml", "[package\n")
    with pytest.raises(ManifestError):
        LocalManifest.try_new(path)


def test_unreadable_manifest_is_rejected(tmp_path):
    with pytest.raises(ManifestError):
        LocalManifest.try_new(tmp_path / "Cargo.toml")


def test_package_version_is_written(tmp_path):
    manifest = _load(tmp_path, SIMPLE)
    version = Version(2, 0, 0)
    manifest.set_package_version(version)
    manifest.write()
    reloaded = LocalManifest.try_new(manifest.path)
    assert reloaded.data["package"]["version"] == str(version)
    assert reloaded.data["package"]["name"] == "crate1"


def test_write_preserves_untouched_text(tmp_path):
    manifest = _load(tmp_path, FEATURES)
    manifest.write()
    assert manifest.path.read_text() == FEATURES


def test_version_inheritance(tmp_path):
    inherited = _load(tmp_path, '[package]\nname = "a"\nversion.workspace = true\n')
    assert inherited.version_is_inherited() is True
    plain = LocalManifest.try_new(_write(tmp_path / "b" / "Cargo.toml", SIMPLE))
    assert plain.version_is_inherited() is False


def test_workspace_version_round_trip(tmp_path):
    manifest = _load(tmp_path, '[workspace]\nmembers = ["a"]\n')
    assert manifest.get_workspace_version() is None
    version = Version.parse("1.2.3-alpha.1")
    manifest.set_workspace_version(version)
    assert manifest.get_workspace_version() == version
    reparsed = LocalManifest.try_new(manifest.path)
    reparsed.manifest = type(manifest.manifest).parse(str(manifest))
    assert reparsed.get_workspace_version() == version


def test_invalid_workspace_version_is_ignored(tmp_path):
    manifest = _load(tmp_path, '[workspace.package]\nversion = "nope"\n')
    assert manifest.get_workspace_version() is None


def test_dependency_tables_are_found_everywhere(tmp_path):
    text = """\
[package]
name = "a"

[dependencies]
serde = "1"

[workspace]
members = []

[workspace.dependencies]
tokio = "1"

[target.'cfg(unix)'.dev-dependencies]
libc = "0.2"
"""
    manifest = _load(tmp_path, text)
    tables = list(manifest.get_dependency_tables())
    assert [sorted(table.keys()) for table in tables] == [["serde"], ["tokio"], ["libc"]]
    tables[0]["serde"] = "2"
    assert 'serde = "2"' in str(manifest)


def test_workspace_dependency_table(tmp_path):
    manifest = _load(tmp_path, '[workspace.dependencies]\ntokio = "1"\n')
    table = manifest.get_workspace_dependency_table()
    assert list(table.keys()) == ["tokio"]
    other = LocalManifest.try_new(_write(tmp_path / "b" / "Cargo.toml", SIMPLE))
    assert other.get_workspace_dependency_table() is None


def test_gc_of_absent_dependency_removes_all_its_activations(tmp_path):
    manifest = _load(tmp_path, FEATURES)
    manifest.gc_dep("baz")
    assert _features(manifest) == ["foo", "foo/extra", "bar", "bar/extra", "qux"]


def test_gc_of_required_dependency_removes_only_plain_activation(tmp_path):
    manifest = _load(tmp_path, FEATURES)
    manifest.gc_dep("bar")
    assert _features(manifest) == [
        "foo", "foo/extra", "bar/extra", "baz", "baz/extra", "qux",
    ]


def test_gc_of_optional_dependency_keeps_activations(tmp_path):
    manifest = _load(tmp_path, FEATURES)
    before = _features(manifest)
    manifest.gc_dep("foo")
    assert _features(manifest) == before


def test_gc_result_is_valid_toml(tmp_path):
    manifest = _load(tmp_path, FEATURES)
    manifest.gc_dep("baz")
    manifest.write()
    reloaded = LocalManifest.try_new(manifest.path)
    assert _features(reloaded) == _features(manifest)
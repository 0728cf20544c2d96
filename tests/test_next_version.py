import pytest

from relplz.next_version import next_version
from relplz.semver import Version


def test_commit_without_semver_prefix_increments_patch_version():
    assert next_version(Version(1, 2, 3), ["my change"]) == Version(1, 2, 4)


def test_commit_with_fix_semver_prefix_increments_patch_version():
    commits = ["my change", "fix: serious bug"]
    assert next_version(Version(1, 2, 3), commits) == Version(1, 2, 4)


def test_commit_with_feat_semver_prefix_increments_minor_version():
    assert next_version(Version(1, 3, 3), ["feat: make coffe"]) == Version(1, 4, 0)


def test_commit_with_breaking_change_increments_major_version():
    assert next_version(Version(1, 2, 3), ["feat!: break user"]) == Version(2, 0, 0)


def test_commit_with_breaking_change_increments_minor_version_when_major_is_zero():
    assert next_version(Version(0, 2, 3), ["feat!: break user"]) == Version(0, 3, 0)


def test_feature_on_zero_major_increments_patch():
    commits = ["my change", "feat: make coffe"]
    assert next_version(Version(1, 2, 4), commits) == Version(1, 3, 0)
    assert next_version(Version(0, 2, 4), commits) == Version(0, 2, 5)
    assert next_version(Version(0, 3, 3), ["feat: make coffe"]) == Version(0, 3, 4)


def test_breaking_footer_increments_major():
    breaking_commit = "feat: make coffe\n\nmy change\n\nBREAKING CHANGE: user will be broken\n"
    assert next_version(Version(1, 2, 4), [breaking_commit]) == Version(2, 0, 0)


def test_zero_zero_versions_increment_patch():
    assert next_version(Version(0, 0, 4), ["my change"]) == Version(0, 0, 5)
    assert next_version(Version(0, 0, 1), ["feat!: break user"]) == Version(0, 0, 2)


def test_no_commits_keeps_version():
    version = Version(1, 2, 3)
    assert next_version(version, []) == version


@pytest.mark.parametrize(
    ("commit", "current", "expected"),
    [
        ("my change", "1.0.0-alpha.2", "1.0.0-alpha.3"),
        ("feat!: break user", "1.0.0-alpha.2", "1.0.0-alpha.3"),
        ("feat!: break user", "1.0.0-alpha", "1.0.0-alpha.1"),
        ("feat!: break user", "1.0.0-beta.1.2", "1.0.0-beta.1.3"),
        ("feat!: break user", "1.0.0-beta.1.a", "1.0.0-beta.1.a.1"),
        ("feat!: break user", "1.0.0-alpha.1.2", "1.0.0-alpha.1.3"),
        ("feat!: break user", "1.0.0-beta", "1.0.0-beta.1"),
    ],
)
def test_pre_release_versions(commit, current, expected):
    assert next_version(Version.parse(current), [commit]) == Version.parse(expected)


def test_build_metadata_is_kept():
    commits = ["my change"]
    assert next_version(Version.parse("1.0.0-beta.1+1.1.0"), commits) == Version.parse(
        "1.0.0-beta.2+1.1.0"
    )
    assert next_version(Version.parse("1.0.0+abcd"), commits) == Version.parse("1.0.1+abcd")
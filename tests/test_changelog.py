from datetime import date

from relplz.changelog import CHANGELOG_HEADER, ChangelogBuilder

HEADER_TEXT = (
    "# Changelog\n"
    "All notable changes to this project will be documented in this file.\n"
    "\n"
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),\n"
    "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).\n"
    "\n"
    "## [Unreleased]\n"
)

RELEASE_1_1_1 = (
    "\n"
    "## [1.1.1] - 2015-05-15\n"
    "\n"
    "### Fixed\n"
    "- myfix\n"
    "\n"
    "### Other\n"
    "- simple update\n"
)

OLD_BODY = (
    "## [1.1.0] - 1970-01-01\n"
    "\n"
    "### fix bugs\n"
    "- my awesomefix\n"
    "\n"
    "### other\n"
    "- complex update\n"
)


def _builder(commits, version):
    return ChangelogBuilder(commits, version).with_release_date(date(2015, 5, 15))


def test_changelog_entries_are_generated():
    changelog = _builder(["fix: myfix", "simple update"], "1.1.1").build()
    assert changelog.generate() == HEADER_TEXT + RELEASE_1_1_1


def test_default_header_starts_generated_changelog():
    generated = _builder(["fix: myfix"], "1.0.0").build().generate()
    assert CHANGELOG_HEADER == HEADER_TEXT
    assert generated.startswith(CHANGELOG_HEADER)


def test_changelog_entry_with_link_is_generated():
    link = "https://example.com/compare/v0.2.24...v0.2.25"
    changelog = _builder(["fix: myfix"], "1.1.1").with_release_link(link).build()
    expected = HEADER_TEXT + (
        "\n"
        f"## [1.1.1]({link}) - 2015-05-15\n"
        "\n"
        "### Fixed\n"
        "- myfix\n"
    )
    assert changelog.generate() == expected


def test_generated_changelog_is_updated_correctly():
    generated = _builder(["fix: myfix", "simple update"], "1.1.1").build().generate()
    changelog = _builder(["fix: myfix2", "complex update"], "1.1.2").build()
    expected = HEADER_TEXT + (
        "\n"
        "## [1.1.2] - 2015-05-15\n"
        "\n"
        "### Fixed\n"
        "- myfix2\n"
        "\n"
        "### Other\n"
        "- complex update\n"
    ) + RELEASE_1_1_1
    assert changelog.prepend(generated) == expected


def test_changelog_is_updated():
    changelog = _builder(["fix: myfix", "simple update"], "1.1.1").build()
    old = f"{CHANGELOG_HEADER}\n{OLD_BODY}"
    assert changelog.prepend(old) == HEADER_TEXT + RELEASE_1_1_1 + "\n" + OLD_BODY


def test_changelog_without_header_is_updated():
    changelog = _builder(["fix: myfix", "simple update"], "1.1.1").build()
    assert changelog.prepend(OLD_BODY) == HEADER_TEXT + RELEASE_1_1_1 + OLD_BODY


def test_empty_changelog_is_updated():
    changelog = _builder(["fix: myfix", "simple update"], "1.1.1").build()
    assert changelog.prepend(CHANGELOG_HEADER) == HEADER_TEXT + RELEASE_1_1_1


def test_same_version_is_not_added():
    changelog = _builder(["fix: myfix", "simple update"], "1.1.0").build()
    assert changelog.prepend(OLD_BODY) == OLD_BODY


def test_custom_header_is_kept():
    header = "# Changelog\n\nMy custom header\n\n## [Unreleased]\n"
    old = header + "\n## [1.0.0] - 2020-01-01\n\n### Fixed\n- a\n"
    changelog = _builder(["fix: b"], "1.0.1").build()
    expected = (
        header
        + "\n## [1.0.1] - 2015-05-15\n\n### Fixed\n- b\n"
        + "\n## [1.0.0] - 2020-01-01\n\n### Fixed\n- a\n"
    )
    assert changelog.prepend(old) == expected


def test_scope_and_breaking_are_rendered():
    changelog = _builder(["feat(api)!: new endpoint"], "2.0.0").build()
    expected = HEADER_TEXT + (
        "\n"
        "## [2.0.0] - 2015-05-15\n"
        "\n"
        "### Added\n"
        "- *(api)* [**breaking**] new endpoint\n"
    )
    assert changelog.generate() == expected


def test_groups_are_sorted_and_version_prefix_trimmed():
    changelog = _builder(["security: patch hole", "feat: add thing"], "v3.0.0").build()
    expected = HEADER_TEXT + (
        "\n"
        "## [3.0.0] - 2015-05-15\n"
        "\n"
        "### Added\n"
        "- add thing\n"
        "\n"
        "### Security\n"
        "- patch hole\n"
    )
    assert changelog.generate() == expected


def test_builder_methods_do_not_change_original():
    base = ChangelogBuilder(["fix: myfix"], "1.0.0")
    dated = base.with_release_date(date(2015, 5, 15))
    assert base.release_date is None
    assert dated.release_date == date(2015, 5, 15)
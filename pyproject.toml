[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "relplz"
version = "0.1.0"
description = "Release automation helpers for Cargo workspaces: next versions from conventional commits, changelogs, manifests and git."
requires-python = ">=3.11"
keywords = [
    "release",
    "semver",
    "conventional-commits",
    "changelog",
    "cargo",
    "git",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Software Development :: Version Control :: Git",
    "Typing :: Typed",
]
dependencies = [
    "tomlkit",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["relplz"]

[tool.hatch.build.targets.sdist]
include = ["relplz", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true

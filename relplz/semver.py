"""Semantic versions, version requirements and requirement upgrades."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum

_U32_MAX = 2**32 - 1
_IDENTIFIER = re.compile(r"[0-9A-Za-z-]+")
_WILDCARDS = ("*", "x", "X")
_PART_NAMES = ("major", "minor", "patch")


class SemverError(ValueError):
    """Raised for malformed versions or requirements, or unsupported edits."""


def _numeric(text: str, what: str) -> int:
    if not text or not text.isascii() or not text.isdigit():
        raise SemverError(f"invalid {what} version number: {text!r}")
    if len(text) > 1 and text.startswith("0"):
        raise SemverError(f"invalid leading zero in {what} version number: {text!r}")
    return int(text)


def _check_pre(pre: str) -> None:
    if not pre:
        return
    for ident in pre.split("."):
        if not _IDENTIFIER.fullmatch(ident):
            raise SemverError(f"invalid pre-release identifier in {pre!r}")
        if ident.isdigit() and len(ident) > 1 and ident.startswith("0"):
            raise SemverError(f"invalid leading zero in pre-release identifier {ident!r}")


def _check_build(build: str) -> None:
    if not build:
        return
    for ident in build.split("."):
        if not _IDENTIFIER.fullmatch(ident):
            raise SemverError(f"invalid build metadata identifier in {build!r}")


def _increment_last_identifier(release: str) -> str:
    left, dot, right = release.rpartition(".")
    if dot and right.isascii() and right.isdigit() and int(right) <= _U32_MAX:
        return f"{left}.{int(right) + 1}"
    return f"{release}.1"


@dataclass(frozen=True)
class Version:
    """A semantic version: ``major.minor.patch[-pre][+build]``."""

    major: int
    minor: int
    patch: int
    pre: str = ""
    build: str = ""

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise SemverError("version numbers must not be negative")
        _check_pre(self.pre)
        _check_build(self.build)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string, raising SemverError when it is malformed."""
        core, plus, build = text.partition("+")
        if plus and not build:
            raise SemverError(f"empty build metadata in {text!r}")
        core, dash, pre = core.partition("-")
        if dash and not pre:
            raise SemverError(f"empty pre-release in {text!r}")
        parts = core.split(".")
        if len(parts) != 3:
            raise SemverError(f"expected major.minor.patch, got {text!r}")
        major, minor, patch = (
            _numeric(part, name) for part, name in zip(parts, _PART_NAMES)
        )
        return cls(major, minor, patch, pre, build)

    def increment_major(self) -> Version:
        """Increment the major number, resetting minor, patch and pre-release."""
        return replace(self, major=self.major + 1, minor=0, patch=0, pre="")

    def increment_minor(self) -> Version:
        """Increment the minor number, resetting patch and pre-release."""
        return replace(self, minor=self.minor + 1, patch=0, pre="")

    def increment_patch(self) -> Version:
        """Increment the patch number, resetting the pre-release."""
        return replace(self, patch=self.patch + 1, pre="")

    def increment_prerelease(self) -> Version:
        """Increment the last numeric pre-release identifier, or append ``.1``."""
        return replace(self, pre=_increment_last_identifier(self.pre))

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += f"-{self.pre}"
        if self.build:
            text += f"+{self.build}"
        return text


class Op(Enum):
    """Operator of a requirement comparator."""

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = ""


# Longest symbols first so that ">=" is not read as ">".
_OP_SYMBOLS = (">=", "<=", ">", "<", "=", "~", "^")


@dataclass(frozen=True)
class Comparator:
    """One comparator of a version requirement, possibly partial."""

    op: Op
    major: int
    minor: int | None = None
    patch: int | None = None
    pre: str = ""

    @classmethod
    def _parse(cls, text: str) -> Comparator:
        rest = text.strip()
        op: Op | None = None
        for symbol in _OP_SYMBOLS:
            if rest.startswith(symbol):
                op = Op(symbol)
                rest = rest[len(symbol):].lstrip()
                break
        rest, _, _build = rest.partition("+")
        core, dash, pre = rest.partition("-")
        if dash and not pre:
            raise SemverError(f"empty pre-release in requirement {text!r}")
        parts = core.split(".")
        if not core or len(parts) > 3:
            raise SemverError(f"invalid requirement {text!r}")
        if parts[0] in _WILDCARDS:
            raise SemverError(f"unexpected wildcard in requirement {text!r}")

        numbers: list[int | None] = []
        wildcard = False
        for part, name in zip(parts, _PART_NAMES):
            if part in _WILDCARDS:
                wildcard = True
                numbers.append(None)
            elif wildcard:
                raise SemverError(f"unexpected number after wildcard in {text!r}")
            else:
                numbers.append(_numeric(part, name))
        numbers += [None] * (3 - len(numbers))
        major, minor, patch = numbers

        if pre:
            if patch is None:
                raise SemverError(f"pre-release requires a patch number in {text!r}")
            _check_pre(pre)
        if op is None:
            op = Op.WILDCARD if wildcard else Op.CARET
        return cls(op, major, minor, patch, pre)

    def __str__(self) -> str:
        text = f"{self.op.value}{self.major}"
        if self.minor is not None:
            text += f".{self.minor}"
            if self.patch is not None:
                text += f".{self.patch}"
                if self.pre:
                    text += f"-{self.pre}"
            elif self.op is Op.WILDCARD:
                text += ".*"
        elif self.op is Op.WILDCARD:
            text += ".*"
        return text


@dataclass(frozen=True)
class VersionReq:
    """A comma separated list of comparators; empty means any version."""

    comparators: tuple[Comparator, ...] = ()

    @classmethod
    def parse(cls, text: str) -> VersionReq:
        """Parse a requirement string, raising SemverError when it is malformed."""
        stripped = text.strip()
        if stripped in _WILDCARDS:
            return cls(())
        if not stripped:
            raise SemverError("empty version requirement")
        pieces = [piece.strip() for piece in stripped.split(",")]
        if any(not piece for piece in pieces):
            raise SemverError(f"empty comparator in requirement {text!r}")
        if any(piece in _WILDCARDS for piece in pieces):
            raise SemverError(f"wildcard must be the only comparator in {text!r}")
        return cls(tuple(Comparator._parse(piece) for piece in pieces))

    def __str__(self) -> str:
        if not self.comparators:
            return "*"
        return ", ".join(str(comparator) for comparator in self.comparators)


def _set_comparator(pred: Comparator, version: Version) -> Comparator:
    minor = version.minor if pred.minor is not None else None
    patch = version.patch if pred.patch is not None else None
    match pred.op:
        case Op.WILDCARD:
            return replace(pred, major=version.major, minor=minor, patch=patch)
        case Op.EXACT | Op.TILDE | Op.CARET:
            return replace(
                pred, major=version.major, minor=minor, patch=patch, pre=version.pre
            )
        case _:
            raise SemverError(f"Support for modifying {pred} is currently unsupported")


def upgrade_requirement(req: str, version: Version) -> str | None:
    """Upgrade an existing requirement to ``version``.

    Returns the new requirement text, or None when nothing changes.
    """
    parsed = VersionReq.parse(req)
    if not parsed.comparators:
        return None
    new_req = VersionReq(tuple(_set_comparator(c, version) for c in parsed.comparators))
    new_text = str(new_req)
    if new_text.startswith("^") and not req.startswith("^"):
        new_text = new_text[1:]
    return None if new_text == req else new_text
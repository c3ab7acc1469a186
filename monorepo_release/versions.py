"""Version parsing and requirement matching.

Versions are handled as semver objects. Requirements follow Cargo's syntax:
comma-separated comparators such as ``=1.2.0``, ``^1.2``, ``~1.2.3``,
``>=1.0, <2.0`` or ``1.*``. A bare version means a caret requirement.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import semver

_COMPARATOR_RE = re.compile(
    r"""^\s*
    (?P<op>=|>=|<=|>|<|~|\^)?\s*
    (?P<major>\d+)
    (?:\.(?P<minor>\d+|[*xX]))?
    (?:\.(?P<patch>\d+|[*xX]))?
    (?:-(?P<pre>[0-9A-Za-z.-]+))?
    (?:\+[0-9A-Za-z.-]+)?
    \s*$""",
    re.VERBOSE,
)
_WILDCARDS = ("*", "x", "X")


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Incomplete versions are padded with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-beta.1" → "1.2.3-beta.1"
    """
    return semver.Version.parse(version_str.strip(), optional_minor_and_patch=True)


def _pre_key(pre: str | None) -> semver.Version:
    # A release sorts after any of its pre-releases, which is what semver
    # ordering on otherwise equal versions gives us.
    return semver.Version(0, 0, 0, prerelease=pre)


@dataclass(frozen=True)
class Comparator:
    op: str
    major: int
    minor: int | None = None
    patch: int | None = None
    pre: str | None = None

    def matches(self, v: semver.Version) -> bool:
        if self.op == "=":
            return self._matches_exact(v)
        if self.op == ">":
            return self._matches_greater(v)
        if self.op == ">=":
            return self._matches_exact(v) or self._matches_greater(v)
        if self.op == "<":
            return self._matches_less(v)
        if self.op == "<=":
            return self._matches_exact(v) or self._matches_less(v)
        if self.op == "~":
            return self._matches_tilde(v)
        return self._matches_caret(v)

    def _matches_exact(self, v: semver.Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if v.minor != self.minor:
            return False
        if self.patch is None:
            return True
        if v.patch != self.patch:
            return False
        return _pre_key(v.prerelease) == _pre_key(self.pre)

    def _matches_greater(self, v: semver.Version) -> bool:
        if v.major != self.major:
            return v.major > self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor > self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch > self.patch
        return _pre_key(v.prerelease) > _pre_key(self.pre)

    def _matches_less(self, v: semver.Version) -> bool:
        if v.major != self.major:
            return v.major < self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor < self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch < self.patch
        return _pre_key(v.prerelease) < _pre_key(self.pre)

    def _matches_tilde(self, v: semver.Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is not None and v.minor != self.minor:
            return False
        if self.patch is not None and v.patch != self.patch:
            return v.patch > self.patch
        return _pre_key(v.prerelease) >= _pre_key(self.pre)

    def _matches_caret(self, v: semver.Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if self.patch is None:
            if self.major > 0:
                return v.minor >= self.minor
            return v.minor == self.minor
        if self.major > 0:
            if v.minor != self.minor:
                return v.minor > self.minor
            if v.patch != self.patch:
                return v.patch > self.patch
        elif self.minor > 0:
            if v.minor != self.minor:
                return False
            if v.patch != self.patch:
                return v.patch > self.patch
        elif v.minor != self.minor or v.patch != self.patch:
            return False
        return _pre_key(v.prerelease) >= _pre_key(self.pre)


def _parse_comparator(text: str) -> Comparator:
    m = _COMPARATOR_RE.match(text)
    if m is None:
        raise ValueError(f"Invalid version requirement: {text!r}")
    op = m.group("op")
    major = int(m.group("major"))
    minor_raw, patch_raw = m.group("minor"), m.group("patch")

    if minor_raw in _WILDCARDS or patch_raw in _WILDCARDS:
        if op not in (None, "="):
            raise ValueError(f"Wildcard cannot be combined with {op!r}: {text!r}")
        if minor_raw in _WILDCARDS and patch_raw is not None and patch_raw not in _WILDCARDS:
            raise ValueError(f"Invalid wildcard requirement: {text!r}")
        minor = None if minor_raw in _WILDCARDS else int(minor_raw)
        return Comparator("=", major, minor, None)

    minor = int(minor_raw) if minor_raw is not None else None
    patch = int(patch_raw) if patch_raw is not None else None
    pre = m.group("pre")
    if pre is not None and patch is None:
        raise ValueError(f"Pre-release requires a full version: {text!r}")
    return Comparator(op or "^", major, minor, patch, pre)


class VersionReq:
    """A parsed Cargo version requirement.

    An empty expression (or ``*``) has no comparators and matches every
    release version.
    """

    def __init__(self, expr: str, comparators: list[Comparator]) -> None:
        self.expr = expr
        self.comparators = comparators

    @classmethod
    def parse(cls, expr: str) -> VersionReq:
        text = expr.strip()
        if text in ("", *_WILDCARDS):
            return cls(expr, [])
        return cls(expr, [_parse_comparator(part) for part in text.split(",")])

    @property
    def is_empty(self) -> bool:
        return not self.comparators

    def matches(self, version: semver.Version | str) -> bool:
        v = parse_version(version) if isinstance(version, str) else version
        if not all(c.matches(v) for c in self.comparators):
            return False
        if v.prerelease is None:
            return True
        # Pre-releases only match when a comparator opts in on the same
        # major.minor.patch.
        return any(
            c.pre is not None
            and (c.major, c.minor, c.patch) == (v.major, v.minor, v.patch)
            for c in self.comparators
        )

    def __str__(self) -> str:
        return self.expr.strip() or "*"

    def __repr__(self) -> str:
        return f"VersionReq({self.expr!r})"

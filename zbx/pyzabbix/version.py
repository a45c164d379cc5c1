"""Zabbix API version values.

Zabbix reports its API version through `apiinfo.version` as
`MAJOR.MINOR.PATCH`, optionally followed by a pre-release tag
such as `7.0.0alpha2`, `6.4.0beta5` or `7.0.0rc1`.

Versions are ordered field by field, and a release sorts after all of
its pre-releases:

>>> APIVersion.parse("7.0.0") > APIVersion.parse("7.0.0alpha2")
True
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import NamedTuple

from zbx.exceptions import InvalidVersion

VERSION_PATTERN = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(?:(alpha|beta|rc)(\d+))?$", re.ASCII
)


class PreReleaseKind(IntEnum):
    """Pre-release qualifier of a version. Members are ordered."""

    ALPHA = -3
    BETA = -2
    RC = -1
    RELEASE = 0

    @property
    def tag(self) -> str:
        """Version string suffix for the kind (empty for releases)."""
        return _KIND_TAGS[self]

    @classmethod
    def from_tag(cls, tag: str) -> PreReleaseKind:
        for kind, kind_tag in _KIND_TAGS.items():
            if kind_tag == tag:
                return kind
        raise InvalidVersion(f"Unknown pre-release tag: {tag!r}")


_KIND_TAGS = {
    PreReleaseKind.ALPHA: "alpha",
    PreReleaseKind.BETA: "beta",
    PreReleaseKind.RC: "rc",
    PreReleaseKind.RELEASE: "",
}


class APIVersion(NamedTuple):
    """An immutable Zabbix API version.

    Tuple ordering gives the comparison order: major, minor, patch,
    pre-release kind and pre-release number.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    pre_release_kind: PreReleaseKind = PreReleaseKind.RELEASE
    pre_release_number: int = 0

    @classmethod
    def parse(cls, text: str) -> APIVersion:
        """Parse a version string.

        Raises `InvalidVersion` if the string does not match
        `MAJOR.MINOR.PATCH[(alpha|beta|rc)N]`.
        """
        if not isinstance(text, str):
            raise InvalidVersion(f"Invalid version: {text!r}")
        m = VERSION_PATTERN.fullmatch(text)
        if not m:
            raise InvalidVersion(f"Invalid version: {text!r}")
        major, minor, patch, tag, number = m.groups()
        if tag is None:
            return cls(int(major), int(minor), int(patch))
        return cls(
            int(major),
            int(minor),
            int(patch),
            PreReleaseKind.from_tag(tag),
            int(number),
        )

    def __str__(self) -> str:
        s = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release_kind != PreReleaseKind.RELEASE:
            s += f"{self.pre_release_kind.tag}{self.pre_release_number}"
        return s

    def compare(self, other: APIVersion) -> int:
        """Three-way comparison. Returns -1, 0 or 1."""
        if self < other:
            return -1
        if self > other:
            return 1
        return 0

    def is_zero(self) -> bool:
        """Version is the default (unparsed) value `0.0.0`."""
        return self == APIVersion()

    @property
    def release(self) -> tuple[int, int, int]:
        """Major, minor and patch as a tuple."""
        return (self.major, self.minor, self.patch)

    @property
    def is_prerelease(self) -> bool:
        return self.pre_release_kind != PreReleaseKind.RELEASE

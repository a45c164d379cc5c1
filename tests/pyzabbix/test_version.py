from __future__ import annotations

import pytest
from zbx.exceptions import InvalidVersion
from zbx.exceptions import ZbxError
from zbx.pyzabbix.version import APIVersion
from zbx.pyzabbix.version import PreReleaseKind


@pytest.mark.parametrize(
    "text, expect",
    [
        ("6.0.0", APIVersion(6, 0, 0)),
        ("5.4.12", APIVersion(5, 4, 12)),
        ("7.0.0alpha2", APIVersion(7, 0, 0, PreReleaseKind.ALPHA, 2)),
        ("6.4.0beta5", APIVersion(6, 4, 0, PreReleaseKind.BETA, 5)),
        ("7.0.0rc1", APIVersion(7, 0, 0, PreReleaseKind.RC, 1)),
        ("10.20.30", APIVersion(10, 20, 30)),
    ],
)
def test_parse(text: str, expect: APIVersion) -> None:
    v = APIVersion.parse(text)
    assert v == expect
    assert str(v) == text


@pytest.mark.parametrize(
    "text",
    [
        "",
        "7",
        "7.0",
        "7.0.0.1",
        "v7.0.0",
        "7.0.0-rc1",
        "7.0.0rc",
        "7.0.0gamma1",
        "7.0.0 ",
        "7.0.0\n",
        "a.b.c",
        "\u0667.0.0",
        "7.\uff10.0",
        "7.0.0rc\u0661",
    ],
)
def test_parse_invalid(text: str) -> None:
    with pytest.raises(InvalidVersion):
        APIVersion.parse(text)


def test_invalid_version_is_value_error() -> None:
    with pytest.raises(ValueError):
        APIVersion.parse("nope")
    with pytest.raises(ZbxError):
        APIVersion.parse("nope")


@pytest.mark.parametrize(
    "lower, higher",
    [
        ("7.0.0alpha2", "7.0.0"),
        ("7.0.0alpha1", "7.0.0alpha2"),
        ("7.0.0beta2", "7.0.0rc1"),
        ("7.0.0alpha9", "7.0.0beta1"),
        ("6.2.5", "6.2.6rc1"),
        ("5.4.0", "6.0.0"),
        ("6.0.10", "6.2.0"),
        ("6.4.0beta5", "6.4.0beta6"),
    ],
)
def test_ordering(lower: str, higher: str) -> None:
    lo = APIVersion.parse(lower)
    hi = APIVersion.parse(higher)
    assert lo < hi
    assert hi > lo
    assert lo != hi
    assert lo.compare(hi) == -1
    assert hi.compare(lo) == 1


def test_compare_equal() -> None:
    a = APIVersion.parse("6.4.0beta5")
    b = APIVersion(6, 4, 0, PreReleaseKind.BETA, 5)
    assert a == b
    assert a.compare(b) == 0
    assert a <= b
    assert a >= b


def test_sorting() -> None:
    versions = ["7.0.0", "7.0.0rc1", "6.0.0", "7.0.0alpha1", "7.0.0beta2"]
    result = sorted(APIVersion.parse(v) for v in versions)
    assert [str(v) for v in result] == [
        "6.0.0",
        "7.0.0alpha1",
        "7.0.0beta2",
        "7.0.0rc1",
        "7.0.0",
    ]


def test_is_zero() -> None:
    assert APIVersion().is_zero()
    assert APIVersion.parse("0.0.0").is_zero()
    assert not APIVersion.parse("0.0.1").is_zero()
    assert not APIVersion(0, 0, 0, PreReleaseKind.RC, 0).is_zero()


def test_release_and_prerelease() -> None:
    v = APIVersion.parse("7.0.0rc1")
    assert v.release == (7, 0, 0)
    assert v.is_prerelease
    assert not APIVersion.parse("7.0.0").is_prerelease


def test_hashable() -> None:
    assert len({APIVersion.parse("7.0.0"), APIVersion(7, 0, 0)}) == 1

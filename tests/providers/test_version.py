"""Tests for parsing database server versions."""

from dbmatic.providers import DatabaseVersion

import pytest


@pytest.mark.parametrize(
    "text, ex_version",
    [
        ("PostgreSQL 15.7 (Debian 15.7-1.pgdg120+1) on x86_64-pc-linux-gnu", DatabaseVersion(15, 7, 0)),
        ("10.11.6-MariaDB-0+deb12u1", DatabaseVersion(10, 11, 6)),
        ("8.0.36", DatabaseVersion(8, 0, 36)),
        ("16.00.4135", DatabaseVersion(16, 0, 4135)),
        ("3.45.1", DatabaseVersion(3, 45, 1)),
        ("version 9", DatabaseVersion(9)),
    ],
)
def test_parse(text: str, ex_version: DatabaseVersion):
    """Tests the first dotted run of integers is taken as the version."""
    assert DatabaseVersion.parse(text) == ex_version


@pytest.mark.parametrize("text", ["", None, "unknown"])
def test_parse_without_digits(text):
    """Tests text without a version number is rejected."""
    with pytest.raises(ValueError):
        DatabaseVersion.parse(text)


def test_ordering_and_str():
    """Tests versions order by major, minor then patch, and render dotted."""
    assert DatabaseVersion(8, 0, 16) > DatabaseVersion(8, 0, 2)
    assert DatabaseVersion(10, 2, 1) < DatabaseVersion(10, 11)
    assert str(DatabaseVersion(15, 7)) == "15.7.0"

"""Parses free form database version strings."""

import re
from dataclasses import dataclass

_VERSION_RUN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


@dataclass(frozen=True, order=True)
class DatabaseVersion:
    """A structured major.minor.patch version."""

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> "DatabaseVersion":
        """Extract the first run of dot separated integers from a version string.

        ``"PostgreSQL 15.7 (Debian 15.7-1.pgdg120+1) on x86_64"`` parses to ``15.7.0`` and
        ``"10.11.6-MariaDB-0+deb12u1"`` to ``10.11.6``.

        :param text: the version text reported by the server
        :returns: the parsed version
        :raises: ValueError when the text contains no digits
        """
        match = _VERSION_RUN.search(text or "")
        if not match:
            raise ValueError(f"No version number found in '{text}'")
        return cls(*(int(g) if g is not None else 0 for g in match.groups()))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

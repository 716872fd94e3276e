"""Parse, order, and render SemVer and CalVer versions."""

import enum
import logging
import re

from dataclasses import dataclass
from typing import Iterable, Optional, Union

import semver

from .utils import NextTagError


class ParseError(NextTagError):
    """A user-supplied version string does not match the active scheme."""


class Scheme(enum.Enum):
    """The two supported versioning schemes."""

    SEMVER = "semver"
    CALVER = "calver"


@dataclass(frozen=True, order=True)
class CalVer:
    """A `YY.MM.BUILD` calendar version."""

    year: int
    month: int
    build: int

    def __post_init__(self):
        if not 0 <= self.year <= 99:
            raise ValueError(f"Year {self.year} is not a two-digit year")

        if not 1 <= self.month <= 12:
            raise ValueError(f"Month {self.month} is not between 1 and 12")

        if self.build < 1:
            raise ValueError(f"Build {self.build} must be at least 1")

    def __str__(self):
        return f"{self.year}.{self.month}.{self.build}"


Version = Union[semver.Version, CalVer]


# Three dot-separated integers, optionally behind a single `v` or `V`.
# Prerelease and build metadata suffixes are deliberately not matched.
SEMVER_REGEX = re.compile(r"[vV]?(?P<version>[0-9]+\.[0-9]+\.[0-9]+)")

CALVER_REGEX = re.compile(r"(?P<year>[0-9]+)\.(?P<month>[0-9]+)\.(?P<build>[0-9]+)")


def _parse_semver(raw: str) -> Optional[semver.Version]:
    if not (match := SEMVER_REGEX.fullmatch(raw.strip())):
        return None

    try:
        # semver rejects numeric fields with leading zeros
        return semver.Version.parse(match["version"])
    except ValueError:
        return None


def _parse_calver(raw: str) -> Optional[CalVer]:
    if not (match := CALVER_REGEX.fullmatch(raw.strip())):
        return None

    try:
        return CalVer(int(match["year"]), int(match["month"]), int(match["build"]))
    except ValueError:
        return None


_PARSERS = {
    Scheme.SEMVER: _parse_semver,
    Scheme.CALVER: _parse_calver,
}


def parse_version(raw: str, scheme: Scheme) -> Optional[Version]:
    """
    Return the Version for this string, or None if it is not valid.

    Never raises for malformed input.
    """
    return _PARSERS[scheme](raw)


def parse_version_strict(raw: str, scheme: Scheme) -> Version:
    """
    Return the Version for a user-supplied string.

    Raises ParseError if the string does not match the scheme's grammar.
    """
    version = parse_version(raw, scheme)
    if version is None:
        raise ParseError(f"`{raw}` is not a valid {scheme.value} version")

    return version


def format_version(version: Version) -> str:
    """Render a version canonically, without any tag prefix."""
    if isinstance(version, CalVer):
        return f"{version.year}.{version.month}.{version.build}"

    return f"{version.major}.{version.minor}.{version.patch}"


def select_latest(
    tags: Iterable[str], scheme: Scheme
) -> Optional[tuple[Version, str]]:
    """
    Return the highest (version, tag) pair among the tags.

    Tags that do not parse under the scheme are skipped. Returns None if no
    tag parses at all.
    """
    logger = logging.getLogger(__name__)

    version_to_tag: dict[Version, str] = {}

    for tag in tags:
        if (version := parse_version(tag, scheme)) is None:
            logger.debug("Tag `%s` is not a %s version, ignoring", tag, scheme.value)
            continue

        if (existing := version_to_tag.setdefault(version, tag)) != tag:
            logger.warning(
                "Tags `%s` and `%s` are both version %s, keeping `%s`",
                existing,
                tag,
                format_version(version),
                existing,
            )

    if not version_to_tag:
        logger.debug("No tags are %s versions", scheme.value)
        return None

    latest = max(version_to_tag)
    logger.info("Latest %s tag is `%s`", scheme.value, version_to_tag[latest])

    return (latest, version_to_tag[latest])

"""Compute the next version from a tag snapshot."""

import datetime
import logging

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional

import semver

from .config import Config, IncrementKind, ResetPolicy
from .logging import NOTICE
from .utils import NONE_MARKER
from .versions import (
    CalVer,
    Scheme,
    Version,
    format_version,
    parse_version_strict,
    select_latest,
)


MAJOR_LABEL = "release:major"
MINOR_LABEL = "release:minor"


@dataclass(frozen=True)
class Resolution:
    """The outcome of one version computation."""

    new_version: Version

    # The raw tag (or override string) the new version was computed from
    previous_tag: Optional[str]

    # Only meaningful for SemVer
    increment_kind: Optional[IncrementKind] = None

    @property
    def outputs(self) -> dict[str, str]:
        """Return the action outputs for this resolution."""
        return {
            "new-version": format_version(self.new_version),
            "previous-version": (
                self.previous_tag if self.previous_tag is not None else NONE_MARKER
            ),
        }


def resolve_increment_kind(
    config: Config, labels: AbstractSet[str]
) -> IncrementKind:
    """Return the SemVer bump requested by the labels or configuration."""
    if config.use_labels:
        # Major wins if both labels are present
        if MAJOR_LABEL in labels:
            return IncrementKind.MAJOR

        if MINOR_LABEL in labels:
            return IncrementKind.MINOR

    return config.increment_kind


def next_semver(baseline: semver.Version, kind: IncrementKind) -> semver.Version:
    """Bump the requested field and zero out the lower ones."""
    return baseline.next_version(part=kind.value)


def next_calver(
    baseline: Optional[CalVer], policy: ResetPolicy, today: datetime.date
) -> CalVer:
    """
    Return the next calendar version for today's period.

    The year and month always come from `today`. Within the same period the
    build counter increases; across periods the policy decides whether it
    restarts at 1 or keeps climbing.
    """
    year, month = today.year % 100, today.month

    if baseline is None:
        return CalVer(year, month, 1)

    if (baseline.year, baseline.month) > (year, month):
        logging.getLogger(__name__).warning(
            "Latest version %s is from a later period than %02d.%02d",
            format_version(baseline),
            year,
            month,
        )

    if (baseline.year, baseline.month) == (year, month):
        return CalVer(year, month, baseline.build + 1)

    if policy is ResetPolicy.CONTINUOUS:
        return CalVer(year, month, baseline.build + 1)

    return CalVer(year, month, 1)


def _resolve_baseline(
    config: Config, tags: Iterable[str]
) -> tuple[Optional[Version], Optional[str]]:
    """Return the (baseline, previous tag) pair the increment applies to."""
    logger = logging.getLogger(__name__)
    scheme = config.mode.scheme

    if config.override_version is not None:
        logger.info("Using override version %s as the baseline", config.override_version)
        return (
            parse_version_strict(config.override_version, scheme),
            config.override_version,
        )

    if latest := select_latest(tags, scheme):
        return latest

    if config.has_initial_baseline:
        logger.log(
            NOTICE,
            "No existing %s tags - starting from %s",
            scheme.value,
            config.initial_version,
        )
        return (parse_version_strict(config.initial_version, scheme), None)

    logger.log(NOTICE, "No existing %s tags - starting a new series", scheme.value)
    return (None, None)


def compute_next_version(
    config: Config,
    tags: Iterable[str],
    labels: AbstractSet[str],
    today: datetime.date,
) -> Resolution:
    """
    Compute the next version.

    This is a pure function of its arguments: it does no I/O and reads no
    global state, so identical inputs always produce identical results.
    """
    logger = logging.getLogger(__name__)

    baseline, previous_tag = _resolve_baseline(config, tags)

    if config.mode.scheme is Scheme.SEMVER:
        # An initial version is always available for SemVer
        assert baseline is not None

        kind = resolve_increment_kind(config, labels)
        new_version = next_semver(baseline, kind)
        logger.info(
            "%s -> %s -> %s", format_version(baseline), kind.value, new_version
        )

        return Resolution(new_version, previous_tag, kind)

    new_version = next_calver(baseline, config.reset_policy, today)
    logger.info(
        "%s -> %s (%s)",
        format_version(baseline) if baseline is not None else NONE_MARKER,
        format_version(new_version),
        config.reset_policy.value,
    )

    return Resolution(new_version, previous_tag)

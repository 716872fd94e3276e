"""Validated, immutable configuration for a single invocation."""

import argparse
import datetime
import enum
import logging
import zoneinfo

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .logging import NOTICE
from .utils import NextTagError, blank_to_none, str_to_bool
from .versions import Scheme, parse_version_strict


DEFAULT_INITIAL_VERSION = "0.0.0"


class ConfigError(NextTagError):
    """A required option is missing or inconsistent with the mode."""


class TagOrigin(enum.Enum):
    """Where the existing version tags are read from."""

    GIT = "git"
    GHCR = "ghcr"


class Mode(enum.Enum):
    """A pairing of one tag origin with one versioning scheme."""

    GIT_SEMVER = "git-semver"
    GIT_CALVER = "git-calver"
    GHCR_CALVER = "ghcr-calver"

    @property
    def origin(self) -> TagOrigin:
        """The tag origin named by this mode."""
        return TagOrigin(self.value.partition("-")[0])

    @property
    def scheme(self) -> Scheme:
        """The versioning scheme named by this mode."""
        return Scheme(self.value.partition("-")[2])


class ResetPolicy(enum.Enum):
    """Whether the CalVer build counter restarts in a new month."""

    MONTHLY = "monthly"
    CONTINUOUS = "continuous"


class IncrementKind(enum.Enum):
    """Which SemVer field to bump."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


def get_timezone(environ: Mapping[str, str]) -> datetime.tzinfo:
    """Return the time zone used to decide the current CalVer period."""
    logger = logging.getLogger(__name__)

    if not (input_timezone := blank_to_none(environ.get("CALVER_TIMEZONE"))):
        logger.debug("No time zone provided, defaulting to UTC")
        return datetime.timezone.utc

    try:
        return zoneinfo.ZoneInfo(input_timezone)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning("Time zone `%s` not found! Defaulting to UTC", input_timezone)
        return datetime.timezone.utc


@dataclass(frozen=True)
class Config:
    """Everything the version computation needs, collected once."""

    # pylint: disable=too-many-instance-attributes

    mode: Mode
    reset_policy: ResetPolicy = ResetPolicy.MONTHLY
    increment_kind: IncrementKind = IncrementKind.PATCH
    use_labels: bool = False
    override_version: Optional[str] = None
    initial_version: str = DEFAULT_INITIAL_VERSION
    ghcr_package_name: Optional[str] = None
    token: Optional[str] = None

    # GitHub context
    repo_dir: Path = Path(".")
    owner_repo: Optional[str] = None
    repository_owner: Optional[str] = None
    event_path: Optional[Path] = None
    tzinfo: datetime.tzinfo = datetime.timezone.utc

    def __post_init__(self):
        if self.mode.origin is TagOrigin.GHCR:
            if not self.ghcr_package_name:
                raise ConfigError(f"Mode `{self.mode.value}` requires ghcr-package-name")

            if not self.token:
                raise ConfigError(f"Mode `{self.mode.value}` requires github-token")

            if "/" not in self.ghcr_package_name and not self.repository_owner:
                raise ConfigError(
                    f"Package `{self.ghcr_package_name}` has no owner and "
                    "GITHUB_REPOSITORY_OWNER is not set"
                )

        if self.use_labels:
            if not self.token:
                raise ConfigError("use-pr-labels requires github-token")

            if not self.owner_repo:
                raise ConfigError("use-pr-labels requires GITHUB_REPOSITORY")

        # User-supplied versions are fatal if malformed, so check them before
        # any tags are looked up
        if self.override_version is not None:
            parse_version_strict(self.override_version, self.mode.scheme)

        if self.has_initial_baseline:
            parse_version_strict(self.initial_version, self.mode.scheme)

    @property
    def has_initial_baseline(self) -> bool:
        """
        Return True if the initial version should act as a baseline.

        The default `0.0.0` is not a calendar version, so CalVer modes only
        use an explicitly configured initial version.
        """
        return (
            self.mode.scheme is Scheme.SEMVER
            or self.initial_version != DEFAULT_INITIAL_VERSION
        )

    @property
    def ghcr_image(self) -> str:
        """Return the lowercased `owner/name` path of the GHCR package."""
        if not self.ghcr_package_name:
            raise ConfigError("No GHCR package configured")

        image = self.ghcr_package_name.strip("/")
        if "/" not in image:
            image = f"{self.repository_owner}/{image}"

        return image.lower()

    @classmethod
    def from_args(cls, args: argparse.Namespace, environ: Mapping[str, str]):
        """Build the configuration from parsed arguments and the environment."""
        logger = logging.getLogger(__name__)

        try:
            mode = Mode(args.mode)
            reset_policy = ResetPolicy(args.calver_reset_policy or "monthly")
            increment_kind = IncrementKind(args.semver_increment or "patch")
        except ValueError as err:
            raise ConfigError(str(err)) from err

        token = (
            blank_to_none(args.github_token)
            or blank_to_none(environ.get("GITHUB_TOKEN"))
            or blank_to_none(environ.get("GH_TOKEN"))
        )

        event_path = blank_to_none(environ.get("GITHUB_EVENT_PATH"))

        config = cls(
            mode=mode,
            reset_policy=reset_policy,
            increment_kind=increment_kind,
            use_labels=args.use_pr_labels,
            override_version=blank_to_none(args.override_version),
            initial_version=(
                blank_to_none(args.initial_version) or DEFAULT_INITIAL_VERSION
            ),
            ghcr_package_name=blank_to_none(args.ghcr_package_name),
            token=token,
            repo_dir=args.repo_dir,
            owner_repo=blank_to_none(environ.get("GITHUB_REPOSITORY")),
            repository_owner=blank_to_none(environ.get("GITHUB_REPOSITORY_OWNER")),
            event_path=Path(event_path) if event_path else None,
            tzinfo=get_timezone(environ),
        )

        logger.log(NOTICE, "Mode: %s", config.mode.value)
        logger.debug(
            "Reset policy: %s, increment: %s, labels: %s",
            config.reset_policy.value,
            config.increment_kind.value,
            config.use_labels,
        )

        return config


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the action inputs."""
    parser = argparse.ArgumentParser(
        description="Compute the next release version from existing tags."
    )
    parser.add_argument(
        "--mode", type=str, required=True, choices=[mode.value for mode in Mode]
    )
    parser.add_argument("--ghcr-package-name", type=str, default=None)
    parser.add_argument(
        "--calver-reset-policy",
        type=str,
        default="monthly",
        choices=[policy.value for policy in ResetPolicy] + [""],
    )
    parser.add_argument(
        "--semver-increment",
        type=str,
        default="patch",
        choices=[kind.value for kind in IncrementKind] + [""],
    )
    parser.add_argument(
        "--use-pr-labels",
        type=lambda value: str_to_bool(value) if value.strip() else False,
        default=False,
    )
    parser.add_argument("--github-token", type=str, default=None)
    parser.add_argument("--initial-version", type=str, default=None)
    parser.add_argument("--override-version", type=str, default=None)
    parser.add_argument("--repo-dir", type=Path, default=Path("."))

    return parser

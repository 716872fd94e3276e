"""Tests for building and validating the configuration."""

import datetime
import zoneinfo

from contextlib import nullcontext
from pathlib import Path

import pytest

from nexttag.config import (
    Config,
    ConfigError,
    IncrementKind,
    Mode,
    ResetPolicy,
    TagOrigin,
    build_parser,
    get_timezone,
)
from nexttag.versions import ParseError, Scheme


@pytest.mark.parametrize(
    "mode,origin,scheme",
    [
        (Mode.GIT_SEMVER, TagOrigin.GIT, Scheme.SEMVER),
        (Mode.GIT_CALVER, TagOrigin.GIT, Scheme.CALVER),
        (Mode.GHCR_CALVER, TagOrigin.GHCR, Scheme.CALVER),
    ],
)
def test_mode_axes(mode, origin, scheme):
    """Each mode selects one tag origin and one scheme."""
    assert mode.origin is origin
    assert mode.scheme is scheme


def test_defaults():
    """Only the mode is required for git modes."""
    args = build_parser().parse_args(["--mode", "git-semver"])
    config = Config.from_args(args, {})

    assert config.mode is Mode.GIT_SEMVER
    assert config.reset_policy is ResetPolicy.MONTHLY
    assert config.increment_kind is IncrementKind.PATCH
    assert config.use_labels is False
    assert config.override_version is None
    assert config.initial_version == "0.0.0"
    assert config.token is None
    assert config.repo_dir == Path(".")
    assert config.tzinfo is datetime.timezone.utc


def test_full_arguments(tmp_path):
    """Every input and the GitHub context are collected."""
    event_file = tmp_path / "event.json"
    args = build_parser().parse_args([
        "--mode", "ghcr-calver",
        "--ghcr-package-name", "MyImage",
        "--calver-reset-policy", "continuous",
        "--use-pr-labels", "no",
        "--github-token", "ghp_explicit",
        "--repo-dir", str(tmp_path),
    ])
    environ = {
        "GITHUB_TOKEN": "ghp_ambient",
        "GITHUB_REPOSITORY": "Octo/widgets",
        "GITHUB_REPOSITORY_OWNER": "Octo",
        "GITHUB_EVENT_PATH": str(event_file),
        "CALVER_TIMEZONE": "America/Los_Angeles",
    }
    config = Config.from_args(args, environ)

    assert config.mode is Mode.GHCR_CALVER
    assert config.reset_policy is ResetPolicy.CONTINUOUS
    assert config.token == "ghp_explicit"
    assert config.ghcr_image == "octo/myimage"
    assert config.owner_repo == "Octo/widgets"
    assert config.event_path == event_file
    assert config.repo_dir == tmp_path
    assert config.tzinfo == zoneinfo.ZoneInfo("America/Los_Angeles")


@pytest.mark.parametrize(
    "environ,expected",
    [
        ({"GITHUB_TOKEN": "a", "GH_TOKEN": "b"}, "a"),
        ({"GITHUB_TOKEN": "", "GH_TOKEN": "b"}, "b"),
        ({}, None),
    ],
)
def test_ambient_token(environ, expected):
    """The token falls back to the process environment."""
    args = build_parser().parse_args(["--mode", "git-semver", "--github-token", ""])
    assert Config.from_args(args, environ).token == expected


def test_empty_inputs_use_defaults():
    """Composite actions pass unset inputs as empty strings."""
    args = build_parser().parse_args([
        "--mode", "git-calver",
        "--ghcr-package-name", "",
        "--calver-reset-policy", "",
        "--semver-increment", "",
        "--use-pr-labels", "",
        "--initial-version", "",
        "--override-version", "",
    ])
    config = Config.from_args(args, {})

    assert config.reset_policy is ResetPolicy.MONTHLY
    assert config.increment_kind is IncrementKind.PATCH
    assert config.use_labels is False
    assert config.ghcr_package_name is None
    assert config.override_version is None
    assert config.initial_version == "0.0.0"


@pytest.mark.parametrize(
    "argv",
    [
        ["--semver-increment", "patch"],
        ["--mode", "svn-semver"],
        ["--mode", "git-semver", "--use-pr-labels", "maybe"],
        ["--mode", "git-calver", "--calver-reset-policy", "weekly"],
    ],
)
def test_invalid_arguments(argv):
    """Argument parsing rejects unknown values."""
    with pytest.raises(SystemExit):
        build_parser().parse_args(argv)


@pytest.mark.parametrize(
    "kwargs,expectation",
    [
        ({"mode": Mode.GHCR_CALVER, "token": "t"}, pytest.raises(ConfigError)),
        (
            {"mode": Mode.GHCR_CALVER, "ghcr_package_name": "img"},
            pytest.raises(ConfigError),
        ),
        (
            {"mode": Mode.GHCR_CALVER, "ghcr_package_name": "img", "token": "t"},
            pytest.raises(ConfigError),
        ),
        (
            {"mode": Mode.GHCR_CALVER, "ghcr_package_name": "o/img", "token": "t"},
            nullcontext(),
        ),
        (
            {
                "mode": Mode.GHCR_CALVER,
                "ghcr_package_name": "img",
                "token": "t",
                "repository_owner": "o",
            },
            nullcontext(),
        ),
        (
            {"mode": Mode.GIT_SEMVER, "use_labels": True, "owner_repo": "o/r"},
            pytest.raises(ConfigError),
        ),
        (
            {"mode": Mode.GIT_SEMVER, "use_labels": True, "token": "t"},
            pytest.raises(ConfigError),
        ),
        (
            {
                "mode": Mode.GIT_SEMVER,
                "use_labels": True,
                "token": "t",
                "owner_repo": "o/r",
            },
            nullcontext(),
        ),
        ({"mode": Mode.GIT_SEMVER, "override_version": "1.2"}, pytest.raises(ParseError)),
        ({"mode": Mode.GIT_SEMVER, "initial_version": "abc"}, pytest.raises(ParseError)),
        ({"mode": Mode.GIT_CALVER, "override_version": "1.2.3-rc.1"}, pytest.raises(ParseError)),
        ({"mode": Mode.GIT_CALVER, "initial_version": "24.13.1"}, pytest.raises(ParseError)),
        ({"mode": Mode.GIT_CALVER}, nullcontext()),
        ({"mode": Mode.GIT_CALVER, "override_version": "24.9.3"}, nullcontext()),
    ],
)
def test_validation(kwargs, expectation):
    """Inconsistent configurations fail before any tags are read."""
    with expectation:
        Config(**kwargs)


def test_config_is_immutable():
    """Configurations cannot be modified once built."""
    config = Config(mode=Mode.GIT_SEMVER)
    with pytest.raises(AttributeError):
        config.mode = Mode.GIT_CALVER


@pytest.mark.parametrize(
    "environ,expected",
    [
        ({}, datetime.timezone.utc),
        ({"CALVER_TIMEZONE": ""}, datetime.timezone.utc),
        ({"CALVER_TIMEZONE": "Not/AZone"}, datetime.timezone.utc),
        ({"CALVER_TIMEZONE": "Asia/Tokyo"}, zoneinfo.ZoneInfo("Asia/Tokyo")),
    ],
)
def test_get_timezone(environ, expected):
    """Unknown time zones fall back to UTC."""
    assert get_timezone(environ) == expected

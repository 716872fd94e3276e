"""Shared fixtures for building configurations."""

import datetime

import pytest

from nexttag.config import Config, Mode


@pytest.fixture(name="make_config")
def fixture_make_config():
    """Return a factory for Configs with the GitHub context filled in."""

    def factory(mode=Mode.GIT_SEMVER, **kwargs):
        kwargs.setdefault("token", "ghp_test")
        kwargs.setdefault("owner_repo", "octo/widgets")
        kwargs.setdefault("repository_owner", "octo")
        return Config(mode=mode, **kwargs)

    return factory


@pytest.fixture(name="today")
def fixture_today():
    """A fixed invocation date in October 2024."""
    return datetime.date(2024, 10, 17)

"""Collect the raw tags and pull request labels the engine works from."""

import base64
import json
import os
import subprocess

from pathlib import Path
from typing import Optional

import httpx

from .config import Config, TagOrigin
from .logging import LoggingMixin
from .utils import NextTagError


GHCR_REGISTRY = "https://ghcr.io"

# The registry caps page sizes, so ask for large pages and follow the links
GHCR_PAGE_SIZE = 1000


class SourceUnavailable(NextTagError):
    """Tags or labels could not be retrieved."""


class GitTagSource(LoggingMixin):
    """Read every tag in a local git checkout."""

    def __init__(self, repo_dir: Path):
        self.repo_dir = repo_dir

    def list_tags(self) -> list[str]:
        """Return all tags in the repository."""
        try:
            output = subprocess.check_output(
                ["git", "tag", "--list"], cwd=self.repo_dir, stderr=subprocess.PIPE
            )
        except (subprocess.CalledProcessError, OSError) as err:
            raise SourceUnavailable(
                f"Could not list git tags in {self.repo_dir}"
            ) from err

        tags = output.decode("utf-8").strip().splitlines()
        self.logger.debug("Found %d git tags", len(tags))

        return tags


class GhcrTagSource(LoggingMixin):
    """Read the image tags of a GitHub Container Registry package."""

    def __init__(self, image: str, token: str, client: Optional[httpx.Client] = None):
        self.image = image
        self.token = token
        self.client = client

    def list_tags(self) -> list[str]:
        """Return all tags of the image, following pagination."""
        if self.client is not None:
            return self._list_tags(self.client)

        with httpx.Client(base_url=GHCR_REGISTRY, timeout=30.0) as client:
            return self._list_tags(client)

    def _list_tags(self, client: httpx.Client) -> list[str]:
        # GHCR accepts a base64-encoded GitHub token as the bearer token
        encoded_token = base64.b64encode(self.token.encode("utf-8")).decode("ascii")
        headers = {
            "Authorization": f"Bearer {encoded_token}",
            "Accept": "application/json",
        }

        url: Optional[str] = f"/v2/{self.image}/tags/list"
        params: Optional[dict[str, int]] = {"n": GHCR_PAGE_SIZE}
        tags: list[str] = []

        while url:
            self.logger.debug("Fetching %s", url)
            try:
                response = client.get(url, headers=headers, params=params)
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as err:
                raise SourceUnavailable(
                    f"Could not list tags for ghcr.io/{self.image}"
                ) from err

            # Empty packages report `"tags": null`
            tags.extend(payload.get("tags") or [])

            # The next link already carries the paging parameters
            url = response.links.get("next", {}).get("url")
            params = None

        self.logger.debug("Found %d tags for ghcr.io/%s", len(tags), self.image)
        return tags


class PullRequestLabelSource(LoggingMixin):
    """Read the labels of the pull request that triggered this run."""

    def __init__(self, owner_repo: str, token: str, event_path: Optional[Path]):
        self.owner_repo = owner_repo
        self.token = token
        self.event_path = event_path

    def pull_request_number(self) -> Optional[int]:
        """Return the triggering pull request number, if there is one."""
        if self.event_path is None:
            self.logger.debug("No event payload available")
            return None

        try:
            with self.event_path.open(encoding="utf-8") as infile:
                event_data = json.load(infile)
        except (OSError, ValueError) as err:
            raise SourceUnavailable(
                f"Could not read event payload {self.event_path}"
            ) from err

        if not (pull_request := event_data.get("pull_request")):
            return None

        return int(pull_request["number"])

    def current_labels(self) -> frozenset[str]:
        """Return the label names, or an empty set outside of pull requests."""
        if (number := self.pull_request_number()) is None:
            self.logger.info("Not running for a pull request, ignoring labels")
            return frozenset()

        try:
            output = subprocess.check_output(
                [
                    "gh",
                    "api",
                    "--paginate",
                    f"repos/{self.owner_repo}/issues/{number}/labels",
                    "--jq",
                    ".[].name",
                ],
                env={**os.environ, "GH_TOKEN": self.token},
            )
        except (subprocess.CalledProcessError, OSError) as err:
            raise SourceUnavailable(
                f"Could not list labels for pull request #{number}"
            ) from err

        labels = frozenset(
            line.strip() for line in output.decode("utf-8").splitlines() if line.strip()
        )
        self.logger.info("Pull request #%d labels: %s", number, sorted(labels))

        return labels


def get_tag_source(config: Config):
    """Return the tag source selected by the mode."""
    if config.mode.origin is TagOrigin.GHCR:
        assert config.token is not None
        return GhcrTagSource(config.ghcr_image, config.token)

    return GitTagSource(config.repo_dir)


def get_label_source(config: Config) -> PullRequestLabelSource:
    """Return the pull request label source for this run."""
    assert config.owner_repo is not None and config.token is not None
    return PullRequestLabelSource(config.owner_repo, config.token, config.event_path)

"""Get the next release version."""

import datetime
import logging
import os
import sys

from pathlib import Path
from typing import Mapping

from .config import Config, build_parser
from .increment import Resolution, compute_next_version
from .logging import setup_logging, NOTICE
from .sources import get_label_source, get_tag_source
from .utils import NextTagError
from .versions import Scheme


def get_next_version(config: Config, today: datetime.date) -> Resolution:
    """Gather the tags and labels, then compute the next version."""
    logger = logging.getLogger(__name__)

    if config.override_version is not None:
        logger.log(
            NOTICE,
            "Override version %s supplied, skipping tag lookup",
            config.override_version,
        )
        tags = []
    else:
        tags = get_tag_source(config).list_tags()

    labels = frozenset()
    if config.use_labels:
        if config.mode.scheme is Scheme.SEMVER:
            labels = get_label_source(config).current_labels()
        else:
            logger.warning("Pull request labels only apply to SemVer, ignoring")

    resolution = compute_next_version(config, tags, labels, today)

    logger.log(
        NOTICE,
        "New version: %s (previous: %s)",
        resolution.outputs["new-version"],
        resolution.outputs["previous-version"],
    )

    return resolution


def write_outputs(outputs: Mapping[str, str], environ: Mapping[str, str]):
    """Append the outputs to $GITHUB_OUTPUT, or print them outside of Actions."""
    lines = "".join(f"{key}={value}\n" for key, value in outputs.items())

    if output_file := environ.get("GITHUB_OUTPUT"):
        with Path(output_file).open(mode="a", encoding="utf-8") as outfile:
            outfile.write(lines)
    else:
        sys.stdout.write(lines)


def entrypoint():
    """Main entrypoint for this module."""
    setup_logging()

    args = build_parser().parse_args()

    try:
        config = Config.from_args(args, os.environ)
        today = datetime.datetime.now(config.tzinfo).date()
        resolution = get_next_version(config, today)
    except NextTagError as err:
        logging.getLogger(__name__).error("%s", err)
        if err.__cause__ is not None:
            logging.getLogger(__name__).debug("Caused by: %r", err.__cause__)
        sys.exit(1)

    write_outputs(resolution.outputs, os.environ)


if __name__ == "__main__":
    entrypoint()

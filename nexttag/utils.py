"""Utility functions."""

import argparse
from typing import Optional


NONE_MARKER = "none"


class NextTagError(Exception):
    """Base class for every fatal error raised while computing a version."""


def str_to_bool(value: str) -> bool:
    """Convert a string to a boolean (case-insensitive)."""
    truthy_values = {"true", "t", "yes", "y", "1"}
    falsey_values = {"false", "f", "no", "n", "0"}

    # Normalize input to lowercase
    value = value.strip().lower()

    if value in truthy_values:
        return True

    if value in falsey_values:
        return False

    raise argparse.ArgumentTypeError(f"Invalid boolean value: '{value}'")


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Treat unset action inputs (passed as empty strings) as missing."""
    if value is None or not value.strip():
        return None

    return value.strip()

"""Logging that plays nice with GitHub Actions workflow commands."""

import logging


NOTICE = 25


class GHAFilter(logging.Filter):
    """Prefix each record with the matching workflow command."""

    # pylint: disable=too-few-public-methods

    prefixes = {
        logging.DEBUG: "::debug::",
        logging.INFO: "",
        NOTICE: "::notice::",
        logging.WARNING: "::warning::",
        logging.ERROR: "::error::",
        logging.CRITICAL: "::error::",
    }

    def filter(self, record):
        record.ghaprefix = self.prefixes.get(record.levelno, "")
        return True


def setup_logging():
    """Attach the GitHub Actions handler to the package logger."""
    # Entrypoints and tests may both call this
    if logging.getLevelName("NOTICE") == NOTICE:
        return

    logging.addLevelName(NOTICE, "NOTICE")

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(ghaprefix)s%(message)s"))
    handler.addFilter(GHAFilter())

    package_logger = logging.getLogger(__name__.rpartition(".")[0])
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


class LoggingMixin:
    """A mixin class for logging."""

    # pylint: disable=too-few-public-methods

    @property
    def logger(self) -> logging.Logger:
        """Create and return a logger for instance or class."""
        if not hasattr(self, "_logger") or not self._logger:
            self._logger = logging.getLogger(
                f"{self.__class__.__module__}.{self.__class__.__name__}"
            )
        return self._logger

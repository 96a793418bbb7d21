import logging
import sys

PACKAGE_LOGGER = "coffee_reporting"

log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app_logger = logging.getLogger(PACKAGE_LOGGER)
app_logger.setLevel(logging.INFO)

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(log_formatter)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Attaches the console handler to the package logger and sets its level.

    Modules log through ``logging.getLogger(__name__)`` so every logger under
    ``coffee_reporting`` inherits this configuration. Calling it again only
    changes the level.
    """
    if console_handler not in app_logger.handlers:
        app_logger.addHandler(console_handler)
    app_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if verbose:
        app_logger.debug("Logging level set to debug")
    return app_logger

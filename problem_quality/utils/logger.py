"""Logging setup for the quality engine"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Optional, Union

import yaml

PACKAGE_LOGGER = "problem_quality"
LOG_LEVEL_ENV = "PROBLEM_QUALITY_LOG_LEVEL"

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "logging_config.yaml"


def setup_logging(
    config_path: Optional[str] = None,
    level: Optional[Union[str, int]] = None,
) -> None:
    """
    Initialize logging from a YAML dictConfig file.

    Args:
        config_path: Path to logging_config.yaml. Uses the bundled file when None.
        level: Level for the problem_quality logger and its handlers.
            Falls back to PROBLEM_QUALITY_LOG_LEVEL, then to the file.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    log_config = None
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            log_config = yaml.safe_load(f)

    if log_config:
        logging.config.dictConfig(log_config)
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    level = level or os.environ.get(LOG_LEVEL_ENV)
    if level:
        _apply_level(level)


def _apply_level(level: Union[str, int]) -> None:
    if isinstance(level, str):
        level = level.upper()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the problem_quality hierarchy.

    Args:
        name: Module name (e.g. "problem_quality.dedup.duplicate_detector").
            Names from outside the package, such as "__main__", are nested
            under "problem_quality" so they share its handlers.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)

"""
Logging Configuration

Consistent logging setup for the analysis engine. Log records go to stderr
so that JSON written to stdout by the CLI stays machine readable.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Optional


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER = "archmodel"

_loggers: Dict[str, logging.Logger] = {}
_initialized = False


def setup_logging(
	level: int = logging.INFO,
	log_file: Optional[Path] = None,
	format_string: str = DEFAULT_FORMAT,
	date_format: str = DEFAULT_DATE_FORMAT,
) -> None:
	"""
	Configure the package logger.

	Args:
		level: Logging level (default: INFO)
		log_file: Optional path to a log file
		format_string: Log message format
		date_format: Date format for timestamps
	"""
	global _initialized

	root_logger = logging.getLogger(ROOT_LOGGER)
	if _initialized:
		root_logger.setLevel(level)
		for handler in root_logger.handlers:
			handler.setLevel(level)
		return

	formatter = logging.Formatter(format_string, datefmt=date_format)

	console_handler = logging.StreamHandler(sys.stderr)
	console_handler.setFormatter(formatter)
	console_handler.setLevel(level)

	root_logger.setLevel(level)
	root_logger.addHandler(console_handler)

	if log_file:
		log_file.parent.mkdir(parents=True, exist_ok=True)
		file_handler = logging.FileHandler(log_file)
		file_handler.setFormatter(formatter)
		file_handler.setLevel(level)
		root_logger.addHandler(file_handler)

	_initialized = True


def get_logger(name: str) -> logging.Logger:
	"""
	Get a logger for a module, namespaced under ``archmodel``.

	Example:
		logger = get_logger(__name__)
		logger.info("Classifying %d components", len(components))
	"""
	if not _initialized:
		setup_logging()

	if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
		name = f"{ROOT_LOGGER}.{name}"

	if name not in _loggers:
		_loggers[name] = logging.getLogger(name)

	return _loggers[name]

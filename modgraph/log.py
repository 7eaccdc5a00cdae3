"""
Logging setup shared by the CLI and the API server.

Everything goes to stderr so that stdout carries only the JSON
document.
"""

import logging


def setup_logging(level: str = "INFO") -> logging.Logger:
	"""
	Configure the root logger for a modgraph run.

	Args:
	    level: Log level string (e.g. 'INFO', 'DEBUG').

	Returns:
	    The package logger.
	"""
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format="%(asctime)s  %(name)-24s  %(levelname)-7s  %(message)s",
	)
	return logging.getLogger("modgraph")

"""
Exception hierarchy for graph construction.

Every fatal condition inherits from ModGraphError so the CLI and the
API can catch it at a single point and turn it into an exit status or
an HTTP error.
"""

from __future__ import annotations

from typing import Optional


class ModGraphError(Exception):
	"""Base exception for all modgraph errors."""

	def __init__(self, message: str, path: Optional[str] = None):
		self.path = path
		self.reason = message
		if path is not None:
			message = f"{path}: {message}"
		super().__init__(message)


class IoFailure(ModGraphError):
	"""A file exists but could not be read."""
	pass


class UnsupportedDialect(ModGraphError):
	"""No parsing dialect matches the file's path."""
	pass


class ParseFailure(ModGraphError):
	"""The parser could not produce a syntax tree."""
	pass

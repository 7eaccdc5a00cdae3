"""
Runtime configuration.

Uses Pydantic Settings so every option can come from a MODGRAPH_*
environment variable or a .env file. CLI flags override these values.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphSettings(BaseSettings):
	"""Settings for graph runs and the API server."""

	# Traversal
	entry_paths: List[str] = ["test.ts"]
	root: Optional[str] = None
	normalize_paths: bool = False
	skip_unsupported: bool = False

	# Logging
	log_level: str = "INFO"

	# API server
	host: str = "127.0.0.1"
	port: int = 8000

	model_config = SettingsConfigDict(
		env_prefix="MODGRAPH_",
		env_file=".env",
		env_file_encoding="utf-8",
		extra="ignore",
	)

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from modgraph.config import GraphSettings
from modgraph.errors import ModGraphError
from modgraph.graph import build
from modgraph.log import setup_logging


logger = logging.getLogger("modgraph.cli")


def cmd_analyze(args: argparse.Namespace, settings: GraphSettings) -> int:
	entry_paths = args.entries or settings.entry_paths
	try:
		project = build(
			entry_paths,
			root=args.root if args.root is not None else settings.root,
			normalize_paths=args.normalize_paths or settings.normalize_paths,
			skip_unsupported=args.skip_unsupported or settings.skip_unsupported,
		)
	except ModGraphError as e:
		logger.error("Aborting: %s", e)
		return 1
	print(json.dumps(project.model_dump(), indent=2))
	return 0


def cmd_serve(args: argparse.Namespace, settings: GraphSettings) -> int:
	uvicorn.run(
		"api:app",
		host=args.host or settings.host,
		port=args.port or settings.port,
		reload=args.reload,
	)
	return 0


def main(argv: Optional[List[str]] = None) -> None:
	parser = argparse.ArgumentParser(prog="modgraph")
	parser.add_argument("--log-level", default=None, help="Logging level (default: MODGRAPH_LOG_LEVEL or INFO)")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Build the module graph and print it as JSON")
	pa.add_argument("entries", nargs="*", help="Entry file paths (default: MODGRAPH_ENTRY_PATHS)")
	pa.add_argument("--root", default=None, help="Directory relative paths are resolved against")
	pa.add_argument("--normalize-paths", action="store_true", help="Deduplicate files by normalized path")
	pa.add_argument("--skip-unsupported", action="store_true", help="Skip files of unknown dialect instead of aborting")
	pa.set_defaults(func=cmd_analyze)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default=None)
	ps.add_argument("--port", type=int, default=None)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)

	args = parser.parse_args(argv)
	settings = GraphSettings()
	setup_logging(args.log_level or settings.log_level)
	sys.exit(args.func(args, settings))


if __name__ == "__main__":
	main()

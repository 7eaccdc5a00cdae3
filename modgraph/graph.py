from __future__ import annotations

import logging
import os
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .ast_parse import analyze
from .errors import IoFailure, UnsupportedDialect
from .model import FileFact, Notice, Project


logger = logging.getLogger(__name__)


class GraphBuilder:
	"""
	Builds a Project by following import sources depth-first from entry files.

	Paths are compared as literal strings unless normalize_paths is set,
	in which case os.path.normpath is applied first. Relative paths are
	resolved against root (default: the working directory) for existence
	checks and reads; the FileFact keeps the path as it was keyed.
	"""

	def __init__(
		self,
		root: Optional[str] = None,
		normalize_paths: bool = False,
		skip_unsupported: bool = False,
	):
		self.root = root
		self.normalize_paths = normalize_paths
		self.skip_unsupported = skip_unsupported
		self.project = Project()
		self._in_progress: Set[str] = set()
		self._completed: Set[str] = set()
		self._noticed: Set[str] = set()

	def key(self, path: str) -> str:
		return os.path.normpath(path) if self.normalize_paths else path

	def resolve(self, path: str) -> str:
		if self.root is None:
			return path
		return os.path.join(self.root, path)

	def build(self, entry_paths: Iterable[str]) -> Project:
		entry_paths = list(entry_paths)
		logger.info("Building module graph from %d entry path(s)", len(entry_paths))
		for path in entry_paths:
			self._traverse(path)
		logger.info(
			"Module graph complete: %d file(s), %d notice(s)",
			len(self.project.files),
			len(self.project.notices),
		)
		return self.project

	def _traverse(self, entry: str) -> None:
		stack: List[Tuple[FileFact, Iterator[str]]] = []
		fact = self._open(entry)
		if fact is None:
			return
		stack.append((fact, iter(fact.import_sources())))
		while stack:
			fact, pending = stack[-1]
			source = next(pending, None)
			if source is None:
				stack.pop()
				self._in_progress.discard(fact.path)
				self._completed.add(fact.path)
				self.project.files.append(fact)
				continue
			child = self._open(source)
			if child is not None:
				stack.append((child, iter(child.import_sources())))

	def _open(self, path: str) -> Optional[FileFact]:
		"""Analyze path and mark it in progress, or return None when it must be skipped."""
		key = self.key(path)
		if key in self._completed:
			return None
		if key in self._in_progress:
			logger.debug("Import cycle through %s, not descending again", key)
			return None

		resolved = self.resolve(key)
		if not os.path.exists(resolved):
			self._notice(key, "file not found")
			return None

		try:
			with open(resolved, "r", encoding="utf-8") as fh:
				text = fh.read()
		except (OSError, UnicodeDecodeError) as exc:
			raise IoFailure(f"cannot read file: {exc}", path=key) from exc

		try:
			fact = analyze(key, text)
		except UnsupportedDialect as exc:
			if not self.skip_unsupported:
				raise
			self._notice(key, exc.reason)
			return None

		self._in_progress.add(key)
		return fact

	def _notice(self, path: str, message: str) -> None:
		if path in self._noticed:
			return
		self._noticed.add(path)
		logger.warning("%s: %s", path, message)
		self.project.notices.append(Notice(path=path, message=message))


def build(
	entry_paths: Iterable[str],
	*,
	root: Optional[str] = None,
	normalize_paths: bool = False,
	skip_unsupported: bool = False,
) -> Project:
	builder = GraphBuilder(
		root=root,
		normalize_paths=normalize_paths,
		skip_unsupported=skip_unsupported,
	)
	return builder.build(entry_paths)

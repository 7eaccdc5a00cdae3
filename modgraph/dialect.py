from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, Tuple

import tree_sitter_javascript as ts_javascript
import tree_sitter_typescript as ts_typescript
from pydantic import BaseModel, ConfigDict
from tree_sitter import Language, Parser

from .errors import UnsupportedDialect


class SourceDialect(BaseModel):
	model_config = ConfigDict(frozen=True)

	language: str
	jsx: bool = False
	module_kind: str = "module"


# extension -> (language, jsx, module_kind)
EXTENSION_DIALECT: Dict[str, Tuple[str, bool, str]] = {
	".js": ("javascript", True, "module"),
	".mjs": ("javascript", True, "module"),
	".jsx": ("javascript", True, "module"),
	".cjs": ("javascript", True, "script"),
	".ts": ("typescript", False, "module"),
	".mts": ("typescript", False, "module"),
	".cts": ("typescript", False, "script"),
	".tsx": ("typescript", True, "module"),
}


def detect_dialect(path: str) -> SourceDialect:
	_, ext = os.path.splitext(path)
	ext = ext.lower()
	if ext not in EXTENSION_DIALECT:
		raise UnsupportedDialect(f"cannot determine source dialect from extension {ext!r}", path=path)
	language, jsx, module_kind = EXTENSION_DIALECT[ext]
	return SourceDialect(
		language=language,
		jsx=jsx,
		module_kind=module_kind,
	)


@lru_cache(maxsize=None)
def _grammar(name: str) -> Language:
	if name == "javascript":
		return Language(ts_javascript.language())
	if name == "tsx":
		return Language(ts_typescript.language_tsx())
	return Language(ts_typescript.language_typescript())


def grammar_name(dialect: SourceDialect) -> str:
	if dialect.language == "javascript":
		return "javascript"
	return "tsx" if dialect.jsx else "typescript"


def grammar_for(dialect: SourceDialect) -> Language:
	return _grammar(grammar_name(dialect))


def parser_for(dialect: SourceDialect) -> Parser:
	# Parsers are not shared between threads; languages are.
	return Parser(grammar_for(dialect))

from __future__ import annotations

import enum
import logging
from typing import Callable, Dict, List, Optional, Tuple

from tree_sitter import Node

from .dialect import SourceDialect, detect_dialect, parser_for
from .errors import ParseFailure
from .model import (
	DEFAULT_SPECIFIER,
	NAMESPACE_SPECIFIER,
	Diagnostic,
	FileFact,
	ImportRecord,
	Specifier,
)


logger = logging.getLogger(__name__)


class NodeKind(enum.Enum):
	"""Syntax nodes the module visitor reacts to; everything else is walked through."""

	IMPORT_DECLARATION = "import_statement"
	IMPORT_CLAUSE = "import_clause"
	NAMESPACE_IMPORT = "namespace_import"
	IMPORT_SPECIFIER = "import_specifier"
	EXPORT_DECLARATION = "export_statement"


_NODE_KINDS: Dict[str, NodeKind] = {kind.value: kind for kind in NodeKind}

_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}


_SIMPLE_ESCAPES: Dict[str, str] = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	"b": "\b",
	"f": "\f",
	"v": "\v",
}

_LINE_CONTINUATIONS = {"\n", "\r\n", "\r", "\u2028", "\u2029"}


def _text(node: Node) -> str:
	return (node.text or b"").decode("utf-8", errors="replace")


def _decode_escape(raw: str) -> str:
	body = raw[1:]
	if body in _LINE_CONTINUATIONS:
		return ""
	try:
		if body.startswith("u{") and body.endswith("}"):
			return chr(int(body[2:-1], 16))
		if body[:1] in ("u", "x") and len(body) > 1:
			return chr(int(body[1:], 16))
		if body and all(c in "01234567" for c in body):
			return chr(int(body, 8))
	except ValueError:
		return raw
	return _SIMPLE_ESCAPES.get(body, body)


def _string_value(node: Node) -> str:
	"""Cooked value of a string literal: quotes removed, escape sequences decoded."""
	if node.type != "string":
		return _text(node)
	parts: List[str] = []
	for child in node.children:
		if child.type == "string_fragment":
			parts.append(_text(child))
		elif child.type == "escape_sequence":
			parts.append(_decode_escape(_text(child)))
	# astral characters may be written as a \uXXXX\uXXXX surrogate pair
	value = "".join(parts)
	return value.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def _name_text(node: Node) -> str:
	# Module export names may be string literals: import { "a-b" as ab } from "m"
	return _string_value(node)


def _position(node: Node) -> Tuple[int, int]:
	row, column = node.start_point
	return row + 1, column + 1


def _snippet(node: Node, limit: int = 40) -> str:
	text = _text(node).strip().splitlines()
	first = text[0] if text else ""
	return first if len(first) <= limit else first[:limit] + "..."


def _has_token(node: Node, token: str) -> bool:
	return any(child.type == token for child in node.children)


def _pattern_names(node: Optional[Node]) -> List[str]:
	if node is None:
		return []
	if node.type in ("identifier", "shorthand_property_identifier_pattern"):
		return [_text(node)]
	if node.type == "pair_pattern":
		return _pattern_names(node.child_by_field_name("value"))
	if node.type in ("assignment_pattern", "object_assignment_pattern"):
		return _pattern_names(node.child_by_field_name("left"))
	if node.type in ("object_pattern", "array_pattern", "rest_pattern"):
		names: List[str] = []
		for child in node.named_children:
			names.extend(_pattern_names(child))
		return names
	return []


def _declared_names(node: Node) -> List[str]:
	names: List[str] = []
	if node.type in _VARIABLE_DECLARATIONS:
		for declarator in node.named_children:
			if declarator.type == "variable_declarator":
				names.extend(_pattern_names(declarator.child_by_field_name("name")))
		return names
	if node.type == "ambient_declaration":
		# export declare const x: number;
		for child in node.named_children:
			names.extend(_declared_names(child))
		return names
	name = node.child_by_field_name("name")
	if name is None or name.type == "string":
		return names
	names.append(_text(name))
	return names


def _default_name(node: Optional[Node]) -> str:
	if node is None:
		return DEFAULT_SPECIFIER
	if node.type == "identifier":
		return _text(node)
	name = node.child_by_field_name("name")
	if name is not None:
		return _text(name)
	return DEFAULT_SPECIFIER


def collect_diagnostics(root: Node) -> List[Diagnostic]:
	"""Turn ERROR and MISSING nodes of a syntax tree into diagnostics, in document order."""
	diagnostics: List[Diagnostic] = []
	if not root.has_error:
		return diagnostics
	stack = [root]
	while stack:
		node = stack.pop()
		if node.is_missing:
			line, column = _position(node)
			diagnostics.append(Diagnostic(message=f"missing {node.type}", line=line, column=column))
		elif node.is_error:
			line, column = _position(node)
			diagnostics.append(
				Diagnostic(message=f"unexpected syntax {_snippet(node)!r}", line=line, column=column)
			)
		else:
			stack.extend(
				child for child in reversed(node.children) if child.has_error or child.is_missing
			)
	return diagnostics


class ModuleVisitor:
	"""
	Collects import and export facts from one syntax tree into a FileFact.

	Specifiers are appended to the import record under the cursor, which
	is set when an import declaration is entered and cleared when its
	subtree has been left.
	"""

	def __init__(self, fact: FileFact, dialect: SourceDialect):
		self.fact = fact
		self.dialect = dialect
		self._cursor: Optional[int] = None
		self._handlers: Dict[NodeKind, Callable[[Node], None]] = {
			NodeKind.IMPORT_DECLARATION: self.visit_import_declaration,
			NodeKind.IMPORT_CLAUSE: self.visit_import_clause,
			NodeKind.NAMESPACE_IMPORT: self.visit_namespace_import,
			NodeKind.IMPORT_SPECIFIER: self.visit_import_specifier,
			NodeKind.EXPORT_DECLARATION: self.visit_export_declaration,
		}

	def walk(self, root: Node) -> None:
		# (node, leaving) pairs; only import declarations get a leave marker
		stack: List[Tuple[Node, bool]] = [(root, False)]
		while stack:
			node, leaving = stack.pop()
			if leaving:
				self._cursor = None
				continue
			kind = _NODE_KINDS.get(node.type)
			if kind is not None:
				self._handlers[kind](node)
				if kind is NodeKind.IMPORT_DECLARATION:
					stack.append((node, True))
			stack.extend((child, False) for child in reversed(node.children))

	def diagnose(self, node: Node, message: str) -> None:
		line, column = _position(node)
		self.fact.diagnostics.append(Diagnostic(message=message, line=line, column=column))

	def _append_specifier(self, node: Node, source_name: str, local_name: str) -> None:
		if self._cursor is None:
			self.diagnose(node, "import specifier outside an import declaration")
			return
		self.fact.imports[self._cursor].specifiers.append(
			Specifier(source_name=source_name, local_name=local_name)
		)

	def _set_default_export(self, node: Node, name: str) -> None:
		if self.fact.default_export is not None:
			self.diagnose(node, f"duplicate default export (previous: {self.fact.default_export!r})")
		self.fact.default_export = name

	def visit_import_declaration(self, node: Node) -> None:
		source = node.child_by_field_name("source")
		if source is None:
			# import x = require("y") is not an ES import declaration
			self._cursor = None
			return
		if self.dialect.module_kind == "script":
			self.diagnose(node, "import declaration in a script (CommonJS) file")
		self.fact.imports.append(ImportRecord(source=_string_value(source)))
		self._cursor = len(self.fact.imports) - 1

	def visit_import_clause(self, node: Node) -> None:
		for child in node.named_children:
			if child.type == "identifier":
				self._append_specifier(child, DEFAULT_SPECIFIER, _text(child))
				break

	def visit_namespace_import(self, node: Node) -> None:
		for child in node.named_children:
			if child.type == "identifier":
				self._append_specifier(node, NAMESPACE_SPECIFIER, _text(child))
				break

	def visit_import_specifier(self, node: Node) -> None:
		name = node.child_by_field_name("name")
		if name is None:
			return
		alias = node.child_by_field_name("alias")
		source_name = _name_text(name)
		local_name = _name_text(alias) if alias is not None else source_name
		self._append_specifier(node, source_name, local_name)

	def visit_export_declaration(self, node: Node) -> None:
		if _has_token(node, "default"):
			target = node.child_by_field_name("declaration")
			if target is None:
				target = node.child_by_field_name("value")
			self._set_default_export(node, _default_name(target))
			return

		declaration = node.child_by_field_name("declaration")
		if declaration is not None:
			self.fact.exports.extend(_declared_names(declaration))
			return

		for child in node.named_children:
			if child.type == "export_clause":
				self._visit_export_clause(child)
			elif child.type == "namespace_export":
				# export * as ns from "m"
				names = [c for c in child.named_children if c.type in ("identifier", "string")]
				if names:
					self.fact.exports.append(_name_text(names[-1]))

	def _visit_export_clause(self, node: Node) -> None:
		for spec in node.named_children:
			if spec.type != "export_specifier":
				continue
			name = spec.child_by_field_name("name")
			if name is None:
				continue
			alias = spec.child_by_field_name("alias")
			local_name = _name_text(name)
			exported = _name_text(alias) if alias is not None else local_name
			if exported == DEFAULT_SPECIFIER:
				self._set_default_export(spec, local_name)
			else:
				self.fact.exports.append(exported)


def analyze(path: str, source_text: str) -> FileFact:
	dialect = detect_dialect(path)
	parser = parser_for(dialect)
	try:
		tree = parser.parse(source_text.encode("utf-8"))
	except ValueError as exc:
		raise ParseFailure(f"parser failed: {exc}", path=path) from exc
	if tree is None:
		raise ParseFailure("parser returned no syntax tree", path=path)

	fact = FileFact(path=path)
	fact.diagnostics.extend(collect_diagnostics(tree.root_node))
	ModuleVisitor(fact, dialect).walk(tree.root_node)

	for diagnostic in fact.diagnostics:
		logger.warning("%s:%d:%d: %s", path, diagnostic.line, diagnostic.column, diagnostic.message)
	return fact

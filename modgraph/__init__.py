"""Module dependency graphs for JavaScript and TypeScript sources.

Modules:
- dialect.py: Source dialect detection and tree-sitter grammar selection.
- ast_parse.py: Syntax-tree visitor extracting imports and exports per file.
- graph.py: Depth-first graph builder over import sources.
- model.py: Data structures for file facts and the project graph.
- config.py: Settings from MODGRAPH_* environment variables.
- errors.py: Exception hierarchy.
- log.py: Logging setup.
"""

__all__ = [
	"dialect",
	"ast_parse",
	"graph",
	"model",
	"config",
	"errors",
	"log",
]

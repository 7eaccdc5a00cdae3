import logging

import pytest

from modgraph.errors import IoFailure, UnsupportedDialect
from modgraph.graph import GraphBuilder, build


def write(root, name, text):
	path = root / name
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text)
	return path


def paths(project):
	return [f.path for f in project.files]


def test_leaf_precedes_importer(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.ts", 'import { f } from "f.ts";\n')
	write(tmp_path, "f.ts", "export const f = 1;\n")

	project = build(["e.ts"])
	assert paths(project) == ["f.ts", "e.ts"]
	assert project.get("f.ts").exports == ["f"]
	assert project.notices == []


def test_missing_import_is_skipped_with_notice(tmp_path, monkeypatch, caplog):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.ts", 'import x from "missing.ts";\nimport "missing.ts";\n')

	with caplog.at_level(logging.WARNING):
		project = build(["e.ts"])
	assert paths(project) == ["e.ts"]
	assert [(n.path, n.message) for n in project.notices] == [("missing.ts", "file not found")]
	assert "missing.ts: file not found" in caplog.text


def test_missing_entry(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	project = build(["nope.ts"])
	assert project.files == []
	assert len(project.notices) == 1


def test_two_file_cycle_terminates(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "a.ts", 'import { b } from "b.ts";\nexport const a = 1;\n')
	write(tmp_path, "b.ts", 'import { a } from "a.ts";\nexport const b = 2;\n')

	project = build(["a.ts"])
	assert paths(project) == ["b.ts", "a.ts"]


def test_self_import(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "self.js", 'import * as me from "self.js";\n')
	project = build(["self.js"])
	assert paths(project) == ["self.js"]


def test_diamond_keeps_one_fact_per_file(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "a.js", 'import "b.js";\nimport "c.js";\n')
	write(tmp_path, "b.js", 'import "d.js";\n')
	write(tmp_path, "c.js", 'import "d.js";\n')
	write(tmp_path, "d.js", "export default 1;\n")

	project = build(["a.js"])
	assert paths(project) == ["d.js", "b.js", "c.js", "a.js"]
	assert len(set(paths(project))) == len(project.files)


def test_repeated_entries(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.js", 'import "f.js";\n')
	write(tmp_path, "f.js", "")
	project = build(["e.js", "f.js", "e.js"])
	assert paths(project) == ["f.js", "e.js"]


def test_build_is_idempotent(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.ts", 'import A, { b as c } from "lib/f.ts";\nimport "missing.ts";\nexport default A;\n')
	write(tmp_path, "lib/f.ts", "export const b = 1;\nexport default class F {}\n")

	first = build(["e.ts"]).model_dump()
	second = build(["e.ts"]).model_dump()
	assert first == second
	assert first["files"][0]["path"] == "lib/f.ts"
	assert first["files"][0]["default_export"] == "F"


def test_serialized_shape(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.ts", 'import D from "missing.ts";\n')
	dumped = build(["e.ts"]).model_dump()
	assert dumped == {
		"files": [
			{
				"path": "e.ts",
				"imports": [
					{
						"source": "missing.ts",
						"specifiers": [{"source_name": "default", "local_name": "D"}],
					}
				],
				"exports": [],
				"default_export": None,
			}
		]
	}


def test_unreadable_file_aborts(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.ts", 'import "bad.ts";\n')
	(tmp_path / "bad.ts").write_bytes(b"\xff\xfe\x00\x81")

	with pytest.raises(IoFailure) as exc:
		build(["e.ts"])
	assert exc.value.path == "bad.ts"


def test_directory_with_source_extension_aborts(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	(tmp_path / "pkg.ts").mkdir()
	with pytest.raises(IoFailure):
		build(["pkg.ts"])


def test_unsupported_dialect_aborts_by_default(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.js", 'import "styles.css";\n')
	write(tmp_path, "styles.css", "body {}\n")

	with pytest.raises(UnsupportedDialect):
		build(["e.js"])


def test_unsupported_dialect_can_be_skipped(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.js", 'import "styles.css";\n')
	write(tmp_path, "styles.css", "body {}\n")

	project = build(["e.js"], skip_unsupported=True)
	assert paths(project) == ["e.js"]
	assert [n.path for n in project.notices] == ["styles.css"]


def test_paths_compared_literally_by_default(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.js", 'import "./f.js";\nimport "f.js";\n')
	write(tmp_path, "f.js", "")

	assert paths(build(["e.js"])) == ["./f.js", "f.js", "e.js"]
	assert paths(build(["e.js"], normalize_paths=True)) == ["f.js", "e.js"]


def test_root_directory(tmp_path):
	write(tmp_path, "src/e.ts", 'import "src/f.ts";\n')
	write(tmp_path, "src/f.ts", "")

	builder = GraphBuilder(root=str(tmp_path))
	project = builder.build(["src/e.ts"])
	assert paths(project) == ["src/f.ts", "src/e.ts"]


def test_parse_diagnostics_do_not_abort(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	write(tmp_path, "e.ts", 'import "f.ts";\nlet = ;\n')
	write(tmp_path, "f.ts", "")

	project = build(["e.ts"])
	assert paths(project) == ["f.ts", "e.ts"]
	assert project.get("e.ts").diagnostics

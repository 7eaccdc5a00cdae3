from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SPECIFIER = "default"
NAMESPACE_SPECIFIER = "*"


class Specifier(BaseModel):
	model_config = ConfigDict(frozen=True)

	source_name: str
	local_name: str


class ImportRecord(BaseModel):
	source: str
	specifiers: List[Specifier] = []


class Diagnostic(BaseModel):
	message: str
	line: int
	column: int


class FileFact(BaseModel):
	path: str
	imports: List[ImportRecord] = []
	exports: List[str] = []
	default_export: Optional[str] = None
	diagnostics: List[Diagnostic] = Field(default_factory=list, exclude=True)

	def import_sources(self) -> List[str]:
		return [record.source for record in self.imports]


class Notice(BaseModel):
	path: str
	message: str


class Project(BaseModel):
	files: List[FileFact] = []
	notices: List[Notice] = Field(default_factory=list, exclude=True)

	def get(self, path: str) -> Optional[FileFact]:
		for fact in self.files:
			if fact.path == path:
				return fact
		return None

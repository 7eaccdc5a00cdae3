from __future__ import annotations

import logging
import os
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from modgraph.errors import IoFailure, ModGraphError
from modgraph.graph import build
from modgraph.model import Project


logger = logging.getLogger("modgraph.api")

app = FastAPI(title="Module Graph Analyzer")


class GraphRequest(BaseModel):
	entry_paths: List[str]
	root_path: Optional[str] = None
	normalize_paths: bool = False
	skip_unsupported: bool = False


@app.post("/graph", response_model=Project)
def graph(req: GraphRequest) -> Project:
	root = None
	if req.root_path is not None:
		root = os.path.abspath(req.root_path)
		if not os.path.isdir(root):
			raise HTTPException(status_code=400, detail=f"Invalid root_path: {root}")

	try:
		return build(
			req.entry_paths,
			root=root,
			normalize_paths=req.normalize_paths,
			skip_unsupported=req.skip_unsupported,
		)
	except IoFailure as e:
		logger.error("Graph build failed: %s", e)
		raise HTTPException(status_code=500, detail=str(e))
	except ModGraphError as e:
		raise HTTPException(status_code=400, detail=str(e))


def create_app() -> FastAPI:
	return app

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from archmodel.complexity import estimate_complexity
from archmodel.config import get_config
from archmodel.errors import ConfigError
from archmodel.model import ComplexityInfo, ControlFlowFacts, ProjectAnalysisResult
from archmodel.pipeline import analyze_project


app = FastAPI(title="Architecture Model Engine")


class AnalyzeRequest(BaseModel):
	# raw dicts so malformed bundles degrade to warnings instead of a 422
	components: List[Dict[str, Any]]
	parallel: bool = True


def _config():
	try:
		return get_config()
	except ConfigError as e:
		raise HTTPException(status_code=500, detail=str(e))


@app.post("/analyze", response_model=ProjectAnalysisResult)
def analyze(req: AnalyzeRequest) -> ProjectAnalysisResult:
	return analyze_project(req.components, config=_config(), parallel=req.parallel)


@app.post("/complexity", response_model=ComplexityInfo)
def complexity(facts: ControlFlowFacts) -> ComplexityInfo:
	return estimate_complexity(facts, _config())


def create_app() -> FastAPI:
	return app

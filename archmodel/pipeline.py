from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

from .builder import ComponentBuilder, RawFacts, check_cancelled
from .classify import classify_components
from .complexity import estimate_components
from .config import DEFAULT_CONFIG, ClassificationConfig
from .errors import AnalysisCancelled
from .logging_config import get_logger
from .model import (
	BusinessProcess,
	Component,
	MethodInfo,
	NavigationFlow,
	ProjectAnalysisResult,
	Relationship,
	UserFlowComponent,
)
from .navigation import derive_flows
from .processes import extract_business_processes
from .relationships import build_relationships


logger = get_logger(__name__)


class _Accumulator:
	"""Append-only state of one analysis run, frozen into the result at the end."""

	def __init__(self):
		self.components: List[Component] = []
		self.relationships: List[Relationship] = []
		self.navigation_flows: List[NavigationFlow] = []
		self.user_flows: List[UserFlowComponent] = []
		self.business_processes: List[BusinessProcess] = []
		self.warnings: List[str] = []
		self.error: Optional[str] = None

	def freeze(self, config: ClassificationConfig) -> ProjectAnalysisResult:
		return ProjectAnalysisResult(
			components=self.components,
			relationships=self.relationships,
			navigation_flows=self.navigation_flows,
			user_flows=self.user_flows,
			business_processes=self.business_processes,
			warnings=self.warnings,
			error=self.error,
			ui_filter_mode=config.ui_filter_mode,
		)


def _merge_complexity(components: List[Component], annotated: Dict[str, Tuple[MethodInfo, ...]]) -> List[Component]:
	return [
		c.model_copy(update={"methods": annotated[c.id]}) if c.id in annotated else c
		for c in components
	]


def _run_mid_stages(
	acc: _Accumulator,
	config: ClassificationConfig,
	cancel: Optional[threading.Event],
	parallel: bool,
) -> None:
	components = tuple(acc.components)
	stages = {
		"relationships": lambda: build_relationships(components, config, cancel),
		"flows": lambda: derive_flows(components, config, cancel),
		"complexity": lambda: estimate_components(components, config, cancel),
	}

	outputs: Dict[str, object] = {}
	failures: List[BaseException] = []
	if parallel:
		with ThreadPoolExecutor(max_workers=len(stages), thread_name_prefix="archmodel") as executor:
			futures: Dict[str, Future] = {name: executor.submit(stage) for name, stage in stages.items()}
			for name, future in futures.items():
				try:
					outputs[name] = future.result()
				except Exception as exc:
					failures.append(exc)
	else:
		for name, stage in stages.items():
			try:
				outputs[name] = stage()
			except Exception as exc:
				failures.append(exc)
				if isinstance(exc, AnalysisCancelled):
					break

	# keep every stage that finished before reporting the first failure
	if "relationships" in outputs:
		acc.relationships.extend(outputs["relationships"])
	if "flows" in outputs:
		flows, user_flows = outputs["flows"]
		acc.navigation_flows.extend(flows)
		acc.user_flows.extend(user_flows)
	if "complexity" in outputs:
		acc.components = _merge_complexity(acc.components, outputs["complexity"])

	if failures:
		cancelled = [f for f in failures if isinstance(f, AnalysisCancelled)]
		raise cancelled[0] if cancelled else failures[0]


def _run(
	acc: _Accumulator,
	raw_facts: Iterable[RawFacts],
	config: ClassificationConfig,
	cancel: Optional[threading.Event],
	parallel: bool,
) -> None:
	builder = ComponentBuilder()
	try:
		for raw in raw_facts:
			check_cancelled(cancel)
			builder.add(raw)
	finally:
		acc.components = builder.finish()
		acc.warnings.extend(builder.warnings)
	logger.info("Built %d components", len(acc.components))

	acc.components = classify_components(acc.components, config, cancel)
	_run_mid_stages(acc, config, cancel, parallel)

	check_cancelled(cancel)
	acc.business_processes.extend(extract_business_processes(acc.user_flows))


def analyze_project(
	raw_facts: Iterable[RawFacts],
	config: Optional[ClassificationConfig] = None,
	cancel: Optional[threading.Event] = None,
	parallel: bool = True,
) -> ProjectAnalysisResult:
	"""Run the whole engine over a fact sequence.

	Never raises: a failing stage sets ``error`` on the returned result, which
	still carries every component and graph built before the failure.
	"""
	config = config or DEFAULT_CONFIG
	acc = _Accumulator()
	try:
		_run(acc, raw_facts, config, cancel, parallel)
	except AnalysisCancelled:
		logger.warning("Analysis cancelled after %d components", len(acc.components))
		acc.error = "analysis cancelled"
	except Exception as exc:
		logger.exception("Analysis failed")
		acc.error = f"{type(exc).__name__}: {exc}"

	result = acc.freeze(config)
	logger.info(
		"Analysis finished: %d components, %d relationships, %d flows%s",
		len(result.components),
		len(result.relationships),
		len(result.navigation_flows),
		f" (error: {result.error})" if result.error else "",
	)
	return result

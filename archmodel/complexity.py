from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Tuple

from .builder import check_cancelled
from .config import DEFAULT_CONFIG, ClassificationConfig
from .logging_config import get_logger
from .model import ComplexityClass, ComplexityInfo, Component, ControlFlowFacts, MethodInfo, format_complexity


logger = get_logger(__name__)

_LOOP_COMPLEXITY: Dict[int, ComplexityClass] = {
	0: ComplexityClass.CONSTANT,
	1: ComplexityClass.LINEAR,
	2: ComplexityClass.QUADRATIC,
}


def _add(contributors: List[str], contributor: str) -> None:
	if contributor not in contributors:
		contributors.append(contributor)


def loop_complexity(depth: int) -> ComplexityClass:
	return _LOOP_COMPLEXITY.get(depth, ComplexityClass.CUBIC)


def _known_call(call: str, config: ClassificationConfig) -> Optional[ComplexityClass]:
	if call in config.known_calls:
		return config.known_calls[call]
	return config.known_calls.get(call.rsplit(".", 1)[-1])


def _rationale(depth: int, recursion: bool, contributors: List[str]) -> str:
	if not contributors:
		return "Simple constant-time operations"
	parts: List[str] = []
	if depth > 0:
		parts.append(f"Loop depth: {depth}.")
	if recursion:
		parts.append("Contains recursion.")
	parts.append("Contributors: " + ", ".join(contributors))
	return " ".join(parts)


def estimate_complexity(facts: ControlFlowFacts, config: ClassificationConfig = DEFAULT_CONFIG) -> ComplexityInfo:
	"""Classify time and space complexity from a method's control-flow shape."""
	contributors: List[str] = []
	depth = facts.loop_depth

	time = loop_complexity(depth)
	if depth == 1:
		_add(contributors, "single loop")
	elif depth > 1:
		_add(contributors, f"nested loop depth {depth}")

	if facts.has_recursion:
		if facts.recursion_branching > 1:
			_add(contributors, f"branching recursion (factor {facts.recursion_branching})")
			time = ComplexityClass.EXPONENTIAL
		else:
			_add(contributors, "single recursion")
			if depth == 0:
				time = ComplexityClass.LINEAR

	for call in facts.calls:
		call_complexity = _known_call(call, config)
		if call_complexity is not None and call_complexity.rank > ComplexityClass.CONSTANT.rank:
			_add(contributors, f"call to {call} ({format_complexity(call_complexity)})")
			time = time.worse(call_complexity)

	space = ComplexityClass.CONSTANT
	for structure in facts.auxiliary_structures:
		_add(contributors, f"auxiliary {structure} growth")
		space = ComplexityClass.LINEAR
	if facts.has_recursion:
		_add(contributors, "recursion stack growth")
		space = ComplexityClass.LINEAR

	return ComplexityInfo(
		time_complexity=time,
		space_complexity=space,
		loop_depth=depth,
		has_recursion=facts.has_recursion,
		rationale=_rationale(depth, facts.has_recursion, contributors),
		contributors=contributors,
	)


def estimate_method(method: MethodInfo, config: ClassificationConfig = DEFAULT_CONFIG) -> ComplexityInfo:
	if method.is_abstract:
		return ComplexityInfo(rationale="Abstract method without a body")
	return estimate_complexity(method.control_flow, config)


def annotate_methods(component: Component, config: ClassificationConfig = DEFAULT_CONFIG) -> Tuple[MethodInfo, ...]:
	return tuple(
		method.model_copy(update={"complexity": estimate_method(method, config)}) for method in component.methods
	)


def estimate_components(
	components: Iterable[Component],
	config: ClassificationConfig = DEFAULT_CONFIG,
	cancel: Optional[threading.Event] = None,
) -> Dict[str, Tuple[MethodInfo, ...]]:
	"""Annotated methods keyed by component id."""
	annotated: Dict[str, Tuple[MethodInfo, ...]] = {}
	methods = 0
	for component in components:
		check_cancelled(cancel)
		annotated[component.id] = annotate_methods(component, config)
		methods += len(component.methods)
	logger.info("Estimated complexity for %d methods", methods)
	return annotated

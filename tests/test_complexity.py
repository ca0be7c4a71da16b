from __future__ import annotations

import pytest

from archmodel.builder import build_component
from archmodel.complexity import estimate_complexity, estimate_components, estimate_method, loop_complexity
from archmodel.config import ClassificationConfig
from archmodel.model import (
	ComplexityClass,
	ControlFlowFacts,
	MethodInfo,
	Severity,
	format_complexity,
)

from conftest import find


def test_constant_method():
	info = estimate_complexity(ControlFlowFacts())
	assert info.time_complexity is ComplexityClass.CONSTANT
	assert info.space_complexity is ComplexityClass.CONSTANT
	assert info.rationale == "Simple constant-time operations"
	assert info.contributors == ()
	assert info.severity_level == 1


def test_nested_loops_are_quadratic():
	info = estimate_complexity(ControlFlowFacts(loop_depth=2))
	assert info.time_complexity is ComplexityClass.QUADRATIC
	assert info.severity_level == 3
	assert "Loop depth: 2." in info.rationale
	assert "nested loop depth 2" in info.contributors


@pytest.mark.parametrize(
	"depth, expected",
	[
		(0, ComplexityClass.CONSTANT),
		(1, ComplexityClass.LINEAR),
		(2, ComplexityClass.QUADRATIC),
		(3, ComplexityClass.CUBIC),
		(5, ComplexityClass.CUBIC),
	],
)
def test_loop_complexity(depth, expected):
	assert loop_complexity(depth) is expected


def test_more_nesting_never_lowers_the_estimate():
	ranks = [estimate_complexity(ControlFlowFacts(loop_depth=d)).time_complexity.rank for d in range(6)]
	assert ranks == sorted(ranks)


def test_single_recursion():
	info = estimate_complexity(ControlFlowFacts(has_recursion=True))
	assert info.time_complexity is ComplexityClass.LINEAR
	assert info.space_complexity is ComplexityClass.LINEAR
	assert info.has_recursion
	assert "single recursion" in info.contributors
	assert "recursion stack growth" in info.contributors
	assert "Contains recursion." in info.rationale

	looped = estimate_complexity(ControlFlowFacts(loop_depth=2, has_recursion=True))
	assert looped.time_complexity is ComplexityClass.QUADRATIC


def test_branching_recursion_is_exponential():
	info = estimate_complexity(ControlFlowFacts(recursion_branching=2))
	assert info.has_recursion
	assert info.time_complexity is ComplexityClass.EXPONENTIAL
	assert "branching recursion (factor 2)" in info.contributors
	assert info.severity_level == 3


def test_known_calls_raise_the_bound():
	info = estimate_complexity(ControlFlowFacts(calls=("Collections.sort", "map.get")))
	assert info.time_complexity is ComplexityClass.LINEARITHMIC
	assert info.contributors == ("call to Collections.sort (O(n log n))",)

	inside_loop = estimate_complexity(ControlFlowFacts(loop_depth=2, calls=("binarySearch",)))
	assert inside_loop.time_complexity is ComplexityClass.QUADRATIC


def test_custom_known_calls():
	config = ClassificationConfig(known_calls={"expensiveLookup": ComplexityClass.QUADRATIC})
	info = estimate_complexity(ControlFlowFacts(calls=("repo.expensiveLookup", "sort")), config)
	assert info.time_complexity is ComplexityClass.QUADRATIC
	assert len(info.contributors) == 1


def test_auxiliary_structures_grow_space():
	info = estimate_complexity(ControlFlowFacts(loop_depth=1, auxiliary_structures=("map",)))
	assert info.time_complexity is ComplexityClass.LINEAR
	assert info.space_complexity is ComplexityClass.LINEAR
	assert info.contributors == ("single loop", "auxiliary map growth")


def test_abstract_method_has_no_estimate_to_make():
	info = estimate_method(MethodInfo(name="evict", is_abstract=True, control_flow={"loop_depth": 3}))
	assert info.time_complexity is ComplexityClass.CONSTANT
	assert info.rationale == "Abstract method without a body"


def test_severity_lookup():
	assert ComplexityClass.LOGARITHMIC.severity is Severity.LOW
	assert ComplexityClass.LINEARITHMIC.severity is Severity.MEDIUM
	assert ComplexityClass.LINEAR.severity is Severity.MEDIUM
	assert ComplexityClass.FACTORIAL.severity is Severity.HIGH
	assert Severity.HIGH.color == "red"


def test_worse_and_formatting():
	assert ComplexityClass.LINEAR.worse(ComplexityClass.LOGARITHMIC) is ComplexityClass.LINEAR
	assert ComplexityClass.LINEAR.worse(ComplexityClass.CUBIC) is ComplexityClass.CUBIC
	assert format_complexity(ComplexityClass.QUADRATIC) == "O(n²)"
	assert format_complexity(ComplexityClass.QUADRATIC, ascii=True) == "O(n^2)"
	assert format_complexity(ComplexityClass.LINEAR, ascii=True) == "O(n)"


def test_recursion_flags_are_kept_consistent():
	assert ControlFlowFacts(has_recursion=True).recursion_branching == 1
	assert ControlFlowFacts(recursion_branching=3).has_recursion


def test_estimate_components(sample_facts):
	components = [build_component(f)[0] for f in sample_facts]
	annotated = estimate_components(components)
	service = find(components, "OrderSyncService")
	(sync,) = annotated[service.id]
	assert sync.complexity.time_complexity is ComplexityClass.QUADRATIC
	assert sync.complexity.contributors == ("nested loop depth 2",)

	repository = find(components, "OrderRepository")
	get_orders, sorted_orders = annotated[repository.id]
	assert get_orders.complexity.time_complexity is ComplexityClass.CONSTANT
	assert sorted_orders.complexity.time_complexity is ComplexityClass.LINEARITHMIC
	assert sorted_orders.complexity.space_complexity is ComplexityClass.LINEAR

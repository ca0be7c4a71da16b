from __future__ import annotations

from collections import Counter
from typing import List

from .model import Component, Layer, ProjectAnalysisResult, Severity


def summarize_component(c: Component) -> str:
	parts: List[str] = []
	parts.append(f"{c.kind.value} {c.name} [{c.layer.value} / {c.role.value}]")
	if c.extends:
		parts.append(f"  Extends: {c.extends}")
	if c.implements:
		parts.append(f"  Implements: {', '.join(c.implements)}")
	if c.dependencies:
		parts.append(f"  Depends on: {', '.join(c.dependencies)}")
	if c.external_dependencies:
		parts.append(f"  External: {', '.join(c.external_dependencies)}")
	hot = [m for m in c.methods if m.complexity and m.complexity.time_complexity.severity is Severity.HIGH]
	if hot:
		parts.append(
			"  Hot methods: " + ", ".join(f"{m.name} {m.complexity.time_complexity.value}" for m in hot)
		)
	return "\n".join(parts)


def summarize_result(result: ProjectAnalysisResult) -> str:
	layers = Counter(c.layer for c in result.components)
	flow_types = Counter(f.flow_type.value for f in result.user_flows)
	relationship_types = Counter(r.type.value for r in result.relationships)

	lines: List[str] = []
	lines.append(
		f"Project model: {len(result.components)} components, "
		f"{len(result.relationships)} relationships, "
		f"{len(result.navigation_flows)} navigation flows, "
		f"{len(result.business_processes)} business processes"
	)
	lines.append("Layers: " + ", ".join(f"{layer.value}={layers.get(layer, 0)}" for layer in Layer))
	if relationship_types:
		lines.append("Relationships: " + ", ".join(f"{k}={v}" for k, v in sorted(relationship_types.items())))
	if flow_types:
		lines.append("Screens: " + ", ".join(f"{k}={v}" for k, v in sorted(flow_types.items())))
	for c in result.components:
		lines.append(summarize_component(c))
	if result.warnings:
		lines.append(f"Warnings ({len(result.warnings)}):")
		lines.extend(f"  {w}" for w in result.warnings)
	if result.error:
		lines.append(f"Error: {result.error} (result may be incomplete)")
	return "\n".join(lines)

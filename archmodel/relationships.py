from __future__ import annotations

import re
import threading
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .builder import ComponentIndex, check_cancelled, simple_name
from .config import DEFAULT_CONFIG, ClassificationConfig
from .logging_config import get_logger
from .model import Component, FieldInfo, Relationship, RelationshipType


logger = get_logger(__name__)

_TYPE_TOKEN = re.compile(r"[A-Za-z_$][\w.$]*")


class RelationshipGraph:
	"""Typed edges between known components, unique per (source, target, type)."""

	def __init__(self, components: Iterable[Component]):
		self.index = ComponentIndex(components)
		self._edges: Dict[Tuple[str, str, RelationshipType], Relationship] = {}

	def add_edge(self, source: str, target: str, type: RelationshipType, description: str = "") -> bool:
		"""Add an edge between two known components; repeats and self loops are dropped."""
		if source not in self.index or target not in self.index or source == target:
			return False
		key = (source, target, type)
		if key in self._edges:
			return False
		self._edges[key] = Relationship(source_id=source, target_id=target, type=type, description=description)
		return True

	@property
	def relationships(self) -> List[Relationship]:
		return list(self._edges.values())

	def outgoing(self, source: str) -> List[Relationship]:
		return [r for r in self._edges.values() if r.source_id == source]

	def incoming(self, target: str) -> List[Relationship]:
		return [r for r in self._edges.values() if r.target_id == target]


def type_names(type_text: str) -> List[str]:
	"""Every class name mentioned in a type expression, e.g. Map<String, Order> -> [Map, String, Order]."""
	names: List[str] = []
	for token in _TYPE_TOKEN.findall(type_text or ""):
		name = simple_name(token)
		if name and name not in names:
			names.append(name)
	return names


def _outer_type(type_text: str) -> str:
	return simple_name(type_text.split("<", 1)[0])


def is_collection_type(type_text: str, config: ClassificationConfig = DEFAULT_CONFIG) -> bool:
	text = (type_text or "").strip().rstrip("?")
	if text.endswith("[]"):
		return True
	outer = _outer_type(text)
	# IntArray, ByteArray and friends
	return outer in config.collection_types or outer.endswith("Array")


def is_shared_reference(field: FieldInfo, component: Component, config: ClassificationConfig = DEFAULT_CONFIG) -> bool:
	"""Static, nullable, wrapped (Optional/Lazy/Provider) or injected fields are not owned."""
	text = (field.type or "").strip()
	if field.is_static or text.endswith("?"):
		return True
	if _outer_type(text) in config.shared_wrappers:
		return True
	injected = {simple_name(d) for d in component.injected_dependencies}
	return simple_name(text) in injected


def _targets(graph: RelationshipGraph, type_text: str, source: str) -> List[str]:
	targets: List[str] = []
	for name in type_names(type_text):
		target = graph.index.resolve(name)
		if target is not None and target != source and target not in targets:
			targets.append(target)
	return targets


def _add_inheritance(graph: RelationshipGraph, component: Component) -> None:
	if component.extends:
		target = graph.index.resolve(component.extends)
		if target is not None:
			graph.add_edge(component.id, target, RelationshipType.EXTENDS, f"{component.name} extends {component.extends}")
		else:
			logger.debug("%s: supertype %s is external", component.id, component.extends)
	for interface in component.implements:
		target = graph.index.resolve(interface)
		if target is not None:
			graph.add_edge(component.id, target, RelationshipType.IMPLEMENTS, f"{component.name} implements {interface}")


def _add_dependencies(graph: RelationshipGraph, component: Component) -> None:
	for target in component.dependencies:
		graph.add_edge(component.id, target, RelationshipType.DEPENDS_ON, f"{component.name} depends on {target}")
	for name in component.injected_dependencies:
		target = graph.index.resolve(name)
		if target is not None:
			graph.add_edge(component.id, target, RelationshipType.DEPENDS_ON, f"{component.name} is injected with {name}")


def _add_structural(graph: RelationshipGraph, component: Component, config: ClassificationConfig) -> None:
	field_targets: Set[str] = set()
	for field in component.fields:
		targets = _targets(graph, field.type, component.id)
		if not targets:
			continue
		if is_collection_type(field.type, config) or is_shared_reference(field, component, config):
			kind, verb = RelationshipType.AGGREGATES, "aggregates"
		else:
			kind, verb = RelationshipType.COMPOSES, "is composed of"
		for target in targets:
			field_targets.add(target)
			graph.add_edge(component.id, target, kind, f"{component.name} {verb} {target} via field {field.name}")

	for method in component.methods:
		type_texts = [p.type for p in method.parameters]
		if method.return_type:
			type_texts.append(method.return_type)
		for text in type_texts:
			for target in _targets(graph, text, component.id):
				if target in field_targets:
					continue
				graph.add_edge(component.id, target, RelationshipType.USES, f"{component.name} uses {target} in {method.name}()")


def build_relationships(
	components: Iterable[Component],
	config: ClassificationConfig = DEFAULT_CONFIG,
	cancel: Optional[threading.Event] = None,
) -> List[Relationship]:
	components = list(components)
	graph = RelationshipGraph(components)
	for component in components:
		check_cancelled(cancel)
		_add_inheritance(graph, component)
		_add_dependencies(graph, component)
		_add_structural(graph, component, config)
	relationships = graph.relationships
	logger.info("Derived %d relationships between %d components", len(relationships), len(components))
	return relationships

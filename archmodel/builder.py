from __future__ import annotations

import os
import re
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from pydantic import ValidationError

from .errors import AnalysisCancelled, MalformedFactsError
from .logging_config import get_logger
from .model import Component, Layer, RawComponentFacts


logger = get_logger(__name__)

EXTENSION_LANGUAGE: Dict[str, str] = {
	".java": "java",
	".kt": "kotlin",
	".kts": "kotlin",
	".dart": "dart",
	".swift": "swift",
	".py": "python",
	".ts": "typescript",
	".tsx": "typescript",
	".js": "javascript",
	".jsx": "javascript",
	".xml": "xml",
}

_GENERIC_ARGS = re.compile(r"<.*>")

RawFacts = Union[RawComponentFacts, Mapping[str, Any]]


def detect_language(path: str) -> str:
	_, ext = os.path.splitext(path)
	return EXTENSION_LANGUAGE.get(ext.lower(), "unknown")


def simple_name(type_name: str) -> str:
	"""Reduce "com.x.Repo<T>?", "Foo::class.java" or "Foo[]" to its bare class name."""
	text = type_name.strip()
	for suffix in ("::class.java", "::class", ".class"):
		if text.endswith(suffix):
			text = text[: -len(suffix)]
	text = _GENERIC_ARGS.sub("", text).rstrip("?[] ")
	return text.rsplit(".", 1)[-1]


def annotation_name(annotation: str) -> str:
	# "@androidx.room.Entity(tableName = "x")" -> "Entity"
	text = annotation.strip().lstrip("@").split("(", 1)[0]
	return text.rsplit(".", 1)[-1].strip()


def check_cancelled(cancel: Optional[threading.Event]) -> None:
	if cancel is not None and cancel.is_set():
		raise AnalysisCancelled("analysis cancelled")


class ComponentIndex:
	"""Name-based lookup over components; the first registered name wins."""

	def __init__(self, components: Iterable[Component]):
		self.by_id: Dict[str, Component] = {}
		self._by_qualified: Dict[str, str] = {}
		self._by_simple: Dict[str, str] = {}
		for component in components:
			self.by_id.setdefault(component.id, component)
			self._by_qualified.setdefault(component.qualified_name, component.id)
			self._by_simple.setdefault(component.name, component.id)

	def __contains__(self, component_id: str) -> bool:
		return component_id in self.by_id

	def resolve(self, name: str) -> Optional[str]:
		"""Return the id of the component ``name`` refers to, or None when it is external."""
		if not name:
			return None
		text = name.strip()
		if text in self.by_id:
			return text
		if text in self._by_qualified:
			return self._by_qualified[text]
		return self._by_simple.get(simple_name(text))


def _dagger_component_type(annotation: str) -> str:
	for marker, kind in (
		("SingletonComponent", "Singleton"),
		("ActivityComponent", "Activity"),
		("FragmentComponent", "Fragment"),
		("ViewComponent", "View"),
	):
		if marker in annotation:
			return kind
	return "Component"


def _hilt_component_type(extends: Optional[str]) -> str:
	base = (extends or "").lower()
	for kind in ("Activity", "Fragment", "View", "Service"):
		if kind.lower() in base:
			return kind
	return "AndroidEntryPoint"


def _framework_markers(facts: RawComponentFacts) -> Dict[str, Any]:
	markers: Dict[str, Any] = {
		"has_dagger_injection": facts.has_dagger_injection,
		"dagger_component_type": None,
		"hilt_component": False,
		"hilt_component_type": None,
	}
	names = [annotation_name(a) for a in facts.annotations]
	for raw, name in zip(facts.annotations, names):
		if name in ("Component", "Subcomponent"):
			markers["has_dagger_injection"] = True
			markers["dagger_component_type"] = _dagger_component_type(raw)
		elif name == "HiltAndroidApp":
			markers["hilt_component"] = True
			markers["hilt_component_type"] = "Application"
		elif name == "AndroidEntryPoint":
			markers["hilt_component"] = True
			markers["hilt_component_type"] = _hilt_component_type(facts.extends)
		elif name == "HiltViewModel":
			markers["hilt_component"] = True
			markers["hilt_component_type"] = "ViewModel"
	if facts.injected_dependencies or "Inject" in names:
		markers["has_dagger_injection"] = True
	return markers


def _component_id(explicit: Optional[str], package: Optional[str], name: str) -> str:
	if explicit:
		return explicit
	return f"{package}.{name}" if package else name


def _file_details(file_path: Optional[str], language: Optional[str], extension: Optional[str]) -> Dict[str, Any]:
	if not file_path:
		return {"file_path": None, "language": language or "unknown", "file_extension": extension or ""}
	_, ext = os.path.splitext(file_path)
	return {
		"file_path": file_path,
		"language": language or detect_language(file_path),
		"file_extension": extension or ext.lstrip(".").lower(),
	}


def _partial_component(raw: Mapping[str, Any], exc: ValidationError) -> Tuple[Component, List[str]]:
	def text(key: str) -> Optional[str]:
		value = raw.get(key)
		return value.strip() if isinstance(value, str) and value.strip() else None

	file_path = text("file_path")
	name = text("name")
	if name is None and file_path:
		name = os.path.splitext(os.path.basename(file_path))[0] or None
	if name is None:
		raise MalformedFactsError(f"Fact bundle has neither a name nor a file path: {exc.error_count()} error(s)")

	package = text("package")
	component = Component(
		id=_component_id(text("id"), package, name),
		name=name,
		package=package,
		partial=True,
		**_file_details(file_path, text("language"), text("file_extension")),
	)
	fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
	warning = f"{component.id}: malformed fact bundle ({', '.join(fields)}), kept identifying fields only"
	return component, [warning]


def build_component(raw: RawFacts) -> Tuple[Component, List[str]]:
	"""Normalize one raw fact bundle into a Component plus per-component warnings."""
	if isinstance(raw, RawComponentFacts):
		facts = raw
	elif isinstance(raw, Mapping):
		try:
			facts = RawComponentFacts.model_validate(raw)
		except ValidationError as exc:
			return _partial_component(raw, exc)
	else:
		raise MalformedFactsError(f"Fact bundle must be a mapping, got {type(raw).__name__}")

	warnings: List[str] = []
	component_id = _component_id(facts.id, facts.package, facts.name)

	declared_layer: Optional[Layer] = None
	if facts.layer:
		declared_layer = Layer.from_marker(facts.layer)
		if declared_layer is None:
			warnings.append(f"{component_id}: unknown layer marker {facts.layer!r} ignored")

	component = Component(
		id=component_id,
		name=facts.name,
		kind=facts.kind,
		declared_layer=declared_layer,
		extends=facts.extends or None,
		implements=[i for i in facts.implements if i],
		annotations=facts.annotations,
		modifiers=facts.modifiers,
		package=facts.package,
		module_name=facts.module_name,
		imports=facts.imports,
		fields=facts.fields,
		methods=facts.methods,
		declared_dependencies=[d for d in facts.dependencies if d],
		injected_dependencies=[d for d in facts.injected_dependencies if d],
		layout_files=facts.layout_files,
		resources_used=facts.resources_used,
		navigation_targets=facts.navigation_targets,
		composables_used=facts.composables_used,
		api_clients=facts.api_clients,
		data_class=facts.data_class,
		sealed_class=facts.sealed_class,
		object_declaration=facts.object_declaration,
		has_companion_object=facts.has_companion_object,
		manifest_registered=facts.manifest_registered,
		launcher=facts.launcher,
		view_binding_used=facts.view_binding_used,
		data_binding_used=facts.data_binding_used,
		coroutine_usage=facts.coroutine_usage,
		**_file_details(facts.file_path, facts.language, facts.file_extension),
		**_framework_markers(facts),
	)
	return component, warnings


def resolve_dependencies(components: List[Component]) -> List[Component]:
	"""Split each component's declared dependencies into in-model ids and external names."""
	index = ComponentIndex(components)
	resolved_components: List[Component] = []
	for component in components:
		resolved: List[str] = []
		external: List[str] = []
		for name in component.declared_dependencies:
			target = index.resolve(name)
			if target is None:
				logger.debug("%s: dependency %s is external", component.id, name)
				if name not in external:
					external.append(name)
			elif target != component.id and target not in resolved:
				resolved.append(target)
		resolved_components.append(
			component.model_copy(update={"dependencies": tuple(resolved), "external_dependencies": tuple(external)})
		)
	return resolved_components


class ComponentBuilder:
	"""Accumulates components from a fact sequence; ``finish`` keeps whatever was built.

	Bundles that cannot be identified at all are skipped with a warning so the
	rest of the sequence still gets built.
	"""

	def __init__(self):
		self.components: List[Component] = []
		self.warnings: List[str] = []
		self._ids: Set[str] = set()
		self._position = 0

	def _warn(self, warnings: List[str]) -> None:
		for warning in warnings:
			logger.warning(warning)
		self.warnings.extend(warnings)

	def _unique_id(self, component_id: str) -> str:
		candidate, count = component_id, 1
		while candidate in self._ids:
			count += 1
			candidate = f"{component_id}#{count}"
		return candidate

	def add(self, raw: RawFacts) -> Optional[Component]:
		self._position += 1
		try:
			component, warnings = build_component(raw)
		except MalformedFactsError as exc:
			self._warn([f"bundle #{self._position} skipped: {exc}"])
			return None

		unique_id = self._unique_id(component.id)
		if unique_id != component.id:
			warnings.append(f"{component.id}: duplicate identifier, renamed to {unique_id}")
			component = component.model_copy(update={"id": unique_id})
		self._ids.add(unique_id)
		self._warn(warnings)
		self.components.append(component)
		return component

	def finish(self) -> List[Component]:
		return resolve_dependencies(self.components)


def build_components(
	raw_facts: Iterable[RawFacts],
	cancel: Optional[threading.Event] = None,
) -> Tuple[List[Component], List[str]]:
	builder = ComponentBuilder()
	for raw in raw_facts:
		check_cancelled(cancel)
		builder.add(raw)
	return builder.finish(), builder.warnings

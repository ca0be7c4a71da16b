from __future__ import annotations

from enum import Enum, IntEnum
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


class Layer(str, Enum):
	UI = "UI"
	BUSINESS_LOGIC = "Business Logic"
	DATA = "Data"
	OTHER = "Other"

	@classmethod
	def from_marker(cls, marker: str) -> Optional["Layer"]:
		"""Map a tagged layer such as "ui", "business_logic" or "Unknown" onto a Layer."""
		key = marker.strip().lower().replace("_", " ").replace("-", " ")
		return _LAYER_MARKERS.get(key)


_LAYER_MARKERS: Dict[str, Layer] = {
	"ui": Layer.UI,
	"presentation": Layer.UI,
	"business logic": Layer.BUSINESS_LOGIC,
	"business": Layer.BUSINESS_LOGIC,
	"domain": Layer.BUSINESS_LOGIC,
	"data": Layer.DATA,
	"other": Layer.OTHER,
	"unknown": Layer.OTHER,
}


class Role(str, Enum):
	ACTIVITY = "Activity"
	FRAGMENT = "Fragment"
	DIALOG = "Dialog"
	COMPOSABLE = "Composable"
	ADAPTER = "Adapter"
	VIEW_HOLDER = "ViewHolder"
	SERVICE = "Service"
	RECEIVER = "Receiver"
	CONTENT_PROVIDER = "ContentProvider"
	APPLICATION = "Application"
	VIEW_MODEL = "ViewModel"
	PRESENTER = "Presenter"
	CONTROLLER = "Controller"
	USE_CASE = "UseCase"
	REPOSITORY = "Repository"
	DATA_SOURCE = "DataSource"
	DAO = "DAO"
	ENTITY = "Entity"
	DATABASE = "Database"
	UNKNOWN = "Unknown"


class ComponentKind(str, Enum):
	CLASS = "class"
	INTERFACE = "interface"
	ENUM = "enum"
	OBJECT = "object"
	ANNOTATION = "annotation"
	RECORD = "record"


class UiFilterMode(str, Enum):
	# union: layer is UI or the name heuristic matches
	UNION = "union"
	LAYER = "layer"
	NAME = "name"


class RelationshipType(str, Enum):
	EXTENDS = "EXTENDS"
	IMPLEMENTS = "IMPLEMENTS"
	DEPENDS_ON = "DEPENDS_ON"
	USES = "USES"
	COMPOSES = "COMPOSES"
	AGGREGATES = "AGGREGATES"


class NavigationType(str, Enum):
	FORWARD = "FORWARD"
	BACK = "BACK"
	UP = "UP"
	CUSTOM = "CUSTOM"


class FlowType(str, Enum):
	ENTRY_POINT = "ENTRY_POINT"
	EXIT_POINT = "EXIT_POINT"
	DECISION_POINT = "DECISION_POINT"
	ERROR_HANDLING = "ERROR_HANDLING"
	MAIN_FLOW = "MAIN_FLOW"


class ActionType(str, Enum):
	TAP = "TAP"
	SWIPE = "SWIPE"
	LONG_PRESS = "LONG_PRESS"
	TYPE_TEXT = "TYPE_TEXT"
	SCROLL = "SCROLL"
	PINCH_ZOOM = "PINCH_ZOOM"


class ProcessType(str, Enum):
	AUTHENTICATION = "AUTHENTICATION"
	USER_REGISTRATION = "USER_REGISTRATION"
	PAYMENT = "PAYMENT"
	SEARCH = "SEARCH"
	DATA_SYNC = "DATA_SYNC"
	NOTIFICATION = "NOTIFICATION"
	GENERAL = "GENERAL"


class CriticalityLevel(str, Enum):
	LOW = "LOW"
	MEDIUM = "MEDIUM"
	HIGH = "HIGH"
	CRITICAL = "CRITICAL"


class Severity(IntEnum):
	LOW = 1
	MEDIUM = 2
	HIGH = 3

	@property
	def color(self) -> str:
		return {Severity.LOW: "green", Severity.MEDIUM: "yellow", Severity.HIGH: "red"}[self]


class ComplexityClass(str, Enum):
	"""Asymptotic bound, declared from best to worst."""

	CONSTANT = "O(1)"
	LOGARITHMIC = "O(log n)"
	LINEAR = "O(n)"
	LINEARITHMIC = "O(n log n)"
	QUADRATIC = "O(n²)"
	CUBIC = "O(n³)"
	EXPONENTIAL = "O(2ⁿ)"
	FACTORIAL = "O(n!)"

	@property
	def rank(self) -> int:
		return _COMPLEXITY_ORDER.index(self)

	@property
	def severity(self) -> Severity:
		return _COMPLEXITY_SEVERITY[self]

	def worse(self, other: "ComplexityClass") -> "ComplexityClass":
		return other if other.rank > self.rank else self


_COMPLEXITY_ORDER: List[ComplexityClass] = list(ComplexityClass)

_COMPLEXITY_SEVERITY: Dict[ComplexityClass, Severity] = {
	ComplexityClass.CONSTANT: Severity.LOW,
	ComplexityClass.LOGARITHMIC: Severity.LOW,
	ComplexityClass.LINEAR: Severity.MEDIUM,
	ComplexityClass.LINEARITHMIC: Severity.MEDIUM,
	ComplexityClass.QUADRATIC: Severity.HIGH,
	ComplexityClass.CUBIC: Severity.HIGH,
	ComplexityClass.EXPONENTIAL: Severity.HIGH,
	ComplexityClass.FACTORIAL: Severity.HIGH,
}

_ASCII_LABELS: Dict[ComplexityClass, str] = {
	ComplexityClass.QUADRATIC: "O(n^2)",
	ComplexityClass.CUBIC: "O(n^3)",
	ComplexityClass.EXPONENTIAL: "O(2^n)",
}


def format_complexity(complexity: ComplexityClass, ascii: bool = False) -> str:
	if ascii:
		return _ASCII_LABELS.get(complexity, complexity.value)
	return complexity.value


class _Record(BaseModel):
	model_config = ConfigDict(frozen=True)


class ControlFlowFacts(_Record):
	loop_depth: int = Field(default=0, ge=0)
	has_recursion: bool = False
	# self calls per activation; above 1 the recursion fans out
	recursion_branching: int = Field(default=0, ge=0)
	# structures that grow with the input, e.g. "list", "map"
	auxiliary_structures: Tuple[str, ...] = ()
	calls: Tuple[str, ...] = ()

	@model_validator(mode="before")
	@classmethod
	def _recursion_consistent(cls, data):
		if isinstance(data, dict):
			data = dict(data)
			if data.get("recursion_branching") and not data.get("has_recursion"):
				data["has_recursion"] = True
			elif data.get("has_recursion") and not data.get("recursion_branching"):
				data["recursion_branching"] = 1
		return data


class ComplexityInfo(_Record):
	time_complexity: ComplexityClass = ComplexityClass.CONSTANT
	space_complexity: ComplexityClass = ComplexityClass.CONSTANT
	loop_depth: int = 0
	has_recursion: bool = False
	rationale: str = ""
	contributors: Tuple[str, ...] = ()

	@computed_field  # type: ignore[prop-decorator]
	@property
	def severity_level(self) -> int:
		return int(self.time_complexity.severity)


class Parameter(_Record):
	name: str = ""
	type: str = ""

	@model_validator(mode="before")
	@classmethod
	def _from_text(cls, data):
		# "name: Type" (Kotlin, Dart) or "Type name" (Java)
		if isinstance(data, str):
			text = data.strip()
			if ":" in text:
				name, _, type_ = text.partition(":")
				return {"name": name.strip(), "type": type_.strip()}
			head, _, tail = text.rpartition(" ")
			if head:
				return {"name": tail, "type": head.strip()}
			return {"type": text}
		return data


class FieldInfo(_Record):
	name: str
	type: str = ""
	visibility: Optional[str] = None
	is_static: bool = False
	is_final: bool = False
	initial_value: Optional[str] = None


class MethodInfo(_Record):
	name: str
	return_type: Optional[str] = None
	visibility: Optional[str] = None
	parameters: Tuple[Parameter, ...] = ()
	is_static: bool = False
	is_abstract: bool = False
	control_flow: ControlFlowFacts = Field(default_factory=ControlFlowFacts)
	complexity: Optional[ComplexityInfo] = None


class NavigationCondition(_Record):
	type: str = ""
	condition: str = ""
	is_blocking: bool = False


class NavigationTarget(_Record):
	target: str
	navigation_type: NavigationType = NavigationType.FORWARD
	conditions: Tuple[NavigationCondition, ...] = ()
	action_id: Optional[str] = None
	destination_type: Optional[str] = None

	@model_validator(mode="before")
	@classmethod
	def _from_name(cls, data):
		if isinstance(data, str):
			return {"target": data}
		return data


def _normalize_kind(value):
	if isinstance(value, str):
		text = value.strip().lower()
		for kind in (ComponentKind.INTERFACE, ComponentKind.ENUM, ComponentKind.ANNOTATION,
				ComponentKind.RECORD, ComponentKind.OBJECT):
			if kind.value in text:
				return kind
		return ComponentKind.CLASS
	return value


class RawComponentFacts(BaseModel):
	"""One per-file fact bundle as produced by a source parser."""

	model_config = ConfigDict(extra="ignore")

	id: Optional[str] = None
	name: str = Field(min_length=1)
	kind: ComponentKind = ComponentKind.CLASS
	file_path: Optional[str] = None
	language: Optional[str] = None
	file_extension: Optional[str] = None
	# already-tagged layer, used verbatim by the classifier
	layer: Optional[str] = None
	extends: Optional[str] = None
	implements: List[str] = []
	annotations: List[str] = []
	modifiers: List[str] = []
	package: Optional[str] = None
	module_name: Optional[str] = None
	imports: List[str] = []
	fields: List[FieldInfo] = []
	methods: List[MethodInfo] = []
	dependencies: List[str] = []
	injected_dependencies: List[str] = []
	layout_files: List[str] = []
	resources_used: List[str] = []
	navigation_targets: List[NavigationTarget] = []
	composables_used: List[str] = []
	api_clients: List[str] = []
	data_class: bool = False
	sealed_class: bool = False
	object_declaration: bool = False
	has_companion_object: bool = False
	manifest_registered: bool = False
	launcher: bool = False
	view_binding_used: bool = False
	data_binding_used: bool = False
	coroutine_usage: bool = False
	has_dagger_injection: bool = False

	@field_validator("kind", mode="before")
	@classmethod
	def _lenient_kind(cls, value):
		return _normalize_kind(value)


class Component(_Record):
	id: str
	name: str
	kind: ComponentKind = ComponentKind.CLASS
	file_path: Optional[str] = None
	language: str = "unknown"
	file_extension: str = ""
	layer: Layer = Layer.OTHER
	role: Role = Role.UNKNOWN
	declared_layer: Optional[Layer] = None
	ui_by_name: bool = False
	partial: bool = False
	extends: Optional[str] = None
	implements: Tuple[str, ...] = ()
	annotations: Tuple[str, ...] = ()
	modifiers: Tuple[str, ...] = ()
	package: Optional[str] = None
	module_name: Optional[str] = None
	imports: Tuple[str, ...] = ()
	fields: Tuple[FieldInfo, ...] = ()
	methods: Tuple[MethodInfo, ...] = ()
	declared_dependencies: Tuple[str, ...] = ()
	# ids of in-model components only
	dependencies: Tuple[str, ...] = ()
	external_dependencies: Tuple[str, ...] = ()
	injected_dependencies: Tuple[str, ...] = ()
	layout_files: Tuple[str, ...] = ()
	resources_used: Tuple[str, ...] = ()
	navigation_targets: Tuple[NavigationTarget, ...] = ()
	composables_used: Tuple[str, ...] = ()
	api_clients: Tuple[str, ...] = ()
	data_class: bool = False
	sealed_class: bool = False
	object_declaration: bool = False
	has_companion_object: bool = False
	manifest_registered: bool = False
	launcher: bool = False
	view_binding_used: bool = False
	data_binding_used: bool = False
	coroutine_usage: bool = False
	has_dagger_injection: bool = False
	dagger_component_type: Optional[str] = None
	hilt_component: bool = False
	hilt_component_type: Optional[str] = None

	@property
	def qualified_name(self) -> str:
		return f"{self.package}.{self.name}" if self.package else self.name


class Relationship(_Record):
	source_id: str
	target_id: str
	type: RelationshipType
	description: str = ""

	@model_validator(mode="after")
	def _no_inheritance_loop(self) -> "Relationship":
		if self.type in (RelationshipType.EXTENDS, RelationshipType.IMPLEMENTS) and self.source_id == self.target_id:
			raise ValueError(f"{self.type.value} edge cannot point from {self.source_id} to itself")
		return self

	@property
	def key(self) -> Tuple[str, str, RelationshipType]:
		return (self.source_id, self.target_id, self.type)


class NavigationFlow(_Record):
	flow_id: str
	source_screen_id: str
	target_screen_id: str
	navigation_type: NavigationType = NavigationType.FORWARD
	conditions: Tuple[NavigationCondition, ...] = ()

	@property
	def blocking_conditions(self) -> Tuple[NavigationCondition, ...]:
		return tuple(c for c in self.conditions if c.is_blocking)

	def traversable(self, evaluate: Optional[Callable[[NavigationCondition], bool]] = None) -> bool:
		"""True when every blocking condition passes the caller's evaluator."""
		blocking = self.blocking_conditions
		if not blocking:
			return True
		if evaluate is None:
			return False
		return all(evaluate(c) for c in blocking)


class NavigationPath(_Record):
	flow: NavigationFlow
	description: str = ""


class UserAction(_Record):
	method_name: str
	action_name: str
	action_type: ActionType


class BusinessContext(_Record):
	id: str
	business_goal: str
	user_persona: str
	business_rules: Tuple[str, ...] = ()
	success_metric: Optional[str] = None


class PerformanceMetrics(_Record):
	load_time_ms: int = 0
	error_count: int = 0
	average_response_time: float = 0.0
	memory_usage_kb: int = 0


class UserFlowComponent(_Record):
	id: str
	screen_name: str
	activity_name: str
	flow_type: FlowType = FlowType.MAIN_FLOW
	outgoing_paths: Tuple[NavigationPath, ...] = ()
	user_actions: Tuple[UserAction, ...] = ()
	business_context: Optional[BusinessContext] = None
	performance_metrics: Optional[PerformanceMetrics] = None

	@model_validator(mode="after")
	def _paths_start_here(self) -> "UserFlowComponent":
		for path in self.outgoing_paths:
			if path.flow.source_screen_id != self.id:
				raise ValueError(
					f"outgoing path {path.flow.flow_id} starts at {path.flow.source_screen_id}, not {self.id}"
				)
		return self


class ProcessStep(_Record):
	step_id: str
	step_name: str
	description: str = ""
	action_descriptions: Tuple[str, ...] = ()


class BusinessProcess(_Record):
	process_id: str
	process_name: str
	process_type: ProcessType = ProcessType.GENERAL
	criticality: CriticalityLevel = CriticalityLevel.LOW
	steps: Tuple[ProcessStep, ...] = ()


class ProjectAnalysisResult(_Record):
	components: Tuple[Component, ...] = ()
	relationships: Tuple[Relationship, ...] = ()
	navigation_flows: Tuple[NavigationFlow, ...] = ()
	user_flows: Tuple[UserFlowComponent, ...] = ()
	business_processes: Tuple[BusinessProcess, ...] = ()
	warnings: Tuple[str, ...] = ()
	error: Optional[str] = None
	ui_filter_mode: UiFilterMode = UiFilterMode.UNION

	@property
	def ok(self) -> bool:
		return not self.error

	@property
	def ui_components(self) -> Tuple[Component, ...]:
		if self.ui_filter_mode is UiFilterMode.LAYER:
			return tuple(c for c in self.components if c.layer is Layer.UI)
		if self.ui_filter_mode is UiFilterMode.NAME:
			return tuple(c for c in self.components if c.ui_by_name)
		return tuple(c for c in self.components if c.layer is Layer.UI or c.ui_by_name)

	@property
	def business_logic_components(self) -> Tuple[Component, ...]:
		return self._by_layer(Layer.BUSINESS_LOGIC)

	@property
	def data_components(self) -> Tuple[Component, ...]:
		return self._by_layer(Layer.DATA)

	def _by_layer(self, layer: Layer) -> Tuple[Component, ...]:
		return tuple(c for c in self.components if c.layer is layer)

	def component_by_id(self, component_id: str) -> Optional[Component]:
		for c in self.components:
			if c.id == component_id:
				return c
		return None

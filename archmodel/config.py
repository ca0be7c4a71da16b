"""
Classification tables for the analysis engine.

All heuristics live in one immutable ``ClassificationConfig`` so they can be
swapped in tests or loaded from a JSON file, instead of being scattered
through the classifier.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigError
from .model import ComplexityClass, Layer, Role, UiFilterMode


CONFIG_ENV_VAR = "ARCHMODEL_CONFIG"


class RoleRule(BaseModel):
	model_config = ConfigDict(frozen=True)

	role: Role
	# annotation simple names, e.g. "Dao" for "@androidx.room.Dao"
	annotations: Tuple[str, ...] = ()
	# matched against the end of the supertype's simple name
	supertypes: Tuple[str, ...] = ()
	# matched case-insensitively against the end of the component name
	name_suffixes: Tuple[str, ...] = ()


# Checked in this order; Dialog precedes Fragment so DialogFragment subclasses stay dialogs.
DEFAULT_ROLE_RULES: Tuple[RoleRule, ...] = (
	RoleRule(role=Role.COMPOSABLE, annotations=("Composable",)),
	RoleRule(
		role=Role.DIALOG,
		supertypes=("DialogFragment", "Dialog", "BottomSheetDialogFragment"),
		name_suffixes=("Dialog",),
	),
	RoleRule(
		role=Role.FRAGMENT,
		supertypes=("Fragment", "PreferenceFragmentCompat"),
		name_suffixes=("Fragment",),
	),
	RoleRule(role=Role.ACTIVITY, supertypes=("Activity",), name_suffixes=("Activity",)),
	RoleRule(role=Role.ADAPTER, supertypes=("Adapter",), name_suffixes=("Adapter",)),
	RoleRule(role=Role.VIEW_HOLDER, supertypes=("ViewHolder",), name_suffixes=("ViewHolder",)),
	RoleRule(role=Role.SERVICE, supertypes=("Service",), name_suffixes=("Service",)),
	RoleRule(role=Role.RECEIVER, supertypes=("BroadcastReceiver",), name_suffixes=("Receiver",)),
	RoleRule(role=Role.CONTENT_PROVIDER, supertypes=("ContentProvider",), name_suffixes=("ContentProvider",)),
	RoleRule(
		role=Role.APPLICATION,
		annotations=("HiltAndroidApp",),
		supertypes=("Application",),
		name_suffixes=("Application",),
	),
	RoleRule(role=Role.VIEW_MODEL, annotations=("HiltViewModel",), supertypes=("ViewModel",), name_suffixes=("ViewModel",)),
	RoleRule(role=Role.PRESENTER, supertypes=("Presenter",), name_suffixes=("Presenter",)),
	RoleRule(role=Role.CONTROLLER, annotations=("Controller", "RestController"), name_suffixes=("Controller",)),
	RoleRule(role=Role.USE_CASE, supertypes=("UseCase",), name_suffixes=("UseCase", "Interactor")),
	RoleRule(role=Role.REPOSITORY, annotations=("Repository",), name_suffixes=("Repository", "Repo")),
	RoleRule(role=Role.DATA_SOURCE, supertypes=("DataSource",), name_suffixes=("DataSource",)),
	RoleRule(role=Role.DAO, annotations=("Dao",), name_suffixes=("Dao",)),
	RoleRule(role=Role.ENTITY, annotations=("Entity",), name_suffixes=("Entity",)),
	RoleRule(
		role=Role.DATABASE,
		annotations=("Database",),
		supertypes=("RoomDatabase", "SQLiteOpenHelper"),
		name_suffixes=("Database",),
	),
)

DEFAULT_ROLE_LAYERS: Dict[Role, Layer] = {
	Role.ACTIVITY: Layer.UI,
	Role.FRAGMENT: Layer.UI,
	Role.DIALOG: Layer.UI,
	Role.COMPOSABLE: Layer.UI,
	Role.ADAPTER: Layer.UI,
	Role.VIEW_HOLDER: Layer.UI,
	Role.SERVICE: Layer.BUSINESS_LOGIC,
	Role.RECEIVER: Layer.BUSINESS_LOGIC,
	Role.VIEW_MODEL: Layer.BUSINESS_LOGIC,
	Role.PRESENTER: Layer.BUSINESS_LOGIC,
	Role.CONTROLLER: Layer.BUSINESS_LOGIC,
	Role.USE_CASE: Layer.BUSINESS_LOGIC,
	Role.REPOSITORY: Layer.BUSINESS_LOGIC,
	Role.DATA_SOURCE: Layer.DATA,
	Role.DAO: Layer.DATA,
	Role.ENTITY: Layer.DATA,
	Role.DATABASE: Layer.DATA,
	Role.CONTENT_PROVIDER: Layer.DATA,
}

DEFAULT_KNOWN_CALLS: Dict[str, ComplexityClass] = {
	"sort": ComplexityClass.LINEARITHMIC,
	"sorted": ComplexityClass.LINEARITHMIC,
	"sortBy": ComplexityClass.LINEARITHMIC,
	"parallelSort": ComplexityClass.LINEARITHMIC,
	"binarySearch": ComplexityClass.LOGARITHMIC,
	"contains": ComplexityClass.LINEAR,
	"indexOf": ComplexityClass.LINEAR,
	"lastIndexOf": ComplexityClass.LINEAR,
	"get": ComplexityClass.CONSTANT,
	"put": ComplexityClass.CONSTANT,
	"containsKey": ComplexityClass.CONSTANT,
}


class ClassificationConfig(BaseModel):
	model_config = ConfigDict(frozen=True)

	role_rules: Tuple[RoleRule, ...] = DEFAULT_ROLE_RULES
	role_layers: Dict[Role, Layer] = DEFAULT_ROLE_LAYERS
	ui_filter_mode: UiFilterMode = UiFilterMode.UNION
	ui_name_suffixes: Tuple[str, ...] = ("activity", "fragment", "adapter", "viewholder")
	ui_name_fragments: Tuple[str, ...] = ("screen", "page", "dialog")
	ui_supertype_suffixes: Tuple[str, ...] = ("Activity", "Fragment")
	screen_roles: Tuple[Role, ...] = (Role.ACTIVITY, Role.FRAGMENT, Role.DIALOG, Role.COMPOSABLE)
	screen_name_fragments: Tuple[str, ...] = ("activity", "fragment", "dialog")
	error_name_fragments: Tuple[str, ...] = ("error", "exception", "crash", "failure")
	error_annotations: Tuple[str, ...] = ("ErrorHandler", "ErrorScreen")
	collection_types: Tuple[str, ...] = (
		"List", "ArrayList", "LinkedList", "MutableList", "Set", "HashSet", "LinkedHashSet",
		"TreeSet", "MutableSet", "Map", "HashMap", "LinkedHashMap", "TreeMap", "MutableMap",
		"Collection", "Iterable", "Sequence", "Queue", "Deque", "ArrayDeque", "Stack",
		"Vector", "Array", "SparseArray",
	)
	shared_wrappers: Tuple[str, ...] = ("Optional", "Lazy", "Provider", "WeakReference", "SoftReference")
	known_calls: Dict[str, ComplexityClass] = DEFAULT_KNOWN_CALLS

	def layer_for(self, role: Role) -> Layer:
		return self.role_layers.get(role, Layer.OTHER)


DEFAULT_CONFIG = ClassificationConfig()


def load_config(path: Union[str, Path]) -> ClassificationConfig:
	"""Load a configuration from JSON; keys left out keep their defaults."""
	try:
		text = Path(path).read_text(encoding="utf-8")
	except OSError as exc:
		raise ConfigError(f"Cannot read config {path}: {exc}") from exc
	try:
		return ClassificationConfig.model_validate_json(text)
	except ValidationError as exc:
		raise ConfigError(f"Invalid config {path}: {exc.error_count()} error(s)\n{exc}") from exc


@lru_cache(maxsize=1)
def get_config(path: Optional[str] = None) -> ClassificationConfig:
	"""Process-wide configuration, loaded once from ``path`` or $ARCHMODEL_CONFIG."""
	source = path or os.environ.get(CONFIG_ENV_VAR)
	if source:
		return load_config(source)
	return DEFAULT_CONFIG

from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Tuple

from .builder import annotation_name, check_cancelled, simple_name
from .config import DEFAULT_CONFIG, ClassificationConfig
from .logging_config import get_logger
from .model import Component, Layer, Role


logger = get_logger(__name__)


def detect_role(component: Component, config: ClassificationConfig = DEFAULT_CONFIG) -> Role:
	"""Role from annotations, then supertype, then name suffix; the first matching rule wins."""
	annotations = {annotation_name(a) for a in component.annotations}
	for rule in config.role_rules:
		if annotations.intersection(rule.annotations):
			return rule.role

	if component.extends:
		base = simple_name(component.extends)
		for rule in config.role_rules:
			if any(base.endswith(s) for s in rule.supertypes):
				return rule.role

	name = component.name.lower()
	for rule in config.role_rules:
		if any(name.endswith(s.lower()) for s in rule.name_suffixes):
			return rule.role
	return Role.UNKNOWN


def is_ui_by_name(component: Component, config: ClassificationConfig = DEFAULT_CONFIG) -> bool:
	"""Name/supertype UI heuristic, independent of the role table.

	It can disagree with the role-derived layer (e.g. ``CheckoutPage`` has no
	role but matches here); both outcomes are kept on the component and the
	UI filter mode decides which one the UI view uses.
	"""
	name = component.name.lower()
	if any(name.endswith(s) for s in config.ui_name_suffixes):
		return True
	if any(f in name for f in config.ui_name_fragments):
		return True
	if component.extends:
		base = component.extends.split("<", 1)[0].strip()
		return any(base.endswith(s) for s in config.ui_supertype_suffixes)
	return False


def classify_component(
	component: Component,
	config: ClassificationConfig = DEFAULT_CONFIG,
) -> Tuple[Layer, Role]:
	role = detect_role(component, config)
	if component.declared_layer is not None:
		return component.declared_layer, role
	return config.layer_for(role), role


def classify_components(
	components: Iterable[Component],
	config: ClassificationConfig = DEFAULT_CONFIG,
	cancel: Optional[threading.Event] = None,
) -> List[Component]:
	classified: List[Component] = []
	for component in components:
		check_cancelled(cancel)
		layer, role = classify_component(component, config)
		classified.append(
			component.model_copy(
				update={"layer": layer, "role": role, "ui_by_name": is_ui_by_name(component, config)}
			)
		)
	logger.info("Classified %d components", len(classified))
	return classified

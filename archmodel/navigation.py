from __future__ import annotations

import re
import threading
from collections import deque
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .builder import ComponentIndex, annotation_name, check_cancelled
from .config import DEFAULT_CONFIG, ClassificationConfig
from .logging_config import get_logger
from .model import (
	ActionType,
	BusinessContext,
	Component,
	FlowType,
	NavigationCondition,
	NavigationFlow,
	NavigationPath,
	PerformanceMetrics,
	Role,
	UserAction,
	UserFlowComponent,
)


logger = get_logger(__name__)

ConditionKey = Tuple[Tuple[str, str, bool], ...]

# (name fragments, action type, label); earlier entries win
_ACTION_PATTERNS: Tuple[Tuple[Tuple[str, ...], ActionType, str], ...] = (
	(("longclick", "longpress"), ActionType.LONG_PRESS, "Long Press"),
	(("click", "touch", "tap"), ActionType.TAP, "Tap"),
	(("textchanged", "aftertext", "beforetext"), ActionType.TYPE_TEXT, "Enter Text"),
	(("swipe", "fling"), ActionType.SWIPE, "Swipe Gesture"),
	(("scroll",), ActionType.SCROLL, "Scroll"),
	(("pinch", "zoom", "scale"), ActionType.PINCH_ZOOM, "Pinch Zoom"),
)

_BUSINESS_GOALS: Tuple[Tuple[Tuple[str, ...], str, str], ...] = (
	(("login", "signin", "auth"), "User Authentication", "Unauthenticated User"),
	(("register", "signup"), "User Registration", "New User"),
	(("main", "home", "dashboard"), "Main Application Hub", "Authenticated User"),
	(("profile", "account", "settings"), "User Profile Management", "Registered User"),
	(("payment", "checkout", "billing"), "Payment Processing", "Purchasing User"),
	(("search", "browse"), "Content Discovery", "Content Consumer"),
	(("chat", "message"), "Communication", "Active User"),
)
DEFAULT_GOAL = ("Application Feature", "General User")

_BUSINESS_RULES: Dict[str, Tuple[Tuple[str, ...], str]] = {
	"User Authentication": (
		("User must provide valid credentials", "Failed attempts should be limited", "Secure password requirements"),
		"Successful login rate",
	),
	"Payment Processing": (
		("Payment information must be validated", "Secure payment processing required", "Transaction confirmation needed"),
		"Payment completion rate",
	),
	"User Registration": (
		("Email verification required", "Unique username/email constraint", "Terms and conditions acceptance"),
		"Registration completion rate",
	),
}
_DEFAULT_RULES = (("User-friendly error handling",), "User engagement time")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def is_screen(component: Component, config: ClassificationConfig = DEFAULT_CONFIG) -> bool:
	if component.role in config.screen_roles:
		return True
	# name fallback only for components no role rule claimed
	if component.role is not Role.UNKNOWN:
		return False
	name = component.name.lower()
	base = (component.extends or "").lower()
	return any(f in name or f in base for f in config.screen_name_fragments)


def is_error_screen(component: Component, config: ClassificationConfig = DEFAULT_CONFIG) -> bool:
	name = component.name.lower()
	if any(f in name for f in config.error_name_fragments):
		return True
	return any(annotation_name(a) in config.error_annotations for a in component.annotations)


def condition_key(conditions: Sequence[NavigationCondition]) -> ConditionKey:
	return tuple((c.type, c.condition, c.is_blocking) for c in conditions)


def build_navigation_flows(
	screens: Sequence[Component],
	cancel: Optional[threading.Event] = None,
) -> List[NavigationFlow]:
	"""One flow per navigation target that lands on another analyzed screen."""
	index = ComponentIndex(screens)
	flows: List[NavigationFlow] = []
	seen = set()
	counts: Dict[str, int] = {}
	for screen in screens:
		check_cancelled(cancel)
		for target in screen.navigation_targets:
			target_id = index.resolve(target.target)
			if target_id is None:
				logger.debug("%s: navigation target %s is not an analyzed screen", screen.id, target.target)
				continue
			key = (screen.id, target_id, target.navigation_type, condition_key(target.conditions))
			if key in seen:
				continue
			seen.add(key)
			base_id = f"{screen.id}->{target_id}:{target.navigation_type.value}"
			counts[base_id] = counts.get(base_id, 0) + 1
			flows.append(
				NavigationFlow(
					flow_id=base_id if counts[base_id] == 1 else f"{base_id}#{counts[base_id]}",
					source_screen_id=screen.id,
					target_screen_id=target_id,
					navigation_type=target.navigation_type,
					conditions=target.conditions,
				)
			)
	return flows


def classify_flow_type(
	screen: Component,
	incoming: int,
	outgoing: Sequence[NavigationFlow],
	config: ClassificationConfig = DEFAULT_CONFIG,
) -> FlowType:
	"""Error handling > entry/exit > decision > main."""
	if is_error_screen(screen, config):
		return FlowType.ERROR_HANDLING
	if incoming == 0 or screen.launcher:
		return FlowType.ENTRY_POINT
	if not outgoing:
		return FlowType.EXIT_POINT
	if len(outgoing) >= 2 and len({condition_key(f.conditions) for f in outgoing}) >= 2:
		return FlowType.DECISION_POINT
	return FlowType.MAIN_FLOW


def _control_label(method_name: str) -> str:
	# onLoginButtonClick -> "Login Button"
	core = re.sub(r"^(on|handle)", "", method_name)
	core = re.sub(r"(Clicked|Click|Touched|Touch|Tapped|Tap)$", "", core)
	return _CAMEL_BOUNDARY.sub(" ", core).strip()


def extract_user_actions(component: Component) -> List[UserAction]:
	actions: List[UserAction] = []
	for method in component.methods:
		lowered = method.name.lower()
		if not lowered.startswith(("on", "handle")):
			continue
		for fragments, action_type, label in _ACTION_PATTERNS:
			if any(f in lowered for f in fragments):
				if action_type is ActionType.TAP:
					control = _control_label(method.name)
					label = f"Tap {control}" if control else "Tap"
				actions.append(UserAction(method_name=method.name, action_name=label, action_type=action_type))
				break
	return actions


def determine_business_context(component: Component) -> BusinessContext:
	name = component.name.lower()
	goal, persona = DEFAULT_GOAL
	for keywords, candidate_goal, candidate_persona in _BUSINESS_GOALS:
		if any(k in name for k in keywords):
			goal, persona = candidate_goal, candidate_persona
			break
	rules, metric = _BUSINESS_RULES.get(goal, _DEFAULT_RULES)
	return BusinessContext(
		id=f"{component.id}_context",
		business_goal=goal,
		user_persona=persona,
		business_rules=rules,
		success_metric=metric,
	)


def estimate_performance(component: Component, actions: Sequence[UserAction]) -> PerformanceMetrics:
	methods = len(component.methods)
	return PerformanceMetrics(
		load_time_ms=100 + methods * 8 + len(actions) * 12,
		error_count=0,
		average_response_time=200.0 + methods * 5.0,
	)


def _describe(flow: NavigationFlow, index: ComponentIndex) -> str:
	target = index.by_id[flow.target_screen_id].name
	text = f"{flow.navigation_type.value.capitalize()} to {target}"
	if flow.conditions:
		text += " when " + " and ".join(c.condition or c.type for c in flow.conditions)
	return text


def derive_flows(
	components: Iterable[Component],
	config: ClassificationConfig = DEFAULT_CONFIG,
	cancel: Optional[threading.Event] = None,
) -> Tuple[List[NavigationFlow], List[UserFlowComponent]]:
	screens = [c for c in components if is_screen(c, config)]
	flows = build_navigation_flows(screens, cancel)
	index = ComponentIndex(screens)

	incoming: Dict[str, int] = {}
	outgoing: Dict[str, List[NavigationFlow]] = {}
	for flow in flows:
		incoming[flow.target_screen_id] = incoming.get(flow.target_screen_id, 0) + 1
		outgoing.setdefault(flow.source_screen_id, []).append(flow)

	user_flows: List[UserFlowComponent] = []
	for screen in screens:
		check_cancelled(cancel)
		screen_flows = outgoing.get(screen.id, [])
		actions = extract_user_actions(screen)
		user_flows.append(
			UserFlowComponent(
				id=screen.id,
				screen_name=screen.name,
				activity_name=screen.name,
				flow_type=classify_flow_type(screen, incoming.get(screen.id, 0), screen_flows, config),
				outgoing_paths=[NavigationPath(flow=f, description=_describe(f, index)) for f in screen_flows],
				user_actions=actions,
				business_context=determine_business_context(screen),
				performance_metrics=estimate_performance(screen, actions),
			)
		)
	logger.info("Derived %d navigation flows across %d screens", len(flows), len(screens))
	return flows, user_flows


def reachable_screens(
	flows: Iterable[NavigationFlow],
	start: str,
	evaluate: Optional[Callable[[NavigationCondition], bool]] = None,
	max_depth: Optional[int] = None,
) -> Dict[str, int]:
	"""Screens reachable from ``start`` with their hop count.

	Edges with blocking conditions are followed only when ``evaluate`` accepts
	every blocking condition; without an evaluator they are treated as closed.
	"""
	adjacency: Dict[str, List[NavigationFlow]] = {}
	for flow in flows:
		adjacency.setdefault(flow.source_screen_id, []).append(flow)

	visited: Dict[str, int] = {}
	queue = deque([(start, 0)])
	while queue:
		current, depth = queue.popleft()
		if current in visited or (max_depth is not None and depth > max_depth):
			continue
		visited[current] = depth
		for flow in adjacency.get(current, []):
			if flow.target_screen_id not in visited and flow.traversable(evaluate):
				queue.append((flow.target_screen_id, depth + 1))
	return visited

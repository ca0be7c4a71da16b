from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple

from .model import BusinessProcess, CriticalityLevel, ProcessStep, ProcessType, UserFlowComponent


_PROCESS_TYPES: Tuple[Tuple[Tuple[str, ...], ProcessType], ...] = (
	(("authentication", "login"), ProcessType.AUTHENTICATION),
	(("registration",), ProcessType.USER_REGISTRATION),
	(("payment", "checkout"), ProcessType.PAYMENT),
	(("search", "discovery"), ProcessType.SEARCH),
	(("sync", "data"), ProcessType.DATA_SYNC),
	(("notification",), ProcessType.NOTIFICATION),
)

_CRITICALITY: Tuple[Tuple[Tuple[str, ...], CriticalityLevel], ...] = (
	(("payment", "authentication", "security"), CriticalityLevel.CRITICAL),
	(("registration", "sync", "data"), CriticalityLevel.HIGH),
	(("search", "discovery", "profile"), CriticalityLevel.MEDIUM),
)


def _first_match(goal: str, table, default):
	lowered = goal.lower()
	for keywords, value in table:
		if any(k in lowered for k in keywords):
			return value
	return default


def process_type(goal: str) -> ProcessType:
	return _first_match(goal, _PROCESS_TYPES, ProcessType.GENERAL)


def criticality(goal: str) -> CriticalityLevel:
	return _first_match(goal, _CRITICALITY, CriticalityLevel.LOW)


def _process_id(goal: str) -> str:
	return "process:" + re.sub(r"[^a-z0-9]+", "-", goal.lower()).strip("-")


def _step(flow: UserFlowComponent) -> ProcessStep:
	return ProcessStep(
		step_id=flow.id,
		step_name=flow.screen_name,
		description=flow.business_context.business_goal if flow.business_context else "Screen interaction",
		action_descriptions=[a.action_name for a in flow.user_actions],
	)


def extract_business_processes(user_flows: Iterable[UserFlowComponent]) -> List[BusinessProcess]:
	"""Group screens by business goal, in order of first appearance."""
	groups: Dict[str, List[UserFlowComponent]] = {}
	for flow in user_flows:
		if flow.business_context is not None:
			groups.setdefault(flow.business_context.business_goal, []).append(flow)

	return [
		BusinessProcess(
			process_id=_process_id(goal),
			process_name=goal,
			process_type=process_type(goal),
			criticality=criticality(goal),
			steps=[_step(f) for f in flows],
		)
		for goal, flows in groups.items()
	]

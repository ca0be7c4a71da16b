"""Engine that turns parsed source facts into an architectural project model.

Modules:
- model.py: Data structures for components, relationships, flows and complexity.
- config.py: Immutable classification tables and JSON config loading.
- builder.py: Normalizes raw fact bundles into components and resolves dependencies.
- classify.py: Layer and role classification plus the name-based UI heuristic.
- relationships.py: Typed, de-duplicated edges between components.
- navigation.py: Navigation flows and user-flow nodes between screens.
- complexity.py: Time/space complexity estimates from control-flow shape.
- processes.py: Business processes grouped from user flows.
- pipeline.py: Runs the stages and aggregates the project model.
- summarize.py: Deterministic textual summary of a project model.
"""

__all__ = [
	"model",
	"config",
	"builder",
	"classify",
	"relationships",
	"navigation",
	"complexity",
	"processes",
	"pipeline",
	"summarize",
]

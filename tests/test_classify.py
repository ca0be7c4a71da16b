from __future__ import annotations

from archmodel.builder import build_component, build_components
from archmodel.classify import classify_component, classify_components, detect_role, is_ui_by_name
from archmodel.config import ClassificationConfig, RoleRule
from archmodel.model import Layer, Role

from conftest import find


def _component(**facts):
	component, _ = build_component(facts)
	return component


def test_roles_and_layers_of_sample_project(sample_facts):
	components, _ = build_components(sample_facts)
	classified = classify_components(components)
	expected = {
		"LoginActivity": (Layer.UI, Role.ACTIVITY),
		"OrderFragment": (Layer.UI, Role.FRAGMENT),
		"SettingsFragment": (Layer.UI, Role.FRAGMENT),
		"LoginViewModel": (Layer.BUSINESS_LOGIC, Role.VIEW_MODEL),
		"OrderRepository": (Layer.BUSINESS_LOGIC, Role.REPOSITORY),
		"OrderSyncService": (Layer.BUSINESS_LOGIC, Role.SERVICE),
		"OrderDao": (Layer.DATA, Role.DAO),
		"Order": (Layer.DATA, Role.ENTITY),
		"Cacheable": (Layer.OTHER, Role.UNKNOWN),
	}
	for name, (layer, role) in expected.items():
		component = find(classified, name)
		assert (component.layer, component.role) == (layer, role), name


def test_annotation_beats_supertype_and_name():
	component = _component(name="UserActivity", annotations=["@Dao"], extends="AppCompatActivity")
	assert detect_role(component) is Role.DAO


def test_supertype_beats_name():
	component = _component(name="LoginDialog", extends="androidx.fragment.app.Fragment")
	assert detect_role(component) is Role.FRAGMENT


def test_dialog_fragment_stays_a_dialog():
	component = _component(name="ConfirmSheet", extends="BottomSheetDialogFragment")
	assert detect_role(component) is Role.DIALOG


def test_name_suffix_is_case_insensitive():
	assert detect_role(_component(name="profilerepo")) is Role.REPOSITORY
	assert detect_role(_component(name="GetOrdersUseCase")) is Role.USE_CASE


def test_declared_layer_wins_over_role():
	component = _component(name="CheckoutActivity", layer="domain", extends="Activity")
	layer, role = classify_component(component)
	assert layer is Layer.BUSINESS_LOGIC
	assert role is Role.ACTIVITY


def test_unknown_marker_is_classified_as_other():
	layer, role = classify_component(_component(name="Glue", layer="unknown"))
	assert layer is Layer.OTHER
	assert role is Role.UNKNOWN


def test_ui_name_heuristic_can_disagree_with_layer():
	page = _component(name="CheckoutPage")
	assert is_ui_by_name(page)
	assert classify_component(page)[0] is Layer.OTHER

	activity = _component(name="Shell", extends="BaseActivity<Binding>")
	assert is_ui_by_name(activity)
	assert not is_ui_by_name(_component(name="OrderRepository"))


def test_custom_role_table():
	config = ClassificationConfig(
		role_rules=(RoleRule(role=Role.PRESENTER, name_suffixes=("Screen",)),),
		role_layers={Role.PRESENTER: Layer.UI},
	)
	layer, role = classify_component(_component(name="CartScreen"), config)
	assert (layer, role) == (Layer.UI, Role.PRESENTER)
	assert classify_component(_component(name="OrderRepository"), config) == (Layer.OTHER, Role.UNKNOWN)


def test_classification_is_deterministic(sample_facts):
	components, _ = build_components(sample_facts)
	first = classify_components(components)
	second = classify_components(components)
	assert first == second

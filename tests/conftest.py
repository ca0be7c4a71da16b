from __future__ import annotations

from typing import List

import pytest

from archmodel.model import Component, ProjectAnalysisResult
from archmodel.pipeline import analyze_project


def _screen(name: str, extends: str, **extra) -> dict:
	facts = {
		"name": name,
		"package": "com.shop.ui",
		"file_path": f"app/src/main/java/com/shop/ui/{name}.kt",
		"extends": extends,
	}
	facts.update(extra)
	return facts


def make_sample_facts() -> List[dict]:
	return [
		_screen(
			"LoginActivity",
			"android.app.Activity",
			file_path="app/src/main/java/com/shop/ui/LoginActivity.java",
			annotations=["@AndroidEntryPoint"],
			injected_dependencies=["LoginViewModel"],
			fields=[{"name": "viewModel", "type": "LoginViewModel", "visibility": "private"}],
			methods=[
				{"name": "onCreate", "parameters": ["Bundle savedInstanceState"]},
				{"name": "onLoginButtonClick", "parameters": ["View view"]},
			],
			navigation_targets=[
				{
					"target": "HomeActivity",
					"conditions": [{"type": "auth", "condition": "credentialsValid", "is_blocking": True}],
				},
				{"target": "ErrorActivity", "conditions": [{"type": "auth", "condition": "loginFailed"}]},
			],
		),
		_screen(
			"HomeActivity",
			"AppCompatActivity",
			methods=[{"name": "onCreate"}, {"name": "onScroll"}],
			navigation_targets=["OrderFragment", "SettingsFragment"],
		),
		_screen(
			"OrderFragment",
			"androidx.fragment.app.Fragment",
			fields=[{"name": "items", "type": "MutableList<Order>"}],
			navigation_targets=[
				{"target": "CheckoutActivity", "conditions": [{"type": "cart", "condition": "cartNotEmpty"}]},
				{"target": "HomeActivity", "navigation_type": "BACK"},
			],
		),
		_screen("SettingsFragment", "PreferenceFragmentCompat"),
		_screen(
			"CheckoutActivity",
			"AppCompatActivity",
			methods=[{"name": "onPayClick"}, {"name": "onCardNumberTextChanged"}],
			navigation_targets=["HomeActivity", "com.payments.ProviderActivity"],
		),
		_screen("ErrorActivity", "AppCompatActivity", navigation_targets=[]),
		{
			"name": "LoginViewModel",
			"package": "com.shop.ui",
			"file_path": "app/src/main/java/com/shop/ui/LoginViewModel.kt",
			"annotations": ["@HiltViewModel"],
			"extends": "ViewModel",
			"dependencies": ["UserRepository"],
		},
		{
			"name": "BaseRepository",
			"package": "com.shop.data",
			"kind": "abstract class",
			"file_path": "app/src/main/java/com/shop/data/BaseRepository.kt",
		},
		{
			"name": "OrderRepository",
			"package": "com.shop.data",
			"file_path": "app/src/main/java/com/shop/data/OrderRepository.kt",
			"extends": "com.shop.data.BaseRepository",
			"implements": ["Cacheable"],
			"dependencies": ["OrderDao", "OrderDao", "retrofit2.Retrofit"],
			"fields": [{"name": "dao", "type": "OrderDao", "is_final": True}],
			"methods": [
				{"name": "getOrders", "return_type": "List<Order>"},
				{
					"name": "sortedOrders",
					"return_type": "List<Order>",
					"control_flow": {"loop_depth": 1, "calls": ["Collections.sort"], "auxiliary_structures": ["list"]},
				},
			],
		},
		{
			"name": "UserRepository",
			"package": "com.shop.data",
			"file_path": "app/src/main/java/com/shop/data/UserRepository.kt",
			"implements": ["Cacheable"],
		},
		{
			"name": "Cacheable",
			"package": "com.shop.data",
			"kind": "interface",
			"file_path": "app/src/main/java/com/shop/data/Cacheable.kt",
			"methods": [{"name": "evict", "is_abstract": True}],
		},
		{
			"name": "OrderDao",
			"package": "com.shop.data",
			"kind": "interface",
			"annotations": ["@Dao"],
			"file_path": "app/src/main/java/com/shop/data/OrderDao.kt",
		},
		{
			"name": "Order",
			"package": "com.shop.data",
			"annotations": ['@androidx.room.Entity(tableName = "orders")'],
			"data_class": True,
			"file_path": "app/src/main/java/com/shop/data/Order.kt",
		},
		{
			"name": "OrderSyncService",
			"package": "com.shop.sync",
			"extends": "Service",
			"file_path": "app/src/main/java/com/shop/sync/OrderSyncService.kt",
			"fields": [{"name": "repositories", "type": "List<OrderRepository>"}],
			"methods": [
				{"name": "sync", "parameters": ["order: Order"], "control_flow": {"loop_depth": 2}},
			],
		},
	]


def find(components, name: str) -> Component:
	return next(c for c in components if c.name == name)


@pytest.fixture
def sample_facts() -> List[dict]:
	return make_sample_facts()


@pytest.fixture
def sample_result(sample_facts) -> ProjectAnalysisResult:
	return analyze_project(sample_facts, parallel=False)

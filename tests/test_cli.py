from __future__ import annotations

import json

import pytest

import cli
from archmodel.config import get_config

from conftest import make_sample_facts


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch):
	monkeypatch.delenv("ARCHMODEL_CONFIG", raising=False)
	get_config.cache_clear()
	yield
	get_config.cache_clear()


@pytest.fixture
def facts_file(tmp_path):
	path = tmp_path / "facts.json"
	path.write_text(json.dumps({"components": make_sample_facts()}), encoding="utf-8")
	return path


def test_analyze_prints_json(facts_file, capsys):
	assert cli.main(["analyze", str(facts_file), "--sequential"]) == 0
	data = json.loads(capsys.readouterr().out)
	assert len(data["components"]) == len(make_sample_facts())
	assert data["ui_filter_mode"] == "union"


def test_analyze_summary(facts_file, capsys):
	assert cli.main(["analyze", str(facts_file), "--summary"]) == 0
	out = capsys.readouterr().out
	assert out.startswith("Project model:")
	assert "Screens: " in out


def test_analyze_with_config(facts_file, tmp_path, capsys):
	config = tmp_path / "config.json"
	config.write_text(json.dumps({"ui_filter_mode": "layer"}))
	assert cli.main(["analyze", str(facts_file), "--config", str(config)]) == 0
	assert json.loads(capsys.readouterr().out)["ui_filter_mode"] == "layer"


def test_unusable_bundle_is_reported_as_a_warning(tmp_path, capsys):
	path = tmp_path / "facts.json"
	path.write_text(json.dumps([{"name": "Ok"}, "not a bundle", {"name": "AlsoOk"}]))
	assert cli.main(["analyze", str(path)]) == 0
	data = json.loads(capsys.readouterr().out)
	assert data["error"] is None
	assert [c["name"] for c in data["components"]] == ["Ok", "AlsoOk"]
	assert data["warnings"][0].startswith("bundle #2 skipped")


def test_unreadable_input(tmp_path):
	assert cli.main(["analyze", str(tmp_path / "missing.json")]) == 2
	path = tmp_path / "facts.json"
	path.write_text(json.dumps({"components": "nope"}))
	assert cli.main(["analyze", str(path)]) == 2


def test_bad_config(facts_file, tmp_path):
	assert cli.main(["analyze", str(facts_file), "--config", str(tmp_path / "absent.json")]) == 2


def test_read_facts_accepts_bare_list(tmp_path):
	path = tmp_path / "facts.json"
	path.write_text(json.dumps([{"name": "A"}]))
	assert cli.read_facts(str(path)) == [{"name": "A"}]

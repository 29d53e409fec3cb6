"""Tests for config loading and column signatures."""

from __future__ import annotations

from sheetjoin.utils import DEFAULT_RULES, column_signature, load_rules, norm_text, save_json


def test_packaged_rules_match_defaults():
    rules = load_rules()
    for key, value in DEFAULT_RULES.items():
        assert rules[key] == value


def test_user_rules_override(user_data_dir):
    save_json(user_data_dir / "rules.json", {"output_dir": "Results", "numeric_tolerance": 0.01})
    rules = load_rules()
    assert rules["output_dir"] == "Results"
    assert rules["numeric_tolerance"] == 0.01
    assert rules["header_scan_rows"] == DEFAULT_RULES["header_scan_rows"]


def test_broken_user_rules_are_ignored(user_data_dir):
    user_data_dir.mkdir(parents=True)
    (user_data_dir / "rules.json").write_text("{not json", encoding="utf-8")
    assert load_rules()["output_dir"] == DEFAULT_RULES["output_dir"]


def test_norm_text():
    assert norm_text("\ufeffCustomer\u00a0 ID ") == "customer id"
    assert norm_text(None) == ""


def test_column_signature_ignores_case_and_spacing():
    assert column_signature(["ID", " Name "]) == column_signature(["id", "name"])
    assert column_signature(["id", "name"]) != column_signature(["name", "id"])

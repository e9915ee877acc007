"""Tests for configuration loading and saving."""

from __future__ import annotations

import copy
import json
import logging

import pytest

from stack_combiner.utils.config import (
    DEFAULT_CONFIG,
    add_recent_file,
    load_config,
    reset_to_defaults,
    save_config,
)


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "config.json")

    assert config == DEFAULT_CONFIG
    config["processing"]["strategy"] = "loop"
    assert DEFAULT_CONFIG["processing"]["strategy"] == "serial"


def test_file_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"processing": {"strategy": "parallel", "n_jobs": 2}}))

    config = load_config(path)

    assert config["processing"]["strategy"] == "parallel"
    assert config["processing"]["n_jobs"] == 2
    assert config["processing"]["output_dtype"] == "float32"
    assert config["display"] == DEFAULT_CONFIG["display"]


def test_invalid_json_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    assert load_config(path) == DEFAULT_CONFIG


@pytest.mark.parametrize("text", ["[]", "42", '"serial"', "null"])
def test_non_object_json_falls_back_to_defaults(tmp_path, caplog, text):
    path = tmp_path / "config.json"
    path.write_text(text)

    with caplog.at_level(logging.ERROR, logger="stack_combiner"):
        config = load_config(path)

    assert config == DEFAULT_CONFIG
    assert any("expected a JSON object" in message for message in caplog.messages)


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = load_config(path)
    config["display"]["enabled"] = False

    assert save_config(config, path)
    assert load_config(path)["display"]["enabled"] is False


def test_reset_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"processing": {"strategy": "loop"}}))

    config = reset_to_defaults(path)

    assert config == DEFAULT_CONFIG
    assert load_config(path)["processing"]["strategy"] == "serial"


def test_add_recent_file_moves_to_front_and_limits():
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["recent_files"]["max_entries"] = 3

    for path in ["a.tif", "b.tif", "c.tif", "a.tif", "d.tif"]:
        add_recent_file(config, path)

    assert config["recent_files"]["datasets"] == ["d.tif", "a.tif", "c.tif"]
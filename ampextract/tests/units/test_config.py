#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Unit tests for configuration handling in the ampExtract pipeline.
"""

import os
import json
import pickle

import pytest

from ...config import (Config, ConfigError, ExtractionSettings, display_config,
                       generate_config_template)
from ...config.template_generator import TEMPLATE_KEYS


def write_json(directory, name, data):
    path = os.path.join(directory, name)
    with open(path, 'w') as f:
        json.dump(data, f)
    return path


class TestConfig:
    """Test class for the Config singleton."""

    def test_load_from_file(self, temp_dir, restore_config):
        path = write_json(temp_dir, "cfg.json", {
            "# comment": "ignored",
            "MIN_COVERAGE": 0.8,
            "MAX_MISMATCH": 2,
            "NOT_A_SETTING": 1,
        })

        assert Config.load_from_file(path) is True

        assert Config.MIN_COVERAGE == 0.8
        assert Config.MAX_MISMATCH == 2
        assert not hasattr(Config, "NOT_A_SETTING")

    def test_invalid_value_is_rejected(self, temp_dir, restore_config):
        path = write_json(temp_dir, "cfg.json", {"MIN_COVERAGE": 1.5})
        with pytest.raises(ConfigError):
            Config.load_from_file(path)

    def test_missing_file(self, temp_dir, restore_config):
        with pytest.raises(ConfigError):
            Config.load_from_file(os.path.join(temp_dir, "missing.json"))

    def test_non_object_file(self, temp_dir, restore_config):
        path = write_json(temp_dir, "cfg.json", [1, 2, 3])
        with pytest.raises(ConfigError):
            Config.load_from_file(path)

    def test_save_and_reload(self, temp_dir, restore_config):
        path = os.path.join(temp_dir, "saved.json")
        Config.MIN_IDENTITY = 0.75

        Config.save_to_file(path)
        Config.MIN_IDENTITY = 0.0
        Config.load_from_file(path)

        assert Config.MIN_IDENTITY == 0.75

    def test_extraction_settings_snapshot(self, restore_config):
        Config.MAX_MISMATCH = 1
        Config.ORIENTATION_ANCHOR = ""

        settings = Config.get_extraction_settings(num_processes=3)

        assert settings.max_mismatch == 1
        assert settings.orientation_anchor is None
        assert settings.num_processes == 3

        # Later changes do not leak into an existing snapshot
        Config.MAX_MISMATCH = 3
        assert settings.max_mismatch == 1

    def test_label_pattern_does_not_change_snapshot(self, restore_config):
        """Header parsing happens at load time, before any snapshot is taken."""
        before = Config.get_extraction_settings()
        Config.SPECIES_LABEL_PATTERN = r"\|(?P<species>[^|]+)\|"

        assert Config.get_extraction_settings() == before


class TestExtractionSettings:
    """Test class for ExtractionSettings."""

    @pytest.mark.parametrize("kwargs", [
        {"max_mismatch": -1},
        {"min_coverage": 1.1},
        {"min_identity": -0.1},
        {"max_amplicon_length": 0},
        {"num_processes": 0},
        {"batch_size": 0},
        {"anchor_search_window": -5},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            ExtractionSettings(**kwargs)

    def test_result_parameters_exclude_runtime_fields(self):
        parameters = ExtractionSettings(num_processes=4).result_parameters()

        assert "num_processes" not in parameters
        assert "show_progress" not in parameters
        assert parameters["min_coverage"] == 0.9

    def test_picklable_and_hashable(self):
        settings = ExtractionSettings(orientation_anchor="TGGATCC")
        assert pickle.loads(pickle.dumps(settings)) == settings
        assert hash(settings) == hash(ExtractionSettings(orientation_anchor="TGGATCC"))


class TestTemplateAndDisplay:
    """Test class for the config template and display helpers."""

    def test_template_round_trip(self, temp_dir, restore_config, capsys):
        path = generate_config_template(Config, "template", temp_dir)

        assert path == os.path.join(temp_dir, "template.json")
        with open(path) as f:
            template = json.load(f)
        assert all(key in template for key in TEMPLATE_KEYS)

        assert Config.load_from_file(path) is True

    def test_display_config(self, capsys):
        display_config(Config)

        output = capsys.readouterr().out
        assert "MIN_COVERAGE" in output
        assert "Fallback Alignment Parameters" in output

# Copyright 2026 stackports contributors
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.

import pytest

pytest.importorskip("yaml")

from stackports_py.config import SiteConfig, default_config_path


def test_default_config_path():
    assert default_config_path().name == "site.yml"


def test_site_config_load(tmp_path):
    config_path = tmp_path / "site.yml"
    config_path.write_text(
        """
        data_directory: inventory
        unused_threshold_days: 21
        event_retention: 50
        ports_per_stack: 24
        max_stacks: 4
        sweep_interval_seconds: 60
        """
    )

    config = SiteConfig.load(config_path)

    assert config.data_directory.name == "inventory"
    assert config.unused_threshold_days == 21
    assert config.event_retention == 50
    assert config.ports_per_stack == 24
    assert config.max_stacks == 4
    assert config.sweep_interval_seconds == 60


def test_site_config_defaults_for_empty_file(tmp_path):
    config_path = tmp_path / "site.yml"
    config_path.write_text("")

    config = SiteConfig.load(config_path)

    assert config.unused_threshold_days == 14
    assert config.event_retention == 30
    assert config.ports_per_stack == 48
    assert config.max_stacks == 5
    assert config.sweep_interval_seconds == 0


def test_site_config_reads_environment(monkeypatch):
    monkeypatch.setenv("STACKPORTS_UNUSED_THRESHOLD_DAYS", "30")
    monkeypatch.setenv("STACKPORTS_DATA_DIRECTORY", "/srv/stackports")

    config = SiteConfig()

    assert config.unused_threshold_days == 30
    assert str(config.data_directory) == "/srv/stackports"


def test_site_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        SiteConfig.load(tmp_path / "absent.yml")


def test_site_config_rejects_non_mapping(tmp_path):
    config_path = tmp_path / "site.yml"
    config_path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError, match="YAML mapping"):
        SiteConfig.load(config_path)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("unused_threshold_days: 0", "unused_threshold_days must be greater than 0"),
        ("unused_threshold_days: .inf", "unused_threshold_days must be greater than 0"),
        ("event_retention: 0", "event_retention must be at least 1"),
    ],
)
def test_site_config_rejects_bad_tracking_settings(tmp_path, body, message):
    config_path = tmp_path / "site.yml"
    config_path.write_text(body)

    with pytest.raises(ValueError, match=message):
        SiteConfig.load(config_path)


@pytest.mark.parametrize("body", ["max_stacks: 6", "ports_per_stack: 0", "sweep_interval_seconds: -5"])
def test_site_config_rejects_out_of_range_layout(tmp_path, body):
    config_path = tmp_path / "site.yml"
    config_path.write_text(body)

    with pytest.raises(ValueError):
        SiteConfig.load(config_path)

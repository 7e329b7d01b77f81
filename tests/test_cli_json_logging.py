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
from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path
from types import ModuleType

import pytest

from stackports_py.errors import SwitchNotFoundError


def _load_cli_with_fake_typer():
    fake_typer = ModuleType("typer")

    class FakeTyperApp:
        def command(self, *_args, **_kwargs):
            def decorator(func):
                return func

            return decorator

    class FakeBadParameter(ValueError):
        pass

    def fake_option(default=None, *_args, **_kwargs):
        return default

    fake_typer.Typer = lambda **_kwargs: FakeTyperApp()
    fake_typer.Option = fake_option
    fake_typer.BadParameter = FakeBadParameter
    fake_typer.echo = print
    sys.modules["typer"] = fake_typer
    sys.modules.pop("stackports_py.cli", None)
    return importlib.import_module("stackports_py.cli")


def _parse_log_lines(path: Path) -> list[dict]:
    lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


def _write_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "site.yml"
    config_path.write_text(
        "\n".join(
            [
                f"data_directory: {tmp_path / 'data'}",
                "unused_threshold_days: 14",
            ]
        ),
        encoding="utf-8",
    )
    return config_path


def test_seed_and_scan_json_logs_success_and_error(tmp_path, capsys):
    cli = _load_cli_with_fake_typer()
    config_path = _write_config(tmp_path)

    seed_log = tmp_path / "seed.log"
    cli.seed(seed_value=7, config=config_path, logfile=seed_log, log_format="json")
    seeded = json.loads(capsys.readouterr().out)
    assert seeded["ports"] == 96
    payloads = _parse_log_lines(seed_log)
    assert any(entry["event"] == "seed" and entry["status"] == "success" for entry in payloads)
    assert all("command" in entry and "elapsed_ms" in entry for entry in payloads)

    scan_log = tmp_path / "scan-success.log"
    cli.scan_unused(switch=seeded["switch_id"], config=config_path, logfile=scan_log, log_format="json")
    result = json.loads(capsys.readouterr().out)
    assert result["message"] == "Scan complete"
    assert result["threshold_days"] == 14.0
    assert any(
        entry["event"] == "scan_unused" and entry["status"] == "success" and entry.get("switch") == seeded["switch_id"]
        for entry in _parse_log_lines(scan_log)
    )

    error_log = tmp_path / "scan-error.log"
    with pytest.raises(SwitchNotFoundError):
        cli.scan_unused(switch="missing", config=config_path, logfile=error_log, log_format="json")

    error_payloads = _parse_log_lines(error_log)
    assert any(
        entry["event"] == "scan_unused"
        and entry["status"] == "error"
        and entry["error_code"] == "NOT_FOUND"
        and entry["error_type"] == "SwitchNotFoundError"
        for entry in error_payloads
    )


def test_report_and_stats_print_json(tmp_path, capsys):
    cli = _load_cli_with_fake_typer()
    config_path = _write_config(tmp_path)
    log_path = tmp_path / "cli.log"

    cli.seed(seed_value=3, config=config_path, logfile=log_path, log_format="json")
    switch_id = json.loads(capsys.readouterr().out)["switch_id"]

    cli.unused_report(switch=switch_id, min_days=0, config=config_path, logfile=log_path, log_format="json")
    report = json.loads(capsys.readouterr().out)
    assert report["switch_id"] == switch_id
    assert report["total_ports"] == 96
    assert report["unused_count"] == len(report["unused_ports"])

    cli.stats(switch=switch_id, config=config_path, logfile=log_path, log_format="json")
    stats = json.loads(capsys.readouterr().out)
    assert stats["total"] == 96
    assert stats["unused"] == report["unused_count"]


def test_missing_config_is_a_usage_error(tmp_path):
    cli = _load_cli_with_fake_typer()

    with pytest.raises(cli.CliUsageError, match="Config file not found"):
        cli.stats(switch="sw", config=tmp_path / "absent.yml", logfile=tmp_path / "cli.log")

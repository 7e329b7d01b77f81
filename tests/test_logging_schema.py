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
import logging
import sys
from types import ModuleType

from stackports_py.errors import PortNotFoundError, PortValidationError, StorageError
from stackports_py.report.views import VlanCount


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


def test_json_log_formatter_has_fixed_schema():
    cli = _load_cli_with_fake_typer()

    formatter = cli.JsonLogFormatter()
    record = logging.LogRecord(
        name="stackports_py.cli",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="test message",
        args=(),
        exc_info=None,
    )
    record.event = "scan_unused"
    record.command = "scan-unused"
    record.target = "a1b2c3"
    record.status = "success"
    record.elapsed_ms = 123
    record.error_code = None
    record.flagged = 4
    payload = json.loads(formatter.format(record))

    for key in (
        "timestamp",
        "level",
        "logger",
        "message",
        "event",
        "command",
        "target",
        "status",
        "elapsed_ms",
        "error_code",
    ):
        assert key in payload
    assert payload["flagged"] == 4
    assert "port" not in payload


def test_error_classification_codes():
    cli = _load_cli_with_fake_typer()
    assert cli._classify_error(PortNotFoundError("Gi1/0/99", "sw1")) == "NOT_FOUND"
    assert cli._classify_error(PortValidationError("VLAN must be between 1 and 4094")) == "VALIDATION_ERROR"
    assert cli._classify_error(StorageError("disk full")) == "STORAGE_ERROR"
    assert cli._classify_error(ValueError("bad config")) == "CONFIG_ERROR"
    assert cli._classify_error(RuntimeError("boom")) == "UNEXPECTED_ERROR"


def test_event_extra_tags_switch_target():
    cli = _load_cli_with_fake_typer()
    extra = cli._event_extra(event="stats", command="stats", status="success", target="sw1", elapsed_seconds=0.25)
    assert extra["switch"] == "sw1"
    assert extra["elapsed_ms"] == 250
    assert "switch" not in cli._event_extra(event="seed", command="seed", status="success")


def test_log_level_flags():
    cli = _load_cli_with_fake_typer()
    assert cli._log_level(debug=True, info=True, warn=True) == logging.DEBUG
    assert cli._log_level(debug=False, info=True, warn=True) == logging.INFO
    assert cli._log_level(debug=False, info=False, warn=True) == logging.WARNING
    assert cli._log_level(debug=False, info=False, warn=False) == logging.INFO


def test_configure_logging_replaces_its_own_handler(tmp_path):
    cli = _load_cli_with_fake_typer()
    root = logging.getLogger()

    cli._configure_logging(debug=False, info=False, warn=False, logfile=tmp_path / "a.log", log_format="json")
    cli._configure_logging(debug=False, info=False, warn=False, logfile=tmp_path / "b.log", log_format="json")

    owned = [handler for handler in root.handlers if getattr(handler, "_stackports_handler", False)]
    assert len(owned) == 1
    assert isinstance(owned[0].formatter, cli.JsonLogFormatter)


def test_run_command_prints_dataclass_results(capsys):
    cli = _load_cli_with_fake_typer()

    cli._run_command("stats", "sw1", lambda: VlanCount(vlan=10, count=3))
    assert json.loads(capsys.readouterr().out) == {"count": 3, "vlan": 10}

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

import json
import logging
import time
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import typer
import yaml

from stackports_py.config import SiteConfig, default_config_path
from stackports_py.errors import NotFoundError, PortValidationError, StorageError
from stackports_py.service import InventoryService
from stackports_py.storage.switch_store import SwitchStore
from stackports_py.web.app import InventoryServer

app = typer.Typer(help="Stack port inventory CLI")

_STACKPORTS_HANDLER_ATTR = "_stackports_handler"


class CliUsageError(ValueError):
    pass


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "event": getattr(record, "event", "log"),
            "command": getattr(record, "command", ""),
            "target": getattr(record, "target", ""),
            "status": getattr(record, "status", ""),
            "elapsed_ms": getattr(record, "elapsed_ms", None),
            "error_code": getattr(record, "error_code", None),
        }
        for key in ("switch", "port", "flagged", "error_type", "entries_count"):
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        return json.dumps(payload, ensure_ascii=False)


def _classify_error(exc: BaseException) -> str:
    if isinstance(exc, NotFoundError):
        return "NOT_FOUND"
    if isinstance(exc, PortValidationError):
        return "VALIDATION_ERROR"
    if isinstance(exc, StorageError):
        return "STORAGE_ERROR"
    if isinstance(exc, (ValueError, yaml.YAMLError)):
        return "CONFIG_ERROR"
    return "UNEXPECTED_ERROR"


def _event_extra(
    *,
    event: str,
    command: str,
    status: str,
    target: str = "",
    elapsed_seconds: float | None = None,
    error_code: str | None = None,
) -> dict[str, object]:
    elapsed_ms = None if elapsed_seconds is None else int(elapsed_seconds * 1000)
    extra: dict[str, object] = {
        "event": event,
        "command": command,
        "status": status,
        "target": target,
        "elapsed_ms": elapsed_ms,
        "error_code": error_code,
    }
    if target:
        extra["switch"] = target
    return extra


def _load_config(path: Optional[Path]) -> SiteConfig:
    config_path = path or default_config_path()
    try:
        return SiteConfig.load(config_path)
    except FileNotFoundError as exc:
        raise CliUsageError(str(exc)) from exc
    except (ValueError, yaml.YAMLError) as exc:
        raise CliUsageError(f"Failed to load config '{config_path}': {exc}") from exc


def _log_level(*, debug: bool, info: bool, warn: bool) -> int:
    if debug:
        return logging.DEBUG
    if warn and not info:
        return logging.WARNING
    return logging.INFO


def _configure_logging(
    *,
    debug: bool,
    info: bool,
    warn: bool,
    logfile: Optional[Path],
    log_format: str,
) -> None:
    handler: logging.Handler = logging.FileHandler(logfile) if logfile else logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    setattr(handler, _STACKPORTS_HANDLER_ATTR, True)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _STACKPORTS_HANDLER_ATTR, False):
            root.removeHandler(existing)
    root.setLevel(_log_level(debug=debug, info=info, warn=warn))
    root.addHandler(handler)


def _open_inventory(
    config: Optional[Path],
    *,
    debug: bool,
    info: bool,
    warn: bool,
    logfile: Optional[Path],
    log_format: str,
) -> tuple[SiteConfig, InventoryService]:
    """Set up logging, load the site config and open the switch store."""
    _configure_logging(debug=debug, info=info, warn=warn, logfile=logfile, log_format=log_format)
    site = _load_config(config)
    return site, InventoryService(SwitchStore(site.data_directory), site)


def _run_command(command: str, target: str, action: Callable[[], Any]) -> None:
    """Run ``action``, log the outcome with the fixed event schema, print the result.

    Dataclass results are printed through ``asdict``. Domain errors are
    logged with their error code and re-raised so the command exits non-zero.
    """
    logger = logging.getLogger(__name__)
    event = command.replace("-", "_")
    started = time.monotonic()
    try:
        result = action()
    except (NotFoundError, PortValidationError, StorageError) as exc:
        extra = _event_extra(
            event=event,
            command=command,
            status="error",
            target=target,
            elapsed_seconds=time.monotonic() - started,
            error_code=_classify_error(exc),
        )
        extra["error_type"] = type(exc).__name__
        logger.error("Command %s failed: %s", command, exc, extra=extra)
        raise
    logger.info(
        "Command %s finished",
        command,
        extra=_event_extra(
            event=event,
            command=command,
            status="success",
            target=target,
            elapsed_seconds=time.monotonic() - started,
        ),
    )
    payload = asdict(result) if is_dataclass(result) else result
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str, ensure_ascii=False))


@app.command("seed")
def seed(
    seed_value: Optional[int] = typer.Option(None, "--seed"),
    config: Optional[Path] = typer.Option(None, "--config"),
    debug: bool = typer.Option(False, "--debug"),
    info: bool = typer.Option(False, "--info"),
    warn: bool = typer.Option(False, "--warn"),
    logfile: Optional[Path] = typer.Option(None, "--logfile"),
    log_format: str = typer.Option("text", "--log-format"),
) -> None:
    """Replace all stored switches with one synthetic demo switch."""
    _site, service = _open_inventory(
        config, debug=debug, info=info, warn=warn, logfile=logfile, log_format=log_format
    )
    _run_command("seed", "", lambda: service.seed(seed_value))


@app.command("scan-unused")
def scan_unused(
    switch: str = typer.Option(..., "--switch"),
    threshold_days: Optional[float] = typer.Option(None, "--threshold-days"),
    config: Optional[Path] = typer.Option(None, "--config"),
    debug: bool = typer.Option(False, "--debug"),
    info: bool = typer.Option(False, "--info"),
    warn: bool = typer.Option(False, "--warn"),
    logfile: Optional[Path] = typer.Option(None, "--logfile"),
    log_format: str = typer.Option("text", "--log-format"),
) -> None:
    """Flag ports idle for at least the threshold as unused.

    Defaults to the configured ``unused_threshold_days``. Fails fast when the
    switch does not exist or the threshold is not a positive finite number.
    """
    _site, service = _open_inventory(
        config, debug=debug, info=info, warn=warn, logfile=logfile, log_format=log_format
    )
    _run_command("scan-unused", switch, lambda: service.scan_unused(switch, threshold_days))


@app.command("unused-report")
def unused_report(
    switch: str = typer.Option(..., "--switch"),
    min_days: float = typer.Option(0, "--min-days"),
    config: Optional[Path] = typer.Option(None, "--config"),
    debug: bool = typer.Option(False, "--debug"),
    info: bool = typer.Option(False, "--info"),
    warn: bool = typer.Option(False, "--warn"),
    logfile: Optional[Path] = typer.Option(None, "--logfile"),
    log_format: str = typer.Option("text", "--log-format"),
) -> None:
    """Print unused ports, oldest first."""
    _site, service = _open_inventory(
        config, debug=debug, info=info, warn=warn, logfile=logfile, log_format=log_format
    )
    _run_command("unused-report", switch, lambda: service.unused_report(switch, min_days=min_days))


@app.command("stats")
def stats(
    switch: str = typer.Option(..., "--switch"),
    config: Optional[Path] = typer.Option(None, "--config"),
    debug: bool = typer.Option(False, "--debug"),
    info: bool = typer.Option(False, "--info"),
    warn: bool = typer.Option(False, "--warn"),
    logfile: Optional[Path] = typer.Option(None, "--logfile"),
    log_format: str = typer.Option("text", "--log-format"),
) -> None:
    """Print port counts, unused-age buckets, PoE load and VLAN breakdown."""
    _site, service = _open_inventory(
        config, debug=debug, info=info, warn=warn, logfile=logfile, log_format=log_format
    )
    _run_command("stats", switch, lambda: service.stats(switch))


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    config: Optional[Path] = typer.Option(None, "--config"),
    debug: bool = typer.Option(False, "--debug"),
    info: bool = typer.Option(False, "--info"),
    warn: bool = typer.Option(False, "--warn"),
    logfile: Optional[Path] = typer.Option(None, "--logfile"),
    log_format: str = typer.Option("text", "--log-format"),
) -> None:
    """Serve the port inventory HTTP API."""
    site, service = _open_inventory(
        config, debug=debug, info=info, warn=warn, logfile=logfile, log_format=log_format
    )
    InventoryServer(service, host, port, sweep_interval_seconds=site.sweep_interval_seconds).serve()


if __name__ == "__main__":
    app()

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
import os
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from stackports_py.errors import PortValidationError, StorageError, SwitchNotFoundError
from stackports_py.model.port import ErrorCounters, MacTableEntry, Port, PortEvent
from stackports_py.model.switch import Switch, is_valid_switch_id

logger = logging.getLogger(__name__)

_PORT_TIMESTAMPS = ("unused_since", "last_seen", "last_changed", "reviewed_at")
_SWITCH_TIMESTAMPS = ("created_at", "updated_at")


def _encode_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def switch_to_dict(switch: Switch) -> dict[str, Any]:
    return asdict(switch)


def port_from_dict(raw: dict[str, Any]) -> Port:
    data = dict(raw)
    for key in _PORT_TIMESTAMPS:
        data[key] = _parse_timestamp(data.get(key))
    data["errors"] = ErrorCounters(**(data.get("errors") or {}))
    data["mac_table"] = [MacTableEntry(**entry) for entry in data.get("mac_table") or []]
    data["events"] = [
        PortEvent(
            timestamp=datetime.fromisoformat(event["timestamp"]),
            event=event["event"],
            details=event.get("details", ""),
        )
        for event in data.get("events") or []
    ]
    return Port(**data)


def switch_from_dict(raw: dict[str, Any]) -> Switch:
    data = dict(raw)
    for key in _SWITCH_TIMESTAMPS:
        data[key] = _parse_timestamp(data.get(key))
    data["ports"] = [port_from_dict(port) for port in data.get("ports") or []]
    return Switch(**data)


class SwitchStore:
    """Stores one JSON document per switch, ports and event logs embedded."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path(self, switch_id: str) -> Path:
        if not is_valid_switch_id(switch_id):
            raise PortValidationError(f"Malformed switch id '{switch_id}'")
        return self.directory / f"{switch_id}.json"

    def exists(self, switch_id: str) -> bool:
        return self.path(switch_id).exists()

    def list_ids(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(path.stem for path in self.directory.glob("*.json"))

    def load(self, switch_id: str) -> Switch:
        path = self.path(switch_id)
        if not path.exists():
            raise SwitchNotFoundError(switch_id)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt switch document {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"Switch document {path} must contain a JSON object")
        try:
            return switch_from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Invalid switch document {path}: {exc}") from exc

    def save(self, switch: Switch) -> None:
        path = self.path(switch.id)
        payload = json.dumps(
            switch_to_dict(switch),
            default=_encode_default,
            indent=2,
            sort_keys=True,
            ensure_ascii=False,
        )
        temp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(payload, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Saved switch %s (%d ports)", switch.id, len(switch.ports))

    def delete(self, switch_id: str) -> None:
        path = self.path(switch_id)
        if not path.exists():
            raise SwitchNotFoundError(switch_id)
        try:
            path.unlink()
        except OSError as exc:
            raise StorageError(f"Failed to delete {path}: {exc}") from exc

    def delete_all(self) -> int:
        removed = 0
        for switch_id in self.list_ids():
            self.delete(switch_id)
            removed += 1
        return removed

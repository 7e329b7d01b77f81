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

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional

from stackports_py.errors import PortNotFoundError, PortValidationError
from stackports_py.model.mutations import FieldUpdate, PortMutation, Review, StatusChange
from stackports_py.model.port import (
    DEFAULT_EVENT_RETENTION,
    DEFAULT_THRESHOLD_DAYS,
    MAX_STACKS,
    PORT_MODES,
    Port,
    is_valid_port_id,
)
from stackports_py.tracking import unused

logger = logging.getLogger(__name__)

_SWITCH_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_SPEED_RE = re.compile(r"^\d{1,6}$")
_MAX_DESCRIPTION = 240


def is_valid_switch_id(value: str) -> bool:
    return bool(_SWITCH_ID_RE.fullmatch(value))


def validate_total_stacks(total_stacks: int, max_stacks: int = MAX_STACKS) -> int:
    if isinstance(total_stacks, bool) or not isinstance(total_stacks, int):
        raise PortValidationError(f"total_stacks must be an integer, got {total_stacks!r}")
    if not 1 <= total_stacks <= max_stacks:
        raise PortValidationError(f"total_stacks must be between 1 and {max_stacks}, got {total_stacks}")
    return total_stacks


def _apply_field_update(port: Port, update: FieldUpdate) -> Port:
    changes: dict[str, object] = {}
    if update.vlan is not None:
        if isinstance(update.vlan, bool) or not isinstance(update.vlan, int) or not 1 <= update.vlan <= 4094:
            raise PortValidationError(f"VLAN must be between 1 and 4094, got {update.vlan!r}")
        changes["vlan"] = update.vlan
    if update.mode is not None:
        if update.mode not in PORT_MODES:
            raise PortValidationError(
                f"Unsupported port mode '{update.mode}'; expected one of: {', '.join(PORT_MODES)}"
            )
        changes["mode"] = update.mode
    if update.description is not None:
        if len(update.description) > _MAX_DESCRIPTION:
            raise PortValidationError(f"Description exceeds {_MAX_DESCRIPTION} characters")
        changes["description"] = update.description
    if update.poe is not None:
        if not isinstance(update.poe, bool):
            raise PortValidationError(f"poe must be a boolean, got {update.poe!r}")
        changes["poe"] = update.poe
    if update.speed is not None:
        if update.speed != "auto" and not _SPEED_RE.fullmatch(update.speed):
            raise PortValidationError(f"Unsupported port speed '{update.speed}'")
        changes["speed"] = update.speed
    return replace(port, **changes)


@dataclass
class Switch:
    """Aggregate root for one stacked switch and all of its ports."""

    id: str
    name: str
    model: str = "C9300-48P-E"
    hostname: Optional[str] = None
    ip_address: Optional[str] = None
    location: Optional[str] = None
    total_stacks: int = 1
    ports: list[Port] = field(default_factory=list)
    sys_uptime: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_port(self, port_id: str) -> Optional[Port]:
        for port in self.ports:
            if port.id == port_id:
                return port
        return None

    def get_port(self, port_id: str) -> Port:
        return self.ports[self._index_of(port_id)]

    def _index_of(self, port_id: str) -> int:
        for index, port in enumerate(self.ports):
            if port.id == port_id:
                return index
        raise PortNotFoundError(port_id, self.id)

    def add_ports(self, ports: Iterable[Port]) -> None:
        incoming = list(ports)
        seen = {port.id for port in self.ports}
        for port in incoming:
            if not is_valid_port_id(port.id):
                raise PortValidationError(f"Malformed port id '{port.id}'")
            if port.id in seen:
                raise PortValidationError(f"Duplicate port id '{port.id}' on switch {self.id}")
            seen.add(port.id)
        self.ports.extend(incoming)

    def stack_ids(self) -> list[int]:
        return sorted({port.stack_id for port in self.ports})

    def next_stack_id(self, max_stacks: int = MAX_STACKS) -> int:
        used = set(self.stack_ids())
        for stack_id in range(1, max_stacks + 1):
            if stack_id not in used:
                return stack_id
        raise PortValidationError(f"Switch {self.id} already has the maximum of {max_stacks} stack members")

    def remove_stack(self, stack_id: int) -> list[Port]:
        stacks = self.stack_ids()
        if stack_id not in stacks:
            raise PortValidationError(f"Stack member {stack_id} does not exist on switch {self.id}")
        if len(stacks) == 1:
            raise PortValidationError("Cannot remove the last stack member")
        removed = [port for port in self.ports if port.stack_id == stack_id]
        self.ports = [port for port in self.ports if port.stack_id != stack_id]
        self.total_stacks = len(stacks) - 1
        return removed

    def update_port(
        self,
        port_id: str,
        *mutations: PortMutation,
        now: datetime,
        default_threshold_days: float = DEFAULT_THRESHOLD_DAYS,
        retention: int = DEFAULT_EVENT_RETENTION,
    ) -> Port:
        """Apply ``mutations`` to one port, all or nothing.

        Every mutation is computed against a copy; the stored port is replaced
        only after the whole sequence succeeded.
        """
        index = self._index_of(port_id)
        port = self.ports[index]
        for mutation in mutations:
            if isinstance(mutation, StatusChange):
                unused.validate_status(mutation.status)
                if mutation.status == port.status:
                    continue
                port = unused.apply_status_change(
                    port,
                    mutation.status,
                    mutation.details,
                    now,
                    threshold_days=unused.effective_threshold(port, None, default_threshold_days),
                    retention=retention,
                )
            elif isinstance(mutation, FieldUpdate):
                port = _apply_field_update(port, mutation)
            elif isinstance(mutation, Review):
                port = unused.review(port, mutation.reviewed_by, now, retention=retention)
            else:
                raise PortValidationError(f"Unsupported port mutation: {type(mutation).__name__}")
        self.ports[index] = port
        return port

    def enforce_invariants(self, now: datetime, default_threshold_days: float = DEFAULT_THRESHOLD_DAYS) -> int:
        """Catch ports that aged into "unused" without any status change.

        Each port is rescanned against its own threshold (falling back to
        ``default_threshold_days``). Returns the number of flags that flipped.
        """
        updated: list[Port] = []
        changed = 0
        for port in self.ports:
            port, flipped = unused.rescan(port, now, default_days=default_threshold_days)
            updated.append(port)
            changed += int(flipped)
        self.ports = updated
        return changed

    def scan_unused(self, threshold_days: float, now: datetime) -> int:
        """Rescan every port with an operator-supplied threshold.

        Returns how many ports were newly flagged; flags cleared on ``up``
        ports do not count.
        """
        threshold = unused.validate_threshold(threshold_days)
        updated: list[Port] = []
        flagged = 0
        for port in self.ports:
            port, flipped = unused.rescan(port, now, threshold_days=threshold)
            updated.append(port)
            if flipped and port.is_unused:
                flagged += 1
        self.ports = updated
        if flagged:
            logger.debug("Flagged %d unused ports on switch %s", flagged, self.id)
        return flagged

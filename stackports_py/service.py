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
"""Switch inventory operations shared by the HTTP and CLI front ends.

Every mutation follows the same path under a per-switch lock: load the
document, run the invariant pass, mutate, run the invariant pass again,
stamp ``updated_at`` and save. Mutations work on a freshly loaded copy, so a
failed save leaves the stored document as it was.
"""

from __future__ import annotations

import logging
import secrets
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from stackports_py.config import SiteConfig
from stackports_py.errors import PortValidationError, StorageError, SwitchNotFoundError
from stackports_py.mock import generate_switch_ports
from stackports_py.model.mutations import FieldUpdate, PortMutation, Review, StatusChange
from stackports_py.model.port import Port, new_port
from stackports_py.model.switch import Switch, validate_total_stacks
from stackports_py.report.views import (
    SwitchStats,
    UnusedReport,
    port_detail,
    stats_summary,
    unused_report,
)
from stackports_py.storage.switch_store import SwitchStore
from stackports_py.tracking.unused import validate_status, validate_threshold

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InventoryService:
    def __init__(
        self,
        store: SwitchStore,
        settings: Optional[SiteConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.settings = settings or SiteConfig()
        self.clock = clock or utcnow
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, switch_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(switch_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[switch_id] = lock
            return lock

    def _enforce(self, switch: Switch, now: datetime) -> int:
        flipped = switch.enforce_invariants(now, self.settings.unused_threshold_days)
        if flipped:
            logger.info(
                "Invariant pass changed unused flags",
                extra={"event": "enforce_invariants", "status": "changed", "target": switch.id, "flagged": flipped},
            )
        return flipped

    @contextmanager
    def _mutation(self, switch_id: str, enforce_first: bool = True) -> Iterator[tuple[Switch, datetime]]:
        with self._lock_for(switch_id):
            now = self.clock()
            switch = self.store.load(switch_id)
            if enforce_first:
                self._enforce(switch, now)
            yield switch, now
            self._enforce(switch, now)
            switch.updated_at = now
            self.store.save(switch)

    def _snapshot(self, switch_id: str) -> tuple[Switch, datetime]:
        now = self.clock()
        switch = self.store.load(switch_id)
        self._enforce(switch, now)
        return switch, now

    def _build_ports(
        self, stack_ids: list[int], now: datetime, mock: bool, seed: Optional[int]
    ) -> list[Port]:
        per_stack = self.settings.ports_per_stack
        if mock:
            return generate_switch_ports(
                stack_ids,
                seed if seed is not None else secrets.randbits(32),
                now,
                ports_per_stack=per_stack,
            )
        return [
            new_port(stack_id, port_num, now)
            for stack_id in stack_ids
            for port_num in range(1, per_stack + 1)
        ]

    def create_switch(
        self,
        name: str,
        *,
        hostname: Optional[str] = None,
        ip_address: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        total_stacks: int = 1,
        mock: bool = False,
        seed: Optional[int] = None,
    ) -> Switch:
        if not name or not name.strip():
            raise PortValidationError("Switch name is required")
        validate_total_stacks(total_stacks, self.settings.max_stacks)
        now = self.clock()
        switch = Switch(
            id=uuid.uuid4().hex[:12],
            name=name.strip(),
            hostname=hostname,
            ip_address=ip_address,
            location=location,
            total_stacks=total_stacks,
            created_at=now,
            updated_at=now,
        )
        if model:
            switch.model = model
        switch.add_ports(self._build_ports(list(range(1, total_stacks + 1)), now, mock, seed))
        with self._lock_for(switch.id):
            self._enforce(switch, now)
            self.store.save(switch)
        logger.info(
            "Provisioned switch",
            extra={"event": "create_switch", "status": "success", "target": switch.id, "switch": switch.name},
        )
        return switch

    def list_switches(self) -> list[Switch]:
        switches = []
        for switch_id in self.store.list_ids():
            try:
                switches.append(self.store.load(switch_id))
            except SwitchNotFoundError:
                continue
        return switches

    def get_switch(self, switch_id: str) -> Switch:
        switch, _now = self._snapshot(switch_id)
        return switch

    def delete_switch(self, switch_id: str) -> None:
        with self._lock_for(switch_id):
            self.store.delete(switch_id)
        logger.info("Deleted switch", extra={"event": "delete_switch", "status": "success", "target": switch_id})

    def list_ports(
        self,
        switch_id: str,
        *,
        status: Optional[str] = None,
        vlan: Optional[int] = None,
        stack: Optional[int] = None,
        unused: Optional[bool] = None,
    ) -> list[dict[str, object]]:
        if status is not None:
            validate_status(status)
        switch, now = self._snapshot(switch_id)
        ports = switch.ports
        if status is not None:
            ports = [port for port in ports if port.status == status]
        if vlan is not None:
            ports = [port for port in ports if port.vlan == vlan]
        if stack is not None:
            ports = [port for port in ports if port.stack_id == stack]
        if unused is not None:
            ports = [port for port in ports if port.is_unused == unused]
        return [port_detail(port, now) for port in ports]

    def get_port(self, switch_id: str, port_id: str) -> dict[str, object]:
        switch, now = self._snapshot(switch_id)
        return port_detail(switch.get_port(port_id), now)

    def update_port(
        self,
        switch_id: str,
        port_id: str,
        *,
        status: Optional[str] = None,
        details: Optional[str] = None,
        vlan: Optional[int] = None,
        mode: Optional[str] = None,
        description: Optional[str] = None,
        poe: Optional[bool] = None,
        speed: Optional[str] = None,
    ) -> dict[str, object]:
        mutations: list[PortMutation] = []
        if status is not None:
            mutations.append(StatusChange(status=status, details=details or "Manual change via API"))
        fields = FieldUpdate(vlan=vlan, mode=mode, description=description, poe=poe, speed=speed)
        if not fields.is_empty:
            mutations.append(fields)
        with self._mutation(switch_id) as (switch, now):
            previous = switch.get_port(port_id).status
            port = switch.update_port(
                port_id,
                *mutations,
                now=now,
                default_threshold_days=self.settings.unused_threshold_days,
                retention=self.settings.event_retention,
            )
        if port.status != previous:
            logger.info(
                "Port status changed",
                extra={
                    "event": "update_port",
                    "status": "success",
                    "target": switch_id,
                    "port": port_id,
                },
            )
        return port_detail(port, now)

    def review_port(self, switch_id: str, port_id: str, reviewed_by: Optional[str] = None) -> dict[str, object]:
        with self._mutation(switch_id) as (switch, now):
            port = switch.update_port(
                port_id,
                Review(reviewed_by=reviewed_by or "admin"),
                now=now,
                default_threshold_days=self.settings.unused_threshold_days,
                retention=self.settings.event_retention,
            )
        logger.info(
            "Port marked as reviewed",
            extra={"event": "review_port", "status": "success", "target": switch_id, "port": port_id},
        )
        return port_detail(port, now)

    def scan_unused(self, switch_id: str, threshold_days: Optional[float] = None) -> dict[str, object]:
        threshold = validate_threshold(
            threshold_days if threshold_days is not None else self.settings.unused_threshold_days
        )
        # The invariant pass runs after the scan so its flags count as scanned.
        with self._mutation(switch_id, enforce_first=False) as (switch, now):
            flagged = switch.scan_unused(threshold, now)
        logger.info(
            "Unused scan complete",
            extra={"event": "scan_unused", "status": "success", "target": switch_id, "flagged": flagged},
        )
        return {"message": "Scan complete", "flagged": flagged, "threshold_days": threshold}

    def unused_report(self, switch_id: str, min_days: float = 0) -> UnusedReport:
        if min_days < 0:
            raise PortValidationError(f"min_days must not be negative, got {min_days}")
        switch, now = self._snapshot(switch_id)
        return unused_report(switch, now, min_days=min_days)

    def stats(self, switch_id: str) -> SwitchStats:
        switch, now = self._snapshot(switch_id)
        return stats_summary(switch, now)

    def add_stack(self, switch_id: str, *, mock: bool = False, seed: Optional[int] = None) -> Switch:
        with self._mutation(switch_id) as (switch, now):
            stack_id = switch.next_stack_id(self.settings.max_stacks)
            switch.add_ports(self._build_ports([stack_id], now, mock, seed))
            switch.total_stacks = len(switch.stack_ids())
        logger.info(
            "Added stack member %s",
            stack_id,
            extra={"event": "add_stack", "status": "success", "target": switch_id},
        )
        return switch

    def remove_stack(self, switch_id: str, stack_id: int) -> Switch:
        with self._mutation(switch_id) as (switch, _now):
            switch.remove_stack(stack_id)
        logger.info(
            "Removed stack member %s",
            stack_id,
            extra={"event": "remove_stack", "status": "success", "target": switch_id},
        )
        return switch

    def seed(self, seed: Optional[int] = None) -> dict[str, object]:
        removed = self.store.delete_all()
        switch = self.create_switch(
            "SW-CORE-01",
            hostname="core-sw1.lab.local",
            ip_address="192.168.1.1",
            location="Server Room A",
            total_stacks=2,
            mock=True,
            seed=seed,
        )
        unused_count = sum(1 for port in switch.ports if port.is_unused)
        logger.info(
            "Seeded demo switch",
            extra={"event": "seed", "status": "success", "target": switch.id, "entries_count": removed},
        )
        return {
            "message": "Seeded",
            "switch_id": switch.id,
            "ports": len(switch.ports),
            "unused": unused_count,
        }

    def sweep_all(self) -> int:
        """Run the invariant pass over every stored switch.

        Only switches whose flags changed are saved. A switch that fails to
        load or save is logged and skipped so one bad document does not stop
        the sweep.
        """
        total = 0
        for switch_id in self.store.list_ids():
            with self._lock_for(switch_id):
                try:
                    now = self.clock()
                    switch = self.store.load(switch_id)
                    flipped = self._enforce(switch, now)
                    if flipped:
                        switch.updated_at = now
                        self.store.save(switch)
                except SwitchNotFoundError:
                    continue
                except StorageError:
                    logger.warning(
                        "Sweep failed for switch %s",
                        switch_id,
                        extra={"event": "sweep", "status": "error", "target": switch_id, "error_code": "STORAGE_ERROR"},
                        exc_info=True,
                    )
                    continue
            total += flipped
        return total

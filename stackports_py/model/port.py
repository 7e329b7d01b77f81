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

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

PORT_STATUSES = ("up", "down", "disabled")
EVENT_KINDS = ("up", "down", "disabled", "error", "reviewed")
PORT_MODES = ("access", "trunk")
DEFAULT_THRESHOLD_DAYS = 14
DEFAULT_EVENT_RETENTION = 30
PORTS_PER_STACK = 48
MAX_STACKS = 5

_PORT_ID_RE = re.compile(r"^[A-Za-z]+\d+/\d+/\d+$")


@dataclass
class PortEvent:
    timestamp: datetime
    event: str
    details: str = ""


@dataclass
class ErrorCounters:
    rx: int = 0
    tx: int = 0
    crc: int = 0


@dataclass
class MacTableEntry:
    mac: str
    vlan: int
    type: str = "dynamic"


@dataclass
class Port:
    id: str
    stack_id: int
    port_num: int
    status: str = "down"
    is_unused: bool = False
    unused_since: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    unused_threshold_days: Optional[float] = None
    vlan: int = 1
    speed: str = "1000"
    poe: bool = False
    poe_watts: float = 0.0
    mode: str = "access"
    description: str = ""
    uptime: int = 0
    errors: ErrorCounters = field(default_factory=ErrorCounters)
    mac_table: list[MacTableEntry] = field(default_factory=list)
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_rate: int = 0
    tx_rate: int = 0
    events: list[PortEvent] = field(default_factory=list)
    last_changed: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    @property
    def is_up(self) -> bool:
        return self.status == "up"


def port_label(stack_id: int, port_num: int) -> str:
    return f"Gi{stack_id}/0/{port_num}"


def is_valid_port_id(value: str) -> bool:
    return bool(_PORT_ID_RE.fullmatch(value))


def new_port(stack_id: int, port_num: int, now: datetime, status: str = "down") -> Port:
    """Build a freshly provisioned port.

    Tracking fields derive from the initial status: an ``up`` port was seen
    now, anything else has never been seen. Provisioned ports are never
    flagged unused.
    """
    return Port(
        id=port_label(stack_id, port_num),
        stack_id=stack_id,
        port_num=port_num,
        status=status,
        last_seen=now if status == "up" else None,
        events=[PortEvent(timestamp=now, event=status, details="Initial state")],
        last_changed=now,
    )

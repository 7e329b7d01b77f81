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
"""Deterministic synthetic ports for demos and tests.

The same ``seed`` and ``now`` always produce the same ports, and every port
produced satisfies the unused-tracking invariants.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from stackports_py.model.port import (
    PORTS_PER_STACK,
    ErrorCounters,
    MacTableEntry,
    Port,
    PortEvent,
    port_label,
)

VLANS = (1, 10, 20, 30, 100, 200)
SPEEDS = ("10", "100", "1000")
DESCRIPTIONS = ("Workstation", "IP Phone", "AP", "Server", "Printer", "Camera")


def _random_mac(rng: random.Random) -> str:
    return ":".join(f"{rng.randrange(256):02x}" for _ in range(6))


def _days(value: float) -> timedelta:
    return timedelta(days=value)


def generate_port(stack_id: int, port_num: int, rng: random.Random, now: datetime) -> Port:
    roll = rng.random()
    if roll > 0.35:
        status = "up"
    elif roll > 0.15:
        status = "down"
    else:
        status = "disabled"
    is_unused = status == "down" and rng.random() > 0.45
    unused_days_ago = rng.random() * 180 + 14 if is_unused else 0.0
    if status == "up":
        last_seen = now
    elif is_unused:
        last_seen = now - _days(unused_days_ago)
    else:
        last_seen = now - _days(rng.random() * 7)
    is_up = status == "up"
    description = ""
    if rng.random() > 0.5:
        description = f"{rng.choice(DESCRIPTIONS)}-{port_num}"
    mac_table: list[MacTableEntry] = []
    if is_up:
        mac_table = [
            MacTableEntry(mac=_random_mac(rng), vlan=rng.choice(VLANS))
            for _ in range(rng.randrange(1, 4))
        ]
    return Port(
        id=port_label(stack_id, port_num),
        stack_id=stack_id,
        port_num=port_num,
        status=status,
        is_unused=is_unused,
        unused_since=last_seen if is_unused else None,
        last_seen=last_seen,
        vlan=rng.choice(VLANS),
        speed=rng.choice(SPEEDS),
        poe=is_up and rng.random() > 0.45,
        poe_watts=round(rng.random() * 30, 1) if is_up else 0.0,
        mode="access" if rng.random() > 0.3 else "trunk",
        description=description,
        uptime=rng.randrange(30 * 86400) if is_up else 0,
        errors=ErrorCounters(rx=rng.randrange(80), tx=rng.randrange(30), crc=rng.randrange(8)),
        mac_table=mac_table,
        rx_bytes=rng.randrange(10**9) if is_up else 0,
        tx_bytes=rng.randrange(8 * 10**8) if is_up else 0,
        rx_rate=rng.randrange(100) if is_up else 0,
        tx_rate=rng.randrange(80) if is_up else 0,
        events=[
            PortEvent(
                timestamp=now - _days(rng.random() * 7),
                event=status,
                details="Initial state",
            )
        ],
        last_changed=now - _days(rng.random() * 30),
    )


def generate_stack_ports(
    stack_id: int,
    rng: random.Random,
    now: datetime,
    ports_per_stack: int = PORTS_PER_STACK,
) -> list[Port]:
    return [generate_port(stack_id, port_num, rng, now) for port_num in range(1, ports_per_stack + 1)]


def generate_switch_ports(
    stack_ids: list[int],
    seed: int,
    now: datetime,
    ports_per_stack: int = PORTS_PER_STACK,
) -> list[Port]:
    rng = random.Random(seed)
    ports: list[Port] = []
    for stack_id in stack_ids:
        ports.extend(generate_stack_ports(stack_id, rng, now, ports_per_stack))
    return ports

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

import random
from datetime import datetime, timezone

from stackports_py.mock import generate_stack_ports, generate_switch_ports
from stackports_py.model.switch import Switch

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_generator_is_deterministic_for_a_seed():
    first = generate_switch_ports([1, 2], seed=42, now=NOW)
    second = generate_switch_ports([1, 2], seed=42, now=NOW)
    other = generate_switch_ports([1, 2], seed=43, now=NOW)
    assert first == second
    assert first != other


def test_generator_numbers_ports_per_stack():
    ports = generate_stack_ports(3, random.Random(1), NOW)
    assert len(ports) == 48
    assert ports[0].id == "Gi3/0/1"
    assert ports[-1].id == "Gi3/0/48"
    assert {port.stack_id for port in ports} == {3}


def test_generated_ports_satisfy_invariants():
    ports = generate_switch_ports([1, 2, 3], seed=2024, now=NOW)
    for port in ports:
        if port.is_unused:
            assert port.unused_since is not None
            assert port.status == "down"
        if port.status == "up":
            assert port.unused_since is None
            assert port.last_seen == NOW
            assert port.mac_table
        else:
            assert port.poe is False
            assert port.poe_watts == 0.0
            assert port.uptime == 0

    switch = Switch(id="demo", name="demo")
    switch.add_ports(ports)
    assert switch.enforce_invariants(NOW) == 0


def test_generator_produces_a_mix_of_states():
    ports = generate_switch_ports([1, 2, 3], seed=5, now=NOW)
    statuses = {port.status for port in ports}
    assert statuses == {"up", "down", "disabled"}
    assert any(port.is_unused for port in ports)

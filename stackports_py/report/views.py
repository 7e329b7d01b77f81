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
"""Read-only projections over a switch snapshot.

Nothing here is cached or persisted; every view is recomputed from the ports
it is handed, so callers load one snapshot and discard it afterwards.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from stackports_py.model.port import Port
from stackports_py.model.switch import Switch
from stackports_py.tracking.unused import format_duration, unused_days, unused_duration

# (label, lower bound inclusive, upper bound exclusive) in days.
UNUSED_BUCKETS: tuple[tuple[str, float, Optional[float]], ...] = (
    ("<14d", 0.0, 14.0),
    ("14-30d", 14.0, 30.0),
    ("30-90d", 30.0, 90.0),
    ("90d+", 90.0, None),
)


@dataclass
class UnusedPortRow:
    id: str
    stack_id: int
    port_num: int
    vlan: int
    description: str
    unused_since: Optional[datetime]
    last_seen: Optional[datetime]
    unused_duration_ms: Optional[int]
    unused_duration_human: Optional[str]
    unused_days: Optional[int]
    severity: str


@dataclass
class UnusedReport:
    switch_id: str
    switch_name: str
    total_ports: int
    unused_count: int
    unused_percent: float
    unused_ports: list[UnusedPortRow] = field(default_factory=list)


@dataclass
class VlanCount:
    vlan: int
    count: int


@dataclass
class SwitchStats:
    total: int
    up: int
    down: int
    disabled: int
    unused: int
    unused_percent: float
    unused_buckets: dict[str, int]
    poe_active: int
    total_poe_watts: float
    vlan_breakdown: list[VlanCount]


def percent(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(count / total * 100, 1)


def severity(days: Optional[float]) -> str:
    if days is None or days <= 14:
        return "info"
    if days <= 30:
        return "notice"
    if days <= 90:
        return "warning"
    return "critical"


def bucket_for(days: float) -> str:
    for label, low, high in UNUSED_BUCKETS:
        if days >= low and (high is None or days < high):
            return label
    # Negative ages only happen with clock skew; count them as fresh.
    return UNUSED_BUCKETS[0][0]


def unused_buckets(ports: Iterable[Port], now: datetime) -> dict[str, int]:
    counts = {label: 0 for label, _low, _high in UNUSED_BUCKETS}
    for port in ports:
        days = unused_days(port, now)
        if days is None:
            continue
        counts[bucket_for(days)] += 1
    return counts


def vlan_breakdown(ports: Iterable[Port]) -> list[VlanCount]:
    counts: dict[int, int] = {}
    for port in ports:
        counts[port.vlan] = counts.get(port.vlan, 0) + 1
    return [VlanCount(vlan=vlan, count=counts[vlan]) for vlan in sorted(counts)]


def _duration_ms(port: Port, now: datetime) -> Optional[int]:
    duration = unused_duration(port, now)
    if duration is None:
        return None
    return int(duration.total_seconds() * 1000)


def _human(port: Port, now: datetime) -> Optional[str]:
    duration = unused_duration(port, now)
    if duration is None:
        return None
    return format_duration(duration)


def unused_report(switch: Switch, now: datetime, min_days: float = 0) -> UnusedReport:
    """List unused ports, oldest first.

    ``min_days`` drops ports whose unused age is below it; ``0`` keeps all.
    """
    flagged = [port for port in switch.ports if port.is_unused and port.unused_since is not None]
    if min_days:
        flagged = [port for port in flagged if (unused_days(port, now) or 0.0) >= min_days]
    flagged.sort(key=lambda port: port.unused_since)
    rows = []
    for port in flagged:
        days = unused_days(port, now)
        rows.append(
            UnusedPortRow(
                id=port.id,
                stack_id=port.stack_id,
                port_num=port.port_num,
                vlan=port.vlan,
                description=port.description,
                unused_since=port.unused_since,
                last_seen=port.last_seen,
                unused_duration_ms=_duration_ms(port, now),
                unused_duration_human=_human(port, now),
                unused_days=int(days // 1) if days is not None else None,
                severity=severity(days),
            )
        )
    return UnusedReport(
        switch_id=switch.id,
        switch_name=switch.name,
        total_ports=len(switch.ports),
        unused_count=len(rows),
        unused_percent=percent(len(rows), len(switch.ports)),
        unused_ports=rows,
    )


def stats_summary(switch: Switch, now: datetime) -> SwitchStats:
    ports = switch.ports
    flagged = [port for port in ports if port.is_unused]
    return SwitchStats(
        total=len(ports),
        up=sum(1 for port in ports if port.status == "up"),
        down=sum(1 for port in ports if port.status == "down"),
        disabled=sum(1 for port in ports if port.status == "disabled"),
        unused=len(flagged),
        unused_percent=percent(len(flagged), len(ports)),
        unused_buckets=unused_buckets(flagged, now),
        poe_active=sum(1 for port in ports if port.poe),
        total_poe_watts=round(sum(port.poe_watts for port in ports), 1),
        vlan_breakdown=vlan_breakdown(ports),
    )


def port_detail(port: Port, now: datetime) -> dict[str, object]:
    payload = asdict(port)
    payload["unused_duration_ms"] = _duration_ms(port, now)
    payload["unused_duration_human"] = _human(port, now)
    return payload

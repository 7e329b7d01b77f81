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
"""Unused-port lifecycle rules.

Every function here is pure: it takes a :class:`Port` and returns a new one,
leaving the input untouched, so callers can validate and apply a batch of
changes before committing any of them.

A port is *unused* once it is not ``up`` and the time since it was last seen
up, or last reviewed, reaches the threshold. ``unused_since`` is sticky: it
is set once, when the port is first flagged, and only cleared when the port
comes back up or an operator reviews it.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from stackports_py.errors import PortValidationError
from stackports_py.model.port import (
    DEFAULT_EVENT_RETENTION,
    DEFAULT_THRESHOLD_DAYS,
    PORT_STATUSES,
    Port,
    PortEvent,
)

DAY = timedelta(days=1)
# Ports that were never seen up count as idle for this long.
NEVER_SEEN_DAYS = 999.0


def validate_status(status: str) -> str:
    if status not in PORT_STATUSES:
        raise PortValidationError(
            f"Unsupported port status '{status}'; expected one of: {', '.join(PORT_STATUSES)}"
        )
    return status


def validate_threshold(threshold_days: object) -> float:
    if isinstance(threshold_days, bool) or not isinstance(threshold_days, (int, float)):
        raise PortValidationError(f"Threshold must be a number of days, got {threshold_days!r}")
    if not math.isfinite(threshold_days) or threshold_days <= 0:
        raise PortValidationError(f"Threshold must be a finite number of days greater than 0, got {threshold_days}")
    return float(threshold_days)


def validate_retention(retention: int) -> int:
    if isinstance(retention, bool) or not isinstance(retention, int) or retention < 1:
        raise PortValidationError(f"Event retention must be a positive integer, got {retention!r}")
    return retention


def effective_threshold(
    port: Port,
    threshold_days: Optional[float] = None,
    default_days: float = DEFAULT_THRESHOLD_DAYS,
) -> float:
    """Resolve the threshold for ``port``.

    An explicit ``threshold_days`` wins, then the port's own override, then
    ``default_days``.
    """
    if threshold_days is not None:
        return validate_threshold(threshold_days)
    if port.unused_threshold_days is not None:
        return validate_threshold(port.unused_threshold_days)
    return validate_threshold(default_days)


def days_since(then: datetime, now: datetime) -> float:
    return (now - then) / DAY


def idle_since(port: Port) -> Optional[datetime]:
    """Return when the port last showed activity: seen up or reviewed."""
    stamps = [stamp for stamp in (port.last_seen, port.reviewed_at) if stamp is not None]
    return max(stamps) if stamps else None


def _prepend_event(port: Port, event: PortEvent, retention: int) -> list[PortEvent]:
    return [event, *port.events][:retention]


def apply_status_change(
    port: Port,
    new_status: str,
    details: str,
    now: datetime,
    threshold_days: Optional[float] = None,
    retention: int = DEFAULT_EVENT_RETENTION,
) -> Port:
    """Move ``port`` to ``new_status`` and update its unused tracking.

    The engine does not special-case ``new_status == port.status``; callers
    skip unchanged statuses to keep the event log free of duplicates.
    """
    validate_status(new_status)
    threshold = effective_threshold(port, threshold_days)
    validate_retention(retention)
    events = _prepend_event(port, PortEvent(timestamp=now, event=new_status, details=details), retention)

    if new_status == "up":
        last_seen = port.last_seen
        if last_seen is None or now >= last_seen:
            last_seen = now
        return replace(
            port,
            status=new_status,
            last_changed=now,
            events=events,
            is_unused=False,
            unused_since=None,
            last_seen=last_seen,
            uptime=0,
        )

    reference = idle_since(port)
    idle_days = days_since(reference, now) if reference else NEVER_SEEN_DAYS
    is_unused = port.is_unused
    unused_since = port.unused_since
    if idle_days >= threshold:
        is_unused = True
        unused_since = port.unused_since or reference or now
    return replace(
        port,
        status=new_status,
        last_changed=now,
        events=events,
        is_unused=is_unused,
        unused_since=unused_since,
        uptime=0,
    )


def rescan(
    port: Port,
    now: datetime,
    threshold_days: Optional[float] = None,
    default_days: float = DEFAULT_THRESHOLD_DAYS,
) -> tuple[Port, bool]:
    """Re-evaluate ``port`` from elapsed time alone.

    Returns the (possibly unchanged) port and whether ``is_unused`` flipped.
    Ports that were never seen up or reviewed are left alone; only a status
    change can flag those.
    """
    threshold = effective_threshold(port, threshold_days, default_days)
    if port.status == "up":
        if port.is_unused or port.unused_since is not None:
            return replace(port, is_unused=False, unused_since=None), port.is_unused
        return port, False
    reference = idle_since(port)
    if reference is None or port.is_unused:
        return port, False
    if days_since(reference, now) >= threshold:
        return replace(port, is_unused=True, unused_since=port.unused_since or reference), True
    return port, False


def review(
    port: Port,
    reviewed_by: Optional[str],
    now: datetime,
    retention: int = DEFAULT_EVENT_RETENTION,
) -> Port:
    """Clear the unused flag after an operator looked at the port.

    The operational status is left as it is; the log records a ``reviewed``
    event rather than a status transition.
    """
    validate_retention(retention)
    reviewer = (reviewed_by or "").strip() or "admin"
    event = PortEvent(timestamp=now, event="reviewed", details=f"Marked as reviewed by {reviewer}")
    return replace(
        port,
        is_unused=False,
        unused_since=None,
        reviewed_at=now,
        events=_prepend_event(port, event, retention),
    )


def unused_duration(port: Port, now: datetime) -> Optional[timedelta]:
    if not port.is_unused or port.unused_since is None:
        return None
    return now - port.unused_since


def unused_days(port: Port, now: datetime) -> Optional[float]:
    duration = unused_duration(port, now)
    if duration is None:
        return None
    return duration / DAY


def format_duration(duration: timedelta) -> str:
    total_minutes = int(duration.total_seconds() // 60)
    if total_minutes <= 0:
        return "0m"
    days, remainder = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(remainder, 60)
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"

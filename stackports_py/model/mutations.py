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

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class StatusChange:
    status: str
    details: str = "Manual change via API"


@dataclass(frozen=True)
class FieldUpdate:
    """Descriptive fields only; ``None`` leaves a field untouched."""

    vlan: Optional[int] = None
    mode: Optional[str] = None
    description: Optional[str] = None
    poe: Optional[bool] = None
    speed: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.vlan, self.mode, self.description, self.poe, self.speed)
        )


@dataclass(frozen=True)
class Review:
    reviewed_by: str = "admin"


PortMutation = Union[StatusChange, FieldUpdate, Review]

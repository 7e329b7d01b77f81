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

import math
from pathlib import Path

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stackports_py.model.port import (
    DEFAULT_EVENT_RETENTION,
    DEFAULT_THRESHOLD_DAYS,
    MAX_STACKS,
    PORTS_PER_STACK,
)


class SiteConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STACKPORTS_")

    data_directory: Path = Path("data")
    unused_threshold_days: float = DEFAULT_THRESHOLD_DAYS
    event_retention: int = DEFAULT_EVENT_RETENTION
    ports_per_stack: int = Field(default=PORTS_PER_STACK, ge=1, le=96)
    max_stacks: int = Field(default=MAX_STACKS, ge=1, le=MAX_STACKS)
    sweep_interval_seconds: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_tracking(self) -> "SiteConfig":
        errors: list[str] = []
        if not math.isfinite(self.unused_threshold_days) or self.unused_threshold_days <= 0:
            errors.append(f"unused_threshold_days must be greater than 0, got {self.unused_threshold_days}")
        if self.event_retention < 1:
            errors.append(f"event_retention must be at least 1, got {self.event_retention}")
        if errors:
            raise ValueError("; ".join(errors))
        return self

    @classmethod
    def load(cls, path: Path) -> "SiteConfig":
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError("Config file must contain a YAML mapping at the top level.")
        return cls(**raw)


def default_config_path() -> Path:
    return Path("site.yml")

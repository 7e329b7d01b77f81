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


class NotFoundError(LookupError):
    pass


class SwitchNotFoundError(NotFoundError):
    def __init__(self, switch_id: str) -> None:
        super().__init__(f"Switch not found: {switch_id}")
        self.switch_id = switch_id


class PortNotFoundError(NotFoundError):
    def __init__(self, port_id: str, switch_id: str | None = None) -> None:
        where = f" on switch {switch_id}" if switch_id else ""
        super().__init__(f"Port not found: {port_id}{where}")
        self.port_id = port_id
        self.switch_id = switch_id


class PortValidationError(ValueError):
    pass


class StorageError(RuntimeError):
    pass

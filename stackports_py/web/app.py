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

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Optional

from pydantic import BaseModel, ConfigDict

from stackports_py.errors import NotFoundError, PortValidationError, StorageError
from stackports_py.model.switch import Switch
from stackports_py.service import InventoryService

logger = logging.getLogger(__name__)

_MISSING_EXTRA = "Inventory server requires optional dependencies. Install with: pip install -e .[server]"


class CreateSwitchRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    hostname: Optional[str] = None
    ip_address: Optional[str] = None
    location: Optional[str] = None
    model: Optional[str] = None
    total_stacks: int = 1
    mock: bool = False
    seed: Optional[int] = None


class PortUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[str] = None
    details: Optional[str] = None
    vlan: Optional[int] = None
    mode: Optional[str] = None
    description: Optional[str] = None
    poe: Optional[bool] = None
    speed: Optional[str] = None


class ReviewRequest(BaseModel):
    reviewed_by: Optional[str] = None


class ScanRequest(BaseModel):
    threshold_days: Optional[float] = None


class AddStackRequest(BaseModel):
    mock: bool = False
    seed: Optional[int] = None


class SeedRequest(BaseModel):
    seed: Optional[int] = None


def switch_summary(switch: Switch) -> dict[str, object]:
    payload = asdict(switch)
    payload.pop("ports")
    payload["port_count"] = len(switch.ports)
    return payload


class InventoryServer:
    def __init__(
        self,
        service: InventoryService,
        host: str,
        port: int,
        sweep_interval_seconds: int = 0,
    ) -> None:
        self.service = service
        self.host = host
        self.port = port
        self.sweep_interval_seconds = sweep_interval_seconds

    async def sweep(self) -> int:
        flipped = await asyncio.to_thread(self.service.sweep_all)
        if flipped:
            logger.info(
                "Periodic sweep changed unused flags",
                extra={"event": "sweep", "status": "changed", "flagged": flipped},
            )
        return flipped

    def build_app(self):
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore[import-not-found]
            from fastapi import FastAPI, Query, Request  # type: ignore[import-not-found]
            from fastapi.exceptions import RequestValidationError  # type: ignore[import-not-found]
            from fastapi.responses import JSONResponse  # type: ignore[import-not-found]
        except ModuleNotFoundError as exc:
            raise RuntimeError(_MISSING_EXTRA) from exc

        service = self.service

        @asynccontextmanager
        async def lifespan(_app):
            scheduler = None
            if self.sweep_interval_seconds > 0:
                scheduler = AsyncIOScheduler(timezone="UTC")
                scheduler.add_job(
                    self.sweep,
                    "interval",
                    seconds=self.sweep_interval_seconds,
                    id="unused_sweep",
                    max_instances=1,
                    coalesce=True,
                )
                scheduler.start()
                logger.info("Unused-port sweep scheduled every %ss", self.sweep_interval_seconds)
            try:
                yield
            finally:
                if scheduler is not None:
                    scheduler.shutdown(wait=False)

        app = FastAPI(title="stackports", lifespan=lifespan)

        @app.exception_handler(NotFoundError)
        async def handle_not_found(_request: Request, exc: NotFoundError):
            return JSONResponse({"error": str(exc)}, status_code=404)

        @app.exception_handler(PortValidationError)
        async def handle_validation(_request: Request, exc: PortValidationError):
            return JSONResponse({"error": str(exc)}, status_code=400)

        @app.exception_handler(RequestValidationError)
        async def handle_bad_request(_request: Request, exc: RequestValidationError):
            problems = [
                f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
                for error in exc.errors()
            ]
            return JSONResponse({"error": "; ".join(problems) or "Invalid request"}, status_code=400)

        @app.exception_handler(StorageError)
        async def handle_storage(_request: Request, exc: StorageError):
            logger.error("Storage failure: %s", exc, extra={"event": "storage", "status": "error"})
            return JSONResponse({"error": str(exc)}, status_code=503)

        @app.get("/api/switches")
        def list_switches():
            return [switch_summary(switch) for switch in service.list_switches()]

        @app.post("/api/switches", status_code=201)
        def create_switch(body: CreateSwitchRequest):
            switch = service.create_switch(
                body.name,
                hostname=body.hostname,
                ip_address=body.ip_address,
                location=body.location,
                model=body.model,
                total_stacks=body.total_stacks,
                mock=body.mock,
                seed=body.seed,
            )
            return asdict(switch)

        @app.get("/api/switches/{switch_id}")
        def get_switch(switch_id: str):
            return asdict(service.get_switch(switch_id))

        @app.delete("/api/switches/{switch_id}")
        def delete_switch(switch_id: str):
            service.delete_switch(switch_id)
            return {"message": "Switch deleted", "switch_id": switch_id}

        @app.get("/api/switches/{switch_id}/ports")
        def list_ports(
            switch_id: str,
            status: Optional[str] = None,
            vlan: Optional[int] = None,
            stack: Optional[int] = None,
            unused: Optional[bool] = None,
        ):
            return service.list_ports(switch_id, status=status, vlan=vlan, stack=stack, unused=unused)

        @app.post("/api/switches/{switch_id}/ports/{port_id:path}/reviewed")
        def review_port(switch_id: str, port_id: str, body: Optional[ReviewRequest] = None):
            reviewed_by = body.reviewed_by if body else None
            port = service.review_port(switch_id, port_id, reviewed_by)
            return {"message": "Port marked as reviewed", "port": port}

        @app.get("/api/switches/{switch_id}/ports/{port_id:path}")
        def get_port(switch_id: str, port_id: str):
            return service.get_port(switch_id, port_id)

        @app.patch("/api/switches/{switch_id}/ports/{port_id:path}")
        def update_port(switch_id: str, port_id: str, body: PortUpdateRequest):
            return service.update_port(switch_id, port_id, **body.model_dump())

        @app.get("/api/switches/{switch_id}/unused")
        def unused_report(switch_id: str, min_days: float = Query(0, ge=0)):
            return asdict(service.unused_report(switch_id, min_days=min_days))

        @app.post("/api/switches/{switch_id}/scan-unused")
        def scan_unused(switch_id: str, body: Optional[ScanRequest] = None):
            threshold = body.threshold_days if body else None
            return service.scan_unused(switch_id, threshold)

        @app.get("/api/switches/{switch_id}/stats")
        def stats(switch_id: str):
            return asdict(service.stats(switch_id))

        @app.post("/api/switches/{switch_id}/stacks", status_code=201)
        def add_stack(switch_id: str, body: Optional[AddStackRequest] = None):
            body = body or AddStackRequest()
            return switch_summary(service.add_stack(switch_id, mock=body.mock, seed=body.seed))

        @app.delete("/api/switches/{switch_id}/stacks/{stack_id}")
        def remove_stack(switch_id: str, stack_id: int):
            return switch_summary(service.remove_stack(switch_id, stack_id))

        @app.post("/api/seed")
        def seed(body: Optional[SeedRequest] = None):
            return service.seed(body.seed if body else None)

        return app

    def serve(self) -> None:
        try:
            import uvicorn  # type: ignore[import-not-found]
        except ModuleNotFoundError as exc:
            raise RuntimeError(_MISSING_EXTRA) from exc
        app = self.build_app()
        logger.info("Serving port inventory API at http://%s:%s/api/switches", self.host, self.port)
        uvicorn.run(app, host=self.host, port=self.port)

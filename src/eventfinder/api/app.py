# src/eventfinder/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and owns the lifetime of the single
`EventFinderController` the routes operate on. The controller acquires the
location and loads the first event list during startup.
Business logic lives in `eventfinder.api.routes`, `eventfinder.app` and `eventfinder.events`.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from eventfinder.core.logging import configure_logging

from . import routes

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    controller = routes.build_controller()
    app.state.controller = controller
    await controller.start()
    yield


app = FastAPI(title="EventFinder API", version="0.1.0", lifespan=lifespan)

# CORS (dev-friendly): allow local frontends (e.g. an Expo dev server) to call this API.
# Configure via env:
# - EVENTFINDER_CORS_ORIGINS="http://localhost:8081,http://127.0.0.1:8081"
# - EVENTFINDER_CORS_ALLOW_LOCAL=0 to disable the default localhost allowance
cors_origins = [s.strip() for s in os.getenv("EVENTFINDER_CORS_ORIGINS", "").split(",") if s.strip()]
cors_allow_local = os.getenv("EVENTFINDER_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes", "y"}
cors_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if cors_allow_local and not cors_origins else ""
if cors_origins or cors_origin_regex:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=cors_origin_regex or None,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(routes.router)

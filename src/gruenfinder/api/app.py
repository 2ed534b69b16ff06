# src/gruenfinder/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and loads the catalog on startup. Request handling
lives in `gruenfinder.api.routes`; search logic lives in `gruenfinder.search`.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from gruenfinder.core.logging import configure_logging

from . import routes

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    await routes.loaded_session()
    yield


app = FastAPI(title="GruenFinder API", version="0.1.0", lifespan=lifespan)

# The map front end is served separately; allow it to call this API.
# - GRUENFINDER_CORS_ORIGINS="http://localhost:8000,http://127.0.0.1:8000"
cors_origins = [s.strip() for s in os.getenv("GRUENFINDER_CORS_ORIGINS", "").split(",") if s.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=None if cors_origins else r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes.router)

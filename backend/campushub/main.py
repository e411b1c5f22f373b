"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campushub.api import admin, clubs, leaderboard, members, ops, registration
from campushub.api.errors import install_error_handlers
from campushub.infra import postgres
from campushub.obs import init as obs_init
from campushub.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="CampusHub API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True. Replace '*' with explicit origins.
if "*" in allow_origins:
	allow_origins = ["http://localhost:3000", "http://127.0.0.1:3000"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)

app.include_router(registration.router, tags=["registration"])
app.include_router(admin.router, tags=["admin"])
app.include_router(leaderboard.router, tags=["leaderboard"])
app.include_router(members.router, tags=["members"])
app.include_router(clubs.router, tags=["clubs"])
app.include_router(ops.router, tags=["ops"])

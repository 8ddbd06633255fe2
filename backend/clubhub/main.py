"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clubhub.api import ops
from clubhub.api.errors import install_error_handlers
from clubhub.api.middleware_request_id import RequestIdMiddleware
from clubhub.clubs.api import router as clubs_router
from clubhub.infra import postgres
from clubhub.obs import init as obs_init
from clubhub.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="Campus Clubs API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True.
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

# Ensure every request carries an X-Request-Id and make it available on request.state
app.add_middleware(RequestIdMiddleware)

app.include_router(ops.router)
app.include_router(clubs_router)


if __name__ == "__main__":
	import uvicorn

	uvicorn.run("clubhub.main:app", host="0.0.0.0", port=8000, reload=settings.is_dev())

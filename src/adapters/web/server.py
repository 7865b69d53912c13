"""FastAPI application factory and startup wiring."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import discord
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from src.adapters.discord.session import DiscordSession
from src.adapters.storage.json_store import JsonRecordStore
from src.adapters.web.auth import StaffDirectory, auth_router
from src.adapters.web.routes import api_router
from src.config import AppConfig
from src.domain.errors import DashboardError
from src.domain.gateway import MessageGateway
from src.ports.outbound import ChatSessionPort, RecordStorePort


def _log(msg: str):
    print(msg, file=sys.stderr)


async def _dashboard_error(request: Request, exc: DashboardError) -> JSONResponse:
    if exc.status_code >= 500:
        _log(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _describe_invalid_field(error: dict) -> str:
    # loc looks like ("body", "content"); drop the leading "body"
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    message = error.get("msg", "invalid value")
    return f"{'.'.join(loc)}: {message}" if loc else message


async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(_describe_invalid_field(e) for e in exc.errors())
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})


def create_app(
    config: Optional[AppConfig] = None,
    session: Optional[ChatSessionPort] = None,
    store: Optional[RecordStorePort] = None,
) -> FastAPI:
    """Build the dashboard app.

    ``session`` and ``store`` default to a real Discord client and the JSON
    file named in the config; tests pass doubles instead.
    """
    config = config or AppConfig.from_env()
    if session is None:
        session = DiscordSession()
    if store is None:
        store = JsonRecordStore(config.messages_file)

    if not config.session.has_explicit_secret:
        _log("SESSION_SECRET not set. Using temporary secret for development.")

    app = FastAPI(title="Discord Staff Dashboard")
    app.state.config = config
    app.state.session = session
    app.state.gateway = MessageGateway(session, store)
    app.state.staff = StaffDirectory(config.staff)
    app.state.discord_task = None

    app.add_middleware(
        SessionMiddleware,
        secret_key=config.session_secret(),
        max_age=config.session.max_age_seconds,
        same_site="lax",
        https_only=config.is_production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DashboardError, _dashboard_error)
    app.add_exception_handler(RequestValidationError, _invalid_request)

    app.include_router(auth_router)
    app.include_router(api_router)

    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    @app.on_event("startup")
    async def startup_event():
        _log("Discord staff dashboard starting")
        if not isinstance(session, discord.Client):
            return
        if not config.discord.is_configured:
            _log("DISCORD_BOT_TOKEN not found. Please add your bot token to continue.")
            _log("The web interface will still work, but Discord functionality will be limited.")
            return

        async def _start_discord():
            try:
                await session.start(config.discord.token)
            except Exception as e:
                _log(f"Failed to login to Discord: {e}")

        _log("Starting Discord bot...")
        app.state.discord_task = asyncio.create_task(_start_discord())

    @app.on_event("shutdown")
    async def shutdown_event():
        if isinstance(session, discord.Client) and not session.is_closed():
            await session.close()
        task = app.state.discord_task
        if task is not None:
            task.cancel()
            app.state.discord_task = None

    return app

from __future__ import annotations

import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional

import socketio
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings
from .interfaces import build_interface_map
from .logs import setup_logging
from .snapshot import build_snapshot, describe_request

log = logging.getLogger(__name__)

ENV_EVENT = "env"


class PrettyJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


class EnvResponder:
    """Plain ASGI endpoint, so the route accepts every method, custom verbs included."""

    async def __call__(self, scope, receive, send) -> None:
        request = Request(scope, receive)
        info = describe_request(request)
        log.info("%s %s", info.method, info.url)
        snapshot = build_snapshot(request.app.state.ips, info)
        response = PrettyJSONResponse(snapshot.model_dump(exclude_none=True))
        await response(scope, receive, send)


def report_startup(settings: Settings, ips: Mapping[str, str]) -> None:
    lines = ["Current Environment", "-------------------"]
    lines += [f"  {key}: {value}" for key, value in os.environ.items()]
    lines += ["", "Current IPs", "-----------"]
    lines += [f"  {name}: {address}" for name, address in ips.items()]
    log.info("\n".join(lines))
    log.info("Starting server on port %d", settings.port)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    report_startup(app.state.settings, app.state.ips)
    yield


def create_api(settings: Settings, ips: Mapping[str, str]) -> FastAPI:
    # No docs routes: every HTTP path belongs to the catch-all below
    api = FastAPI(
        title="envinfo",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    api.state.settings = settings
    api.state.ips = ips
    api.add_route("/{full_path:path}", EnvResponder(), include_in_schema=False)
    return api


def create_socket_server(ips: Mapping[str, str]) -> socketio.AsyncServer:
    sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")

    @sio.event
    async def connect(sid, environ):
        log.debug("Socket client %s connected from %s", sid, environ.get("REMOTE_ADDR", "-"))

    @sio.on(ENV_EVENT)
    async def env(sid, *args):
        snapshot = build_snapshot(ips)
        await sio.emit(ENV_EVENT, snapshot.model_dump(exclude_none=True), to=sid)

    return sio


def create_app(settings: Optional[Settings] = None) -> socketio.ASGIApp:
    """Build the ASGI application: Socket.IO under ``settings.socket_path``, FastAPI elsewhere.

    Network interfaces are enumerated here, once, and shared by both surfaces.
    """
    settings = settings or Settings.from_env()
    ips = build_interface_map()
    api = create_api(settings, ips)
    sio = create_socket_server(ips)
    return socketio.ASGIApp(sio, other_asgi_app=api, socketio_path=settings.socket_path)


def asgi() -> socketio.ASGIApp:
    """Factory for ``uvicorn --factory envinfo.main:asgi``."""
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    return create_app(settings)


def run() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()

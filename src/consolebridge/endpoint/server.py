"""FastAPI server exposing the console over a WebSocket.

    WS   /            <- {"type": "init", "project": "cpu-scheduler"}
                      <- {"type": "input", "content": "run"}
                      -> {"type": "system" | "output" | "error", "content": "..."}
    GET  /            -> service information
    GET  /health      -> liveness, uptime, memory, connection count
    GET  /websocket   -> WebSocket URL and supported project ids

The WebSocket handler is a thin adapter: it feeds frames to the
SessionManager and drains the connection's outbound queue.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from consolebridge import __version__
from consolebridge.config.settings import Settings, load_settings
from consolebridge.console.manager import SessionManager
from consolebridge.domain.models import OutboundMessage
from consolebridge.projects.registry import ProjectRegistry, build_registry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class ServiceInfo(BaseModel):
    status: str = "Console Bridge Running"
    websocket: str
    timestamp: datetime
    environment: str
    service: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime
    uptime: float = Field(description="Seconds since the server started")
    memory_mb: float
    connections: int


class WebSocketInfo(BaseModel):
    websocket_url: str
    supported_projects: list[str]
    instructions: str = (
        "Connect via WebSocket and send JSON messages with type and content"
    )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(
    settings: Settings | None = None,
    registry: ProjectRegistry | None = None,
    manager: SessionManager | None = None,
) -> FastAPI:
    """Create the console bridge application.

    Args:
        settings: Server configuration. Defaults to ``Settings()``.
        registry: Optional pre-built project registry (for testing).
        manager: Optional pre-built session manager (for testing). When
            given, ``registry`` is ignored.
    """
    settings = settings or Settings()
    if manager is None:
        manager = SessionManager(registry or build_registry(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Console bridge started (environment=%s, projects=%s)",
            settings.server.environment,
            ", ".join(app.state.manager.registry.ids()),
        )
        yield
        logger.info("Shutting down, closing %d connection(s)", app.state.manager.connection_count)
        await app.state.manager.shutdown(grace=settings.processes.shutdown_grace)
        logger.info("Console bridge stopped")

    app = FastAPI(
        title="consolebridge",
        description="Real-time console bridge for project demos",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.manager = manager
    app.state.settings = settings

    if settings.server.environment == "production":
        origins = list(settings.server.allowed_origins)
    else:
        origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def service_info(request: Request) -> ServiceInfo:
        return ServiceInfo(
            websocket=_websocket_url(request),
            timestamp=datetime.now(timezone.utc),
            environment=settings.server.environment,
            service=settings.server.service_name,
        )

    @app.get("/health")
    async def health_check() -> HealthResponse:
        stats = app.state.manager.stats()
        return HealthResponse(
            timestamp=datetime.now(timezone.utc),
            uptime=stats.uptime_seconds,
            memory_mb=round(stats.memory_mb, 1),
            connections=stats.connections,
        )

    @app.get("/websocket")
    async def websocket_info(request: Request) -> WebSocketInfo:
        return WebSocketInfo(
            websocket_url=_websocket_url(request),
            supported_projects=app.state.manager.registry.ids(),
        )

    @app.websocket("/")
    async def console_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        mgr: SessionManager = app.state.manager
        outbox: asyncio.Queue[OutboundMessage | None] = asyncio.Queue()
        connection_id = mgr.on_connect(outbox.put_nowait)
        sender = asyncio.create_task(_drain_outbox(websocket, outbox, mgr, connection_id))

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                payload = frame.get("text")
                if payload is None:
                    payload = frame.get("bytes") or b""
                await mgr.on_message(connection_id, payload)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            mgr.on_error(connection_id, e)
        finally:
            mgr.on_disconnect(connection_id)
            outbox.put_nowait(None)
            await sender

    return app


async def _drain_outbox(
    websocket: WebSocket,
    outbox: asyncio.Queue[OutboundMessage | None],
    manager: SessionManager,
    connection_id: str,
) -> None:
    """Send queued messages in order until the ``None`` sentinel arrives."""
    while True:
        message = await outbox.get()
        if message is None:
            return
        try:
            await websocket.send_text(message.model_dump_json())
        except Exception as e:
            # Connection is gone; the receive loop will report the disconnect
            manager.on_error(connection_id, e)
            return


def _websocket_url(request: Request) -> str:
    scheme = "wss" if request.url.scheme == "https" else "ws"
    return f"{scheme}://{request.url.netloc}"


def main() -> None:
    """Entry point for running the server standalone."""
    settings = load_settings()
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        access_log=settings.logging.access_log,
    )


if __name__ == "__main__":
    main()

"""HTTP Listener: binds the socket and runs uvicorn on the current event loop.

Invariants:
    - start_listener returns only once uvicorn reports started (socket accepting)
    - A bind failure raises OSError from start_listener itself, never SystemExit
    - The serve task is owned by HttpListener; stop() ends it and waits for it

Design Decisions:
    - The socket is bound here and handed to Server.serve(sockets=...) so that
      bind errors surface as exceptions the orchestrator can report
    - lifespan="off": the FastAPI app has no startup hooks of its own
"""

import asyncio
import logging
import socket
from dataclasses import dataclass

import uvicorn
from fastapi import FastAPI

from catalog.config import Settings

logger = logging.getLogger(__name__)

_STARTED_POLL_SECONDS = 0.01


@dataclass
class HttpListener:
    """A running uvicorn server and the task serving it."""
    server: uvicorn.Server
    serve_task: asyncio.Task
    host: str
    port: int

    async def wait_closed(self) -> None:
        await self.serve_task

    async def stop(self) -> None:
        self.server.should_exit = True
        if not self.serve_task.done():
            await self.serve_task


def bind_socket(host: str, port: int) -> socket.socket:
    """Create a bound TCP socket; asyncio calls listen() when serving starts."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


async def start_listener(app: FastAPI, settings: Settings) -> HttpListener:
    """Bind the listener and begin accepting connections."""
    sock = bind_socket(settings.http_host, settings.http_port)
    host, port = sock.getsockname()[:2]
    config = uvicorn.Config(
        app,
        lifespan="off",
        log_config=None,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    serve_task = asyncio.create_task(server.serve(sockets=[sock]), name="http-serve")

    try:
        while not server.started:
            if serve_task.done():
                sock.close()
                serve_task.result()
                raise RuntimeError("HTTP server exited before it started")
            await asyncio.sleep(_STARTED_POLL_SECONDS)
    except asyncio.CancelledError:
        server.should_exit = True
        raise

    logger.info(
        f"HTTP server listening on port {port}",
        extra={"subsystem": "http", "port": port},
    )
    return HttpListener(server=server, serve_task=serve_task, host=host, port=port)

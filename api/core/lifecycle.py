"""
Process lifecycle: Starting -> Connecting -> Verifying -> Serving -> Draining -> Stopped.

`Lifecycle` opens and verifies the database before the listener binds, and
closes it after the drain. `LifecycleServer` is the uvicorn server that
flips the lifecycle to Draining when a termination signal arrives; uvicorn
then stops accepting, waits up to `SHUTDOWN_TIMEOUT_S` for in-flight
requests and cancels whatever is still running.
"""

from __future__ import annotations

import enum
import logging
import socket
from types import FrameType
from typing import Awaitable, Callable

import uvicorn

from core import db
from core.errors import PersistenceError, UnavailableError
from hello.repository import MessageStore

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT_S = 10


class StartupError(RuntimeError):
    pass


class State(str, enum.Enum):
    STARTING = "starting"
    CONNECTING = "connecting"
    VERIFYING = "verifying"
    SERVING = "serving"
    DRAINING = "draining"
    STOPPED = "stopped"


_TRANSITIONS: dict[State, set[State]] = {
    State.STARTING: {State.CONNECTING, State.STOPPED},
    State.CONNECTING: {State.VERIFYING, State.STOPPED},
    State.VERIFYING: {State.SERVING, State.STOPPED},
    State.SERVING: {State.DRAINING},
    State.DRAINING: {State.STOPPED},
    State.STOPPED: set(),
}


class Lifecycle:
    def __init__(
        self,
        dsn: str,
        *,
        connect: Callable[[str], Awaitable[db.Database]] = db.connect,
    ) -> None:
        self._dsn = dsn
        self._connect = connect
        self._database: db.Database | None = None
        self.state = State.STARTING

    def _advance(self, target: State) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal lifecycle transition: {self.state.value} -> {target.value}")
        logger.info("lifecycle_state from=%s to=%s", self.state.value, target.value)
        self.state = target

    async def start(self) -> MessageStore:
        """
        Connect, ping and prepare the schema. Returns the store to serve with.

        Raises StartupError on any failure; nothing is left open in that case.
        """
        self._advance(State.CONNECTING)
        try:
            database = await self._connect(self._dsn)
        except db.DatabaseError as exc:
            raise StartupError(f"Database connection failed: {exc}") from exc
        self._database = database

        self._advance(State.VERIFYING)
        store = MessageStore(database)
        try:
            await store.ping()
        except UnavailableError as exc:
            await self._close_database()
            raise StartupError(f"Database ping failed: {exc.__cause__}") from exc
        logger.info("Database connection OK")

        try:
            await store.ensure_schema()
        except PersistenceError as exc:
            await self._close_database()
            raise StartupError(f"Schema setup failed: {exc.__cause__}") from exc
        return store

    def mark_serving(self) -> None:
        self._advance(State.SERVING)

    def begin_drain(self) -> None:
        if self.state is State.SERVING:
            logger.info("Shutting down server gracefully... timeout_s=%s", SHUTDOWN_TIMEOUT_S)
            self._advance(State.DRAINING)

    async def stop(self) -> None:
        if self.state is State.STOPPED:
            return
        self.begin_drain()
        await self._close_database()
        self._advance(State.STOPPED)
        logger.info("Server stopped")

    async def _close_database(self) -> None:
        if self._database is None:
            return
        database, self._database = self._database, None
        try:
            await database.close()
        except Exception:
            logger.exception("database_close_failed")


class LifecycleServer(uvicorn.Server):
    def __init__(self, config: uvicorn.Config, lifecycle: Lifecycle) -> None:
        super().__init__(config)
        self.lifecycle = lifecycle

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        # Not started when the lifespan failed.
        if self.started and not self.should_exit:
            self.lifecycle.mark_serving()

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        self.lifecycle.begin_drain()
        super().handle_exit(sig, frame)


def server_config(app, *, host: str, port: int) -> uvicorn.Config:
    return uvicorn.Config(
        app,
        host=host,
        port=port,
        lifespan="on",
        log_config=None,
        timeout_graceful_shutdown=SHUTDOWN_TIMEOUT_S,
    )

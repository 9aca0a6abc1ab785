from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from core import settings
from core.errors import register_error_handlers
from core.lifecycle import Lifecycle, LifecycleServer, StartupError, server_config
from core.log import configure_logging
from core.middleware import RequestLoggingMiddleware
from hello import router as hello_router
from hello import service as hello_service
from hello.dependencies import get_store
from hello.repository import MessageStore

logger = logging.getLogger(__name__)


def create_app(lifecycle: Lifecycle | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        lc = lifecycle
        if lc is None:
            # Started as `uvicorn main:app`: settings come from the environment and
            # there is no LifecycleServer to report the bind.
            settings.load_env()
            lc = Lifecycle(settings.database_url())
        try:
            app.state.store = await lc.start()
        except StartupError:
            await lc.stop()
            raise
        if lifecycle is None:
            lc.mark_serving()
        try:
            yield
        finally:
            app.state.store = None
            await lc.stop()

    app = FastAPI(title="hello-api", lifespan=lifespan)
    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)

    app.include_router(hello_router.router, tags=["hello"])

    @app.get("/health")
    async def health(store: MessageStore = Depends(get_store)) -> dict:
        result = await hello_service.health(store)
        return {"data": result.model_dump()}

    return app


app = create_app()


def run() -> int:
    """
    Serve until SIGINT/SIGTERM. Returns the process exit code.
    """
    settings.load_env()
    configure_logging(settings.log_level())

    try:
        dsn = settings.database_url()
        port = settings.port()
    except settings.SettingsError as exc:
        logger.critical("%s", exc)
        return 1
    host = settings.host()

    lifecycle = Lifecycle(dsn)
    config = server_config(create_app(lifecycle), host=host, port=port)
    server = LifecycleServer(config, lifecycle)

    logger.info("Server starting on %s:%s", host, port)
    server.run()
    if not server.started:
        logger.error("Server failed to start")
        return 1
    return 0


def cli() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    cli()

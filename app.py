from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from routers.rooms import rooms_router
from routers.views import views_router
from backend import RoomRegistry, SessionRouter
from connections import ConnectionManager
from dispatcher import MessageDispatcher
from lifecycle import ConnectionLifecycle
from relay import RelayChannel
from constants import LOG_FILE, LOG_LEVEL, STATIC_DIR, SWEEP_INTERVAL_SECONDS
from logging_config import get_logger, setup_logging
import asyncio
import os

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


async def run_expiry_sweeps(lifecycle: ConnectionLifecycle, interval: float):
    """Background task that periodically removes rooms past their maximum age."""
    logger.info(f"Starting room expiry sweeps every {interval} seconds")
    try:
        while True:
            await asyncio.sleep(interval)
            try:
                lifecycle.sweep_expired()
            except Exception as e:
                logger.error(f"Error during room expiry sweep: {e}", exc_info=True)
    except asyncio.CancelledError:
        logger.info("Room expiry sweep task cancelled")
        raise


def create_app(registry: RoomRegistry = None, connections: ConnectionManager = None,
               sweep_interval: float = SWEEP_INTERVAL_SECONDS, static_dir: str = STATIC_DIR) -> FastAPI:
    # Both define __len__, so an empty injected instance is falsy
    if registry is None:
        registry = RoomRegistry()
    if connections is None:
        connections = ConnectionManager()
    router = SessionRouter(registry)
    relay = RelayChannel(router, connections)
    lifecycle = ConnectionLifecycle(router, connections)
    dispatcher = MessageDispatcher(router, relay, connections)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweep_task = asyncio.create_task(run_expiry_sweeps(lifecycle, sweep_interval))
        try:
            yield
        finally:
            sweep_task.cancel()
            try:
                await sweep_task
            except asyncio.CancelledError:
                pass

    app = FastAPI(lifespan=lifespan)

    # Configure CORS to allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.registry = registry
    app.state.router = router
    app.state.connections = connections
    app.state.lifecycle = lifecycle
    app.state.static_dir = static_dir

    app.include_router(rooms_router)
    app.include_router(views_router)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """One socket per browser tab, game or controller.

        Frames are JSON: {"event": ..., "id": optional request id, "data": optional payload}.
        """
        connection_id = await connections.connect(websocket)
        try:
            while True:
                data = await websocket.receive_text()
                dispatcher.dispatch(connection_id, data)
        except WebSocketDisconnect:
            logger.debug(f"WebSocket closed by client {connection_id}")
        except Exception as e:
            logger.error(f"Error receiving from connection {connection_id}: {e}", exc_info=True)
        finally:
            lifecycle.handle_disconnect(connection_id)
            await connections.disconnect(connection_id)

    # Static assets last so they never shadow the routes above
    if os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir), name="static")
    else:
        logger.warning(f"Static directory {static_dir} not found, serving no assets")

    logger.info("FastAPI application initialized")
    return app


app = create_app()

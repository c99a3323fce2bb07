import asyncio
import uuid
from collections import deque
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocket
from logging_config import get_logger

logger = get_logger(__name__)


class Outbox:
    """Ordered send queue for one connection.

    `put` never blocks, so room state changes can queue notifications without
    yielding to the event loop. A message put with supersede=True replaces any
    undelivered message of the same event.
    """

    def __init__(self):
        self._pending: deque = deque()
        self._wakeup = asyncio.Event()
        self.closed = False

    def put(self, message: dict, supersede: bool = False) -> bool:
        if self.closed:
            return False
        if supersede:
            event = message.get("event")
            self._pending = deque(m for m in self._pending if m.get("event") != event)
        self._pending.append(message)
        self._wakeup.set()
        return True

    def close(self):
        self.closed = True
        self._wakeup.set()

    def __len__(self):
        return len(self._pending)

    async def drain(self, send: Callable[[dict], Awaitable[Any]]):
        """Deliver queued messages in order until the outbox is closed."""
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            while self._pending:
                await send(self._pending.popleft())
            if self.closed:
                return


class ConnectionManager:
    """Owns the live websockets. The pairing core only ever sees connection ids."""

    def __init__(self):
        self._websockets: Dict[str, WebSocket] = {}
        self._outboxes: Dict[str, Outbox] = {}
        self._writers: Dict[str, asyncio.Task] = {}

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        outbox = Outbox()
        self._websockets[connection_id] = websocket
        self._outboxes[connection_id] = outbox
        self._writers[connection_id] = asyncio.create_task(self._write(connection_id, websocket, outbox))
        logger.info(f"Client connected: {connection_id} (live connections: {len(self._websockets)})")
        return connection_id

    async def _write(self, connection_id: str, websocket: WebSocket, outbox: Outbox):
        try:
            await outbox.drain(websocket.send_json)
        except Exception as e:
            # Socket is going away; the receive loop will see the disconnect
            outbox.close()
            logger.debug(f"Stopped sending to {connection_id}: {e}")

    def send(self, connection_id: str, event: str, data: Any = None, request_id: Optional[Any] = None,
             supersede: bool = False) -> bool:
        outbox = self._outboxes.get(connection_id)
        if outbox is None:
            logger.debug(f"Dropping {event} for unknown connection {connection_id}")
            return False
        message = {"event": event}
        if request_id is not None:
            message["id"] = request_id
        if data is not None:
            message["data"] = data
        return outbox.put(message, supersede=supersede)

    async def disconnect(self, connection_id: str):
        self._websockets.pop(connection_id, None)
        outbox = self._outboxes.pop(connection_id, None)
        if outbox:
            outbox.close()
        writer = self._writers.pop(connection_id, None)
        if writer:
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass
        logger.info(f"Client disconnected: {connection_id} (live connections: {len(self._websockets)})")

    def __contains__(self, connection_id):
        return connection_id in self._websockets

    def __len__(self):
        return len(self._websockets)

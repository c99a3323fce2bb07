from typing import List

from backend import Role, SessionRouter
from events import CONTROLLER_DISCONNECTED, GAME_DISCONNECTED, ROOM_EXPIRED
from logging_config import get_logger

logger = get_logger(__name__)


class ConnectionLifecycle:
    """Teardown policy for dropped connections and expired rooms.

    Room states: awaiting_peer <-> paired, and destroyed from either one when
    the game disconnects or the room expires. A controller leaving never
    destroys the room.
    """

    def __init__(self, router: SessionRouter, transport):
        self.router = router
        self.registry = router.registry
        self.transport = transport

    def handle_disconnect(self, connection_id: str):
        binding = self.router.get_binding(connection_id)
        try:
            if binding is None:
                logger.debug(f"Connection {connection_id} closed without joining a room")
                return

            room = self.registry.get_room(binding.room_code)
            if room is None:
                logger.debug(f"Connection {connection_id} closed, room {binding.room_code} already gone")
                self.router.unbind(connection_id)
                return

            if binding.role == Role.HOST and room.host_connection_id == connection_id:
                if room.peer_connection_id:
                    self.transport.send(room.peer_connection_id, GAME_DISCONNECTED)
                    self.router.unbind(room.peer_connection_id)
                self.registry.delete_room(room.code)
                self.router.unbind(connection_id)
                logger.info(f"Game {connection_id} disconnected, room {room.code} destroyed")
            elif binding.role == Role.PEER and room.peer_connection_id == connection_id:
                room.peer_connection_id = None
                self.transport.send(room.host_connection_id, CONTROLLER_DISCONNECTED)
                self.router.unbind(connection_id)
                logger.info(f"Controller {connection_id} disconnected, room {room.code} awaiting a new controller")
            else:
                self.router.unbind(connection_id)
        finally:
            self.router.forget(connection_id)

    def sweep_expired(self, now: float = None) -> List[str]:
        """Remove expired rooms and tell both sides their session is over."""
        rooms = {room.code: room for room in self.registry.list_rooms()}
        expired = self.registry.sweep_expired(now)
        for code in expired:
            room = rooms[code]
            if room.peer_connection_id:
                self.transport.send(room.peer_connection_id, GAME_DISCONNECTED)
                self.router.unbind(room.peer_connection_id)
            self.transport.send(room.host_connection_id, ROOM_EXPIRED)
            self.router.unbind(room.host_connection_id)
        if expired:
            logger.info(f"Expiry sweep removed rooms: {', '.join(expired)}")
        return expired

from typing import Any, Optional

from backend import Role, Room, SessionRouter
from events import GYRO_UPDATE, PLAYER_SHOOT
from logging_config import get_logger

logger = get_logger(__name__)


class RelayChannel:
    """Forwards controller payloads to the game that owns the room.

    Best effort: anything that cannot be routed is dropped, never reported.
    """

    def __init__(self, router: SessionRouter, transport):
        self.router = router
        self.transport = transport

    def _host_for(self, from_connection_id: str) -> Optional[Room]:
        binding = self.router.get_binding(from_connection_id)
        if binding is None or binding.role != Role.PEER:
            return None
        room = self.router.find_room_for_connection(from_connection_id)
        if room is None or room.peer_connection_id != from_connection_id or not room.host_connection_id:
            return None
        return room

    def relay_orientation(self, from_connection_id: str, data: Any) -> bool:
        room = self._host_for(from_connection_id)
        if room is None:
            logger.debug(f"Dropping orientation from unbound connection {from_connection_id}")
            return False
        # Only the newest sample matters, an undelivered older one is replaced
        return self.transport.send(room.host_connection_id, GYRO_UPDATE, data, supersede=True)

    def relay_action(self, from_connection_id: str) -> bool:
        room = self._host_for(from_connection_id)
        if room is None:
            logger.debug(f"Dropping shoot from unbound connection {from_connection_id}")
            return False
        logger.debug(f"Shoot from {from_connection_id} relayed to room {room.code}")
        return self.transport.send(room.host_connection_id, PLAYER_SHOOT)

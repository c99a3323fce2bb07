import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from constants import ROOM_CODE_MAX, ROOM_CODE_MIN, ROOM_CODE_RANDOM_ATTEMPTS, ROOM_MAX_AGE_SECONDS
from exceptions import AlreadyBound, CapacityExhausted, RoomFull, RoomNotFound
from logging_config import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    HOST = "host"
    PEER = "peer"


@dataclass
class Room:
    code: str
    host_connection_id: str
    created_at: float
    peer_connection_id: Optional[str] = None

    @property
    def state(self) -> str:
        return "paired" if self.peer_connection_id else "awaiting_peer"


@dataclass(frozen=True)
class Binding:
    connection_id: str
    room_code: str
    role: Role


class RoomRegistry:
    """In-memory room table keyed by 4-digit code.

    All methods are synchronous and never yield to the event loop, so callers
    running on a single asyncio loop see every mutation run to completion.
    """

    def __init__(self, clock: Callable[[], float] = time.time, rng: random.Random = None,
                 max_age: float = ROOM_MAX_AGE_SECONDS):
        self._rooms: Dict[str, Room] = {}
        self._clock = clock
        self._rng = rng or random.SystemRandom()
        self.max_age = max_age
        logger.info(f"Initializing RoomRegistry with max room age {max_age} seconds")

    def now(self) -> float:
        return self._clock()

    def _generate_code(self) -> str:
        capacity = ROOM_CODE_MAX - ROOM_CODE_MIN + 1
        if len(self._rooms) >= capacity:
            raise CapacityExhausted(f"All {capacity} room codes are in use")

        for _ in range(ROOM_CODE_RANDOM_ATTEMPTS):
            code = str(self._rng.randint(ROOM_CODE_MIN, ROOM_CODE_MAX))
            if code not in self._rooms:
                return code

        # The table is nearly full, pick among what is left
        free_codes = [str(n) for n in range(ROOM_CODE_MIN, ROOM_CODE_MAX + 1) if str(n) not in self._rooms]
        logger.warning(f"Room code space crowded ({len(self._rooms)}/{capacity}), choosing from free codes")
        return self._rng.choice(free_codes)

    def create_room(self, host_connection_id: str) -> str:
        code = self._generate_code()
        self._rooms[code] = Room(code=code, host_connection_id=host_connection_id, created_at=self.now())
        logger.info(f"Room {code} created for host {host_connection_id}")
        return code

    def get_room(self, code: str) -> Optional[Room]:
        return self._rooms.get(code)

    def delete_room(self, code: str):
        room = self._rooms.pop(code, None)
        if room:
            logger.info(f"Room {code} deleted")
        else:
            logger.debug(f"Room {code} already gone, nothing to delete")

    def is_expired(self, room: Room, now: float = None) -> bool:
        now = self.now() if now is None else now
        return now - room.created_at > self.max_age

    def sweep_expired(self, now: float = None, max_age: float = None) -> List[str]:
        """Delete every room older than max_age, paired or not. Returns the deleted codes."""
        now = self.now() if now is None else now
        max_age = self.max_age if max_age is None else max_age
        expired = [code for code, room in self._rooms.items() if now - room.created_at > max_age]
        for code in expired:
            del self._rooms[code]
            logger.info(f"Expired room {code} removed")
        logger.debug(f"Sweep removed {len(expired)} rooms, {len(self._rooms)} still live")
        return expired

    def list_rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, code):
        return code in self._rooms


class SessionRouter:
    """Tracks which room and role each live connection is bound to."""

    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self._bindings: Dict[str, Binding] = {}
        # Roles outlive bindings: a connection keeps its role until the transport forgets it
        self._roles: Dict[str, Role] = {}

    def _check_can_bind(self, connection_id: str, role: Role):
        binding = self._bindings.get(connection_id)
        if binding:
            raise AlreadyBound(f"Connection {connection_id} already bound to room {binding.room_code}")
        previous_role = self._roles.get(connection_id)
        if previous_role and previous_role != role:
            raise AlreadyBound(f"Connection {connection_id} is a {previous_role.value}, cannot bind as {role.value}")

    def _record(self, connection_id: str, code: str, role: Role):
        self._bindings[connection_id] = Binding(connection_id=connection_id, room_code=code, role=role)
        self._roles[connection_id] = role

    def bind_host(self, connection_id: str) -> str:
        self._check_can_bind(connection_id, Role.HOST)
        code = self.registry.create_room(connection_id)
        self._record(connection_id, code, Role.HOST)
        return code

    def bind_peer(self, connection_id: str, code: str) -> Room:
        self._check_can_bind(connection_id, Role.PEER)

        room = self.registry.get_room(code)
        if room is None or self.registry.is_expired(room):
            logger.info(f"Join failed: room {code} not found")
            raise RoomNotFound(f"Room {code} not found")
        if room.peer_connection_id:
            logger.info(f"Join failed: room {code} already has controller {room.peer_connection_id}")
            raise RoomFull(f"Room {code} already has a controller")

        room.peer_connection_id = connection_id
        self._record(connection_id, code, Role.PEER)
        logger.info(f"Controller {connection_id} joined room {code}")
        return room

    def unbind(self, connection_id: str) -> Optional[Binding]:
        """Clear the binding. Room state is left to the caller."""
        binding = self._bindings.pop(connection_id, None)
        if binding:
            logger.debug(f"Unbound {binding.role.value} {connection_id} from room {binding.room_code}")
        return binding

    def forget(self, connection_id: str):
        self._bindings.pop(connection_id, None)
        self._roles.pop(connection_id, None)

    def get_binding(self, connection_id: str) -> Optional[Binding]:
        return self._bindings.get(connection_id)

    def find_room_for_connection(self, connection_id: str) -> Optional[Room]:
        binding = self._bindings.get(connection_id)
        if binding is None:
            return None
        return self.registry.get_room(binding.room_code)

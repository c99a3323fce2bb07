import json
from typing import Any

from pydantic import ValidationError

from backend import SessionRouter
from events import CONTROLLER_CONNECTED, CREATE_ROOM, GYRO_DATA, JOIN_ROOM, SHOOT, UNKNOWN_EVENT_ERROR
from exceptions import InvalidRequest, RoomError
from logging_config import get_logger
from relay import RelayChannel
from schemas.rooms import ClientMessage, GyroData, RoomAck

logger = get_logger(__name__)


class MessageDispatcher:
    """Decodes client frames and calls into the pairing core.

    Requests that carry an `id` get a reply with the same id and event name,
    e.g. {"id": 2, "event": "join-room", "data": {"success": true}}.
    """

    def __init__(self, router: SessionRouter, relay: RelayChannel, transport):
        self.router = router
        self.relay = relay
        self.transport = transport

    def dispatch(self, connection_id: str, raw: str):
        try:
            message = ClientMessage.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Malformed message from {connection_id}: {e}")
            return

        if message.event == GYRO_DATA:
            self._handle_gyro(connection_id, message.data)
        elif message.event == SHOOT:
            self.relay.relay_action(connection_id)
        elif message.event == CREATE_ROOM:
            self._reply(connection_id, message, self._create_room(connection_id))
        elif message.event == JOIN_ROOM:
            self._reply(connection_id, message, self._join_room(connection_id, message.data))
        else:
            logger.warning(f"Unknown event '{message.event}' from {connection_id}")
            self._reply(connection_id, message, RoomAck(success=False, error=UNKNOWN_EVENT_ERROR))

    def _reply(self, connection_id: str, message: ClientMessage, ack: RoomAck):
        if message.id is None:
            return
        self.transport.send(connection_id, message.event, ack.model_dump(by_alias=True, exclude_none=True),
                            request_id=message.id)

    def _create_room(self, connection_id: str) -> RoomAck:
        try:
            code = self.router.bind_host(connection_id)
        except RoomError as e:
            logger.info(f"Room creation failed for {connection_id}: {e}")
            return RoomAck(success=False, error=e.message)
        return RoomAck(success=True, room_code=code)

    def _join_room(self, connection_id: str, code: Any) -> RoomAck:
        try:
            if not isinstance(code, str):
                raise InvalidRequest(f"Room code must be a string, got {type(code).__name__}")
            room = self.router.bind_peer(connection_id, code.strip())
        except RoomError as e:
            return RoomAck(success=False, error=e.message)
        self.transport.send(room.host_connection_id, CONTROLLER_CONNECTED)
        return RoomAck(success=True)

    def _handle_gyro(self, connection_id: str, data: Any):
        try:
            GyroData.model_validate(data)
        except ValidationError:
            logger.debug(f"Dropping malformed gyro data from {connection_id}: {data!r}")
            return
        self.relay.relay_orientation(connection_id, data)

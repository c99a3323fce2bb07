from datetime import datetime
from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import RoomDetailsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/{room_code}", response_model=RoomDetailsResponse)
async def get_room_details(room_code: str, request: Request):
    """
    Diagnostic view of a live room.

    Returns:
    - room_code: 4-digit room code
    - state: "awaiting_peer" or "paired"
    - has_controller: Whether a controller is bound
    - created_at / expires_at: ISO timestamps
    - is_expired: Past its maximum age but not swept yet
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {room_code} from {client_host}")

    registry = request.app.state.registry
    room = registry.get_room(room_code)
    if not room:
        logger.info(f"Room details failed: Room {room_code} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(
        room_code=room.code,
        state=room.state,
        has_controller=room.peer_connection_id is not None,
        created_at=datetime.fromtimestamp(room.created_at).isoformat(),
        expires_at=datetime.fromtimestamp(room.created_at + registry.max_age).isoformat(),
        is_expired=registry.is_expired(room),
    )

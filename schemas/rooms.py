from pydantic import BaseModel, ConfigDict, Field, StrictFloat
from typing import Any, Optional, Union


class ClientMessage(BaseModel):
    event: str
    id: Optional[Union[int, str]] = None
    data: Any = None

class GyroData(BaseModel):
    # Extra keys are tolerated, the payload is forwarded untouched
    model_config = ConfigDict(extra="allow")

    beta: StrictFloat
    gamma: StrictFloat

class RoomAck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    room_code: Optional[str] = Field(default=None, alias="roomCode")
    error: Optional[str] = None

class RoomDetailsResponse(BaseModel):
    room_code: str
    state: str
    has_controller: bool
    created_at: str
    expires_at: str
    is_expired: bool

# client -> server
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
GYRO_DATA = "gyro-data" # controller orientation sample {beta, gamma}
SHOOT = "shoot"

# server -> game (host)
CONTROLLER_CONNECTED = "controller-connected"
CONTROLLER_DISCONNECTED = "controller-disconnected"
GYRO_UPDATE = "gyro-update"
PLAYER_SHOOT = "player-shoot"
ROOM_EXPIRED = "room-expired"

# server -> controller (peer)
GAME_DISCONNECTED = "game-disconnected"

UNKNOWN_EVENT_ERROR = "Evento desconocido"

class RoomError(Exception):
    """Base class for pairing failures. `message` is shown to the client as is."""

    message = "Error de sala"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.message)
        self.detail = detail


class RoomNotFound(RoomError):
    message = "Sala no encontrada"


class RoomFull(RoomError):
    message = "Ya hay un controlador conectado"


class CapacityExhausted(RoomError):
    message = "No hay salas disponibles"


class AlreadyBound(RoomError):
    message = "La conexión ya está asociada a una sala"


class InvalidRequest(RoomError):
    message = "Solicitud inválida"

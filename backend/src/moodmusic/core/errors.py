"""
Errores del pipeline captura -> detección -> recomendación.

Cada excepción lleva asociado un tipo de aviso (NoticeKind) para que la
máquina de estados pueda convertirla directamente en una notificación
visible para el usuario sin inspeccionar el tipo concreto.
"""

from enum import Enum


class NoticeKind(Enum):
    """Tipos de aviso que la sesión expone a la capa de presentación."""

    INFO = "info"
    PERMISSION_DENIED = "permission_denied"
    DEVICE_UNAVAILABLE = "device_unavailable"
    MODEL_INIT_FAILED = "model_init_failed"
    MODELS_LOADING = "models_loading"
    DETECTION_FAILED = "detection_failed"
    MOOD_UNMAPPED = "mood_unmapped"
    BUSY = "busy"
    INVALID_EVENT = "invalid_event"


class MoodMusicError(Exception):
    """
    Error base del sistema.

    Attributes:
        kind (NoticeKind): Tipo de aviso asociado al error
        message (str): Mensaje legible para el usuario
    """

    kind = NoticeKind.INFO
    title = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PermissionDeniedError(MoodMusicError):
    """Acceso a la cámara denegado por el sistema operativo."""

    kind = NoticeKind.PERMISSION_DENIED
    title = "Error de cámara"


class DeviceUnavailableError(MoodMusicError):
    """La cámara no existe, está ocupada o dejó de entregar frames."""

    kind = NoticeKind.DEVICE_UNAVAILABLE
    title = "Error de cámara"


class ModelInitError(MoodMusicError):
    """Los modelos de detección emocional no se pudieron cargar."""

    kind = NoticeKind.MODEL_INIT_FAILED
    title = "Error al cargar modelos"


class DetectionError(MoodMusicError):
    """No hay rostro, la imagen es inválida o falló la inferencia."""

    kind = NoticeKind.DETECTION_FAILED
    title = "Error de detección"


class MoodUnmappedError(MoodMusicError):
    """Emoción válida sin entrada en el catálogo."""

    kind = NoticeKind.MOOD_UNMAPPED
    title = "Sin recomendaciones"

    def __init__(self, mood):
        label = getattr(mood, "value", mood)
        super().__init__(f"No hay recomendaciones disponibles para la emoción '{label}'")
        self.mood = mood

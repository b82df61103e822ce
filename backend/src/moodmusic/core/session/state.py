"""
Estado de la sesión y vistas inmutables para la presentación.

SessionState es la única fuente de verdad de la fase en la que está la
interfaz. Solo la modifica SessionStateMachine; la presentación recibe
copias inmutables (SessionSnapshot) y nunca toca el estado directamente.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..camera.webcam import Facing
from ..catalogue.schema import CatalogueEntry, DEFAULT_GENRE, Genre, Mood, Song
from ..emotion.capability import DetectorStatus
from ..errors import MoodMusicError, NoticeKind


class Phase(Enum):
    IDLE = "idle"
    LOADING_MODELS = "loading_models"
    READY = "ready"
    RECORDING = "recording"
    PROCESSING = "processing"
    RESULT = "result"


@dataclass(frozen=True)
class Notice:
    """
    Aviso breve y no bloqueante para el usuario (equivalente a un toast).

    Attributes:
        kind (NoticeKind): Tipo de aviso
        title (str): Título corto
        message (str): Texto legible
        destructive (bool): True para errores
    """

    kind: NoticeKind
    title: str
    message: str
    destructive: bool = False

    @classmethod
    def from_error(cls, error: MoodMusicError) -> "Notice":
        return cls(kind=error.kind, title=error.title, message=error.message, destructive=True)

    @classmethod
    def info(cls, title: str, message: str) -> "Notice":
        return cls(kind=NoticeKind.INFO, title=title, message=message)


@dataclass
class SessionState:
    phase: Phase = Phase.IDLE
    detected_mood: Optional[Mood] = None
    selected_genre: Genre = DEFAULT_GENRE
    entry: Optional[CatalogueEntry] = None
    songs: Tuple[Song, ...] = ()
    notice: Optional[Notice] = None
    facing: Facing = Facing.FRONT
    busy: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Vista de solo lectura del estado que se entrega a la presentación."""

    phase: Phase
    detected_mood: Optional[Mood]
    selected_genre: Genre
    recommendations: Tuple[Song, ...]
    description: Optional[str]
    gradient: Optional[str]
    notice: Optional[Notice]
    facing: Facing
    busy: bool
    models_status: DetectorStatus

    @property
    def models_loaded(self) -> bool:
        return self.models_status is DetectorStatus.READY

    @property
    def error(self) -> Optional[Notice]:
        if self.notice is not None and self.notice.destructive:
            return self.notice
        return None

"""
Esquema de emociones, géneros y canciones del catálogo.

Define el conjunto cerrado de emociones (Mood) compartido por el detector y
el catálogo, el conjunto cerrado de géneros musicales (Genre) y los registros
inmutables de canciones y entradas del catálogo.

Las etiquetas que devuelve DeepFace (happy, sad, angry, ...) se normalizan a
Mood con normalize_mood(). A diferencia de un valor por defecto silencioso,
una etiqueta desconocida devuelve None para que el llamador decida.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class Mood(Enum):
    """Emociones reconocidas por el sistema (Ekman + neutral)."""

    HAPPINESS = "happiness"
    SADNESS = "sadness"
    ANGER = "anger"
    FEAR = "fear"
    SURPRISE = "surprise"
    DISGUST = "disgust"
    NEUTRAL = "neutral"


class Genre(Enum):
    """Géneros musicales seleccionables por el usuario."""

    POP = "pop"
    ROCK = "rock"
    CLASSICAL = "classical"
    JAZZ = "jazz"
    ELECTRONIC = "electronic"
    HIPHOP = "hiphop"
    INDIE = "indie"
    METAL = "metal"

    @property
    def label(self) -> str:
        return GENRE_LABELS[self]


GENRE_LABELS: Dict[Genre, str] = {
    Genre.POP: "Pop",
    Genre.ROCK: "Rock",
    Genre.CLASSICAL: "Classical",
    Genre.JAZZ: "Jazz",
    Genre.ELECTRONIC: "Electronic",
    Genre.HIPHOP: "Hip Hop",
    Genre.INDIE: "Indie",
    Genre.METAL: "Metal",
}

DEFAULT_GENRE = Genre.POP

# Mapeo de etiquetas de DeepFace (y sinónimos) a Mood
DEEPFACE_TO_MOOD: Dict[str, Mood] = {
    "happy": Mood.HAPPINESS,
    "sad": Mood.SADNESS,
    "angry": Mood.ANGER,
    "fear": Mood.FEAR,
    "surprise": Mood.SURPRISE,
    "disgust": Mood.DISGUST,
    "neutral": Mood.NEUTRAL,

    "happiness": Mood.HAPPINESS,
    "sadness": Mood.SADNESS,
    "anger": Mood.ANGER,
    "scared": Mood.FEAR,
    "surprised": Mood.SURPRISE,
    "disgusted": Mood.DISGUST,
}


def normalize_mood(label: str) -> Optional[Mood]:
    """
    Normaliza una etiqueta de emoción a un valor de Mood.

    Args:
        label (str): Etiqueta de emoción (normalmente de DeepFace)

    Returns:
        Optional[Mood]: Emoción normalizada o None si no se reconoce

    Examples:
        >>> normalize_mood("happy")
        <Mood.HAPPINESS: 'happiness'>

        >>> normalize_mood(" Angry ")
        <Mood.ANGER: 'anger'>

        >>> normalize_mood("confused") is None
        True
    """
    if not label or not isinstance(label, str):
        return None
    return DEEPFACE_TO_MOOD.get(label.lower().strip())


def parse_genre(value) -> Genre:
    """
    Convierte la entrada del usuario en un Genre.

    Acepta un Genre, su valor ("hiphop") o su etiqueta ("Hip Hop"), sin
    distinguir mayúsculas.

    Raises:
        ValueError: Si el género no pertenece al conjunto cerrado
    """
    if isinstance(value, Genre):
        return value
    text = str(value).strip().lower()
    for genre in Genre:
        if text in (genre.value, genre.label.lower()):
            return genre
    available = [genre.value for genre in Genre]
    raise ValueError(f"Género '{value}' no existe. Géneros disponibles: {available}")


@dataclass(frozen=True)
class Song:
    """
    Canción recomendada.

    Attributes:
        name (str): Título y artista; identifica la canción dentro de una lista
        reason (str): Motivo de la recomendación
        preview_url (Optional[str]): Fragmento de audio, si existe
        links (Mapping[str, str]): Enlaces canónicos por plataforma
    """

    name: str
    reason: str
    preview_url: Optional[str] = None
    links: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Congelar también el diccionario de enlaces
        object.__setattr__(self, "links", MappingProxyType(dict(self.links)))


@dataclass(frozen=True)
class CatalogueEntry:
    """
    Entrada del catálogo para una emoción.

    Attributes:
        mood (Mood): Emoción de la entrada
        description (str): Texto explicativo para el usuario
        gradient (str): Etiqueta visual opaca, se pasa tal cual a la presentación
        songs_by_genre (Mapping[Genre, Tuple[Song, ...]]): Listas ordenadas por género
    """

    mood: Mood
    description: str
    gradient: str
    songs_by_genre: Mapping[Genre, Tuple[Song, ...]]

    def __post_init__(self):
        frozen = {genre: tuple(songs) for genre, songs in self.songs_by_genre.items()}
        for genre, songs in frozen.items():
            names = [song.name for song in songs]
            duplicates = {name for name in names if names.count(name) > 1}
            if duplicates:
                raise ValueError(
                    f"Canciones duplicadas en {self.mood.value}/{genre.value}: {sorted(duplicates)}"
                )
        object.__setattr__(self, "songs_by_genre", MappingProxyType(frozen))

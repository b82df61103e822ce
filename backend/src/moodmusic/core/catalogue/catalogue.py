"""
Catálogo de emociones.

Construye una sola vez las entradas inmutables a partir de la tabla estática
y ofrece la consulta por emoción. Una emoción sin entrada se señala con
MoodUnmappedError, nunca con un fallo del pipeline completo.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from .schema import CatalogueEntry, Genre, Mood, Song
from .mood_table import MOOD_TABLE
from ..errors import MoodUnmappedError

logger = logging.getLogger(__name__)


class MoodCatalogue:
    """
    Catálogo de solo lectura Mood -> CatalogueEntry.

    Example:
        >>> catalogue = get_default_catalogue()
        >>> entry = catalogue.get(Mood.HAPPINESS)
        >>> entry.songs_by_genre[Genre.POP][0].name
        'Happy - Pharrell Williams'
    """

    def __init__(self, entries: Iterable[CatalogueEntry]):
        self._entries: Dict[Mood, CatalogueEntry] = {}
        for entry in entries:
            if entry.mood in self._entries:
                raise ValueError(f"Entrada duplicada para la emoción '{entry.mood.value}'")
            self._entries[entry.mood] = entry

    @classmethod
    def from_table(cls, table: Mapping[str, Mapping]) -> "MoodCatalogue":
        """
        Crea el catálogo desde una tabla con la forma de MOOD_TABLE.

        Raises:
            ValueError: Si una emoción o un género no pertenece al conjunto cerrado
        """
        entries = []
        for mood_key, data in table.items():
            mood = Mood(mood_key)
            songs_by_genre = {
                Genre(genre_key): tuple(Song(**song) for song in songs)
                for genre_key, songs in data.get("songs_by_genre", {}).items()
            }
            entries.append(CatalogueEntry(
                mood=mood,
                description=data["description"],
                gradient=data.get("gradient", ""),
                songs_by_genre=songs_by_genre,
            ))
        return cls(entries)

    def get(self, mood: Mood) -> CatalogueEntry:
        """
        Obtiene la entrada de una emoción.

        Raises:
            MoodUnmappedError: Si la emoción no tiene entrada
        """
        entry = self._entries.get(mood)
        if entry is None:
            raise MoodUnmappedError(mood)
        return entry

    def find(self, mood: Mood) -> Optional[CatalogueEntry]:
        return self._entries.get(mood)

    def moods(self) -> List[Mood]:
        return list(self._entries.keys())

    def __contains__(self, mood) -> bool:
        return mood in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_default_catalogue: Optional[MoodCatalogue] = None


def get_default_catalogue() -> MoodCatalogue:
    """Devuelve el catálogo por defecto, construido la primera vez que se pide."""
    global _default_catalogue
    if _default_catalogue is None:
        _default_catalogue = MoodCatalogue.from_table(MOOD_TABLE)
        logger.info(f"Catálogo cargado con {len(_default_catalogue)} emociones")
    return _default_catalogue

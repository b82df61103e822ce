"""
Selector de recomendaciones.

Función pura sobre el catálogo: dada una entrada y un género devuelve las
canciones en el orden declarado en la tabla, sin reordenar. Un género sin
canciones da una lista vacía, que es un resultado válido.
"""

from dataclasses import dataclass
from typing import Tuple

from .catalogue import MoodCatalogue
from .schema import CatalogueEntry, Genre, Mood, Song


@dataclass(frozen=True)
class Recommendation:
    entry: CatalogueEntry
    genre: Genre
    songs: Tuple[Song, ...]


def select_songs(entry: CatalogueEntry, genre: Genre) -> Tuple[Song, ...]:
    """
    Selecciona las canciones de una entrada para un género.

    Args:
        entry (CatalogueEntry): Entrada del catálogo
        genre (Genre): Género seleccionado

    Returns:
        Tuple[Song, ...]: Canciones en orden de presentación (puede estar vacía)

    Example:
        >>> entry = get_default_catalogue().get(Mood.HAPPINESS)
        >>> select_songs(entry, Genre.JAZZ)
        ()
    """
    return tuple(entry.songs_by_genre.get(genre, ()))


def recommend(catalogue: MoodCatalogue, mood: Mood, genre: Genre) -> Recommendation:
    """
    Busca la emoción en el catálogo y selecciona las canciones del género.

    Raises:
        MoodUnmappedError: Si la emoción no tiene entrada en el catálogo
    """
    entry = catalogue.get(mood)
    return Recommendation(entry=entry, genre=genre, songs=select_songs(entry, genre))

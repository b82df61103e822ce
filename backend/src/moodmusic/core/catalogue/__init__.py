"""
Módulo de catálogo de emociones y recomendación musical.

Componentes:
    - schema: Tipos Mood, Genre, Song y CatalogueEntry
    - mood_table: Tabla estática de canciones por emoción y género
    - catalogue: Catálogo de solo lectura
    - selector: Selección de canciones por género
"""

from .schema import (
    Mood,
    Genre,
    Song,
    CatalogueEntry,
    DEFAULT_GENRE,
    GENRE_LABELS,
    normalize_mood,
    parse_genre,
)
from .mood_table import MOOD_TABLE
from .catalogue import MoodCatalogue, get_default_catalogue
from .selector import Recommendation, select_songs, recommend

__all__ = [
    'Mood',
    'Genre',
    'Song',
    'CatalogueEntry',
    'DEFAULT_GENRE',
    'GENRE_LABELS',
    'normalize_mood',
    'parse_genre',
    'MOOD_TABLE',
    'MoodCatalogue',
    'get_default_catalogue',
    'Recommendation',
    'select_songs',
    'recommend',
]

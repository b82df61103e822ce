"""
Tabla estática de emociones -> descripción, gradiente y canciones por género.

Cada emoción define:
    - description: Explicación que se muestra tras la detección
    - gradient: Etiqueta visual (clases de gradiente) que la capa de
      presentación interpreta; el núcleo no la usa
    - songs_by_genre: Listas ordenadas de canciones. El orden de la tabla es
      el orden de presentación

Nota:
    No todas las emociones tienen lista para todos los géneros. Un género sin
    lista produce una recomendación vacía, no un error. La emoción "disgust"
    no tiene entrada: su detección se trata como emoción sin recomendaciones.
"""

from typing import Dict, List
from urllib.parse import quote_plus


def youtube_search(name: str) -> str:
    """Enlace de búsqueda en YouTube para canciones sin URL canónica conocida."""
    return f"https://www.youtube.com/results?search_query={quote_plus(name)}"


def _song(name: str, reason: str) -> Dict:
    return {
        "name": name,
        "reason": reason,
        "preview_url": None,
        "links": {"youtube": youtube_search(name)},
    }


MOOD_TABLE: Dict[str, Dict] = {
    # HAPPINESS (Felicidad)
    # Ritmos rápidos y letras positivas para mantener el ánimo
    "happiness": {
        "description": (
            "Your facial expressions show signs of joy and contentment. We detected "
            "raised cheeks, crinkled eyes, and an upward curved smile - all classic "
            "indicators of happiness!"
        ),
        "gradient": "from-yellow-500/20 to-orange-500/20",
        "songs_by_genre": {
            "pop": [
                {
                    "name": "Happy - Pharrell Williams",
                    "reason": "Upbeat tempo and positive lyrics to maintain your great mood",
                    "preview_url": "https://p.scdn.co/mp3-preview/6b00000be293f6b75b7e632760ab6949e5ba9a08",
                    "links": {
                        "spotify": "https://open.spotify.com/track/60nZcImufyMA1MKQY3dcCH",
                        "youtube": "https://www.youtube.com/watch?v=ZbZSe6N_BXs",
                    },
                },
            ],
            "rock": [
                _song("Walking on Sunshine - Katrina and the Waves", "Bright guitars that match your smile"),
                _song("Don't Stop Me Now - Queen", "Pure euphoric energy"),
            ],
            "electronic": [
                _song("One More Time - Daft Punk", "A celebratory groove for a good day"),
            ],
            "indie": [
                _song("Dog Days Are Over - Florence + The Machine", "Joyful build-up to keep you going"),
            ],
        },
    },

    # SADNESS (Tristeza)
    # Canciones lentas que acompañan la emoción en lugar de forzar un cambio
    "sadness": {
        "description": (
            "We noticed lowered lip corners and drooping eyelids, signs that you "
            "might be feeling down. Here is some music to keep you company."
        ),
        "gradient": "from-blue-500/20 to-indigo-500/20",
        "songs_by_genre": {
            "pop": [
                _song("Someone Like You - Adele", "A gentle ballad that understands how you feel"),
                _song("Fix You - Coldplay", "Comforting lyrics with a hopeful ending"),
            ],
            "classical": [
                _song("Adagio for Strings - Samuel Barber", "Slow strings that let the feeling breathe"),
            ],
            "jazz": [
                _song("Blue in Green - Miles Davis", "Soft and introspective"),
            ],
            "indie": [
                _song("Skinny Love - Bon Iver", "Raw and honest vocals"),
            ],
        },
    },

    # ANGER (Enfado)
    # Alta activación: música intensa para canalizar la energía
    "anger": {
        "description": (
            "Your brows are drawn together and your lips are pressed - signs of "
            "frustration. Let some powerful music help you release that energy."
        ),
        "gradient": "from-red-500/20 to-rose-500/20",
        "songs_by_genre": {
            "rock": [
                _song("Killing in the Name - Rage Against the Machine", "Let it all out"),
            ],
            "metal": [
                _song("Master of Puppets - Metallica", "Heavy riffs to channel the intensity"),
                _song("Walk - Pantera", "Aggressive groove for a tense moment"),
            ],
            "hiphop": [
                _song("Lose Yourself - Eminem", "Turns frustration into focus"),
            ],
            "classical": [
                _song("Dies Irae - Giuseppe Verdi", "Dramatic and thunderous"),
            ],
        },
    },

    # FEAR (Miedo)
    # Música calmada para bajar la activación
    "fear": {
        "description": (
            "Widened eyes and raised brows suggest you might be feeling anxious. "
            "These calming tracks can help you unwind."
        ),
        "gradient": "from-purple-500/20 to-slate-500/20",
        "songs_by_genre": {
            "pop": [
                _song("Breathe Me - Sia", "Soft vocals to slow things down"),
            ],
            "classical": [
                _song("Clair de Lune - Claude Debussy", "A peaceful piano piece"),
            ],
            "electronic": [
                _song("Weightless - Marconi Union", "Ambient sounds designed to relax"),
            ],
        },
    },

    # SURPRISE (Sorpresa)
    # Activación muy alta con valencia ligeramente positiva
    "surprise": {
        "description": (
            "Raised eyebrows and an open mouth - something caught you off guard! "
            "Here are some tracks full of unexpected turns."
        ),
        "gradient": "from-pink-500/20 to-fuchsia-500/20",
        "songs_by_genre": {
            "pop": [
                _song("Bohemian Rhapsody - Queen", "A song that never goes where you expect"),
            ],
            "electronic": [
                _song("Strobe - deadmau5", "A slow build with a big reveal"),
            ],
            "jazz": [
                _song("Take Five - Dave Brubeck", "An unusual 5/4 groove"),
            ],
        },
    },

    # NEUTRAL (Estado neutral)
    "neutral": {
        "description": (
            "Your expression looks calm and relaxed. Here is a balanced selection "
            "to accompany your day."
        ),
        "gradient": "from-gray-500/20 to-zinc-500/20",
        "songs_by_genre": {
            "pop": [
                _song("Sunflower - Post Malone & Swae Lee", "Easygoing and pleasant"),
                _song("Viva La Vida - Coldplay", "Steady and uplifting"),
            ],
            "jazz": [
                _song("So What - Miles Davis", "Cool and relaxed"),
            ],
            "indie": [
                _song("Electric Feel - MGMT", "Laid-back groove"),
            ],
            "classical": [
                _song("Gymnopedie No. 1 - Erik Satie", "Calm and understated"),
            ],
        },
    },
}


def get_table_moods() -> List[str]:
    """Lista las emociones con entrada en la tabla."""
    return list(MOOD_TABLE.keys())

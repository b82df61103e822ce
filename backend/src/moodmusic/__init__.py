"""
Mood Music Player.

Captura una foto con la cámara, detecta la emoción del rostro y recomienda
canciones según la emoción y el género elegido.
"""

__version__ = "0.1.0"

"""
Capa de presentación: ventana de OpenCV y traducción de teclas a eventos.
"""

from .window import SessionWindow, Intent, intent_for_key

__all__ = ['SessionWindow', 'Intent', 'intent_for_key']

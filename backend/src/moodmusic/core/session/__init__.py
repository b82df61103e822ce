"""
Módulo de sesión interactiva.

Contiene el estado de la sesión y la máquina de estados que orquesta
cámara, detector y catálogo.
"""

from .state import Phase, Notice, SessionState, SessionSnapshot
from .machine import SessionStateMachine

__all__ = ['Phase', 'Notice', 'SessionState', 'SessionSnapshot', 'SessionStateMachine']

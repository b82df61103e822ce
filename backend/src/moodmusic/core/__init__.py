"""
Core - Pipeline captura -> detección -> recomendación.

Este paquete contiene los componentes fundamentales del sistema:
- catalogue: Emociones, géneros, catálogo de canciones y selector
- emotion: Detección emocional (contrato, DeepFace y capacidad asíncrona)
- camera: Acceso a cámara con OpenCV y sesión de captura
- session: Máquina de estados de la sesión interactiva
- utils: Métricas de rendimiento
"""

from . import catalogue
from . import emotion
from . import camera
from . import session
from . import utils

from .catalogue import Mood, Genre, MoodCatalogue, get_default_catalogue, select_songs
from .emotion import DeepFaceEmotionDetector, DetectorCapability
from .camera import Facing, OpenCVCameraBackend, CaptureSession
from .session import Phase, SessionStateMachine

__all__ = [
    'catalogue',
    'emotion',
    'camera',
    'session',
    'utils',
    'Mood',
    'Genre',
    'MoodCatalogue',
    'get_default_catalogue',
    'select_songs',
    'DeepFaceEmotionDetector',
    'DetectorCapability',
    'Facing',
    'OpenCVCameraBackend',
    'CaptureSession',
    'Phase',
    'SessionStateMachine',
]

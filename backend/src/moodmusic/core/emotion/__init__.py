"""
Módulo de reconocimiento emocional facial.

Contiene el contrato de detector, la implementación con DeepFace y el
envoltorio asíncrono que usa la sesión.
"""

from .base import EmotionDetector
from .deepface_detector import DeepFaceEmotionDetector, validate_image
from .capability import DetectorCapability, DetectorStatus

__all__ = [
    'EmotionDetector',
    'DeepFaceEmotionDetector',
    'validate_image',
    'DetectorCapability',
    'DetectorStatus',
]

"""
Interfaz base para detectores de emociones.

Define el contrato de dos llamadas que debe cumplir cualquier detector:
carga única de modelos y detección sobre una imagen fija.
"""

from abc import ABC, abstractmethod

import numpy as np

from ..catalogue.schema import Mood


class EmotionDetector(ABC):
    """
    Interfaz base para detectores de emociones faciales.

    Las implementaciones son síncronas (bloqueantes); el envoltorio
    DetectorCapability se encarga de ejecutarlas fuera del event loop.
    """

    @abstractmethod
    def initialize(self) -> None:
        """
        Carga los modelos. Debe ser idempotente.

        Raises:
            ModelInitError: Si los modelos no se pueden cargar
        """
        pass

    @abstractmethod
    def detect(self, pixels: np.ndarray) -> Mood:
        """
        Detecta la emoción dominante del rostro de la imagen.

        Args:
            pixels: Imagen BGR (alto x ancho x 3, uint8), sin espejar

        Returns:
            Mood: Exactamente una emoción

        Raises:
            ModelInitError: Si se llama antes de initialize()
            DetectionError: Sin rostro, imagen inválida o fallo de inferencia
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Retorna el nombre identificador del detector."""
        pass

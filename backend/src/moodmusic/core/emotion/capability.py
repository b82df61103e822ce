"""
Capacidad de detección emocional asíncrona.

Envuelve un EmotionDetector síncrono y expone las dos operaciones que usa
la sesión: initialize_detectors() y detect_emotion(image). Las llamadas
bloqueantes se ejecutan con asyncio.to_thread para no congelar el event loop.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from .base import EmotionDetector
from ..catalogue.schema import Mood
from ..errors import DetectionError, ModelInitError
from ..utils.metrics import PerformanceMetrics, get_metrics

logger = logging.getLogger(__name__)


class DetectorStatus(Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class DetectorCapability:
    """
    Frontera entre la sesión y el detector de emociones.

    Garantías:
        - initialize_detectors() es idempotente: una vez listo, las llamadas
          siguientes terminan sin volver a cargar nada. Las llamadas
          concurrentes se serializan con un asyncio.Lock.
        - Un fallo de carga deja el estado en FAILED. No hay reintentos
          automáticos; volver a llamar a initialize_detectors() reintenta.
        - detect_emotion() falla de inmediato si los modelos no están listos.
        - Nunca modifica el estado de la sesión.

    Example:
        >>> capability = DetectorCapability(DeepFaceEmotionDetector())
        >>> await capability.initialize_detectors()
        >>> mood = await capability.detect_emotion(image)
    """

    def __init__(self, detector: EmotionDetector, metrics: Optional[PerformanceMetrics] = None):
        self.detector = detector
        self.metrics = metrics or get_metrics()
        self._status = DetectorStatus.NOT_LOADED
        self._failure_reason: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def status(self) -> DetectorStatus:
        return self._status

    @property
    def failure_reason(self) -> Optional[str]:
        return self._failure_reason

    @property
    def is_ready(self) -> bool:
        return self._status is DetectorStatus.READY

    async def initialize_detectors(self) -> None:
        """
        Carga los modelos una sola vez.

        Raises:
            ModelInitError: Si la carga falla (el motivo queda en failure_reason)
        """
        async with self._lock:
            if self._status is DetectorStatus.READY:
                return

            self._status = DetectorStatus.LOADING
            self._failure_reason = None
            logger.info(f"Inicializando detector {self.detector.name}")

            try:
                with self.metrics.measure('model_init', metadata={'detector': self.detector.name}):
                    await asyncio.to_thread(self.detector.initialize)
            except ModelInitError as e:
                self._fail(e.message)
                raise
            except Exception as e:
                logger.exception("Error inesperado al cargar los modelos")
                self._fail(str(e) or e.__class__.__name__)
                raise ModelInitError(self._failure_reason) from e

            self._status = DetectorStatus.READY
            logger.info("Detector de emociones listo")

    def _fail(self, reason: str) -> None:
        self._status = DetectorStatus.FAILED
        self._failure_reason = reason
        logger.error(f"Carga de modelos fallida: {reason}")

    async def detect_emotion(self, image) -> Mood:
        """
        Detecta la emoción de una imagen capturada.

        Args:
            image: CapturedImage o array de píxeles BGR

        Returns:
            Mood: Emoción detectada

        Raises:
            ModelInitError: Si los modelos no están listos
            DetectionError: Si la detección falla
        """
        if self._status is not DetectorStatus.READY:
            if self._status is DetectorStatus.FAILED:
                raise ModelInitError(
                    f"La detección está desactivada: {self._failure_reason}"
                )
            raise ModelInitError("Los modelos de emoción todavía no están cargados")

        pixels = getattr(image, 'pixels', image)

        try:
            with self.metrics.measure('emotion_detection', metadata={'detector': self.detector.name}):
                return await asyncio.to_thread(self.detector.detect, pixels)
        except (DetectionError, ModelInitError):
            raise
        except Exception as e:
            logger.exception("Error inesperado en la detección emocional")
            raise DetectionError(f"Error al analizar la imagen: {e}") from e

"""
Módulo de detección emocional usando DeepFace.

Este módulo adapta la librería DeepFace al contrato EmotionDetector:
carga única del modelo de emociones y análisis de una imagen fija.

DeepFace (y TensorFlow por debajo) se importa durante initialize(), que es
precisamente la fase de carga de modelos; un fallo de importación se
reporta como ModelInitError igual que cualquier otro fallo de carga.
"""

import logging
import threading

import numpy as np

from .base import EmotionDetector
from ..catalogue.schema import Mood, normalize_mood
from ..errors import DetectionError, ModelInitError

logger = logging.getLogger(__name__)


def _load_deepface():
    """Importa y devuelve la clase DeepFace."""
    from deepface import DeepFace
    return DeepFace


def validate_image(pixels) -> None:
    """
    Comprueba que el buffer sea una imagen utilizable.

    Raises:
        DetectionError: Si no es un array uint8 de 2 o 3 dimensiones con
                        ancho y alto mayores que cero
    """
    if not isinstance(pixels, np.ndarray):
        raise DetectionError("Imagen inválida: se esperaba un array de píxeles")
    if pixels.ndim not in (2, 3) or pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise DetectionError(f"Imagen inválida: dimensiones {pixels.shape}")
    if pixels.ndim == 3 and pixels.shape[2] not in (1, 3, 4):
        raise DetectionError(f"Imagen inválida: {pixels.shape[2]} canales")
    if pixels.dtype != np.uint8:
        raise DetectionError(f"Imagen inválida: tipo {pixels.dtype}, se esperaba uint8")


class DeepFaceEmotionDetector(EmotionDetector):
    """
    Detector de emociones faciales usando DeepFace.

    DeepFace clasifica en: angry, disgust, fear, happy, sad, surprise,
    neutral. Las etiquetas se normalizan a Mood.

    Attributes:
        detector_backend (str): Detector de rostros de DeepFace ('opencv', 'mtcnn', ...)
        confidence_threshold (float): Confianza mínima de rostro en [0, 1]
    """

    def __init__(self, detector_backend: str = 'opencv', confidence_threshold: float = 0.9):
        self.detector_backend = detector_backend
        self.confidence_threshold = confidence_threshold
        self._deepface = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return f"deepface-{self.detector_backend}"

    @property
    def is_ready(self) -> bool:
        return self._deepface is not None

    def initialize(self) -> None:
        """
        Importa DeepFace y construye el modelo de emociones una sola vez.

        Raises:
            ModelInitError: Si la librería o los pesos no se pueden cargar
        """
        with self._lock:
            if self._deepface is not None:
                return

            logger.info("Cargando modelo de emociones de DeepFace...")
            try:
                deepface = _load_deepface()
                deepface.build_model(model_name="Emotion", task="facial_attribute")
            except Exception as e:
                logger.error(f"Error al cargar DeepFace: {e}", exc_info=True)
                raise ModelInitError(f"No se pudieron cargar los modelos de emoción: {e}") from e

            self._deepface = deepface
            logger.info("✓ Modelo de emociones cargado")

    def detect(self, pixels: np.ndarray) -> Mood:
        """
        Predice la emoción dominante en una imagen.

        Args:
            pixels (np.ndarray): Imagen en formato BGR (OpenCV), sin espejar

        Returns:
            Mood: Emoción dominante del primer rostro

        Raises:
            ModelInitError: Si el modelo no está cargado
            DetectionError: Si no hay rostro o falla el análisis
        """
        if self._deepface is None:
            raise ModelInitError("Los modelos de emoción no están cargados")

        validate_image(pixels)

        try:
            # enforce_detection=True: sin rostro DeepFace lanza ValueError
            result = self._deepface.analyze(
                img_path=pixels,
                actions=['emotion'],
                enforce_detection=True,
                detector_backend=self.detector_backend,
                silent=True
            )
        except ValueError as e:
            raise DetectionError(
                "No se detectó ningún rostro. Mira a la cámara e inténtalo de nuevo."
            ) from e
        except Exception as e:
            logger.error(f"Error en detección emocional: {e}", exc_info=True)
            raise DetectionError(f"Error al analizar la imagen: {e}") from e

        # Con varios rostros solo se usa el primero
        if isinstance(result, list):
            if not result:
                raise DetectionError("No se detectó ningún rostro")
            result = result[0]

        # Algunos detectores (p. ej. opencv) reportan confianza 0: no hay dato
        face_confidence = result.get('face_confidence') or 0.0
        if 0.0 < face_confidence < self.confidence_threshold:
            raise DetectionError(
                f"Rostro poco claro (confianza {face_confidence:.2f}). Inténtalo de nuevo."
            )

        label = result.get('dominant_emotion', '')
        mood = normalize_mood(label)
        if mood is None:
            raise DetectionError(f"Emoción no reconocida: '{label}'")

        logger.debug(f"Emoción detectada: {label} -> {mood.value}")
        return mood

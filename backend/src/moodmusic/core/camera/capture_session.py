"""
Sesión de captura.

La sesión de captura es la única dueña del stream de cámara activo. Abre,
cambia de orientación, captura frames fijos y libera el dispositivo en
todas las salidas (cambio de cámara, reinicio y cierre).

Los métodos se llaman desde hilos de trabajo (asyncio.to_thread); un lock
reentrante hace atómicos liberar-y-abrir y leer-un-frame.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .webcam import CameraBackend, Facing
from ..errors import DeviceUnavailableError
from ..utils.metrics import PerformanceMetrics, get_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapturedImage:
    """
    Imagen fija lista para el detector.

    Attributes:
        pixels (np.ndarray): Imagen BGR sin espejar
        width (int): Ancho en píxeles
        height (int): Alto en píxeles
        facing (Facing): Cámara de origen
        cycle (int): Ciclo de captura de la sesión al que pertenece
    """

    pixels: np.ndarray
    width: int
    height: int
    facing: Facing
    cycle: int = 0


class CaptureSession:
    """
    Dueña del stream de cámara: como mucho un stream abierto a la vez.

    Example:
        >>> with CaptureSession(OpenCVCameraBackend()) as session:
        ...     session.start(Facing.FRONT)
        ...     image = session.capture_frame()
    """

    def __init__(
        self,
        backend: CameraBackend,
        width: int = 1280,
        height: int = 720,
        metrics: Optional[PerformanceMetrics] = None
    ):
        self.backend = backend
        self.width = width
        self.height = height
        self.metrics = metrics or get_metrics()
        self.stream = None
        self.facing = Facing.FRONT
        self._lock = threading.RLock()

    @property
    def is_active(self) -> bool:
        return self.stream is not None

    def start(self, facing: Optional[Facing] = None):
        """
        Abre la cámara. Si ya había un stream, se libera antes.

        Args:
            facing (Facing, optional): Orientación; por defecto la actual

        Returns:
            El stream abierto

        Raises:
            PermissionDeniedError, DeviceUnavailableError
        """
        with self._lock:
            if facing is not None:
                self.facing = facing

            self.stop()

            with self.metrics.measure('camera_start', metadata={'facing': self.facing.value}):
                self.stream = self.backend.open(self.facing, self.width, self.height)
            return self.stream

    def switch_facing(self):
        """
        Cambia entre cámara frontal y trasera.

        El stream anterior se libera por completo antes de pedir el nuevo.
        Si la apertura falla la sesión queda sin stream y con la orientación
        ya cambiada.
        """
        with self._lock:
            self.stop()
            self.facing = self.facing.flipped()
            logger.info(f"Cambiando a cámara {self.facing.value}")
            return self.start()

    def capture_frame(self, cycle: int = 0) -> CapturedImage:
        """
        Captura el frame actual como imagen fija.

        Si el stream entrega frames espejados (cámara frontal) la imagen se
        voltea horizontalmente, de modo que el detector trabaja siempre con
        la orientación real.

        Raises:
            DeviceUnavailableError: Si no hay stream o no se puede leer el frame
        """
        with self._lock:
            stream = self.stream
            if stream is None:
                raise DeviceUnavailableError("La cámara no está abierta")

            with self.metrics.measure('frame_capture', metadata={'facing': stream.facing.value}):
                success, frame = stream.read()
                if not success or frame is None:
                    raise DeviceUnavailableError("No se pudo leer el frame de la cámara")

                if stream.mirrored:
                    frame = cv2.flip(frame, 1)
                else:
                    frame = frame.copy()

        height, width = frame.shape[:2]
        return CapturedImage(
            pixels=frame,
            width=width,
            height=height,
            facing=stream.facing,
            cycle=cycle
        )

    def read_preview(self) -> Optional[np.ndarray]:
        """
        Lee un frame para la vista previa.

        La cámara frontal se muestra como un espejo; este frame es solo para
        la presentación, nunca para el detector.
        """
        with self._lock:
            stream = self.stream
            if stream is None:
                return None
            success, frame = stream.read()

        if not success:
            return None

        if stream.facing is Facing.FRONT and not stream.mirrored:
            return cv2.flip(frame, 1)
        return frame

    def stop(self) -> None:
        """Libera el stream actual, si lo hay."""
        with self._lock:
            stream, self.stream = self.stream, None
            if stream is not None:
                stream.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

"""
Módulo de acceso a cámara usando OpenCV.

Este módulo abre la cámara frontal o trasera como un stream de video de
OpenCV y traduce los fallos de apertura a errores de permiso o de
dispositivo no disponible.
"""

import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Tuple

import cv2
import numpy as np

from ..errors import DeviceUnavailableError, PermissionDeniedError

logger = logging.getLogger(__name__)


class Facing(Enum):
    """Orientación de la cámara respecto al usuario."""

    FRONT = "front"
    BACK = "back"

    def flipped(self) -> "Facing":
        return Facing.BACK if self is Facing.FRONT else Facing.FRONT


class WebcamStream:
    """
    Stream de video abierto sobre un cv2.VideoCapture.

    Attributes:
        facing (Facing): Orientación de la cámara
        mirrored (bool): True si el dispositivo entrega los frames espejados
        camera_index (int): Índice de dispositivo OpenCV
    """

    def __init__(self, cap: cv2.VideoCapture, facing: Facing, camera_index: int, mirrored: bool):
        self.cap = cap
        self.facing = facing
        self.camera_index = camera_index
        self.mirrored = mirrored

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Lee un frame del stream.

        Returns:
            Tuple[bool, Optional[np.ndarray]]: (éxito, frame BGR o None)
        """
        if not self.is_open:
            return False, None

        success, frame = self.cap.read()
        if not success or frame is None:
            logger.warning("No se pudo leer el frame de la cámara")
            return False, None
        return True, frame

    def release(self) -> None:
        """Libera el dispositivo. Se puede llamar varias veces."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"✓ Cámara {self.camera_index} liberada")

    def get_properties(self) -> dict:
        """
        Obtiene las propiedades actuales de la cámara.

        Returns:
            dict: Diccionario con propiedades de la cámara (ancho, alto, fps)
        """
        if not self.is_open:
            return {}

        return {
            'width': int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            'height': int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            'fps': int(self.cap.get(cv2.CAP_PROP_FPS))
        }


class CameraBackend(ABC):
    """Fuente de streams de cámara."""

    @abstractmethod
    def open(self, facing: Facing, width: int, height: int):
        """
        Abre la cámara con la orientación indicada.

        Raises:
            PermissionDeniedError: Si el sistema deniega el acceso
            DeviceUnavailableError: Si no hay cámara o está ocupada
        """
        pass


class OpenCVCameraBackend(CameraBackend):
    """
    Backend de cámara basado en cv2.VideoCapture.

    OpenCV no conoce la orientación de las cámaras, así que cada orientación
    se asigna a un índice de dispositivo.

    Attributes:
        front_index (int): Índice de la cámara frontal
        back_index (int): Índice de la cámara trasera
        front_mirrored (bool): Si la cámara frontal entrega frames espejados
    """

    def __init__(self, front_index: int = 0, back_index: int = 1, front_mirrored: bool = True):
        self.front_index = front_index
        self.back_index = back_index
        self.front_mirrored = front_mirrored

    def index_for(self, facing: Facing) -> int:
        return self.front_index if facing is Facing.FRONT else self.back_index

    def open(self, facing: Facing, width: int = 1280, height: int = 720) -> WebcamStream:
        camera_index = self.index_for(facing)
        self._check_permissions(camera_index)

        cap = cv2.VideoCapture(camera_index)
        if not cap.isOpened():
            cap.release()
            raise DeviceUnavailableError(
                f"No se pudo abrir la cámara con índice {camera_index}. "
                "Verifica que la cámara esté conectada y no esté siendo utilizada por otra aplicación."
            )

        # Resolución preferida; el driver puede elegir otra
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        mirrored = facing is Facing.FRONT and self.front_mirrored
        stream = WebcamStream(cap, facing, camera_index, mirrored)
        properties = stream.get_properties()
        logger.info(
            f"✓ Cámara {camera_index} ({facing.value}) abierta correctamente: "
            f"{properties['width']}x{properties['height']} a {properties['fps']} fps"
        )
        return stream

    @staticmethod
    def _check_permissions(camera_index: int) -> None:
        # En Linux el nodo del dispositivo permite distinguir permiso de ausencia
        device = f"/dev/video{camera_index}"
        if os.path.exists(device) and not os.access(device, os.R_OK | os.W_OK):
            raise PermissionDeniedError(
                f"Sin permiso para acceder a {device}. Revisa los permisos de la cámara."
            )

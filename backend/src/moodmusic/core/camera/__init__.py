"""
Módulo de captura de cámara.
Proporciona el acceso a la cámara con OpenCV y la sesión de captura.
"""

from .webcam import Facing, WebcamStream, CameraBackend, OpenCVCameraBackend
from .capture_session import CaptureSession, CapturedImage

__all__ = [
    'Facing',
    'WebcamStream',
    'CameraBackend',
    'OpenCVCameraBackend',
    'CaptureSession',
    'CapturedImage',
]

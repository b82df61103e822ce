"""
Fixtures compartidas: detector con respuestas programadas y backend de
cámara falso que registra el orden de aperturas y liberaciones.
"""

import threading
from typing import List, Optional

import numpy as np
import pytest

from moodmusic.core.camera.capture_session import CaptureSession
from moodmusic.core.camera.webcam import CameraBackend, Facing
from moodmusic.core.catalogue.catalogue import get_default_catalogue
from moodmusic.core.catalogue.schema import Mood
from moodmusic.core.emotion.base import EmotionDetector
from moodmusic.core.emotion.capability import DetectorCapability
from moodmusic.core.errors import DetectionError, ModelInitError
from moodmusic.core.session.machine import SessionStateMachine
from moodmusic.core.utils.metrics import PerformanceMetrics


def asymmetric_frame(height: int = 4, width: int = 6) -> np.ndarray:
    """Frame BGR cuya columna izquierda es blanca y el resto negro."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, 0, :] = 255
    return frame


class FakeStream:
    def __init__(self, backend, facing: Facing, mirrored: bool, serial: int):
        self.backend = backend
        self.facing = facing
        self.mirrored = mirrored
        self.serial = serial
        self.released = False

    @property
    def is_open(self) -> bool:
        return not self.released

    def read(self):
        self.backend.read_started.set()
        if self.backend.read_gate is not None:
            self.backend.read_gate.wait(timeout=5)
        if self.released or self.backend.fail_reads:
            return False, None
        return True, self.backend.frame.copy()

    def release(self):
        if not self.released:
            self.released = True
            self.backend.events.append(("release", self.serial))


class FakeCameraBackend(CameraBackend):
    """
    Backend que no toca hardware y anota cada open/release.

    `open_gate` y `read_gate`, si existen, bloquean la apertura y la lectura
    de frames hasta que se activen.
    """

    def __init__(self, frame: Optional[np.ndarray] = None):
        self.frame = asymmetric_frame() if frame is None else frame
        self.events: List = []
        self.streams: List[FakeStream] = []
        self.open_error: Optional[Exception] = None
        self.fail_reads = False
        self.open_gate = None
        self.read_gate = None
        self.read_started = threading.Event()

    def open(self, facing: Facing, width: int, height: int):
        if self.open_gate is not None:
            self.open_gate.wait(timeout=5)
        if self.open_error is not None:
            raise self.open_error
        stream = FakeStream(self, facing, facing is Facing.FRONT, len(self.streams))
        self.streams.append(stream)
        self.events.append(("open", stream.serial, facing))
        return stream

    @property
    def open_streams(self) -> List[FakeStream]:
        return [stream for stream in self.streams if stream.is_open]


class ScriptedDetector(EmotionDetector):
    """
    Detector con resultados programados.

    Cada elemento de `script` es un Mood (se devuelve) o una excepción (se
    lanza). `gate`, si existe, bloquea la detección hasta que se active.
    """

    def __init__(self, script=None, init_error: Optional[Exception] = None):
        self.script = list(script or [Mood.HAPPINESS])
        self.init_error = init_error
        self.init_calls = 0
        self.images: List[np.ndarray] = []
        self.gate = None
        self.init_gate = None

    @property
    def name(self) -> str:
        return "scripted"

    def initialize(self) -> None:
        self.init_calls += 1
        if self.init_gate is not None:
            self.init_gate.wait(timeout=5)
        if self.init_error is not None:
            raise self.init_error

    def detect(self, pixels: np.ndarray) -> Mood:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        self.images.append(pixels)
        outcome = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def metrics():
    return PerformanceMetrics()


@pytest.fixture
def backend():
    return FakeCameraBackend()


@pytest.fixture
def capture(backend, metrics):
    return CaptureSession(backend, width=1280, height=720, metrics=metrics)


@pytest.fixture
def detector():
    return ScriptedDetector()


@pytest.fixture
def capability(detector, metrics):
    return DetectorCapability(detector, metrics=metrics)


@pytest.fixture
def machine(capture, capability):
    return SessionStateMachine(capture, capability, catalogue=get_default_catalogue())


@pytest.fixture
def snapshots(machine):
    received = []
    machine.subscribe(received.append)
    return received


@pytest.fixture
def no_face():
    return DetectionError("No se detectó ningún rostro")


@pytest.fixture
def broken_models():
    return ModelInitError("pesos no encontrados")

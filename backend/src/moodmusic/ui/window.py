"""
Ventana interactiva con OpenCV.

Muestra la vista previa de la cámara con un panel superpuesto (fase,
avisos, emoción detectada y canciones recomendadas) y traduce las teclas en
eventos de la sesión. La ventana solo lee SessionSnapshot; todos los cambios
de estado pasan por SessionStateMachine.

Controles:
    - s / espacio: iniciar cámara (Ready) o capturar (Recording)
    - f: cambiar cámara frontal/trasera
    - g / b: género siguiente / anterior; 1-8 elige género directamente
    - r: reiniciar
    - q / Esc: salir
"""

import asyncio
import logging
import textwrap
import unicodedata
from enum import Enum
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..core.camera.capture_session import CaptureSession
from ..core.catalogue.schema import Genre
from ..core.session.machine import SessionStateMachine
from ..core.session.state import Phase, SessionSnapshot

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Mood Music Player"
GENRES: List[Genre] = list(Genre)

PHASE_LABELS = {
    Phase.IDLE: "Inactivo",
    Phase.LOADING_MODELS: "Cargando modelos de deteccion emocional...",
    Phase.READY: "Listo - pulsa 's' para hacer un selfie",
    Phase.RECORDING: "Camara activa - pulsa espacio para capturar",
    Phase.PROCESSING: "Procesando...",
    Phase.RESULT: "Resultado",
}


class Intent(Enum):
    START_CAMERA = "start_camera"
    SWITCH_CAMERA = "switch_camera"
    CAPTURE = "capture"
    CHANGE_GENRE = "change_genre"
    RESET = "reset"
    QUIT = "quit"


def intent_for_key(key: int, snapshot: SessionSnapshot) -> Optional[Tuple[Intent, Optional[Genre]]]:
    """
    Traduce una tecla en un evento de la sesión.

    Args:
        key: Código de tecla de cv2.waitKey (ya enmascarado con 0xFF)
        snapshot: Estado actual, para teclas cuyo significado depende de la fase

    Returns:
        (Intent, género o None) o None si la tecla no tiene acción
    """
    if key in (ord('q'), 27):
        return Intent.QUIT, None
    if key in (ord('s'), ord(' ')):
        if snapshot.phase is Phase.READY:
            return Intent.START_CAMERA, None
        return Intent.CAPTURE, None
    if key == ord('c'):
        return Intent.CAPTURE, None
    if key == ord('f'):
        return Intent.SWITCH_CAMERA, None
    if key == ord('r'):
        return Intent.RESET, None
    if key in (ord('g'), ord('b')):
        step = 1 if key == ord('g') else -1
        index = GENRES.index(snapshot.selected_genre)
        return Intent.CHANGE_GENRE, GENRES[(index + step) % len(GENRES)]
    if ord('1') <= key < ord('1') + len(GENRES):
        return Intent.CHANGE_GENRE, GENRES[key - ord('1')]
    return None


def _ascii(text: str) -> str:
    """cv2.putText solo dibuja ASCII: se eliminan acentos y signos de apertura."""
    normalized = unicodedata.normalize('NFKD', text)
    return normalized.encode('ascii', 'ignore').decode('ascii')


def _put(frame: np.ndarray, text: str, y: int, scale: float = 0.6,
         color=(255, 255, 255), thickness: int = 1) -> int:
    cv2.putText(frame, _ascii(text), (20, y), cv2.FONT_HERSHEY_SIMPLEX,
                scale, color, thickness, cv2.LINE_AA)
    return y + int(34 * scale + 10)


class SessionWindow:
    """
    Presentación de la sesión en una ventana de OpenCV.

    Attributes:
        machine (SessionStateMachine): Máquina de estados que recibe los eventos
        capture (CaptureSession): Fuente de la vista previa
    """

    def __init__(self, machine: SessionStateMachine, capture: CaptureSession,
                 size: Tuple[int, int] = (720, 1280)):
        self.machine = machine
        self.capture = capture
        self.size = size
        self.last_frame: Optional[np.ndarray] = None

    def render(self, snapshot: SessionSnapshot, frame: Optional[np.ndarray]) -> np.ndarray:
        """Dibuja el panel de estado sobre el frame (o sobre un lienzo negro)."""
        if frame is None:
            canvas = np.zeros((self.size[0], self.size[1], 3), dtype=np.uint8)
        else:
            canvas = frame.copy()

        panel_height = 200 if snapshot.phase is not Phase.RESULT else 120 + 30 * (
            len(snapshot.recommendations) + 4)
        panel_height = min(panel_height, canvas.shape[0])
        panel_width = min(760, canvas.shape[1])

        # Fondo semi-transparente para el texto
        overlay = canvas.copy()
        cv2.rectangle(overlay, (10, 10), (panel_width, panel_height), (0, 0, 0), -1)
        cv2.addWeighted(overlay, 0.6, canvas, 0.4, 0, canvas)

        y = _put(canvas, PHASE_LABELS[snapshot.phase], 45, 0.8, (0, 255, 0), 2)
        y = _put(canvas, f"Genero: {snapshot.selected_genre.label}   Camara: {snapshot.facing.value}",
                 y, 0.5, (200, 200, 200))

        if snapshot.busy:
            y = _put(canvas, "Espera...", y, 0.5, (0, 165, 255))

        if snapshot.phase is Phase.RESULT and snapshot.detected_mood is not None:
            y = _put(canvas, f"Emocion: {snapshot.detected_mood.value}", y, 0.7, (100, 200, 255), 2)
            for line in textwrap.wrap(snapshot.description or "", 80)[:3]:
                y = _put(canvas, line, y, 0.45)
            if not snapshot.recommendations:
                y = _put(canvas, "Sin canciones para este genero", y, 0.5, (0, 165, 255))
            for index, song in enumerate(snapshot.recommendations, start=1):
                y = _put(canvas, f"{index}. {song.name}", y, 0.55, (255, 255, 255))

        if snapshot.notice is not None:
            color = (0, 0, 255) if snapshot.notice.destructive else (0, 255, 0)
            y = _put(canvas, f"{snapshot.notice.title}: {snapshot.notice.message}", y, 0.45, color)

        _put(canvas, "s/espacio: selfie/capturar  f: camara  g/b/1-8: genero  r: reiniciar  q: salir",
             canvas.shape[0] - 20, 0.4, (200, 200, 200))
        return canvas

    async def dispatch(self, intent: Intent, genre: Optional[Genre] = None) -> None:
        if intent is Intent.START_CAMERA:
            await self.machine.start_camera()
        elif intent is Intent.SWITCH_CAMERA:
            await self.machine.switch_camera()
        elif intent is Intent.CAPTURE:
            await self.machine.capture()
        elif intent is Intent.CHANGE_GENRE:
            await self.machine.change_genre(genre)
        elif intent is Intent.RESET:
            await self.machine.reset()

    async def run(self) -> None:
        """
        Bucle principal: vista previa, teclado y eventos de la sesión.

        Solo hay una operación de cámara o detección en curso a la vez;
        mientras tanto la vista previa queda congelada en el último frame.
        """
        init_task = asyncio.create_task(self.machine.initialize())
        pending: Optional[asyncio.Task] = None

        try:
            while True:
                snapshot = self.machine.snapshot()
                idle_camera = pending is None or pending.done()

                frame = None
                if idle_camera and not snapshot.busy and snapshot.phase in (Phase.RECORDING, Phase.RESULT):
                    frame = await asyncio.to_thread(self.capture.read_preview)
                    if frame is not None:
                        self.last_frame = frame
                elif snapshot.phase in (Phase.PROCESSING, Phase.RECORDING, Phase.RESULT):
                    frame = self.last_frame

                cv2.imshow(WINDOW_TITLE, self.render(snapshot, frame))
                key = cv2.waitKey(15) & 0xFF
                await asyncio.sleep(0)

                action = intent_for_key(key, snapshot) if key != 255 else None
                if action is None:
                    continue

                intent, genre = action
                if intent is Intent.QUIT:
                    logger.info("Saliendo...")
                    break
                if intent in (Intent.RESET, Intent.CHANGE_GENRE):
                    await self.dispatch(intent, genre)
                elif idle_camera:
                    pending = asyncio.create_task(self.dispatch(intent, genre))
                else:
                    # Se delega el rechazo a la máquina de estados
                    await self.dispatch(intent, genre)
        finally:
            await self.machine.teardown()
            for task in (pending, init_task):
                if task is not None and not task.done():
                    task.cancel()
            cv2.destroyAllWindows()

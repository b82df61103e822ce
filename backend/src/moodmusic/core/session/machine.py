"""
Máquina de estados de la sesión.

Secuencia el ciclo completo de la interfaz:

    Idle -> LoadingModels -> Ready -> Recording -> Processing -> Result -> Ready

y es el único componente que modifica SessionState. Cada evento del usuario
(iniciar cámara, cambiar cámara, capturar, cambiar género, reiniciar) es un
método asíncrono que nunca lanza excepciones: los fallos de cámara, modelos
o detección se convierten en un aviso y en una transición a la última fase
interactiva.

Concurrencia:
    - Las operaciones bloqueantes (OpenCV, DeepFace) se ejecutan con
      asyncio.to_thread, pero la máquina las serializa: la fase (o el
      indicador busy) se actualiza antes de cada espera.
    - Solo puede haber un ciclo captura/detección en curso. Una captura
      durante Processing se rechaza, no se encola.
    - Las operaciones de cámara (abrir, cambiar, capturar, liberar) se
      serializan con un lock: reset y teardown esperan a la que esté en
      curso antes de liberar el stream, y nunca hay dos aperturas a la vez.
    - Reset y teardown avanzan la época de la sesión; cualquier resultado
      que llegue con una época anterior se descarta.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from .state import Notice, Phase, SessionSnapshot, SessionState
from ..camera.capture_session import CaptureSession
from ..catalogue.catalogue import MoodCatalogue, get_default_catalogue
from ..catalogue.schema import DEFAULT_GENRE, Genre, parse_genre
from ..catalogue.selector import recommend, select_songs
from ..emotion.capability import DetectorCapability, DetectorStatus
from ..errors import (
    DetectionError,
    DeviceUnavailableError,
    ModelInitError,
    MoodMusicError,
    NoticeKind,
)

logger = logging.getLogger(__name__)

Listener = Callable[[SessionSnapshot], None]


class SessionStateMachine:
    """
    Controlador de la sesión interactiva.

    Attributes:
        capture_session (CaptureSession): Dueña del stream de cámara
        detector (DetectorCapability): Capacidad de detección emocional
        catalogue (MoodCatalogue): Catálogo de recomendaciones
        default_genre (Genre): Género inicial y tras reiniciar

    Example:
        >>> machine = SessionStateMachine(capture, detector)
        >>> machine.subscribe(lambda snapshot: print(snapshot.phase))
        >>> await machine.initialize()
        >>> await machine.start_camera()
        >>> await machine.capture()
        >>> await machine.change_genre("rock")
        >>> await machine.reset()
    """

    def __init__(
        self,
        capture_session: CaptureSession,
        detector: DetectorCapability,
        catalogue: Optional[MoodCatalogue] = None,
        default_genre: Genre = DEFAULT_GENRE
    ):
        self.capture_session = capture_session
        self.detector = detector
        self.catalogue = catalogue if catalogue is not None else get_default_catalogue()
        self.default_genre = parse_genre(default_genre)

        self._state = SessionState(selected_genre=self.default_genre, facing=capture_session.facing)
        self._listeners: List[Listener] = []
        self._epoch = 0
        # Como mucho una operación de cámara en curso
        self._camera_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Observación
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def snapshot(self) -> SessionSnapshot:
        state = self._state
        entry = state.entry
        return SessionSnapshot(
            phase=state.phase,
            detected_mood=state.detected_mood,
            selected_genre=state.selected_genre,
            recommendations=state.songs,
            description=entry.description if entry else None,
            gradient=entry.gradient if entry else None,
            notice=state.notice,
            facing=state.facing,
            busy=state.busy,
            models_status=self.detector.status,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registra un oyente de cambios de estado.

        Returns:
            Función que cancela la suscripción
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                # Un oyente roto no puede detener la sesión
                logger.exception("Error en un oyente de la sesión")

    def _transition(self, phase: Phase, notice: Optional[Notice] = None, **changes) -> None:
        previous = self._state.phase
        self._state.phase = phase
        self._state.notice = notice
        for key, value in changes.items():
            setattr(self._state, key, value)
        if previous is not phase:
            logger.info(f"Sesión: {previous.value} -> {phase.value}")
        self._publish()

    def _notify(self, notice: Notice) -> None:
        self._state.notice = notice
        self._publish()

    def _reject(self, event: str, kind: NoticeKind = NoticeKind.INVALID_EVENT, message: str = None) -> bool:
        message = message or f"'{event}' no está disponible en la fase {self._state.phase.value}"
        logger.warning(f"Evento rechazado: {event} ({self._state.phase.value})")
        self._notify(Notice(kind=kind, title="Acción no disponible", message=message, destructive=True))
        return False

    def _is_stale(self, epoch: int) -> bool:
        return epoch != self._epoch

    # ------------------------------------------------------------------
    # Eventos
    # ------------------------------------------------------------------

    async def initialize(self) -> bool:
        """
        Carga los modelos de detección.

        Desde Idle pasa por LoadingModels y termina en Ready (degradado si la
        carga falla). Desde Ready con la carga fallida, reintenta sin
        cambiar de fase.

        Returns:
            bool: True si los modelos quedaron cargados
        """
        status = self.detector.status
        if self._state.phase is Phase.IDLE:
            self._transition(Phase.LOADING_MODELS, busy=True)
        elif status is DetectorStatus.READY:
            return True
        elif self._state.phase is not Phase.LOADING_MODELS and status is not DetectorStatus.LOADING:
            logger.info("Reintentando la carga de modelos")
            self._publish()
        else:
            return self._reject("initialize", NoticeKind.MODELS_LOADING,
                                "Los modelos de detección emocional todavía se están cargando...")

        epoch = self._epoch
        try:
            await self.detector.initialize_detectors()
        except ModelInitError as e:
            notice = Notice.from_error(e)
            loaded = False
        else:
            notice = Notice.info("¡Listo!", "Modelos de detección emocional cargados correctamente.")
            loaded = True

        if self._state.phase is Phase.LOADING_MODELS and not self._is_stale(epoch):
            self._transition(Phase.READY, notice, busy=False)
        elif self._state.phase is not Phase.IDLE:
            self._notify(notice)
        return loaded

    async def start_camera(self) -> bool:
        """Ready -> Recording. Un fallo de cámara deja la sesión en Ready."""
        if self._state.phase is not Phase.READY:
            return self._reject("start_camera")
        if self._state.busy or self._camera_lock.locked():
            return self._reject("start_camera", NoticeKind.BUSY, "La cámara se está iniciando")

        epoch = self._epoch
        self._state.busy = True
        self._publish()

        async with self._camera_lock:
            try:
                await asyncio.to_thread(self.capture_session.start, self._state.facing)
            except MoodMusicError as e:
                if not self._is_stale(epoch):
                    self._transition(Phase.READY, Notice.from_error(e), busy=False)
                return False
            except Exception as e:
                logger.exception("Error inesperado al iniciar la cámara")
                if not self._is_stale(epoch):
                    error = DeviceUnavailableError(f"No se pudo acceder a la cámara: {e}")
                    self._transition(Phase.READY, Notice.from_error(error), busy=False)
                return False

            if self._is_stale(epoch):
                # La sesión se reinició mientras se abría la cámara
                self.capture_session.stop()
                return False

        self._transition(Phase.RECORDING, busy=False)
        return True

    async def switch_camera(self) -> bool:
        """
        Cambia entre cámara frontal y trasera sin salir de Recording.

        Si la nueva cámara no se puede abrir, la sesión vuelve a Ready sin
        stream.
        """
        if self._state.phase is not Phase.RECORDING:
            return self._reject("switch_camera")
        if self._state.busy or self._camera_lock.locked():
            return self._reject("switch_camera", NoticeKind.BUSY, "La cámara está ocupada")

        epoch = self._epoch
        self._state.busy = True
        self._publish()

        async with self._camera_lock:
            try:
                await asyncio.to_thread(self.capture_session.switch_facing)
            except Exception as e:
                if not isinstance(e, MoodMusicError):
                    logger.exception("Error inesperado al cambiar de cámara")
                    e = DeviceUnavailableError(f"No se pudo cambiar de cámara: {e}")
                if self._is_stale(epoch):
                    return False
                self.capture_session.stop()
                self._transition(Phase.READY, Notice.from_error(e), busy=False,
                                 facing=self.capture_session.facing)
                return False

            if self._is_stale(epoch):
                self.capture_session.stop()
                return False

        self._transition(Phase.RECORDING, busy=False, facing=self.capture_session.facing)
        return True

    async def capture(self) -> bool:
        """
        Captura un frame y detecta la emoción.

        Recording -> Processing -> Result, o de vuelta a Recording con un
        aviso si la detección falla o la emoción no está en el catálogo.

        Returns:
            bool: True si se llegó a Result
        """
        if self._state.phase is Phase.PROCESSING:
            return self._reject("capture", NoticeKind.BUSY, "Ya se está analizando una captura")
        if self._state.phase is not Phase.RECORDING or self._state.busy:
            return self._reject("capture")

        status = self.detector.status
        if status in (DetectorStatus.NOT_LOADED, DetectorStatus.LOADING):
            logger.warning("Captura solicitada con los modelos cargando")
            self._notify(Notice(
                kind=NoticeKind.MODELS_LOADING,
                title="Espera un momento",
                message="Los modelos de detección emocional todavía se están cargando...",
                destructive=True,
            ))
            return False
        if status is DetectorStatus.FAILED:
            error = ModelInitError(
                f"La captura está desactivada: {self.detector.failure_reason}"
            )
            self._notify(Notice.from_error(error))
            return False

        epoch = self._epoch
        self._transition(Phase.PROCESSING, busy=True)

        try:
            async with self._camera_lock:
                image = await asyncio.to_thread(self.capture_session.capture_frame, epoch)
            if self._is_stale(epoch):
                logger.info(f"Captura descartada (sesión reiniciada, ciclo {image.cycle})")
                return False
            mood = await self.detector.detect_emotion(image)
        except Exception as e:
            if not isinstance(e, MoodMusicError):
                logger.exception("Error inesperado durante la captura")
                e = DetectionError(f"Error al analizar la imagen: {e}")
            if self._is_stale(epoch):
                logger.info("Resultado de detección descartado (sesión reiniciada)")
                return False
            self._transition(Phase.RECORDING, Notice.from_error(e), busy=False)
            return False

        if self._is_stale(epoch):
            logger.info(
                f"Resultado de detección descartado (sesión reiniciada, ciclo {image.cycle}): {mood.value}"
            )
            return False

        try:
            recommendation = recommend(self.catalogue, mood, self._state.selected_genre)
        except MoodMusicError as e:
            logger.warning(f"Emoción sin entrada en el catálogo: {mood.value}")
            self._transition(Phase.RECORDING, Notice.from_error(e), busy=False)
            return False

        self._transition(
            Phase.RESULT,
            Notice.info("¡Emoción detectada!", f"Detectamos que te sientes: {mood.value}"),
            busy=False,
            detected_mood=mood,
            entry=recommendation.entry,
            songs=recommendation.songs,
        )
        return True

    async def change_genre(self, genre) -> bool:
        """
        Cambia el género seleccionado.

        En Result vuelve a seleccionar canciones sin repetir la detección.
        En otras fases solo guarda el género para el próximo resultado.
        """
        try:
            genre = parse_genre(genre)
        except ValueError as e:
            return self._reject("change_genre", message=str(e))

        self._state.selected_genre = genre
        if self._state.phase is Phase.RESULT and self._state.entry is not None:
            self._state.songs = select_songs(self._state.entry, genre)
        self._state.notice = None
        logger.info(f"Género seleccionado: {genre.value}")
        self._publish()
        return True

    async def reset(self) -> bool:
        """
        Vuelve a Ready: libera la cámara y borra emoción y género.

        Si hay una operación de cámara en curso se espera a que termine antes
        de liberar el stream. Un resultado de detección todavía en curso se
        descartará al llegar.
        """
        if self._state.phase in (Phase.IDLE, Phase.LOADING_MODELS):
            return self._reject("reset")

        self._epoch += 1
        async with self._camera_lock:
            self.capture_session.stop()
        self._transition(
            Phase.READY,
            busy=False,
            facing=self.capture_session.facing,
            detected_mood=None,
            entry=None,
            songs=(),
            selected_genre=self.default_genre,
        )
        return True

    async def teardown(self) -> None:
        """Cierre del componente: libera la cámara desde cualquier fase y pasa a Idle."""
        self._epoch += 1
        async with self._camera_lock:
            self.capture_session.stop()
        self._transition(
            Phase.IDLE,
            busy=False,
            facing=self.capture_session.facing,
            detected_mood=None,
            entry=None,
            songs=(),
        )

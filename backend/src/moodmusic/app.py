"""
Aplicación principal - Mood Music Player.

Construye los componentes del pipeline (cámara, detector, catálogo y
máquina de estados) y abre la ventana interactiva.

Uso:
    moodmusic
    moodmusic --genre jazz --front-index 0 --back-index 2
    moodmusic --metrics --log-level DEBUG

IMPORTANTE: La cámara NO se abre al arrancar. Solo se activa cuando el
usuario pulsa 's' una vez cargados los modelos.
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, List, Optional

from . import __version__
from .config import build_config
from .core.camera import CaptureSession, Facing, OpenCVCameraBackend
from .core.catalogue import get_default_catalogue, GENRE_LABELS
from .core.emotion import DeepFaceEmotionDetector, DetectorCapability
from .core.session import SessionStateMachine
from .core.utils.metrics import get_metrics
from .ui.window import SessionWindow

logger = logging.getLogger(__name__)


def create_session(config: Dict) -> SessionStateMachine:
    """
    Factory de la sesión a partir de la configuración.

    Args:
        config (dict): Configuración completa (ver build_config)

    Returns:
        SessionStateMachine: Sesión en fase Idle, sin cámara abierta
    """
    metrics = get_metrics()

    backend = OpenCVCameraBackend(
        front_index=config['CAMERA_INDEX_FRONT'],
        back_index=config['CAMERA_INDEX_BACK'],
        front_mirrored=config['FRONT_CAMERA_MIRRORED'],
    )
    capture = CaptureSession(
        backend,
        width=config['CAPTURE_WIDTH'],
        height=config['CAPTURE_HEIGHT'],
        metrics=metrics,
    )
    capture.facing = Facing(str(config['DEFAULT_FACING']).lower())

    detector = DetectorCapability(
        DeepFaceEmotionDetector(
            detector_backend=config['DETECTOR_BACKEND'],
            confidence_threshold=config['FACE_CONFIDENCE_THRESHOLD'],
        ),
        metrics=metrics,
    )

    return SessionStateMachine(
        capture,
        detector,
        catalogue=get_default_catalogue(),
        default_genre=config['DEFAULT_GENRE'],
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Detecta tu emoción con la cámara y recomienda canciones"
    )
    parser.add_argument(
        '--front-index',
        type=int,
        default=None,
        help='Índice OpenCV de la cámara frontal'
    )
    parser.add_argument(
        '--back-index',
        type=int,
        default=None,
        help='Índice OpenCV de la cámara trasera'
    )
    parser.add_argument(
        '--width',
        type=int,
        default=None,
        help='Ancho preferido de captura (default: 1280)'
    )
    parser.add_argument(
        '--height',
        type=int,
        default=None,
        help='Alto preferido de captura (default: 720)'
    )
    parser.add_argument(
        '--genre',
        default=None,
        choices=[genre.value for genre in GENRE_LABELS],
        help='Género inicial (default: pop)'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Nivel de logging'
    )
    parser.add_argument(
        '--metrics',
        action='store_true',
        help='Imprimir el resumen de latencias al salir'
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Función principal: configura logging, crea la sesión y abre la ventana.
    """
    args = parse_args(argv)

    try:
        config = build_config({
            'CAMERA_INDEX_FRONT': args.front_index,
            'CAMERA_INDEX_BACK': args.back_index,
            'CAPTURE_WIDTH': args.width,
            'CAPTURE_HEIGHT': args.height,
            'DEFAULT_GENRE': args.genre,
            'LOG_LEVEL': args.log_level,
        })
    except ValueError as e:
        print(f"✗ Configuración inválida: {e}")
        return 2

    logging.basicConfig(
        level=getattr(logging, str(config['LOG_LEVEL']).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    print("=" * 70)
    print(f"Mood Music Player v{__version__}")
    print("=" * 70)
    print("\nNOTA: La carga de modelos puede tardar unos segundos la primera vez\n")

    machine = create_session(config)
    window = SessionWindow(
        machine,
        machine.capture_session,
        size=(config['CAPTURE_HEIGHT'], config['CAPTURE_WIDTH']),
    )

    try:
        asyncio.run(window.run())
    except KeyboardInterrupt:
        print("\n\n✓ Interrumpido por el usuario")
    finally:
        if args.metrics:
            get_metrics().print_summary()
        print("✓ Recursos liberados correctamente")

    return 0


if __name__ == "__main__":
    sys.exit(main())

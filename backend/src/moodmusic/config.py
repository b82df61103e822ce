"""
Configuración de la sesión.

La configuración es un diccionario plano con valores por defecto que se
pueden sobrescribir con variables de entorno (MOODMUSIC_<CLAVE>) y, por
último, con un diccionario explícito (por ejemplo, argumentos de línea de
comandos).
"""

import os
from typing import Dict, Optional

from .core.catalogue.schema import parse_genre

ENV_PREFIX = "MOODMUSIC_"

DEFAULT_CONFIG: Dict = {
    # Índices de dispositivo OpenCV para cada orientación de cámara
    'CAMERA_INDEX_FRONT': 0,
    'CAMERA_INDEX_BACK': 1,
    # La cámara frontal entrega frames espejados (vista "selfie")
    'FRONT_CAMERA_MIRRORED': True,
    # Resolución preferida (sugerencia; el dispositivo puede ignorarla)
    'CAPTURE_WIDTH': 1280,
    'CAPTURE_HEIGHT': 720,
    'DEFAULT_GENRE': 'pop',
    'DEFAULT_FACING': 'front',
    # Confianza mínima de detección de rostro de DeepFace
    'FACE_CONFIDENCE_THRESHOLD': 0.9,
    'DETECTOR_BACKEND': 'opencv',
    'LOG_LEVEL': 'INFO',
}


def _coerce(key: str, raw: str):
    """Convierte el valor de una variable de entorno al tipo del valor por defecto."""
    default = DEFAULT_CONFIG[key]
    if isinstance(default, bool):
        return raw.strip().lower() in ('1', 'true', 'yes', 'on')
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def validate_config(config: Dict) -> None:
    """
    Valida una configuración completa.

    Raises:
        ValueError: Si algún valor está fuera de rango o no es reconocido
    """
    parse_genre(config['DEFAULT_GENRE'])

    if str(config['DEFAULT_FACING']).lower() not in ('front', 'back'):
        raise ValueError(
            f"DEFAULT_FACING inválido: {config['DEFAULT_FACING']} (usa 'front' o 'back')"
        )

    for key in ('CAPTURE_WIDTH', 'CAPTURE_HEIGHT'):
        if int(config[key]) <= 0:
            raise ValueError(f"{key} debe ser positivo: {config[key]}")

    threshold = float(config['FACE_CONFIDENCE_THRESHOLD'])
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"FACE_CONFIDENCE_THRESHOLD fuera de rango [0, 1]: {threshold}")


def build_config(overrides: Optional[Dict] = None, environ: Optional[Dict] = None) -> Dict:
    """
    Construye la configuración efectiva.

    Prioridad (de menor a mayor): DEFAULT_CONFIG, variables de entorno,
    overrides.

    Args:
        overrides (dict, optional): Valores explícitos; los None se ignoran
        environ (dict, optional): Entorno a usar (por defecto os.environ)

    Returns:
        dict: Configuración validada

    Example:
        >>> config = build_config({'DEFAULT_GENRE': 'jazz'})
        >>> config['CAPTURE_WIDTH']
        1280
    """
    environ = os.environ if environ is None else environ
    config = dict(DEFAULT_CONFIG)

    for key in DEFAULT_CONFIG:
        raw = environ.get(ENV_PREFIX + key)
        if raw is not None:
            try:
                config[key] = _coerce(key, raw)
            except ValueError:
                raise ValueError(f"Variable de entorno {ENV_PREFIX + key} inválida: {raw!r}")

    if overrides:
        for key, value in overrides.items():
            if key not in DEFAULT_CONFIG:
                raise ValueError(f"Clave de configuración desconocida: {key}")
            if value is not None:
                config[key] = value

    validate_config(config)
    return config

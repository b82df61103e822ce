"""
Módulo de instrumentación y medición de rendimiento.

Mide las latencias de las etapas del pipeline (apertura de cámara, captura
de frame, carga de modelos y detección emocional). Las mediciones solo se
guardan en memoria: el sistema no persiste nada entre sesiones.
"""

import logging
import time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional
import statistics

logger = logging.getLogger(__name__)


class PerformanceMetrics:
    """
    Gestor de métricas de rendimiento del sistema.

    Permite medir tiempos de ejecución de diferentes etapas del pipeline
    para mostrarlos al final de la sesión.
    """

    def __init__(self):
        self.measurements: Dict[str, List[float]] = defaultdict(list)
        self.metadata: Dict[str, List[Dict[str, Any]]] = defaultdict(list)

    @contextmanager
    def measure(self, stage_name: str, metadata: Optional[Dict] = None):
        """
        Context manager para medir el tiempo de ejecución de una etapa.

        La medición se registra aunque la etapa lance una excepción.

        Args:
            stage_name: Nombre de la etapa a medir
            metadata: Información adicional sobre la medición

        Example:
            with metrics.measure('emotion_detection') as timing:
                mood = detector.detect(frame)
            print(f"Tardó {timing['duration']} segundos")
        """
        start_time = time.perf_counter()
        timing_info = {'stage': stage_name}

        try:
            yield timing_info
        finally:
            duration = time.perf_counter() - start_time

            timing_info['duration'] = duration
            timing_info['timestamp'] = datetime.now().isoformat()

            self.measurements[stage_name].append(duration)

            if metadata:
                timing_info.update(metadata)
            self.metadata[stage_name].append(timing_info)

    def get_statistics(self, stage_name: Optional[str] = None) -> Dict:
        """
        Calcula estadísticas sobre las mediciones realizadas.

        Args:
            stage_name: Etapa específica (None para todas)

        Returns:
            Diccionario con estadísticas por etapa
        """
        if stage_name:
            stages = {stage_name: self.measurements.get(stage_name, [])}
        else:
            stages = self.measurements

        stats = {}
        for name, times in stages.items():
            if not times:
                continue

            stats[name] = {
                'count': len(times),
                'mean': statistics.mean(times),
                'median': statistics.median(times),
                'stdev': statistics.stdev(times) if len(times) > 1 else 0.0,
                'min': min(times),
                'max': max(times),
                'total': sum(times)
            }

        return stats

    def print_summary(self):
        """
        Imprime un resumen de las estadísticas por consola.
        """
        stats = self.get_statistics()

        if not stats:
            print("No hay mediciones disponibles")
            return

        print("\n" + "=" * 70)
        print("RESUMEN DE MÉTRICAS DE RENDIMIENTO")
        print("=" * 70)

        for stage_name, stage_stats in stats.items():
            print(f"\n[{stage_name.upper()}]")
            print(f"  Mediciones: {stage_stats['count']}")
            print(f"  Media:      {stage_stats['mean']*1000:.2f} ms")
            print(f"  Mediana:    {stage_stats['median']*1000:.2f} ms")
            print(f"  Mínimo:     {stage_stats['min']*1000:.2f} ms")
            print(f"  Máximo:     {stage_stats['max']*1000:.2f} ms")

        # Latencia percibida por el usuario al pulsar "capturar"
        if 'frame_capture' in stats and 'emotion_detection' in stats:
            total_mean = stats['frame_capture']['mean'] + stats['emotion_detection']['mean']
            print(f"\n[LATENCIA TOTAL - Captura + Emoción]")
            print(f"  Media:      {total_mean*1000:.2f} ms")

        print("\n" + "=" * 70 + "\n")

    def clear(self):
        """Limpia todas las mediciones almacenadas."""
        self.measurements.clear()
        self.metadata.clear()


# Instancia global para uso en la aplicación
_global_metrics = None


def get_metrics() -> PerformanceMetrics:
    """
    Obtiene la instancia global de métricas.

    Returns:
        Instancia de PerformanceMetrics
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = PerformanceMetrics()
    return _global_metrics


def reset_metrics():
    """Reinicia la instancia global de métricas."""
    global _global_metrics
    _global_metrics = None

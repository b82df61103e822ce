"""
Módulo de utilidades comunes del sistema.
"""

from .metrics import PerformanceMetrics, get_metrics, reset_metrics

__all__ = ['PerformanceMetrics', 'get_metrics', 'reset_metrics']

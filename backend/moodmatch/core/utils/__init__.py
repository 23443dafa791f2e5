"""
Módulo de utilidades comunes del sistema.

Este paquete contiene funciones reutilizables que se usan en diferentes
partes del sistema (distribuciones emocionales, simulación, métricas).
"""

# Importar funciones matemáticas desde el módulo math
from .math import clamp, lerp, rescale, weighted_choice, format_duration

__all__ = ['clamp', 'lerp', 'rescale', 'weighted_choice', 'format_duration']

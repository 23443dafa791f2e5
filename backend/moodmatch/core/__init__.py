"""
Core - Módulo principal del sistema de reconocimiento emocional y recomendación.

Este paquete contiene todos los componentes fundamentales del sistema:
- camera: Captura de imagen fija desde la webcam y codificación de frames
- emotion: Cadena de proveedores de detección emocional y normalización
- recommend: Recomendaciones de películas, canciones y libros por emoción
- analytics: Análisis del historial de detecciones
- utils: Utilidades matemáticas y métricas de rendimiento
"""

from . import analytics
from . import camera
from . import emotion
from . import recommend
from . import utils

# Exponer componentes principales para facilitar imports
from .camera import WebcamCapture, capture_still
from .emotion import EmotionProviderChain, EmotionResult, normalize_emotion
from .recommend import RecommendationAggregator, build_aggregator

__all__ = [
    'analytics',
    'camera',
    'emotion',
    'recommend',
    'utils',
    'WebcamCapture',
    'capture_still',
    'EmotionProviderChain',
    'EmotionResult',
    'normalize_emotion',
    'RecommendationAggregator',
    'build_aggregator',
]

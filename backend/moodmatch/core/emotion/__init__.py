"""
Módulo de reconocimiento emocional facial.

Contiene el esquema de emociones estándar, los proveedores externos, el
simulador heurístico y la cadena que los orquesta.
"""

from .chain import EmotionProviderChain, RealDetectionUnavailable
from .deepface_detector import DeepFaceEmotionDetector
from .providers import build_providers
from .schema import (
    EmotionResult,
    STANDARD_EMOTIONS,
    get_all_emotions,
    is_valid_emotion,
    no_face_result,
    normalize_distribution,
    normalize_emotion,
)
from .simulator import EmotionSimulator

__all__ = [
    'DeepFaceEmotionDetector',
    'EmotionProviderChain',
    'EmotionResult',
    'EmotionSimulator',
    'RealDetectionUnavailable',
    'STANDARD_EMOTIONS',
    'build_providers',
    'get_all_emotions',
    'is_valid_emotion',
    'no_face_result',
    'normalize_distribution',
    'normalize_emotion',
]

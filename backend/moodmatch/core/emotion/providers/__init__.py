"""
Proveedores reales de detección emocional, en orden de prioridad.
"""

from typing import List, Mapping, Optional

import requests

from .azure_face import AzureFaceProvider
from .base import EmotionProvider, ProviderError, ProviderNotConfigured, ProviderUnavailable
from .faceplusplus import FacePlusPlusProvider
from .google_vision import GoogleVisionProvider
from .local_service import LocalServiceProvider


def build_providers(config: Mapping, session: Optional[requests.Session] = None) -> List[EmotionProvider]:
    """
    Crea la lista de proveedores a partir de la configuración de la app.

    Args:
        config: app.config o cualquier mapping con las claves de Config
        session: Sesión HTTP compartida (opcional)

    Returns:
        List[EmotionProvider]: servicio local, Face++, Azure, Google Vision
    """
    session = session or requests.Session()
    return [
        LocalServiceProvider(config.get('EMOTION_API_URL', ''), session=session),
        FacePlusPlusProvider(config.get('FACEPLUS_API_KEY', ''), config.get('FACEPLUS_API_SECRET', ''),
                             session=session),
        AzureFaceProvider(config.get('AZURE_FACE_API_KEY', ''), config.get('AZURE_FACE_ENDPOINT', ''),
                          session=session),
        GoogleVisionProvider(config.get('GOOGLE_VISION_API_KEY', ''), session=session),
    ]


__all__ = [
    'AzureFaceProvider',
    'EmotionProvider',
    'FacePlusPlusProvider',
    'GoogleVisionProvider',
    'LocalServiceProvider',
    'ProviderError',
    'ProviderNotConfigured',
    'ProviderUnavailable',
    'build_providers',
]

"""
Módulo de rutas de la API Flask.

Este paquete contiene los blueprints que definen los endpoints
de la API REST de detección emocional y recomendaciones.
"""

from .analytics import analytics_bp
from .emotion import emotion_bp
from .health import health_bp
from .recommendations import recommendations_bp
from .spotify_auth import spotify_bp

__all__ = ['analytics_bp', 'emotion_bp', 'health_bp', 'recommendations_bp', 'spotify_bp']

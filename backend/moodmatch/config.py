"""
Configuración del backend a partir de variables de entorno.

Las credenciales de los proveedores externos se leen del entorno (o de un
fichero .env). Una credencial ausente o con un valor de ejemplo significa
"proveedor no configurado": el sistema pasa al siguiente de la cadena,
nunca falla al arrancar.
"""

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()

# Prefijos/valores de ejemplo que se tratan como credencial no configurada
PLACEHOLDER_PREFIXES = ('your_', 'your-', '<')
PLACEHOLDER_VALUES = {'demo', 'changeme', 'none', 'null', 'xxx'}


def is_configured(value: Optional[str]) -> bool:
    """
    Indica si una credencial tiene un valor real.

    Examples:
        >>> is_configured("abc123")
        True
        >>> is_configured("your_faceplus_api_key_here")
        False
        >>> is_configured("")
        False
    """
    if not value:
        return False
    value = value.strip()
    if not value:
        return False
    lowered = value.lower()
    if lowered in PLACEHOLDER_VALUES:
        return False
    return not lowered.startswith(PLACEHOLDER_PREFIXES)


def mask_secret(value: Optional[str]) -> str:
    """Versión segura de una credencial para los logs."""
    if not value:
        return 'Not set'
    return f"{value[:4]}..."


def _env(*names: str, default: str = '') -> str:
    # Devuelve el primer nombre definido (permite alias NEXT_PUBLIC_*)
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    """Valores de configuración por defecto leídos del entorno."""

    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = _env_int('PORT', 5000)
    DEBUG = _env_bool('DEBUG')

    # Servicio local de clasificación (DeepFace), paso 1 de la cadena; vacío = desactivado
    EMOTION_API_URL = _env('EMOTION_API_URL')

    # Proveedores de visión
    FACEPLUS_API_KEY = _env('FACEPLUS_API_KEY', 'NEXT_PUBLIC_FACEPLUS_API_KEY')
    FACEPLUS_API_SECRET = _env('FACEPLUS_API_SECRET', 'NEXT_PUBLIC_FACEPLUS_API_SECRET')
    AZURE_FACE_API_KEY = _env('AZURE_FACE_API_KEY')
    AZURE_FACE_ENDPOINT = _env('AZURE_FACE_ENDPOINT')
    GOOGLE_VISION_API_KEY = _env('GOOGLE_VISION_API_KEY')

    # Proveedores de contenido
    OMDB_API_KEY = _env('OMDB_API_KEY', 'NEXT_PUBLIC_OMDB_API_KEY')
    SPOTIFY_CLIENT_ID = _env('SPOTIFY_CLIENT_ID')
    SPOTIFY_CLIENT_SECRET = _env('SPOTIFY_CLIENT_SECRET')
    GOOGLE_BOOKS_API_KEY = _env('GOOGLE_BOOKS_API_KEY')

    RECOMMENDATION_LIMIT = _env_int('RECOMMENDATION_LIMIT', 3)
    CAMERA_INDEX = _env_int('CAMERA_INDEX', 0)
    INCLUDE_METRICS = _env_bool('INCLUDE_METRICS')

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Claves en mayúsculas listas para app.config.update()."""
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if key.isupper()
        }

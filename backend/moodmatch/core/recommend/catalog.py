"""
Datos estáticos de recomendación: términos de búsqueda por emoción y
listas de respaldo.

Los ficheros JSON de `data/` se cargan una sola vez y se exponen como
vistas de solo lectura; los elementos de respaldo se devuelven siempre
como copias nuevas para que ningún llamante pueda alterar los datos
compartidos.
"""

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, List, Mapping

from ..emotion.schema import STANDARD_EMOTIONS
from .items import CONTENT_KINDS, RecommendationItem

DATA_DIR = Path(__file__).resolve().parent / "data"


def _freeze(value: Any) -> Any:
    # Convierte dicts/listas anidados en estructuras inmutables
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _load_json(filename: str) -> Any:
    with open(DATA_DIR / filename, encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=None)
def emotion_queries() -> Mapping[str, Any]:
    """Términos de búsqueda por emoción (`movies`, `songs`, `books`)."""
    return _freeze(_load_json("emotion_queries.json"))


@lru_cache(maxsize=None)
def fallback_catalog() -> Mapping[str, Any]:
    """Listas de respaldo indexadas por tipo de contenido y emoción."""
    return MappingProxyType({
        kind: _freeze(_load_json(f"fallback_{kind}.json"))
        for kind in CONTENT_KINDS
    })


def _check_emotion(emotion: str):
    if emotion not in STANDARD_EMOTIONS:
        raise ValueError(f"Emoción desconocida: {emotion!r}")


def get_queries(emotion: str, kind: str) -> Mapping[str, Any]:
    """
    Términos de búsqueda de una emoción para un tipo de contenido.

    Para `songs` devuelve `{queries, genres, audio_features}`; para
    `movies` y `books` una tupla de términos.

    Raises:
        ValueError: Emoción fuera del conjunto estándar
        KeyError: Tipo de contenido desconocido
    """
    _check_emotion(emotion)
    if kind not in CONTENT_KINDS:
        raise KeyError(kind)
    return emotion_queries()[emotion][kind]


def get_fallback(kind: str, emotion: str) -> List[RecommendationItem]:
    """
    Lista de respaldo de una emoción, como copias independientes.

    Example:
        >>> get_fallback("movies", "happy")[0].title
        'The Grand Budapest Hotel'
    """
    _check_emotion(emotion)
    if kind not in CONTENT_KINDS:
        raise KeyError(kind)
    return [
        RecommendationItem.from_dict(record, kind)
        for record in fallback_catalog()[kind][emotion]
    ]

"""
Interfaz común de las fuentes de contenido.

Cada fuente implementa `fetch(emotion, limit)`: devuelve una lista de
RecommendationItem, lista vacía si no encontró nada, y lanza excepción si
la fuente falla. El agregador decide qué hacer en cada caso.
"""

import random
from typing import Iterable, List, Optional

import requests

from .items import RecommendationItem


class SourceNotConfigured(Exception):
    """La fuente no tiene credenciales válidas."""


class ContentSource:
    """
    Clase base de las fuentes (OMDB, Spotify, Google Books).

    Attributes:
        kind (str): Tipo de contenido que produce ("movies", "songs", "books")
        session (requests.Session): Sesión HTTP (inyectable en tests)
        rng (random.Random): Generador para barajar resultados
    """

    kind = "movies"
    timeout = 10.0

    def __init__(self, session: Optional[requests.Session] = None,
                 rng: Optional[random.Random] = None):
        self.session = session or requests.Session()
        self.rng = rng or random.Random()

    def is_configured(self) -> bool:
        return True

    def fetch(self, emotion: str, limit: int) -> List[RecommendationItem]:
        raise NotImplementedError

    def _shuffle_and_truncate(self, items: List[RecommendationItem], limit: int) -> List[RecommendationItem]:
        self.rng.shuffle(items)
        return items[:limit]


def unique_by(items: Iterable[RecommendationItem], key) -> List[RecommendationItem]:
    """Elimina duplicados conservando el primer elemento de cada clave."""
    seen = set()
    unique = []
    for item in items:
        value = key(item)
        if value in seen:
            continue
        seen.add(value)
        unique.append(item)
    return unique

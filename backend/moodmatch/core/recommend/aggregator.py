"""
Agregador de recomendaciones por emoción.

Consulta en paralelo las fuentes de películas, canciones y libros. Cada
tipo es independiente: si su fuente falla, no está configurada o no
encuentra nada, se sustituye por su lista de respaldo sin afectar a los
otros dos. Para una emoción válida el agregador nunca falla por culpa de
un proveedor externo.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from ..emotion.schema import STANDARD_EMOTIONS
from .books import GoogleBooksSource
from .catalog import get_fallback
from .items import CONTENT_KINDS, DISPLAY_LIMIT, RecommendationItem, RecommendationSet
from .sources import ContentSource, SourceNotConfigured

logger = logging.getLogger(__name__)


class RecommendationAggregator:
    """
    Combina las tres fuentes de contenido con las listas de respaldo.

    Attributes:
        sources (Dict[str, ContentSource]): Fuente por tipo (None = solo respaldo)
        limit (int): Elementos por tipo
        max_workers (int): Hilos del pool de consultas

    Example:
        >>> aggregator = RecommendationAggregator(None, None, None)
        >>> aggregator.get("happy").movies[0].title
        'The Grand Budapest Hotel'
    """

    def __init__(self, movie_source: Optional[ContentSource], song_source: Optional[ContentSource],
                 book_source: Optional[ContentSource], limit: int = DISPLAY_LIMIT, max_workers: int = 3):
        self.sources: Dict[str, Optional[ContentSource]] = {
            "movies": movie_source,
            "songs": song_source,
            "books": book_source,
        }
        self.limit = limit
        self.max_workers = max_workers

    def get(self, emotion: str) -> RecommendationSet:
        """
        Recomendaciones de los tres tipos para una emoción.

        Raises:
            ValueError: Si la emoción no pertenece al conjunto estándar
        """
        if emotion not in STANDARD_EMOTIONS:
            raise ValueError(f"Emoción desconocida: {emotion!r}")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                kind: executor.submit(self._fetch_kind, kind, emotion)
                for kind in CONTENT_KINDS
            }
            results = {kind: future.result() for kind, future in futures.items()}

        return RecommendationSet(**results)

    def _fetch_kind(self, kind: str, emotion: str) -> List[RecommendationItem]:
        source = self.sources[kind]
        if source is None:
            return self._fallback(kind, emotion, "sin fuente")

        try:
            items = source.fetch(emotion, self.limit)
        except SourceNotConfigured as e:
            return self._fallback(kind, emotion, str(e))
        except Exception as e:
            # Cualquier fallo del proveedor se degrada a la lista de respaldo
            logger.warning("Fuente de %s fallida para '%s': %s", kind, emotion, e, exc_info=True)
            return self._fallback(kind, emotion, type(e).__name__)

        if not items:
            return self._fallback(kind, emotion, "sin resultados")

        logger.info("%d %s obtenidos de %s para '%s'", len(items), kind, type(source).__name__, emotion)
        return items[:self.limit]

    def _fallback(self, kind: str, emotion: str, reason: str) -> List[RecommendationItem]:
        logger.info("Usando %s de respaldo para '%s' (%s)", kind, emotion, reason)
        return get_fallback(kind, emotion)[:self.limit]

    def fallback_set(self, emotion: str = "neutral") -> RecommendationSet:
        """Conjunto formado solo por listas de respaldo."""
        return RecommendationSet(**{
            kind: get_fallback(kind, emotion)[:self.limit] for kind in CONTENT_KINDS
        })

    def status(self) -> Dict[str, Any]:
        """Estado de configuración de cada fuente."""
        songs = self.sources["songs"]
        movies = self.sources["movies"]
        books = self.sources["books"]
        return {
            "spotify_available": bool(songs and songs.is_configured()),
            "omdb_configured": bool(movies and movies.is_configured()),
            "books_api_key": isinstance(books, GoogleBooksSource) and books.has_api_key(),
        }

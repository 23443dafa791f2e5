"""
Fuente de películas basada en OMDB.

Para cada término de búsqueda de la emoción se buscan películas
(`s=<término>&type=movie`) y se consulta el detalle de las primeras
coincidencias (`i=<imdbID>&plot=short`) para obtener sinopsis y
valoración. Las consultas de detalle se lanzan en paralelo.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional

import requests

from ...config import is_configured, mask_secret
from .catalog import get_queries
from .items import RecommendationItem, placeholder_image
from .sources import ContentSource, SourceNotConfigured, unique_by

logger = logging.getLogger(__name__)

OMDB_URL = "https://www.omdbapi.com/"

MAX_QUERIES = 3
MAX_DETAILS_PER_QUERY = 4
DETAIL_TIMEOUT = 8.0
PLOT_LENGTH = 100


def _value(data: Mapping[str, Any], key: str) -> Optional[str]:
    # OMDB usa "N/A" para los campos sin dato
    value = data.get(key)
    if not value or value == "N/A":
        return None
    return value


def _rating(data: Mapping[str, Any]) -> Optional[float]:
    value = _value(data, "imdbRating")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class OmdbMovieSource(ContentSource):
    """
    Cliente de búsqueda y detalle de OMDB.

    Example:
        >>> source = OmdbMovieSource(api_key="abc123")
        >>> movies = source.fetch("happy", limit=3)
    """

    kind = "movies"
    timeout = 10.0

    def __init__(self, api_key: str, session: Optional[requests.Session] = None,
                 rng: Optional[random.Random] = None, url: str = OMDB_URL):
        super().__init__(session=session, rng=rng)
        self.api_key = api_key
        self.url = url

    def is_configured(self) -> bool:
        return is_configured(self.api_key)

    def fetch(self, emotion: str, limit: int) -> List[RecommendationItem]:
        if not self.is_configured():
            raise SourceNotConfigured("OMDB_API_KEY no configurada")

        logger.debug("Consultando OMDB con la clave %s", mask_secret(self.api_key))

        movies: List[RecommendationItem] = []
        errors: List[Exception] = []
        queries = list(get_queries(emotion, self.kind))[:MAX_QUERIES]

        for query in queries:
            try:
                hits = self._search(query)
            except requests.RequestException as e:
                logger.warning("Búsqueda OMDB '%s' fallida: %s", query, e)
                errors.append(e)
                continue
            movies.extend(self._with_details(hits[:MAX_DETAILS_PER_QUERY]))

        # Todas las búsquedas fallaron: es un fallo de la fuente, no "sin resultados"
        if errors and len(errors) == len(queries):
            raise errors[-1]

        unique = unique_by(movies, key=lambda item: item.id)
        return self._shuffle_and_truncate(unique, limit)

    def _search(self, query: str) -> List[Dict[str, Any]]:
        response = self.session.get(
            self.url,
            params={"apikey": self.api_key, "s": query, "type": "movie"},
            timeout=self.timeout,
        )
        if response.status_code == 401:
            raise requests.HTTPError(f"OMDB rechazó la clave {mask_secret(self.api_key)}",
                                     response=response)
        response.raise_for_status()

        data = response.json()
        if data.get("Response") != "True":
            logger.info("OMDB sin resultados para '%s': %s", query, data.get("Error"))
            return []
        return list(data.get("Search") or [])

    def _detail(self, imdb_id: str) -> Dict[str, Any]:
        response = self.session.get(
            self.url,
            params={"apikey": self.api_key, "i": imdb_id, "plot": "short"},
            timeout=DETAIL_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()

    def _with_details(self, hits: List[Mapping[str, Any]]) -> List[RecommendationItem]:
        hits = [hit for hit in hits if _value(hit, "imdbID") and _value(hit, "Title")]
        if not hits:
            return []

        with ThreadPoolExecutor(max_workers=len(hits)) as executor:
            futures = [(hit, executor.submit(self._detail, hit["imdbID"])) for hit in hits]

            items = []
            for hit, future in futures:
                try:
                    detail = future.result()
                except (requests.RequestException, ValueError) as e:
                    # Sin detalle se usa la información básica de la búsqueda
                    logger.debug("Detalle OMDB de %s fallido: %s", hit["imdbID"], e)
                    detail = {}
                items.append(self._to_item(hit, detail))
        return items

    def _to_item(self, hit: Mapping[str, Any], detail: Mapping[str, Any]) -> RecommendationItem:
        imdb_id = hit["imdbID"]
        plot = _value(detail, "Plot")
        if plot:
            description = plot[:PLOT_LENGTH] + "..."
        else:
            year = _value(hit, "Year")
            description = f"Movie from {year}" if year else ""

        return RecommendationItem(
            id=imdb_id,
            title=_value(detail, "Title") or hit["Title"],
            description=description,
            image=_value(detail, "Poster") or _value(hit, "Poster") or placeholder_image(self.kind),
            link=f"https://www.imdb.com/title/{imdb_id}",
            rating=_rating(detail),
            kind=self.kind,
        )

"""
Fuente de libros basada en Google Books.

La API de volúmenes funciona sin clave (con cuota reducida), por lo que
esta fuente siempre se considera disponible; la clave solo se añade a la
petición cuando está configurada.
"""

import logging
import random
from typing import Any, List, Mapping, Optional
from urllib.parse import quote_plus

import requests

from ...config import is_configured
from .catalog import get_queries
from .items import RecommendationItem, placeholder_image
from .sources import ContentSource, unique_by

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"

MAX_QUERIES = 2
MAX_RESULTS = 20
DESCRIPTION_LENGTH = 500


class GoogleBooksSource(ContentSource):

    kind = "books"
    timeout = 10.0

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None,
                 rng: Optional[random.Random] = None, url: str = GOOGLE_BOOKS_URL):
        super().__init__(session=session, rng=rng)
        self.api_key = api_key
        self.url = url

    def has_api_key(self) -> bool:
        return is_configured(self.api_key)

    def fetch(self, emotion: str, limit: int) -> List[RecommendationItem]:
        books: List[RecommendationItem] = []
        errors: List[Exception] = []
        queries = list(get_queries(emotion, self.kind))[:MAX_QUERIES]

        for query in queries:
            try:
                books.extend(self._search(query))
            except requests.RequestException as e:
                logger.warning("Búsqueda de Google Books '%s' fallida: %s", query, e)
                errors.append(e)

        if errors and len(errors) == len(queries):
            raise errors[-1]

        unique = unique_by(books, key=lambda item: item.title)
        return self._shuffle_and_truncate(unique, limit)

    def _search(self, query: str) -> List[RecommendationItem]:
        params = {"q": query, "orderBy": "relevance", "maxResults": MAX_RESULTS}
        if self.has_api_key():
            params["key"] = self.api_key

        response = self.session.get(self.url, params=params, timeout=self.timeout)
        response.raise_for_status()

        items = []
        for volume in response.json().get("items") or []:
            item = self._to_item(volume)
            if item is not None:
                items.append(item)
        return items

    def _to_item(self, volume: Mapping[str, Any]) -> Optional[RecommendationItem]:
        info = volume.get("volumeInfo") or {}
        title = info.get("title")
        if not title:
            return None

        description = info.get("description") or ""
        if len(description) > DESCRIPTION_LENGTH:
            description = description[:DESCRIPTION_LENGTH] + "..."

        thumbnail = (info.get("imageLinks") or {}).get("thumbnail")
        if thumbnail and thumbnail.startswith("http://"):
            thumbnail = "https://" + thumbnail[len("http://"):]

        authors = info.get("authors") or []
        link = info.get("infoLink") or (
            "https://www.google.com/search?q=" + quote_plus(" ".join([title] + list(authors)))
        )

        return RecommendationItem(
            id=volume.get("id") or title,
            title=title,
            description=description,
            image=thumbnail or placeholder_image(self.kind),
            link=link,
            rating=info.get("averageRating"),
            kind=self.kind,
        )

"""
Módulo de recomendación de contenido (películas, canciones y libros).

Combina OMDB, Spotify y Google Books con listas de respaldo por emoción.
"""

from typing import Any, Mapping, Optional

import requests

from .aggregator import RecommendationAggregator
from .books import GoogleBooksSource
from .catalog import get_fallback, get_queries
from .items import CONTENT_KINDS, DISPLAY_LIMIT, RecommendationItem, RecommendationSet
from .movies import OmdbMovieSource
from .music import SpotifyAuthError, SpotifyClient, SpotifySongSource, SpotifyTokenCache
from .sources import SourceNotConfigured


def build_spotify_client(config: Mapping[str, Any],
                         session: Optional[requests.Session] = None) -> SpotifyClient:
    return SpotifyClient(
        client_id=config.get('SPOTIFY_CLIENT_ID', ''),
        client_secret=config.get('SPOTIFY_CLIENT_SECRET', ''),
        session=session,
        token_cache=SpotifyTokenCache(),
    )


def build_aggregator(config: Mapping[str, Any], spotify_client: Optional[SpotifyClient] = None,
                     session: Optional[requests.Session] = None) -> RecommendationAggregator:
    """
    Construye el agregador a partir de la configuración de la aplicación.

    Args:
        config: Claves en mayúsculas (app.config o Config.to_dict())
        spotify_client: Cliente compartido con la ruta /spotify-auth
        session: Sesión HTTP común (inyectable en tests)
    """
    spotify_client = spotify_client or build_spotify_client(config, session=session)
    return RecommendationAggregator(
        movie_source=OmdbMovieSource(config.get('OMDB_API_KEY', ''), session=session),
        song_source=SpotifySongSource(spotify_client),
        book_source=GoogleBooksSource(config.get('GOOGLE_BOOKS_API_KEY'), session=session),
        limit=int(config.get('RECOMMENDATION_LIMIT', DISPLAY_LIMIT)),
    )


__all__ = [
    'CONTENT_KINDS',
    'DISPLAY_LIMIT',
    'GoogleBooksSource',
    'OmdbMovieSource',
    'RecommendationAggregator',
    'RecommendationItem',
    'RecommendationSet',
    'SourceNotConfigured',
    'SpotifyAuthError',
    'SpotifyClient',
    'SpotifySongSource',
    'SpotifyTokenCache',
    'build_aggregator',
    'build_spotify_client',
    'get_fallback',
    'get_queries',
]

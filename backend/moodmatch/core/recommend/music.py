"""
Fuente de canciones basada en la Web API de Spotify.

Autenticación mediante client credentials: el token se pide a
accounts.spotify.com con las credenciales de la aplicación y se cachea
hasta 5 minutos antes de su caducidad. La caché está protegida por un
lock, de modo que varias peticiones concurrentes provocan una única
autenticación.

Ante un 401 el token se invalida y se reintenta exactamente una vez con
un token nuevo; un segundo 401 se propaga como SpotifyAuthError.
"""

import logging
import random
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from ...config import is_configured
from ..utils.math import format_duration
from .catalog import get_queries
from .items import RecommendationItem, placeholder_image
from .sources import ContentSource, SourceNotConfigured, unique_by

logger = logging.getLogger(__name__)

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_URL = "https://api.spotify.com/v1"

# Margen de seguridad antes de la caducidad real del token (segundos)
TOKEN_EXPIRY_MARGIN = 300

# Límite de semillas de género de /recommendations
MAX_SEED_GENRES = 5


class SpotifyAuthError(Exception):
    """Spotify rechazó las credenciales o el token renovado."""


class SpotifyTokenCache:
    """
    Caché del token de acceso de Spotify.

    Attributes:
        clock (Callable[[], float]): Reloj en segundos (inyectable en tests)
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def _valid(self) -> bool:
        return self._token is not None and self.clock() < self._expires_at

    def get(self, authenticate: Callable[[], Tuple[str, int]]) -> Tuple[str, int, bool]:
        """
        Devuelve un token válido, autenticando solo si hace falta.

        Args:
            authenticate: Función que obtiene `(token, expires_in)` de Spotify

        Returns:
            Tuple[str, int, bool]: token, segundos de vida restantes, y si venía de caché
        """
        with self._lock:
            cached = self._valid()
            if not cached:
                token, expires_in = authenticate()
                self._token = token
                self._expires_at = self.clock() + int(expires_in) - TOKEN_EXPIRY_MARGIN
            remaining = max(0, int(self._expires_at - self.clock()))
            return self._token, remaining, cached

    def invalidate(self, token: Optional[str] = None):
        """
        Descarta el token cacheado.

        Si se indica `token`, solo se descarta cuando sigue siendo el
        cacheado (otro hilo puede haberlo renovado ya).
        """
        with self._lock:
            if token is None or token == self._token:
                self._token = None
                self._expires_at = 0.0


class SpotifyClient:
    """Cliente mínimo de la Web API (token, recomendaciones y búsqueda)."""

    timeout = 10.0

    def __init__(self, client_id: str, client_secret: str,
                 session: Optional[requests.Session] = None,
                 token_cache: Optional[SpotifyTokenCache] = None,
                 api_url: str = SPOTIFY_API_URL, token_url: str = SPOTIFY_TOKEN_URL):
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()
        self.token_cache = token_cache or SpotifyTokenCache()
        self.api_url = api_url.rstrip("/")
        self.token_url = token_url

    def is_configured(self) -> bool:
        return is_configured(self.client_id) and is_configured(self.client_secret)

    def authenticate(self) -> Tuple[str, int]:
        """
        Pide un token nuevo con el flujo client credentials.

        Raises:
            SourceNotConfigured: Si faltan las credenciales
            SpotifyAuthError: Si Spotify rechaza las credenciales
        """
        if not self.is_configured():
            raise SourceNotConfigured("SPOTIFY_CLIENT_ID/SPOTIFY_CLIENT_SECRET no configurados")

        response = self.session.post(
            self.token_url,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise SpotifyAuthError(
                f"Autenticación de Spotify fallida: {response.status_code} - {response.text[:200]}"
            )

        data = response.json()
        logger.info("Nuevo token de Spotify obtenido (expira en %ss)", data.get("expires_in"))
        return data["access_token"], int(data.get("expires_in", 3600))

    def token_info(self) -> Dict[str, Any]:
        """Token vigente en el formato de la ruta /spotify-auth."""
        token, remaining, cached = self.token_cache.get(self.authenticate)
        return {"access_token": token, "expires_in": remaining, "cached": cached}

    def get_access_token(self) -> str:
        token, _, _ = self.token_cache.get(self.authenticate)
        return token

    def _get(self, path: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        token = self.get_access_token()
        response = self._request(path, params, token)

        if response.status_code == 401:
            logger.info("Token de Spotify rechazado, se renueva y se reintenta una vez")
            self.token_cache.invalidate(token)
            response = self._request(path, params, self.get_access_token())
            if response.status_code == 401:
                raise SpotifyAuthError("Spotify rechazó también el token renovado")

        response.raise_for_status()
        return response.json()

    def _request(self, path: str, params: Mapping[str, Any], token: str) -> requests.Response:
        return self.session.get(
            f"{self.api_url}{path}",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )

    def get_recommendations(self, genres: Sequence[str], limit: int = 10,
                            audio_features: Optional[Mapping[str, float]] = None) -> List[Dict[str, Any]]:
        """
        Recomendaciones a partir de semillas de género (máximo 5).

        Args:
            genres: Géneros semilla
            limit: Número de pistas
            audio_features: Objetivos de audio (valence, energy...) como `target_*`
        """
        params: Dict[str, Any] = {
            "seed_genres": ",".join(list(genres)[:MAX_SEED_GENRES]),
            "limit": limit,
            "market": "US",
        }
        for feature, value in (audio_features or {}).items():
            params[f"target_{feature}"] = value

        return list(self._get("/recommendations", params).get("tracks") or [])

    def search_tracks(self, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        params = {"q": query, "type": "track", "limit": limit, "market": "US"}
        data = self._get("/search", params)
        return list((data.get("tracks") or {}).get("items") or [])

    @staticmethod
    def format_track(track: Mapping[str, Any]) -> RecommendationItem:
        """
        Convierte una pista de Spotify en RecommendationItem.

        Example:
            title "Happy - Pharrell Williams", description "G I R L • 3:53",
            rating 4.2 (popularidad 84 / 20)
        """
        artists = ", ".join(artist["name"] for artist in track.get("artists", []))
        album = track.get("album") or {}
        images = album.get("images") or []
        popularity = track.get("popularity")

        return RecommendationItem(
            id=track["id"],
            title=f"{track['name']} - {artists}" if artists else track["name"],
            description=f"{album.get('name', '')} • {format_duration(track.get('duration_ms', 0))}",
            image=images[0]["url"] if images else placeholder_image("songs"),
            link=(track.get("external_urls") or {}).get("spotify", ""),
            rating=popularity / 20 if popularity is not None else None,
            preview_url=track.get("preview_url"),
            kind="songs",
        )


class SpotifySongSource(ContentSource):
    """
    Canciones para una emoción: primero /recommendations por géneros y, si
    no llegan al límite, se completa con una búsqueda por palabra clave.
    """

    kind = "songs"

    def __init__(self, client: SpotifyClient, rng: Optional[random.Random] = None):
        super().__init__(session=client.session, rng=rng)
        self.client = client

    def is_configured(self) -> bool:
        return self.client.is_configured()

    def fetch(self, emotion: str, limit: int) -> List[RecommendationItem]:
        if not self.is_configured():
            raise SourceNotConfigured("Spotify no configurado")

        config = get_queries(emotion, self.kind)
        tracks: List[Mapping[str, Any]] = []
        error: Optional[Exception] = None

        try:
            tracks.extend(self.client.get_recommendations(
                config["genres"], limit=limit + 2, audio_features=config.get("audio_features")))
        except requests.RequestException as e:
            logger.warning("Recomendaciones de Spotify no disponibles: %s", e)
            error = e

        items = self._format(tracks)

        if len(items) < limit:
            query = self.rng.choice(list(config["queries"]))
            try:
                items.extend(self._format(self.client.search_tracks(query, limit=limit + 2)))
            except requests.RequestException as e:
                logger.warning("Búsqueda de Spotify '%s' fallida: %s", query, e)
                error = e

        items = unique_by(items, key=lambda item: item.id)
        if not items and error is not None:
            raise error
        return items[:limit]

    def _format(self, tracks) -> List[RecommendationItem]:
        items = []
        for track in tracks:
            try:
                items.append(self.client.format_track(track))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("Pista de Spotify descartada: %s", e)
        return items

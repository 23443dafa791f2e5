"""
Blueprint para la renovación del token de acceso de Spotify.
"""

import requests
from flask import Blueprint, current_app, jsonify

from ..core.recommend import SpotifyAuthError

spotify_bp = Blueprint('spotify', __name__)


@spotify_bp.route('/spotify-auth', methods=['POST'])
def spotify_auth():
    """
    Devuelve un token de Spotify válido (cacheado si sigue vigente).

    Example:
        Response:
        {
            "access_token": "BQD...",
            "expires_in": 3300,
            "cached": true
        }

    Error cases:
        - 400: Credenciales de Spotify no configuradas ({"fallback": true})
        - 502: Spotify rechazó las credenciales o no respondió
    """
    client = current_app.config['SPOTIFY_CLIENT']

    if not client.is_configured():
        return jsonify({
            'error': 'Credenciales de Spotify no configuradas',
            'fallback': True
        }), 400

    try:
        return jsonify(client.token_info()), 200
    except (SpotifyAuthError, requests.RequestException, KeyError, ValueError) as e:
        current_app.logger.error(f"Error al autenticar con Spotify: {e}")
        return jsonify({
            'error': 'Error al obtener el token de Spotify',
            'message': str(e),
            'fallback': True
        }), 502

"""
Blueprint para endpoints de salud y monitoreo de la API.

Proporciona endpoints para verificar el estado del servicio.
"""

from flask import Blueprint, jsonify

from .. import __version__

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Endpoint de verificación de estado del servicio.

    También es el endpoint que consulta LocalServiceProvider antes de
    enviar una imagen cuando esta instancia actúa como servicio local.

    Returns:
        JSON con status "ok", la versión y código HTTP 200

    Example:
        GET /health

        Response:
        {
            "status": "ok",
            "version": "1.0.0"
        }
    """
    return jsonify({'status': 'ok', 'version': __version__}), 200

"""
Blueprint para las recomendaciones de contenido por emoción.
"""

from flask import Blueprint, current_app, jsonify, request

from ..core.emotion import is_valid_emotion
from ..core.utils.metrics import get_metrics

recommendations_bp = Blueprint('recommendations', __name__)


@recommendations_bp.route('/recommendations', methods=['POST'])
def get_recommendations():
    """
    Devuelve películas, canciones y libros para una emoción.

    Cada tipo de contenido se obtiene de su proveedor (OMDB, Spotify,
    Google Books) y, si falla, de su lista de respaldo. Los problemas de
    los proveedores nunca producen un 500.

    Request:
        {"emotion": "happy"}

    Example:
        Response:
        {
            "emotion": "happy",
            "movies": [{"id": "tt2278388", "title": "The Grand Budapest Hotel", ...}],
            "songs": [...],
            "books": [...],
            "spotify_available": false,
            "omdb_configured": true
        }

    Error cases:
        - 400: JSON inválido o emoción desconocida
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({
            'error': 'JSON inválido',
            'message': 'El cuerpo de la petición debe ser JSON con el campo "emotion"'
        }), 400

    emotion = body.get('emotion')
    if isinstance(emotion, str):
        emotion = emotion.strip().lower()
    if not isinstance(emotion, str) or not is_valid_emotion(emotion):
        return jsonify({
            'error': 'Emoción inválida',
            'message': f'Emoción desconocida: {body.get("emotion")!r}'
        }), 400

    recommender = current_app.config['RECOMMENDER']
    metrics = get_metrics()

    try:
        with metrics.measure('recommendations', metadata={'emotion': emotion}) as timing:
            recommendations = recommender.get(emotion)
        response = recommendations.to_dict()
        response['emotion'] = emotion
    except Exception as e:
        # Error interno inesperado: se responde con el conjunto neutral de respaldo
        current_app.logger.error(f"Error en /recommendations: {str(e)}", exc_info=True)
        response = recommender.fallback_set('neutral').to_dict()
        response['emotion'] = emotion
        response['error'] = 'Error al obtener recomendaciones, mostrando contenido de respaldo'
        timing = None

    response.update(recommender.status())
    response.pop('books_api_key', None)

    if timing is not None and current_app.config.get('INCLUDE_METRICS', False):
        response['processing_time_ms'] = round(timing['duration'] * 1000, 2)

    return jsonify(response), 200

"""
Blueprint para la analítica del historial emocional.
"""

from flask import Blueprint, current_app, jsonify, request

from ..core.analytics import analyze_history

analytics_bp = Blueprint('analytics', __name__)


@analytics_bp.route('/emotion-analytics', methods=['POST'])
def emotion_analytics():
    """
    Analiza el historial de detecciones de la sesión.

    Request:
        {"history": [{"emotion": "happy", "confidence": 0.9, "timestamp": 1718000000000}]}

    Example:
        Response:
        {
            "total_detections": 1,
            "average_confidence": 0.9,
            "emotion_distribution": {"happy": 100.0},
            "mood_trend": "improving",
            "recommendations": ["Keep up the positive energy! ...", "..."]
        }

    Error cases:
        - 400: Falta "history" o no es una lista de detecciones
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({
            'error': 'Invalid history data',
            'message': 'El cuerpo de la petición debe ser JSON con el campo "history"'
        }), 400

    try:
        analytics = analyze_history(body.get('history'))
    except ValueError as e:
        current_app.logger.info(f"Historial inválido: {e}")
        return jsonify({'error': 'Invalid history data', 'message': str(e)}), 400

    return jsonify(analytics), 200

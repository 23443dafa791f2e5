"""
Análisis del historial de detecciones emocionales.

A partir de la lista de detecciones de una sesión calcula la distribución
de emociones, la confianza media, la tendencia del estado de ánimo en las
últimas detecciones y un par de consejos en texto.
"""

from collections import Counter
from typing import Any, Dict, List, Mapping, Sequence

POSITIVE_EMOTIONS = ("happy", "surprised")
NEGATIVE_EMOTIONS = ("sad", "angry", "fear", "disgust")

# Número de detecciones recientes usadas para la tendencia
TREND_WINDOW = 3

EMOTION_TIPS = {
    "happy": "Keep up the positive energy! Consider sharing your joy with others.",
    "sad": "It's okay to feel down sometimes. Consider talking to someone or engaging in self-care.",
    "angry": "Try some breathing exercises or physical activity to manage frustration.",
    "surprised": "Embrace the unexpected! New experiences can lead to growth.",
    "neutral": "A balanced emotional state is healthy. Consider exploring new activities.",
    "disgust": "Focus on positive experiences and environments that make you feel good.",
    "fear": "Acknowledge your fears and consider gradual exposure to build confidence.",
}

TREND_TIPS = {
    "improving": "Your mood seems to be getting better! Keep doing what's working.",
    "declining": "Consider reaching out for support or trying mood-boosting activities.",
    "stable": "Your emotions are well-balanced. Maintain your current routine.",
}


def mood_trend(recent: Sequence[str]) -> str:
    """
    Tendencia del estado de ánimo según las emociones recientes.

    Examples:
        >>> mood_trend(["sad", "happy", "happy"])
        'improving'
        >>> mood_trend(["neutral", "neutral"])
        'stable'
    """
    positives = sum(1 for emotion in recent if emotion in POSITIVE_EMOTIONS)
    negatives = sum(1 for emotion in recent if emotion in NEGATIVE_EMOTIONS)

    if positives > negatives:
        return "improving"
    if negatives > positives:
        return "declining"
    return "stable"


def analyze_history(history: Any) -> Dict[str, Any]:
    """
    Analiza un historial de detecciones.

    Args:
        history: Lista de `{emotion, confidence, timestamp}` en orden cronológico

    Returns:
        Dict con total_detections, average_confidence, emotion_distribution
        (porcentajes), mood_trend y recommendations

    Raises:
        ValueError: Si el historial no es una lista o alguna entrada no tiene emoción
    """
    if not isinstance(history, list):
        raise ValueError("Invalid history data")

    if not history:
        return {
            "total_detections": 0,
            "average_confidence": 0.0,
            "emotion_distribution": {},
            "mood_trend": "neutral",
            "recommendations": [],
        }

    emotions: List[str] = []
    total_confidence = 0.0
    for entry in history:
        if not isinstance(entry, Mapping) or not entry.get("emotion"):
            raise ValueError("Cada detección necesita un campo 'emotion'")
        emotions.append(str(entry["emotion"]))
        try:
            total_confidence += float(entry.get("confidence") or 0.0)
        except (TypeError, ValueError):
            raise ValueError(f"Confianza inválida: {entry.get('confidence')!r}")

    counts = Counter(emotions)
    distribution = {
        emotion: count / len(emotions) * 100
        for emotion, count in counts.items()
    }

    trend = mood_trend(emotions[-TREND_WINDOW:])

    # En empate gana la emoción que apareció por primera vez más tarde
    dominant = max(reversed(list(distribution)), key=distribution.get)
    recommendations = []
    if dominant in EMOTION_TIPS:
        recommendations.append(EMOTION_TIPS[dominant])
    recommendations.append(TREND_TIPS[trend])

    return {
        "total_detections": len(emotions),
        "average_confidence": total_confidence / len(emotions),
        "emotion_distribution": distribution,
        "mood_trend": trend,
        "recommendations": recommendations,
    }

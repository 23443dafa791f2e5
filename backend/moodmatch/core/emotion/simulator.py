"""
Simulador heurístico de emociones (último recurso de la cadena).

Cuando ningún proveedor real responde y el cliente no exige una detección
real, se sintetiza un resultado plausible:

1. Pesos base por emoción, ajustados por la hora del día y el fin de semana.
2. Un pequeño factor derivado del hash de la imagen (solo influye en el
   sorteo, no es análisis de contenido).
3. Sorteo ponderado de la emoción dominante.
4. Confianza extraída de un rango plausible por emoción.
5. El resto de la probabilidad se reparte entre las demás emociones, con
   refuerzos para combinaciones habituales (happy+surprised, ...).

La distribución resultante siempre suma 1 y su argmax es la emoción
dominante (la confianza mínima es 0.60, el resto nunca supera 0.40).
"""

import hashlib
import random
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from ..utils.math import lerp, rescale, weighted_choice
from .schema import EmotionResult, PROVENANCE_SIMULATED, STANDARD_EMOTIONS

BASE_WEIGHTS: Dict[str, float] = {
    'happy': 0.25,
    'neutral': 0.20,
    'surprised': 0.15,
    'sad': 0.12,
    'angry': 0.10,
    'fear': 0.10,
    'disgust': 0.08,
}

# Rango de confianza plausible por emoción dominante
CONFIDENCE_RANGES: Dict[str, Tuple[float, float]] = {
    'happy': (0.70, 0.95),
    'sad': (0.65, 0.88),
    'angry': (0.72, 0.92),
    'surprised': (0.68, 0.91),
    'neutral': (0.60, 0.85),
    'fear': (0.63, 0.87),
    'disgust': (0.66, 0.89),
}

# Emociones secundarias que suelen acompañar a la dominante
CO_OCCURRENCE: Dict[Tuple[str, str], float] = {
    ('happy', 'surprised'): 1.5,
    ('sad', 'fear'): 1.3,
    ('angry', 'disgust'): 1.4,
}

MIN_SECONDARY = 0.01


def time_adjusted_weights(now: datetime) -> Dict[str, float]:
    """
    Ajusta los pesos base según la hora y el día de la semana.

    - Mañana (6-10h): más neutral/surprised
    - Tarde-noche (18-22h): más happy
    - Madrugada (>=22h o <=5h): más neutral/sad
    - Fin de semana: algo más happy
    """
    weights = dict(BASE_WEIGHTS)
    hour = now.hour

    if 6 <= hour <= 10:
        weights['neutral'] += 0.10
        weights['surprised'] += 0.05
        weights['happy'] -= 0.05
    elif 18 <= hour < 22:
        weights['happy'] += 0.10
        weights['neutral'] += 0.05
        weights['angry'] -= 0.05
    elif hour >= 22 or hour <= 5:
        weights['neutral'] += 0.15
        weights['sad'] += 0.05
        weights['happy'] -= 0.10

    if now.weekday() >= 5:
        weights['happy'] += 0.08
        weights['angry'] -= 0.03
        weights['sad'] -= 0.02

    return {emotion: max(0.01, weight) for emotion, weight in weights.items()}


def image_variance(image: Optional[str]) -> float:
    """
    Factor en [0.3, 0.7] derivado del hash SHA-256 de la imagen.

    Sin imagen devuelve 0.5. Solo introduce variación reproducible por
    imagen; no mide ninguna propiedad visual.
    """
    if not image:
        return 0.5
    digest = hashlib.sha256(image.encode('utf-8', errors='ignore')).digest()
    return lerp(0.3, 0.7, digest[0] / 255.0)


class EmotionSimulator:
    """
    Generador de resultados emocionales simulados.

    Attributes:
        rng (random.Random): Generador aleatorio (inyectable para tests)
        clock (Callable[[], datetime]): Fuente de la hora actual
    """

    name = PROVENANCE_SIMULATED

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now

    def emotion_weights(self, image: Optional[str] = None) -> Dict[str, float]:
        """Pesos finales (normalizados) para el sorteo de la emoción dominante."""
        weights = time_adjusted_weights(self.clock())
        variance = image_variance(image)

        for emotion in ('happy', 'surprised'):
            weights[emotion] *= 1 + variance * 0.3
        for emotion in ('sad', 'angry'):
            weights[emotion] *= 1 - variance * 0.2

        return rescale(weights)

    def build_distribution(self, primary: str, confidence: float) -> Dict[str, float]:
        """Reparte 1 - confidence entre las emociones secundarias."""
        remaining = 1.0 - confidence
        others = [emotion for emotion in STANDARD_EMOTIONS if emotion != primary]

        raw = {}
        for emotion in others:
            weight = self.rng.uniform(0.2, 1.0)
            weight *= CO_OCCURRENCE.get((primary, emotion), 1.0)
            raw[emotion] = weight

        # Cada secundaria recibe al menos MIN_SECONDARY
        spread = remaining - MIN_SECONDARY * len(others)
        distribution = {
            emotion: MIN_SECONDARY + share
            for emotion, share in rescale(raw, total=max(0.0, spread)).items()
        }
        distribution[primary] = confidence

        return rescale({emotion: distribution[emotion] for emotion in STANDARD_EMOTIONS})

    def simulate(self, image: Optional[str] = None) -> EmotionResult:
        """
        Sintetiza un EmotionResult con procedencia "simulated".

        Args:
            image: Imagen codificada (solo se usa como semilla de variación)

        Returns:
            EmotionResult: Resultado simulado con distribución normalizada
        """
        now = self.clock()
        primary = weighted_choice(self.emotion_weights(image), rng=self.rng)

        low, high = CONFIDENCE_RANGES[primary]
        confidence = self.rng.uniform(low, high)

        distribution = self.build_distribution(primary, confidence)
        confidence = distribution[primary]

        if confidence > 0.8:
            level = 'high'
        elif confidence > 0.6:
            level = 'medium'
        else:
            level = 'low'

        return EmotionResult(
            emotion=primary,
            confidence=confidence,
            distribution=distribution,
            face_detected=True,
            provenance=self.name,
            details={
                'time_context': f"{now.hour}:00 {'weekend' if now.weekday() >= 5 else 'weekday'}",
                'image_analyzed': bool(image),
                'confidence_level': level,
            },
        )

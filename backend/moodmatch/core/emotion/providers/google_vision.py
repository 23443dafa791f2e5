"""
Proveedor Google Cloud Vision (segunda alternativa en la nube).

Google no devuelve probabilidades sino verosimilitudes discretas
(VERY_UNLIKELY ... VERY_LIKELY) para cuatro emociones. Se convierten a
confianzas numéricas sobre una línea base neutral.
"""

from typing import Dict, Optional

import requests

from ....config import is_configured
from ...camera.frames import split_data_url
from ..schema import EmotionResult, PROVENANCE_GOOGLE_VISION, no_face_result
from .base import EmotionProvider, ProviderError

GOOGLE_VISION_URL = "https://vision.googleapis.com/v1/images:annotate"

# Campos de faceAnnotations -> emoción estándar
LIKELIHOOD_FIELDS: Dict[str, str] = {
    'joyLikelihood': 'happy',
    'sorrowLikelihood': 'sad',
    'angerLikelihood': 'angry',
    'surpriseLikelihood': 'surprised',
}

LIKELIHOOD_TO_CONFIDENCE: Dict[str, float] = {
    'VERY_UNLIKELY': 0.1,
    'UNLIKELY': 0.2,
    'POSSIBLE': 0.4,
    'LIKELY': 0.7,
    'VERY_LIKELY': 0.9,
}

# Línea base: Google no informa de neutral, disgust ni fear
BASELINE_SCORES: Dict[str, float] = {
    'happy': 0.1,
    'sad': 0.1,
    'angry': 0.1,
    'surprised': 0.1,
    'neutral': 0.5,
    'disgust': 0.05,
    'fear': 0.05,
}


def likelihood_scores(face: dict) -> Dict[str, float]:
    """
    Convierte las verosimilitudes de un faceAnnotation en puntuaciones.

    Example:
        >>> likelihood_scores({'joyLikelihood': 'VERY_LIKELY'})['happy']
        0.9
    """
    scores = dict(BASELINE_SCORES)
    for field_name, emotion in LIKELIHOOD_FIELDS.items():
        likelihood = face.get(field_name)
        scores[emotion] = LIKELIHOOD_TO_CONFIDENCE.get(likelihood, 0.1)
    return scores


class GoogleVisionProvider(EmotionProvider):
    """Cliente de images:annotate con la característica FACE_DETECTION."""

    name = PROVENANCE_GOOGLE_VISION
    timeout = 15.0

    def __init__(self, api_key: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None, url: str = GOOGLE_VISION_URL):
        super().__init__(session=session, timeout=timeout)
        self.api_key = api_key
        self.url = url

    def is_configured(self) -> bool:
        return is_configured(self.api_key)

    def _classify(self, image: str) -> EmotionResult:
        content = split_data_url(image)
        if not content:
            raise ProviderError(self.name, "imagen vacía")

        body = {
            'requests': [
                {
                    'image': {'content': content},
                    'features': [{'type': 'FACE_DETECTION', 'maxResults': 1}],
                }
            ]
        }
        response = self.session.post(
            self.url,
            params={'key': self.api_key},
            json=body,
            timeout=self.timeout,
        )
        if not response.ok:
            raise ProviderError(self.name, f"Google Vision API error: {response.status_code}")

        responses = response.json().get('responses') or [{}]
        faces = responses[0].get('faceAnnotations') or []
        if not faces:
            return no_face_result(self.name, confidence=0.4)

        scores = likelihood_scores(faces[0])
        return EmotionResult.from_scores(
            scores,
            provenance=self.name,
            confidence=max(scores.values()),
        )

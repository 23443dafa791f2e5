"""
Proveedor Azure Face (primera alternativa en la nube).

Azure recibe los bytes crudos de la imagen y devuelve puntuaciones 0-1 por
emoción. Su taxonomía incluye `contempt`, que se agrupa con `disgust`.
"""

from typing import Optional

import requests

from ....config import is_configured
from ...camera.frames import decode_image
from ..schema import EmotionResult, PROVENANCE_AZURE, no_face_result
from .base import EmotionProvider, ProviderError


class AzureFaceProvider(EmotionProvider):
    """Cliente de `{endpoint}/face/v1.0/detect?returnFaceAttributes=emotion`."""

    name = PROVENANCE_AZURE
    timeout = 15.0

    def __init__(self, subscription_key: str, endpoint: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        super().__init__(session=session, timeout=timeout)
        self.subscription_key = subscription_key
        self.endpoint = (endpoint or '').rstrip('/')

    def is_configured(self) -> bool:
        return is_configured(self.subscription_key) and is_configured(self.endpoint)

    def _classify(self, image: str) -> EmotionResult:
        try:
            image_bytes = decode_image(image)
        except ValueError as e:
            raise ProviderError(self.name, str(e)) from e

        response = self.session.post(
            f"{self.endpoint}/face/v1.0/detect",
            params={'returnFaceAttributes': 'emotion'},
            headers={
                'Ocp-Apim-Subscription-Key': self.subscription_key,
                'Content-Type': 'application/octet-stream',
            },
            data=image_bytes,
            timeout=self.timeout,
        )
        if not response.ok:
            raise ProviderError(self.name, f"Azure Face API error: {response.status_code}")

        faces = response.json()
        if not isinstance(faces, list):
            raise ProviderError(self.name, "respuesta inesperada (se esperaba una lista de caras)")
        if not faces:
            return no_face_result(self.name, confidence=0.4)

        emotions = faces[0]['faceAttributes']['emotion']
        scores = {label: float(value) for label, value in emotions.items()}

        return EmotionResult.from_scores(
            scores,
            provenance=self.name,
            confidence=max(scores.values()),
        )

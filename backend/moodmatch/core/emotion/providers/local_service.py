"""
Proveedor que delega en un servicio local de clasificación (DeepFace).

Antes de enviar la imagen se comprueba /health con un timeout corto, de
modo que un servicio caído no retrasa la cadena más de unos segundos.
"""

from typing import Optional

import requests

from ..schema import EmotionResult, PROVENANCE_LOCAL_SERVICE, no_face_result
from .base import EmotionProvider, ProviderError


class LocalServiceProvider(EmotionProvider):
    """
    Cliente del servicio local `POST {base_url}/detect-emotion`.

    El servicio responde con el formato {success, emotion, confidence,
    all_emotions, face_detected}; la respuesta se re-etiqueta con la
    procedencia "local_service".
    """

    name = PROVENANCE_LOCAL_SERVICE
    timeout = 15.0
    health_timeout = 3.0

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None, health_timeout: Optional[float] = None):
        super().__init__(session=session, timeout=timeout)
        self.base_url = (base_url or '').rstrip('/')
        if health_timeout is not None:
            self.health_timeout = health_timeout

    def is_configured(self) -> bool:
        return bool(self.base_url)

    def is_alive(self) -> bool:
        """Comprueba la salud del servicio. Cualquier error cuenta como caído."""
        try:
            response = self.session.get(
                f"{self.base_url}/health",
                headers={'Accept': 'application/json'},
                timeout=self.health_timeout,
            )
        except requests.RequestException:
            return False
        return response.ok

    def _classify(self, image: str) -> EmotionResult:
        if not self.is_alive():
            raise ProviderError(self.name, f"servicio no disponible en {self.base_url}")

        response = self.session.post(
            f"{self.base_url}/detect-emotion",
            json={'image': image},
            timeout=self.timeout,
        )
        if not response.ok:
            raise ProviderError(self.name, f"HTTP {response.status_code}")

        data = response.json()
        if not data.get('success', True):
            raise ProviderError(self.name, data.get('error') or 'respuesta sin éxito')

        if not data.get('face_detected', True):
            return no_face_result(self.name, confidence=float(data.get('confidence', 0.4)))

        scores = data['all_emotions']
        if not scores:
            raise ProviderError(self.name, "respuesta sin puntuaciones")

        return EmotionResult.from_scores(
            scores,
            provenance=self.name,
            confidence=data.get('confidence'),
            details={'service_url': self.base_url},
        )

"""
Proveedor Face++ (proveedor de visión principal).

Face++ devuelve, por cada rostro, puntuaciones 0-100 para siete emociones
con su propia taxonomía (happiness, sadness, anger, surprise...). Se
normalizan al conjunto estándar y se divide entre 100.
"""

from typing import Optional

import requests

from ....config import is_configured
from ...camera.frames import decode_image, split_data_url
from ..schema import EmotionResult, PROVENANCE_FACEPLUSPLUS, no_face_result
from .base import EmotionProvider, ProviderError

FACEPLUS_DETECT_URL = "https://api-us.faceplusplus.com/facepp/v3/detect"

# Límite de tamaño de Face++ (2 MB)
MAX_IMAGE_BYTES = 2 * 1024 * 1024

# Mensajes legibles para los códigos de error de Face++
FACEPLUS_ERROR_MESSAGES = {
    'INVALID_IMAGE_SIZE': "Dimensiones inválidas: Face++ requiere imágenes entre 48x48 y 4096x4096 píxeles",
    'INVALID_IMAGE_FORMAT': "Formato inválido: Face++ admite JPEG, PNG y BMP",
    'IMAGE_FILE_TOO_LARGE': "Imagen demasiado grande: Face++ requiere menos de 2MB",
    'INVALID_API_KEY': "API key de Face++ inválida: revisa las credenciales",
    'INSUFFICIENT_BALANCE': "Saldo insuficiente en la cuenta de Face++",
    'RATE_LIMIT_EXCEEDED': "Límite de peticiones de Face++ superado: inténtalo más tarde",
    'IMAGE_ERROR_UNSUPPORTED_FORMAT': "Formato de imagen no soportado: captura una imagen nueva",
}


def validate_image(image: str) -> str:
    """
    Valida la imagen antes de enviarla a Face++ y devuelve el payload base64.

    Raises:
        ValueError: Imagen vacía, base64 inválido o mayor de 2 MB
    """
    data = decode_image(image)
    if len(data) > MAX_IMAGE_BYTES:
        raise ValueError("Imagen demasiado grande (máximo 2MB)")
    return split_data_url(image)


def describe_error(status_code: int, body: str, payload: Optional[dict]) -> str:
    """Traduce la respuesta de error de Face++ a un mensaje legible."""
    if payload is None:
        return f"Face++ API error: {status_code} - {body[:200]}"

    message = payload.get('error_message') or f"HTTP {status_code}"
    for code, readable in FACEPLUS_ERROR_MESSAGES.items():
        if code in message:
            return readable
    return message


class FacePlusPlusProvider(EmotionProvider):
    """Cliente del endpoint /facepp/v3/detect con atributos de emoción."""

    name = PROVENANCE_FACEPLUSPLUS
    timeout = 20.0

    def __init__(self, api_key: str, api_secret: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None, url: str = FACEPLUS_DETECT_URL):
        super().__init__(session=session, timeout=timeout)
        self.api_key = api_key
        self.api_secret = api_secret
        self.url = url

    def is_configured(self) -> bool:
        return is_configured(self.api_key) and is_configured(self.api_secret)

    def _classify(self, image: str) -> EmotionResult:
        try:
            base64_data = validate_image(image)
        except ValueError as e:
            raise ProviderError(self.name, f"Validación de imagen fallida: {e}") from e

        # multipart/form-data como espera Face++
        fields = {
            'api_key': (None, self.api_key),
            'api_secret': (None, self.api_secret),
            'image_base64': (None, base64_data),
            'return_attributes': (None, 'emotion,age,gender,facequality'),
        }
        response = self.session.post(self.url, files=fields, timeout=self.timeout)

        if not response.ok:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise ProviderError(self.name, describe_error(response.status_code, response.text, payload))

        result = response.json()
        faces = result.get('faces') or []
        if not faces:
            return no_face_result(self.name, confidence=0.3)

        attributes = faces[0]['attributes']
        emotions = attributes['emotion']
        scores = {label: float(value) / 100.0 for label, value in emotions.items()}

        face_quality = attributes.get('facequality') or {}
        quality_score = float(face_quality.get('threshold', 70)) / 100.0

        return EmotionResult.from_scores(
            scores,
            provenance=self.name,
            confidence=max(scores.values()),
            details={'face_quality': round(quality_score, 3)},
        )

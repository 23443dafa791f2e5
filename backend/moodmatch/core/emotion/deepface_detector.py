"""
Módulo de detección emocional usando DeepFace.

Implementa el servicio local de clasificación (`POST /detect-emotion`):
una instancia de este backend puede actuar como EMOTION_API_URL de otra,
que la usará como primer paso de su cadena de proveedores.
"""

import logging

import numpy as np

from ..camera.frames import decode_to_frame
from .schema import EmotionResult, PROVENANCE_LOCAL_SERVICE, no_face_result

logger = logging.getLogger(__name__)

# Umbral de confianza facial por debajo del cual no se considera rostro real
MIN_FACE_CONFIDENCE = 0.9


class DeepFaceEmotionDetector:
    """
    Detector de emociones faciales usando DeepFace.

    DeepFace analiza el frame y devuelve porcentajes para angry, disgust,
    fear, happy, sad, surprise y neutral, que se normalizan al conjunto
    estándar del sistema (surprise -> surprised).

    Attributes:
        enforce_detection (bool): Si es True, DeepFace lanza excepción cuando no detecta rostro
    """

    def __init__(self, enforce_detection: bool = False):
        self.enforce_detection = enforce_detection
        self._deepface = None
        logger.info("DeepFaceEmotionDetector inicializado (la primera predicción carga los modelos)")

    def _analyzer(self):
        # Import diferido: cargar DeepFace/TensorFlow es lento
        if self._deepface is None:
            from deepface import DeepFace
            self._deepface = DeepFace
        return self._deepface

    def predict(self, frame: np.ndarray) -> EmotionResult:
        """
        Predice la emoción dominante en un frame BGR.

        Args:
            frame (np.ndarray): Frame de imagen en formato BGR (OpenCV)

        Returns:
            EmotionResult: Resultado con procedencia "local_service". Si no hay
                           rostro (o la confianza facial es < 0.9) se devuelve
                           el resultado neutral por defecto.
        """
        try:
            result = self._analyzer().analyze(
                img_path=frame,
                actions=['emotion'],
                enforce_detection=self.enforce_detection,
                silent=True
            )
        except ValueError:
            # DeepFace lanza ValueError cuando no detecta un rostro
            return no_face_result(PROVENANCE_LOCAL_SERVICE)

        # DeepFace devuelve una lista si detecta múltiples rostros
        if isinstance(result, list):
            if not result:
                return no_face_result(PROVENANCE_LOCAL_SERVICE)
            result = result[0]

        if result.get('face_confidence', 0.0) < MIN_FACE_CONFIDENCE:
            return no_face_result(PROVENANCE_LOCAL_SERVICE)

        # Porcentajes 0-100; from_scores los normaliza
        return EmotionResult.from_scores(
            result['emotion'],
            provenance=PROVENANCE_LOCAL_SERVICE,
            details={'face_confidence': round(float(result['face_confidence']), 3)},
        )

    def predict_image(self, image: str) -> EmotionResult:
        """
        Decodifica una imagen en base64/data URL y predice su emoción.

        Raises:
            ValueError: Si la imagen no se puede decodificar
        """
        return self.predict(decode_to_frame(image))

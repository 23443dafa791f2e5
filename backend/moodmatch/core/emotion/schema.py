"""
Módulo de normalización de emociones.

Este módulo define el esquema de emociones estándar utilizado en el sistema
y proporciona funciones para normalizar las etiquetas y puntuaciones que
devuelven los distintos proveedores (Face++, Azure, Google Vision, DeepFace)
a un conjunto fijo y controlado.

Todo resultado de detección se representa como un EmotionResult inmutable
cuya distribución cubre siempre las siete emociones y suma 1.0.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from ..utils.math import clamp

# Conjunto fijo de emociones estándar del sistema (el orden importa: desempates)
STANDARD_EMOTIONS: List[str] = [
    "happy",      # Felicidad, alegría
    "sad",        # Tristeza
    "angry",      # Enfado, ira
    "surprised",  # Sorpresa
    "neutral",    # Estado neutral, sin emoción dominante
    "disgust",    # Disgusto, asco (incluye desprecio)
    "fear",       # Miedo
]

# Mapeo de etiquetas de los proveedores a emociones estándar
PROVIDER_TO_STANDARD: Dict[str, str] = {
    "happy": "happy",
    "sad": "sad",
    "angry": "angry",
    "surprised": "surprised",
    "neutral": "neutral",
    "disgust": "disgust",
    "fear": "fear",

    # Face++ / Azure
    "happiness": "happy",
    "sadness": "sad",
    "anger": "angry",
    "surprise": "surprised",
    "contempt": "disgust",

    # Variaciones o sinónimos posibles
    "joy": "happy",
    "sorrow": "sad",
    "scared": "fear",
    "disgusted": "disgust",
}

# Etiquetas de procedencia (qué proveedor generó el resultado)
PROVENANCE_LOCAL_SERVICE = "local_service"
PROVENANCE_FACEPLUSPLUS = "faceplusplus"
PROVENANCE_AZURE = "azure"
PROVENANCE_GOOGLE_VISION = "google_vision"
PROVENANCE_SIMULATED = "simulated"

# Distribución por defecto cuando el proveedor responde sin rostro
NO_FACE_DISTRIBUTION: Dict[str, float] = {
    "happy": 0.1,
    "sad": 0.1,
    "angry": 0.1,
    "surprised": 0.1,
    "neutral": 0.5,
    "disgust": 0.05,
    "fear": 0.05,
}


def normalize_emotion(emotion: str) -> str:
    """
    Normaliza una etiqueta de emoción a una del conjunto estándar.

    Si la emoción no se reconoce, devuelve "neutral" como valor por defecto.

    Args:
        emotion (str): Etiqueta de emoción a normalizar (taxonomía del proveedor)

    Returns:
        str: Emoción normalizada del conjunto STANDARD_EMOTIONS

    Examples:
        >>> normalize_emotion("happiness")
        'happy'

        >>> normalize_emotion("contempt")
        'disgust'

        >>> normalize_emotion("unknown_emotion")
        'neutral'
    """
    if not emotion:
        return "neutral"

    emotion_lower = emotion.lower().strip()
    return PROVIDER_TO_STANDARD.get(emotion_lower, "neutral")


def is_valid_emotion(emotion: str) -> bool:
    """
    Verifica si una emoción pertenece al conjunto estándar.

    Examples:
        >>> is_valid_emotion("surprised")
        True

        >>> is_valid_emotion("confused")
        False
    """
    return emotion in STANDARD_EMOTIONS


def get_all_emotions() -> List[str]:
    """Obtiene una copia de la lista de emociones estándar del sistema."""
    return STANDARD_EMOTIONS.copy()


def normalize_distribution(scores: Mapping[str, float]) -> Dict[str, float]:
    """
    Convierte puntuaciones arbitrarias en una distribución sobre las 7 emociones.

    Las etiquetas se normalizan al conjunto estándar (las que colapsan en la
    misma emoción se suman), los valores negativos se recortan a 0 y el
    resultado se reescala para que sume 1.0. Si el total es 0 se devuelve
    una distribución uniforme.

    Args:
        scores: Puntuaciones por etiqueta, en cualquier escala (0-1, 0-100...)

    Returns:
        Dict[str, float]: Distribución con las 7 emociones estándar

    Example:
        >>> normalize_distribution({"happiness": 80, "neutral": 20})["happy"]
        0.8
    """
    totals = {emotion: 0.0 for emotion in STANDARD_EMOTIONS}

    for label, value in scores.items():
        canonical = normalize_emotion(label)
        totals[canonical] += max(0.0, float(value))

    total = sum(totals.values())
    if total <= 0:
        uniform = 1.0 / len(STANDARD_EMOTIONS)
        return {emotion: uniform for emotion in STANDARD_EMOTIONS}

    return {emotion: value / total for emotion, value in totals.items()}


def dominant_emotion(distribution: Mapping[str, float]) -> str:
    """Devuelve la emoción con mayor probabilidad (desempate por orden estándar)."""
    return max(STANDARD_EMOTIONS, key=lambda emotion: distribution.get(emotion, 0.0))


@dataclass(frozen=True)
class EmotionResult:
    """
    Resultado normalizado de una detección emocional.

    Attributes:
        emotion (str): Emoción dominante (argmax de la distribución)
        confidence (float): Confianza en [0, 1] según el proveedor
        distribution (Mapping[str, float]): Probabilidad de cada emoción estándar (solo lectura)
        face_detected (bool): True si el proveedor encontró un rostro
        provenance (str): Proveedor que generó el resultado
        details (Mapping): Información adicional del proveedor (calidad, contexto)
    """

    emotion: str
    confidence: float
    distribution: Mapping[str, float]
    face_detected: bool
    provenance: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Copias de solo lectura: el resultado no se puede alterar tras crearse
        object.__setattr__(self, 'distribution', MappingProxyType(dict(self.distribution)))
        object.__setattr__(self, 'details', MappingProxyType(dict(self.details)))

    @classmethod
    def from_scores(
        cls,
        scores: Mapping[str, float],
        provenance: str,
        confidence: Optional[float] = None,
        face_detected: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ) -> "EmotionResult":
        """
        Construye un resultado a partir de puntuaciones crudas de un proveedor.

        La emoción dominante se elige sobre la distribución ya normalizada,
        de modo que siempre coincide con su argmax.

        Args:
            scores: Puntuaciones crudas por etiqueta (taxonomía del proveedor)
            provenance: Etiqueta de procedencia
            confidence: Confianza reportada por el proveedor. Si es None se
                        usa la probabilidad normalizada de la emoción dominante.
            face_detected: Si el proveedor detectó un rostro
            details: Metadatos adicionales

        Returns:
            EmotionResult: Resultado normalizado
        """
        distribution = normalize_distribution(scores)
        emotion = dominant_emotion(distribution)

        if confidence is None:
            confidence = distribution[emotion]

        return cls(
            emotion=emotion,
            confidence=clamp(float(confidence), 0.0, 1.0),
            distribution=distribution,
            face_detected=face_detected,
            provenance=provenance,
            details=dict(details or {}),
        )

    def with_provenance(self, provenance: str) -> "EmotionResult":
        """Devuelve una copia del resultado con otra etiqueta de procedencia."""
        return EmotionResult(
            emotion=self.emotion,
            confidence=self.confidence,
            distribution=dict(self.distribution),
            face_detected=self.face_detected,
            provenance=provenance,
            details=dict(self.details),
        )

    @property
    def is_simulated(self) -> bool:
        return self.provenance == PROVENANCE_SIMULATED

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa el resultado al formato JSON que consume el frontend.

        Returns:
            Dict con las claves success, emotion, confidence, all_emotions,
            face_detected, service_used y (opcional) details.
        """
        payload = {
            'success': True,
            'emotion': self.emotion,
            'confidence': round(self.confidence, 4),
            'all_emotions': {k: round(v, 6) for k, v in self.distribution.items()},
            'face_detected': self.face_detected,
            'service_used': self.provenance,
        }
        if self.details:
            payload['details'] = dict(self.details)
        return payload


def no_face_result(provenance: str, confidence: float = 0.4) -> EmotionResult:
    """
    Resultado válido para una respuesta del proveedor sin rostro detectado.

    No es un error: se devuelve "neutral" con una distribución fija de baja
    confianza y face_detected = False.

    Args:
        provenance: Proveedor que respondió
        confidence: Confianza fija del proveedor (Face++ usa 0.3, el resto 0.4)
    """
    return EmotionResult(
        emotion="neutral",
        confidence=confidence,
        distribution=dict(NO_FACE_DISTRIBUTION),
        face_detected=False,
        provenance=provenance,
    )

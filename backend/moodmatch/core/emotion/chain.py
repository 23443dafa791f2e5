"""
Cadena de proveedores de detección emocional.

Los proveedores se prueban estrictamente en orden de prioridad y la cadena
se detiene en el primero que responde:

    servicio local -> Face++ -> Azure Face -> Google Vision -> simulador

Un proveedor sin credenciales, un timeout, una respuesta no 2xx o un
payload malformado nunca llegan al llamante: se registran y se pasa al
siguiente. Solo cuando el cliente exige una detección real y ninguna
responde se lanza RealDetectionUnavailable.
"""

import logging
from typing import Dict, List, Optional, Sequence

import requests

from .providers.base import EmotionProvider, ProviderNotConfigured, ProviderUnavailable
from .schema import EmotionResult
from .simulator import EmotionSimulator

logger = logging.getLogger(__name__)


class RealDetectionUnavailable(Exception):
    """Se pidió una detección real y ningún proveedor real pudo responder."""

    def __init__(self, attempts: Dict[str, str]):
        self.attempts = dict(attempts)
        if any(reason != 'not_configured' for reason in self.attempts.values()):
            message = ("Todos los servicios reales de detección emocional han fallado. "
                       "Revisa la configuración de Face++ u otros proveedores en la nube.")
        else:
            message = ("Se solicitó detección real pero no hay ningún proveedor configurado. "
                       "Define FACEPLUS_API_KEY y FACEPLUS_API_SECRET.")
        super().__init__(message)


class EmotionProviderChain:
    """
    Orquesta la cadena de proveedores con simulación como último recurso.

    Attributes:
        providers (List[EmotionProvider]): Proveedores reales en orden de prioridad
        simulator (EmotionSimulator): Generador de resultados simulados

    Example:
        >>> chain = EmotionProviderChain([LocalServiceProvider(url)], EmotionSimulator())
        >>> result = chain.detect(image, require_real=False)
        >>> result.provenance
        'simulated'
    """

    def __init__(self, providers: Sequence[EmotionProvider],
                 simulator: Optional[EmotionSimulator] = None):
        self.providers: List[EmotionProvider] = list(providers)
        self.simulator = simulator or EmotionSimulator()

    def detect(self, image: str, require_real: bool = False) -> EmotionResult:
        """
        Clasifica la emoción de una imagen codificada.

        Args:
            image (str): Imagen en base64 o data URL
            require_real (bool): Si es True, nunca se devuelve un resultado simulado

        Returns:
            EmotionResult: Resultado del primer proveedor que responde, o simulado

        Raises:
            ValueError: Si la imagen está vacía (no se llama a ningún proveedor)
            RealDetectionUnavailable: Si require_real y ningún proveedor real responde
        """
        if not image or not isinstance(image, str) or not image.strip():
            raise ValueError("No se proporcionó ninguna imagen")

        attempts: Dict[str, str] = {}

        for provider in self.providers:
            try:
                result = provider.classify(image)
            except ProviderNotConfigured:
                logger.debug("Proveedor %s no configurado, se omite", provider.name)
                attempts[provider.name] = 'not_configured'
                continue
            except ProviderUnavailable as e:
                logger.warning("Proveedor %s no disponible: %s", provider.name, e.message)
                attempts[provider.name] = e.message
                continue
            except (requests.RequestException, KeyError, ValueError, TypeError) as e:
                logger.warning("Error inesperado en %s: %s", provider.name, e)
                attempts[provider.name] = str(e)
                continue

            logger.info("Emoción detectada por %s: %s (%.2f)",
                        provider.name, result.emotion, result.confidence)
            return result

        if require_real:
            raise RealDetectionUnavailable(attempts)

        result = self.simulator.simulate(image)
        logger.info("Sin proveedores reales, emoción simulada: %s (%.2f)",
                    result.emotion, result.confidence)
        return result

    def real_provider_status(self) -> Dict[str, bool]:
        """Indica qué proveedores reales tienen credenciales configuradas."""
        return {provider.name: provider.is_configured() for provider in self.providers}

    def has_real_provider(self) -> bool:
        return any(self.real_provider_status().values())

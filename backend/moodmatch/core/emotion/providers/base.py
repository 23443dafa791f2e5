"""
Interfaz común de los proveedores de detección emocional.

Cada proveedor (servicio local, Face++, Azure, Google Vision) implementa
`classify(image) -> EmotionResult`. Cuando no puede responder lanza una
subclase de ProviderUnavailable y la cadena pasa al siguiente.
"""

from typing import Optional

import requests

from ..schema import EmotionResult


class ProviderUnavailable(Exception):
    """El proveedor no ha podido clasificar la imagen."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderNotConfigured(ProviderUnavailable):
    """Faltan credenciales (o son valores de ejemplo)."""


class ProviderError(ProviderUnavailable):
    """Timeout, respuesta no 2xx o payload malformado."""


class EmotionProvider:
    """
    Clase base de los proveedores.

    Las subclases definen `name`, `is_configured()` y `_classify(image)`.
    `classify()` comprueba la configuración y convierte los errores de red
    y de formato en ProviderError.

    Attributes:
        name (str): Etiqueta de procedencia que se asigna a los resultados
        timeout (float): Timeout en segundos de la llamada principal
        session (requests.Session): Sesión HTTP (inyectable en tests)
    """

    name = "provider"
    timeout = 15.0

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.session = session or requests.Session()
        if timeout is not None:
            self.timeout = timeout

    def is_configured(self) -> bool:
        raise NotImplementedError

    def classify(self, image: str) -> EmotionResult:
        """
        Clasifica la emoción de una imagen codificada (data URL o base64).

        Raises:
            ProviderNotConfigured: Si faltan credenciales
            ProviderError: Si la llamada falla o la respuesta es inválida
        """
        if not self.is_configured():
            raise ProviderNotConfigured(self.name, "credenciales no configuradas")

        try:
            return self._classify(image)
        except ProviderUnavailable:
            raise
        except requests.Timeout as e:
            raise ProviderError(self.name, f"timeout: {e}") from e
        except requests.RequestException as e:
            raise ProviderError(self.name, f"error de red: {e}") from e
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            # Incluye payloads JSON que no son objetos (listas, cadenas)
            raise ProviderError(self.name, f"respuesta malformada: {e}") from e

    def _classify(self, image: str) -> EmotionResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(configured={self.is_configured()})"

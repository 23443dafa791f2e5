"""
Módulo de captura de webcam usando OpenCV.

Gestiona el ciclo de vida de la cámara del servidor: abrirla, leer un
frame, codificarlo como imagen fija y liberar el dispositivo en cuanto
deja de usarse.
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from .frames import CapturedFrame, DEFAULT_JPEG_QUALITY, encode_frame

logger = logging.getLogger(__name__)


class WebcamCapture:
    """
    Clase para gestionar la captura de video desde webcam.

    La cámara pertenece en exclusiva a esta instancia mientras está abierta;
    release() libera el dispositivo de forma síncrona.

    Attributes:
        camera_index (int): Índice de la cámara a utilizar (default: 0)
        width (int): Ancho solicitado al dispositivo
        height (int): Alto solicitado al dispositivo
        cap (cv2.VideoCapture): Objeto de captura de OpenCV
        is_opened (bool): Estado de la cámara
    """

    def __init__(self, camera_index: int = 0, width: int = 640, height: int = 480):
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.cap: Optional[cv2.VideoCapture] = None
        self.is_opened = False

    def start(self) -> bool:
        """
        Abre la conexión con la webcam.

        Returns:
            bool: True si la cámara se abrió correctamente

        Raises:
            RuntimeError: Si no se puede abrir la cámara
        """
        self.cap = cv2.VideoCapture(self.camera_index)

        if not self.cap.isOpened():
            self.cap.release()
            self.cap = None
            self.is_opened = False
            raise RuntimeError(
                f"No se pudo abrir la cámara con índice {self.camera_index}. "
                "Verifica que la cámara esté conectada y no esté siendo utilizada por otra aplicación."
            )

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        self.is_opened = True
        logger.info("Cámara %s abierta correctamente", self.camera_index)
        return True

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Lee un frame de la webcam.

        Returns:
            Tuple[bool, Optional[np.ndarray]]:
                - success (bool): True si se leyó correctamente el frame
                - frame (np.ndarray | None): Frame capturado o None si hubo error

        Raises:
            RuntimeError: Si se intenta leer sin haber abierto la cámara
        """
        if not self.is_opened or self.cap is None:
            raise RuntimeError(
                "La cámara no está abierta. Llama a start() antes de leer frames."
            )

        success, frame = self.cap.read()

        if not success:
            logger.warning("No se pudo leer el frame de la cámara")
            return False, None

        return success, frame

    def capture(self, quality: int = DEFAULT_JPEG_QUALITY) -> CapturedFrame:
        """
        Lee un frame y lo devuelve comprimido como imagen fija (data URL JPEG).

        Raises:
            RuntimeError: Si la cámara no está abierta o no entrega frames
        """
        success, frame = self.read()
        if not success or frame is None:
            raise RuntimeError("La cámara no devolvió ningún frame")
        return encode_frame(frame, quality=quality)

    def release(self) -> None:
        """
        Libera los recursos de la cámara y cierra la conexión.

        Este método debe llamarse siempre al finalizar el uso de la cámara
        para evitar que quede bloqueada.
        """
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("Recursos de cámara %s liberados", self.camera_index)
        self.is_opened = False

    def get_properties(self) -> dict:
        """
        Obtiene las propiedades actuales de la cámara.

        Returns:
            dict: Diccionario con propiedades de la cámara (ancho, alto, fps)
        """
        if not self.is_opened or self.cap is None:
            return {}

        return {
            'width': int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            'height': int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            'fps': int(self.cap.get(cv2.CAP_PROP_FPS))
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


def capture_still(camera_index: int = 0, quality: int = DEFAULT_JPEG_QUALITY) -> CapturedFrame:
    """
    Abre la cámara, captura una imagen fija y la libera inmediatamente.

    Example:
        >>> frame = capture_still(0)
        >>> frame.data_url[:23]
        'data:image/jpeg;base64,'
    """
    with WebcamCapture(camera_index=camera_index) as camera:
        return camera.capture(quality=quality)

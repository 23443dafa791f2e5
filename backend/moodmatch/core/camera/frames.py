"""
Codificación y decodificación de imágenes capturadas.

El frontend y la webcam del servidor entregan la imagen como data URL
JPEG (`data:image/jpeg;base64,...`). Este módulo convierte entre ese
formato, los bytes crudos que piden algunos proveedores y los frames
BGR de OpenCV.
"""

import base64
import binascii
import time
from dataclasses import dataclass, field

import cv2
import numpy as np

JPEG_MIME = "image/jpeg"
DEFAULT_JPEG_QUALITY = 85


def split_data_url(image: str) -> str:
    """
    Elimina el prefijo `data:...;base64,` si está presente.

    Examples:
        >>> split_data_url("data:image/jpeg;base64,AAAA")
        'AAAA'
        >>> split_data_url("AAAA")
        'AAAA'
    """
    if not image:
        return ""
    if "," in image and image.lstrip().startswith("data:"):
        return image.split(",", 1)[1].strip()
    return image.strip()


def decode_image(image: str) -> bytes:
    """
    Decodifica una imagen en base64 (con o sin prefijo data URL).

    Raises:
        ValueError: Si la imagen está vacía o no es base64 válido
    """
    payload = split_data_url(image)
    if not payload:
        raise ValueError("Imagen vacía")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Formato base64 inválido: {e}") from e

    if not data:
        raise ValueError("Imagen vacía")
    return data


def decode_to_frame(image: str) -> np.ndarray:
    """
    Decodifica una imagen codificada a un frame BGR de OpenCV.

    Raises:
        ValueError: Si los bytes no forman una imagen JPEG/PNG válida
    """
    nparr = np.frombuffer(decode_image(image), np.uint8)
    frame = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if frame is None:
        raise ValueError("No se pudo decodificar la imagen. Usa formato JPEG o PNG")
    return frame


@dataclass(frozen=True)
class CapturedFrame:
    """
    Imagen fija capturada y codificada como data URL.

    Attributes:
        data_url (str): Imagen en formato `data:image/jpeg;base64,...`
        captured_at (float): Marca temporal (epoch) de la captura
    """

    data_url: str
    captured_at: float = field(default_factory=time.time)

    @property
    def base64_payload(self) -> str:
        return split_data_url(self.data_url)

    @property
    def image_bytes(self) -> bytes:
        return decode_image(self.data_url)


def encode_frame(frame: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> CapturedFrame:
    """
    Comprime un frame BGR como JPEG y lo envuelve en un CapturedFrame.

    Args:
        frame (np.ndarray): Frame en formato BGR (OpenCV)
        quality (int): Calidad JPEG [1, 100] (default: 85)

    Returns:
        CapturedFrame: Imagen codificada como data URL

    Raises:
        ValueError: Si el frame está vacío o OpenCV no puede codificarlo
    """
    if frame is None or getattr(frame, "size", 0) == 0:
        raise ValueError("Frame vacío")

    quality = max(1, min(100, int(quality)))
    ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    if not ok:
        raise ValueError("No se pudo codificar el frame como JPEG")

    payload = base64.b64encode(buffer.tobytes()).decode("ascii")
    return CapturedFrame(data_url=f"data:{JPEG_MIME};base64,{payload}")

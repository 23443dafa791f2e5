"""
Módulo de captura de imagen (webcam del servidor y codificación de frames).
"""

from .frames import CapturedFrame, decode_image, decode_to_frame, encode_frame, split_data_url
from .webcam import WebcamCapture, capture_still

__all__ = [
    'CapturedFrame',
    'WebcamCapture',
    'capture_still',
    'decode_image',
    'decode_to_frame',
    'encode_frame',
    'split_data_url',
]

"""
Utilidades matemáticas comunes del sistema.

Este módulo centraliza funciones matemáticas reutilizables que se usan
en diferentes partes del sistema (normalización de distribuciones,
simulación emocional, formateo de duraciones, etc.).
"""

import random
from typing import Dict, Mapping, Optional


def clamp(x: float, lo: float, hi: float) -> float:
    """
    Restringe un valor al rango [lo, hi].

    Args:
        x (float): Valor a restringir
        lo (float): Límite inferior
        hi (float): Límite superior

    Returns:
        float: Valor restringido al rango [lo, hi]

    Examples:
        >>> clamp(5.0, 0.0, 10.0)
        5.0
        >>> clamp(15.0, 0.0, 10.0)
        10.0
        >>> clamp(-5.0, 0.0, 10.0)
        0.0
    """
    return max(lo, min(hi, x))


def lerp(lo: float, hi: float, t: float) -> float:
    """
    Interpolación lineal entre dos valores.

    Calcula: lo + (hi - lo) * t

    Args:
        lo (float): Valor inicial (cuando t=0)
        hi (float): Valor final (cuando t=1)
        t (float): Factor de interpolación [0, 1]

    Returns:
        float: Valor interpolado

    Examples:
        >>> lerp(0.0, 100.0, 0.5)
        50.0
        >>> lerp(0.6, 0.85, 0.0)
        0.6
    """
    return lo + (hi - lo) * t


def rescale(weights: Mapping[str, float], total: float = 1.0) -> Dict[str, float]:
    """
    Reescala pesos no negativos para que sumen `total`.

    Si todos los pesos son 0, reparte `total` a partes iguales.

    Examples:
        >>> rescale({'a': 1.0, 'b': 3.0})
        {'a': 0.25, 'b': 0.75}
        >>> rescale({'a': 0.0, 'b': 0.0}, total=0.5)
        {'a': 0.25, 'b': 0.25}
    """
    positive = {key: max(0.0, value) for key, value in weights.items()}
    current = sum(positive.values())

    if not positive:
        return {}
    if current <= 0:
        share = total / len(positive)
        return {key: share for key in positive}

    return {key: value * total / current for key, value in positive.items()}


def weighted_choice(weights: Mapping[str, float], rng: Optional[random.Random] = None) -> str:
    """
    Elige una clave al azar con probabilidad proporcional a su peso.

    Args:
        weights: Pesos no negativos por clave (no hace falta que sumen 1)
        rng: Generador aleatorio (por defecto el módulo random)

    Returns:
        str: Clave elegida
    """
    rng = rng or random
    keys = list(weights.keys())
    return rng.choices(keys, weights=[max(0.0, weights[k]) for k in keys], k=1)[0]


def format_duration(duration_ms: int) -> str:
    """
    Formatea una duración en milisegundos como m:ss.

    Examples:
        >>> format_duration(233000)
        '3:53'
        >>> format_duration(0)
        '0:00'
    """
    duration_ms = max(0, int(duration_ms or 0))
    minutes = duration_ms // 60000
    seconds = (duration_ms % 60000) // 1000
    return f"{minutes}:{seconds:02d}"

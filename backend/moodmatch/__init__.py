"""
MoodMatch - Recomendaciones de películas, música y libros según la emoción facial.
"""

__version__ = "1.0.0"

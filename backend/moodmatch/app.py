"""
Aplicación principal del backend - MoodMatch.

Este módulo implementa la API REST Flask que expone la detección emocional
facial y las recomendaciones de contenido asociadas a cada emoción.

La API proporciona endpoints para:
- Detección de emociones desde una imagen enviada (cadena de proveedores)
- Servicio local de clasificación con DeepFace
- Detección desde la webcam del servidor (bajo demanda)
- Recomendaciones de películas, canciones y libros
- Renovación del token de Spotify
- Analítica del historial emocional
- Monitoreo de salud del servicio

IMPORTANTE: La webcam del servidor NO se inicializa al arrancar.
Solo se abre durante una llamada a /emotion y se libera al leer el frame.
"""

import logging
import threading

import requests
from flask import Flask
from flask_cors import CORS

from . import __version__
from .config import Config, mask_secret
from .core.emotion import EmotionProviderChain, EmotionSimulator, build_providers
from .core.recommend import build_aggregator, build_spotify_client
from .routes import analytics_bp, emotion_bp, health_bp, recommendations_bp, spotify_bp

# Configurar logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config=None):
    """
    Factory function para crear y configurar la aplicación Flask.

    Este patrón Application Factory permite:
    - Crear múltiples instancias de la app (útil para testing)
    - Inyectar sesiones HTTP o componentes falsos en los tests
    - Inicializar recursos de forma controlada

    Los componentes (cadena de emociones, agregador, cliente de Spotify) se
    guardan en app.config. Si la configuración custom ya trae alguno, se
    respeta y no se construye.

    Args:
        config (dict, optional): Diccionario de configuración custom.
                                Si None, usa la configuración del entorno.

    Returns:
        Flask: Aplicación Flask configurada y lista para usar

    Example:
        >>> app = create_app({'INCLUDE_METRICS': True})
        >>> app.run(debug=True, port=5000)
    """
    app = Flask(__name__)

    # Configuración por defecto y del entorno (.env)
    app.config['DEBUG'] = False
    app.config['HOST'] = '0.0.0.0'
    app.config['PORT'] = 5000
    app.config.update(Config.to_dict())

    # Aplicar configuración custom si se proporciona
    if config:
        app.config.update(config)

    # Habilitar CORS para permitir requests desde el frontend
    CORS(app)

    session = app.config.get('HTTP_SESSION') or requests.Session()

    if app.config.get('EMOTION_CHAIN') is None:
        app.config['EMOTION_CHAIN'] = EmotionProviderChain(
            build_providers(app.config, session=session),
            EmotionSimulator(),
        )

    if app.config.get('SPOTIFY_CLIENT') is None:
        app.config['SPOTIFY_CLIENT'] = build_spotify_client(app.config, session=session)

    if app.config.get('RECOMMENDER') is None:
        app.config['RECOMMENDER'] = build_aggregator(
            app.config,
            spotify_client=app.config['SPOTIFY_CLIENT'],
            session=session,
        )

    # El detector DeepFace se crea la primera vez que se usa /detect-emotion
    app.config.setdefault('DEEPFACE_DETECTOR', None)

    # Una sola captura de webcam a la vez (/emotion responde 409 si está ocupada)
    app.config['DETECTION_LOCK'] = threading.Lock()

    _log_configuration(app)

    # Registrar blueprints
    app.register_blueprint(health_bp)
    app.register_blueprint(emotion_bp)
    app.register_blueprint(recommendations_bp)
    app.register_blueprint(spotify_bp)
    app.register_blueprint(analytics_bp)

    logger.info("Blueprints registrados")

    return app


def _log_configuration(app):
    # Solo prefijos de las credenciales, nunca el valor completo
    status = app.config['EMOTION_CHAIN'].real_provider_status()
    logger.info("Proveedores de emoción configurados: %s", status)
    logger.info("Face++ API key: %s", mask_secret(app.config.get('FACEPLUS_API_KEY')))
    logger.info("OMDB API key: %s", mask_secret(app.config.get('OMDB_API_KEY')))
    logger.info("Fuentes de contenido: %s", app.config['RECOMMENDER'].status())


def main():
    """
    Función principal para ejecutar el servidor de desarrollo.

    Crea la aplicación Flask y la ejecuta en modo desarrollo.
    Para producción, usar un servidor WSGI como Gunicorn.

    Example:
        $ python -m moodmatch.app
    """
    print("=" * 70)
    print(f"Backend MoodMatch v{__version__}")
    print("=" * 70)

    app = create_app()

    print("\nEndpoints disponibles:")
    print("  GET  /health                    - Verificación de estado")
    print("  POST /emotion-detection         - Detectar emoción desde imagen (cadena de proveedores)")
    print("  GET  /emotion-detection/status  - Proveedores reales configurados")
    print("  POST /detect-emotion            - Servicio local de clasificación (DeepFace)")
    print("  POST /emotion                   - Detectar emoción con la webcam del servidor")
    print("  POST /recommendations           - Películas, canciones y libros para una emoción")
    print("  POST /spotify-auth              - Token de acceso de Spotify")
    print("  POST /emotion-analytics         - Analítica del historial emocional")
    print("\n" + "=" * 70)
    print(f"Servidor iniciando en http://{app.config['HOST']}:{app.config['PORT']}")
    print("=" * 70 + "\n")

    app.run(
        host=app.config['HOST'],
        port=app.config['PORT'],
        debug=app.config['DEBUG']
    )


if __name__ == "__main__":
    main()

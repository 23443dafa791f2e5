"""
Blueprint para endpoints relacionados con detección emocional.

Proporciona endpoints para analizar el estado emocional del usuario a
partir de una imagen enviada por el navegador, de la webcam del servidor
o mediante el clasificador DeepFace local.
"""

import threading

from flask import Blueprint, current_app, jsonify, request

from ..core.camera import capture_still, decode_image, decode_to_frame
from ..core.emotion import DeepFaceEmotionDetector, RealDetectionUnavailable
from ..core.utils.metrics import get_metrics

emotion_bp = Blueprint('emotion', __name__)

# Lock para la creación diferida del detector DeepFace
_detector_lock = threading.Lock()


def _bad_request(error, message):
    return jsonify({'error': error, 'message': message}), 400


def _read_image():
    """
    Extrae y valida el campo "image" del cuerpo JSON.

    Returns:
        Tuple[dict, str]: cuerpo de la petición e imagen

    Raises:
        ValueError: JSON inválido, imagen ausente o base64 inválido
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValueError('El cuerpo de la petición debe ser JSON')

    image = body.get('image')
    if not image or not isinstance(image, str):
        raise ValueError('Debes enviar una imagen en el campo "image"')

    decode_image(image)
    return body, image


def _get_or_create_detector():
    """
    Obtiene el detector DeepFace existente o lo crea (lazy initialization).

    Returns:
        DeepFaceEmotionDetector: Instancia compartida del detector
    """
    detector = current_app.config.get('DEEPFACE_DETECTOR')
    if detector is not None:
        return detector

    with _detector_lock:
        # Double-check: otro thread pudo haberlo creado mientras esperábamos
        detector = current_app.config.get('DEEPFACE_DETECTOR')
        if detector is None:
            current_app.logger.info("[LAZY INIT] Inicializando detector DeepFace...")
            detector = DeepFaceEmotionDetector(enforce_detection=False)
            current_app.config['DEEPFACE_DETECTOR'] = detector
        return detector


def _with_metrics(response, timing):
    # Opcional: incluir tiempo de procesamiento en la respuesta (útil para debugging)
    if current_app.config.get('INCLUDE_METRICS', False):
        response['processing_time_ms'] = round(timing['duration'] * 1000, 2)
    return response


@emotion_bp.route('/emotion-detection', methods=['POST'])
def emotion_detection():
    """
    Detecta la emoción de una imagen capturada en el navegador.

    Recorre la cadena de proveedores (servicio local, Face++, Azure,
    Google Vision) y, si ninguno responde, simula el resultado salvo que el
    cliente exija detección real.

    Request:
        {
            "image": "data:image/jpeg;base64,...",
            "forceRealDetection": false
        }

    Returns:
        JSON con la emoción, la distribución y el proveedor usado

    Example:
        Response:
        {
            "success": true,
            "emotion": "happy",
            "confidence": 0.87,
            "all_emotions": {"happy": 0.87, ...},
            "face_detected": true,
            "service_used": "faceplusplus",
            "service_mode": "real"
        }

    Error cases:
        - 400: JSON inválido, falta "image" o base64 inválido
        - 503: forceRealDetection y ningún proveedor real disponible
        - 500: Error interno del servidor
    """
    try:
        try:
            body, image = _read_image()
        except ValueError as e:
            return _bad_request('Imagen inválida', str(e))

        require_real = bool(body.get('forceRealDetection', False))
        chain = current_app.config['EMOTION_CHAIN']
        metrics = get_metrics()

        try:
            with metrics.measure('emotion_detection',
                                 metadata={'endpoint': '/emotion-detection'}) as timing:
                result = chain.detect(image, require_real=require_real)
        except RealDetectionUnavailable as e:
            current_app.logger.warning(f"Detección real no disponible: {e.attempts}")
            return jsonify({
                'success': False,
                'error': str(e),
                'service_mode': 'no_real_service',
                'attempts': e.attempts,
            }), 503

        response = result.to_dict()
        response['service_mode'] = 'simulated' if result.is_simulated else 'real'
        return jsonify(_with_metrics(response, timing)), 200

    except Exception as e:
        current_app.logger.error(f"Error en /emotion-detection: {str(e)}", exc_info=True)

        # En producción, no exponer detalles internos
        error_message = str(e) if current_app.debug else 'Error interno del servidor'
        return jsonify({
            'error': 'Error al detectar emoción',
            'message': error_message
        }), 500


@emotion_bp.route('/emotion-detection/status', methods=['GET'])
def emotion_detection_status():
    """
    Indica qué proveedores reales están configurados.

    Example:
        Response:
        {
            "providers": {"local_service": true, "faceplusplus": false, ...},
            "real_detection_available": true,
            "default_mode": "real"
        }
    """
    chain = current_app.config['EMOTION_CHAIN']
    available = chain.has_real_provider()
    return jsonify({
        'providers': chain.real_provider_status(),
        'real_detection_available': available,
        'default_mode': 'real' if available else 'simulated',
    }), 200


@emotion_bp.route('/detect-emotion', methods=['POST'])
def detect_emotion_local():
    """
    Servicio local de clasificación emocional con DeepFace.

    Es el endpoint que consume LocalServiceProvider cuando otra instancia
    configura esta como EMOTION_API_URL.

    Request:
        {"image": "data:image/jpeg;base64,..."}

    Error cases:
        - 400: Falta "image" o la imagen no se puede decodificar
        - 500: Error interno del servidor
    """
    try:
        try:
            _, image = _read_image()
            frame = decode_to_frame(image)
        except ValueError as e:
            return _bad_request('Imagen inválida', str(e))

        detector = _get_or_create_detector()
        metrics = get_metrics()

        with metrics.measure('emotion_detection', metadata={'endpoint': '/detect-emotion'}) as timing:
            result = detector.predict(frame)

        if not result.face_detected:
            current_app.logger.info("No se detectó rostro en la imagen, devolviendo neutral")

        return jsonify(_with_metrics(result.to_dict(), timing)), 200

    except Exception as e:
        current_app.logger.error(f"Error en /detect-emotion: {str(e)}", exc_info=True)

        error_message = str(e) if current_app.debug else 'Error interno del servidor'
        return jsonify({
            'success': False,
            'error': 'Error al procesar la imagen',
            'message': error_message
        }), 500


@emotion_bp.route('/emotion', methods=['POST'])
def detect_emotion_webcam():
    """
    Captura una imagen con la webcam del servidor y detecta la emoción.

    La webcam solo se abre durante la captura y se libera en cuanto se lee
    el frame. Solo puede haber una captura en curso: una segunda petición
    concurrente se rechaza con 409 (no se encola).

    Error cases:
        - 409: Ya hay una detección en curso
        - 500: Webcam no disponible o error interno
    """
    lock = current_app.config['DETECTION_LOCK']
    if not lock.acquire(blocking=False):
        return jsonify({
            'error': 'Detección en curso',
            'message': 'Ya hay una captura de la webcam en curso, inténtalo de nuevo'
        }), 409

    try:
        try:
            still = capture_still(current_app.config.get('CAMERA_INDEX', 0))
        except RuntimeError as e:
            current_app.logger.error(f"Error al acceder a la webcam: {e}")
            return jsonify({
                'error': 'No se pudo acceder a la webcam del servidor',
                'message': str(e)
            }), 500

        chain = current_app.config['EMOTION_CHAIN']
        metrics = get_metrics()

        with metrics.measure('emotion_detection', metadata={'endpoint': '/emotion'}) as timing:
            result = chain.detect(still.data_url)

        response = result.to_dict()
        response['service_mode'] = 'simulated' if result.is_simulated else 'real'
        response['captured_at'] = still.captured_at
        return jsonify(_with_metrics(response, timing)), 200

    except Exception as e:
        current_app.logger.error(f"Error en /emotion: {str(e)}", exc_info=True)

        error_message = str(e) if current_app.debug else 'Error interno del servidor'
        return jsonify({
            'error': 'Error al detectar emoción',
            'message': error_message
        }), 500

    finally:
        lock.release()

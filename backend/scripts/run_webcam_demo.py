#!/usr/bin/env python3
"""
Script de demostración: webcam -> emoción -> recomendaciones.

Captura una imagen fija con la webcam local, la pasa por la cadena de
proveedores de detección emocional y muestra las películas, canciones y
libros recomendados para la emoción detectada. Es el cliente Python del
mismo flujo que sigue el navegador contra la API.

Uso:
    python backend/scripts/run_webcam_demo.py [--camera N] [--force-real] [--preview]

Controles (con --preview):
    - Presiona 'c' para capturar y analizar
    - Presiona 'q' para salir
"""

import argparse
import sys

import cv2

from moodmatch.config import Config
from moodmatch.core.camera import WebcamCapture, capture_still, encode_frame
from moodmatch.core.emotion import EmotionProviderChain, EmotionSimulator, RealDetectionUnavailable, build_providers
from moodmatch.core.recommend import CONTENT_KINDS, build_aggregator
from moodmatch.core.utils.metrics import get_metrics


def build_components(config):
    """Crea la cadena de emociones y el agregador a partir de la configuración."""
    chain = EmotionProviderChain(build_providers(config), EmotionSimulator())
    aggregator = build_aggregator(config)
    return chain, aggregator


def analyze(chain, aggregator, image, force_real=False):
    """Detecta la emoción de una imagen e imprime las recomendaciones."""
    metrics = get_metrics()

    try:
        with metrics.measure('emotion_detection'):
            result = chain.detect(image, require_real=force_real)
    except RealDetectionUnavailable as e:
        print(f"\n✗ {e}")
        for provider, reason in e.attempts.items():
            print(f"    - {provider}: {reason}")
        return None

    mode = "simulada" if result.is_simulated else "real"
    print(f"\nEmoción: {result.emotion} ({result.confidence:.0%}) - detección {mode} vía {result.provenance}")
    for emotion, probability in sorted(result.distribution.items(), key=lambda kv: -kv[1]):
        print(f"    {emotion:<10} {'#' * int(probability * 40):<40} {probability:.2f}")

    with metrics.measure('recommendations'):
        recommendations = aggregator.get(result.emotion)

    for kind in CONTENT_KINDS:
        print(f"\n[{kind.upper()}]")
        for item in recommendations.get(kind):
            rating = f" ({item.rating:.1f})" if item.rating is not None else ""
            print(f"  - {item.title}{rating}")
            print(f"    {item.link}")

    return result


def run_preview(chain, aggregator, camera_index, force_real):
    """Muestra la webcam en una ventana y analiza al pulsar 'c'."""
    with WebcamCapture(camera_index=camera_index) as webcam:
        props = webcam.get_properties()
        print(f"Cámara: {props.get('width')}x{props.get('height')} @ {props.get('fps')} FPS")
        print("Presiona 'c' para capturar y 'q' para salir\n")

        label = "Presiona 'c' para analizar"
        while True:
            success, frame = webcam.read()
            if not success:
                print("Error: No se pudo leer el frame")
                break

            display = frame.copy()
            cv2.rectangle(display, (10, 10), (460, 60), (0, 0, 0), -1)
            cv2.putText(display, label, (20, 45), cv2.FONT_HERSHEY_SIMPLEX,
                        0.8, (0, 255, 0), 2, cv2.LINE_AA)
            cv2.imshow('MoodMatch - Demo', display)

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                print("\n✓ Saliendo del demo...")
                break
            if key == ord('c'):
                result = analyze(chain, aggregator, encode_frame(frame).data_url, force_real)
                if result is not None:
                    label = f"Emocion: {result.emotion} ({result.confidence:.0%})"

    cv2.destroyAllWindows()


def main():
    """Función principal del script."""
    parser = argparse.ArgumentParser(
        description='Demo de detección emocional con webcam y recomendaciones de contenido'
    )
    parser.add_argument(
        '--camera', '-c',
        type=int,
        default=Config.CAMERA_INDEX,
        help=f'Índice de la cámara (default: {Config.CAMERA_INDEX})'
    )
    parser.add_argument(
        '--force-real',
        action='store_true',
        help='Exigir un proveedor real (nunca simular)'
    )
    parser.add_argument(
        '--preview',
        action='store_true',
        help='Mostrar la webcam en una ventana y capturar con la tecla c'
    )

    args = parser.parse_args()

    print("=" * 70)
    print("Demo Webcam + Reconocimiento Emocional - MoodMatch")
    print("=" * 70)

    chain, aggregator = build_components(Config.to_dict())
    print(f"Proveedores reales configurados: {chain.real_provider_status()}")
    print(f"Fuentes de contenido: {aggregator.status()}")

    try:
        if args.preview:
            run_preview(chain, aggregator, args.camera, args.force_real)
        else:
            still = capture_still(args.camera)
            analyze(chain, aggregator, still.data_url, args.force_real)

    except RuntimeError as e:
        print(f"✗ Error: {e}")
        print("\nSoluciones posibles:")
        print("  1. Verifica que la webcam esté conectada")
        print("  2. Asegúrate de que ninguna otra aplicación esté usando la cámara")
        print("  3. Verifica los permisos de acceso a la cámara")
        sys.exit(1)

    except KeyboardInterrupt:
        print("\n\n✓ Interrumpido por el usuario")

    print()
    for line in get_metrics().summary_lines():
        print(line)


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""
Script de benchmarking de la API de emociones y recomendaciones.

Lanza N veces el flujo completo contra un servidor en marcha
(/emotion-detection seguido de /recommendations, rotando las siete
emociones) y registra las latencias con PerformanceMetrics, de modo que
el fichero resultante tiene el mismo formato que las métricas del
servidor.

Uso:
    python run_benchmarks.py [--iterations N] [--url URL] [--image FICHERO]

Ejemplo:
    python run_benchmarks.py --iterations 30 --url http://localhost:5000 --image cara.jpg
"""

import argparse
import time
from typing import Any, Dict, List, Optional

import cv2
import numpy as np
import requests

from moodmatch.core.camera import encode_frame
from moodmatch.core.emotion import STANDARD_EMOTIONS
from moodmatch.core.utils.metrics import PerformanceMetrics


def load_image(path: Optional[str] = None) -> str:
    """
    Carga la imagen de prueba como data URL.

    Sin fichero se genera una imagen gris de 320x240 (sin rostro).
    """
    if path:
        frame = cv2.imread(str(path))
        if frame is None:
            raise SystemExit(f"[ERROR] No se pudo leer la imagen {path}")
    else:
        frame = np.full((240, 320, 3), 128, dtype=np.uint8)
    return encode_frame(frame).data_url


def percentile(values: List[float], pct: int) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    return ordered[min(int(len(ordered) * pct / 100), len(ordered) - 1)]


class ApiBenchmark:
    """Mide las dos etapas del flujo contra un servidor remoto."""

    def __init__(self, base_url: str, image: str, force_real: bool = False,
                 metrics: Optional[PerformanceMetrics] = None):
        self.base_url = base_url.rstrip('/')
        self.image = image
        self.force_real = force_real
        self.metrics = metrics or PerformanceMetrics()
        self.session = requests.Session()
        self.errors: List[str] = []

    def server_alive(self) -> bool:
        try:
            return self.session.get(f"{self.base_url}/health", timeout=5).status_code == 200
        except requests.RequestException:
            return False

    def _timed_post(self, stage: str, path: str, payload: Dict[str, Any],
                    metadata: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        # Solo las respuestas 200 cuentan como medición válida
        started = time.perf_counter()
        try:
            response = self.session.post(f"{self.base_url}{path}", json=payload, timeout=60)
        except requests.RequestException as e:
            self.errors.append(f"{path}: {e}")
            return None
        if response.status_code != 200:
            self.errors.append(f"{path}: HTTP {response.status_code}")
            return None

        elapsed = time.perf_counter() - started
        self.metrics.record(stage, elapsed, {'stage': stage, 'duration': elapsed, **metadata})
        return response.json()

    def run_once(self, emotion: str) -> Optional[str]:
        """
        Una iteración: detección sobre la imagen de prueba y recomendaciones
        para `emotion`. Devuelve una línea de resumen o None si falló.
        """
        detection = self._timed_post(
            'emotion_detection', '/emotion-detection',
            {'image': self.image, 'forceRealDetection': self.force_real},
            {'force_real': self.force_real},
        )
        if detection is None:
            return None

        recommendations = self._timed_post(
            'recommendations', '/recommendations', {'emotion': emotion}, {'emotion': emotion})
        if recommendations is None:
            return None

        sizes = '/'.join(str(len(recommendations.get(kind, []))) for kind in ('movies', 'songs', 'books'))
        return (f"{detection.get('emotion')} ({detection.get('service_used')}) -> "
                f"'{emotion}' {sizes} elementos")

    def run(self, iterations: int, pause: float = 0.1):
        for i in range(iterations):
            # Rotar las emociones para recorrer todas las listas de términos
            line = self.run_once(STANDARD_EMOTIONS[i % len(STANDARD_EMOTIONS)])
            status = line if line else f"ERROR {self.errors[-1]}"
            print(f"  [{i + 1}/{iterations}] {status}")
            time.sleep(pause)

    def report(self) -> List[str]:
        lines = self.metrics.summary_lines()
        for stage, times in self.metrics.measurements.items():
            lines.append(f"[{stage.upper()}] p95={percentile(times, 95) * 1000:.2f} ms")
        if self.errors:
            lines.append(f"[ERRORES] {len(self.errors)}")
        return lines


def main():
    parser = argparse.ArgumentParser(
        description='Benchmark de rendimiento de la API de emociones y recomendaciones'
    )
    parser.add_argument('--iterations', '-n', type=int, default=25,
                        help='Número de iteraciones (default: 25)')
    parser.add_argument('--url', default='http://localhost:5000',
                        help='URL base del servidor (default: http://localhost:5000)')
    parser.add_argument('--image', default=None,
                        help='Imagen de prueba (default: imagen gris generada)')
    parser.add_argument('--force-real', action='store_true',
                        help='Exigir detección real en /emotion-detection')
    parser.add_argument('--output', default='metrics',
                        help='Directorio de salida para resultados (default: metrics)')
    args = parser.parse_args()

    benchmark = ApiBenchmark(
        args.url,
        image=load_image(args.image),
        force_real=args.force_real,
        metrics=PerformanceMetrics(output_dir=args.output),
    )

    print("=" * 70)
    print(f"BENCHMARK DE RENDIMIENTO - {args.iterations} iteraciones contra {benchmark.base_url}")
    print("=" * 70)

    if not benchmark.server_alive():
        print(f"[ERROR] El servidor no está disponible en {benchmark.base_url}")
        raise SystemExit(1)
    print("[OK] Servidor disponible\n")

    benchmark.run(args.iterations)

    print()
    for line in benchmark.report():
        print(line)

    path = benchmark.metrics.save_to_json(f"benchmark_{time.strftime('%Y%m%d_%H%M%S')}.json")
    print(f"\n[OK] Resultados guardados en: {path}")


if __name__ == '__main__':
    main()

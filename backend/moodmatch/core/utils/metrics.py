"""
Módulo de instrumentación y medición de rendimiento.

Mide las latencias de las dos etapas del servicio (detección emocional y
agregación de recomendaciones) para poder comparar proveedores y detectar
regresiones. Flask atiende cada petición en su propio hilo, por lo que el
registro de mediciones está protegido por un lock.
"""

import json
import logging
import statistics
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class PerformanceMetrics:
    """
    Gestor de métricas de rendimiento del sistema.

    Permite medir tiempos de ejecución de las etapas del servicio y
    almacenar los resultados para su posterior análisis estadístico.
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Inicializa el gestor de métricas.

        Args:
            output_dir: Directorio donde guardar los resultados (se crea al guardar)
        """
        self.measurements: Dict[str, List[float]] = defaultdict(list)
        self.metadata: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.output_dir = Path(output_dir) if output_dir else Path('metrics')
        self._lock = threading.Lock()

    @contextmanager
    def measure(self, stage_name: str, metadata: Optional[Dict] = None):
        """
        Context manager para medir el tiempo de ejecución de una etapa.

        Args:
            stage_name: Nombre de la etapa a medir
            metadata: Información adicional sobre la medición

        Yields:
            Diccionario donde se guardará la duración medida (segundos)

        Example:
            with metrics.measure('emotion_detection', metadata={'mode': 'real'}) as timing:
                result = chain.detect(image)
            print(f"Tardó {timing['duration'] * 1000:.0f} ms")
        """
        start_time = time.perf_counter()
        timing_info: Dict[str, Any] = {'stage': stage_name}

        try:
            yield timing_info
        finally:
            duration = time.perf_counter() - start_time
            timing_info['duration'] = duration
            timing_info['timestamp'] = datetime.now().isoformat()
            if metadata:
                timing_info.update(metadata)

            self.record(stage_name, duration, timing_info)

    def record(self, stage_name: str, duration: float, info: Optional[Dict[str, Any]] = None):
        """Registra una duración medida fuera de measure() (segundos)."""
        info = info if info is not None else {'stage': stage_name, 'duration': duration}
        with self._lock:
            self.measurements[stage_name].append(duration)
            self.metadata[stage_name].append(info)

    def get_statistics(self, stage_name: Optional[str] = None) -> Dict[str, Dict[str, float]]:
        """
        Calcula estadísticas sobre las mediciones realizadas.

        Args:
            stage_name: Etapa específica (None para todas)

        Returns:
            Diccionario con count/mean/median/stdev/min/max/total por etapa
        """
        with self._lock:
            if stage_name:
                stages = {stage_name: list(self.measurements.get(stage_name, []))}
            else:
                stages = {name: list(times) for name, times in self.measurements.items()}

        stats = {}
        for name, times in stages.items():
            if not times:
                continue

            stats[name] = {
                'count': len(times),
                'mean': statistics.mean(times),
                'median': statistics.median(times),
                'stdev': statistics.stdev(times) if len(times) > 1 else 0.0,
                'min': min(times),
                'max': max(times),
                'total': sum(times),
            }

        return stats

    def save_to_json(self, filename: Optional[str] = None) -> Path:
        """
        Guarda las mediciones y estadísticas en formato JSON.

        Args:
            filename: Nombre del archivo (generado automáticamente si None)

        Returns:
            Ruta del fichero escrito
        """
        if not filename:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filename = f'metrics_{timestamp}.json'

        self.output_dir.mkdir(exist_ok=True, parents=True)
        filepath = self.output_dir / filename

        with self._lock:
            raw = {name: list(times) for name, times in self.measurements.items()}
            meta = {name: list(entries) for name, entries in self.metadata.items()}

        data = {
            'timestamp': datetime.now().isoformat(),
            'statistics': self.get_statistics(),
            'raw_measurements': raw,
            'metadata': meta,
        }

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.info("Métricas guardadas en: %s", filepath)
        return filepath

    def summary_lines(self) -> List[str]:
        """Resumen legible de las estadísticas (milisegundos), una línea por etapa."""
        lines = []
        for stage_name, stage_stats in self.get_statistics().items():
            lines.append(
                f"[{stage_name.upper()}] n={stage_stats['count']} "
                f"media={stage_stats['mean'] * 1000:.2f} ms "
                f"mediana={stage_stats['median'] * 1000:.2f} ms "
                f"max={stage_stats['max'] * 1000:.2f} ms"
            )

        stats = self.get_statistics()
        if 'emotion_detection' in stats and 'recommendations' in stats:
            total_mean = stats['emotion_detection']['mean'] + stats['recommendations']['mean']
            lines.append(f"[LATENCIA TOTAL - Emoción + Recomendaciones] media={total_mean * 1000:.2f} ms")

        return lines

    def clear(self):
        """Limpia todas las mediciones almacenadas."""
        with self._lock:
            self.measurements.clear()
            self.metadata.clear()


# Instancia global para uso en la aplicación
_global_metrics = None
_global_lock = threading.Lock()


def get_metrics(output_dir: Optional[Path] = None) -> PerformanceMetrics:
    """
    Obtiene la instancia global de métricas.

    Args:
        output_dir: Directorio de salida (solo para primera inicialización)

    Returns:
        Instancia de PerformanceMetrics
    """
    global _global_metrics
    with _global_lock:
        if _global_metrics is None:
            _global_metrics = PerformanceMetrics(output_dir)
        return _global_metrics


def reset_metrics():
    """Reinicia la instancia global de métricas."""
    global _global_metrics
    with _global_lock:
        _global_metrics = None

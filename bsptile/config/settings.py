"""
bsptile.config.settings - Parametros del motor de tiling.

    GAP_SIZE             : margen (por lado) entre el rectangulo calculado
                           y la geometria fisica de la ventana.
    DEFAULT_SPLIT_RATIO  : ratio de cada contenedor nuevo (fijo).
    DRIFT_TOLERANCE      : diferencia maxima, por campo, antes de
                           considerar que una ventana se movio sola.
"""

from __future__ import annotations

from dataclasses import dataclass

GAP_SIZE = 2
DEFAULT_SPLIT_RATIO = 0.5
DRIFT_TOLERANCE = 5


@dataclass(frozen=True, slots=True)
class TilingSettings:
    """Configuracion inmutable del TilingManager."""

    gap_size: int = GAP_SIZE
    split_ratio: float = DEFAULT_SPLIT_RATIO
    drift_tolerance: int = DRIFT_TOLERANCE

    def __post_init__(self) -> None:
        if self.gap_size < 0:
            raise ValueError(f"gap_size debe ser >= 0: {self.gap_size!r}")
        if not 0.0 < self.split_ratio < 1.0:
            raise ValueError(
                f"split_ratio fuera de (0, 1): {self.split_ratio!r}"
            )
        if self.drift_tolerance < 0:
            raise ValueError(
                f"drift_tolerance debe ser >= 0: {self.drift_tolerance!r}"
            )


DEFAULT_SETTINGS = TilingSettings()

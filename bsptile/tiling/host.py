"""
bsptile.tiling.host - Interfaz del host (entorno de ventanas).

El motor de tiling no habla con ningun sistema de ventanas directamente.
Todo lo que necesita del entorno esta en la clase abstracta `Host`:

    - Enumerar las regiones (ventanas) de un workspace al arrancar.
    - Notificar: region creada, region mostrada, fin de vida de la region,
      cambio externo de geometria, cambio de foco.
    - Consultar: workspace de una region, su rectangulo fisico, si esta
      lista y si debe tilearse.
    - Ordenar: mover/redimensionar y des-maximizar.
    - Area de trabajo de cada workspace.

`bsptile.core.host.Win32Host` es la implementacion para Windows.
"""

from __future__ import annotations

import abc
import enum
from collections.abc import Callable, Hashable
from typing import Any, Optional

from bsptile.tiling.rect import Rect

# Una region es un objeto opaco del host con identidad estable
Region = Any

# Callback de notificacion: recibe la region (None en FOCUS_CHANGED sin foco)
HostCallback = Callable[[Optional[Region]], None]


class HostError(RuntimeError):
    """Un comando enviado al host (mover, redimensionar...) fallo."""


class HostEvent(enum.Enum):
    """Notificaciones que el host entrega al motor."""

    # Globales (connect sin region)
    REGION_CREATED = "region_created"
    FOCUS_CHANGED = "focus_changed"

    # Por region (connect con region)
    REGION_SHOWN = "region_shown"
    REGION_UNMANAGED = "region_unmanaged"
    GEOMETRY_CHANGED = "geometry_changed"


class Host(abc.ABC):
    """
    Capacidades que el TilingManager necesita de su entorno.

    Todas las llamadas ocurren en el mismo hilo que entrega las
    notificaciones.
    """

    # ------------------------------------------------------------------
    # Suscripciones
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def connect(
        self,
        event: HostEvent,
        callback: HostCallback,
        region: Optional[Region] = None,
    ) -> int:
        """
        Suscribe *callback* a *event*.

        Args:
            event:    Tipo de notificacion.
            callback: Funcion que recibe la region afectada.
            region:   Para eventos por region, la region observada.

        Returns:
            Id del handler, para `disconnect()`.
        """
        ...

    @abc.abstractmethod
    def disconnect(self, handler_id: int) -> None:
        """Cancela una suscripcion. Ids desconocidos se ignoran."""
        ...

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def active_workspace(self) -> Hashable:
        ...

    @abc.abstractmethod
    def list_regions(self, workspace: Hashable) -> list[Region]:
        """Regiones presentes en *workspace* (sin filtrar)."""
        ...

    @abc.abstractmethod
    def focused_region(self) -> Optional[Region]:
        ...

    @abc.abstractmethod
    def workspace_of(self, region: Region) -> Optional[Hashable]:
        ...

    @abc.abstractmethod
    def frame_rect(self, region: Region) -> Optional[Rect]:
        """Rectangulo fisico actual, o None si no se puede consultar."""
        ...

    @abc.abstractmethod
    def is_ready(self, region: Region) -> bool:
        """True si la region ya puede recibir comandos de geometria."""
        ...

    @abc.abstractmethod
    def should_tile(self, region: Region) -> bool:
        """Politica de elegibilidad: ventana normal, no dialogo, etc."""
        ...

    @abc.abstractmethod
    def work_area(self, workspace: Hashable) -> Optional[Rect]:
        ...

    # ------------------------------------------------------------------
    # Comandos
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def move_resize(self, region: Region, rect: Rect) -> None:
        """
        Mueve y redimensiona la region a *rect*.

        Raises:
            HostError: Si el host rechaza el comando.
        """
        ...

    @abc.abstractmethod
    def unmaximize(self, region: Region) -> None:
        ...

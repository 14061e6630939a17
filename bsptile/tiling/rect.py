"""
bsptile.tiling.rect - Estructura geometrica Rect.

Define un rectangulo inmutable que representa un area del workspace.
Se usa para el area de trabajo, para el rectangulo calculado de cada
nodo del arbol BSP y para la geometria fisica que se envia al host.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Rectangulo inmutable definido por posicion (x, y) y dimensiones (w, h).

    Las coordenadas estan en el espacio del workspace. El origen (0, 0) es
    la esquina superior-izquierda.

    Atributos:
        x: Coordenada horizontal de la esquina superior-izquierda.
        y: Coordenada vertical de la esquina superior-izquierda.
        w: Ancho.
        h: Alto.
    """

    x: int
    y: int
    w: int
    h: int

    # ------------------------------------------------------------------
    # Propiedades derivadas
    # ------------------------------------------------------------------
    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    @property
    def area(self) -> int:
        return self.w * self.h

    @property
    def is_empty(self) -> bool:
        return self.w <= 0 or self.h <= 0

    # ------------------------------------------------------------------
    # Operaciones geometricas
    # ------------------------------------------------------------------
    def split_width(self, ratio: float = 0.5) -> tuple[Rect, Rect]:
        """
        Divide el ancho: dos rectangulos lado a lado (izquierda / derecha).

        El ancho de la izquierda se redondea hacia abajo; la derecha se
        queda con el resto, asi que ambos cubren el rectangulo completo sin huecos.

        Args:
            ratio: Fraccion del ancho para la parte izquierda.

        Returns:
            Tupla (izquierda, derecha).
        """
        left_w = math.floor(self.w * ratio)
        left = Rect(self.x, self.y, left_w, self.h)
        right = Rect(self.x + left_w, self.y, self.w - left_w, self.h)
        return left, right

    def split_height(self, ratio: float = 0.5) -> tuple[Rect, Rect]:
        """
        Divide el alto: dos rectangulos apilados (superior / inferior).

        Args:
            ratio: Fraccion del alto para la parte superior.

        Returns:
            Tupla (superior, inferior).
        """
        top_h = math.floor(self.h * ratio)
        top = Rect(self.x, self.y, self.w, top_h)
        bottom = Rect(self.x, self.y + top_h, self.w, self.h - top_h)
        return top, bottom

    def pad(self, gap: int) -> Rect:
        """
        Reduce el rectangulo aplicando un margen interior (gap) uniforme.

        Args:
            gap: Unidades de margen en cada lado.

        Returns:
            Nuevo Rect reducido. Si el gap es mayor que las dimensiones,
            el ancho/alto se quedan en 0.
        """
        new_w = max(0, self.w - 2 * gap)
        new_h = max(0, self.h - 2 * gap)
        return Rect(self.x + gap, self.y + gap, new_w, new_h)

    def deviates_from(self, other: Rect, tolerance: int) -> bool:
        """
        True si algun campo (x, y, w, h) difiere de *other* en mas de
        *tolerance* unidades.
        """
        return (
            abs(self.x - other.x) > tolerance
            or abs(self.y - other.y) > tolerance
            or abs(self.w - other.w) > tolerance
            or abs(self.h - other.h) > tolerance
        )

    # ------------------------------------------------------------------
    # Conversion desde tupla Win32 (left, top, right, bottom)
    # ------------------------------------------------------------------
    @classmethod
    def from_ltrb(cls, left: int, top: int, right: int, bottom: int) -> Rect:
        """Crea un Rect desde coordenadas (left, top, right, bottom)."""
        return cls(left, top, right - left, bottom - top)

    # ------------------------------------------------------------------
    # Representacion
    # ------------------------------------------------------------------
    def __str__(self) -> str:
        return f"Rect({self.w}x{self.h}+{self.x}+{self.y})"

"""
bsptile.tiling.geometry - Calculo de geometria del arbol BSP.

Funciones puras: asignan a cada nodo su rectangulo a partir del
rectangulo del padre, segun el eje y el ratio del contenedor. No tocan
ninguna ventana; aplicar la geometria es trabajo del TilingManager.
"""

from __future__ import annotations

from typing import Optional

from bsptile.tiling.rect import Rect
from bsptile.tiling.tree import SplitAxis, TreeNode


def calculate_geometry(node: TreeNode, rect: Rect) -> None:
    """
    Asigna *rect* a *node* y reparte recursivamente entre sus hijos.

    VERTICAL divide el ancho (hijos lado a lado) y HORIZONTAL divide el
    alto (hijos apilados). El primer hijo recibe floor(lado * ratio) y el
    segundo el resto, asi los dos cubren exactamente al padre.
    """
    node.rect = rect
    if node.is_leaf():
        return

    if node.axis is SplitAxis.VERTICAL:
        first_rect, second_rect = rect.split_width(node.ratio)
    else:
        first_rect, second_rect = rect.split_height(node.ratio)

    if node.first is not None:
        calculate_geometry(node.first, first_rect)
    if node.second is not None:
        calculate_geometry(node.second, second_rect)


def split_axis_for(rect: Optional[Rect]) -> SplitAxis:
    """
    Eje para dividir un nodo con rectangulo *rect*.

    Mas ancho que alto -> VERTICAL (lado a lado); si no -> HORIZONTAL
    (apilados). Sin rectangulo conocido -> VERTICAL.
    """
    if rect is None:
        return SplitAxis.VERTICAL
    return SplitAxis.VERTICAL if rect.w > rect.h else SplitAxis.HORIZONTAL

"""
bsptile.tiling - Motor de tiling BSP (independiente del sistema de ventanas).

Este paquete contiene:
    - rect     : Estructura Rect para geometria de areas
    - tree     : TreeNode - nodo del arbol BSP (hoja / contenedor)
    - geometry : Calculo recursivo de rectangulos del arbol
    - host     : Host - interfaz abstracta del entorno de ventanas
    - manager  : TilingManager - un arbol por workspace, insercion,
                 eliminacion y correccion de ventanas que se mueven solas
"""

from bsptile.tiling.rect import Rect
from bsptile.tiling.tree import (
    NodeType,
    SplitAxis,
    TreeInvariantError,
    TreeNode,
    validate_tree,
)
from bsptile.tiling.geometry import calculate_geometry, split_axis_for
from bsptile.tiling.host import Host, HostError, HostEvent
from bsptile.tiling.manager import TilingManager

__all__ = [
    "Rect",
    "NodeType",
    "SplitAxis",
    "TreeInvariantError",
    "TreeNode",
    "validate_tree",
    "calculate_geometry",
    "split_axis_for",
    "Host",
    "HostError",
    "HostEvent",
    "TilingManager",
]

"""
bsptile.tiling.tree - Nodo del arbol BSP.

Un arbol BSP por workspace. Cada nodo es:
    - LEAF      : hoja, referencia a exactamente una region (ventana).
    - CONTAINER : division, con exactamente dos hijos, un eje y un ratio.

Los hijos son propiedad del contenedor; la referencia al padre es solo
de navegacion hacia arriba. El nodo no sabe nada del host: la region es
un objeto opaco.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from typing import Any, Optional

from bsptile.tiling.rect import Rect


class TreeInvariantError(RuntimeError):
    """El arbol no cumple la forma de un arbol binario propio."""


class NodeType(enum.Enum):
    """Tipo de nodo del arbol."""
    LEAF = "leaf"
    CONTAINER = "container"


class SplitAxis(enum.Enum):
    """
    Eje de division de un contenedor.

    VERTICAL   : hijos lado a lado (se divide el ancho).
    HORIZONTAL : hijos apilados (se divide el alto).
    """
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class TreeNode:
    """
    Nodo del arbol BSP (hoja o contenedor).

    Usar los constructores `TreeNode.leaf()` y `TreeNode.container()`.
    """

    __slots__ = (
        "kind",
        "region",
        "parent",
        "rect",
        "first",
        "second",
        "axis",
        "ratio",
    )

    def __init__(
        self,
        kind: NodeType,
        region: Any = None,
        axis: SplitAxis | None = None,
        ratio: float = 0.5,
    ) -> None:
        if kind is NodeType.CONTAINER and not 0.0 < ratio < 1.0:
            raise ValueError(f"split ratio fuera de (0, 1): {ratio!r}")

        self.kind = kind
        self.region = region
        self.parent: Optional[TreeNode] = None

        # Ultimo rectangulo calculado (None hasta la primera pasada)
        self.rect: Optional[Rect] = None

        # Solo contenedores
        self.first: Optional[TreeNode] = None
        self.second: Optional[TreeNode] = None
        self.axis = axis
        self.ratio = ratio

    @classmethod
    def leaf(cls, region: Any) -> TreeNode:
        return cls(NodeType.LEAF, region=region)

    @classmethod
    def container(cls, axis: SplitAxis, ratio: float = 0.5) -> TreeNode:
        return cls(NodeType.CONTAINER, axis=axis, ratio=ratio)

    # ------------------------------------------------------------------
    # Tipo
    # ------------------------------------------------------------------
    def is_leaf(self) -> bool:
        return self.kind is NodeType.LEAF

    def is_container(self) -> bool:
        return self.kind is NodeType.CONTAINER

    @property
    def children(self) -> tuple[TreeNode, ...]:
        """Hijos presentes, en orden (first, second)."""
        return tuple(c for c in (self.first, self.second) if c is not None)

    # ------------------------------------------------------------------
    # Operaciones estructurales
    # ------------------------------------------------------------------
    def detach(self) -> None:
        """Quita este nodo del slot de su padre y limpia `parent`."""
        parent = self.parent
        if parent is None:
            return
        if parent.first is self:
            parent.first = None
        else:
            parent.second = None
        self.parent = None

    def sibling(self) -> Optional[TreeNode]:
        """El otro hijo del padre, o None si no hay padre."""
        parent = self.parent
        if parent is None:
            return None
        return parent.second if parent.first is self else parent.first

    def replace_with(self, other: TreeNode) -> None:
        """
        Coloca *other* en el slot que ocupa este nodo en su padre.

        Si este nodo es raiz no cambia nada del arbol: el llamador debe
        reemplazar la entrada del workspace.
        """
        parent = self.parent
        if parent is not None:
            if parent.first is self:
                parent.first = other
            else:
                parent.second = other
            other.parent = parent
        self.parent = None

    def set_children(self, first: TreeNode, second: TreeNode) -> None:
        """Asigna ambos hijos de un contenedor y su referencia al padre."""
        self.first = first
        self.second = second
        first.parent = self
        second.parent = self

    # ------------------------------------------------------------------
    # Recorridos
    # ------------------------------------------------------------------
    def iter_leaves(self) -> Iterator[TreeNode]:
        """Hojas del subarbol: primero el subarbol `first`, luego `second`."""
        if self.is_leaf():
            yield self
            return
        for child in self.children:
            yield from child.iter_leaves()

    def leaves(self) -> list[TreeNode]:
        return list(self.iter_leaves())

    def walk(self) -> Iterator[TreeNode]:
        """Todos los nodos del subarbol en pre-orden."""
        yield self
        for child in self.children:
            yield from child.walk()

    def root(self) -> TreeNode:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    # ------------------------------------------------------------------
    # Debug
    # ------------------------------------------------------------------
    def dump(self, indent: int = 0) -> str:
        pad = "    " * indent
        if self.is_leaf():
            lines = [f"{pad}[leaf] {self.region} @ {self.rect}"]
        else:
            lines = [
                f"{pad}[{self.axis.value if self.axis else '?'} "
                f"{self.ratio:.2f}] @ {self.rect}"
            ]
            lines.extend(child.dump(indent + 1) for child in self.children)
        return "\n".join(lines)

    def __repr__(self) -> str:
        if self.is_leaf():
            return f"TreeNode(leaf, region={self.region!r})"
        axis = self.axis.value if self.axis else None
        return f"TreeNode(container, axis={axis}, ratio={self.ratio:.2f})"


# ============================================================================
# Validacion
# ============================================================================
def validate_tree(root: TreeNode) -> None:
    """
    Verifica que *root* sea un arbol binario propio.

    Raises:
        TreeInvariantError: Si la raiz tiene padre, un contenedor no tiene
            exactamente dos hijos, una hoja tiene hijos, una referencia al
            padre no coincide o un ratio esta fuera de (0, 1).
    """
    if root.parent is not None:
        raise TreeInvariantError(f"la raiz {root!r} tiene padre")

    for node in root.walk():
        if node.is_leaf():
            if node.first is not None or node.second is not None:
                raise TreeInvariantError(f"hoja con hijos: {node!r}")
            continue

        if node.first is None or node.second is None:
            raise TreeInvariantError(f"contenedor sin dos hijos: {node!r}")
        if node.axis is None:
            raise TreeInvariantError(f"contenedor sin eje: {node!r}")
        if not 0.0 < node.ratio < 1.0:
            raise TreeInvariantError(f"ratio invalido: {node!r}")
        for child in (node.first, node.second):
            if child.parent is not node:
                raise TreeInvariantError(
                    f"{child!r} no apunta a su padre {node!r}"
                )

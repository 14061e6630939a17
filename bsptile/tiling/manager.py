"""
bsptile.tiling.manager - TilingManager: arbol BSP por workspace.

El TilingManager es el corazon del sistema. Mantiene un arbol BSP por
workspace y un indice region -> hoja, y reacciona a las notificaciones
del host:

    - Region creada   : si es elegible, espera a que se muestre (una sola
                        vez) y la inserta junto a la ventana que tenia el
                        foco justo antes.
    - Region cerrada  : la quita del arbol promoviendo a su hermana.
    - Geometria       : si la ventana se movio sola, la devuelve a su sitio.
    - Foco            : recuerda la ultima ventana enfocada.

Despues de cada cambio recalcula la geometria del workspace completo y la
aplica a cada ventana (con el gap como margen interior).
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Hashable, Iterator
from typing import Optional

from bsptile.config.settings import DEFAULT_SETTINGS, TilingSettings
from bsptile.tiling.geometry import calculate_geometry, split_axis_for
from bsptile.tiling.host import Host, HostCallback, HostEvent, Region
from bsptile.tiling.rect import Rect
from bsptile.tiling.tree import TreeInvariantError, TreeNode, validate_tree

log = logging.getLogger(__name__)


class TilingManager:
    """
    Organiza las ventanas de cada workspace con un arbol BSP.

    Uso tipico:
        manager = TilingManager(host)
        manager.enable()     # conecta notificaciones y tilea lo existente
        ...                  # el host entrega eventos
        manager.disable()    # desconecta todo y olvida los arboles
    """

    def __init__(
        self,
        host: Host,
        settings: TilingSettings | None = None,
    ) -> None:
        self._host = host
        self._settings = settings if settings is not None else DEFAULT_SETTINGS

        # workspace -> raiz del arbol (sin entrada = workspace vacio)
        self._trees: dict[Hashable, TreeNode] = {}

        # region -> hoja (1:1 con las hojas de todos los arboles)
        self._nodes: dict[Region, TreeNode] = {}

        # region -> {evento: handler_id} de las suscripciones por region
        self._region_signals: dict[Region, dict[HostEvent, int]] = {}

        # Suscripciones globales (creacion, foco)
        self._signals: list[int] = []

        self._focused: Optional[Region] = None

        # True mientras se aplica geometria: las notificaciones de
        # geometria que llegan en ese intervalo se descartan.
        self._applying = False

        self._enabled = False

    # ------------------------------------------------------------------
    # Propiedades
    # ------------------------------------------------------------------
    @property
    def host(self) -> Host:
        return self._host

    @property
    def settings(self) -> TilingSettings:
        return self._settings

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def focused(self) -> Optional[Region]:
        """Ultima region enfocada segun el host."""
        return self._focused

    @property
    def workspaces(self) -> list[Hashable]:
        """Workspaces con al menos una region tileada."""
        return list(self._trees)

    @property
    def region_count(self) -> int:
        return len(self._nodes)

    def tree(self, workspace: Hashable) -> Optional[TreeNode]:
        """Raiz del arbol de *workspace*, o None si esta vacio."""
        return self._trees.get(workspace)

    def node_for(self, region: Region) -> Optional[TreeNode]:
        return self._nodes.get(region)

    def contains(self, region: Region) -> bool:
        return region in self._nodes

    def regions(self, workspace: Hashable) -> list[Region]:
        """Regiones de *workspace* en orden de hojas."""
        root = self._trees.get(workspace)
        if root is None:
            return []
        return [leaf.region for leaf in root.iter_leaves()]

    def workspace_of(self, region: Region) -> Optional[Hashable]:
        """Workspace cuyo arbol contiene a *region*."""
        node = self._nodes.get(region)
        if node is None:
            return None
        return self._find_workspace(node)

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------
    def enable(self) -> None:
        """
        Conecta las notificaciones globales y tilea las ventanas que ya
        existen en el workspace activo.
        """
        if self._enabled:
            return

        log.info(
            "TilingManager enable | gap=%d | ratio=%.2f | tolerancia=%d",
            self._settings.gap_size,
            self._settings.split_ratio,
            self._settings.drift_tolerance,
        )

        self._signals.append(
            self._host.connect(HostEvent.REGION_CREATED, self._on_region_created)
        )
        self._signals.append(
            self._host.connect(HostEvent.FOCUS_CHANGED, self._on_focus_changed)
        )
        self._focused = self._host.focused_region()
        self._enabled = True

        self._tile_existing_regions()

    def disable(self) -> None:
        """Desconecta todas las suscripciones y olvida los arboles."""
        for handler_id in self._signals:
            self._host.disconnect(handler_id)
        self._signals.clear()

        for region in list(self._region_signals):
            self._disconnect_region(region)

        self._trees.clear()
        self._nodes.clear()
        self._focused = None
        self._applying = False

        if self._enabled:
            log.info("TilingManager disable")
        self._enabled = False

    # ------------------------------------------------------------------
    # Notificaciones del host
    # ------------------------------------------------------------------
    def _on_focus_changed(self, region: Optional[Region]) -> None:
        self._focused = region
        log.debug("FOCUS -> %s", region)

    def _on_region_created(self, region: Region) -> None:
        if region in self._nodes or region in self._region_signals:
            return

        if not self._host.should_tile(region):
            log.debug("No se tilea: %s", region)
            return

        # Capturar el foco ANTES de que la ventana nueva lo tome
        target = self._focused
        log.info("NEW %s | objetivo=%s", region, target)

        def _on_shown(_shown: Optional[Region]) -> None:
            self._disconnect_region(region, HostEvent.REGION_SHOWN)
            self.insert(region, target)

        self._connect_region(region, HostEvent.REGION_SHOWN, _on_shown)
        self._connect_region(
            region, HostEvent.REGION_UNMANAGED, self._on_region_unmanaged
        )

    def _on_region_unmanaged(self, region: Region) -> None:
        self.remove(region)

    def _on_geometry_changed(self, region: Region) -> None:
        """
        Corrige ventanas que se mueven solas.

        Compara la geometria real con la esperada (rectangulo del nodo
        menos el gap) y, si algun campo se aleja mas que la tolerancia,
        vuelve a aplicar la esperada.
        """
        if self._applying:
            return

        node = self._nodes.get(region)
        if node is None or node.rect is None:
            return

        # Minimizada / oculta: no se corrige hasta que vuelva a estar lista
        actual = self._ready_frame(region)
        if actual is None:
            return

        expected = node.rect.pad(self._settings.gap_size)
        if not actual.deviates_from(expected, self._settings.drift_tolerance):
            return

        log.info(
            "DRIFT %s se movio sola: esperado=%s actual=%s",
            region,
            expected,
            actual,
        )
        self._send_geometry(region, node.rect)

    # ------------------------------------------------------------------
    # Insercion
    # ------------------------------------------------------------------
    def insert(self, region: Region, target: Optional[Region] = None) -> bool:
        """
        Inserta *region* en el arbol de su workspace y retilea.

        Args:
            region: Ventana a insertar.
            target: Ventana junto a la que insertar (normalmente la que
                    tenia el foco). Si no esta tileada en el mismo
                    workspace se usa la ultima hoja del arbol.

        Returns:
            True si se inserto, False si ya estaba o no tiene workspace.
        """
        if region in self._nodes:
            log.debug("Region ya tileada: %s", region)
            return False

        workspace = self._host.workspace_of(region)
        if workspace is None:
            log.debug("Region sin workspace: %s", region)
            return False

        self._insert_node(region, workspace, target)
        self.retile(workspace)
        return True

    def _insert_node(
        self,
        region: Region,
        workspace: Hashable,
        target: Optional[Region],
    ) -> TreeNode:
        """Crea la hoja de *region* y la cuelga del arbol (sin aplicar)."""
        leaf = TreeNode.leaf(region)
        self._nodes[region] = leaf
        self._connect_region(
            region, HostEvent.GEOMETRY_CHANGED, self._on_geometry_changed
        )
        self._connect_region(
            region, HostEvent.REGION_UNMANAGED, self._on_region_unmanaged
        )

        root = self._trees.get(workspace)
        if root is None:
            self._trees[workspace] = leaf
            log.info("TILE ADD [ws %s] %s (raiz)", workspace, region)
            return leaf

        target_node = self._pick_target(root, target)
        axis = split_axis_for(target_node.rect)
        container = TreeNode.container(axis, self._settings.split_ratio)

        if target_node.parent is not None:
            target_node.replace_with(container)
        else:
            self._trees[workspace] = container
        container.set_children(target_node, leaf)

        log.info(
            "TILE ADD [ws %s] %s | split %s de %s",
            workspace,
            region,
            axis.value,
            target_node.region,
        )
        return leaf

    def _pick_target(
        self, root: TreeNode, target: Optional[Region]
    ) -> TreeNode:
        """Hoja a dividir: la de *target* si esta en este arbol, o la ultima."""
        if target is not None:
            node = self._nodes.get(target)
            if node is not None and node.root() is root:
                return node
        return root.leaves()[-1]

    # ------------------------------------------------------------------
    # Eliminacion
    # ------------------------------------------------------------------
    def remove(self, region: Region) -> bool:
        """
        Quita *region* del arbol y retilea su workspace.

        La hermana de la hoja ocupa el lugar del contenedor padre, que se
        descarta. Si era la unica ventana del workspace, el arbol se borra.

        Returns:
            True si la region estaba tileada.
        """
        # Antes de mirar el indice: una region que aun espera "shown" no
        # tiene hoja pero si suscripciones.
        self._disconnect_region(region)
        if self._focused is not None and self._focused == region:
            self._focused = None

        node = self._nodes.pop(region, None)
        if node is None:
            log.debug("Region no tileada, nada que quitar: %s", region)
            return False

        workspace = self._find_workspace(node)
        if workspace is None:
            log.warning("Region sin arbol, solo se quita del indice: %s", region)
            return True

        parent = node.parent
        if parent is None:
            del self._trees[workspace]
            log.info("TILE REMOVE [ws %s] %s (workspace vacio)", workspace, region)
            return True

        sibling = node.sibling()
        if sibling is None:
            log.error(
                "Contenedor sin hermana para %s en ws %s, reparando arbol",
                region,
                workspace,
            )
            if parent.parent is not None:
                parent.detach()
            else:
                del self._trees[workspace]
            node.parent = None
            self.retile(workspace)
            return True

        if parent.parent is not None:
            parent.replace_with(sibling)
        else:
            self._trees[workspace] = sibling
            sibling.parent = None
        node.parent = None

        log.info("TILE REMOVE [ws %s] %s", workspace, region)
        self.retile(workspace)
        return True

    def _find_workspace(self, node: TreeNode) -> Optional[Hashable]:
        root = node.root()
        for workspace, tree_root in self._trees.items():
            if tree_root is root:
                return workspace
        return None

    # ------------------------------------------------------------------
    # Retile: calcula y aplica posiciones
    # ------------------------------------------------------------------
    def retile(self, workspace: Hashable) -> None:
        """Recalcula la geometria de *workspace* y la aplica."""
        root = self._trees.get(workspace)
        if root is None:
            log.debug("retile() ws %s sin ventanas", workspace)
            return
        if not self._calculate(workspace):
            return
        self._apply_geometries(root)

    def retile_all(self) -> None:
        for workspace in list(self._trees):
            self.retile(workspace)

    def _calculate(self, workspace: Hashable) -> bool:
        root = self._trees.get(workspace)
        if root is None:
            return False
        area = self._host.work_area(workspace)
        if area is None:
            log.warning("ws %s sin area de trabajo, no se retilea", workspace)
            return False
        calculate_geometry(root, area)
        return True

    def _apply_geometries(self, root: TreeNode) -> None:
        applied = 0
        skipped = 0
        with self._applying_geometry():
            for leaf in root.iter_leaves():
                if self._apply_leaf(leaf):
                    applied += 1
                else:
                    skipped += 1
        log.debug(
            "Geometria aplicada: %d ventanas | %d omitidas | area=%s",
            applied,
            skipped,
            root.rect,
        )

    def _apply_leaf(self, leaf: TreeNode) -> bool:
        if leaf.rect is None:
            return False
        if self._ready_frame(leaf.region) is None:
            return False
        return self._send_geometry(leaf.region, leaf.rect)

    def _ready_frame(self, region: Region) -> Optional[Rect]:
        """Marco actual de *region*, o None si no esta lista para moverla."""
        try:
            if not self._host.is_ready(region):
                log.debug("Region no lista: %s", region)
                return None
            frame = self._host.frame_rect(region)
        except Exception:
            log.exception("Error al consultar %s", region)
            return None

        if frame is None or frame.is_empty:
            log.debug("Region sin marco valido: %s", region)
            return None
        return frame

    def _send_geometry(self, region: Region, rect: Rect) -> bool:
        """Des-maximiza y mueve *region* a *rect* menos el gap."""
        target = rect.pad(self._settings.gap_size)

        with self._applying_geometry():
            try:
                self._host.unmaximize(region)
            except Exception:
                log.debug("unmaximize fallo para %s", region, exc_info=True)

            try:
                self._host.move_resize(region, target)
            except Exception:
                log.exception("Error al mover %s -> %s", region, target)
                return False

        log.debug("TILE APPLY %s -> %s", region, target)
        return True

    @contextlib.contextmanager
    def _applying_geometry(self) -> Iterator[None]:
        previous = self._applying
        self._applying = True
        try:
            yield
        finally:
            self._applying = previous

    # ------------------------------------------------------------------
    # Arranque: ventanas ya abiertas
    # ------------------------------------------------------------------
    def _tile_existing_regions(self) -> None:
        workspace = self._host.active_workspace()
        regions = self._host.list_regions(workspace)
        log.info("ws %s: %d ventanas existentes", workspace, len(regions))

        added = 0
        for region in regions:
            if region in self._nodes:
                continue
            try:
                if not self._host.should_tile(region):
                    continue
                if not self._host.is_ready(region):
                    log.debug("Omitida (no lista): %s", region)
                    continue
                frame = self._host.frame_rect(region)
            except Exception:
                log.exception("Error al revisar %s", region)
                continue

            if frame is None or frame.is_empty:
                log.debug("Omitida (marco invalido): %s", region)
                continue

            self._insert_node(region, workspace, None)
            # Recalcular para que el siguiente split vea formas reales
            self._calculate(workspace)
            added += 1

        if added:
            self.retile(workspace)
        log.info("ws %s: %d ventanas tileadas al arrancar", workspace, added)

    # ------------------------------------------------------------------
    # Suscripciones por region
    # ------------------------------------------------------------------
    def _connect_region(
        self, region: Region, event: HostEvent, callback: HostCallback
    ) -> None:
        signals = self._region_signals.setdefault(region, {})
        if event in signals:
            return
        signals[event] = self._host.connect(event, callback, region)

    def _disconnect_region(
        self, region: Region, event: HostEvent | None = None
    ) -> None:
        signals = self._region_signals.get(region)
        if signals is None:
            return

        if event is not None:
            handler_id = signals.pop(event, None)
            if handler_id is not None:
                self._host.disconnect(handler_id)
            if signals:
                return
        else:
            for handler_id in signals.values():
                self._host.disconnect(handler_id)

        del self._region_signals[region]

    # ------------------------------------------------------------------
    # Informacion / debug
    # ------------------------------------------------------------------
    def check_invariants(self) -> None:
        """
        Verifica cada arbol y la correspondencia 1:1 indice <-> hojas.

        Raises:
            TreeInvariantError: Si algo no cuadra.
        """
        leaf_count = 0
        for workspace, root in self._trees.items():
            validate_tree(root)
            for leaf in root.iter_leaves():
                leaf_count += 1
                if self._nodes.get(leaf.region) is not leaf:
                    raise TreeInvariantError(
                        f"hoja de ws {workspace} fuera del indice: {leaf!r}"
                    )
        if leaf_count != len(self._nodes):
            raise TreeInvariantError(
                f"indice con {len(self._nodes)} regiones para {leaf_count} hojas"
            )

    def dump_state(self) -> str:
        lines = [
            "=== TilingManager ===",
            f"    Enabled: {self._enabled}",
            f"    Gap: {self._settings.gap_size}",
            f"    Regiones: {len(self._nodes)}",
            f"    Foco: {self._focused}",
        ]
        for workspace, root in self._trees.items():
            lines.append(f"--- Workspace {workspace} ---")
            lines.append(root.dump(indent=1))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"TilingManager("
            f"enabled={self._enabled}, "
            f"workspaces={len(self._trees)}, "
            f"regions={len(self._nodes)})"
        )

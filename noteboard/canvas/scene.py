"""Canvas engine backed by a ``QGraphicsScene``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, cast

from PySide6.QtCore import QEasingCurve, QPointF, QVariantAnimation
from PySide6.QtGui import QBrush, QColor, QFont, QPen
from PySide6.QtWidgets import (
    QGraphicsItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSceneHoverEvent,
    QGraphicsSceneMouseEvent,
    QGraphicsSimpleTextItem,
    QGraphicsView,
)

from .engine import (
    Camera,
    CanvasEngine,
    Origin,
    PointerEvent,
    ShapeRecord,
    StoreChange,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

#: Duration of a programmatic move, in milliseconds.
MOVE_ANIMATION_MS: Final[int] = 250


class ShapeItem(QGraphicsRectItem):
    """
    The scene item drawing one shape.

    Note shapes are movable and selectable; headers are plain text.

    Args:
        canvas: The canvas that owns the item
        record: The shape to draw

    """

    #: Background of a note.
    NOTE_COLOR: Final[str] = "#1e1e1e"
    #: Border of a note.
    BORDER_COLOR: Final[str] = "#3a3a3a"
    #: Border of the current merge target.
    HIGHLIGHT_COLOR: Final[str] = "#ffd43b"
    #: Header text color for today.
    TODAY_COLOR: Final[str] = "#2a4"
    #: Header text color for other days.
    HEADER_COLOR: Final[str] = "#888888"
    #: Opacity of a note while the backend works on it.
    BUSY_OPACITY: Final[float] = 0.5

    def __init__(self, canvas: SceneCanvas, record: ShapeRecord) -> None:
        super().__init__(0, 0, record.w, record.h)
        self.canvas = canvas
        self.shape_id = record.id
        if record.is_note:
            self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
            self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
            self.setAcceptHoverEvents(True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemSendsGeometryChanges, True)
        self.label = QGraphicsSimpleTextItem(self)
        self.label.setPos(8, 6)
        self.apply(record)

    def apply(self, record: ShapeRecord) -> None:
        """
        Make the item match ``record``.

        Args:
            record: The shape to show

        """
        self.setRect(0, 0, record.w, record.h)
        self.setPos(record.x, record.y)
        self.setZValue(record.z)
        props = record.props
        if record.is_note:
            if props.get("highlighted"):
                self.setPen(QPen(QColor(self.HIGHLIGHT_COLOR), 3))
            else:
                self.setPen(QPen(QColor(self.BORDER_COLOR), 1))
            self.setBrush(QBrush(QColor(self.NOTE_COLOR)))
            self.setOpacity(self.BUSY_OPACITY if props.get("busy") else 1.0)
            self.label.setText(self.note_text(props))
            self.label.setBrush(QBrush(QColor("#eeeeee")))
        else:
            self.setPen(QPen(QColor(0, 0, 0, 0)))
            self.setBrush(QBrush(QColor(0, 0, 0, 0)))
            self.label.setText(props.get("label", ""))
            self.label.setFont(QFont("Helvetica", 16, QFont.Weight.Bold))
            color = self.TODAY_COLOR if props.get("is_today") else self.HEADER_COLOR
            self.label.setBrush(QBrush(QColor(color)))

    @staticmethod
    def note_text(props: dict[str, Any]) -> str:
        """Text drawn on a note shape."""
        lines = [props.get("title", "")]
        meta = " ".join(
            part for part in (props.get("time", ""), props.get("duration", "")) if part
        )
        if meta:
            lines.append(meta)
        content = props.get("content", "")
        if content:
            lines.extend(["", content[:120]])
        return "\n".join(lines)

    def itemChange(  # noqa: N802
        self, change: QGraphicsItem.GraphicsItemChange, value: Any
    ) -> Any:
        """
        Report position changes to the canvas.
        """
        if change == QGraphicsItem.GraphicsItemChange.ItemPositionHasChanged:
            self.canvas.item_moved(self)
        return super().itemChange(change, value)

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:  # noqa: N802
        self.canvas.stop_animation(self.shape_id)
        super().mousePressEvent(event)

    def hoverEnterEvent(self, event: QGraphicsSceneHoverEvent) -> None:  # noqa: N802
        self.canvas.hovered = self.shape_id
        super().hoverEnterEvent(event)

    def hoverLeaveEvent(self, event: QGraphicsSceneHoverEvent) -> None:  # noqa: N802
        if self.canvas.hovered == self.shape_id:
            self.canvas.hovered = None
        super().hoverLeaveEvent(event)


class BoardScene(QGraphicsScene):
    """
    ``QGraphicsScene`` that forwards pointer events to its canvas.

    Args:
        canvas: The canvas to report to

    """

    def __init__(self, canvas: SceneCanvas) -> None:
        super().__init__()
        self.canvas = canvas

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:  # noqa: N802
        super().mousePressEvent(event)
        self.canvas.pointer_event("down", event.scenePos())

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent) -> None:  # noqa: N802
        super().mouseMoveEvent(event)
        self.canvas.pointer_event("move", event.scenePos())

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent) -> None:  # noqa: N802
        super().mouseReleaseEvent(event)
        self.canvas.pointer_event("up", event.scenePos())


class SceneCanvas(CanvasEngine):
    """
    :class:`~noteboard.canvas.engine.CanvasEngine` on a ``QGraphicsScene``.

    The canvas keeps the authoritative :class:`ShapeRecord` for every shape;
    the scene items mirror them.  Items moved by the user are reported with
    :attr:`Origin.USER`; writes through :meth:`update_shape` carry the origin
    the caller passes.

    Keyword Args:
        view: The view showing the scene, if any

    """

    def __init__(self, view: QGraphicsView | None = None) -> None:
        super().__init__()
        #: The scene.
        self.scene = BoardScene(self)
        #: Shape ID -> record, in creation order.
        self._records: dict[str, ShapeRecord] = {}
        #: Shape ID -> scene item.
        self._items: dict[str, ShapeItem] = {}
        #: Shape under the pointer.
        self.hovered: str | None = None
        #: Last pointer position.
        self._pointer = QPointF(0, 0)
        #: Camera used when no view is attached.
        self._camera = Camera()
        #: ID of the shape whose item is being synced from its record.
        self._applying: str | None = None
        #: Shape ID -> running move animation.
        self._animations: dict[str, QVariantAnimation] = {}
        #: The view, if any.
        self.view: QGraphicsView | None = None
        if view is not None:
            self.attach_view(view)

    def attach_view(self, view: QGraphicsView) -> None:
        """
        Show the scene in ``view``.

        Args:
            view: The view

        """
        self.view = view
        view.setScene(self.scene)
        self.set_camera(self._camera)

    def item(self, shape_id: str) -> ShapeItem | None:
        """The scene item of a shape."""
        return self._items.get(shape_id)

    # -------------------------------------------------------------------------
    # Shape store
    # -------------------------------------------------------------------------

    def create_shape(
        self, shape: ShapeRecord, origin: Origin = Origin.SYSTEM
    ) -> ShapeRecord:
        if shape.id in self._records:
            msg = f"Shape {shape.id} already exists"
            raise ValueError(msg)
        self._records[shape.id] = shape
        self._applying = shape.id
        try:
            item = ShapeItem(self, shape)
            self.scene.addItem(item)
        finally:
            self._applying = None
        self._items[shape.id] = item
        self.emit_store(StoreChange(origin=origin, added=(shape,)))
        return shape

    def update_shape(
        self,
        shape_id: str,
        *,
        x: float | None = None,
        y: float | None = None,
        z: float | None = None,
        props: dict[str, Any] | None = None,
        origin: Origin = Origin.SYSTEM,
    ) -> ShapeRecord | None:
        self.stop_animation(shape_id)
        before = self._records.get(shape_id)
        if before is None:
            return None
        changes: dict[str, Any] = {
            name: value
            for name, value in (("x", x), ("y", y), ("z", z), ("props", props))
            if value is not None
        }
        after = before.evolve(**changes)
        self._records[shape_id] = after
        self._applying = shape_id
        try:
            self._items[shape_id].apply(after)
        finally:
            self._applying = None
        self.emit_store(StoreChange(origin=origin, updated=((before, after),)))
        return after

    def delete_shapes(
        self, shape_ids: Iterable[str], origin: Origin = Origin.SYSTEM
    ) -> None:
        removed = []
        for shape_id in list(shape_ids):
            self.stop_animation(shape_id)
            record = self._records.pop(shape_id, None)
            item = self._items.pop(shape_id, None)
            if item is not None:
                self.scene.removeItem(item)
            if self.hovered == shape_id:
                self.hovered = None
            if record is not None:
                removed.append(record)
        if removed:
            self.emit_store(StoreChange(origin=origin, removed=tuple(removed)))

    def get_shape(self, shape_id: str) -> ShapeRecord | None:
        return self._records.get(shape_id)

    def shapes(self) -> list[ShapeRecord]:
        return list(self._records.values())

    def animate_shape(
        self,
        shape_id: str,
        x: float,
        y: float,
        props: dict[str, Any] | None = None,
    ) -> ShapeRecord | None:
        item = self._items.get(shape_id)
        if item is None:
            return None
        start = item.pos()
        record = self.update_shape(shape_id, x=x, y=y, props=props)
        if record is None or start == item.pos():
            return record
        animation = QVariantAnimation(self.scene)
        animation.setStartValue(start)
        animation.setEndValue(QPointF(x, y))
        animation.setDuration(MOVE_ANIMATION_MS)
        animation.setEasingCurve(QEasingCurve.Type.OutCubic)
        animation.valueChanged.connect(
            lambda pos: self._move_item(shape_id, pos)
        )
        animation.finished.connect(lambda: self._finish_animation(shape_id))
        self._animations[shape_id] = animation
        self._move_item(shape_id, start)
        animation.start()
        return record

    def stop_animation(self, shape_id: str) -> None:
        """
        Stop a running move of a shape and draw it where its record says.

        Args:
            shape_id: The shape

        """
        animation = self._animations.pop(shape_id, None)
        if animation is None:
            return
        animation.stop()
        animation.deleteLater()
        record = self._records.get(shape_id)
        if record is not None:
            self._move_item(shape_id, QPointF(record.x, record.y))

    def _finish_animation(self, shape_id: str) -> None:
        animation = self._animations.pop(shape_id, None)
        if animation is not None:
            animation.deleteLater()

    def _move_item(self, shape_id: str, pos: QPointF) -> None:
        item = self._items.get(shape_id)
        if item is None:
            return
        self._applying = shape_id
        try:
            item.setPos(pos)
        finally:
            self._applying = None

    def item_moved(self, item: ShapeItem) -> None:
        """
        Record a move of a scene item.

        Moves made while an item is being synced from its record are the
        canvas's own and already recorded; any other move comes from the
        user dragging the item.

        Args:
            item: The item that moved

        """
        if self._applying == item.shape_id:
            return
        before = self._records.get(item.shape_id)
        if before is None:
            return
        pos = item.pos()
        if pos.x() == before.x and pos.y() == before.y:
            return
        after = before.evolve(x=pos.x(), y=pos.y())
        self._records[item.shape_id] = after
        self.emit_store(StoreChange(origin=Origin.USER, updated=((before, after),)))

    # -------------------------------------------------------------------------
    # Viewport and input
    # -------------------------------------------------------------------------

    def camera(self) -> Camera:
        if self.view is None:
            return self._camera
        center = self.view.mapToScene(self.view.viewport().rect().center())
        return Camera(center.x(), center.y(), self.view.transform().m11())

    def set_camera(self, camera: Camera) -> None:
        self._camera = camera
        if self.view is not None:
            self.view.resetTransform()
            self.view.scale(camera.z, camera.z)
            self.view.centerOn(camera.x, camera.y)

    def selected_shape_ids(self) -> list[str]:
        return [
            cast("ShapeItem", item).shape_id
            for item in self.scene.selectedItems()
            if isinstance(item, ShapeItem)
        ]

    def hovered_shape_id(self) -> str | None:
        return self.hovered

    def pointer_position(self) -> tuple[float, float]:
        return self._pointer.x(), self._pointer.y()

    def pointer_event(self, kind: str, pos: QPointF) -> None:
        """
        Report a pointer event from the scene.

        Args:
            kind: ``down``, ``move`` or ``up``
            pos: Scene position

        """
        self._pointer = QPointF(pos)
        event = PointerEvent(kind, pos.x(), pos.y())  # type: ignore[arg-type]
        self.emit_pointer(event)

"""
The canvas engine as the board sees it.

The board never draws anything itself: it creates, moves and deletes shapes
through a :class:`CanvasEngine` and listens to the engine's change feeds.
Every change carries an :class:`Origin` so listeners can tell a user's drag
from the board's own writes.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


class Origin(StrEnum):
    """Who caused a change on the canvas."""

    #: The user, through the pointer or keyboard.
    USER = "user"
    #: The board itself (layout, reconciliation, highlighting).
    SYSTEM = "system"


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle."""

    x: float
    y: float
    w: float
    h: float

    @property
    def area(self) -> float:
        return max(0.0, self.w) * max(0.0, self.h)

    def intersection(self, other: Rect) -> Rect | None:
        """
        The overlapping part of two rectangles, or ``None`` when they do not
        overlap with positive width and height.
        """
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.x + self.w, other.x + other.w)
        bottom = min(self.y + self.h, other.y + other.h)
        if right <= left or bottom <= top:
            return None
        return Rect(left, top, right - left, bottom - top)


@dataclass(frozen=True)
class ShapeRecord:
    """
    A snapshot of one shape on the canvas.

    Note shapes carry a denormalized copy of the note in :attr:`props`
    (``title``, ``content``, ``time``, ``duration``, ``date``, ``tags``,
    ``note_type``, ``manually_positioned``) plus the board's visual flags
    (``busy``, ``highlighted``).
    """

    #: The shape ID.
    id: str
    #: ``note`` for note shapes, ``header`` for date headings.
    kind: Literal["note", "header"]
    #: Canvas x.
    x: float
    #: Canvas y.
    y: float
    #: Width.
    w: float
    #: Height.
    h: float
    #: Stacking order; higher is drawn on top.
    z: float = 0.0
    #: The note shown by the shape (note shapes only).
    note_id: str | None = None
    #: Shape properties.
    props: dict[str, Any] = field(default_factory=dict)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)

    @property
    def is_note(self) -> bool:
        return self.kind == "note"

    def evolve(self, **changes: Any) -> ShapeRecord:
        """
        Copy the record with some fields changed.  ``props`` is merged into
        the current properties instead of replacing them.
        """
        props = changes.pop("props", None)
        if props is not None:
            changes["props"] = {**self.props, **props}
        return replace(self, **changes)


@dataclass(frozen=True)
class Camera:
    """The viewport: the canvas point at its center and the zoom factor."""

    x: float = 0.0
    y: float = 0.0
    z: float = 1.0


@dataclass(frozen=True)
class StoreChange:
    """One batch of shape changes."""

    #: Who caused the change.
    origin: Origin
    #: Shapes created.
    added: tuple[ShapeRecord, ...] = ()
    #: ``(before, after)`` snapshots of changed shapes.
    updated: tuple[tuple[ShapeRecord, ShapeRecord], ...] = ()
    #: Shapes deleted.
    removed: tuple[ShapeRecord, ...] = ()


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in canvas coordinates."""

    kind: Literal["down", "move", "up"]
    x: float
    y: float


def new_shape_id() -> str:
    """A fresh, unique shape ID."""
    return f"shape:{uuid.uuid4().hex}"


class CanvasEngine(ABC):
    """
    Base class for canvas engines.

    Subclasses implement the shape store and viewport; listener bookkeeping
    is shared here.
    """

    def __init__(self) -> None:
        #: Store change listeners.
        self._store_listeners: list[Callable[[StoreChange], None]] = []
        #: Pointer event listeners.
        self._pointer_listeners: list[Callable[[PointerEvent], None]] = []

    # -------------------------------------------------------------------------
    # Shape store
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_shape(
        self, shape: ShapeRecord, origin: Origin = Origin.SYSTEM
    ) -> ShapeRecord:
        """
        Create a shape.

        Args:
            shape: The shape to create

        Keyword Args:
            origin: Who is creating it

        Returns:
            The stored shape

        """

    @abstractmethod
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
        """
        Change a shape.  ``props`` is merged into the shape's properties.

        Returns:
            The updated shape, or ``None`` if there is no such shape

        """

    def animate_shape(
        self,
        shape_id: str,
        x: float,
        y: float,
        props: dict[str, Any] | None = None,
    ) -> ShapeRecord | None:
        """
        Move a shape programmatically, easing the drawn position where the
        engine can.

        The stored shape changes at once, like :meth:`update_shape`; only the
        drawing lags behind.  This default applies the move instantly.

        Returns:
            The updated shape, or ``None`` if there is no such shape

        """
        return self.update_shape(shape_id, x=x, y=y, props=props)

    @abstractmethod
    def delete_shapes(
        self, shape_ids: Iterable[str], origin: Origin = Origin.SYSTEM
    ) -> None:
        """Delete shapes; unknown IDs are ignored."""

    @abstractmethod
    def get_shape(self, shape_id: str) -> ShapeRecord | None:
        """The current snapshot of a shape."""

    @abstractmethod
    def shapes(self) -> list[ShapeRecord]:
        """Every shape, in creation order."""

    # -------------------------------------------------------------------------
    # Viewport and input
    # -------------------------------------------------------------------------

    @abstractmethod
    def camera(self) -> Camera:
        """The current camera."""

    @abstractmethod
    def set_camera(self, camera: Camera) -> None:
        """Move the camera."""

    def center_on_point(self, x: float, y: float) -> None:
        """Center the viewport on a canvas point, keeping the zoom."""
        self.set_camera(Camera(x, y, self.camera().z))

    @abstractmethod
    def selected_shape_ids(self) -> list[str]:
        """IDs of the selected shapes."""

    @abstractmethod
    def hovered_shape_id(self) -> str | None:
        """ID of the shape under the pointer, if any."""

    @abstractmethod
    def pointer_position(self) -> tuple[float, float]:
        """Last known pointer position in canvas coordinates."""

    # -------------------------------------------------------------------------
    # Feeds
    # -------------------------------------------------------------------------

    def subscribe_store(
        self, listener: Callable[[StoreChange], None]
    ) -> Callable[[], None]:
        """
        Listen to shape changes.

        Returns:
            A callable that removes the listener

        """
        self._store_listeners.append(listener)
        return lambda: self._unsubscribe(self._store_listeners, listener)

    def subscribe_pointer(
        self, listener: Callable[[PointerEvent], None]
    ) -> Callable[[], None]:
        """
        Listen to pointer events.

        Returns:
            A callable that removes the listener

        """
        self._pointer_listeners.append(listener)
        return lambda: self._unsubscribe(self._pointer_listeners, listener)

    def emit_store(self, change: StoreChange) -> None:
        """Deliver a store change to every listener."""
        for listener in list(self._store_listeners):
            listener(change)

    def emit_pointer(self, event: PointerEvent) -> None:
        """Deliver a pointer event to every listener."""
        for listener in list(self._pointer_listeners):
            listener(event)

    @staticmethod
    def _unsubscribe(listeners: list, listener: Any) -> None:
        if listener in listeners:
            listeners.remove(listener)

"""Tests for the scene-backed canvas engine."""

import pytest
from PySide6.QtCore import QPointF
from PySide6.QtWidgets import QGraphicsView

from noteboard.canvas.engine import Camera, Origin, Rect, ShapeRecord, new_shape_id
from noteboard.canvas.scene import MOVE_ANIMATION_MS


def _note(shape_id="s1", x=0.0, y=0.0, **props):
    return ShapeRecord(shape_id, "note", x, y, 180, 150, note_id="n1", props=props)


@pytest.fixture
def changes(canvas):
    """Every store change the canvas emits."""
    received = []
    canvas.subscribe_store(received.append)
    return received


class TestRect:
    """Test cases for Rect."""

    def test_intersection(self):
        assert Rect(0, 0, 10, 10).intersection(Rect(5, 5, 10, 10)) == Rect(5, 5, 5, 5)

    def test_no_intersection(self):
        assert Rect(0, 0, 10, 10).intersection(Rect(10, 10, 5, 5)) is None


class TestShapeRecord:
    """Test cases for ShapeRecord."""

    def test_evolve_merges_props(self):
        record = _note(title="A", busy=False)
        evolved = record.evolve(x=5, props={"busy": True})
        assert evolved.props == {"title": "A", "busy": True}
        assert evolved.x == 5
        assert record.props["busy"] is False

    def test_new_shape_id(self):
        assert new_shape_id().startswith("shape:")
        assert new_shape_id() != new_shape_id()


class TestSceneCanvas:
    """Test cases for SceneCanvas."""

    def test_create_shape(self, canvas, changes):
        canvas.create_shape(_note(x=10, y=20, title="A"))
        assert canvas.get_shape("s1").x == 10
        assert canvas.item("s1").pos() == QPointF(10, 20)
        assert changes[-1].added[0].id == "s1"
        assert changes[-1].origin is Origin.SYSTEM

    def test_duplicate_shape(self, canvas):
        canvas.create_shape(_note())
        with pytest.raises(ValueError, match="already exists"):
            canvas.create_shape(_note())

    def test_update_shape(self, canvas, changes):
        canvas.create_shape(_note())
        canvas.update_shape("s1", x=30, props={"busy": True})
        before, after = changes[-1].updated[0]
        assert (before.x, after.x) == (0, 30)
        assert changes[-1].origin is Origin.SYSTEM
        assert canvas.item("s1").pos().x() == 30
        assert canvas.item("s1").opacity() == 0.5

    def test_update_missing_shape(self, canvas):
        assert canvas.update_shape("nope", x=1) is None

    def test_program_moves_are_not_user_moves(self, canvas, changes):
        canvas.create_shape(_note())
        canvas.update_shape("s1", x=50, y=60)
        assert [change.origin for change in changes] == [Origin.SYSTEM, Origin.SYSTEM]

    def test_item_move_is_user_change(self, canvas, changes):
        """Test that moving an item directly is reported as the user's move."""
        canvas.create_shape(_note())
        canvas.item("s1").setPos(15, 25)
        change = changes[-1]
        assert change.origin is Origin.USER
        assert change.updated[0][1].x == 15
        assert canvas.get_shape("s1").y == 25

    def test_animate_shape(self, canvas, changes, qtbot):
        """Test that the record moves at once and the item eases after it."""
        canvas.create_shape(_note())
        record = canvas.animate_shape("s1", 230, 340, props={"title": "Moved"})
        assert (record.x, record.y) == (230, 340)
        assert canvas.get_shape("s1").props["title"] == "Moved"
        item = canvas.item("s1")
        assert item.pos() == QPointF(0, 0)
        qtbot.waitUntil(lambda: item.pos() == QPointF(230, 340), timeout=2000)
        assert [change.origin for change in changes] == [Origin.SYSTEM, Origin.SYSTEM]

    def test_write_stops_animation(self, canvas, qtbot):
        canvas.create_shape(_note())
        canvas.animate_shape("s1", 230, 340)
        canvas.update_shape("s1", y=500)
        assert canvas.item("s1").pos() == QPointF(230, 500)
        qtbot.wait(MOVE_ANIMATION_MS + 100)
        assert canvas.item("s1").pos() == QPointF(230, 500)

    def test_delete_during_animation(self, canvas, qtbot):
        canvas.create_shape(_note())
        canvas.animate_shape("s1", 230, 340)
        canvas.delete_shapes(["s1"])
        qtbot.wait(MOVE_ANIMATION_MS + 100)
        assert canvas.get_shape("s1") is None

    def test_animate_missing_shape(self, canvas):
        assert canvas.animate_shape("nope", 1, 2) is None

    def test_delete_shapes(self, canvas, changes):
        canvas.create_shape(_note())
        canvas.delete_shapes(["s1", "unknown"])
        assert canvas.get_shape("s1") is None
        assert canvas.item("s1") is None
        assert [record.id for record in changes[-1].removed] == ["s1"]
        assert canvas.shapes() == []

    def test_unsubscribe(self, canvas):
        received = []
        unsubscribe = canvas.subscribe_store(received.append)
        unsubscribe()
        canvas.create_shape(_note())
        assert received == []

    def test_pointer_events(self, canvas):
        events = []
        canvas.subscribe_pointer(events.append)
        canvas.pointer_event("up", QPointF(3, 4))
        assert (events[0].kind, events[0].x, events[0].y) == ("up", 3, 4)
        assert canvas.pointer_position() == (3, 4)

    def test_selection(self, canvas):
        canvas.create_shape(_note())
        canvas.item("s1").setSelected(True)
        assert canvas.selected_shape_ids() == ["s1"]

    def test_header_text(self, canvas):
        canvas.create_shape(
            ShapeRecord("h1", "header", 0, 50, 180, 50, props={"label": "07\nAUG"})
        )
        assert canvas.item("h1").label.text() == "07\nAUG"

    def test_camera_without_view(self, canvas):
        canvas.center_on_point(100, 200)
        assert canvas.camera() == Camera(100, 200, 1.0)

    def test_camera_with_view(self, canvas, qtbot):
        view = QGraphicsView()
        qtbot.addWidget(view)
        view.resize(400, 300)
        canvas.create_shape(_note(x=5000, y=100))
        canvas.attach_view(view)
        canvas.set_camera(Camera(5090, 200, 2.0))
        assert canvas.camera().z == 2.0

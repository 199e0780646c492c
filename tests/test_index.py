"""Tests for the shape <-> note index."""

from noteboard.board.index import ShapeIndex


class TestShapeIndex:
    """Test cases for ShapeIndex."""

    def test_put_and_get(self):
        index = ShapeIndex()
        index.put("n1", "s1")
        assert index.get("n1") == "s1"
        assert index.note_for("s1") == "n1"
        assert "n1" in index
        assert len(index) == 1

    def test_put_replaces_old_shape(self):
        """Test that a note never maps to two shapes."""
        index = ShapeIndex()
        index.put("n1", "s1")
        index.put("n1", "s2")
        assert index.get("n1") == "s2"
        assert index.note_for("s1") is None
        assert len(index) == 1

    def test_put_moves_shape_to_new_note(self):
        index = ShapeIndex()
        index.put("n1", "s1")
        index.put("n2", "s1")
        assert index.get("n1") is None
        assert index.note_for("s1") == "n2"

    def test_remove(self):
        index = ShapeIndex()
        index.put("n1", "s1")
        assert index.remove("n1") == "s1"
        assert index.remove("n1") is None
        assert index.note_for("s1") is None

    def test_clear(self):
        index = ShapeIndex()
        index.put("n1", "s1")
        index.clear()
        assert len(index) == 0
        assert index.note_for("s1") is None

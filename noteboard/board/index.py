"""Bidirectional map between note IDs and the canvas shapes showing them."""



class ShapeIndex:
    """
    Note ID <-> shape ID index.

    There is at most one shape per note: putting a new shape for a note that
    already has one replaces the old entry in both directions.
    """

    def __init__(self) -> None:
        #: Note ID -> shape ID.
        self._shapes: dict[str, str] = {}
        #: Shape ID -> note ID.
        self._notes: dict[str, str] = {}

    def put(self, note_id: str, shape_id: str) -> None:
        """
        Record that ``shape_id`` shows ``note_id``.

        Args:
            note_id: The note ID
            shape_id: The shape ID

        """
        old_shape = self._shapes.get(note_id)
        if old_shape is not None:
            self._notes.pop(old_shape, None)
        old_note = self._notes.get(shape_id)
        if old_note is not None:
            self._shapes.pop(old_note, None)
        self._shapes[note_id] = shape_id
        self._notes[shape_id] = note_id

    def get(self, note_id: str) -> str | None:
        """Shape showing ``note_id``, if any."""
        return self._shapes.get(note_id)

    def note_for(self, shape_id: str) -> str | None:
        """Note shown by ``shape_id``, if any."""
        return self._notes.get(shape_id)

    def remove(self, note_id: str) -> str | None:
        """
        Forget a note.

        Returns:
            The shape ID that showed it, if any

        """
        shape_id = self._shapes.pop(note_id, None)
        if shape_id is not None:
            self._notes.pop(shape_id, None)
        return shape_id

    def clear(self) -> None:
        """Forget everything."""
        self._shapes.clear()
        self._notes.clear()

    def __contains__(self, note_id: object) -> bool:
        return note_id in self._shapes

    def __len__(self) -> int:
        return len(self._shapes)

"""
Overlap-based merge detection.

Dropping a note mostly on top of another proposes merging the two.  The
overlap ratio is measured against the dragged note's own area, so a small
note dropped inside a large one qualifies even though it covers only a little
of the large note.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from noteboard.services.logs import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from noteboard.canvas.engine import CanvasEngine, Rect, ShapeRecord

logger = get_logger(__name__)

#: Smallest overlap ratio that proposes a merge.
MERGE_THRESHOLD: Final[float] = 0.30


def overlap_ratio(a: Rect, b: Rect) -> float:
    """
    Fraction of ``a`` covered by ``b``.

    Args:
        a: The dragged rectangle
        b: The candidate rectangle

    Returns:
        Intersection area divided by the area of ``a``; 0 when the two do not
        overlap or ``a`` has no area

    """
    if a.area <= 0:
        return 0.0
    overlap = a.intersection(b)
    if overlap is None:
        return 0.0
    return overlap.area / a.area


@dataclass(frozen=True)
class MergeCandidate:
    """A note shape the dragged note could be merged into."""

    shape_id: str
    ratio: float


class MergeDetector:
    """
    Finds the merge target of a dragged note and highlights it.

    Args:
        canvas: The canvas holding the shapes

    Keyword Args:
        threshold: Smallest overlap ratio that qualifies

    """

    def __init__(
        self, canvas: CanvasEngine, threshold: float = MERGE_THRESHOLD
    ) -> None:
        #: The canvas.
        self.canvas = canvas
        #: Smallest overlap ratio that qualifies.
        self.threshold = threshold
        #: Shape currently highlighted as the merge target.
        self.highlighted: str | None = None

    def evaluate(
        self,
        dragged: ShapeRecord,
        shapes: Iterable[ShapeRecord],
        selected_count: int = 1,
    ) -> MergeCandidate | None:
        """
        The best merge target for ``dragged``.

        Only single-shape drags merge.  Headers and the dragged shape itself
        are never candidates.  The highest ratio wins; on a tie the shape
        that comes first in ``shapes`` is kept.

        Args:
            dragged: The dragged shape
            shapes: Every shape on the canvas

        Keyword Args:
            selected_count: How many shapes are being dragged

        Returns:
            The winning candidate, or ``None``

        """
        if selected_count != 1:
            return None
        best: MergeCandidate | None = None
        for shape in shapes:
            if not shape.is_note or shape.id == dragged.id:
                continue
            ratio = overlap_ratio(dragged.rect, shape.rect)
            if ratio < self.threshold:
                continue
            if best is None or ratio > best.ratio:
                best = MergeCandidate(shape.id, ratio)
        return best

    def track(
        self, dragged: ShapeRecord, selected_count: int = 1
    ) -> MergeCandidate | None:
        """
        Re-evaluate during a drag and move the highlight to the current best
        candidate (or drop it when there is none).
        """
        candidate = self.evaluate(dragged, self.canvas.shapes(), selected_count)
        self._highlight(candidate.shape_id if candidate else None)
        return candidate

    def clear(self) -> None:
        """Remove the highlight."""
        self._highlight(None)

    def _highlight(self, shape_id: str | None) -> None:
        if shape_id == self.highlighted:
            return
        if self.highlighted is not None:
            self.canvas.update_shape(self.highlighted, props={"highlighted": False})
        if shape_id is not None:
            self.canvas.update_shape(shape_id, props={"highlighted": True})
            logger.debug("merge.candidate", shape_id=shape_id)
        self.highlighted = shape_id

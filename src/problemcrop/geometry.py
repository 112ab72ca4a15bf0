"""Bounding geometry for segmented problems."""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass
from typing import Sequence

from .models import AnnotationRef, PageBox, Position, Problem, Rect, StepResult, bounding_box, rect_to_quad
from .port import DocumentPort, HostError

MARKER_COLOR = (1.0, 1.0, 0.0)


def correct_rotation(bbox: Sequence[float], rotation: int, width: float, height: float) -> Rect:
    """Map a visual-space ``bbox`` back to unrotated page space.

    ``width`` and ``height`` are the page box dimensions. Rotations other than
    0, 90, 180 and 270 degrees are treated as 0.
    """

    x_min, y_min, x_max, y_max = bbox
    if rotation == 90:
        return [y_min, width - x_max, y_max, width - x_min]
    if rotation == 180:
        return [width - x_max, height - y_max, width - x_min, height - y_min]
    if rotation == 270:
        return [height - y_max, x_min, height - y_min, x_max]
    return [x_min, y_min, x_max, y_max]


@dataclass(slots=True)
class Resolution:
    """Geometry computed for one problem."""

    problem: Problem
    bbox: Rect | None
    rect: Rect | None
    page_box: PageBox
    annotation: AnnotationRef | None
    results: list[StepResult]

    @property
    def ok(self) -> bool:
        return self.rect is not None


class GeometryResolver:
    """Resolve a problem's word quads into a single rotation-corrected rect.

    Every successful resolution places a temporary marker annotation over the
    rect on the source page. The handles are collected in ``annotations`` so
    the cleanup pass can remove them later.
    """

    def __init__(self, document: DocumentPort, *, page_box: str = "CropBox", marker_kind: str = "Square") -> None:
        self.document = document
        self.page_box = page_box
        self.marker_kind = marker_kind
        self.annotations: list[AnnotationRef] = []
        self._sequence = itertools.count(1)

    def collect_quads(self, problem: Problem) -> list[list[float]]:
        quads: list[list[float]] = []
        for index in problem.word_indices:
            for quad in self.document.word_quads(problem.page, index) or ():
                quads.append(list(quad))
        return quads

    def resolve(self, problem: Problem) -> Resolution:
        box = self.document.page_box(problem.page, self.page_box)
        quads = self.collect_quads(problem)
        if not quads:
            result = StepResult.skipped(
                "geometry",
                "geometry_unresolvable",
                "no quads for any word",
                problem=problem.number,
                page=problem.page,
            )
            return Resolution(problem, None, None, box, None, [result])

        bbox = bounding_box(quads)
        rotation = self.document.page_rotation(problem.page)
        rect = correct_rotation(bbox, rotation, box.width, box.height)

        problem.rect = rect
        problem.quad = rect_to_quad(rect)
        # reading order follows what the reader sees, so use the visual box
        problem.position = Position(x=bbox[0], y=bbox[1])

        results = [StepResult.success("geometry", problem=problem.number, page=problem.page)]
        annotation = None
        try:
            annotation = self._annotate(problem, rect)
        except HostError as exc:
            results.append(
                StepResult.skipped(
                    "annotate",
                    "annotation_create_failed",
                    str(exc),
                    problem=problem.number,
                    page=problem.page,
                )
            )
        else:
            self.annotations.append(annotation)
        return Resolution(problem, bbox, rect, box, annotation, results)

    def marker_name(self, problem: Problem) -> str:
        return f"problem-{problem.number}-{time.time_ns()}-{next(self._sequence)}"

    def _annotate(self, problem: Problem, rect: Rect) -> AnnotationRef:
        return self.document.add_annotation(
            problem.page,
            rect,
            self.marker_kind,
            f"Problem {problem.number}: {problem.text}",
            name=self.marker_name(problem),
            style={"color": MARKER_COLOR},
        )


__all__ = ["GeometryResolver", "MARKER_COLOR", "Resolution", "correct_rotation"]

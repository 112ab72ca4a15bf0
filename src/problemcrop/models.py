"""Domain models shared by the segmentation, geometry and materialization stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Sequence

Quad = list[float]
Rect = list[float]

SkipReason = Literal[
    "segmentation_empty",
    "geometry_unresolvable",
    "annotation_create_failed",
    "malformed_rect",
    "annotation_remove_failed",
]


@dataclass(frozen=True, slots=True)
class WordRecord:
    """A single word of a page's text stream."""

    word: str
    line_index: int
    original_index: int


@dataclass(frozen=True, slots=True)
class ProblemStart:
    """A marker word such as ``"12."`` that opens a new problem."""

    index: int
    number: str
    line_index: int


@dataclass(slots=True)
class Position:
    x: float
    y: float


@dataclass(slots=True)
class Problem:
    """A numbered problem found on a page.

    A problem is *segmented* once ``text``/``lines``/``word_indices`` are known
    and *resolved* once geometry has populated ``rect``, ``quad`` and
    ``position``.
    """

    page: int
    number: int
    text: str
    lines: list[int] = field(default_factory=list)
    word_indices: list[int] = field(default_factory=list)
    position: Position | None = None
    rect: Rect | None = None
    quad: Quad | None = None

    @property
    def resolved(self) -> bool:
        return self.position is not None and self.rect is not None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "page": self.page,
            "number": self.number,
            "text": self.text,
            "lines": list(self.lines),
            "word_indices": list(self.word_indices),
        }
        if self.position is not None:
            data["position"] = {"x": self.position.x, "y": self.position.y}
        if self.rect is not None:
            data["rect"] = list(self.rect)
        return data


@dataclass(frozen=True, slots=True)
class PageBox:
    """Page box in the host's convention: left, top, right, bottom."""

    x0: float
    y1: float
    x2: float
    y3: float

    @property
    def width(self) -> float:
        return abs(self.x2 - self.x0)

    @property
    def height(self) -> float:
        # y-up hosts report top > bottom, y-down hosts the reverse
        return abs(self.y1 - self.y3)


@dataclass(frozen=True, slots=True)
class AnnotationRef:
    """Weak handle to an annotation: the page it lives on and its unique name.

    ``kind`` and ``xref`` carry the host's own identity when it has one, so
    annotations without a name can still be told apart.
    """

    page: int
    name: str
    kind: str | None = field(default=None, compare=False)
    xref: int | None = field(default=None, compare=False)


@dataclass(slots=True)
class StepResult:
    """Outcome of one per-item step of the pipeline."""

    stage: str
    ok: bool
    problem: int | None = None
    page: int | None = None
    reason: SkipReason | None = None
    detail: str = ""

    @classmethod
    def success(cls, stage: str, *, problem: int | None = None, page: int | None = None) -> StepResult:
        return cls(stage=stage, ok=True, problem=problem, page=page)

    @classmethod
    def skipped(
        cls,
        stage: str,
        reason: SkipReason,
        detail: str = "",
        *,
        problem: int | None = None,
        page: int | None = None,
    ) -> StepResult:
        return cls(stage=stage, ok=False, problem=problem, page=page, reason=reason, detail=detail)


@dataclass(slots=True)
class RunReport:
    """Summary of a complete pipeline run."""

    original_pages: int
    problems: list[Problem] = field(default_factory=list)
    generated_pages: int = 0
    results: list[StepResult] = field(default_factory=list)

    @property
    def split_point(self) -> int:
        """Index of the first generated page."""

        return self.original_pages

    @property
    def empty(self) -> bool:
        return not self.problems

    @property
    def skipped(self) -> list[StepResult]:
        return [result for result in self.results if not result.ok]

    def record(self, result: StepResult) -> StepResult:
        self.results.append(result)
        return result

    def extend(self, results: Sequence[StepResult]) -> None:
        self.results.extend(results)


def bounding_box(quads: Sequence[Sequence[float]]) -> Rect:
    """Reduce one or more 8-number quads to ``[x_min, y_min, x_max, y_max]``."""

    if not quads:
        raise ValueError("bounding_box requires at least one quad")
    xs = [quad[i] for quad in quads for i in (0, 2, 4, 6)]
    ys = [quad[i] for quad in quads for i in (1, 3, 5, 7)]
    return [min(xs), min(ys), max(xs), max(ys)]


def rect_to_quad(rect: Sequence[float]) -> Quad:
    """Corners of ``rect`` as left-top, right-top, left-bottom, right-bottom."""

    x0, y0, x1, y1 = rect
    return [x0, y0, x1, y0, x0, y1, x1, y1]


__all__ = [
    "AnnotationRef",
    "PageBox",
    "Position",
    "Problem",
    "ProblemStart",
    "Quad",
    "Rect",
    "RunReport",
    "SkipReason",
    "StepResult",
    "WordRecord",
    "bounding_box",
    "rect_to_quad",
]

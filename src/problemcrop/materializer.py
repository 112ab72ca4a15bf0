"""Generation of one cropped page per problem."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from .geometry import correct_rotation
from .models import PageBox, Problem, Rect, StepResult, bounding_box
from .port import DocumentPort, HostError

HEADER_KIND = "FreeText"


@dataclass(slots=True)
class InsertQueue:
    """Problems waiting to be inserted directly after ``anchor``.

    Every insertion lands at ``anchor + 1`` and pushes the pages generated
    before it one slot further back. Draining the queue tail to head therefore
    leaves the generated block in the queue's original order.
    """

    anchor: int
    items: list[Problem] = field(default_factory=list)

    @property
    def slot(self) -> int:
        return self.anchor + 1

    def __len__(self) -> int:
        return len(self.items)

    def drain(self) -> Iterator[Problem]:
        while self.items:
            yield self.items.pop()


def header_rect(box: PageBox, height: float) -> Rect:
    """A full-width strip of ``height`` along the top edge of ``box``."""

    height = min(height, box.height)
    left, right = min(box.x0, box.x2), max(box.x0, box.x2)
    if box.y1 >= box.y3:
        # y axis points up: the top edge has the larger coordinate
        return [left, box.y1 - height, right, box.y1]
    return [left, box.y1, right, box.y1 + height]


def pad_top(rect: Sequence[float], rotation: int, amount: float) -> Rect:
    """Grow unrotated ``rect`` by ``amount`` past the edge a reader sees on top."""

    x0, y0, x1, y1 = rect
    if rotation == 90:
        return [x0 - amount, y0, x1, y1]
    if rotation == 180:
        return [x0, y0, x1, y1 + amount]
    if rotation == 270:
        return [x0, y0, x1 + amount, y1]
    return [x0, y0 - amount, x1, y1]


class PageMaterializer:
    """Duplicate, crop and label one page per problem after the original pages."""

    def __init__(
        self,
        document: DocumentPort,
        *,
        header_height: float = 18.0,
        header_font_size: float = 11.0,
        page_box: str = "CropBox",
    ) -> None:
        if header_height <= 0:
            msg = "header_height must be positive"
            raise ValueError(msg)
        self.document = document
        self.header_height = header_height
        self.header_font_size = header_font_size
        self.page_box = page_box

    def materialize(self, problems: Sequence[Problem]) -> list[StepResult]:
        """Append pages for ``problems`` (already in reading order)."""

        queue = InsertQueue(anchor=self.document.page_count() - 1, items=list(problems))
        groups = [self._materialize_one(problem, queue.slot) for problem in queue.drain()]
        # report in reading order, matching the final page block
        return [result for group in reversed(groups) for result in group]

    def _materialize_one(self, problem: Problem, slot: int) -> list[StepResult]:
        quad = problem.quad
        if quad is None or len(quad) != 8:
            count = 0 if quad is None else len(quad)
            return [
                StepResult.skipped(
                    "materialize",
                    "malformed_rect",
                    f"expected 8 coordinates, got {count}",
                    problem=problem.number,
                    page=problem.page,
                )
            ]

        self.document.insert_page(slot - 1, self.document.source_path(), (problem.page, problem.page))
        results = self._strip_annotations(problem, slot)
        rotation = self.document.page_rotation(slot)
        # leave room for the header above the problem text
        crop = pad_top(bounding_box([quad]), rotation, self.header_height)
        self.document.set_crop_box((slot, slot), crop)
        try:
            self._stamp_header(problem, slot, rotation)
        except HostError as exc:
            results.append(
                StepResult.skipped(
                    "header",
                    "annotation_create_failed",
                    str(exc),
                    problem=problem.number,
                    page=slot,
                )
            )
        # the step outcome comes first so the report reads per problem
        results.insert(0, StepResult.success("materialize", problem=problem.number, page=problem.page))
        return results

    def _strip_annotations(self, problem: Problem, slot: int) -> list[StepResult]:
        results: list[StepResult] = []
        for handle in self.document.list_annotations(slot):
            try:
                self.document.destroy_annotation(handle)
            except HostError as exc:
                results.append(
                    StepResult.skipped(
                        "strip",
                        "annotation_remove_failed",
                        f"{handle.name}: {exc}",
                        problem=problem.number,
                        page=slot,
                    )
                )
        return results

    def _stamp_header(self, problem: Problem, slot: int, rotation: int) -> None:
        # the page box is visual; annotation rects live in unrotated space
        box = self.document.page_box(slot, self.page_box)
        rotation = rotation if rotation in (90, 180, 270) else 0
        rect = correct_rotation(header_rect(box, self.header_height), rotation, box.width, box.height)
        self.document.add_annotation(
            slot,
            rect,
            HEADER_KIND,
            f"Problem {problem.number}",
            style={"font_size": self.header_font_size, "align": "center", "rotate": rotation},
        )


__all__ = ["HEADER_KIND", "InsertQueue", "PageMaterializer", "header_rect", "pad_top"]

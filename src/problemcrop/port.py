"""Contract between the pipeline and the document engine hosting the PDF."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence, runtime_checkable

from .models import AnnotationRef, PageBox, Quad


class HostError(RuntimeError):
    """Raised when the document engine fails to carry out a request."""


@runtime_checkable
class DocumentPort(Protocol):
    """Operations the pipeline needs from the document it mutates.

    Page indices are zero based. Quads and rects are expressed in the host's
    page coordinates; word quads may be reported in the rotated (visual)
    space, which is why the geometry stage corrects for page rotation.
    """

    def word_count(self, page: int) -> int: ...

    def word_at(self, page: int, index: int) -> str: ...

    def word_quads(self, page: int, index: int) -> Sequence[Quad]: ...

    def page_box(self, page: int, kind: str = "CropBox") -> PageBox: ...

    def page_rotation(self, page: int) -> int: ...

    def add_annotation(
        self,
        page: int,
        rect: Sequence[float],
        kind: str,
        text: str,
        name: str | None = None,
        style: Mapping[str, object] | None = None,
    ) -> AnnotationRef: ...

    def list_annotations(self, page: int, kind: str | None = None) -> list[AnnotationRef]: ...

    def destroy_annotation(self, handle: AnnotationRef) -> None: ...

    def insert_page(self, after_index: int, source_path: str, page_range: tuple[int, int]) -> None: ...

    def set_crop_box(self, page_range: tuple[int, int], rect: Sequence[float]) -> None: ...

    def page_count(self) -> int: ...

    def source_path(self) -> str: ...


__all__ = ["DocumentPort", "HostError"]

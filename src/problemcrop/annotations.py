"""Removal of the temporary marker annotations from the original pages."""

from __future__ import annotations

from typing import Iterable

from .models import AnnotationRef, StepResult
from .port import DocumentPort, HostError


def _same_annotation(a: AnnotationRef, b: AnnotationRef) -> bool:
    if a.xref is not None and b.xref is not None:
        return a.xref == b.xref
    return a == b


class AnnotationCleaner:
    """Two independent passes that leave the original pages marker free.

    ``remove_recorded`` destroys the handles recorded during resolution and
    ``sweep`` removes any remaining annotation of the marker kind. Both are
    safe to run repeatedly.
    """

    def __init__(self, document: DocumentPort, original_pages: int, marker_kind: str = "Square") -> None:
        self.document = document
        self.original_pages = original_pages
        self.marker_kind = marker_kind

    def remove_recorded(self, handles: Iterable[AnnotationRef]) -> list[StepResult]:
        results: list[StepResult] = []
        for handle in handles:
            if handle.page >= self.original_pages:
                continue
            present = self.document.list_annotations(handle.page, self.marker_kind)
            if not any(_same_annotation(ref, handle) for ref in present):
                continue
            results.append(self._destroy(handle, "cleanup"))
        return results

    def sweep(self) -> list[StepResult]:
        results: list[StepResult] = []
        for page in range(self.original_pages):
            for handle in self.document.list_annotations(page, self.marker_kind):
                results.append(self._destroy(handle, "sweep"))
        return results

    def clean(self, handles: Iterable[AnnotationRef]) -> list[StepResult]:
        return self.remove_recorded(handles) + self.sweep()

    def _destroy(self, handle: AnnotationRef, stage: str) -> StepResult:
        try:
            self.document.destroy_annotation(handle)
        except HostError as exc:
            return StepResult.skipped(stage, "annotation_remove_failed", f"{handle.name}: {exc}", page=handle.page)
        return StepResult.success(stage, page=handle.page)


__all__ = ["AnnotationCleaner"]

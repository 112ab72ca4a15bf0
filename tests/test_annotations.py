from __future__ import annotations

from conftest import FakeDocument, make_page
from problemcrop.annotations import AnnotationCleaner
from problemcrop.models import AnnotationRef


def _document() -> FakeDocument:
    document = FakeDocument([make_page([["1."]]), make_page([["2."]]), make_page([["copy"]])])
    document.add_annotation(0, [0, 0, 1, 1], "Square", "marker", name="m-1")
    document.add_annotation(1, [0, 0, 1, 1], "Square", "marker", name="m-2")
    document.add_annotation(1, [0, 0, 1, 1], "Text", "keep me", name="note")
    # page 2 stands in for a generated page
    document.add_annotation(2, [0, 0, 1, 1], "Square", "generated", name="m-3")
    return document


def test_recorded_handles_are_removed():
    document = _document()
    cleaner = AnnotationCleaner(document, original_pages=2)

    results = cleaner.remove_recorded([AnnotationRef(0, "m-1"), AnnotationRef(1, "m-2"), AnnotationRef(2, "m-3")])

    assert all(result.ok for result in results)
    assert document.kinds(0) == []
    assert document.kinds(1) == ["Text"]
    assert document.kinds(2) == ["Square"]


def test_sweep_catches_lost_handles():
    document = _document()
    cleaner = AnnotationCleaner(document, original_pages=2)

    cleaner.remove_recorded([AnnotationRef(0, "m-1")])
    results = cleaner.sweep()

    assert [result.page for result in results] == [1]
    assert document.list_annotations(0, "Square") == []
    assert document.list_annotations(1, "Square") == []
    assert document.kinds(2) == ["Square"]


def test_both_passes_are_idempotent():
    document = _document()
    cleaner = AnnotationCleaner(document, original_pages=2)
    handles = [AnnotationRef(0, "m-1"), AnnotationRef(1, "m-2")]

    first = cleaner.clean(handles)
    second = cleaner.clean(handles)

    assert len(first) == 2
    assert second == []
    assert document.kinds(1) == ["Text"]


def test_remove_failures_are_reported_and_sweep_continues():
    document = _document()
    document.add_annotation(1, [0, 0, 1, 1], "Square", "marker", name="m-4")
    document.fail_destroy.add("m-2")
    cleaner = AnnotationCleaner(document, original_pages=2)

    results = cleaner.clean([AnnotationRef(1, "m-2")])

    failed = [result for result in results if not result.ok]
    assert {result.reason for result in failed} == {"annotation_remove_failed"}
    assert all("m-2" in result.detail for result in failed)
    assert document.list_annotations(0, "Square") == []
    assert [ref.name for ref in document.list_annotations(1, "Square")] == ["m-2"]


def test_sweep_leaves_unnamed_annotations_of_other_kinds():
    document = FakeDocument([make_page([["1."]])])
    document.add_annotation(0, [0, 0, 1, 1], "Highlight", "user note", name="")
    document.add_annotation(0, [0, 0, 1, 1], "Square", "marker", name="")

    results = AnnotationCleaner(document, original_pages=1).sweep()

    assert [result.ok for result in results] == [True]
    assert document.kinds(0) == ["Highlight"]

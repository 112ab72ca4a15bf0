from __future__ import annotations

import copy
import io
from dataclasses import dataclass, field
from typing import Mapping, Sequence

import pytest
from rich.console import Console

from problemcrop.config import Settings
from problemcrop.models import AnnotationRef, PageBox
from problemcrop.port import HostError

LINE_HEIGHT = 30.0
WORD_WIDTH = 50.0
WORD_GAP = 10.0


def word_quad(x: float, y: float, width: float = WORD_WIDTH, height: float = 12.0) -> list[float]:
    return [x, y, x + width, y, x, y + height, x + width, y + height]


@dataclass
class FakePage:
    words: list[str]
    quads: list[list[list[float]]]
    box: PageBox = field(default_factory=lambda: PageBox(0.0, 0.0, 612.0, 792.0))
    rotation: int = 0
    annotations: list[dict] = field(default_factory=list)
    crop: list[float] | None = None


def make_page(lines: Sequence[Sequence[str]], *, top: float = 50.0, left: float = 40.0, **kwargs) -> FakePage:
    """Lay ``lines`` out on a grid, ending each line's last word with a break."""

    words: list[str] = []
    quads: list[list[list[float]]] = []
    for row, line in enumerate(lines):
        for column, word in enumerate(line):
            text = f"{word}\n" if column == len(line) - 1 else word
            words.append(text)
            x = left + column * (WORD_WIDTH + WORD_GAP)
            quads.append([word_quad(x, top + row * LINE_HEIGHT)])
    return FakePage(words=words, quads=quads, **kwargs)


class FakeDocument:
    """In-memory document implementing the DocumentPort contract."""

    def __init__(self, pages: Sequence[FakePage], path: str = "fake.pdf") -> None:
        self.pages = list(pages)
        self.path = path
        self.fail_add_kinds: set[str] = set()
        self.fail_destroy: set[str] = set()
        self.insert_calls: list[tuple[int, str, tuple[int, int]]] = []
        self._auto = 0
        self._xref = 0

    def word_count(self, page: int) -> int:
        return len(self.pages[page].words)

    def word_at(self, page: int, index: int) -> str:
        return self.pages[page].words[index]

    def word_quads(self, page: int, index: int) -> list[list[float]]:
        quads = self.pages[page].quads
        return [list(quad) for quad in quads[index]] if index < len(quads) else []

    def page_box(self, page: int, kind: str = "CropBox") -> PageBox:
        fake = self.pages[page]
        if kind == "CropBox" and fake.crop is not None:
            x0, y0, x1, y1 = fake.crop
            return PageBox(x0, y0, x1, y1)
        return fake.box

    def page_rotation(self, page: int) -> int:
        return self.pages[page].rotation

    def add_annotation(
        self,
        page: int,
        rect: Sequence[float],
        kind: str,
        text: str,
        name: str | None = None,
        style: Mapping[str, object] | None = None,
    ) -> AnnotationRef:
        if kind in self.fail_add_kinds:
            raise HostError(f"refusing {kind}")
        if name is None:
            self._auto += 1
            name = f"auto-{self._auto}"
        self._xref += 1
        self.pages[page].annotations.append(
            {
                "name": name,
                "kind": kind,
                "xref": self._xref,
                "rect": list(rect),
                "text": text,
                "style": dict(style or {}),
            }
        )
        return AnnotationRef(page=page, name=name, kind=kind, xref=self._xref)

    def list_annotations(self, page: int, kind: str | None = None) -> list[AnnotationRef]:
        return [
            AnnotationRef(page=page, name=annot["name"], kind=annot["kind"], xref=annot["xref"])
            for annot in self.pages[page].annotations
            if kind is None or annot["kind"] == kind
        ]

    def destroy_annotation(self, handle: AnnotationRef) -> None:
        if handle.name in self.fail_destroy:
            raise HostError(f"cannot destroy {handle.name}")
        annotations = self.pages[handle.page].annotations
        for position, annot in enumerate(annotations):
            if handle.xref is not None:
                matched = annot["xref"] == handle.xref
            else:
                matched = annot["name"] == handle.name and handle.kind in (None, annot["kind"])
            if matched:
                del annotations[position]
                return
        raise HostError(f"missing {handle.name}")

    def insert_page(self, after_index: int, source_path: str, page_range: tuple[int, int]) -> None:
        self.insert_calls.append((after_index, source_path, page_range))
        start, end = page_range
        copies = [copy.deepcopy(self.pages[index]) for index in range(start, end + 1)]
        self.pages[after_index + 1 : after_index + 1] = copies

    def set_crop_box(self, page_range: tuple[int, int], rect: Sequence[float]) -> None:
        start, end = page_range
        for index in range(start, end + 1):
            self.pages[index].crop = list(rect)

    def page_count(self) -> int:
        return len(self.pages)

    def source_path(self) -> str:
        return self.path

    # test helpers
    def kinds(self, page: int) -> list[str]:
        return [annot["kind"] for annot in self.pages[page].annotations]

    def header_text(self, page: int) -> str | None:
        for annot in self.pages[page].annotations:
            if annot["kind"] == "FreeText":
                return annot["text"]
        return None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        line_wrap_chars=100,
        band_tolerance=20.0,
        page_box="CropBox",
        marker_kind="Square",
        header_height=18.0,
        header_font_size=11.0,
    )


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def two_page_document() -> FakeDocument:
    return FakeDocument(
        [
            make_page([["1.", "Solve", "x."], ["2.", "Find", "y."]]),
            make_page([["3.", "Prove", "z."]]),
        ]
    )

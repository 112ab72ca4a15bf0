"""PyMuPDF implementation of :class:`~problemcrop.port.DocumentPort`."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

import fitz  # PyMuPDF

from .models import AnnotationRef, PageBox, Quad
from .port import HostError

_ALIGN = {"left": fitz.TEXT_ALIGN_LEFT, "center": fitz.TEXT_ALIGN_CENTER, "right": fitz.TEXT_ALIGN_RIGHT}


class FitzDocument:
    """Adapter exposing a ``fitz.Document`` through the document port.

    Word quads are reported in the rotated (visual) page space; annotation
    and crop rects are taken in unrotated page space.
    """

    def __init__(self, doc: fitz.Document, path: str | Path | None = None) -> None:
        self.doc = doc
        self._path = str(path) if path is not None else (doc.name or "")
        self._words: dict[int, list[tuple[Any, ...]]] = {}

    @classmethod
    def open(cls, path: str | Path) -> FitzDocument:
        try:
            doc = fitz.open(path)
        except (RuntimeError, ValueError) as exc:
            raise HostError(f"cannot open {path}: {exc}") from exc
        return cls(doc, path)

    def close(self) -> None:
        self.doc.close()

    def __enter__(self) -> FitzDocument:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Text -------------------------------------------------------------------
    def _page_words(self, page: int) -> list[tuple[Any, ...]]:
        if page not in self._words:
            self._words[page] = list(self._page(page).get_text("words", sort=False))
        return self._words[page]

    def word_count(self, page: int) -> int:
        return len(self._page_words(page))

    def word_at(self, page: int, index: int) -> str:
        words = self._page_words(page)
        word = words[index]
        following = words[index + 1] if index + 1 < len(words) else None
        # block_no and line_no identify the text line a word sits on
        if following is None or following[5:7] != word[5:7]:
            return f"{word[4]}\n"
        return str(word[4])

    def word_quads(self, page: int, index: int) -> list[Quad]:
        words = self._page_words(page)
        if not 0 <= index < len(words):
            return []
        pdf_page = self._page(page)
        quad = fitz.Rect(words[index][:4]).quad * pdf_page.rotation_matrix
        return [[quad.ul.x, quad.ul.y, quad.ur.x, quad.ur.y, quad.ll.x, quad.ll.y, quad.lr.x, quad.lr.y]]

    # Page boxes ---------------------------------------------------------------
    def page_box(self, page: int, kind: str = "CropBox") -> PageBox:
        pdf_page = self._page(page)
        if kind == "MediaBox":
            rect = pdf_page.mediabox
        elif kind == "CropBox":
            rect = pdf_page.rect
        else:
            raise HostError(f"unsupported page box {kind!r}")
        return PageBox(x0=rect.x0, y1=rect.y0, x2=rect.x1, y3=rect.y1)

    def page_rotation(self, page: int) -> int:
        return self._page(page).rotation

    def set_crop_box(self, page_range: tuple[int, int], rect: Sequence[float]) -> None:
        start, end = page_range
        for index in range(start, end + 1):
            pdf_page = self._page(index)
            origin = pdf_page.cropbox_position
            target = fitz.Rect(rect) + (origin.x, origin.y, origin.x, origin.y)
            try:
                pdf_page.set_cropbox(target & pdf_page.mediabox)
            except ValueError as exc:
                raise HostError(f"cannot crop page {index} to {list(rect)}: {exc}") from exc

    # Annotations --------------------------------------------------------------
    def add_annotation(
        self,
        page: int,
        rect: Sequence[float],
        kind: str,
        text: str,
        name: str | None = None,
        style: Mapping[str, object] | None = None,
    ) -> AnnotationRef:
        if kind not in ("Square", "FreeText"):
            raise HostError(f"unsupported annotation kind {kind!r}")
        style = dict(style or {})
        pdf_page = self._page(page)
        target = fitz.Rect(rect)
        try:
            if kind == "Square":
                annot = pdf_page.add_rect_annot(target)
                annot.set_colors(stroke=style.get("color", (1, 1, 0)))
                annot.set_info(content=text)
            else:
                annot = pdf_page.add_freetext_annot(
                    target,
                    text,
                    fontsize=float(style.get("font_size", 11)),
                    rotate=int(style.get("rotate", 0)),
                    align=_ALIGN.get(str(style.get("align", "left")), fitz.TEXT_ALIGN_LEFT),
                )
            if name:
                self.doc.xref_set_key(annot.xref, "NM", fitz.get_pdf_str(name))
            annot.update()
        except (RuntimeError, ValueError) as exc:
            raise HostError(f"cannot add {kind} annotation on page {page}: {exc}") from exc
        return AnnotationRef(page=page, name=name or annot.info.get("id", ""), kind=kind, xref=annot.xref)

    def list_annotations(self, page: int, kind: str | None = None) -> list[AnnotationRef]:
        refs: list[AnnotationRef] = []
        for annot in self._page(page).annots():
            if kind is not None and annot.type[1] != kind:
                continue
            refs.append(AnnotationRef(page=page, name=annot.info.get("id", ""), kind=annot.type[1], xref=annot.xref))
        return refs

    def destroy_annotation(self, handle: AnnotationRef) -> None:
        pdf_page = self._page(handle.page)
        for annot in pdf_page.annots():
            if handle.xref is not None:
                matched = annot.xref == handle.xref
            else:
                # unnamed annotations all share "", so the kind has to agree too
                matched = annot.info.get("id", "") == handle.name and handle.kind in (None, annot.type[1])
            if matched:
                pdf_page.delete_annot(annot)
                return
        raise HostError(f"no annotation named {handle.name!r} on page {handle.page}")

    # Pages --------------------------------------------------------------------
    def insert_page(self, after_index: int, source_path: str, page_range: tuple[int, int]) -> None:
        start, end = page_range
        at = after_index + 1
        self._words.clear()
        try:
            if source_path and Path(source_path).exists():
                with fitz.open(source_path) as source:
                    self.doc.insert_pdf(source, from_page=start, to_page=end, start_at=at)
                return
            for offset, index in enumerate(range(start, end + 1)):
                target = at + offset
                self.doc.fullcopy_page(index, -1 if target >= self.doc.page_count else target)
        except (RuntimeError, ValueError) as exc:
            raise HostError(f"cannot insert pages {start}-{end} after {after_index}: {exc}") from exc

    def page_count(self) -> int:
        return self.doc.page_count

    def source_path(self) -> str:
        return self._path

    def save(self, path: str | Path) -> None:
        try:
            self.doc.save(str(path), garbage=3, deflate=True)
        except (RuntimeError, ValueError) as exc:
            raise HostError(f"cannot save {path}: {exc}") from exc

    def _page(self, page: int) -> fitz.Page:
        if not 0 <= page < self.doc.page_count:
            raise HostError(f"page {page} out of range (document has {self.doc.page_count} pages)")
        return self.doc[page]


__all__ = ["FitzDocument"]

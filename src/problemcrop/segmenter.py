"""Word-stream segmentation into numbered problems."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Sequence

from .models import Problem, ProblemStart, WordRecord
from .port import DocumentPort


def extract_words(document: DocumentPort, page: int, line_wrap_chars: int = 100) -> list[WordRecord]:
    """Pull ``page``'s words from ``document`` with line bookkeeping.

    A word carrying a line break closes its line, so the word after it starts
    the next line index. The index also advances when the text accumulated on
    the current line grows past ``line_wrap_chars``.
    """

    words = (document.word_at(page, index) for index in range(document.word_count(page)))
    return list(iter_word_records(words, line_wrap_chars))


def iter_word_records(words: Iterable[str], line_wrap_chars: int = 100) -> Iterator[WordRecord]:
    if line_wrap_chars <= 0:
        msg = "line_wrap_chars must be positive"
        raise ValueError(msg)
    line_index = 1
    line_text = ""
    broken = False
    for index, word in enumerate(words):
        if broken or len(line_text) > line_wrap_chars:
            line_index += 1
            line_text = ""
        line_text += word + " "
        broken = "\n" in word
        yield WordRecord(word=word, line_index=line_index, original_index=index)


class ProblemSegmenter:
    """Split a page's word stream at ``"<digits>."`` markers."""

    MARKER_REGEX = re.compile(r"^(\d+)\.\s*$")
    NOISE_REGEX = re.compile(r"^[0.]+$")

    def __init__(self, line_wrap_chars: int = 100) -> None:
        if line_wrap_chars <= 0:
            msg = "line_wrap_chars must be positive"
            raise ValueError(msg)
        self.line_wrap_chars = line_wrap_chars

    def find_starts(self, records: Sequence[WordRecord]) -> list[ProblemStart]:
        starts: list[ProblemStart] = []
        for position, record in enumerate(records):
            match = self.MARKER_REGEX.match(record.word)
            # "0." and friends are body noise, not problem numbers
            if match and not self.NOISE_REGEX.match(record.word.strip()):
                starts.append(ProblemStart(index=position, number=match.group(1), line_index=record.line_index))
        return starts

    def segment(self, page: int, records: Sequence[WordRecord]) -> list[Problem]:
        """Return the problems found in ``records`` in document order."""

        starts = self.find_starts(records)
        problems: list[Problem] = []
        for position, start in enumerate(starts):
            end = starts[position + 1].index if position + 1 < len(starts) else len(records)
            problems.append(self._build_problem(page, start, records[start.index : end]))
        return problems

    def segment_page(self, document: DocumentPort, page: int) -> list[Problem]:
        return self.segment(page, extract_words(document, page, self.line_wrap_chars))

    def segment_document(self, document: DocumentPort) -> list[Problem]:
        problems: list[Problem] = []
        for page in range(document.page_count()):
            problems.extend(self.segment_page(document, page))
        return problems

    def _build_problem(self, page: int, start: ProblemStart, span: Sequence[WordRecord]) -> Problem:
        words: list[str] = []
        lines: set[int] = set()
        indices: list[int] = []
        for offset, record in enumerate(span):
            # bare zeros and periods inside a body are noise, never a new start
            if offset and self.NOISE_REGEX.match(record.word.strip()):
                continue
            words.append(record.word)
            lines.add(record.line_index)
            indices.append(record.original_index)
        return Problem(
            page=page,
            number=int(start.number),
            text=" ".join(words),
            lines=sorted(lines),
            word_indices=indices,
        )


__all__ = ["ProblemSegmenter", "extract_words", "iter_word_records"]

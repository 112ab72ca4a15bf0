"""Runtime configuration helpers for problemcrop."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


ENV_PREFIX = "PROBLEMCROP_"


def _load_env_file(env_path: Path = Path(".env")) -> None:
    """Copy ``PROBLEMCROP_*`` entries of ``env_path`` into the environment.

    Variables already set win over the file.
    """

    if not env_path.is_file():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().removeprefix("export ").partition("=")
        key = key.strip()
        if not sep or not key.startswith(ENV_PREFIX):
            continue
        os.environ.setdefault(key, value.strip().strip("\"'"))


_load_env_file()


@dataclass(frozen=True)
class Settings:
    """Typed wrapper around environment-driven configuration."""

    line_wrap_chars: int
    band_tolerance: float
    page_box: str
    marker_kind: str
    header_height: float
    header_font_size: float

    def __post_init__(self) -> None:
        if self.line_wrap_chars <= 0:
            msg = "line_wrap_chars must be positive"
            raise ValueError(msg)
        if self.band_tolerance < 0:
            msg = "band_tolerance must be non-negative"
            raise ValueError(msg)
        if self.header_height <= 0:
            msg = "header_height must be positive"
            raise ValueError(msg)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached configuration values loaded from the environment."""

    line_wrap_chars = int(os.getenv("PROBLEMCROP_LINE_WRAP_CHARS", "100"))
    band_tolerance = float(os.getenv("PROBLEMCROP_BAND_TOLERANCE", "20"))
    page_box = os.getenv("PROBLEMCROP_PAGE_BOX", "CropBox")
    marker_kind = os.getenv("PROBLEMCROP_MARKER_KIND", "Square")
    header_height = float(os.getenv("PROBLEMCROP_HEADER_HEIGHT", "18"))
    header_font_size = float(os.getenv("PROBLEMCROP_HEADER_FONT_SIZE", "11"))

    return Settings(
        line_wrap_chars=line_wrap_chars,
        band_tolerance=band_tolerance,
        page_box=page_box,
        marker_kind=marker_kind,
        header_height=header_height,
        header_font_size=header_font_size,
    )

"""problemcrop package exports."""

from .annotations import AnnotationCleaner
from .config import get_settings
from .geometry import GeometryResolver
from .materializer import PageMaterializer
from .ordering import sort_reading_order
from .pipeline import ProblemCropPipeline
from .port import DocumentPort, HostError
from .segmenter import ProblemSegmenter

__all__ = [
    "AnnotationCleaner",
    "DocumentPort",
    "GeometryResolver",
    "HostError",
    "PageMaterializer",
    "ProblemCropPipeline",
    "ProblemSegmenter",
    "get_settings",
    "sort_reading_order",
]

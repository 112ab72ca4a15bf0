"""End-to-end problem extraction: segment, resolve, sort, materialize, clean."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from .annotations import AnnotationCleaner
from .config import Settings, get_settings
from .geometry import GeometryResolver, Resolution
from .materializer import PageMaterializer
from .models import Problem, RunReport, StepResult
from .ordering import sort_reading_order
from .port import DocumentPort
from .segmenter import ProblemSegmenter


class ProblemCropPipeline:
    """Runs every stage against one document, in a fixed phase order.

    Geometry is read for all problems before any page is inserted so no stage
    sees coordinates from a document whose page count has already changed.
    """

    def __init__(
        self,
        document: DocumentPort,
        settings: Settings | None = None,
        console: Console | None = None,
    ) -> None:
        self.document = document
        self.settings = settings or get_settings()
        self.console = console or Console()
        self.segmenter = ProblemSegmenter(self.settings.line_wrap_chars)
        self.resolver = GeometryResolver(
            document,
            page_box=self.settings.page_box,
            marker_kind=self.settings.marker_kind,
        )
        self.materializer = PageMaterializer(
            document,
            header_height=self.settings.header_height,
            header_font_size=self.settings.header_font_size,
            page_box=self.settings.page_box,
        )

    def run(self) -> RunReport:
        report = RunReport(original_pages=self.document.page_count())

        self.console.print("Scanning document for problems...")
        problems = self.segmenter.segment_document(self.document)
        if not problems:
            report.record(StepResult.skipped("segment", "segmentation_empty", "no markers on any page"))
            self.console.print("[yellow]No problems found in the document.[/yellow]")
            return report

        self.console.print(f"Found {len(problems)} problems.")
        self.console.print("Processing each problem...")
        self.console.print("")

        resolved: list[Problem] = []
        for problem in problems:
            resolution = self.resolver.resolve(problem)
            report.extend(resolution.results)
            self._log_resolution(resolution)
            if resolution.ok:
                resolved.append(problem)

        ordered = sort_reading_order(resolved, self.settings.band_tolerance)
        report.problems = ordered

        self.console.print("Duplicating and cropping pages...")
        results = self.materializer.materialize(ordered)
        report.extend(results)
        report.generated_pages = sum(1 for result in results if result.stage == "materialize" and result.ok)

        cleaner = AnnotationCleaner(self.document, report.original_pages, self.settings.marker_kind)
        report.extend(cleaner.clean(self.resolver.annotations))

        for result in report.skipped:
            self._log_skip(result)
        self._log_summary(report)
        return report

    def _log_resolution(self, resolution: Resolution) -> None:
        problem = resolution.problem
        self.console.print(f"[bold]==== PROBLEM {problem.number} ====[/bold]")
        self.console.print(f"Problem {problem.number}: {problem.text}", markup=False)
        if resolution.rect is None or resolution.bbox is None:
            self.console.print("[yellow]No word geometry found; problem skipped.[/yellow]")
            self.console.print("")
            return

        left, top, right, bottom = resolution.rect
        height = resolution.page_box.height
        self.console.print("Rectangle Coordinates:")
        self.console.print(f"    Left: {left}")
        self.console.print(f"    Right: {right}")
        self.console.print(f"    Top: {top}")
        self.console.print(f"    Bottom: {bottom}")
        self.console.print("Correction coordinates (if Y-flipping were applied):")
        self.console.print(f"    Left: {left}")
        self.console.print(f"    Right: {right}")
        self.console.print(f"    Top: {height - bottom}")
        self.console.print(f"    Bottom: {height - top}")
        x_min, y_min, x_max, y_max = resolution.bbox
        self.console.print(f"Bounding box: [{x_min}, {y_min}, {x_max}, {y_max}]", markup=False)
        self.console.print("")

    def _log_skip(self, result: StepResult) -> None:
        label = f"problem {result.problem}" if result.problem is not None else f"page {result.page}"
        self.console.print(
            f"[yellow]Skipped {result.stage} for {label}:[/yellow] {result.reason} {escape(result.detail)}".rstrip()
        )

    def _log_summary(self, report: RunReport) -> None:
        self.console.print("Duplication and cropping completed.")
        self.console.print(f"Original pages: {report.original_pages}")
        self.console.print(f"Problem pages: {report.generated_pages}")
        self.console.print(f"Problem pages start at page index {report.split_point}")


__all__ = ["ProblemCropPipeline"]

"""Command line interface for problemcrop."""

from __future__ import annotations

import json
import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import get_settings
from .fitz_port import FitzDocument
from .pipeline import ProblemCropPipeline
from .segmenter import ProblemSegmenter

app = typer.Typer(help="Crop every numbered problem of a PDF onto its own page.")
console = Console()


def _report_fatal(exc: BaseException) -> None:
    frames = traceback.extract_tb(exc.__traceback__)
    location = f" ({frames[-1].filename}:{frames[-1].lineno})" if frames else ""
    console.print(f"[bold red]Error[/bold red]: {escape(str(exc))}[dim]{escape(location)}[/dim]")


@app.command()
def crop(
    pdf_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF containing numbered problems."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Where to write the resulting PDF."),
) -> None:
    """Append one cropped page per problem, in reading order."""

    target = output or pdf_path.with_name(f"{pdf_path.stem}-problems.pdf")
    try:
        with FitzDocument.open(pdf_path) as document:
            report = ProblemCropPipeline(document, get_settings(), console).run()
            if report.empty:
                return
            document.save(target)
    except Exception as exc:
        _report_fatal(exc)
        raise typer.Exit(code=1) from exc

    console.print(f"[bold green]Wrote[/bold green] {target}")


@app.command()
def scan(
    pdf_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF to scan for problems."),
    json_output: Optional[Path] = typer.Option(None, "--json", help="Write the segmented problems to JSON."),
) -> None:
    """List the problems found in a PDF without modifying it."""

    settings = get_settings()
    try:
        with FitzDocument.open(pdf_path) as document:
            problems = ProblemSegmenter(settings.line_wrap_chars).segment_document(document)
    except Exception as exc:
        _report_fatal(exc)
        raise typer.Exit(code=1) from exc

    if not problems:
        console.print("[yellow]No problems found in the document.[/yellow]")
        return

    table = Table("Page", "Number", "Lines", "Text")
    for problem in problems:
        lines = f"{problem.lines[0]}-{problem.lines[-1]}" if problem.lines else ""
        table.add_row(str(problem.page), str(problem.number), lines, escape(problem.text.replace("\n", " ")))
    console.print(table)

    if json_output:
        payload = {"source": str(pdf_path), "problems": [problem.to_dict() for problem in problems]}
        json_output.write_text(json.dumps(payload, indent=2))
        console.print(f"Problems exported to [italic]{json_output}[/italic]")


if __name__ == "__main__":  # pragma: no cover
    app()

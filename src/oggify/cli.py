import logging
import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import DEFAULT_FFMPEG
from .converter import decline_all, run
from .errors import ConfigurationError
from .models import ConversionOutcome, ConversionRequest, ConversionResult, OutcomeKind, SourceFormat
from .policy import ConversionOptions
from .prompts import ask_directory, ask_file, ask_yes_no
from .settings import FfmpegPathStore, resolve_transcoder_path

app = typer.Typer(help="Batch convert WAV or MP3 files to OGG Vorbis using ffmpeg.")
console = Console()
err_console = Console(stderr=True)

BANNER = """[bold]Oggify[/bold] - Convert WAV or MP3 files to OGG format using FFmpeg
--------------------------------------------------"""


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def display_path(path: Path, base: Path) -> str:
    try:
        return escape(str(path.relative_to(base)))
    except ValueError:
        return escape(str(path))


def report_outcome(request: ConversionRequest, outcome: ConversionOutcome, base: Path) -> None:
    """Print one line per decision as each file finishes."""
    source = display_path(request.source_path, base)
    target = display_path(request.target_path, base)

    if outcome.kind is OutcomeKind.SKIPPED_EXISTING:
        console.print(f"[yellow]Skipping {source}: {target} already exists.[/yellow]")
        return
    if outcome.kind is OutcomeKind.SKIPPED_DECLINED:
        console.print(f"Skipping {source}.")
        return

    if outcome.overwritten:
        console.print(f"Overwriting {target}.")

    if outcome.kind is OutcomeKind.FAILED:
        # ffmpeg puts its banner first and the actual error last; --verbose logs all of it.
        lines = (outcome.reason or "").strip().splitlines()
        console.print(f"[red]Error converting {source}: {escape(lines[-1] if lines else '')}[/red]")
        return

    console.print(f"[green]Converted {source} to {target}[/green]")
    if outcome.source_deleted:
        console.print(f"Deleted {source}.")
    if outcome.warning:
        console.print(f"[yellow]Warning: {escape(outcome.warning)}[/yellow]")


def print_summary(results: list[ConversionResult], base: Path) -> None:
    counts = {kind: 0 for kind in OutcomeKind}
    for _, outcome in results:
        counts[outcome.kind] += 1
    warnings = sum(1 for _, outcome in results if outcome.warning)

    table = Table(title="Conversion Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Files found", str(len(results)))
    table.add_row("Converted", f"[green]{counts[OutcomeKind.CONVERTED]}[/green]")
    table.add_row("Skipped (existing)", str(counts[OutcomeKind.SKIPPED_EXISTING]))
    table.add_row("Skipped (declined)", str(counts[OutcomeKind.SKIPPED_DECLINED]))
    failed = counts[OutcomeKind.FAILED]
    table.add_row("Failed", f"[red]{failed}[/red]" if failed else "0")
    if warnings:
        table.add_row("Warnings", f"[yellow]{warnings}[/yellow]")

    console.print(table)

    if failed:
        console.print("\n[red bold]Failed files:[/red bold]")
        for request, outcome in results:
            if outcome.kind is OutcomeKind.FAILED:
                console.print(f"  {display_path(request.source_path, base)}")

    console.print("[green]All files processed.[/green]")


@app.command()
def convert(
    input_dir: Path = typer.Argument(None, help="Directory containing the files to convert (prompted for if omitted)"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite existing .ogg files without asking"),
    skip_existing: bool = typer.Option(False, "--skip-existing", help="Skip files whose .ogg already exists"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Also convert files in subdirectories"),
    replace: bool = typer.Option(False, "--replace", help="Delete each source file once it has been converted"),
    from_mp3: bool = typer.Option(False, "--from-mp3", help="Convert .mp3 files instead of .wav"),
    ffmpeg: Path = typer.Option(None, "--ffmpeg", help="Transcoder to use for this run only"),
    no_input: bool = typer.Option(False, "--no-input", help="Never prompt; existing .ogg files are kept"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Convert every WAV (or MP3) file in a directory to OGG Vorbis."""
    setup_logging(verbose)
    console.print(BANNER)

    try:
        options = ConversionOptions(
            force_overwrite=overwrite,
            skip_if_exists=skip_existing,
            recursive=recursive,
            delete_source=replace,
        )
    except ConfigurationError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if input_dir is None:
        if no_input:
            err_console.print("[red]An input directory is required with --no-input.[/red]")
            raise typer.Exit(1)
        input_dir = ask_directory("Enter path to input folder: ")

    input_dir = input_dir.expanduser().resolve()
    if not input_dir.is_dir():
        err_console.print(f"[red]Input directory not found: {escape(str(input_dir))}[/red]")
        raise typer.Exit(1)

    prompt = None if no_input else (lambda: ask_file(f"Enter path to {DEFAULT_FFMPEG}: "))
    try:
        transcoder_path = resolve_transcoder_path(ffmpeg, FfmpegPathStore(), prompt=prompt)
    except ConfigurationError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if no_input:
        confirm = decline_all
    else:
        def confirm(request: ConversionRequest) -> bool:
            return ask_yes_no(f"File '{display_path(request.target_path, input_dir)}' already exists. Overwrite?")

    source_format = SourceFormat.MP3 if from_mp3 else SourceFormat.WAV
    console.print(f"Converting {source_format.value} files in [bold]{escape(str(input_dir))}[/bold]")

    try:
        results = run(
            input_dir,
            options,
            transcoder_path,
            source_format=source_format,
            confirm=confirm,
            on_outcome=lambda request, outcome: report_outcome(request, outcome, input_dir),
        )
    except ConfigurationError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not results:
        console.print(f"[yellow]No {source_format.value} files to convert in {escape(str(input_dir))}.[/yellow]")
        raise typer.Exit(0)

    print_summary(results, input_dir)

    if any(outcome.kind is OutcomeKind.FAILED for _, outcome in results):
        raise typer.Exit(1)


@app.command("ffmpeg")
def ffmpeg_path(
    path: Path = typer.Argument(None, help="Path to the ffmpeg executable to save"),
    clear: bool = typer.Option(False, "--clear", help="Forget the saved path"),
):
    """Show or set the saved ffmpeg location."""
    store = FfmpegPathStore()
    try:
        if clear:
            if store.clear():
                console.print("[green]Saved transcoder path cleared.[/green]")
            else:
                console.print("[yellow]No transcoder path saved.[/yellow]")
            return

        if path is None:
            current = store.resolve()
            if current is None:
                console.print("[yellow]No transcoder path saved.[/yellow]")
                found = shutil.which(DEFAULT_FFMPEG)
                if found:
                    console.print(f"Using {DEFAULT_FFMPEG} from PATH: {escape(found)}")
            elif current.is_file():
                console.print(f"Transcoder path: {escape(str(current))}")
            else:
                console.print(f"Transcoder path: {escape(str(current))} [red](missing)[/red]")
            return

        path = path.expanduser().resolve()
        if not path.is_file():
            err_console.print(f"[red]File not found: {escape(str(path))}[/red]")
            raise typer.Exit(1)
        store.persist(path)
    except ConfigurationError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Transcoder path set to {escape(str(path))}[/green]")


def main():
    app()

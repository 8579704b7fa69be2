"""Command-line interface for midi-compare.

Provides commands for:
- compare: Compare two MIDI (or audio) files and export the common notes
- convert: Convert audio to a short MIDI file
- info: Show note count, key and tempo of a MIDI file
"""

import random
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core import MidiCompareError

app = typer.Typer(
    name="midi-compare",
    help="MIDI comparison and analysis engine",
    rich_markup_mode="markdown",
)
console = Console()


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
):
    """Compare MIDI files and convert audio to MIDI."""
    from .utils import setup_logging

    setup_logging("DEBUG" if verbose else "WARNING")


@app.command()
def compare(
    file1: Path = typer.Argument(..., help="First MIDI or audio file"),
    file2: Path = typer.Argument(..., help="Second MIDI or audio file"),
    mode: str = typer.Option(
        "basic", "-m", "--mode", help="Comparison mode: basic or enhanced"
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output MIDI file for the common notes"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Compare two files and export the notes they share.

    **Examples:**

        midi-compare compare a.mid b.mid

        midi-compare compare a.mid b.mid -m enhanced -o common.mid

        midi-compare compare recording.wav b.mid --json
    """
    from .comparison import ComparisonOrchestrator, MODES

    if mode not in MODES:
        console.print(f"[red]Error: Unknown mode '{mode}'. Use one of: {', '.join(MODES)}[/red]")
        raise typer.Exit(1)

    for path in (file1, file2):
        if not path.exists():
            console.print(f"[red]Error: File not found: {path}[/red]")
            raise typer.Exit(1)

    if output is None:
        output = file1.parent / f"common_notes_{file1.stem}_{file2.stem}.mid"

    orchestrator = ComparisonOrchestrator()
    try:
        if not json_output:
            console.print(f"[blue]Comparing ({mode}):[/blue] {file1.name} vs {file2.name}")
        result = orchestrator.compare_files(str(file1), str(file2), mode=mode)
    except MidiCompareError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.midi_bytes)

    if json_output:
        data = result.to_dict()
        data["output"] = str(output)
        console.print_json(data=data)
        return

    _show_comparison_table(result)
    details = getattr(result, "analysis_details", None)
    if details is not None:
        _show_details(details)
    console.print(f"[green]Common notes written to:[/green] {output}")


@app.command()
def convert(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output MIDI file path"
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Random seed for velocities and fallback choice"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Convert an audio file to a short MIDI sketch.

    Unreadable audio produces a fallback scale fragment instead of an error.
    """
    from .conversion import AudioToMidiConverter, ConversionStatus

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    converter = AudioToMidiConverter(rng=random.Random(seed))

    def report(progress):
        if not json_output:
            console.print(f"  [cyan]{progress.progress:3d}%[/cyan] {progress.message}")

    result = converter.convert(str(input_file), progress=report)
    if result.is_cancelled:
        console.print("[yellow]Conversion cancelled[/yellow]")
        raise typer.Exit(1)

    if output is None:
        output = input_file.parent / result.filename
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.midi_bytes)

    if json_output:
        console.print_json(
            data={
                "input": str(input_file),
                "output": str(output),
                "status": result.status.value,
                "pitches": list(result.pitches),
                "confidence": result.confidence,
                "processing_time": result.processing_time,
            }
        )
        return

    if result.status is ConversionStatus.FALLBACK:
        console.print("[yellow]Audio could not be decoded; wrote a fallback scale[/yellow]")
    console.print(f"[green]Wrote {len(result.pitches)} notes to:[/green] {output}")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input MIDI file"),
):
    """Show information about a MIDI file."""
    from .input import MidiLoader
    from .inference import KeyDetector, RhythmAnalyzer

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        document = MidiLoader().load(str(input_file))
    except MidiCompareError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    notes = document.notes
    keys = KeyDetector()

    console.print(f"\n[bold]MIDI Info:[/bold] {document.label}")
    console.print(f"  Duration: {document.duration:.2f} seconds")
    console.print(f"  Tracks: {len(document.tracks)}")
    console.print(f"  Notes: {len(notes)}")
    console.print(f"  Estimated tempo: {RhythmAnalyzer().estimate_tempo(notes):.0f} BPM")
    console.print(f"  Dominant pitch class: {keys.key_name(keys.detect_key(notes))}")


def _show_comparison_table(result):
    """Display comparison scores in a table."""
    table = Table(title="Comparison Results")
    table.add_column("Measure", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Similarity", f"{result.similarity:.1%}")
    table.add_row("Common notes", str(result.common_note_count))
    table.add_row("Notes in file 1", str(result.total_notes_1))
    table.add_row("Notes in file 2", str(result.total_notes_2))
    if hasattr(result, "harmonic_similarity"):
        table.add_row("Exact match", f"{result.basic_similarity:.1%}")
        table.add_row("Harmonic", f"{result.harmonic_similarity:.1%}")
        table.add_row("Rhythm", f"{result.rhythm_similarity:.1%}")
        table.add_row("Key", f"{result.key_similarity:.1%}")

    console.print(table)


def _show_details(details):
    """Display enhanced analysis details."""
    table = Table(title="Analysis Details")
    table.add_column("", style="cyan")
    table.add_column("File 1", style="green")
    table.add_column("File 2", style="yellow")

    table.add_row("Tempo (BPM)", f"{details.tempo_1:.0f}", f"{details.tempo_2:.0f}")
    table.add_row("Key", details.key_1, details.key_2)
    console.print(table)

    console.print(f"  Tempo similarity: {details.tempo_similarity:.2f}")
    console.print(f"  Key distance: {details.key_distance} semitones")
    if details.common_chords:
        console.print(f"  Common chords: {', '.join(details.common_chords)}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()

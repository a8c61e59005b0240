"""Command-line interface for redactify.

Scrubs source code before it is shared: secrets, declared names, URLs,
business strings and comments are replaced with generic placeholders.

Commands:
    redact  Redact a single file (redacted text to stdout or --output)
    batch   Redact a directory or .zip archive
    detect  Print the language profile picked for each file name

Configuration:
    Supports config files: redactify.toml, .redactify.yml, etc.
    CLI flags override config file values.
"""

from __future__ import annotations

import json
import sys
import zipfile
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from . import __version__
from .config import PLAINTEXT, REPORT_SCHEMA_VERSION, BatchStats, RedactionResult, detect_language
from .config_loader import load_config, merge_cli_with_config
from .redactor import create_redactor
from .scanner import ArchiveWalker, default_output_path, default_report_path, is_zip_path
from .utils import encode_text, read_file_safe

# Initialize CLI app
app = typer.Typer(
    name="redactify",
    help="""Redact source code before sharing it.

Replaces secrets, class/function/variable names, URLs, business strings and
comments with generic placeholders.

Examples:
    redactify redact app.js > app.redacted.js
    redactify redact settings.py --no-comments --report ledger.json
    redactify batch ./my-project
    redactify batch project.zip --workers 4
""",
    add_completion=False,
    no_args_is_help=True,
)

# Diagnostics go to stderr so redacted text on stdout stays clean
console = Console(stderr=True)


def create_progress() -> Progress:
    """Create a rich progress bar with file columns."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=30),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"redactify version {__version__}")
        raise typer.Exit()


def collect_disabled_passes(
    no_secrets: bool,
    no_classes: bool,
    no_functions: bool,
    no_variables: bool,
    no_comments: bool,
    no_strings: bool,
    no_urls: bool,
) -> set[str]:
    """Map --no-* flags to option names."""
    flags = {
        "redact_secrets": no_secrets,
        "redact_all_classes": no_classes,
        "redact_all_functions": no_functions,
        "redact_all_variables": no_variables,
        "redact_comments": no_comments,
        "redact_strings": no_strings,
        "redact_urls": no_urls,
    }
    return {name for name, disabled in flags.items() if disabled}


def summary_table(title: str, rows: list[tuple[str, int]]) -> Table:
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right")
    for label, count in rows:
        table.add_row(label, str(count))
    return table


def print_result_summary(result: RedactionResult) -> None:
    summary = result.summary
    console.print(summary_table(
        f"Redaction summary ({result.language})",
        [
            ("Secrets", summary.secrets_redacted),
            ("Classes", summary.classes_redacted),
            ("Functions", summary.functions_redacted),
            ("Variables", summary.variables_redacted),
            ("URLs", summary.urls_redacted),
            ("Total changes", summary.total_changes),
        ],
    ))


def print_batch_summary(stats: BatchStats) -> None:
    console.print(summary_table(
        "Batch summary",
        [
            ("Files", stats.total_files),
            ("Redacted", stats.redacted_count),
            ("Skipped", stats.skipped_count),
            ("Errored", stats.error_count),
            ("Secrets", stats.total_secrets),
            ("Classes", stats.total_classes),
            ("Functions", stats.total_functions),
            ("Variables", stats.total_variables),
            ("URLs", stats.total_urls),
            ("Total changes", stats.total_changes),
        ],
    ))

    if stats.skipped_reasons:
        console.print("[cyan]Skipped files:[/cyan]")
        for reason, count in stats.skipped_reasons.items():
            console.print(f"  {reason}: {count}")

    if stats.redaction_counts:
        console.print("[cyan]Top redactions:[/cyan]")
        for name, count in sorted(stats.redaction_counts.items(), key=lambda x: (-x[1], x[0]))[:5]:
            console.print(f"  {name}: {count}")

    errored = [r for r in stats.file_details if r.status == "errored"]
    for report in errored[:5]:
        console.print(f"[yellow]Warning: {report.path} ({report.reason})[/yellow]")
    if len(errored) > 5:
        console.print(f"[yellow]  ... and {len(errored) - 5} more (see report)[/yellow]")


def write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Redact source code before sharing it."""


@app.command()
def redact(
    file: Path = typer.Argument(
        ...,
        help="Source file to redact.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write redacted text here instead of stdout.",
    ),
    language: str | None = typer.Option(
        None,
        "--language",
        "-l",
        help="Language profile (default: detected from the file extension).",
    ),
    no_secrets: bool = typer.Option(False, "--no-secrets", help="Keep secrets."),
    no_classes: bool = typer.Option(False, "--no-classes", help="Keep class names."),
    no_functions: bool = typer.Option(False, "--no-functions", help="Keep function names."),
    no_variables: bool = typer.Option(False, "--no-variables", help="Keep variable names."),
    no_comments: bool = typer.Option(False, "--no-comments", help="Keep comments."),
    no_strings: bool = typer.Option(False, "--no-strings", help="Keep business strings."),
    no_urls: bool = typer.Option(False, "--no-urls", help="Keep URLs."),
    report: Path | None = typer.Option(
        None,
        "--report",
        help="Write the change ledger as JSON.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: search the file's directory).",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print the summary."),
) -> None:
    """Redact a single source file.

    \b
    EXAMPLES:
      redactify redact app.js
      redactify redact app.py -o app.redacted.py --no-comments
      redactify redact notes.txt -l javascript --report ledger.json
    """
    project_config = load_config(file.parent, config_file)
    if project_config.config_file and not quiet:
        console.print(f"[dim]Using config: {project_config.config_file.name}[/dim]")

    # CLI > file extension > config file > plaintext
    if not language:
        detected = detect_language(file.name)
        if detected != PLAINTEXT or project_config.language is None:
            language = detected
    merged = merge_cli_with_config(
        project_config,
        language=language,
        disabled_passes=collect_disabled_passes(
            no_secrets, no_classes, no_functions, no_variables,
            no_comments, no_strings, no_urls,
        ),
    )
    options = merged["options"]

    try:
        content, encoding = read_file_safe(file)
    except OSError as e:
        console.print(f"[red]Error: cannot read {file}: {e}[/red]")
        raise typer.Exit(1) from None

    result = create_redactor(options).redact(content)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(encode_text(result.redacted_text, encoding))
        if not quiet:
            console.print(f"[green]✓[/green] Wrote {output}")
    else:
        sys.stdout.write(result.redacted_text)
        sys.stdout.flush()

    if report:
        write_json(report, {
            "schema_version": REPORT_SCHEMA_VERSION,
            "file": file.name,
            "language": result.language,
            "changes": [c.to_dict() for c in result.changes],
            "summary": result.summary.to_dict(),
        })

    if not quiet:
        print_result_summary(result)


@app.command()
def batch(
    path: Path = typer.Argument(
        ...,
        help="Directory or .zip archive to redact.",
        exists=True,
        file_okay=True,
        dir_okay=True,
        resolve_path=True,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory or .zip (default: <name>-redacted next to the input).",
    ),
    no_secrets: bool = typer.Option(False, "--no-secrets", help="Keep secrets."),
    no_classes: bool = typer.Option(False, "--no-classes", help="Keep class names."),
    no_functions: bool = typer.Option(False, "--no-functions", help="Keep function names."),
    no_variables: bool = typer.Option(False, "--no-variables", help="Keep variable names."),
    no_comments: bool = typer.Option(False, "--no-comments", help="Keep comments."),
    no_strings: bool = typer.Option(False, "--no-strings", help="Keep business strings."),
    no_urls: bool = typer.Option(False, "--no-urls", help="Keep URLs."),
    exclude_glob: str | None = typer.Option(
        None,
        "--exclude-glob",
        "-e",
        help="Copy paths matching these globs through unredacted (comma-separated).",
    ),
    skip_ext: str | None = typer.Option(
        None,
        "--skip-ext",
        help="Copy files with these extensions through unredacted (comma-separated).",
    ),
    max_file_bytes: int | None = typer.Option(
        None,
        "--max-file-bytes",
        help="Copy files larger than this through unredacted (bytes). [default: 1MB]",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Worker threads for redaction.",
    ),
    report: Path | None = typer.Option(
        None,
        "--report",
        help="Report path (default: <output>.report.json beside the output).",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: search the input directory).",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
) -> None:
    """Redact every source file of a directory or .zip archive.

    Binary files, vendor paths and oversized files are copied through
    unchanged. A JSON report with per-file ledgers is written alongside.

    \b
    EXAMPLES:
      redactify batch ./my-project
      redactify batch project.zip -o shared.zip
      redactify batch ./src --no-comments --workers 4
    """
    if not path.is_dir() and not is_zip_path(path):
        console.print("[red]Error: PATH must be a directory or a .zip archive.[/red]")
        raise typer.Exit(1)

    project_config = load_config(path if path.is_dir() else path.parent, config_file)
    if project_config.config_file:
        console.print(f"[dim]Using config: {project_config.config_file.name}[/dim]")

    merged = merge_cli_with_config(
        project_config,
        disabled_passes=collect_disabled_passes(
            no_secrets, no_classes, no_functions, no_variables,
            no_comments, no_strings, no_urls,
        ),
        exclude_glob=exclude_glob,
        skip_ext=skip_ext,
        max_file_bytes=max_file_bytes,
        max_workers=workers,
    )

    # -o wins; a configured output_dir holds the default-named copy
    output_path = output or default_output_path(path)
    if output is None and project_config.output_dir is not None:
        output_path = project_config.output_dir / output_path.name

    walker = ArchiveWalker(
        source=path,
        options=merged["options"],
        exclude_globs=merged["exclude_globs"],
        skip_extensions=merged["skip_extensions"],
        max_file_bytes=merged["max_file_bytes"],
        max_workers=merged["max_workers"],
    )

    try:
        with create_progress() as progress:
            task = progress.add_task("Redacting files...", total=None)

            def on_progress(current: int, total: int, rel_path: str) -> None:
                progress.update(task, completed=current, total=total, description=rel_path)

            stats = walker.redact_to(output_path, progress_callback=on_progress)
    except zipfile.BadZipFile:
        console.print(f"[red]Error: {path.name} is not a valid zip archive.[/red]")
        raise typer.Exit(1) from None
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    if report is None:
        report = default_report_path(output_path)

    write_json(report, {
        "schema_version": REPORT_SCHEMA_VERSION,
        "source": path.name,
        "output": output_path.name,
        "options": merged["options"].to_dict(),
        "stats": stats.to_dict(),
    })

    console.print()
    console.print("[bold green]✓ Redaction complete![/bold green]")
    print_batch_summary(stats)
    console.print(f"[cyan]Output:[/cyan] {output_path}")
    console.print(f"[cyan]Report:[/cyan] {report}")


@app.command()
def detect(
    files: list[str] = typer.Argument(..., help="File names to classify."),
) -> None:
    """Print the language profile picked for each file name."""
    for name in files:
        typer.echo(f"{name}\t{detect_language(name)}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

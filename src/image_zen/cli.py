"""
image-zen CLI - Local-first image optimizer

Command-line interface for background removal, upscaling, compression
and chained enhancement of one or many images.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .api import ImageZen
from .exceptions import ImageZenError, ValidationError
from .models.constants import normalize_format
from .models.options import ImageValidators
from .utils.file_helpers import expand_input
from .utils.logging_helpers import configure_logging
from .utils.naming_helpers import OutputSuffix, resolve_output_path


app = typer.Typer(
    name="image-zen",
    help="🖼️  [bold cyan]image-zen[/] - Local-first image optimizer\n\n"
    "Remove backgrounds, upscale, compress and chain operations "
    "without any cloud service.",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console()
error_console = Console(stderr=True, style="bold red")

REMOVE_BG_FORMATS = ("png", "webp")
UPSCALE_FORMATS = ("jpg", "png", "webp")
COMPRESS_FORMATS = ("webp", "avif", "jpeg", "jpg", "png")


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        from . import __version__

        console.print(f"[bold cyan]image-zen[/] version [bold green]{__version__}[/]")
        raise typer.Exit()


def _zen(ctx: typer.Context) -> ImageZen:
    if isinstance(ctx.obj, ImageZen):
        return ctx.obj
    return ImageZen()


def _check_format(format_name: str, allowed: tuple[str, ...]) -> str:
    normalized = normalize_format(format_name)
    if normalized not in allowed:
        raise ValidationError(
            f"Unsupported output format: {format_name}. "
            f"Supported formats: {', '.join(allowed)}"
        )
    return normalized


def _collect_files(input_value: str) -> list[Path]:
    files = expand_input(input_value)
    if not files:
        raise ValidationError(f"No input files found: {input_value}")
    return files


def _process_files(
    files: list[Path],
    description: str,
    output: str | None,
    format_name: str,
    suffix: str,
    handler: Callable[[Path], bytes],
) -> list[Path]:
    """Run handler over every file and write the results."""
    written: list[Path] = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=len(files))

        for file in files:
            output_path = resolve_output_path(file, output, format_name, suffix)
            result = handler(file)
            ImageValidators.validate_output_path(output_path)
            output_path.write_bytes(result)
            written.append(output_path)
            progress.update(
                task, advance=1, description=f"Processed: {file.name} → {output_path.name}"
            )

    return written


def _run(action: Callable[[], str]) -> None:
    """Execute a command body, turning failures into a red line and exit code 1."""
    try:
        message = action()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️ Operation cancelled by user.[/]")
        raise typer.Exit(130)
    except ImageZenError as e:
        error_console.print(f"❌ Error: {e.message}")
        raise typer.Exit(1)
    except Exception as e:
        error_console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    console.print(f"[green]✅ {message}[/]")


InputArgument = Annotated[
    str,
    typer.Argument(help="Image file, directory or glob pattern", show_default=False),
]
OutputOption = Annotated[
    str | None,
    typer.Option(
        "--output", "-o",
        help="Output file (with extension) or directory",
        show_default=False,
    ),
]


@app.command("remove-bg", rich_help_panel="Commands")
def remove_bg(
    ctx: typer.Context,
    input_value: InputArgument,
    output: OutputOption = None,
    format_name: Annotated[
        str, typer.Option("--format", "-f", help="Output format (png, webp)")
    ] = "png",
):
    """
    ✂️ Remove background from image(s).

    The result is always PNG-encoded to keep the alpha channel.
    """
    zen = _zen(ctx)

    def action() -> str:
        fmt = _check_format(format_name, REMOVE_BG_FORMATS)
        files = _collect_files(input_value)
        _process_files(
            files,
            "Removing background...",
            output,
            fmt,
            OutputSuffix.REMOVE_BACKGROUND,
            zen.remove_background,
        )
        return f"Processed {len(files)} image(s)"

    _run(action)


@app.command("upscale", rich_help_panel="Commands")
def upscale(
    ctx: typer.Context,
    input_value: InputArgument,
    scale: Annotated[int, typer.Option("--scale", "-s", help="Scale factor (2, 4)")] = 2,
    output: OutputOption = None,
    format_name: Annotated[
        str, typer.Option("--format", "-f", help="Output format (jpg, png, webp)")
    ] = "png",
):
    """
    🔍 Upscale image(s) by 2x or 4x.

    The result is always PNG-encoded.
    """
    zen = _zen(ctx)

    def action() -> str:
        fmt = _check_format(format_name, UPSCALE_FORMATS)
        checked_scale = ImageValidators.validate_scale(scale)
        files = _collect_files(input_value)
        _process_files(
            files,
            "Upscaling image...",
            output,
            fmt,
            OutputSuffix.upscale(checked_scale),
            lambda file: zen.upscale(file, checked_scale),
        )
        return f"Upscaled {len(files)} image(s) by {checked_scale}x"

    _run(action)


@app.command("compress", rich_help_panel="Commands")
def compress(
    ctx: typer.Context,
    input_value: InputArgument,
    quality: Annotated[
        int, typer.Option("--quality", "-q", help="Compression quality (1-100)")
    ] = 80,
    format_name: Annotated[
        str, typer.Option("--format", "-f", help="Output format (webp, avif, jpeg, png)")
    ] = "webp",
    output: OutputOption = None,
):
    """
    🗜️ Compress image(s) with smart optimization.
    """
    zen = _zen(ctx)

    def action() -> str:
        fmt = _check_format(format_name, COMPRESS_FORMATS)
        checked_quality = ImageValidators.validate_quality(quality)
        files = _collect_files(input_value)
        _process_files(
            files,
            "Compressing image...",
            output,
            fmt,
            OutputSuffix.COMPRESS,
            lambda file: zen.compress(file, quality=checked_quality, format=fmt),
        )
        return f"Compressed {len(files)} image(s) at {checked_quality}% quality"

    _run(action)


@app.command("enhance", rich_help_panel="Commands")
def enhance(
    ctx: typer.Context,
    input_value: InputArgument,
    tasks: Annotated[
        str,
        typer.Option(
            "--tasks", "-t", help="Comma-separated tasks: remove-bg,upscale,compress"
        ),
    ] = "compress",
    scale: Annotated[
        int, typer.Option("--scale", "-s", help="Scale factor for upscaling")
    ] = 2,
    quality: Annotated[
        int, typer.Option("--quality", "-q", help="Compression quality")
    ] = 80,
    format_name: Annotated[
        str, typer.Option("--format", "-f", help="Output format")
    ] = "webp",
    output: OutputOption = None,
):
    """
    ✨ Apply several operations to image(s) in one pass.

    [bold]Examples:[/]

      $ image-zen enhance photo.jpg -t remove-bg,upscale,compress
    """
    zen = _zen(ctx)
    task_list = [t.strip() for t in tasks.split(",") if t.strip()]

    def action() -> str:
        fmt = ImageValidators.validate_output_format(format_name)
        files = _collect_files(input_value)
        config = {
            "tasks": task_list,
            "scale": scale,
            "compression": {"quality": quality, "format": fmt},
        }
        _process_files(
            files,
            "Enhancing image...",
            output,
            fmt,
            OutputSuffix.ENHANCE,
            lambda file: zen.enhance(file, config),
        )
        return f"Enhanced {len(files)} image(s) with tasks: {', '.join(task_list)}"

    _run(action)


@app.command("info", rich_help_panel="Commands")
def info():
    """
    📊 Show package information and supported formats.
    """
    details = ImageZen.get_info()

    console.print()
    console.print(f"[bold cyan]{details['name']}[/] v{details['version']}")
    console.print("[dim]Local-first image optimizer[/]\n")

    table = Table(box=box.ROUNDED, show_header=False, border_style="cyan")
    table.add_column("Property", style="cyan bold")
    table.add_column("Value")
    table.add_row("Features", "\n".join(f"• {f}" for f in details["features"]))
    table.add_row("Input", ", ".join(details["supported_formats"]["input"]))
    table.add_row("Output", ", ".join(details["supported_formats"]["output"]))
    unavailable = [fmt for fmt, ok in details["encoders"].items() if not ok]
    if unavailable:
        table.add_row("Unavailable encoders", f"[yellow]{', '.join(unavailable)}[/]")
    console.print(table)

    console.print(Panel(
        "[dim]$[/] image-zen compress ./images --format webp\n"
        "[dim]$[/] image-zen remove-bg photo.jpg -o clean.png\n"
        "[dim]$[/] image-zen enhance '*.jpg' -t remove-bg,upscale,compress",
        title="🚀 Example Usage",
        border_style="dim",
    ))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log per-stage details")
    ] = False,
):
    """
    🖼️ [bold cyan]image-zen[/] - Local-first image optimizer
    """
    configure_logging(verbose=verbose)
    ctx.obj = ImageZen(verbose=verbose)


if __name__ == "__main__":
    app()

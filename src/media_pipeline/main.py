"""CLI entry point for media-pipeline."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import Config
from .operations import (
    BlurOperation,
    BrightnessOperation,
    CompressOperation,
    ContrastOperation,
    ConvertOperation,
    CropDimensionOperation,
    CropTimeOperation,
    ExtractAudioOperation,
    FadeOperation,
    MirrorOperation,
    ResizeOperation,
    RotateOperation,
    SpeedOperation,
    StabilizeOperation,
    TextOperation,
    WatermarkOperation,
)
from .pipeline import Operation, Pipeline
from .runner import ProcessRunner

console = Console()


def build_operations(
    trim: tuple[str, str] | None = None,
    crop: tuple[int, int, int, int] | None = None,
    resize: tuple[int, int] | None = None,
    rotate: int | None = None,
    mirror: str | None = None,
    stabilize: bool = False,
    speed: float | None = None,
    brightness: float | None = None,
    contrast: float | None = None,
    blur: float | None = None,
    watermark: str | None = None,
    text: str | None = None,
    fade_in: float | None = None,
    fade_out: float | None = None,
    compress: str | None = None,
    target_size: float | None = None,
    convert: str | None = None,
    extract_audio: str | None = None,
) -> list[Operation]:
    """Translate CLI options into operations, in a fixed order."""
    operations: list[Operation] = []

    if trim:
        operations.append(CropTimeOperation(start=trim[0], duration=trim[1]))
    if crop:
        width, height, x, y = crop
        operations.append(CropDimensionOperation(width=width, height=height, x=x, y=y))
    if resize:
        operations.append(ResizeOperation(width=resize[0], height=resize[1]))
    if rotate is not None:
        operations.append(RotateOperation(angle=rotate))
    if mirror:
        operations.append(MirrorOperation(horizontal=mirror == "horizontal"))
    if stabilize:
        operations.append(StabilizeOperation())
    if speed is not None:
        operations.append(SpeedOperation(factor=speed))
    if brightness is not None:
        operations.append(BrightnessOperation(brightness=brightness))
    if contrast is not None:
        operations.append(ContrastOperation(contrast=contrast))
    if blur is not None:
        operations.append(BlurOperation(radius=blur))
    if watermark:
        operations.append(WatermarkOperation(image_path=Path(watermark)))
    if text:
        operations.append(TextOperation(text=text))
    if fade_in is not None:
        operations.append(FadeOperation(direction="in", duration=fade_in))
    if fade_out is not None:
        operations.append(FadeOperation(direction="out", duration=fade_out))
    if compress or target_size is not None:
        operations.append(CompressOperation(quality=compress or "medium", target_size_mb=target_size))
    if convert:
        operations.append(ConvertOperation(format=convert))
    if extract_audio:
        operations.append(ExtractAudioOperation(format=extract_audio))

    return operations


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), required=True, help="Output file")
@click.option("--trim", nargs=2, type=str, default=None, metavar="START DURATION", help="Keep DURATION from START")
@click.option("--crop", nargs=4, type=int, default=None, metavar="W H X Y", help="Crop the frame")
@click.option("--resize", nargs=2, type=int, default=None, metavar="W H", help="Scale the frame (-1 keeps aspect)")
@click.option("--rotate", type=int, default=None, help="Rotate clockwise by degrees")
@click.option("--mirror", type=click.Choice(["horizontal", "vertical"]), default=None, help="Flip the frame")
@click.option("--stabilize", is_flag=True, default=False, help="Reduce camera shake")
@click.option("--speed", type=float, default=None, help="Playback speed factor")
@click.option("--brightness", type=float, default=None, help="Brightness offset (-1.0 to 1.0)")
@click.option("--contrast", type=float, default=None, help="Contrast multiplier")
@click.option("--blur", type=float, default=None, help="Box blur radius")
@click.option("--watermark", type=click.Path(exists=True, dir_okay=False), default=None, help="Overlay image")
@click.option("--text", type=str, default=None, help="Text to draw in the top-left corner")
@click.option("--fade-in", type=float, default=None, help="Fade in seconds")
@click.option("--fade-out", type=float, default=None, help="Fade out seconds")
@click.option("--compress", type=click.Choice(["low", "medium", "high"]), default=None, help="Re-encode with H.264 at this quality")
@click.option("--target-size", type=float, default=None, metavar="MB", help="Compress to roughly MB megabytes")
@click.option("--convert", type=str, default=None, metavar="FORMAT", help="Re-encode for the output container")
@click.option("--extract-audio", type=click.Choice(["mp3", "aac", "m4a", "wav", "flac", "ogg", "wma"]), default=None, help="Drop the video and keep the audio")
@click.option("--timeout", type=float, default=None, help="Per-step deadline in seconds (default: FFMPEG_TIMEOUT or 1800)")
@click.option("--keep-temp", is_flag=True, default=False, help="Keep intermediate files")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Print ffmpeg commands")
def main(
    source: str,
    output: str,
    trim: tuple[str, str] | None,
    crop: tuple[int, int, int, int] | None,
    resize: tuple[int, int] | None,
    rotate: int | None,
    mirror: str | None,
    stabilize: bool,
    speed: float | None,
    brightness: float | None,
    contrast: float | None,
    blur: float | None,
    watermark: str | None,
    text: str | None,
    fade_in: float | None,
    fade_out: float | None,
    compress: str | None,
    target_size: float | None,
    convert: str | None,
    extract_audio: str | None,
    timeout: float | None,
    keep_temp: bool,
    verbose: bool,
):
    """
    Apply a chain of ffmpeg transformations to one media file.

    Operations run in a fixed order: trim, crop, resize, rotate, mirror,
    stabilize, speed, brightness, contrast, blur, watermark, text, fade in,
    fade out, compress, convert, extract audio.

    \b
    Example:
       media-pipeline input.mp4 -o out.mp4 --trim 00:00:10 30 --resize 1280 -1
    """
    console.print("[bold]Media Pipeline[/bold]\n")

    operations = build_operations(
        trim=trim or None,
        crop=crop or None,
        resize=resize or None,
        rotate=rotate,
        mirror=mirror,
        stabilize=stabilize,
        speed=speed,
        brightness=brightness,
        contrast=contrast,
        blur=blur,
        watermark=watermark,
        text=text,
        fade_in=fade_in,
        fade_out=fade_out,
        compress=compress,
        target_size=target_size,
        convert=convert,
        extract_audio=extract_audio,
    )
    if not operations:
        console.print("[bold red]Error:[/bold red] No transformation requested")
        console.print("Run with --help for usage information.")
        sys.exit(1)

    try:
        config = Config.from_env()
        if timeout is not None:
            config.timeout = timeout
        config.keep_intermediates = config.keep_intermediates or keep_temp
        config.verbose = config.verbose or verbose
        config.require_timeout()

        runner = ProcessRunner(config, console)
        console.print(f"[bold]Input:[/bold] {escape(source)}")
        console.print(f"[dim]{runner.verify()}[/dim]")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Processing", total=100)

            def on_progress(percentage: float | None, elapsed: float, total: float) -> None:
                if percentage is not None:
                    progress.update(task, completed=percentage)

            pipeline = Pipeline(source, output, runner=runner, observer=on_progress, console=console)
            for op in operations:
                pipeline.add(op)
            pipeline.execute()

    except KeyboardInterrupt:
        console.print("\n[bold yellow]Cancelled[/bold yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    console.print("\n[bold green]Done![/bold green]")


if __name__ == "__main__":
    main()

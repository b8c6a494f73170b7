"""CLI for rasterizing, enhancing and rebuilding PDFs at their original page sizes."""
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click
from tqdm import tqdm

from rasterizer import DocumentHandle
from schemas import (
    ColorMode,
    ColorReplaceParams,
    ExportMetadata,
    ImageFormat,
    PageBounds,
    ProcessingParams,
    RenderOptions,
    SharpenParams,
)
from schemas.errors import PipelineError
from schemas.settings import PipelineSettings, load_settings
from telemetry import Telemetry

from .iterate import export_document
from .operations import authenticate, check_feasibility, open_and_bound, render_preview

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_page_range(selection: Optional[str], page_count: int) -> List[int]:
    """
    Parse a 1-based page selection like "1,3-5" into 0-based indices.

    Returns all pages when ``selection`` is empty.

    Raises:
        click.BadParameter: On malformed or out-of-range entries
    """
    if not selection:
        return list(range(page_count))

    indices: List[int] = []
    for part in selection.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start_str, end_str = part.split("-", 1)
                start, end = int(start_str), int(end_str)
            else:
                start = end = int(part)
        except ValueError:
            raise click.BadParameter(f"Invalid page range entry: {part!r}")
        if start < 1 or end > page_count or start > end:
            raise click.BadParameter(f"Page range {part!r} outside 1-{page_count}")
        indices.extend(range(start - 1, end))
    return indices


def parse_rgb(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """click callback turning "R,G,B" into a color tuple."""
    if value is None:
        return None
    parts = value.split(",")
    try:
        channels = tuple(int(p) for p in parts)
    except ValueError:
        raise click.BadParameter(f"Expected R,G,B integers, got {value!r}")
    if len(channels) != 3 or not all(0 <= c <= 255 for c in channels):
        raise click.BadParameter(f"Expected three values in 0-255, got {value!r}")
    return channels


def open_pdf(pdf_path: Path, password: Optional[str]) -> Tuple[DocumentHandle, List[PageBounds]]:
    """Open a PDF, unlocking it with ``password`` when needed. Exits on failure."""
    result = open_and_bound(pdf_path.read_bytes(), pdf_path.name)
    if not result.needs_password:
        return result.handle, result.bounds

    if not password:
        result.handle.close()
        click.echo(f"Error: {pdf_path.name} is password protected; pass --password", err=True)
        sys.exit(1)

    auth = authenticate(result.handle, password)
    if not auth.ok:
        result.handle.close()
        click.echo("Error: Incorrect password", err=True)
        sys.exit(1)
    return result.handle, auth.bounds


def render_options(dpi: Optional[float], color: str, fmt: str, quality: Optional[int],
                   settings: PipelineSettings) -> RenderOptions:
    return RenderOptions(
        dpi=dpi or settings.render.default_dpi,
        color_mode=ColorMode(color),
        format=ImageFormat(fmt),
        quality=quality,
    )


def show_sizes(bounds: Sequence[PageBounds]):
    for i, b in enumerate(bounds):
        click.echo(f"  Page {i + 1}: {b.width_pt:g} x {b.height_pt:g} pt")


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file overriding the shipped defaults",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool):
    """PDF Remaster - rasterize, enhance and rebuild PDFs with original page sizes."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.obj = load_settings(config)


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--password", "-p", default=None, help="Password for encrypted PDFs")
def info(pdf_path: Path, password: Optional[str]):
    """
    Show page count and page sizes.

    Example:
        pdf-remaster info scan.pdf
    """
    try:
        handle, bounds = open_pdf(pdf_path, password)
        with handle:
            click.echo(f"{pdf_path.name}: {len(bounds)} pages")
            show_sizes(bounds)
    except PipelineError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--password", "-p", default=None, help="Password for encrypted PDFs")
@click.option("--dpi", type=float, default=None, help="Render DPI (default from settings: 150)")
@click.option("--color", type=click.Choice([m.value for m in ColorMode]), default=ColorMode.RGB.value)
@click.option("--budget", type=float, default=None, help="Memory budget in MB (default: 500)")
@click.pass_obj
def estimate(settings: PipelineSettings, pdf_path: Path, password: Optional[str],
             dpi: Optional[float], color: str, budget: Optional[float]):
    """
    Estimate render memory for a whole document.

    Example:
        pdf-remaster estimate plans.pdf --dpi 300
    """
    try:
        handle, bounds = open_pdf(pdf_path, password)
        with handle:
            options = render_options(dpi, color, ImageFormat.PNG.value, None, settings)
            result = check_feasibility(bounds, options, budget, settings)
    except PipelineError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    status = "OK" if result.feasible else "OVER BUDGET"
    click.echo(f"Estimated memory: {result.estimated_mb} MB / {result.budget_mb} MB ({status})")
    for suggestion in result.suggestions:
        click.echo(f"  - {suggestion}")


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("page", type=int)
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Output PNG (default: <pdf-stem>-page-NNN.png next to the PDF)")
@click.option("--password", "-p", default=None, help="Password for encrypted PDFs")
@click.option("--max-width", type=int, default=None, help="Preview box width in pixels")
@click.option("--max-height", type=int, default=None, help="Preview box height in pixels")
@click.pass_obj
def preview(settings: PipelineSettings, pdf_path: Path, page: int, output: Optional[Path],
            password: Optional[str], max_width: Optional[int], max_height: Optional[int]):
    """
    Write a small PNG preview of PAGE (1-based).

    Example:
        pdf-remaster preview plans.pdf 1 -o cover.png
    """
    if output is None:
        output = pdf_path.parent / f"{pdf_path.stem}-page-{page:03d}.png"

    try:
        handle, bounds = open_pdf(pdf_path, password)
        with handle:
            if not 1 <= page <= len(bounds):
                raise click.BadParameter(f"Page must be between 1 and {len(bounds)}")
            image = render_preview(handle, page - 1, bounds[page - 1], max_width, max_height, settings)
    except PipelineError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(image.data)
    click.echo(f"Preview {image.width}x{image.height} saved to: {output}")


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Output PDF (default: <pdf-stem>-remastered.pdf next to the PDF)")
@click.option("--password", "-p", default=None, help="Password for encrypted PDFs")
@click.option("--pages", default=None, help="1-based page selection, e.g. 1,3-5 (default: all)")
@click.option("--dpi", type=float, default=None, help="Render DPI (default from settings: 150)")
@click.option("--color", type=click.Choice([m.value for m in ColorMode]), default=ColorMode.RGB.value)
@click.option("--format", "fmt", type=click.Choice([f.value for f in ImageFormat]),
              default=ImageFormat.PNG.value, help="Intermediate raster format")
@click.option("--quality", type=click.IntRange(1, 100), default=None, help="JPEG quality")
@click.option("--grayscale", is_flag=True, help="Convert pages to grayscale")
@click.option("--contrast", type=float, default=1.0, show_default=True)
@click.option("--brightness", type=float, default=0.0, show_default=True)
@click.option("--gamma", type=float, default=1.0, show_default=True)
@click.option("--threshold", type=int, default=0, show_default=True, help="Binarize at this level (0 = off)")
@click.option("--sharpen", "sharpen_sigma", type=float, default=0.0, show_default=True,
              help="Unsharp-mask sigma (0 = off)")
@click.option("--sharpen-flat", type=float, default=1.0, show_default=True,
              help="Sharpening applied to flat areas")
@click.option("--sharpen-jagged", type=float, default=2.0, show_default=True,
              help="Sharpening applied to edges")
@click.option("--denoise", is_flag=True, help="Light blur before sharpening")
@click.option("--replace-target", callback=parse_rgb, default=None, metavar="R,G,B",
              help="Color to substitute")
@click.option("--replace-with", callback=parse_rgb, default=None, metavar="R,G,B",
              help="Substitute color, used with --replace-target")
@click.option("--tolerance", type=float, default=0.0, show_default=True,
              help="Per-channel match tolerance for --replace-target")
@click.option("--title", default=None, help="Output document title")
@click.option("--author", default=None, help="Output document author")
@click.option("--batch-size", type=click.IntRange(min=1), default=None,
              help="Pages per intermediate PDF (default from settings: 50)")
@click.option("--timing", is_flag=True, help="Print a timing breakdown")
@click.pass_obj
def convert(settings: PipelineSettings, pdf_path: Path, output: Optional[Path], password: Optional[str],
            pages: Optional[str], dpi: Optional[float], color: str, fmt: str, quality: Optional[int],
            grayscale: bool, contrast: float, brightness: float, gamma: float, threshold: int,
            sharpen_sigma: float, sharpen_flat: float, sharpen_jagged: float, denoise: bool,
            replace_target: Optional[Tuple[int, int, int]], replace_with: Optional[Tuple[int, int, int]],
            tolerance: float, title: Optional[str], author: Optional[str],
            batch_size: Optional[int], timing: bool):
    """
    Rasterize, enhance and rebuild a PDF with the original page sizes.

    Example:
        pdf-remaster convert scan.pdf --dpi 200 --grayscale --contrast 1.2
    """
    if output is None:
        output = pdf_path.parent / f"{pdf_path.stem}-remastered.pdf"

    if (replace_target is None) != (replace_with is None):
        raise click.UsageError("--replace-target and --replace-with must be given together")
    color_replace = ColorReplaceParams()
    if replace_target is not None:
        color_replace = ColorReplaceParams(
            enabled=True, target_color=replace_target, replace_color=replace_with, tolerance=tolerance,
        )

    params = ProcessingParams(
        grayscale=grayscale,
        contrast=contrast,
        brightness=brightness,
        threshold=threshold,
        sharpen=SharpenParams(sigma=sharpen_sigma, flat=sharpen_flat, jagged=sharpen_jagged),
        denoise=denoise,
        gamma=gamma,
        color_replace=color_replace,
    )
    metadata = ExportMetadata(title=title or f"Processed {pdf_path.name}", author=author)
    tel = Telemetry()

    try:
        handle, bounds = open_pdf(pdf_path, password)
        with handle:
            indices = parse_page_range(pages, len(bounds))
            options = render_options(dpi, color, fmt, quality, settings)
            feasibility = check_feasibility([bounds[i] for i in indices], options, settings=settings)
            if not feasibility.feasible:
                click.echo(
                    f"Warning: estimated {feasibility.estimated_mb} MB exceeds "
                    f"{feasibility.budget_mb} MB budget", err=True
                )

            click.echo(f"Converting {len(indices)} pages of {pdf_path.name} at {options.dpi:g} DPI")
            with tqdm(total=len(indices), desc="Pages") as pbar:
                pdf_bytes = export_document(
                    handle, bounds, options, params,
                    metadata=metadata,
                    page_indices=indices,
                    batch_size=batch_size,
                    on_progress=lambda done, total: pbar.update(1),
                    settings=settings,
                    telemetry=tel,
                )
    except PipelineError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pdf_bytes)
    click.echo(f"Success! {len(indices)} pages saved to: {output} ({len(pdf_bytes) / 1024:.1f} KB)")

    if timing:
        click.echo(tel.summary())


if __name__ == "__main__":
    cli()

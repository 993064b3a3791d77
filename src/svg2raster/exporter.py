"""Multi-format export.

Resolves the output geometry once, then renders and encodes one task per
requested format on a worker pool. Each task owns its canvas and pixel
buffer; everything else is shared through a frozen `ExportContext`.

Example::

    from svg2raster import SVGScene, export
    from svg2raster.formats import OutputFormat

    scene = SVGScene.from_file("logo.svg")
    export(scene, "out", "logo", formats=[OutputFormat.PNG, OutputFormat.JPEG])
"""

import dataclasses
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Optional

from svg2raster import image_utils
from svg2raster.formats import ALL_FORMATS, OutputFormat, dedupe_formats, output_path
from svg2raster.geometry import Dimensions, ScaleFactors, resolve_dimensions
from svg2raster.rasterizer import BaseRasterizer, ResvgRasterizer
from svg2raster.resource_limits import ResourceLimits
from svg2raster.scene import SVGScene
from svg2raster.utils.color import TRANSPARENT, WHITE, Color

logger = logging.getLogger(__name__)

# filepath, buffer, width, height, layout, image_format
Encoder = Callable[[str, bytes, int, int, str, str], None]


@dataclasses.dataclass(frozen=True)
class ExportContext:
    """Read-only state shared by every export task."""

    scene: SVGScene
    dimensions: Dimensions
    transform: ScaleFactors
    background: Optional[Color]
    output_dir: str
    filename: str
    rasterizer: BaseRasterizer
    encoder: Encoder


@dataclasses.dataclass(frozen=True)
class EncodeTask:
    task_id: int
    output_format: OutputFormat
    output_path: str


@dataclasses.dataclass(frozen=True)
class TaskResult:
    task_id: int
    output_format: OutputFormat
    output_path: str
    elapsed: float
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def plan_tasks(
    formats: Iterable[OutputFormat], output_dir: str, filename: str
) -> list[EncodeTask]:
    """Create one task per distinct format, numbered in request order."""
    return [
        EncodeTask(
            task_id=index,
            output_format=fmt,
            output_path=output_path(output_dir, filename, fmt),
        )
        for index, fmt in enumerate(dedupe_formats(formats), start=1)
    ]


def resolve_background(explicit: Optional[Color], fmt: OutputFormat) -> Color:
    """Pick the canvas background for a format.

    An explicit color always wins. Otherwise formats with alpha get a
    transparent background and the others get opaque white.
    """
    if explicit is not None:
        return explicit
    return TRANSPARENT if fmt.supports_alpha else WHITE


def run_task(context: ExportContext, task: EncodeTask) -> TaskResult:
    """Render and encode a single format.

    Never raises: any failure is captured in the returned result.
    """
    start = time.perf_counter()
    fmt = task.output_format
    try:
        width, height = context.dimensions
        if fmt.max_dimension and max(width, height) > fmt.max_dimension:
            raise ValueError(
                f"{fmt.pil_format} supports at most {fmt.max_dimension} pixels "
                f"per side, got {width}x{height}"
            )
        canvas = image_utils.new_canvas(width, height)
        image_utils.fill_canvas(canvas, resolve_background(context.background, fmt))
        context.rasterizer.render(context.scene, context.transform, canvas)
        buffer, layout = image_utils.to_pixel_buffer(canvas, fmt.supports_alpha)
        del canvas
        context.encoder(task.output_path, buffer, width, height, layout, fmt.pil_format)
    except Exception as e:
        return TaskResult(
            task_id=task.task_id,
            output_format=fmt,
            output_path=task.output_path,
            elapsed=time.perf_counter() - start,
            error=str(e) or type(e).__name__,
        )
    return TaskResult(
        task_id=task.task_id,
        output_format=fmt,
        output_path=task.output_path,
        elapsed=time.perf_counter() - start,
    )


def format_elapsed(seconds: float) -> str:
    """Format a duration as whole seconds, or milliseconds under a second."""
    if seconds >= 1.0:
        return f"{int(seconds)}s"
    return f"{int(seconds * 1000)}ms"


def report_result(result: TaskResult) -> None:
    """Log a single task outcome as one record."""
    name = os.path.basename(result.output_path)
    if result.ok:
        logger.info(
            f"[task_id={result.task_id}] Generated: '{name}' "
            f"in {format_elapsed(result.elapsed)}"
        )
    else:
        logger.error(
            f"[task_id={result.task_id}] Failed to generate '{name}' "
            f"Caused by: {result.error}"
        )


def export(
    scene: SVGScene,
    output_dir: str,
    filename: str,
    formats: Optional[Iterable[OutputFormat]] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    scale: float = 1.0,
    background: Optional[Color] = None,
    rasterizer: Optional[BaseRasterizer] = None,
    encoder: Optional[Encoder] = None,
    limits: Optional[ResourceLimits] = None,
) -> list[TaskResult]:
    """Render the scene into every requested format.

    Geometry is resolved once and shared by all formats. Failures before the
    fan-out (invalid size, limits, output directory) raise; failures of a
    single format are logged and returned in its `TaskResult`.

    Args:
        scene: Parsed SVG scene.
        output_dir: Directory for the output files, created if missing.
        filename: Output file name without extension.
        formats: Formats to produce. Defaults to all formats; duplicates are
            dropped.
        width: Output width in pixels. Overrides `scale`.
        height: Output height in pixels. Overrides `scale`.
        scale: Scale factor relative to the intrinsic size.
        background: Background color. Defaults to transparent for formats
            with alpha and white otherwise.
        rasterizer: Rasterizer to use. Defaults to `ResvgRasterizer`.
        encoder: Function that writes a raw buffer to a file. Defaults to
            `image_utils.save_buffer`.
        limits: Resource limits. Defaults to `ResourceLimits.default()`.

    Returns:
        One result per distinct format, in completion order.

    Raises:
        DegenerateSceneSize: If the scene has no area.
        DegenerateOutputSize: If the output size resolves to zero.
        ValueError: If a resource limit is exceeded or no format is given.
        OSError: If the output directory cannot be created.
    """
    limits = limits or ResourceLimits.default()
    base_width, base_height = scene.intrinsic_size()
    dimensions, transform = resolve_dimensions(
        base_width, base_height, width=width, height=height, scale=scale
    )
    limits.check_dimensions(dimensions)

    tasks = plan_tasks(
        ALL_FORMATS if formats is None else formats, output_dir, filename
    )
    if not tasks:
        raise ValueError("At least one output format is required")

    if not os.path.isdir(output_dir):
        logger.debug(f"Creating {output_dir}")
        os.makedirs(output_dir, exist_ok=True)

    context = ExportContext(
        scene=scene,
        dimensions=dimensions,
        transform=transform,
        background=background,
        output_dir=output_dir,
        filename=filename,
        rasterizer=rasterizer or ResvgRasterizer(),
        encoder=encoder or image_utils.save_buffer,
    )

    logger.info(f"Detected {os.cpu_count() or 0} CPU cores for parallelization.")
    logger.debug(
        f"Exporting {dimensions.width}x{dimensions.height} to "
        f"{', '.join(str(task.output_format) for task in tasks)}"
    )

    results = []
    with ThreadPoolExecutor(
        max_workers=len(tasks), thread_name_prefix="svg2raster"
    ) as executor:
        futures = [executor.submit(run_task, context, task) for task in tasks]
        for future in as_completed(futures):
            result = future.result()
            report_result(result)
            results.append(result)
    return results

from svg2raster.exporter import TaskResult, export
from svg2raster.formats import ALL_FORMATS, OutputFormat
from svg2raster.resource_limits import ResourceLimits
from svg2raster.scene import SVGScene
from svg2raster.utils.color import Color, parse_color
from svg2raster.version import __version__ as __version__

__all__ = [
    "ALL_FORMATS",
    "Color",
    "OutputFormat",
    "ResourceLimits",
    "SVGScene",
    "TaskResult",
    "export",
    "parse_color",
]

"""
manycore_svg - SVG rendering of many-core processor grids

Renders cores, routers, links and border sinks/sources of a many-core system,
plus a configurable attribute overlay that can be regenerated cheaply.

Example:
    >>> from manycore_svg import SVG, Configuration, Core, ManycoreSystem, TextField
    >>> system = ManycoreSystem(rows=1, columns=2, cores=[Core(id=0), Core(id=1)])
    >>> svg = SVG(system)
    >>> document = svg.to_string()
    >>> update = svg.update_configurable_information(
    ...     Configuration(core_config={"@id": TextField("ID")})
    ... )
    >>> update.to_dict()["viewBox"]
    '0 0 452 177'
"""

from .buckets import attribute_colour, bucket_index
from .configuration import (
    BORDER_ROUTERS_KEY,
    COORDINATES_KEY,
    ID_KEY,
    LOAD_KEY,
    ROUTING_KEY,
    BooleanField,
    ColouredTextField,
    ColourSettings,
    Configuration,
    FillField,
    RoutingField,
    TextField,
)
from .errors import (
    ConfigurationError,
    ConnectionNotFoundError,
    ManycoreMismatchError,
    RoutingError,
    SVGError,
)
from .export import GridExporter
from .geometry import ElementKind, GridPosition, element_coordinates
from .information_layer import InformationLayer, generate
from .models import (
    Borders,
    BorderType,
    Channel,
    Core,
    Direction,
    ManycoreSystem,
    Router,
)
from .routing import DimensionOrderRouter, RoutingTarget
from .svg import SVG, UpdateResult

__version__ = "0.1.0"

__all__ = [
    # Main API
    "SVG",
    "UpdateResult",
    # Architecture records
    "ManycoreSystem",
    "Core",
    "Router",
    "Channel",
    "Borders",
    "BorderType",
    "Direction",
    # Configuration
    "Configuration",
    "ColourSettings",
    "TextField",
    "FillField",
    "ColouredTextField",
    "RoutingField",
    "BooleanField",
    "ID_KEY",
    "COORDINATES_KEY",
    "LOAD_KEY",
    "ROUTING_KEY",
    "BORDER_ROUTERS_KEY",
    # Geometry and colouring
    "GridPosition",
    "ElementKind",
    "element_coordinates",
    "bucket_index",
    "attribute_colour",
    # Overlay
    "InformationLayer",
    "generate",
    # Routing
    "DimensionOrderRouter",
    "RoutingTarget",
    # Export
    "GridExporter",
    # Errors
    "SVGError",
    "ConnectionNotFoundError",
    "ManycoreMismatchError",
    "ConfigurationError",
    "RoutingError",
]

"""
Error types raised while composing or updating a many-core SVG.

All errors derive from SVGError so callers can catch a single type around a
render or a reconfiguration call. None of them are retried internally.
"""


class SVGError(Exception):
    """Base class for every error raised by manycore_svg."""

    pass


class ConnectionNotFoundError(SVGError):
    """Raised when a core has no connection in the requested direction."""

    pass


class ManycoreMismatchError(SVGError):
    """Raised when architecture data disagrees with the rendered topology."""

    pass


class ConfigurationError(SVGError):
    """Raised for invalid grid dimensions or invalid attribute configuration."""

    pass


class RoutingError(SVGError):
    """Raised when a routing algorithm cannot route the task graph."""

    pass

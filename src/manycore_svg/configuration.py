"""
Attribute configuration model.

A Configuration says which attributes to show on cores, routers and channels,
and how to show them. Each attribute key maps to exactly one field
configuration variant:

- TextField: show "<label>: <value>" as plain text.
- FillField: no text, colour the element's box from the value's bucket.
- ColouredTextField: show "<label>: <value>" in the value's bucket colour.
- RoutingField: compute link loads with a routing algorithm first.
- BooleanField: toggle auxiliary rendering (e.g. border routers).

The front-end sends configurations as JSON, for example:

    {
        "coreConfig": {
            "@id": {"type": "Text", "data": "ID"},
            "load": {"type": "Fill", "data": {"bounds": [10, 20, 30, 40],
                                              "colours": ["#a", "#b", "#c", "#d"]}}
        },
        "routerConfig": {},
        "channelConfig": {
            "routingAlgorithm": {"type": "Routing", "data": {"algorithm": "RowFirst"}},
            "borderRouters": {"type": "Boolean", "data": true},
            "@load": {"type": "Text", "data": "Load"}
        }
    }
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .buckets import NUMBER_OF_BUCKETS
from .errors import ConfigurationError

# Reserved keys
ID_KEY = "@id"
COORDINATES_KEY = "@coordinates"
ALLOCATED_TASK_KEY = "@allocatedTask"
LOAD_KEY = "@load"
ROUTING_KEY = "routingAlgorithm"
BORDER_ROUTERS_KEY = "borderRouters"
# Channel keys that are directives rather than per-link attributes
CHANNEL_DIRECTIVE_KEYS = (ROUTING_KEY, BORDER_ROUTERS_KEY)


@dataclass(frozen=True)
class ColourSettings:
    """
    Bounds and colours for bucketed colouring.

    Attributes:
        bounds: Four ascending lower bounds.
        colours: Four colours, index-aligned with bounds.
    """

    bounds: Tuple[int, int, int, int]
    colours: Tuple[str, str, str, str]

    def __post_init__(self):
        if not isinstance(self.bounds, (list, tuple)):
            raise ConfigurationError(f"Bounds must be a list, got {self.bounds!r}")
        if not isinstance(self.colours, (list, tuple)):
            raise ConfigurationError(f"Colours must be a list, got {self.colours!r}")

        # Normalise lists from JSON into tuples
        object.__setattr__(self, "bounds", tuple(self.bounds))
        object.__setattr__(self, "colours", tuple(self.colours))

        if len(self.bounds) != NUMBER_OF_BUCKETS:
            raise ConfigurationError(
                f"Expected {NUMBER_OF_BUCKETS} bounds, got {len(self.bounds)}"
            )
        if len(self.colours) != NUMBER_OF_BUCKETS:
            raise ConfigurationError(
                f"Expected {NUMBER_OF_BUCKETS} colours, got {len(self.colours)}"
            )
        # bool is an int subclass but never a valid bound
        if any(
            isinstance(b, bool) or not isinstance(b, int) or b < 0 for b in self.bounds
        ):
            raise ConfigurationError(
                f"Bounds must be unsigned integers: {list(self.bounds)}"
            )
        if list(self.bounds) != sorted(self.bounds):
            raise ConfigurationError(
                f"Bounds must be ascending: {list(self.bounds)}"
            )
        if any(not isinstance(c, str) for c in self.colours):
            raise ConfigurationError(
                f"Colours must be strings: {list(self.colours)}"
            )


@dataclass(frozen=True)
class TextField:
    """Render the attribute as "<title>: <value>"."""

    title: str


@dataclass(frozen=True)
class FillField:
    """Fill the element box with the colour of the value's bucket."""

    colour_settings: ColourSettings


@dataclass(frozen=True)
class ColouredTextField:
    """Render the attribute as text coloured by the value's bucket."""

    title: str
    colour_settings: ColourSettings


@dataclass(frozen=True)
class RoutingField:
    """Request link loads computed with the named routing algorithm."""

    algorithm: str


@dataclass(frozen=True)
class BooleanField:
    """On/off toggle not tied to a per-element attribute."""

    value: bool


FieldConfiguration = Union[
    TextField, FillField, ColouredTextField, RoutingField, BooleanField
]


def _colour_settings_from_dict(data: Any, key: str) -> ColourSettings:
    if not isinstance(data, dict) or "bounds" not in data or "colours" not in data:
        raise ConfigurationError(
            f"Field '{key}': expected an object with 'bounds' and 'colours'"
        )
    try:
        return ColourSettings(bounds=data["bounds"], colours=data["colours"])
    except ConfigurationError as error:
        raise ConfigurationError(f"Field '{key}': {error}") from error


def field_from_dict(key: str, data: Any) -> FieldConfiguration:
    """
    Build a field configuration from its JSON form.

    Args:
        key: Attribute key, used in error messages.
        data: Mapping with "type" and "data" entries.

    Returns:
        The matching field configuration variant.

    Raises:
        ConfigurationError: If the variant is unknown or its payload is invalid.
    """
    if not isinstance(data, dict) or "type" not in data:
        raise ConfigurationError(f"Field '{key}': missing 'type'")

    variant = data["type"]
    payload = data.get("data")

    if variant == "Text":
        if not isinstance(payload, str):
            raise ConfigurationError(f"Field '{key}': Text expects a title string")
        return TextField(title=payload)

    if variant == "Fill":
        return FillField(colour_settings=_colour_settings_from_dict(payload, key))

    if variant == "ColouredText":
        if (
            not isinstance(payload, (list, tuple))
            or len(payload) != 2
            or not isinstance(payload[0], str)
        ):
            raise ConfigurationError(
                f"Field '{key}': ColouredText expects [title, colour settings]"
            )
        return ColouredTextField(
            title=payload[0],
            colour_settings=_colour_settings_from_dict(payload[1], key),
        )

    if variant == "Routing":
        if not isinstance(payload, dict) or not isinstance(
            payload.get("algorithm"), str
        ):
            raise ConfigurationError(f"Field '{key}': Routing expects an algorithm")
        return RoutingField(algorithm=payload["algorithm"])

    if variant == "Boolean":
        if not isinstance(payload, bool):
            raise ConfigurationError(f"Field '{key}': Boolean expects true/false")
        return BooleanField(value=payload)

    raise ConfigurationError(f"Field '{key}': unknown configuration type {variant!r}")


@dataclass
class Configuration:
    """
    Attribute configuration for one reconfiguration request.

    Attributes:
        core_config: Attribute key -> field configuration for cores.
        router_config: Attribute key -> field configuration for routers.
        channel_config: Channel directives (routing, border routers) and
            per-link attribute configuration.
    """

    core_config: Dict[str, FieldConfiguration] = field(default_factory=dict)
    router_config: Dict[str, FieldConfiguration] = field(default_factory=dict)
    channel_config: Dict[str, FieldConfiguration] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """Build a configuration from the front-end's JSON document."""
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be an object, got {type(data).__name__}"
            )

        sections = {}
        for attr, json_key in (
            ("core_config", "coreConfig"),
            ("router_config", "routerConfig"),
            ("channel_config", "channelConfig"),
        ):
            section = data.get(json_key) or {}
            if not isinstance(section, dict):
                raise ConfigurationError(f"'{json_key}' must be an object")
            sections[attr] = {
                key: field_from_dict(key, value) for key, value in section.items()
            }
        return cls(**sections)

    def is_empty(self) -> bool:
        """True when no core, router or channel configuration is set."""
        return not (self.core_config or self.router_config or self.channel_config)

    def routing(self) -> Optional[RoutingField]:
        """The routing directive in the channel configuration, if any."""
        directive = self.channel_config.get(ROUTING_KEY)
        if isinstance(directive, RoutingField):
            return directive
        return None

    def show_border_routers(self) -> bool:
        """Whether the channel configuration turns border routers on."""
        directive = self.channel_config.get(BORDER_ROUTERS_KEY)
        return isinstance(directive, BooleanField) and directive.value

    def channel_attribute_keys(self) -> List[str]:
        """Sorted channel keys that name per-link attributes."""
        return sorted(
            key for key in self.channel_config if key not in CHANNEL_DIRECTIVE_KEYS
        )

    def show_coordinates(self) -> bool:
        """Whether cell coordinates are requested."""
        return COORDINATES_KEY in self.core_config

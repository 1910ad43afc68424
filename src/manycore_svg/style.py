"""
Shared stylesheet for the rendered grid.

The stylesheet is reset at the start of every reconfiguration and then
appended to while overlay groups are generated (fill rules, loaded links).
"""

DEFAULT_FILL = "#e5e5e5"
BASE_FILL_CLASS_NAME = "baseFill"
SINK_SOURCE_CLASS_NAME = "sinkSource"
SINKS_SOURCES_GROUP_ID = "sinksSources"

BASE_STYLE = f".{BASE_FILL_CLASS_NAME}{{fill: {DEFAULT_FILL};}}"
# Border decorations stay in the document but are hidden until requested
MINIMAL_STYLE = BASE_STYLE + f"\n#{SINKS_SOURCES_GROUP_ID}{{display: none;}}"
EXTENDED_STYLE = (
    BASE_STYLE
    + f"\n.{SINK_SOURCE_CLASS_NAME}{{fill: #ffffff; stroke: black; stroke-width: 1;}}"
)


class Style:
    """
    A mutable CSS text buffer.

    Attributes:
        css: Current stylesheet text.
    """

    def __init__(self, css: str = MINIMAL_STYLE):
        self.css = css

    @classmethod
    def minimal(cls) -> "Style":
        """Stylesheet with border decorations hidden."""
        return cls(MINIMAL_STYLE)

    @classmethod
    def extended(cls) -> "Style":
        """Stylesheet with border decorations shown."""
        return cls(EXTENDED_STYLE)

    def reset(self, show_borders: bool = False) -> None:
        """Drop every appended rule and return to a base stylesheet."""
        self.css = EXTENDED_STYLE if show_borders else MINIMAL_STYLE

    def append(self, rule: str) -> None:
        """Append a rule on a new line."""
        self.css += "\n" + rule

    def __str__(self) -> str:
        return self.css

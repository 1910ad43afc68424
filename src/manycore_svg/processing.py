"""
Core and router boxes.

One ProcessingGroup per grid cell: a square core box with its router box
attached to the top-right corner, plus a task label in the bottom-right
corner of the core when a task is allocated to it. Box ids are
"<variant><core id>" so fill rules in the stylesheet can select them.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Tuple

from .geometry import (
    CORE_ROUTER_STROKE_WIDTH,
    ROUTER_OFFSET,
    SIDE_LENGTH,
    ElementKind,
    GridPosition,
    element_coordinates,
    saturating_add,
    saturating_sub,
)
from .information_layer import TextInformation
from .style import BASE_FILL_CLASS_NAME

PROCESSING_GROUP_ID = "processingGroup"


@dataclass(frozen=True)
class ElementBox:
    """
    A core or router box.

    Attributes:
        kind: Core or router.
        x: Top-left x coordinate.
        y: Top-left y coordinate.
        side: Side length.
    """

    kind: ElementKind
    x: int
    y: int
    side: int

    @property
    def text_anchor(self) -> str:
        return self.kind.text_anchor

    def to_element(self, core_id: int) -> ET.Element:
        return ET.Element(
            "rect",
            {
                "id": f"{self.kind.value}{core_id}",
                "class": BASE_FILL_CLASS_NAME,
                "x": str(self.x),
                "y": str(self.y),
                "width": str(self.side),
                "height": str(self.side),
                "stroke": "black",
                "stroke-width": str(CORE_ROUTER_STROKE_WIDTH),
            },
        )


class ProcessingGroup:
    """
    The box pair of one grid cell.

    Attributes:
        core_id: Identity of the core in this cell.
        position: Grid position of the cell.
        core: Core box.
        router: Router box.
        task_label: "Task <id>" label, or None when no task is allocated.
    """

    def __init__(
        self, core_id: int, position: GridPosition, allocated_task: Optional[int] = None
    ):
        self.core_id = core_id
        self.position = position
        self.core = ElementBox(
            ElementKind.CORE,
            *element_coordinates(position, ElementKind.CORE),
            SIDE_LENGTH,
        )
        self.router = ElementBox(
            ElementKind.ROUTER,
            *element_coordinates(position, ElementKind.ROUTER),
            ROUTER_OFFSET,
        )

        self.task_label: Optional[TextInformation] = None
        if allocated_task is not None:
            self.task_label = TextInformation(
                saturating_sub(saturating_add(self.core.x, SIDE_LENGTH), 2),
                saturating_sub(saturating_add(self.core.y, SIDE_LENGTH), 2),
                "end",
                f"Task {allocated_task}",
                dominant_baseline="text-after-edge",
            )

    @property
    def boxes(self) -> Tuple[ElementBox, ElementBox]:
        return self.core, self.router

    def to_element(self) -> ET.Element:
        group = ET.Element("g", {"id": f"{PROCESSING_GROUP_ID}{self.core_id}"})
        group.append(self.core.to_element(self.core_id))
        group.append(self.router.to_element(self.core_id))
        if self.task_label is not None:
            group.append(self.task_label.to_element())
        return group

"""
File export functionality for rendered grids.

This module handles exporting an SVG document to files:
- SVG files (.svg) - The full document as currently configured
- PNG images - A rasterised preview of boxes, links, fills and overlay text

The GridExporter class provides methods for saving documents and handles
font loading, image rendering, and file I/O.
"""

import re
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .information_layer import TextInformation
from .style import DEFAULT_FILL
from .svg import SVG

# Matches the fill rules appended during reconfiguration
FILL_RULE_PATTERN = re.compile(r"#((?:core|router)\d+) \{ fill: ([^;]+); \}")

RGB = Tuple[int, int, int]


class GridExporter:
    """
    Exports rendered grids to various file formats.

    Attributes:
        default_font: Default font name for PNG export.
    """

    def __init__(self, default_font: Optional[str] = None):
        """
        Initialize the grid exporter.

        Args:
            default_font: Default font name for PNG export (e.g., "Roboto Mono").
        """
        self.default_font = default_font

    def save_svg(self, svg: SVG, filename: str) -> None:
        """
        Save the full document to an SVG file.

        Args:
            svg: The document to save.
            filename: Output filename (should end in .svg).
        """
        output_path = Path(filename)
        output_path.write_text(svg.to_string(), encoding="utf-8")

    def save_png(
        self,
        svg: SVG,
        filename: str,
        font_size: int = 12,
        bg_color: str = "#FFFFFF",
        fg_color: str = "#000000",
        font: Optional[str] = None,
        scale: int = 1,
    ) -> None:
        """
        Save a rasterised preview of the document as a PNG image.

        Boxes are filled from the fill rules of the current stylesheet.
        Colours Pillow cannot parse fall back to the default box fill.

        Args:
            svg: The document to render.
            filename: Output filename (should end in .png).
            font_size: Font size in points before scaling.
            bg_color: Background color as hex string.
            fg_color: Line and default text color as hex string.
            font: Font name to use (overrides default_font if provided).
            scale: Resolution multiplier.
        """
        view_box = svg.view_box
        img_width = max(view_box.width * scale, 1)
        img_height = max(view_box.height * scale, 1)

        def to_image(x: int, y: int) -> Tuple[int, int]:
            return (x - view_box.x) * scale, (y - view_box.y) * scale

        loaded_font = self._load_monospace_font(
            font_size * scale, font or self.default_font
        )
        fills = self._fill_colours(svg.style.css)
        default_fill = ImageColor.getrgb(DEFAULT_FILL)

        img = Image.new("RGB", (img_width, img_height), bg_color)
        draw = ImageDraw.Draw(img)

        for connection in svg.connections.paths:
            draw.line(
                [to_image(*connection.start), to_image(*connection.end)],
                fill=fg_color,
                width=scale,
            )

        for core_id in sorted(svg.processing_groups):
            for box in svg.processing_groups[core_id].boxes:
                x0, y0 = to_image(box.x, box.y)
                x1, y1 = to_image(box.x + box.side, box.y + box.side)
                element_id = f"{box.kind.value}{core_id}"
                draw.rectangle(
                    [x0, y0, x1, y1],
                    fill=fills.get(element_id, default_fill),
                    outline=fg_color,
                    width=scale,
                )

        for core_id in sorted(svg.processing_groups):
            task_label = svg.processing_groups[core_id].task_label
            if task_label is not None:
                self._draw_text(draw, task_label, to_image, loaded_font, fg_color)

        for layer in svg.information_layers:
            for text in layer.texts:
                self._draw_text(draw, text, to_image, loaded_font, fg_color)

        output_path = Path(filename)
        img.save(output_path, "PNG")

    def _draw_text(self, draw, text: TextInformation, to_image, font, fg_color) -> None:
        x, y = to_image(text.x, text.y)
        width = draw.textlength(text.value, font=font)
        if text.text_anchor == "end":
            x -= width
        elif text.text_anchor == "middle":
            x -= width / 2

        fill = self._colour(text.fill, fg_color)
        draw.text((x, y), text.value, font=font, fill=fill)

    @staticmethod
    def _colour(colour: str, fallback) -> RGB:
        try:
            return ImageColor.getrgb(colour)
        except ValueError:
            return ImageColor.getrgb(fallback)

    def _fill_colours(self, css: str) -> Dict[str, RGB]:
        """Element id -> fill colour from the stylesheet's fill rules."""
        fills = {}
        for element_id, colour in FILL_RULE_PATTERN.findall(css):
            fills[element_id] = self._colour(colour.strip(), DEFAULT_FILL)
        return fills

    def _load_monospace_font(
        self, font_size: int, font_name: Optional[str] = None
    ) -> ImageFont.FreeTypeFont:
        """
        Load a monospace font for PNG rendering.

        Tries the following in order:
        1. User-specified font name if provided
        2. Common system monospace fonts
        3. Pillow's default font

        Args:
            font_size: Font size in points.
            font_name: Optional font name (e.g., "Roboto Mono", "Monaco").

        Returns:
            A PIL ImageFont object.
        """
        fonts_to_try = []

        if font_name:
            fonts_to_try.append(font_name)

        fonts_to_try.extend(
            [
                # Linux
                "RobotoMono-Regular.ttf",
                "DejaVuSansMono",
                "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
                # macOS
                "Menlo",
                "/System/Library/Fonts/Menlo.ttc",
                # Windows
                "Consolas",
                "C:/Windows/Fonts/consola.ttf",
            ]
        )

        for font in fonts_to_try:
            try:
                return ImageFont.truetype(font, font_size)
            except OSError:
                continue

        try:
            return ImageFont.load_default(size=font_size)
        except TypeError:
            # Older Pillow versions don't support size parameter
            return ImageFont.load_default()

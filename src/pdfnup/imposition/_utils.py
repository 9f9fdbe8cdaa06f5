"""Shared utilities for imposition."""

import re

from pypdf import PageObject

from pdfnup.constants import UNIT_TO_POINTS
from pdfnup.exceptions import ConfigError

_DIMENSION_RE = re.compile(r"^([\d.]+)\s*(mm|in|pt|cm)$")


def parse_dimension(value: str) -> float:
    """
    Parse a dimension string to points.

    Supports: "100mm", "4in", "288pt", "10cm"

    Args:
        value: Dimension string with unit

    Returns:
        Value in points
    """
    if not value:
        raise ConfigError("Empty dimension value")

    value = value.strip().lower()
    match = _DIMENSION_RE.match(value)
    if not match:
        raise ConfigError(
            f"Invalid dimension format: {value}. Use format like '100mm', '8.5in', '612pt'"
        )

    try:
        number = float(match.group(1))
    except ValueError:
        raise ConfigError(f"Invalid dimension number: {value}") from None
    return number * UNIT_TO_POINTS[match.group(2)]


def parse_coordinate(value: float | str) -> float:
    """Parse a value in points (number) or with units (string) to points."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return parse_dimension(value)


def resolve_page_size(page_size: tuple[float | str, float | str]) -> tuple[float, float]:
    """Resolve a configured base page size to positive (width, height) points."""
    width = parse_coordinate(page_size[0])
    height = parse_coordinate(page_size[1])
    if width <= 0 or height <= 0:
        raise ConfigError(f"Page size must be positive, got {width:g} x {height:g} pt")
    return width, height


def get_page_dimensions(page: PageObject) -> tuple[float, float]:
    """Get page width and height in points, from the mediabox."""
    mediabox = page.mediabox
    return float(mediabox.width), float(mediabox.height)


def get_page_origin(page: PageObject) -> tuple[float, float]:
    """Get the lower-left corner of the page's mediabox."""
    mediabox = page.mediabox
    return float(mediabox.left), float(mediabox.bottom)

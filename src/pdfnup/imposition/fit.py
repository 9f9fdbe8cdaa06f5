"""Fit a source page inside a cell."""

from dataclasses import dataclass

from pdfnup.exceptions import InvalidPageGeometry


@dataclass(frozen=True)
class FitTransform:
    """Uniform scale plus centering offsets within a cell."""

    scale: float
    offset_x: float
    offset_y: float


def fit_page(
    page_width: float,
    page_height: float,
    cell_width: float,
    cell_height: float,
) -> FitTransform:
    """
    Scale a page uniformly to fit within a cell, centered.

    The scale is the smaller of the two axis ratios, so the scaled page
    never overflows the cell (whitespace may remain on one axis).

    Raises:
        InvalidPageGeometry: If the page has a zero or negative dimension
    """
    if page_width <= 0 or page_height <= 0:
        raise InvalidPageGeometry(
            f"Page has invalid size {page_width:g} x {page_height:g} pt",
            context={"width": page_width, "height": page_height},
        )

    scale = min(cell_width / page_width, cell_height / page_height)

    scaled_width = page_width * scale
    scaled_height = page_height * scale
    offset_x = (cell_width - scaled_width) / 2
    offset_y = (cell_height - scaled_height) / 2

    return FitTransform(scale=scale, offset_x=offset_x, offset_y=offset_y)

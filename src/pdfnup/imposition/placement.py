"""Cell placement geometry for N-up sheets."""

from dataclasses import dataclass
from functools import lru_cache

from pdfnup.config import Layout, Orientation, Spacing
from pdfnup.constants import LETTER


@dataclass(frozen=True)
class Placement:
    """A cell on an output sheet.

    Coordinates are in points from the sheet's bottom-left corner, y up.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    def overlaps(self, other: "Placement") -> bool:
        """True if the two cells share any interior area."""
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.top
            and other.y < self.top
        )


def sheet_size(
    orientation: Orientation,
    page_size: tuple[float, float] = LETTER,
) -> tuple[float, float]:
    """
    Resolve the output sheet (width, height) for an orientation.

    The base page size may be given either way round; landscape sheets
    put the long side horizontally, portrait sheets vertically.
    """
    width, height = page_size
    if orientation == Orientation.LANDSCAPE:
        return max(width, height), min(width, height)
    return min(width, height), max(width, height)


@lru_cache(maxsize=64)
def calculate_placements(
    layout: Layout,
    spacing: Spacing,
    orientation: Orientation,
    page_size: tuple[float, float] = LETTER,
) -> tuple[Placement, ...]:
    """
    Calculate the cell placements for one sheet.

    Margins are a fraction of each sheet dimension; the gap between cells
    is the smaller of the two margins.

    Args:
        layout: 2-up or 4-up
        spacing: Margin preset
        orientation: Sheet orientation
        page_size: Base page size in points (portrait width, height)

    Returns:
        One Placement per slot, in reading order: for 4-up top-left,
        top-right, bottom-left, bottom-right; for 2-up landscape left then
        right; for 2-up portrait top then bottom.

    Example:
        >>> cells = calculate_placements(Layout.TWO_UP, Spacing.REGULAR, Orientation.LANDSCAPE)
        >>> len(cells)
        2
    """
    width, height = sheet_size(orientation, page_size)
    margin_x = width * spacing.fraction
    margin_y = height * spacing.fraction
    gap = min(margin_x, margin_y)

    if layout == Layout.FOUR_UP:
        cell_width = (width - margin_x * 2 - gap) / 2
        cell_height = (height - margin_y * 2 - gap) / 2
        top_y = margin_y + cell_height + gap
        right_x = margin_x + cell_width + gap
        return (
            Placement(margin_x, top_y, cell_width, cell_height),
            Placement(right_x, top_y, cell_width, cell_height),
            Placement(margin_x, margin_y, cell_width, cell_height),
            Placement(right_x, margin_y, cell_width, cell_height),
        )

    if orientation == Orientation.LANDSCAPE:
        # Side by side, full available height
        cell_width = (width - margin_x * 2 - gap) / 2
        cell_height = height - margin_y * 2
        return (
            Placement(margin_x, margin_y, cell_width, cell_height),
            Placement(margin_x + cell_width + gap, margin_y, cell_width, cell_height),
        )

    # Stacked, full available width
    cell_width = width - margin_x * 2
    cell_height = (height - margin_y * 2 - gap) / 2
    return (
        Placement(margin_x, margin_y + cell_height + gap, cell_width, cell_height),
        Placement(margin_x, margin_y, cell_width, cell_height),
    )

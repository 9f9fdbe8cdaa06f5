"""N-up composition: tile source pages onto output sheets."""

import io
import math

from pypdf import PageObject, PdfWriter, Transformation

from pdfnup.config import ImpositionOptions, Layout
from pdfnup.constants import LETTER
from pdfnup.exceptions import ParseError
from pdfnup.imposition._utils import get_page_dimensions, get_page_origin
from pdfnup.imposition.fit import fit_page
from pdfnup.imposition.loader import PARSE_FAILURES, load_document
from pdfnup.imposition.placement import Placement, calculate_placements, sheet_size
from pdfnup.logging_config import get_logger

logger = get_logger(__name__)


def output_page_count(source_page_count: int, layout: Layout) -> int:
    """Number of sheets produced for a source page count."""
    if source_page_count <= 0:
        return 0
    return math.ceil(source_page_count / layout.pages_per_sheet)


def plan_sheets(source_page_count: int, layout: Layout) -> list[list[int]]:
    """
    Group source page indices into sheets.

    Sheet ``s`` slot ``k`` holds source page ``s * N + k``. The last sheet
    stops at the final source page; pages are never wrapped or reused.

    Example:
        >>> plan_sheets(5, Layout.TWO_UP)
        [[0, 1], [2, 3], [4]]
    """
    per_sheet = layout.pages_per_sheet
    sheets = []
    for sheet_index in range(output_page_count(source_page_count, layout)):
        slots = []
        for slot in range(per_sheet):
            source_index = sheet_index * per_sheet + slot
            if source_index >= source_page_count:
                break
            slots.append(source_index)
        sheets.append(slots)
    return sheets


def place_page(sheet: PageObject, page: PageObject, placement: Placement) -> None:
    """
    Draw a source page onto a sheet, scaled to fit its cell and centered.

    The page's mediabox origin is moved to (0, 0) first so pages whose
    mediabox does not start at the origin land in the right place.
    """
    width, height = get_page_dimensions(page)
    fit = fit_page(width, height, placement.width, placement.height)
    left, bottom = get_page_origin(page)

    # Transformations apply in call order: normalize, scale, then position
    transform = (
        Transformation()
        .translate(tx=-left, ty=-bottom)
        .scale(sx=fit.scale, sy=fit.scale)
        .translate(tx=placement.x + fit.offset_x, ty=placement.y + fit.offset_y)
    )
    sheet.merge_transformed_page(page, transform)


def compose_pages(
    pages: list[PageObject],
    options: ImpositionOptions,
    page_size: tuple[float, float] = LETTER,
) -> list[PageObject]:
    """
    Tile pages onto new sheets.

    Args:
        pages: Source pages, in reading order
        options: Layout, spacing and orientation
        page_size: Base page size in points

    Returns:
        One new sheet per group of N source pages
    """
    width, height = sheet_size(options.orientation, page_size)
    placements = calculate_placements(options.layout, options.spacing, options.orientation, page_size)

    sheets = []
    for sheet_index, source_indices in enumerate(plan_sheets(len(pages), options.layout)):
        sheet = PageObject.create_blank_page(width=width, height=height)
        for slot, source_index in enumerate(source_indices):
            place_page(sheet, pages[source_index], placements[slot])
        logger.debug(
            "Sheet %d: pages %s",
            sheet_index + 1,
            ", ".join(str(i + 1) for i in source_indices),
        )
        sheets.append(sheet)
    return sheets


def compose(
    data: bytes,
    options: ImpositionOptions,
    page_size: tuple[float, float] = LETTER,
) -> bytes:
    """
    Re-paginate a PDF so several source pages share each output sheet.

    Nothing is returned unless every sheet was composed and the document
    serialized; any failure propagates to the caller.

    Args:
        data: Source PDF bytes
        options: Layout, spacing and orientation
        page_size: Base page size in points

    Returns:
        The composed PDF as bytes

    Raises:
        ParseError: If the source cannot be parsed or a page is structurally broken
        EncryptedError: If the source is password-protected
        InvalidPageGeometry: If a source page has a zero or negative size
    """
    reader = load_document(data)

    try:
        pages = list(reader.pages)
        sheets = compose_pages(pages, options, page_size)

        writer = PdfWriter()
        for sheet in sheets:
            writer.add_page(sheet)

        output = io.BytesIO()
        writer.write(output)
    except PARSE_FAILURES as e:
        # Page structure the parser tolerated but cannot be drawn
        raise ParseError("PDF page structure is broken", context={"stage": "compose"}) from e

    logger.info(
        "Combined %d page(s) into %d sheet(s) (%s, %s, %s)",
        len(pages),
        len(sheets),
        options.layout.value,
        options.orientation.value,
        options.spacing.value,
    )
    return output.getvalue()

"""Imposition engine for pdfnup.

Usage:
    from pdfnup.config import ImpositionOptions, Layout
    from pdfnup.imposition import compose, output_page_count

    output = compose(pdf_bytes, ImpositionOptions(layout=Layout.FOUR_UP))
"""

from pdfnup.imposition._utils import (
    get_page_dimensions,
    parse_coordinate,
    parse_dimension,
    resolve_page_size,
)
from pdfnup.imposition.compose import (
    compose,
    compose_pages,
    output_page_count,
    place_page,
    plan_sheets,
)
from pdfnup.imposition.fit import FitTransform, fit_page
from pdfnup.imposition.loader import LOAD_ATTEMPTS, LoadAttempt, count_pages, load_document
from pdfnup.imposition.placement import Placement, calculate_placements, sheet_size

__all__ = [
    # Geometry
    "Placement",
    "calculate_placements",
    "sheet_size",
    "FitTransform",
    "fit_page",
    # Composition
    "compose",
    "compose_pages",
    "place_page",
    "plan_sheets",
    "output_page_count",
    # Loading
    "LoadAttempt",
    "LOAD_ATTEMPTS",
    "load_document",
    "count_pages",
    # Utilities
    "parse_dimension",
    "parse_coordinate",
    "resolve_page_size",
    "get_page_dimensions",
]

"""Centralized constants for pdfnup."""

# Letter size in points (8.5 x 11 inches), short side first
LETTER = (612.0, 792.0)

# Source pages per output sheet
PAGES_PER_SHEET = {
    "2-up": 2,
    "4-up": 4,
}

# Margin as a fraction of the sheet dimension
SPACING_FRACTIONS = {
    "snug": 0.02,
    "regular": 0.05,
    "spacious": 0.10,
}

# Preview defaults
PREVIEW_MAX_SHEETS = 3
PREVIEW_RENDER_SCALE = 1.5

# PDF user space is 72 points per inch
POINTS_PER_INCH = 72.0

# Unit conversion factors to PDF points
UNIT_TO_POINTS = {
    "pt": 1.0,
    "in": 72.0,
    "mm": 72.0 / 25.4,
    "cm": 72.0 / 2.54,
}

# Largest upload accepted by the validation step
MAX_UPLOAD_MB = 20
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

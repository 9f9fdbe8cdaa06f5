"""Factory functions for rasterizer selection."""

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pdfnup.rendering.base import Rasterizer


def get_rasterizer(name: str, poppler_path: Path | None = None) -> "Rasterizer":
    """Get a rasterizer backend by name.

    The backend is returned un-initialized; the preview controller calls
    setup() once when it is constructed.

    Args:
        name: Backend name ('pdf2image', 'mock')
        poppler_path: Directory holding the poppler binaries (pdf2image only)

    Raises:
        ValueError: If backend name is not recognized
    """
    backends = {
        "pdf2image": lambda: _get_pdf2image(poppler_path),
        "mock": lambda: _get_mock(),
    }

    if name not in backends:
        available = ", ".join(sorted(backends.keys()))
        raise ValueError(f"Unknown rasterizer backend: '{name}'. Available: {available}")

    return backends[name]()


def _get_pdf2image(poppler_path: Path | None) -> "Rasterizer":
    from pdfnup.rendering.pdf2image_backend import Pdf2ImageRasterizer
    return Pdf2ImageRasterizer(poppler_path=poppler_path)


def _get_mock() -> "Rasterizer":
    from pdfnup.rendering.mock import MockRasterizer
    return MockRasterizer()

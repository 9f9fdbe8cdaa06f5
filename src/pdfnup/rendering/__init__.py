"""Rendering package with rasterizer backends for previews."""

from pdfnup.rendering.base import Rasterizer, RenderableDocument, RenderablePage
from pdfnup.rendering.factory import get_rasterizer
from pdfnup.rendering.mock import MockRasterizer

__all__ = [
    "Rasterizer",
    "RenderableDocument",
    "RenderablePage",
    "MockRasterizer",
    "get_rasterizer",
]

"""Poppler-backed rasterizer using pdf2image."""

import io
from pathlib import Path

from pdf2image import convert_from_bytes, pdfinfo_from_bytes
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
    PopplerNotInstalledError,
)
from PIL import Image
from pypdf import PdfWriter

from pdfnup.constants import POINTS_PER_INCH
from pdfnup.exceptions import ParseError, RenderError, RendererInitError
from pdfnup.logging_config import get_logger
from pdfnup.rendering.base import Rasterizer, RenderableDocument, RenderablePage

logger = get_logger(__name__)


def _probe_pdf() -> bytes:
    """A one-page blank PDF used to check that poppler runs."""
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class Pdf2ImagePage(RenderablePage):
    """A page rendered on demand by pdftoppm."""

    def __init__(self, document: "Pdf2ImageDocument", index: int):
        self._document = document
        self._index = index

    @property
    def index(self) -> int:
        return self._index

    def render(self, scale: float) -> Image.Image:
        document = self._document
        if document is None or document.data is None:
            raise RenderError("Document already closed", page_index=self._index)

        try:
            images = convert_from_bytes(
                document.data,
                dpi=POINTS_PER_INCH * scale,
                first_page=self._index + 1,  # pdf2image uses 1-indexed pages
                last_page=self._index + 1,
                poppler_path=document.poppler_path,
                timeout=document.timeout,
            )
        except (PDFSyntaxError, PDFPageCountError, PDFPopplerTimeoutError) as e:
            raise RenderError(f"pdftoppm failed: {e}", page_index=self._index) from e

        if not images:
            raise RenderError("pdftoppm returned no image", page_index=self._index)
        return images[0]

    def cleanup(self) -> None:
        # pdftoppm runs per render; nothing stays resident between calls
        self._document = None


class Pdf2ImageDocument(RenderableDocument):
    """PDF bytes plus the page count reported by pdfinfo."""

    def __init__(self, data: bytes, page_count: int, poppler_path: Path | None, timeout: int | None):
        self.data: bytes | None = data
        self.poppler_path = str(poppler_path) if poppler_path else None
        self.timeout = timeout
        self._page_count = page_count

    @property
    def page_count(self) -> int:
        return self._page_count

    def get_page(self, index: int) -> Pdf2ImagePage:
        if not 0 <= index < self._page_count:
            raise IndexError(f"Page index {index} out of range (0-{self._page_count - 1})")
        return Pdf2ImagePage(self, index)

    def close(self) -> None:
        self.data = None


class Pdf2ImageRasterizer(Rasterizer):
    """Rasterizer shelling out to poppler's pdfinfo/pdftoppm via pdf2image."""

    name = "pdf2image"

    def __init__(self, poppler_path: Path | None = None, timeout: int | None = 60):
        self.poppler_path = poppler_path
        self.timeout = timeout
        self._ready = False

    def setup(self) -> None:
        """Check that the poppler binaries can be run."""
        try:
            pdfinfo_from_bytes(
                _probe_pdf(),
                poppler_path=str(self.poppler_path) if self.poppler_path else None,
                timeout=self.timeout,
            )
        except (PDFInfoNotInstalledError, PopplerNotInstalledError) as e:
            raise RendererInitError(
                "Poppler is not installed or not on PATH",
                context={"poppler_path": self.poppler_path},
            ) from e
        except (PDFPageCountError, PDFPopplerTimeoutError, OSError) as e:
            raise RendererInitError(f"Poppler failed to start: {e}") from e

        self._ready = True
        logger.debug("pdf2image rasterizer ready (poppler_path=%s)", self.poppler_path)

    def open_for_render(self, data: bytes) -> Pdf2ImageDocument:
        if not self._ready:
            raise RendererInitError("Rasterizer used before setup()")

        try:
            info = pdfinfo_from_bytes(
                data,
                poppler_path=str(self.poppler_path) if self.poppler_path else None,
                timeout=self.timeout,
            )
        except PDFPageCountError as e:
            raise ParseError("pdfinfo could not read the PDF") from e
        except PDFPopplerTimeoutError as e:
            raise ParseError("pdfinfo timed out") from e

        return Pdf2ImageDocument(data, int(info["Pages"]), self.poppler_path, self.timeout)

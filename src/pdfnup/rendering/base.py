"""Abstract base classes for preview rasterizers."""

from abc import ABC, abstractmethod

from PIL import Image


class RenderablePage(ABC):
    """A single page that can be rasterized.

    Callers release it with cleanup() as soon as the image is taken.
    """

    @property
    @abstractmethod
    def index(self) -> int:
        """0-indexed page number."""

    @abstractmethod
    def render(self, scale: float) -> Image.Image:
        """Rasterize the page.

        Args:
            scale: Pixels per PDF point (1.0 = 72 DPI)

        Raises:
            RenderError: If the page cannot be rasterized
        """

    @abstractmethod
    def cleanup(self) -> None:
        """Release resources held for this page."""


class RenderableDocument(ABC):
    """A document opened for rendering. Release it with close()."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""

    @abstractmethod
    def get_page(self, index: int) -> RenderablePage:
        """Get a page by 0-indexed number."""

    @abstractmethod
    def close(self) -> None:
        """Release resources held for the document."""

    def __enter__(self) -> "RenderableDocument":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Rasterizer(ABC):
    """Abstract base class for rasterizer backends.

    Each backend (pdf2image/poppler, mock) implements this interface.

    Example:
        rasterizer = get_rasterizer("pdf2image")
        rasterizer.setup()
        with rasterizer.open_for_render(pdf_bytes) as document:
            page = document.get_page(0)
            image = page.render(1.5)
            page.cleanup()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g., 'pdf2image', 'mock')."""

    @abstractmethod
    def setup(self) -> None:
        """One-time initialization, such as locating external binaries.

        Raises:
            RendererInitError: If the backend cannot be used
        """

    @abstractmethod
    def open_for_render(self, data: bytes) -> RenderableDocument:
        """Open PDF bytes for rendering.

        Raises:
            RendererInitError: If setup() has not succeeded
            ParseError: If the bytes are not a renderable PDF
        """

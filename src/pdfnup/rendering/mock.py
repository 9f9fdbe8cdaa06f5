"""Mock rasterizer for testing and headless use."""

from collections.abc import Callable

from PIL import Image

from pdfnup.exceptions import RenderError, RendererInitError
from pdfnup.imposition._utils import get_page_dimensions
from pdfnup.imposition.loader import load_document
from pdfnup.rendering.base import Rasterizer, RenderableDocument, RenderablePage


class MockPage(RenderablePage):
    """Renders a blank white image with the page's scaled size."""

    def __init__(self, rasterizer: "MockRasterizer", index: int, size: tuple[float, float]):
        self._rasterizer = rasterizer
        self._index = index
        self._size = size

    @property
    def index(self) -> int:
        return self._index

    def render(self, scale: float) -> Image.Image:
        rasterizer = self._rasterizer
        rasterizer.render_calls.append({"page": self._index, "scale": scale})
        if rasterizer.before_render:
            rasterizer.before_render(self._index)
        if self._index in rasterizer.fail_on_pages:
            raise RenderError("Mock render failure", page_index=self._index)

        width, height = self._size
        return Image.new("RGB", (max(1, round(width * scale)), max(1, round(height * scale))), "white")

    def cleanup(self) -> None:
        self._rasterizer.cleaned_pages.append(self._index)


class MockDocument(RenderableDocument):
    """Page sizes read with pypdf; no pixels are kept."""

    def __init__(self, rasterizer: "MockRasterizer", sizes: list[tuple[float, float]]):
        self._rasterizer = rasterizer
        self._sizes = sizes
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self._sizes)

    def get_page(self, index: int) -> MockPage:
        return MockPage(self._rasterizer, index, self._sizes[index])

    def close(self) -> None:
        self.closed = True
        self._rasterizer.closed_documents += 1


class MockRasterizer(Rasterizer):
    """Mock rasterizer for testing.

    Records setup, render, cleanup and close calls for verification in
    tests, and can be configured to fail setup or specific pages.

    Example:
        rasterizer = MockRasterizer(fail_on_pages={1})
        rasterizer.setup()
        document = rasterizer.open_for_render(pdf_bytes)
        document.get_page(1).render(1.5)  # raises RenderError
    """

    name = "mock"

    def __init__(
        self,
        fail_setup: bool = False,
        fail_on_pages: set[int] | None = None,
        before_render: Callable[[int], None] | None = None,
    ):
        """Initialize mock rasterizer.

        Args:
            fail_setup: If True, setup() raises RendererInitError
            fail_on_pages: 0-indexed pages whose render() raises RenderError
            before_render: Called with the page index at the start of each render
        """
        self.fail_setup = fail_setup
        self.fail_on_pages = fail_on_pages or set()
        self.before_render = before_render
        self.setup_calls = 0
        self.opened: list[int] = []
        self.render_calls: list[dict] = []
        self.cleaned_pages: list[int] = []
        self.closed_documents = 0

    def setup(self) -> None:
        self.setup_calls += 1
        if self.fail_setup:
            raise RendererInitError("Mock rasterizer configured to fail setup")

    def open_for_render(self, data: bytes) -> MockDocument:
        reader = load_document(data)
        sizes = [get_page_dimensions(page) for page in reader.pages]
        self.opened.append(len(sizes))
        return MockDocument(self, sizes)

    def reset(self) -> None:
        """Clear recorded calls."""
        self.setup_calls = 0
        self.opened.clear()
        self.render_calls.clear()
        self.cleaned_pages.clear()
        self.closed_documents = 0

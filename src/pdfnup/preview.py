"""Cancellable preview generation for composed documents.

A PreviewController composes the working document with the current
options and renders the first few sheets on a background thread. Every
new request supersedes the one in flight: the older generation notices its
cancel token at its next checkpoint and stops without publishing anything,
so listeners only ever see the outcome of the latest request.

Usage:
    controller = PreviewController(get_rasterizer("pdf2image"), on_change=print)
    controller.request(pdf_bytes, ImpositionOptions(layout=Layout.FOUR_UP))
    snapshot = controller.wait()
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from PIL import Image

from pdfnup.config import ImpositionOptions
from pdfnup.constants import LETTER, PREVIEW_MAX_SHEETS, PREVIEW_RENDER_SCALE
from pdfnup.exceptions import (
    EncryptedError,
    InvalidPageGeometry,
    ParseError,
    RenderError,
    RendererInitError,
    user_message,
)
from pdfnup.imposition.compose import compose
from pdfnup.logging_config import get_logger
from pdfnup.rendering.base import Rasterizer

logger = get_logger(__name__)


class PreviewState(str, Enum):
    """Preview lifecycle states."""

    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class ErrorKind(str, Enum):
    """Failure classes, each with its own user message."""

    RENDERER = "renderer"  # rasterizer unavailable; retry may help
    DOCUMENT = "document"  # invalid, encrypted or degenerate input
    RENDER = "render"  # one sheet failed to rasterize
    GENERIC = "generic"


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception to its failure class."""
    if isinstance(error, RendererInitError):
        return ErrorKind.RENDERER
    if isinstance(error, (ParseError, EncryptedError, InvalidPageGeometry)):
        return ErrorKind.DOCUMENT
    if isinstance(error, RenderError):
        return ErrorKind.RENDER
    return ErrorKind.GENERIC


@dataclass(frozen=True)
class PreviewSnapshot:
    """What the preview shows at one moment.

    Attributes:
        state: Lifecycle state
        request_id: Request this snapshot belongs to (0 before any request)
        options: Options of that request
        images: Rendered sheets; on a RENDER failure, those rendered before it
        total_sheets: Sheets in the composed document, once known (also on failure)
        error: User-facing message when FAILED
        error_kind: Failure class when FAILED
    """

    state: PreviewState = PreviewState.IDLE
    request_id: int = 0
    options: ImpositionOptions | None = None
    images: tuple[Image.Image, ...] = ()
    total_sheets: int = 0
    error: str | None = None
    error_kind: ErrorKind | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (PreviewState.READY, PreviewState.FAILED)

    @property
    def hidden_sheets(self) -> int:
        """Sheets in the document that were not rendered."""
        return max(0, self.total_sheets - len(self.images))


@dataclass
class _Progress:
    """What one generation has produced so far."""

    images: list[Image.Image] = field(default_factory=list)
    total_sheets: int = 0


class PreviewController:
    """Drives preview generation and publishes snapshots to a listener."""

    def __init__(
        self,
        rasterizer: Rasterizer,
        max_sheets: int = PREVIEW_MAX_SHEETS,
        render_scale: float = PREVIEW_RENDER_SCALE,
        page_size: tuple[float, float] = LETTER,
        on_change: Callable[[PreviewSnapshot], None] | None = None,
    ):
        """Initialize the controller and set up the rasterizer once.

        Args:
            rasterizer: Backend used to render sheets
            max_sheets: Most sheets rendered per request
            render_scale: Pixels per PDF point
            page_size: Base page size passed to composition
            on_change: Called with every published snapshot
        """
        self.rasterizer = rasterizer
        self.max_sheets = max_sheets
        self.render_scale = render_scale
        self.page_size = page_size
        self.on_change = on_change

        self._lock = threading.RLock()
        self._cancel: threading.Event | None = None
        self._workers: list[threading.Thread] = []
        self._request_id = 0
        self._last_request: tuple[bytes, ImpositionOptions] | None = None
        self._snapshot = PreviewSnapshot()
        self._closed = False

        self._init_error: RendererInitError | None = None
        self._setup_rasterizer()

    @property
    def snapshot(self) -> PreviewSnapshot:
        return self._snapshot

    @property
    def state(self) -> PreviewState:
        return self._snapshot.state

    def _setup_rasterizer(self) -> None:
        try:
            self.rasterizer.setup()
        except RendererInitError as e:
            logger.warning("Preview renderer unavailable: %s", e)
            self._init_error = e
        else:
            self._init_error = None

    def _publish(self, snapshot: PreviewSnapshot) -> None:
        # Callers hold self._lock
        self._snapshot = snapshot
        logger.debug("Preview request %d: %s", snapshot.request_id, snapshot.state.value)
        if self.on_change:
            self.on_change(snapshot)

    def request(self, data: bytes, options: ImpositionOptions) -> int:
        """Start generating a preview, superseding any generation in flight.

        Returns:
            The request id carried by the snapshots of this request
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("PreviewController is closed")

            if self._cancel is not None:
                self._cancel.set()
            token = threading.Event()
            self._cancel = token
            self._request_id += 1
            request_id = self._request_id
            self._last_request = (data, options)

            self._publish(PreviewSnapshot(
                state=PreviewState.GENERATING,
                request_id=request_id,
                options=options,
            ))

            worker = threading.Thread(
                target=self._run,
                args=(token, request_id, data, options),
                name=f"pdfnup-preview-{request_id}",
                daemon=True,
            )
            self._workers = [w for w in self._workers if w.is_alive()]
            self._workers.append(worker)
        worker.start()
        return request_id

    def retry(self) -> int | None:
        """Re-run the last request, setting up the rasterizer again if it failed.

        Returns:
            The new request id, or None if nothing was requested yet
        """
        with self._lock:
            last = self._last_request
            if self._init_error is not None:
                self._setup_rasterizer()
        if last is None:
            return None
        return self.request(*last)

    def wait(self, timeout: float | None = None) -> PreviewSnapshot:
        """Block until every started generation has finished or been abandoned."""
        with self._lock:
            workers = list(self._workers)
        for worker in workers:
            worker.join(timeout)
        return self._snapshot

    def close(self) -> None:
        """Cancel any generation in flight; no further snapshots are published."""
        with self._lock:
            self._closed = True
            if self._cancel is not None:
                self._cancel.set()

    def _run(
        self,
        token: threading.Event,
        request_id: int,
        data: bytes,
        options: ImpositionOptions,
    ) -> None:
        progress = _Progress()
        try:
            completed = self._generate(token, data, options, progress)
        except Exception as e:
            if token.is_set():
                logger.debug("Preview request %d failed after being superseded: %s", request_id, e)
                return
            logger.debug("Preview request %d failed: %s", request_id, e, exc_info=True)
            snapshot = PreviewSnapshot(
                state=PreviewState.FAILED,
                request_id=request_id,
                options=options,
                images=tuple(progress.images),
                total_sheets=progress.total_sheets,
                error=user_message(e),
                error_kind=classify_error(e),
            )
        else:
            if not completed:
                logger.debug("Preview request %d abandoned", request_id)
                return
            snapshot = PreviewSnapshot(
                state=PreviewState.READY,
                request_id=request_id,
                options=options,
                images=tuple(progress.images),
                total_sheets=progress.total_sheets,
            )

        with self._lock:
            # Re-checked under the lock: a newer request may have started meanwhile
            if token.is_set():
                logger.debug("Preview request %d superseded before publishing", request_id)
                return
            self._publish(snapshot)

    def _generate(
        self,
        token: threading.Event,
        data: bytes,
        options: ImpositionOptions,
        progress: _Progress,
    ) -> bool:
        """Compose and render; returns False if cancelled.

        The sheet count and rendered images are recorded on `progress` as
        soon as they are known, so a failure can still report them.
        """
        if self._init_error is not None:
            raise self._init_error

        composed = compose(data, options, self.page_size)
        if token.is_set():
            return False

        document = self.rasterizer.open_for_render(composed)
        try:
            if token.is_set():
                return False

            progress.total_sheets = document.page_count
            for index in range(min(progress.total_sheets, self.max_sheets)):
                page = document.get_page(index)
                try:
                    image = page.render(self.render_scale)
                finally:
                    page.cleanup()
                if token.is_set():
                    return False
                progress.images.append(image)

            return True
        finally:
            document.close()


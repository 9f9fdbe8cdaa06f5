"""Unified exception hierarchy for pdfnup.

All pdfnup exceptions inherit from PdfNupError, enabling:
- Catching all pdfnup errors with `except PdfNupError`
- Error context preservation via the `context` attribute
- Causality chains via `raise ... from e` patterns
- A distinct user-facing message per error class via `user_message()`
"""

from typing import Any


class PdfNupError(Exception):
    """Base exception for all pdfnup errors.

    Args:
        message: Human-readable error description
        context: Optional dict of contextual information (file, page, etc.)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base} [{details}]"
        return base


class ConfigError(PdfNupError):
    """Raised when configuration is invalid or cannot be loaded."""


class ValidationError(PdfNupError):
    """Raised when an uploaded file is rejected before processing."""


class ParseError(PdfNupError):
    """Raised when a PDF cannot be parsed, even leniently."""


class EncryptedError(PdfNupError):
    """Raised when a PDF is password-protected."""


class InvalidPageGeometry(PdfNupError):
    """Raised when a source page has a zero or negative dimension."""


class StorageExhausted(PdfNupError):
    """Raised when the working-document store rejects a payload.

    Args:
        message: Human-readable error description
        attempted_size: Size in bytes of the rejected payload
    """

    def __init__(self, message: str, attempted_size: int, context: dict[str, Any] | None = None):
        super().__init__(message, context={"attempted_size": attempted_size, **(context or {})})
        self.attempted_size = attempted_size


class RendererInitError(PdfNupError):
    """Raised when the preview rasterizer cannot be initialized."""


class RenderError(PdfNupError):
    """Raised when a single page fails to rasterize."""

    def __init__(self, message: str, page_index: int, context: dict[str, Any] | None = None):
        super().__init__(message, context={"page": page_index + 1, **(context or {})})
        self.page_index = page_index


class ProcessingError(PdfNupError):
    """Raised when reading or writing files around composition fails."""


def format_file_size(num_bytes: int) -> str:
    """Human-readable file size."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


def user_message(error: BaseException) -> str:
    """Return the message shown to a user for an error.

    Classification is by exception type; library error text is never
    surfaced. Validation, configuration and file errors are raised with
    user-ready messages and are passed through.
    """
    if isinstance(error, RendererInitError):
        return "Failed to load the PDF renderer. Please retry."
    if isinstance(error, EncryptedError):
        return "This PDF is password-protected. Remove the password and try again."
    if isinstance(error, ParseError):
        return "Invalid PDF. The file may be corrupted or use an unsupported structure."
    if isinstance(error, InvalidPageGeometry):
        return "The PDF contains a page with no usable size."
    if isinstance(error, StorageExhausted):
        return (
            f"Not enough storage to keep this PDF ({format_file_size(error.attempted_size)}). "
            "Free some space or use a smaller file."
        )
    if isinstance(error, RenderError):
        return f"Failed to render preview of page {error.page_index + 1}."
    if isinstance(error, (ValidationError, ConfigError, ProcessingError)):
        return error.args[0] if error.args else "Invalid input."
    return "Failed to process the PDF. Please try again."

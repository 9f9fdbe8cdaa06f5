"""Load source PDFs, retrying with progressively more lenient parsing.

The fallback ladder is a table of parse configurations tried in order:

1. ``strict``: pypdf in strict mode
2. ``lenient``: pypdf tolerating broken objects and xref entries
3. ``recovered``: lenient parsing of the bytes trimmed to the span between
   the ``%PDF-`` header and the final ``%%EOF`` marker, for files with
   junk prepended or appended by mail gateways and download managers

Encrypted documents are not retried: an empty user password is tried once,
then EncryptedError is raised.
"""

import io
from dataclasses import dataclass

from pypdf import PasswordType, PdfReader
from pypdf.errors import DependencyError, PyPdfError

from pdfnup.exceptions import EncryptedError, ParseError
from pdfnup.logging_config import get_logger

logger = get_logger(__name__)

PDF_HEADER = b"%PDF-"
PDF_EOF = b"%%EOF"

# Exceptions pypdf lets escape from malformed input
PARSE_FAILURES = (PyPdfError, ValueError, KeyError, TypeError, AttributeError, IndexError)


@dataclass(frozen=True)
class LoadAttempt:
    """One rung of the parse fallback ladder."""

    name: str
    strict: bool
    recover: bool = False


LOAD_ATTEMPTS: tuple[LoadAttempt, ...] = (
    LoadAttempt("strict", strict=True),
    LoadAttempt("lenient", strict=False),
    LoadAttempt("recovered", strict=False, recover=True),
)


def recover_pdf_body(data: bytes) -> bytes:
    """Trim bytes outside the ``%PDF-`` header and the last ``%%EOF`` marker."""
    start = data.find(PDF_HEADER)
    if start < 0:
        start = 0
    end = data.rfind(PDF_EOF)
    if end < start:
        return data[start:]
    return data[start:end + len(PDF_EOF)]


def _open(data: bytes, attempt: LoadAttempt) -> PdfReader:
    if attempt.recover:
        data = recover_pdf_body(data)
    reader = PdfReader(io.BytesIO(data), strict=attempt.strict)

    if reader.is_encrypted:
        try:
            result = reader.decrypt("")
        except (DependencyError, NotImplementedError) as e:
            raise EncryptedError(
                "PDF is encrypted with an unsupported method", context={"attempt": attempt.name}
            ) from e
        if result == PasswordType.NOT_DECRYPTED:
            raise EncryptedError("PDF is password-protected", context={"attempt": attempt.name})

    # Force the page tree to be resolved so broken structure fails here
    len(reader.pages)
    return reader


def load_document(
    data: bytes,
    attempts: tuple[LoadAttempt, ...] = LOAD_ATTEMPTS,
) -> PdfReader:
    """
    Parse PDF bytes, walking the fallback ladder until one attempt succeeds.

    Args:
        data: Raw PDF bytes
        attempts: Parse configurations to try, in order

    Returns:
        A PdfReader with its page tree resolved

    Raises:
        EncryptedError: If the document is password-protected
        ParseError: If every attempt fails
    """
    if not data:
        raise ParseError("PDF is empty")

    last_error: Exception | None = None
    for attempt in attempts:
        try:
            reader = _open(data, attempt)
        except EncryptedError:
            raise
        except PARSE_FAILURES as e:
            logger.debug("Parse attempt '%s' failed: %s", attempt.name, e)
            last_error = e
            continue

        if attempt is not attempts[0]:
            logger.info("Recovered malformed PDF using '%s' parsing", attempt.name)
        return reader

    raise ParseError(
        f"PDF could not be parsed after {len(attempts)} attempt(s)",
        context={"attempts": ", ".join(a.name for a in attempts)},
    ) from last_error


def count_pages(data: bytes) -> int:
    """Return the number of pages in a PDF."""
    return len(load_document(data).pages)

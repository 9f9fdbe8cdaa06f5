"""Upload validation for pdfnup.

Rejects files before any parsing work is done: wrong type, empty, or over
the size ceiling.
"""

from dataclasses import dataclass, field

from pdfnup.constants import MAX_UPLOAD_BYTES
from pdfnup.exceptions import ValidationError
from pdfnup.imposition.loader import PDF_HEADER

# pypdf accepts a header anywhere in the first kilobyte
_HEADER_WINDOW = 1024


@dataclass
class ValidationResult:
    """Result of upload validation.

    Attributes:
        valid: True if no errors were found
        errors: List of error messages (fatal issues)
        warnings: List of warning messages (non-fatal issues)
    """

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error and mark result as invalid."""
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (does not affect validity)."""
        self.warnings.append(message)


def size_limit_message(max_size: int) -> str:
    """Error message for files over the size ceiling."""
    return f"File size exceeds {max_size / (1024 * 1024):g}MB limit"


def has_pdf_header(data: bytes) -> bool:
    """Check for the %PDF- marker near the start of the data."""
    return PDF_HEADER in data[:_HEADER_WINDOW]


def validate_upload(file_name: str, data: bytes, max_size: int = MAX_UPLOAD_BYTES) -> ValidationResult:
    """Validate an uploaded file's name, size and type.

    Args:
        file_name: Declared file name
        data: File contents
        max_size: Largest accepted size in bytes

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()
    named_pdf = file_name.lower().endswith(".pdf")

    if not data:
        result.add_error("File is empty")
        return result

    if len(data) > max_size:
        result.add_error(size_limit_message(max_size))

    if not has_pdf_header(data):
        if named_pdf:
            result.add_error("File does not look like a PDF")
        else:
            result.add_error("Please upload a PDF file")
    elif not named_pdf:
        result.add_warning(f"'{file_name}' has PDF content but no .pdf extension")

    return result


def validate_upload_or_raise(file_name: str, data: bytes, max_size: int = MAX_UPLOAD_BYTES) -> ValidationResult:
    """Validate an upload and raise ValidationError on the first error."""
    result = validate_upload(file_name, data, max_size)
    if not result.valid:
        raise ValidationError(result.errors[0], context={"file": file_name})
    return result

"""File-level processing for pdfnup: open uploads, export and save previews."""

import re
from dataclasses import dataclass
from pathlib import Path

from pdfnup.config import ImpositionOptions, Layout, Orientation
from pdfnup.constants import LETTER, MAX_UPLOAD_BYTES
from pdfnup.exceptions import ProcessingError, ValidationError
from pdfnup.imposition import compose, count_pages, output_page_count
from pdfnup.logging_config import get_logger
from pdfnup.preview import PreviewSnapshot
from pdfnup.validation import size_limit_message, validate_upload_or_raise

logger = get_logger(__name__)

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


@dataclass
class UploadedDocument:
    """A validated source document."""

    data: bytes
    file_name: str
    page_count: int

    @property
    def size(self) -> int:
        return len(self.data)


def base_name(file_name: str) -> str:
    """File name without a trailing .pdf (any case)."""
    return _PDF_SUFFIX.sub("", Path(file_name).name)


def output_filename(file_name: str, layout: Layout, orientation: Orientation) -> str:
    """Name of the exported file, e.g. ``report-2-up-landscape.pdf``."""
    return f"{base_name(file_name)}-{layout.value}-{orientation.value}.pdf"


def load_upload(data: bytes, file_name: str, max_size: int = MAX_UPLOAD_BYTES) -> UploadedDocument:
    """
    Validate uploaded bytes and count their pages.

    Raises:
        ValidationError: If the file is rejected or has no pages
        ParseError: If the PDF cannot be parsed
        EncryptedError: If the PDF is password-protected
    """
    result = validate_upload_or_raise(file_name, data, max_size)
    for warning in result.warnings:
        logger.warning("%s", warning)

    page_count = count_pages(data)
    if page_count == 0:
        raise ValidationError("PDF has no pages", context={"file": file_name})

    return UploadedDocument(data=data, file_name=file_name, page_count=page_count)


def read_upload(path: Path, max_size: int = MAX_UPLOAD_BYTES) -> UploadedDocument:
    """Read a PDF from disk and validate it like an upload."""
    if not path.is_file():
        raise ProcessingError(f"Input file does not exist: {path}")

    size = path.stat().st_size
    if size > max_size:
        # Reject before reading the whole file into memory
        raise ValidationError(size_limit_message(max_size), context={"file": path.name})

    return load_upload(path.read_bytes(), path.name, max_size)


def export(
    document: UploadedDocument,
    options: ImpositionOptions,
    output_dir: Path,
    page_size: tuple[float, float] = LETTER,
    dry_run: bool = False,
) -> Path | None:
    """
    Compose a document and write it to the output directory.

    Args:
        document: Validated source document
        options: Layout, spacing and orientation
        output_dir: Directory for the output file
        page_size: Base page size in points
        dry_run: If True, only describe what would be done

    Returns:
        Path to the output file, or None if dry run
    """
    output_path = output_dir / output_filename(document.file_name, options.layout, options.orientation)
    sheets = output_page_count(document.page_count, options.layout)

    if dry_run:
        logger.info(
            "[dry-run] Would combine %d page(s) into %d sheet(s) -> %s",
            document.page_count,
            sheets,
            output_path,
        )
        return None

    composed = compose(document.data, options, page_size)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        # Write to a temporary name so a failed write never leaves a partial file
        tmp_path = output_path.with_name(output_path.name + ".part")
        tmp_path.write_bytes(composed)
        tmp_path.replace(output_path)
    except OSError as e:
        raise ProcessingError(f"Could not write {output_path}: {e}", context={"path": output_path}) from e

    logger.info("Saved: %s", output_path)
    return output_path


def save_previews(snapshot: PreviewSnapshot, output_dir: Path, file_name: str) -> list[Path]:
    """Write the rendered sheets of a snapshot as PNG files."""
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = base_name(file_name)
    paths = []
    for index, image in enumerate(snapshot.images, start=1):
        path = output_dir / f"{stem}-preview-{index}.png"
        image.save(path, format="PNG")
        paths.append(path)
        logger.debug("Saved preview: %s", path)
    return paths

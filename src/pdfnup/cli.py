"""Command-line interface for pdfnup."""

import argparse
import sys
from pathlib import Path

from pdfnup import __version__
from pdfnup.config import (
    Config,
    ConfigError,
    ImpositionOptions,
    Layout,
    Orientation,
    Spacing,
    load_config,
    parse_options,
)
from pdfnup.exceptions import PdfNupError, ProcessingError, format_file_size, user_message
from pdfnup.logging_config import get_logger

logger = get_logger(__name__)

COMMANDS = ("open", "info", "preview", "export", "clear")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pdfnup",
        description="Tile 2 or 4 PDF pages onto each sheet (N-up imposition).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pdfnup open report.pdf                        Validate and keep report.pdf as the working document
  pdfnup info -l 4-up                           Show how many sheets 4-up would produce
  pdfnup preview -d ./previews                  Render the first sheets to PNG
  pdfnup export -l 4-up -O portrait -o ./out    Write report-4-up-portrait.pdf
  pdfnup export -i other.pdf --dry-run          Work on a file directly, without storing it
  pdfnup clear                                  Forget the working document
""",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"pdfnup {__version__}",
    )

    parser.add_argument(
        "command",
        choices=COMMANDS,
        help="open (store a PDF), info, preview, export, or clear",
    )

    parser.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="PDF to open (with 'open')",
    )

    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        help="Use this PDF instead of the stored working document",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )

    # Layout selection
    parser.add_argument(
        "-l",
        "--layout",
        choices=[e.value for e in Layout],
        help="Pages per sheet (default from config: 2-up)",
    )

    parser.add_argument(
        "-s",
        "--spacing",
        choices=[e.value for e in Spacing],
        help="Margin preset (default from config: regular)",
    )

    parser.add_argument(
        "-O",
        "--orientation",
        choices=[e.value for e in Orientation],
        help="Sheet orientation (default from config: landscape)",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("."),
        help="Output directory for 'export' (default: current directory)",
    )

    parser.add_argument(
        "-d",
        "--preview-dir",
        type=Path,
        default=Path("."),
        help="Output directory for 'preview' images (default: current directory)",
    )

    parser.add_argument(
        "--store-dir",
        type=Path,
        help="Directory holding the working document (overrides config)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what 'export' would do without writing anything",
    )

    # Logging options
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for verbose, -vv for debug)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to file (includes all levels)",
    )

    return parser


def _options(parsed: argparse.Namespace, config: Config) -> ImpositionOptions:
    """Command-line selections over config defaults."""
    overrides = {
        key: value
        for key, value in (
            ("layout", parsed.layout),
            ("spacing", parsed.spacing),
            ("orientation", parsed.orientation),
        )
        if value is not None
    }
    return parse_options(overrides, base=config.defaults)


def _store(parsed: argparse.Namespace, config: Config):
    from pdfnup.storage import WorkingDocumentStore

    root = parsed.store_dir or config.storage.path
    return WorkingDocumentStore(root, quota_bytes=config.upload.max_size_bytes)


def _working_document(parsed: argparse.Namespace, config: Config):
    """The -i file if given, else the stored working document."""
    from pdfnup.processor import UploadedDocument, read_upload

    if parsed.input:
        return read_upload(parsed.input, config.upload.max_size_bytes)

    stored = _store(parsed, config).get()
    if stored is None:
        raise ProcessingError("No working document. Run 'pdfnup open FILE' first or pass -i FILE.")
    return UploadedDocument(data=stored.data, file_name=stored.file_name, page_count=stored.page_count)


def cmd_open(parsed: argparse.Namespace, config: Config) -> int:
    """Validate a PDF and keep it as the working document."""
    from pdfnup.processor import read_upload

    if not parsed.file:
        logger.error("'open' requires a PDF file")
        return 1

    document = read_upload(parsed.file, config.upload.max_size_bytes)
    _store(parsed, config).store(document.data, document.file_name, document.page_count)

    plural = "s" if document.page_count != 1 else ""
    logger.info(
        "%s (%s, %d page%s)",
        document.file_name,
        format_file_size(document.size),
        document.page_count,
        plural,
    )
    return 0


def cmd_info(parsed: argparse.Namespace, config: Config) -> int:
    """Show page and sheet counts for the current selection."""
    from pdfnup.imposition import output_page_count

    document = _working_document(parsed, config)
    options = _options(parsed, config)
    sheets = output_page_count(document.page_count, options.layout)

    logger.info("File:    %s", document.file_name)
    logger.info("Size:    %s", format_file_size(document.size))
    logger.info("Pages:   %d", document.page_count)
    logger.info(
        "Sheets:  %d (%s, %s, %s)",
        sheets,
        options.layout.value,
        options.orientation.value,
        options.spacing.value,
    )
    return 0


def cmd_preview(parsed: argparse.Namespace, config: Config) -> int:
    """Render the first sheets of the composed document to PNG files."""
    from pdfnup.imposition import resolve_page_size
    from pdfnup.preview import PreviewController, PreviewState
    from pdfnup.processor import save_previews
    from pdfnup.rendering import get_rasterizer

    document = _working_document(parsed, config)
    options = _options(parsed, config)

    rasterizer = get_rasterizer(config.preview.backend.value, poppler_path=config.preview.poppler_path)
    controller = PreviewController(
        rasterizer,
        max_sheets=config.preview.max_sheets,
        render_scale=config.preview.scale,
        page_size=resolve_page_size(config.page_size),
    )
    try:
        controller.request(document.data, options)
        snapshot = controller.wait()
    finally:
        controller.close()

    if snapshot.state != PreviewState.READY:
        logger.error("%s", snapshot.error or "Preview did not complete")
        return 1

    for path in save_previews(snapshot, parsed.preview_dir, document.file_name):
        logger.info("Saved: %s", path)
    if snapshot.hidden_sheets:
        plural = "s" if snapshot.hidden_sheets != 1 else ""
        logger.info("+%d more sheet%s", snapshot.hidden_sheets, plural)
    return 0


def cmd_export(parsed: argparse.Namespace, config: Config) -> int:
    """Compose the document and write the result."""
    from pdfnup.imposition import resolve_page_size
    from pdfnup.processor import export

    document = _working_document(parsed, config)
    export(
        document,
        _options(parsed, config),
        parsed.output,
        page_size=resolve_page_size(config.page_size),
        dry_run=parsed.dry_run,
    )
    return 0


def cmd_clear(parsed: argparse.Namespace, config: Config) -> int:
    """Forget the working document."""
    _store(parsed, config).clear()
    logger.info("Working document cleared")
    return 0


HANDLERS = {
    "open": cmd_open,
    "info": cmd_info,
    "preview": cmd_preview,
    "export": cmd_export,
    "clear": cmd_clear,
}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Setup logging based on CLI flags
    from pdfnup.logging_config import setup_logging

    setup_logging(
        verbosity=parsed.verbose,
        quiet=parsed.quiet,
        log_file=parsed.log_file,
    )

    try:
        config = load_config(parsed.config)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except FileNotFoundError:
        logger.error("Configuration file not found: %s", parsed.config)
        return 1

    try:
        return HANDLERS[parsed.command](parsed, config)
    except PdfNupError as e:
        logger.debug("%s failed: %s", parsed.command, e, exc_info=True)
        logger.error("%s", user_message(e))
        return 1
    except Exception as e:
        logger.debug("%s failed unexpectedly", parsed.command, exc_info=True)
        logger.error("%s", user_message(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Shared fixtures for pdfnup tests."""

import io
import shutil
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml
from pypdf import PdfWriter

from pdfnup.logging_config import LOGGER_NAME


def build_pdf(page_count: int = 1, sizes: list[tuple[float, float]] | None = None) -> bytes:
    """Build a PDF with blank pages.

    Args:
        page_count: Number of letter-size pages (ignored if sizes is given)
        sizes: Explicit (width, height) per page
    """
    writer = PdfWriter()
    for width, height in sizes or [(612, 792)] * page_count:
        writer.add_blank_page(width=width, height=height)
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


def build_text_pdf(page_count: int = 1) -> bytes:
    """Build a PDF whose pages each draw "Page N" in Helvetica.

    Written by hand so the xref offsets are exact and strict parsing succeeds.
    """
    bodies = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        None,
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    kids = []
    for number in range(1, page_count + 1):
        page_id = len(bodies) + 1
        kids.append(f"{page_id} 0 R")
        stream = f"BT /F1 24 Tf 72 700 Td (Page {number}) Tj ET".encode()
        bodies.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>".encode()
        )
        bodies.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")
    bodies[1] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {page_count} >>".encode()

    output = bytearray(b"%PDF-1.4\n")
    offsets = []
    for object_id, body in enumerate(bodies, start=1):
        offsets.append(len(output))
        output += f"{object_id} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(output)
    output += f"xref\n0 {len(bodies) + 1}\n".encode()
    output += b"0000000000 65535 f \n"
    for offset in offsets:
        output += f"{offset:010d} 00000 n \n".encode()
    output += f"trailer\n<< /Size {len(bodies) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode()
    return bytes(output)


# === Path/Directory Fixtures ===

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# === PDF Fixtures ===

@pytest.fixture
def make_pdf():
    """Factory building PDF bytes: make_pdf(5) or make_pdf(sizes=[(792, 612)])."""
    return build_pdf


@pytest.fixture
def make_text_pdf():
    """Factory building PDFs with text content: make_text_pdf(3)."""
    return build_text_pdf


@pytest.fixture
def missing_mediabox_pdf():
    """Two text pages, the first without a /MediaBox (padded so xref offsets hold)."""
    mediabox = b"/MediaBox [0 0 612 792] "
    return build_text_pdf(2).replace(mediabox, b" " * len(mediabox), 1)


@pytest.fixture
def pdf_bytes():
    """A single letter-size page."""
    return build_pdf(1)


@pytest.fixture
def temp_pdf(temp_dir):
    """A single-page PDF on disk."""
    pdf_path = temp_dir / "test.pdf"
    pdf_path.write_bytes(build_pdf(1))
    return pdf_path


@pytest.fixture
def temp_multi_page_pdf(temp_dir):
    """A 6-page PDF on disk."""
    pdf_path = temp_dir / "multi_page.pdf"
    pdf_path.write_bytes(build_pdf(6))
    return pdf_path


@pytest.fixture
def encrypted_pdf():
    """A PDF that needs a user password."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    writer.encrypt("secret")
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


# === Mock pypdf PageObject Fixtures ===

def _mock_page(width, height, left=0.0, bottom=0.0):
    page = MagicMock()
    mediabox = MagicMock()
    mediabox.width = width
    mediabox.height = height
    mediabox.left = left
    mediabox.bottom = bottom
    page.mediabox = mediabox
    return page


@pytest.fixture
def mock_page():
    """Create a mock pypdf PageObject (portrait letter size)."""
    return _mock_page(612.0, 792.0)


@pytest.fixture
def mock_landscape_page():
    """Create a mock landscape PageObject."""
    return _mock_page(792.0, 612.0)


@pytest.fixture
def mock_offset_page():
    """A letter page whose mediabox starts at (50, 100)."""
    return _mock_page(612.0, 792.0, left=50.0, bottom=100.0)


# === Config Fixtures ===

@pytest.fixture
def full_config_dict(temp_dir):
    """Configuration dictionary with every section."""
    return {
        "version": 1,
        "defaults": {
            "layout": "4-up",
            "spacing": "snug",
            "orientation": "portrait",
        },
        "page_size": ["210mm", "297mm"],
        "preview": {
            "backend": "mock",
            "max_sheets": 2,
            "scale": 1.0,
        },
        "upload": {"max_size_mb": 5},
        "storage": {"path": str(temp_dir / "store")},
    }


@pytest.fixture
def full_config_file(temp_dir, full_config_dict):
    """Create a temporary full config file."""
    config_path = temp_dir / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(full_config_dict, f)
    return config_path


@pytest.fixture
def mock_config_file(temp_dir):
    """Config using the mock rasterizer and a store under temp_dir."""
    config_path = temp_dir / "mock.yaml"
    with open(config_path, "w") as f:
        yaml.dump(
            {
                "preview": {"backend": "mock"},
                "storage": {"path": str(temp_dir / "store")},
            },
            f,
        )
    return config_path


@pytest.fixture(autouse=True)
def reset_pdfnup_logging():
    """Remove handlers added by setup_logging between tests."""
    import logging

    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

"""Tests for pdfnup.imposition.loader module."""

import logging
from unittest.mock import patch

import pytest
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from pdfnup.exceptions import EncryptedError, ParseError
from pdfnup.imposition.loader import (
    LOAD_ATTEMPTS,
    LoadAttempt,
    count_pages,
    load_document,
    recover_pdf_body,
)


class TestLoadAttempts:
    """Test the fallback ladder table."""

    def test_order(self):
        assert [a.name for a in LOAD_ATTEMPTS] == ["strict", "lenient", "recovered"]

    def test_strictness_decreases(self):
        assert LOAD_ATTEMPTS[0].strict is True
        assert all(not a.strict for a in LOAD_ATTEMPTS[1:])
        assert LOAD_ATTEMPTS[-1].recover is True


class TestRecoverPdfBody:
    """Test trimming junk around the PDF body."""

    def test_trims_prefix_and_suffix(self):
        assert recover_pdf_body(b"junk%PDF-1.7 body %%EOF trailing") == b"%PDF-1.7 body %%EOF"

    def test_uses_last_eof(self):
        data = b"%PDF-1.7 a %%EOF b %%EOF junk"
        assert recover_pdf_body(data) == b"%PDF-1.7 a %%EOF b %%EOF"

    def test_no_eof(self):
        assert recover_pdf_body(b"xx%PDF-1.7 body") == b"%PDF-1.7 body"


class TestLoadDocument:
    """Test parsing with the fallback ladder."""

    def test_valid_pdf(self, make_pdf):
        reader = load_document(make_pdf(3))
        assert isinstance(reader, PdfReader)
        assert len(reader.pages) == 3

    def test_empty_raises(self):
        with pytest.raises(ParseError, match="empty"):
            load_document(b"")

    def test_garbage_raises_parse_error(self):
        with pytest.raises(ParseError) as exc_info:
            load_document(b"definitely not a pdf" * 50)
        assert exc_info.value.context["attempts"] == "strict, lenient, recovered"

    def test_junk_around_pdf_recovers(self, make_pdf):
        data = b"From: gateway\r\n" * 200 + make_pdf(2) + b"\r\n--boundary--\r\n"
        assert len(load_document(data).pages) == 2

    def test_falls_back_to_next_attempt(self, make_pdf, caplog):
        real_reader = PdfReader.__new__(PdfReader)
        with patch(
            "pdfnup.imposition.loader._open",
            side_effect=[PdfReadError("broken xref"), real_reader],
        ) as mock_open:
            with caplog.at_level(logging.INFO, logger="pdfnup"):
                result = load_document(make_pdf(1))

        assert result is real_reader
        assert mock_open.call_count == 2
        assert mock_open.call_args_list[1][0][1].name == "lenient"
        assert "lenient" in caplog.text

    def test_custom_attempts(self):
        attempts = (LoadAttempt("only", strict=True),)
        with pytest.raises(ParseError) as exc_info:
            load_document(b"garbage", attempts=attempts)
        assert exc_info.value.context["attempts"] == "only"

    def test_parse_error_chains_cause(self):
        with pytest.raises(ParseError) as exc_info:
            load_document(b"garbage")
        assert exc_info.value.__cause__ is not None

    def test_encrypted_raises(self, encrypted_pdf):
        with pytest.raises(EncryptedError):
            load_document(encrypted_pdf)

    def test_encrypted_not_retried(self, make_pdf):
        with patch(
            "pdfnup.imposition.loader._open",
            side_effect=EncryptedError("PDF is password-protected"),
        ) as mock_open:
            with pytest.raises(EncryptedError):
                load_document(make_pdf(1))
        assert mock_open.call_count == 1


class TestCountPages:
    """Test page counting."""

    def test_count(self, make_pdf):
        assert count_pages(make_pdf(4)) == 4

    def test_invalid(self):
        with pytest.raises(ParseError):
            count_pages(b"%PDF-1.4 nothing else")

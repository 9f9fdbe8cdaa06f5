"""Tests for pdfnup.cli module."""

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pdfnup.cli import create_parser, main
from pdfnup.exceptions import RendererInitError


class TestCreateParser:
    """Test argument parser creation."""

    def test_parser_creation(self):
        assert create_parser().prog == "pdfnup"

    def test_open_command(self):
        args = create_parser().parse_args(["open", "report.pdf"])
        assert args.command == "open"
        assert args.file == Path("report.pdf")

    def test_layout_flags(self):
        args = create_parser().parse_args(["export", "-l", "4-up", "-s", "snug", "-O", "portrait"])
        assert args.layout == "4-up"
        assert args.spacing == "snug"
        assert args.orientation == "portrait"

    def test_invalid_layout(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["export", "-l", "3-up"])

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["print"])

    def test_defaults(self):
        args = create_parser().parse_args(["info"])
        assert args.layout is None
        assert args.output == Path(".")
        assert args.dry_run is False
        assert args.verbose == 0

    def test_verbose_count(self):
        assert create_parser().parse_args(["info", "-vv"]).verbose == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["-V"])
        assert exc_info.value.code == 0
        assert "pdfnup" in capsys.readouterr().out


class TestMain:
    """Test running commands through main()."""

    def _run(self, config, *args):
        return main([*args, "-c", str(config)])

    def test_open_and_info(self, mock_config_file, temp_multi_page_pdf, caplog):
        assert self._run(mock_config_file, "open", str(temp_multi_page_pdf)) == 0

        with caplog.at_level(logging.INFO, logger="pdfnup"):
            assert self._run(mock_config_file, "info", "-l", "4-up") == 0
        assert "Pages:   6" in caplog.text
        assert "Sheets:  2 (4-up, landscape, regular)" in caplog.text

    def test_open_requires_file(self, mock_config_file):
        assert self._run(mock_config_file, "open") == 1

    def test_open_rejects_non_pdf(self, mock_config_file, temp_dir, caplog):
        notes = temp_dir / "notes.txt"
        notes.write_text("hello")
        assert self._run(mock_config_file, "open", str(notes)) == 1
        assert "Please upload a PDF file" in caplog.text

    def test_info_without_document(self, mock_config_file, caplog):
        assert self._run(mock_config_file, "info") == 1
        assert "No working document" in caplog.text

    def test_info_with_input(self, mock_config_file, temp_pdf, caplog):
        with caplog.at_level(logging.INFO, logger="pdfnup"):
            assert self._run(mock_config_file, "info", "-i", str(temp_pdf)) == 0
        assert "Sheets:  1" in caplog.text

    def test_export(self, mock_config_file, temp_multi_page_pdf, temp_dir):
        out = temp_dir / "out"
        assert self._run(mock_config_file, "export", "-i", str(temp_multi_page_pdf), "-o", str(out)) == 0
        assert (out / "multi_page-2-up-landscape.pdf").exists()

    def test_export_dry_run(self, mock_config_file, temp_pdf, temp_dir):
        out = temp_dir / "out"
        assert self._run(mock_config_file, "export", "-i", str(temp_pdf), "-o", str(out), "--dry-run") == 0
        assert not out.exists()

    def test_preview(self, mock_config_file, temp_multi_page_pdf, temp_dir, caplog):
        previews = temp_dir / "previews"
        with caplog.at_level(logging.INFO, logger="pdfnup"):
            code = self._run(
                mock_config_file, "preview", "-i", str(temp_multi_page_pdf), "-d", str(previews), "-l", "2-up"
            )
        assert code == 0
        assert sorted(p.name for p in previews.glob("*.png")) == [
            "multi_page-preview-1.png",
            "multi_page-preview-2.png",
            "multi_page-preview-3.png",
        ]

    def test_preview_failure(self, mock_config_file, temp_pdf, temp_dir, caplog):
        failure = RendererInitError("no renderer")
        with patch("pdfnup.rendering.mock.MockRasterizer.setup", side_effect=failure):
            code = self._run(mock_config_file, "preview", "-i", str(temp_pdf), "-d", str(temp_dir))
        assert code == 1
        assert "Failed to load the PDF renderer" in caplog.text

    def test_export_broken_page_structure(self, mock_config_file, missing_mediabox_pdf, temp_dir, caplog):
        source = temp_dir / "broken.pdf"
        source.write_bytes(missing_mediabox_pdf)
        code = self._run(mock_config_file, "export", "-i", str(source), "-o", str(temp_dir / "out"))

        assert code == 1
        assert "Invalid PDF" in caplog.text
        assert "MediaBox" not in caplog.messages[-1]
        assert not (temp_dir / "out").exists()

    def test_unexpected_error_exits_cleanly(self, mock_config_file, caplog):
        failing = MagicMock(side_effect=RuntimeError("internal detail"))
        with patch.dict("pdfnup.cli.HANDLERS", {"info": failing}):
            code = self._run(mock_config_file, "info")

        assert code == 1
        assert caplog.messages[-1] == "Failed to process the PDF. Please try again."

    def test_clear(self, mock_config_file, temp_pdf, caplog):
        self._run(mock_config_file, "open", str(temp_pdf))
        assert self._run(mock_config_file, "clear") == 0
        assert self._run(mock_config_file, "info") == 1

    def test_store_dir_override(self, mock_config_file, temp_pdf, temp_dir):
        store_dir = temp_dir / "other-store"
        assert self._run(mock_config_file, "open", str(temp_pdf), "--store-dir", str(store_dir)) == 0
        assert (store_dir / "current.pdf").exists()

    def test_missing_config(self, temp_dir, caplog):
        assert main(["info", "-c", str(temp_dir / "missing.yaml")]) == 1
        assert "Configuration file not found" in caplog.text

    def test_invalid_config(self, temp_dir, caplog):
        config = temp_dir / "bad.yaml"
        config.write_text("defaults:\n  layout: 3-up\n")
        assert main(["info", "-c", str(config)]) == 1
        assert "Configuration error" in caplog.text

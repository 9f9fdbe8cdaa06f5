"""Working-document storage between steps (open, preview, export)."""

import errno
import json
import os
from dataclasses import dataclass
from pathlib import Path

from pdfnup.exceptions import ProcessingError, StorageExhausted
from pdfnup.logging_config import get_logger

logger = get_logger(__name__)

# Errors meaning "no room for this payload"
_EXHAUSTED_ERRNOS = {errno.ENOSPC, errno.EFBIG, getattr(errno, "EDQUOT", errno.ENOSPC)}


@dataclass
class StoredDocument:
    """The current working document."""

    data: bytes
    file_name: str
    page_count: int

    @property
    def size(self) -> int:
        return len(self.data)


class WorkingDocumentStore:
    """Holds a single working document on disk.

    Storing a document replaces whatever was stored before.

    Example:
        store = WorkingDocumentStore(Path("~/.pdfnup").expanduser())
        store.store(pdf_bytes, "report.pdf", page_count=12)
        current = store.get()
        store.clear()
    """

    DATA_FILE = "current.pdf"
    META_FILE = "current.json"

    def __init__(self, root: Path, quota_bytes: int | None = None):
        """Initialize the store.

        Args:
            root: Directory holding the stored document
            quota_bytes: Largest payload accepted, or None for no limit
        """
        self.root = root
        self.quota_bytes = quota_bytes

    @property
    def data_path(self) -> Path:
        return self.root / self.DATA_FILE

    @property
    def meta_path(self) -> Path:
        return self.root / self.META_FILE

    @property
    def tmp_path(self) -> Path:
        return self.root / f"{self.DATA_FILE}.tmp"

    @property
    def meta_tmp_path(self) -> Path:
        return self.root / f"{self.META_FILE}.tmp"

    def store(self, data: bytes, file_name: str, page_count: int) -> StoredDocument:
        """Replace the working document.

        The new document is written in full before the previous one is
        touched, so a failed store leaves the previous document in place.

        Raises:
            StorageExhausted: If the payload exceeds the quota or the disk is full
            ProcessingError: If the files cannot be written for another reason
        """
        if self.quota_bytes is not None and len(data) > self.quota_bytes:
            raise StorageExhausted(
                f"Document exceeds the storage quota of {self.quota_bytes} bytes",
                attempted_size=len(data),
            )

        meta = {"file_name": file_name, "page_count": page_count, "size": len(data)}

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self.tmp_path.write_bytes(data)
            with open(self.meta_tmp_path, "w", encoding="utf-8") as f:
                json.dump(meta, f, indent=2)
        except OSError as e:
            self._discard_temp_files()
            if e.errno in _EXHAUSTED_ERRNOS:
                raise StorageExhausted(
                    "Not enough space to store the document", attempted_size=len(data)
                ) from e
            raise ProcessingError(f"Could not store document: {e}", context={"path": self.root}) from e

        try:
            # Metadata last: its presence marks a complete document
            self.meta_path.unlink(missing_ok=True)
            os.replace(self.tmp_path, self.data_path)
            os.replace(self.meta_tmp_path, self.meta_path)
        except OSError as e:
            self._discard_temp_files()
            raise ProcessingError(f"Could not store document: {e}", context={"path": self.root}) from e

        logger.debug("Stored working document %s (%d bytes, %d pages)", file_name, len(data), page_count)
        return StoredDocument(data=data, file_name=file_name, page_count=page_count)

    def get(self) -> StoredDocument | None:
        """Return the working document, or None if nothing is stored."""
        if not self.meta_path.exists():
            return None

        try:
            with open(self.meta_path, encoding="utf-8") as f:
                meta = json.load(f)
            data = self.data_path.read_bytes()
            document = StoredDocument(
                data=data,
                file_name=meta["file_name"],
                page_count=int(meta["page_count"]),
            )
        except (OSError, json.JSONDecodeError, KeyError, ValueError) as e:
            logger.warning("Discarding unreadable working document: %s", e)
            self.clear()
            return None

        return document

    def clear(self) -> None:
        """Remove the working document, if any."""
        for path in (self.meta_path, self.data_path):
            path.unlink(missing_ok=True)
        self._discard_temp_files()

    def _discard_temp_files(self) -> None:
        for path in (self.tmp_path, self.meta_tmp_path):
            path.unlink(missing_ok=True)

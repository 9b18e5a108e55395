"""Whole-document JSON store with atomic replace.

Every save writes the full serialized document to a temporary file in the
target's directory and renames it over the target with os.replace, so a
concurrent reader sees either the previous or the new document and never a
partial write. There is no locking: when two writers save documents derived
from the same snapshot, the last save wins.
"""

import contextlib
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from ..constants import SESSION_FILE, STATUS_FILE
from ..models import SessionMarker, StatusDocument, new_status_document

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class StoreError(Exception):
    """Base error for document store operations."""


class DocumentMissingError(StoreError):
    """Document file does not exist (no active session)."""


class DocumentCorruptError(StoreError):
    """Document file exists but could not be parsed or validated."""


class DocumentWriteError(StoreError):
    """Document could not be written; the previous document is intact."""


class JsonDocumentStore(Generic[ModelT]):
    """Load and atomically save one pydantic model as a JSON file."""

    model: type[ModelT]

    def __init__(self, path: Path, model: type[ModelT]) -> None:
        self.path = path
        self.model = model

    def exists(self) -> bool:
        """Return True if the document file exists."""
        return self.path.exists()

    def load(self) -> ModelT:
        """Read and validate the whole document.

        Raises:
            DocumentMissingError: If the file does not exist
            DocumentCorruptError: If the file is not a valid document
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            raise DocumentMissingError(f"No document at {self.path}") from None
        except OSError as e:
            raise DocumentCorruptError(f"Cannot read {self.path}: {e}") from e

        try:
            return self.model.model_validate_json(raw)
        except ValidationError as e:
            logger.debug(f"Rejected {self.path}: {e}")
            raise DocumentCorruptError(
                f"Invalid document at {self.path}: {e.error_count()} validation error(s)"
            ) from e

    def serialize(self, doc: ModelT) -> bytes:
        """Serialize a document exactly as save() writes it."""
        return (doc.model_dump_json(indent=2) + "\n").encode()

    def save(self, doc: ModelT) -> None:
        """Atomically replace the document file.

        Raises:
            DocumentWriteError: If the document could not be written
        """
        payload = self.serialize(doc)
        tmp_path: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)
            raise DocumentWriteError(f"Failed to write {self.path}: {e}") from e
        logger.debug(f"Saved {self.path} ({len(payload)} bytes)")

    def delete(self) -> bool:
        """Delete the document file. Returns True if a file was removed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True

    def archive(self, archive_dir: Path) -> Path | None:
        """Move the document into archive_dir under a timestamped name.

        Returns:
            Path of the archived file, or None if there was nothing to archive
        """
        if not self.path.exists():
            return None
        archive_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        target = archive_dir / f"{stamp}-{self.path.name}"
        counter = 1
        while target.exists():
            target = archive_dir / f"{stamp}-{counter}-{self.path.name}"
            counter += 1
        os.replace(self.path, target)
        return target


class StatusStore(JsonDocumentStore[StatusDocument]):
    """Store for the Status Document."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, StatusDocument)

    @classmethod
    def for_dir(cls, wiggum_dir: Path) -> "StatusStore":
        """Create a store for .wiggum/status.json."""
        return cls(wiggum_dir / STATUS_FILE)

    def load_or_default(self) -> tuple[StatusDocument, StoreError | None]:
        """Load the document for read-only use.

        Returns:
            (document, None) on success, or (empty default, error) when the
            document is missing or corrupt
        """
        try:
            return self.load(), None
        except StoreError as e:
            return new_status_document(), e


class SessionStore(JsonDocumentStore[SessionMarker]):
    """Store for the crash/resume session marker."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, SessionMarker)

    @classmethod
    def for_dir(cls, wiggum_dir: Path) -> "SessionStore":
        """Create a store for .wiggum/session.json."""
        return cls(wiggum_dir / SESSION_FILE)

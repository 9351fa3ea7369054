"""JSON document store: one directory per document type under the data path."""

from pathlib import Path
from typing import Dict, List, Optional, Type
from pydantic import TypeAdapter, ValidationError
from datadict.config.logging import get_logger
from datadict.config.settings import get_settings
from datadict.models.entries import ENTRY_MODELS, DesignEntry, DocType, DocumentData

logger = get_logger(__name__)

HISTORY_FILENAME = "history.json"
BACKUP_MARKER = "_backup_"


class DocumentStoreError(Exception):
    """Raised when a document cannot be located, read, parsed or written."""


class DocumentStore:
    """
    File-backed storage for design documents.

    Layout: ``<root>/<type>/<filename>.json``. Each file holds one
    ``{entries[], lastUpdated, totalCount}`` object.
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else get_settings().data_path
        self._adapters: Dict[str, TypeAdapter] = {}

    def _model(self, doc_type: DocType) -> Type[DesignEntry]:
        try:
            return ENTRY_MODELS[doc_type]
        except KeyError:
            raise DocumentStoreError(f"Unknown document type: {doc_type}") from None

    def _adapter(self, doc_type: DocType) -> TypeAdapter:
        if doc_type not in self._adapters:
            self._adapters[doc_type] = TypeAdapter(DocumentData[self._model(doc_type)])
        return self._adapters[doc_type]

    def type_dir(self, doc_type: DocType) -> Path:
        """Directory holding documents of ``doc_type``."""
        self._model(doc_type)
        return self.root / doc_type

    def resolve(self, doc_type: DocType, filename: str) -> Path:
        """
        Path of a document file.

        Raises:
            DocumentStoreError: If the name is empty or escapes the type directory
        """
        if not filename or not filename.strip():
            raise DocumentStoreError(f"Empty filename for {doc_type} document")
        if Path(filename).name != filename:
            raise DocumentStoreError(f"Invalid filename for {doc_type} document: {filename!r}")

        base = self.type_dir(doc_type).resolve()
        path = (base / filename).resolve()
        if path.parent != base:
            raise DocumentStoreError(
                f"Path for {doc_type} document escapes the data directory: {filename!r}"
            )
        return path

    def list_files(self, doc_type: DocType) -> List[str]:
        """Sorted JSON documents of a type, excluding history and backup files."""
        directory = self.type_dir(doc_type)
        if not directory.is_dir():
            return []
        return sorted(
            path.name
            for path in directory.iterdir()
            if path.is_file()
            and path.suffix == ".json"
            and path.name != HISTORY_FILENAME
            and BACKUP_MARKER not in path.name
        )

    def exists(self, doc_type: DocType, filename: str) -> bool:
        return self.resolve(doc_type, filename).is_file()

    def load(self, doc_type: DocType, filename: str) -> DocumentData:
        """
        Load a document.

        An empty file reads as an empty document.

        Raises:
            DocumentStoreError: If the file is missing, not valid JSON, or
                does not have the document shape
        """
        path = self.resolve(doc_type, filename)
        if not path.is_file():
            raise DocumentStoreError(f"{doc_type} document not found: {filename}")

        try:
            content = path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise DocumentStoreError(f"Failed to read {doc_type} document {filename}: {e}") from e

        if not content:
            logger.debug(f"{doc_type} document {filename} is empty")
            return DocumentData[self._model(doc_type)]()

        try:
            return self._adapter(doc_type).validate_json(content)
        except ValidationError as e:
            if any(err["type"] == "json_invalid" for err in e.errors()):
                raise DocumentStoreError(
                    f"{doc_type} document {filename} is corrupted (invalid JSON): {e}"
                ) from e
            raise DocumentStoreError(
                f"{doc_type} document {filename} has an invalid shape: {e}"
            ) from e

    def save(self, doc_type: DocType, data: DocumentData, filename: str) -> Path:
        """
        Write a document, creating the type directory if needed.

        Raises:
            DocumentStoreError: If the path is invalid or the write fails
        """
        path = self.resolve(doc_type, filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                data.model_dump_json(by_alias=True, exclude_none=True, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            raise DocumentStoreError(f"Failed to write {doc_type} document {filename}: {e}") from e

        logger.info(f"Saved {doc_type} document {filename} ({data.total_count} entries)")
        return path

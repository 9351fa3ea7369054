"""File-to-file relation registry persisted as ``<data_path>/registry.json``."""

import uuid
from pathlib import Path
from typing import List, Optional
from pydantic import Field, ValidationError
from datadict.config.logging import get_logger
from datadict.models.relations import Cardinality, ReportModel
from .store import DocumentStoreError

logger = get_logger(__name__)

REGISTRY_FILENAME = "registry.json"


class FileRelation(ReportModel):
    """A declared link between two document files."""

    id: str
    source_type: str
    source_filename: str
    target_type: str
    target_filename: str
    mapping_key: str
    cardinality: Cardinality
    description: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None

    def same_link(self, other: "FileRelation") -> bool:
        return (
            self.source_type == other.source_type
            and self.source_filename == other.source_filename
            and self.target_type == other.target_type
            and self.target_filename == other.target_filename
            and self.mapping_key == other.mapping_key
        )


class RegistryData(ReportModel):
    version: str = "1.0"
    relations: List[FileRelation] = Field(default_factory=list)
    last_updated: Optional[str] = None


class FileRelationRegistry:
    """Load, query and upsert file relations."""

    def __init__(self, root: Path):
        self.path = Path(root) / REGISTRY_FILENAME

    def load(self) -> RegistryData:
        """
        Read the registry; a missing or empty file is an empty registry.

        Raises:
            DocumentStoreError: If the file is unreadable or malformed
        """
        if not self.path.is_file():
            return RegistryData()
        try:
            content = self.path.read_text(encoding="utf-8").strip()
            if not content:
                return RegistryData()
            return RegistryData.model_validate_json(content)
        except (OSError, ValidationError) as e:
            raise DocumentStoreError(f"Failed to load relation registry {self.path}: {e}") from e

    def save(self, data: RegistryData) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                data.model_dump_json(by_alias=True, exclude_none=True, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            raise DocumentStoreError(f"Failed to write relation registry {self.path}: {e}") from e

    def relations_for(self, doc_type: str, filename: str) -> List[FileRelation]:
        """Relations where the file is either source or target."""
        return [
            r for r in self.load().relations
            if (r.source_type == doc_type and r.source_filename == filename)
            or (r.target_type == doc_type and r.target_filename == filename)
        ]

    def record_relation(
        self,
        source_type: str,
        source_filename: str,
        target_type: str,
        target_filename: str,
        mapping_key: str,
        cardinality: str,
        now: str,
        description: Optional[str] = None,
    ) -> FileRelation:
        """
        Insert a relation or refresh the existing one for the same link.

        Returns:
            The stored relation
        """
        data = self.load()
        candidate = FileRelation(
            id=str(uuid.uuid4()),
            source_type=source_type,
            source_filename=source_filename,
            target_type=target_type,
            target_filename=target_filename,
            mapping_key=mapping_key,
            cardinality=cardinality,
            description=description,
            created_at=now,
        )

        for index, existing in enumerate(data.relations):
            if existing.same_link(candidate):
                stored = existing.model_copy(
                    update={"updated_at": now, "cardinality": cardinality, "description": description}
                )
                data.relations[index] = stored
                break
        else:
            stored = candidate
            data.relations.append(stored)

        data.last_updated = now
        self.save(data)
        logger.debug(
            f"Recorded relation {source_type}:{source_filename} -> "
            f"{target_type}:{target_filename} ({mapping_key})"
        )
        return stored

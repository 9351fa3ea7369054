"""MappingContext: the in-memory snapshot every engine stage reads."""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from .entries import (
    AttributeEntry,
    ColumnEntry,
    DatabaseEntry,
    DomainEntry,
    EntityEntry,
    TableEntry,
)


class VocabularyRef(BaseModel):
    """Vocabulary lookup value (keyed by case-folded standard name or abbreviation)."""

    model_config = ConfigDict(frozen=True)

    standard_name: str
    abbreviation: str
    domain_category: Optional[str] = None


class MappingContext(BaseModel):
    """
    Six entry collections plus optional lookups.

    Never mutated in place; corrected views are produced with
    ``with_updates``.
    """

    model_config = ConfigDict(frozen=True)

    databases: List[DatabaseEntry] = Field(default_factory=list)
    entities: List[EntityEntry] = Field(default_factory=list)
    attributes: List[AttributeEntry] = Field(default_factory=list)
    tables: List[TableEntry] = Field(default_factory=list)
    columns: List[ColumnEntry] = Field(default_factory=list)
    domains: List[DomainEntry] = Field(default_factory=list)
    vocabulary_map: Optional[Dict[str, VocabularyRef]] = None
    domain_map: Optional[Dict[str, DomainEntry]] = None

    def with_updates(self, **collections) -> "MappingContext":
        """Return a new context with some collections replaced."""
        return self.model_copy(update=collections)

"""Document entry models for the six design documents plus the vocabulary."""

from typing import Dict, Generic, List, Literal, Optional, Sequence, Tuple, Type, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DocType = Literal[
    "database",
    "entity",
    "attribute",
    "table",
    "column",
    "domain",
    "vocabulary",
]

DEFINITION_TYPES: List[str] = ["database", "entity", "attribute", "table", "column"]


class DesignEntry(BaseModel):
    """
    Common base for every document entry.

    Fields are snake_case in Python and camelCase on disk. Every field other
    than ``id`` is optional free text; unknown fields are kept so a
    load/save round trip never drops data.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def key_parts(self, fields: Sequence[str]) -> Tuple[Optional[str], ...]:
        """Raw values of the named fields, in order."""
        return tuple(getattr(self, name, None) for name in fields)

    def label(self, fields: Sequence[str]) -> str:
        """First non-empty value among ``fields``, falling back to the id."""
        for name in fields:
            value = getattr(self, name, None)
            if value:
                return value
        return self.id

    def with_patch(self, patch: Dict[str, str]):
        """Return a copy with ``patch`` (snake_case keys) applied."""
        return self.model_copy(update=patch)


class DatabaseEntry(DesignEntry):
    """Database catalog entry."""

    organization_name: Optional[str] = None
    department_name: Optional[str] = None
    applied_task: Optional[str] = None
    related_law: Optional[str] = None
    build_date: Optional[str] = None
    os_info: Optional[str] = None
    exclusion_reason: Optional[str] = None
    logical_db_name: Optional[str] = None
    physical_db_name: Optional[str] = None
    db_description: Optional[str] = None
    dbms_info: Optional[str] = None


class EntityEntry(DesignEntry):
    """Logical entity entry."""

    super_type_entity_name: Optional[str] = None
    logical_db_name: Optional[str] = None
    schema_name: Optional[str] = None
    entity_name: Optional[str] = None
    entity_description: Optional[str] = None
    primary_identifier: Optional[str] = None
    table_korean_name: Optional[str] = None


class AttributeEntry(DesignEntry):
    """Logical attribute entry."""

    required_input: Optional[str] = None
    ref_entity_name: Optional[str] = None
    schema_name: Optional[str] = None
    entity_name: Optional[str] = None
    attribute_name: Optional[str] = None
    attribute_type: Optional[str] = None
    identifier_flag: Optional[str] = None
    ref_attribute_name: Optional[str] = None
    attribute_description: Optional[str] = None


class TableEntry(DesignEntry):
    """Physical table entry."""

    business_classification: Optional[str] = None
    table_volume: Optional[str] = None
    non_public_reason: Optional[str] = None
    open_data_list: Optional[str] = None
    physical_db_name: Optional[str] = None
    table_owner: Optional[str] = None
    subject_area: Optional[str] = None
    schema_name: Optional[str] = None
    table_english_name: Optional[str] = None
    table_korean_name: Optional[str] = None
    table_type: Optional[str] = None
    related_entity_name: Optional[str] = None
    table_description: Optional[str] = None
    retention_period: Optional[str] = None
    occurrence_cycle: Optional[str] = None
    public_flag: Optional[str] = None


class ColumnEntry(DesignEntry):
    """Physical column entry."""

    data_length: Optional[str] = None
    data_decimal_length: Optional[str] = None
    data_format: Optional[str] = None
    pk_info: Optional[str] = None
    index_name: Optional[str] = None
    index_order: Optional[str] = None
    ak_info: Optional[str] = None
    constraint: Optional[str] = None
    scope_flag: Optional[str] = None
    subject_area: Optional[str] = None
    schema_name: Optional[str] = None
    table_english_name: Optional[str] = None
    column_english_name: Optional[str] = None
    column_korean_name: Optional[str] = None
    column_description: Optional[str] = None
    related_entity_name: Optional[str] = None
    data_type: Optional[str] = None
    not_null_flag: Optional[str] = None
    fk_info: Optional[str] = None
    personal_info_flag: Optional[str] = None
    encryption_flag: Optional[str] = None
    public_flag: Optional[str] = None


class DomainEntry(DesignEntry):
    """Standard domain entry."""

    domain_group: Optional[str] = None
    domain_category: Optional[str] = None
    standard_domain_name: Optional[str] = None
    physical_data_type: Optional[str] = None
    data_length: Optional[str] = None
    decimal_places: Optional[str] = None
    measurement_unit: Optional[str] = None
    revision: Optional[str] = None
    description: Optional[str] = None
    storage_format: Optional[str] = None
    display_format: Optional[str] = None
    allowed_values: Optional[str] = None


class VocabularyEntry(DesignEntry):
    """Standard word (vocabulary) entry."""

    standard_name: Optional[str] = None
    abbreviation: Optional[str] = None
    english_name: Optional[str] = None
    description: Optional[str] = None
    domain_category: Optional[str] = None
    is_domain_category_mapped: Optional[bool] = None


EntryT = TypeVar("EntryT", bound=DesignEntry)


class DocumentData(BaseModel, Generic[EntryT]):
    """On-disk document: ``{ entries[], lastUpdated, totalCount }``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    entries: List[EntryT] = Field(default_factory=list)
    last_updated: Optional[str] = None
    total_count: int = 0


ENTRY_MODELS: Dict[str, Type[DesignEntry]] = {
    "database": DatabaseEntry,
    "entity": EntityEntry,
    "attribute": AttributeEntry,
    "table": TableEntry,
    "column": ColumnEntry,
    "domain": DomainEntry,
    "vocabulary": VocabularyEntry,
}

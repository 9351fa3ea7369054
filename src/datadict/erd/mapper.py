"""
Mapping rules between design entries.

Every ``map_*`` function derives typed ``ERDMapping`` records for one kind
of relation. Matching is on trimmed, case-folded names; entries whose
driving field is empty (or ``-``) produce nothing. Mapping ids are derived
from the mapping key and both endpoint ids, so the same context always
yields the same mappings.
"""

import re
from typing import Dict, List, Optional, Tuple
from datadict.models.context import MappingContext, VocabularyRef
from datadict.models.entries import (
    AttributeEntry,
    ColumnEntry,
    DatabaseEntry,
    DomainEntry,
    EntityEntry,
    TableEntry,
)
from datadict.models.erd import ERDMapping
from datadict.relations.keys import is_empty, normalize_key, split_underscore_parts

FK_MARKERS = {"Y", "YES"}


def _norm(value: Optional[str]) -> str:
    return normalize_key(value)


def _mapping(
    source: str,
    source_id: str,
    target: str,
    target_id: str,
    layer_type: str,
    mapping_key: str,
    relationship_type: str,
    **details: Optional[str],
) -> ERDMapping:
    return ERDMapping(
        id=f"{mapping_key}:{source_id}->{target_id}",
        source_id=source_id,
        target_id=target_id,
        source_type=source,
        target_type=target,
        layer_type=layer_type,
        mapping_key=mapping_key,
        relationship_type=relationship_type,
        details={k: v for k, v in details.items() if v is not None},
    )


def extract_suffix(column_english_name: Optional[str]) -> Optional[str]:
    """
    Last non-empty ``_`` segment of a column name, upper-cased.

    Examples:
        >>> extract_suffix("user_id")
        'ID'
        >>> extract_suffix("") is None
        True
    """
    parts = split_underscore_parts(column_english_name)
    if not parts:
        return None
    return parts[-1].upper()


# ============================================================================
# Logical layer
# ============================================================================


def map_database_to_entity(
    database: DatabaseEntry, entities: List[EntityEntry]
) -> List[ERDMapping]:
    """Database -> entities sharing its logicalDbName."""
    if is_empty(database.logical_db_name):
        return []
    name = _norm(database.logical_db_name)
    return [
        _mapping("database", database.id, "entity", entity.id,
                 "logical", "logicalDbName", "1:N")
        for entity in entities
        if entity.logical_db_name and _norm(entity.logical_db_name) == name
    ]


def map_entity_to_attribute(
    entity: EntityEntry, attributes: List[AttributeEntry]
) -> List[ERDMapping]:
    """Entity -> attributes with the same schema and entity name."""
    if is_empty(entity.schema_name) or is_empty(entity.entity_name):
        return []
    schema = _norm(entity.schema_name)
    name = _norm(entity.entity_name)
    return [
        _mapping("entity", entity.id, "attribute", attribute.id,
                 "logical", "schemaName+entityName", "1:N",
                 schemaName=entity.schema_name, entityName=entity.entity_name)
        for attribute in attributes
        if _norm(attribute.schema_name) == schema and _norm(attribute.entity_name) == name
    ]


def map_entity_inheritance(entities: List[EntityEntry]) -> List[ERDMapping]:
    """
    Supertype -> subtype edges, one per child.

    Cycles in superTypeEntityName are not rejected; each edge is emitted
    as declared.
    """
    by_name: Dict[str, EntityEntry] = {}
    for entity in entities:
        if not is_empty(entity.entity_name):
            by_name[_norm(entity.entity_name)] = entity

    mappings = []
    for entity in entities:
        if is_empty(entity.super_type_entity_name):
            continue
        parent = by_name.get(_norm(entity.super_type_entity_name))
        if parent is None:
            continue
        mappings.append(
            _mapping("entity", parent.id, "entity", entity.id,
                     "logical", "superTypeEntityName", "1:N",
                     superTypeEntityName=entity.super_type_entity_name)
        )
    return mappings


def map_attribute_to_entity_ref(
    attribute: AttributeEntry, entities: List[EntityEntry]
) -> Optional[ERDMapping]:
    """Attribute -> entity named by refEntityName (first match)."""
    if is_empty(attribute.ref_entity_name):
        return None
    name = _norm(attribute.ref_entity_name)
    for entity in entities:
        if entity.entity_name and _norm(entity.entity_name) == name:
            return _mapping("attribute", attribute.id, "entity", entity.id,
                            "logical", "refEntityName", "N:1",
                            refEntityName=attribute.ref_entity_name)
    return None


def map_attribute_to_attribute_ref(
    attribute: AttributeEntry, attributes: List[AttributeEntry]
) -> Optional[ERDMapping]:
    """Attribute -> attribute named by refAttributeName (first match)."""
    if is_empty(attribute.ref_attribute_name):
        return None
    name = _norm(attribute.ref_attribute_name)
    for target in attributes:
        if target.attribute_name and _norm(target.attribute_name) == name:
            return _mapping("attribute", attribute.id, "attribute", target.id,
                            "logical", "refAttributeName", "N:1",
                            refAttributeName=attribute.ref_attribute_name)
    return None


# ============================================================================
# Physical layer
# ============================================================================


def map_database_to_table(
    database: DatabaseEntry, tables: List[TableEntry]
) -> List[ERDMapping]:
    """Database -> tables sharing its physicalDbName."""
    if is_empty(database.physical_db_name):
        return []
    name = _norm(database.physical_db_name)
    return [
        _mapping("database", database.id, "table", table.id,
                 "physical", "physicalDbName", "1:N")
        for table in tables
        if table.physical_db_name and _norm(table.physical_db_name) == name
    ]


def map_table_to_column(
    table: TableEntry, columns: List[ColumnEntry]
) -> List[ERDMapping]:
    """Table -> columns with the same schema and English table name."""
    if is_empty(table.schema_name) or is_empty(table.table_english_name):
        return []
    schema = _norm(table.schema_name)
    name = _norm(table.table_english_name)
    return [
        _mapping("table", table.id, "column", column.id,
                 "physical", "schemaName+tableEnglishName", "1:N",
                 schemaName=table.schema_name, tableEnglishName=table.table_english_name)
        for column in columns
        if _norm(column.schema_name) == schema and _norm(column.table_english_name) == name
    ]


def parse_fk_reference(fk_info: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Parse ``TABLE.COLUMN`` or ``TABLE:COLUMN`` into an upper-cased pair.

    A bare ``Y``/``YES`` flag carries no reference and yields None.
    """
    if is_empty(fk_info):
        return None
    value = fk_info.strip().upper()
    if value in FK_MARKERS:
        return None
    parts = [p.strip() for p in re.split(r"[.:]", value) if p.strip()]
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


def map_column_fk(
    column: ColumnEntry, columns: List[ColumnEntry]
) -> Optional[ERDMapping]:
    """Column -> referenced column described by fkInfo."""
    reference = parse_fk_reference(column.fk_info)
    if reference is None:
        return None
    table_name, column_name = reference
    for target in columns:
        if (
            _norm(target.table_english_name) == _norm(table_name)
            and _norm(target.column_english_name) == _norm(column_name)
        ):
            return _mapping("column", column.id, "column", target.id,
                            "physical", "fkInfo", "N:1",
                            fkInfo=column.fk_info,
                            referencedTable=table_name,
                            referencedColumn=column_name)
    return None


# ============================================================================
# Logical-physical layer
# ============================================================================


def map_table_to_entity(
    table: TableEntry, entities: List[EntityEntry]
) -> Optional[ERDMapping]:
    """Table -> entity named by relatedEntityName."""
    if is_empty(table.related_entity_name):
        return None
    name = _norm(table.related_entity_name)
    for entity in entities:
        if entity.entity_name and _norm(entity.entity_name) == name:
            return _mapping("table", table.id, "entity", entity.id,
                            "logical-physical", "relatedEntityName", "N:1",
                            relatedEntityName=table.related_entity_name)
    return None


def map_column_to_entity(
    column: ColumnEntry, entities: List[EntityEntry]
) -> Optional[ERDMapping]:
    """Column -> entity named by relatedEntityName."""
    if is_empty(column.related_entity_name):
        return None
    name = _norm(column.related_entity_name)
    for entity in entities:
        if entity.entity_name and _norm(entity.entity_name) == name:
            return _mapping("column", column.id, "entity", entity.id,
                            "logical-physical", "relatedEntityName", "N:1",
                            relatedEntityName=column.related_entity_name)
    return None


def map_attribute_to_column(
    attribute: AttributeEntry, columns: List[ColumnEntry]
) -> List[ERDMapping]:
    """
    Attribute -> columns in the same schema whose Korean name equals the
    attribute name. The first link is 1:1, further ones 1:N.
    """
    if (
        is_empty(attribute.schema_name)
        or is_empty(attribute.entity_name)
        or is_empty(attribute.attribute_name)
    ):
        return []
    schema = _norm(attribute.schema_name)
    name = _norm(attribute.attribute_name)

    mappings: List[ERDMapping] = []
    for column in columns:
        if not (column.schema_name and column.table_english_name and column.column_korean_name):
            continue
        if _norm(column.schema_name) != schema or _norm(column.column_korean_name) != name:
            continue
        mappings.append(
            _mapping("attribute", attribute.id, "column", column.id,
                     "logical-physical", "schemaName+entityName+attributeName",
                     "1:1" if not mappings else "1:N",
                     schemaName=attribute.schema_name,
                     entityName=attribute.entity_name,
                     attributeName=attribute.attribute_name,
                     tableEnglishName=column.table_english_name,
                     columnKoreanName=column.column_korean_name)
        )
    return mappings


# ============================================================================
# Domain layer
# ============================================================================


def _find_domain(category: str, domains: List[DomainEntry]) -> Optional[DomainEntry]:
    """Exact category match first, then a substring match either way."""
    usable = [
        d for d in domains
        if not is_empty(d.domain_category) and not is_empty(d.standard_domain_name)
    ]
    for domain in usable:
        if _norm(domain.domain_category) == category:
            return domain
    for domain in usable:
        candidate = _norm(domain.domain_category)
        if not candidate:
            continue
        if category in candidate or candidate in category:
            return domain
    return None


def map_column_to_domain(
    column: ColumnEntry,
    vocabulary_map: Dict[str, VocabularyRef],
    domains: List[DomainEntry],
) -> Optional[ERDMapping]:
    """
    Column -> domain through the vocabulary.

    The column name suffix is looked up as a standard word or abbreviation;
    the word's domain category then selects the domain.
    """
    suffix = extract_suffix(column.column_english_name)
    if suffix is None:
        return None
    word = vocabulary_map.get(suffix.lower())
    if word is None or is_empty(word.domain_category):
        return None

    domain = _find_domain(_norm(word.domain_category), domains)
    if domain is None:
        return None
    return _mapping("column", column.id, "domain", domain.id,
                    "domain", "columnEnglishName_suffix", "N:1",
                    suffix=suffix,
                    domainCategory=domain.domain_category,
                    standardDomainName=domain.standard_domain_name)


# ============================================================================
# All mappings
# ============================================================================


def generate_all_mappings(context: MappingContext) -> List[ERDMapping]:
    """
    Derive every mapping of a context, grouped by layer.

    Domain mappings are produced only when a vocabulary map is present and
    at least one domain is loaded.
    """
    mappings: List[ERDMapping] = []

    # Logical
    for database in context.databases:
        mappings.extend(map_database_to_entity(database, context.entities))
    for entity in context.entities:
        mappings.extend(map_entity_to_attribute(entity, context.attributes))
    mappings.extend(map_entity_inheritance(context.entities))
    for attribute in context.attributes:
        for mapping in (
            map_attribute_to_entity_ref(attribute, context.entities),
            map_attribute_to_attribute_ref(attribute, context.attributes),
        ):
            if mapping is not None:
                mappings.append(mapping)

    # Physical
    for database in context.databases:
        mappings.extend(map_database_to_table(database, context.tables))
    for table in context.tables:
        mappings.extend(map_table_to_column(table, context.columns))
    for column in context.columns:
        fk = map_column_fk(column, context.columns)
        if fk is not None:
            mappings.append(fk)

    # Logical-physical
    for table in context.tables:
        mapping = map_table_to_entity(table, context.entities)
        if mapping is not None:
            mappings.append(mapping)
    for column in context.columns:
        mapping = map_column_to_entity(column, context.entities)
        if mapping is not None:
            mappings.append(mapping)
    for attribute in context.attributes:
        mappings.extend(map_attribute_to_column(attribute, context.columns))

    # Domain
    if context.vocabulary_map and context.domains:
        for column in context.columns:
            mapping = map_column_to_domain(column, context.vocabulary_map, context.domains)
            if mapping is not None:
                mappings.append(mapping)

    return mappings

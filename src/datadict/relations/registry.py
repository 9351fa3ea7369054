"""
The six cross-document relations, declared once.

Each rule pairs a public ``RelationSpec`` with the data the validator needs:
which collection provides the known keys, which collection is checked, and
which fields form the composite key on each side.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple
from datadict.models.relations import RelationSpec

KeyFields = Tuple[str, ...]


@dataclass(frozen=True)
class RelationRule:
    """Declarative relation rule evaluated by the validator."""

    spec: RelationSpec
    # MappingContext attribute holding the entries that define valid keys
    lookup_collection: str
    # Alternative key tuples; a checked key matches if it hits any of them
    lookup_key_fields: Tuple[KeyFields, ...]
    # MappingContext attribute holding the entries being checked
    checked_collection: str
    checked_key_fields: KeyFields
    checked_label_fields: KeyFields
    reason: str


RELATION_RULES: List[RelationRule] = [
    RelationRule(
        spec=RelationSpec(
            id="DB_ENTITY",
            name="Database -> Entity",
            source_type="database",
            target_type="entity",
            mapping_key="logicalDbName",
            cardinality="1:N",
            severity="error",
            description="An entity's logicalDbName must exist among database logicalDbName values.",
        ),
        lookup_collection="databases",
        lookup_key_fields=(("logical_db_name",),),
        checked_collection="entities",
        checked_key_fields=("logical_db_name",),
        checked_label_fields=("entity_name", "table_korean_name"),
        reason="The referenced logicalDbName is not defined in the database document.",
    ),
    RelationRule(
        spec=RelationSpec(
            id="DB_TABLE",
            name="Database -> Table",
            source_type="database",
            target_type="table",
            mapping_key="physicalDbName",
            cardinality="1:N",
            severity="error",
            description="A table's physicalDbName must exist among database physicalDbName values.",
        ),
        lookup_collection="databases",
        lookup_key_fields=(("physical_db_name",),),
        checked_collection="tables",
        checked_key_fields=("physical_db_name",),
        checked_label_fields=("table_english_name", "table_korean_name"),
        reason="The referenced physicalDbName is not defined in the database document.",
    ),
    RelationRule(
        spec=RelationSpec(
            id="ENTITY_ATTRIBUTE",
            name="Entity -> Attribute",
            source_type="entity",
            target_type="attribute",
            mapping_key="schemaName + entityName",
            cardinality="1:N",
            severity="error",
            description="An attribute's schemaName/entityName pair must exist in the entity document.",
        ),
        lookup_collection="entities",
        lookup_key_fields=(("schema_name", "entity_name"),),
        checked_collection="attributes",
        checked_key_fields=("schema_name", "entity_name"),
        checked_label_fields=("attribute_name",),
        reason="The schema/entity pair referenced by the attribute is not defined in the entity document.",
    ),
    RelationRule(
        spec=RelationSpec(
            id="ENTITY_TABLE",
            name="Entity -> Table",
            source_type="entity",
            target_type="table",
            mapping_key="schemaName + relatedEntityName(entityName)",
            cardinality="1:N",
            severity="error",
            description=(
                "A table's schemaName/relatedEntityName pair must exist as an entity "
                "schemaName/entityName (fallback: tableKoreanName)."
            ),
        ),
        lookup_collection="entities",
        lookup_key_fields=(
            ("schema_name", "entity_name"),
            ("schema_name", "table_korean_name"),
        ),
        checked_collection="tables",
        checked_key_fields=("schema_name", "related_entity_name"),
        checked_label_fields=("table_english_name", "table_korean_name"),
        reason="The table's relatedEntityName is not found in the entity document (entityName/tableKoreanName).",
    ),
    RelationRule(
        spec=RelationSpec(
            id="TABLE_COLUMN",
            name="Table -> Column",
            source_type="table",
            target_type="column",
            mapping_key="schemaName + tableEnglishName",
            cardinality="1:N",
            severity="error",
            description="A column's schemaName/tableEnglishName pair must exist in the table document.",
        ),
        lookup_collection="tables",
        lookup_key_fields=(("schema_name", "table_english_name"),),
        checked_collection="columns",
        checked_key_fields=("schema_name", "table_english_name"),
        checked_label_fields=("column_english_name", "column_korean_name"),
        reason="The schema/table pair referenced by the column is not defined in the table document.",
    ),
    RelationRule(
        spec=RelationSpec(
            id="ATTRIBUTE_COLUMN",
            name="Attribute -> Column (assist)",
            source_type="attribute",
            target_type="column",
            mapping_key="schemaName + entityName(relatedEntityName) + attributeName(columnKoreanName)",
            cardinality="1:1",
            severity="warning",
            description=(
                "Checks logical-physical link candidates between attributes and columns. "
                "Mismatches are reported as warnings."
            ),
        ),
        lookup_collection="columns",
        lookup_key_fields=(("schema_name", "related_entity_name", "column_korean_name"),),
        checked_collection="attributes",
        checked_key_fields=("schema_name", "entity_name", "attribute_name"),
        checked_label_fields=("attribute_name",),
        reason="No column (relatedEntityName + columnKoreanName) could be linked by attribute name.",
    ),
]

RELATION_SPECS: List[RelationSpec] = [rule.spec for rule in RELATION_RULES]

RULES_BY_ID: Dict[str, RelationRule] = {rule.spec.id: rule for rule in RELATION_RULES}


def get_rule(relation_id: str) -> RelationRule:
    """Look up a rule by relation id."""
    try:
        return RULES_BY_ID[relation_id]
    except KeyError:
        raise KeyError(f"Unknown relation id: {relation_id}") from None

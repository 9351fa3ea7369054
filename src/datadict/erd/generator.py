"""ERD graph generation and rendering."""

import re
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple
from datadict.config.logging import get_logger
from datadict.config.settings import get_settings
from datadict.models.context import MappingContext
from datadict.models.entries import DesignEntry
from datadict.models.erd import (
    ERDData,
    ERDEdge,
    ERDFilterOptions,
    ERDMapping,
    ERDMetadata,
    ERDNode,
)
from datadict.relations.keys import is_empty
from .filter import filter_erd_data_by_table_ids
from .mapper import generate_all_mappings

logger = get_logger(__name__)

MAX_FIELDS_PER_NODE = 8
MAX_NAME_LENGTH = 50

# (node type, layer, context collection, label fields in priority order)
NODE_SOURCES: List[Tuple[str, str, str, Tuple[str, ...]]] = [
    ("database", "physical", "databases", ("logical_db_name", "physical_db_name")),
    ("entity", "logical", "entities", ("entity_name", "table_korean_name")),
    ("attribute", "logical", "attributes", ("attribute_name",)),
    ("table", "physical", "tables", ("table_english_name", "table_korean_name")),
    ("column", "physical", "columns", ("column_english_name", "column_korean_name")),
]


def _label(entry: DesignEntry, fields: Tuple[str, ...]) -> Optional[str]:
    """First non-placeholder value among ``fields``; None when all are empty."""
    for name in fields:
        value = getattr(entry, name, None)
        if not is_empty(value):
            return value.strip()
    return None


def _node(entry: DesignEntry, node_type: str, layer: str, label: str) -> ERDNode:
    return ERDNode(
        id=entry.id,
        type=node_type,
        layer_type=layer,
        label=label,
        data=entry.model_dump(by_alias=True, exclude_none=True),
    )


def get_edge_type(mapping: ERDMapping) -> str:
    """Edge type from the mapping layer and key."""
    if mapping.layer_type == "logical":
        if mapping.mapping_key == "superTypeEntityName":
            return "inheritance"
        if mapping.mapping_key in ("refEntityName", "refAttributeName"):
            return "reference"
        return "contains"
    if mapping.layer_type == "physical":
        return "foreign-key" if mapping.mapping_key == "fkInfo" else "contains"
    if mapping.layer_type == "logical-physical":
        return "maps-to"
    if mapping.layer_type == "domain":
        return "uses-domain"
    return "related"


_EDGE_LABELS: Dict[str, str] = {
    "superTypeEntityName": "inherits",
    "refEntityName": "references",
    "refAttributeName": "references",
    "fkInfo": "FK",
    "relatedEntityName": "maps to",
    "domainName": "uses",
    "columnEnglishName_suffix": "uses",
}


def get_edge_label(mapping: ERDMapping) -> Optional[str]:
    """Short edge label, or None for containment edges."""
    return _EDGE_LABELS.get(mapping.mapping_key)


def generate_erd_data(
    context: MappingContext,
    filter_options: Optional[ERDFilterOptions] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> ERDData:
    """
    Build the layered graph for a context.

    Args:
        context: Loaded design documents (domains and vocabulary optional)
        filter_options: Optional table selection
        now: Clock used for ``generatedAt`` (defaults to UTC now)

    Returns:
        Nodes, edges, mappings and metadata
    """
    nodes: List[ERDNode] = []
    for node_type, layer, collection, label_fields in NODE_SOURCES:
        for entry in getattr(context, collection):
            label = _label(entry, label_fields)
            if label is None:
                continue
            nodes.append(_node(entry, node_type, layer, label))

    node_ids = {node.id for node in nodes}
    mappings = [m for m in generate_all_mappings(context) if m.source_id in node_ids]

    domains_by_id = context.domain_map or {d.id: d for d in context.domains}
    mapped_domain_ids = dict.fromkeys(m.target_id for m in mappings if m.target_type == "domain")
    for domain_id in mapped_domain_ids:
        domain = domains_by_id.get(domain_id)
        if domain is None:
            continue
        label = _label(domain, ("standard_domain_name",))
        if label is None:
            continue
        nodes.append(_node(domain, "domain", "domain", label))
        node_ids.add(domain.id)

    mappings = [m for m in mappings if m.target_id in node_ids]
    edges = [
        ERDEdge(
            id=f"edge-{mapping.id}-{index}",
            source=mapping.source_id,
            target=mapping.target_id,
            type=get_edge_type(mapping),
            label=get_edge_label(mapping),
            mapping=mapping,
        )
        for index, mapping in enumerate(mappings)
    ]

    generated_at = (now or (lambda: datetime.now(timezone.utc)))().isoformat()
    erd_data = ERDData(
        nodes=nodes,
        edges=edges,
        mappings=mappings,
        metadata=ERDMetadata.for_graph(nodes, edges, mappings, generated_at),
    )

    if filter_options and filter_options.table_ids:
        erd_data = filter_erd_data_by_table_ids(
            erd_data, filter_options.table_ids, filter_options.include_related
        )

    logger.debug(
        f"ERD generated: {erd_data.metadata.total_nodes} nodes, "
        f"{erd_data.metadata.total_edges} edges"
    )
    return erd_data


# ============================================================================
# Mermaid
# ============================================================================


def sanitize_node_name(name: str) -> str:
    """Mermaid-safe identifier, at most 50 characters."""
    sanitized = re.sub(r"[^a-zA-Z0-9가-힣_]", "_", name).strip("_") or "Node"
    if len(sanitized) > MAX_NAME_LENGTH:
        return sanitized[: MAX_NAME_LENGTH - 3] + "..."
    return sanitized


def _mermaid_relation(edge: ERDEdge) -> str:
    relationship = edge.mapping.relationship_type
    if edge.type == "inheritance":
        return "o{"
    if edge.type in ("foreign-key", "reference"):
        return "}o" if relationship == "N:1" else "o{"
    return "}o" if relationship == "1:N" else "||"


def _has_value(data: Dict, key: str) -> bool:
    return not is_empty(data.get(key))


def _node_fields(
    node: ERDNode,
    children: Dict[str, List[ERDNode]],
) -> List[str]:
    fields: List[str] = []
    data = node.data

    if node.type == "database":
        for key, caption in (
            ("logicalDbName", "logical"),
            ("physicalDbName", "physical"),
            ("dbmsInfo", "DBMS"),
        ):
            if _has_value(data, key):
                fields.append(f'  {sanitize_node_name(data[key])} string "{caption}"')

    elif node.type == "entity":
        if _has_value(data, "primaryIdentifier"):
            fields.append(f"  {sanitize_node_name(data['primaryIdentifier'])} string PK")
        for attribute in children.get(node.id, [])[: MAX_FIELDS_PER_NODE - 1]:
            attr_type = attribute.data.get("attributeType")
            type_name = sanitize_node_name(attr_type) if attr_type else "string"
            pk = " PK" if attribute.data.get("identifierFlag") == "Y" else ""
            fields.append(f"  {sanitize_node_name(attribute.label)} {type_name}{pk}")

    elif node.type == "table":
        for column in children.get(node.id, [])[:MAX_FIELDS_PER_NODE]:
            data_type = column.data.get("dataType")
            type_name = sanitize_node_name(data_type) if data_type else "varchar"
            if _has_value(column.data, "pkInfo"):
                flag = " PK"
            elif _has_value(column.data, "fkInfo"):
                flag = " FK"
            else:
                flag = ""
            fields.append(f"  {sanitize_node_name(column.label)} {type_name}{flag}")

    return fields[:MAX_FIELDS_PER_NODE]


def generate_mermaid_erd(
    erd_data: ERDData,
    max_nodes: Optional[int] = None,
    max_edges: Optional[int] = None,
) -> str:
    """
    Render database, entity and table nodes as a Mermaid ``erDiagram``.

    Attributes and columns appear as fields of their owner (up to eight per
    node). Edges between the rendered nodes are deduplicated by
    (source, target). A warning is logged when the text exceeds the
    configured size limit.
    """
    node_map = {node.id: node for node in erd_data.nodes}
    diagram_nodes = [n for n in erd_data.nodes if n.type in ("database", "entity", "table")]
    if max_nodes:
        diagram_nodes = diagram_nodes[:max_nodes]
    diagram_ids = {n.id for n in diagram_nodes}

    children: Dict[str, List[ERDNode]] = {}
    for mapping in erd_data.mappings:
        if (mapping.source_type, mapping.target_type) not in (
            ("entity", "attribute"),
            ("table", "column"),
        ):
            continue
        if mapping.source_id not in diagram_ids or mapping.target_id not in node_map:
            continue
        children.setdefault(mapping.source_id, []).append(node_map[mapping.target_id])

    lines = ["erDiagram"]
    for node in diagram_nodes:
        lines.append(f"    {sanitize_node_name(node.label)} {{")
        lines.extend(_node_fields(node, children))
        lines.append("    }")

    edges = [
        e for e in erd_data.edges
        if e.source in diagram_ids and e.target in diagram_ids
    ]
    if max_edges:
        edges = edges[:max_edges]

    seen = set()
    for edge in edges:
        if (edge.source, edge.target) in seen:
            continue
        seen.add((edge.source, edge.target))
        source = sanitize_node_name(node_map[edge.source].label)
        target = sanitize_node_name(node_map[edge.target].label)
        label = sanitize_node_name(edge.label) if edge.label else ""
        lines.append(f'    {source} ||--{_mermaid_relation(edge)}|| {target} : "{label}"')

    mermaid = "\n".join(lines)

    size = len(mermaid.encode("utf-8"))
    limit = get_settings().mermaid_max_bytes
    if size > limit:
        logger.warning(
            f"Mermaid diagram is {size / 1024:.2f}KB, above the {limit / 1024:.0f}KB limit. "
            f"Reduce the number of nodes or apply a table filter."
        )

    return mermaid


# ============================================================================
# JSON
# ============================================================================


def serialize_erd_data(erd_data: ERDData) -> str:
    """ERD graph as indented JSON with camelCase keys."""
    return erd_data.model_dump_json(by_alias=True, indent=2)


def deserialize_erd_data(payload: str) -> ERDData:
    """Parse JSON produced by ``serialize_erd_data``."""
    return ERDData.model_validate_json(payload)

"""Restrict a generated graph to selected tables and their neighbourhood."""

from typing import Iterable, List, Set
from datadict.models.erd import ERDData, ERDMapping, ERDMetadata


def _follow(
    mappings: Iterable[ERDMapping],
    included: Set[str],
    source_type: str,
    target_type: str,
    reverse: bool = False,
) -> None:
    """Add the far endpoint of every matching mapping whose near endpoint is included."""
    for mapping in mappings:
        if mapping.source_type != source_type or mapping.target_type != target_type:
            continue
        near, far = (
            (mapping.target_id, mapping.source_id)
            if reverse
            else (mapping.source_id, mapping.target_id)
        )
        if near in included:
            included.add(far)


def filter_erd_data_by_table_ids(
    erd_data: ERDData, table_ids: List[str], include_related: bool = True
) -> ERDData:
    """
    Keep the selected tables and what hangs off them.

    Always kept: the selected tables, their columns and the databases
    holding them. With ``include_related`` also entities mapped from those
    tables or columns, the attributes of those entities, the domains of the
    kept columns and the databases of the kept entities. Edges and mappings
    survive only when both endpoints do; metadata is recomputed.

    Args:
        erd_data: Full graph
        table_ids: Selected table ids; empty means no filtering
        include_related: Pull in the logical and domain neighbourhood

    Returns:
        Filtered graph
    """
    if not table_ids:
        return erd_data

    selected = set(table_ids)
    included: Set[str] = {
        node.id for node in erd_data.nodes if node.type == "table" and node.id in selected
    }
    mappings = erd_data.mappings

    _follow(mappings, included, "table", "column")

    if include_related:
        _follow(mappings, included, "table", "entity")
        _follow(mappings, included, "column", "entity")
        _follow(mappings, included, "entity", "attribute")
        _follow(mappings, included, "column", "domain")

    _follow(mappings, included, "database", "table", reverse=True)
    if include_related:
        _follow(mappings, included, "database", "entity", reverse=True)

    nodes = [node for node in erd_data.nodes if node.id in included]
    edges = [
        edge for edge in erd_data.edges
        if edge.source in included and edge.target in included
    ]
    kept_mappings = [
        mapping for mapping in mappings
        if mapping.source_id in included and mapping.target_id in included
    ]

    return ERDData(
        nodes=nodes,
        edges=edges,
        mappings=kept_mappings,
        metadata=ERDMetadata.for_graph(
            nodes, edges, kept_mappings, erd_data.metadata.generated_at
        ),
    )

"""Layered dependency graph models."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import Field
from .relations import Cardinality, ReportModel

LayerType = Literal["logical", "physical", "logical-physical", "domain"]
NodeType = Literal["database", "entity", "attribute", "table", "column", "domain"]


class ERDNode(ReportModel):
    """A graph vertex; ``data`` is the entry as persisted (camelCase keys)."""

    id: str
    type: NodeType
    layer_type: LayerType
    label: str
    data: Dict[str, Any] = Field(default_factory=dict)


class ERDMapping(ReportModel):
    """A typed relation between two entries."""

    id: str
    source_id: str
    target_id: str
    source_type: NodeType
    target_type: NodeType
    layer_type: LayerType
    mapping_key: str
    relationship_type: Cardinality
    # Mapping-specific values such as schemaName, fkInfo or suffix
    details: Dict[str, str] = Field(default_factory=dict)


class ERDEdge(ReportModel):
    """Renderable edge derived from a mapping."""

    id: str
    source: str
    target: str
    type: str
    label: Optional[str] = None
    mapping: ERDMapping


class ERDMetadata(ReportModel):
    """Graph counters, recomputed after every filter."""

    generated_at: str
    total_nodes: int = 0
    total_edges: int = 0
    total_mappings: int = 0
    logical_nodes: int = 0
    physical_nodes: int = 0
    domain_nodes: int = 0

    @classmethod
    def for_graph(
        cls,
        nodes: List[ERDNode],
        edges: List["ERDEdge"],
        mappings: List[ERDMapping],
        generated_at: str,
    ) -> "ERDMetadata":
        """Count nodes per layer plus edges and mappings."""
        return cls(
            generated_at=generated_at,
            total_nodes=len(nodes),
            total_edges=len(edges),
            total_mappings=len(mappings),
            logical_nodes=sum(1 for n in nodes if n.layer_type == "logical"),
            physical_nodes=sum(1 for n in nodes if n.layer_type == "physical"),
            domain_nodes=sum(1 for n in nodes if n.layer_type == "domain"),
        )


class ERDData(ReportModel):
    """Nodes, edges, mappings and metadata of one graph."""

    nodes: List[ERDNode] = Field(default_factory=list)
    edges: List[ERDEdge] = Field(default_factory=list)
    mappings: List[ERDMapping] = Field(default_factory=list)
    metadata: ERDMetadata


class ERDFilterOptions(ReportModel):
    """Restrict the graph to some tables and, optionally, their neighbours."""

    table_ids: List[str] = Field(default_factory=list)
    include_related: bool = True


class ERDTableSummary(ReportModel):
    """Row of the table picker listing."""

    id: str
    table_english_name: Optional[str] = None
    table_korean_name: Optional[str] = None
    schema_name: Optional[str] = None
    physical_db_name: Optional[str] = None

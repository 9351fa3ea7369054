"""ERD graph mapping, filtering and rendering."""

from .mapper import extract_suffix, generate_all_mappings
from .filter import filter_erd_data_by_table_ids
from .generator import (
    deserialize_erd_data,
    generate_erd_data,
    generate_mermaid_erd,
    sanitize_node_name,
    serialize_erd_data,
)

__all__ = [
    "extract_suffix",
    "generate_all_mappings",
    "filter_erd_data_by_table_ids",
    "deserialize_erd_data",
    "generate_erd_data",
    "generate_mermaid_erd",
    "sanitize_node_name",
    "serialize_erd_data",
]

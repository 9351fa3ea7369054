"""Document storage, lookup cache, context loading and the relation registry."""

from .store import DocumentStore, DocumentStoreError
from .cache import LookupCache, build_vocabulary_map
from .context_loader import FileSelection, load_design_relation_context
from .registry import FileRelation, FileRelationRegistry, RegistryData

__all__ = [
    "DocumentStore",
    "DocumentStoreError",
    "LookupCache",
    "build_vocabulary_map",
    "FileSelection",
    "load_design_relation_context",
    "FileRelation",
    "FileRelationRegistry",
    "RegistryData",
]

"""Assemble a MappingContext from stored documents."""

from typing import Dict, List, Optional, Tuple
from datadict.config.logging import get_logger
from datadict.config.settings import get_settings
from datadict.models.context import MappingContext
from datadict.models.entries import DEFINITION_TYPES, DesignEntry, DocType
from datadict.models.relations import ReportModel
from .cache import LookupCache, VocabularyMap
from .store import DocumentStore, DocumentStoreError

logger = get_logger(__name__)


class FileSelection(ReportModel):
    """Filename chosen per document type (None when nothing was loaded)."""

    database: Optional[str] = None
    entity: Optional[str] = None
    attribute: Optional[str] = None
    table: Optional[str] = None
    column: Optional[str] = None
    domain: Optional[str] = None
    vocabulary: Optional[str] = None

    def definition_files(self) -> Dict[str, Optional[str]]:
        """Only the five definition document types."""
        return {doc_type: getattr(self, doc_type) for doc_type in DEFINITION_TYPES}


def _clean(filename: Optional[str]) -> Optional[str]:
    if filename is None or not filename.strip():
        return None
    return filename.strip()


def _load_entries(
    store: DocumentStore,
    doc_type: DocType,
    filename: Optional[str],
    fallback: bool,
) -> Tuple[List[DesignEntry], Optional[str]]:
    """Explicit file, else first available file when ``fallback``, else nothing."""
    if filename:
        return list(store.load(doc_type, filename).entries), filename
    if not fallback:
        return [], None

    files = store.list_files(doc_type)
    if not files:
        return [], None
    selected = files[0]
    logger.debug(f"No {doc_type} file given, using {selected}")
    return list(store.load(doc_type, selected).entries), selected


def _load_vocabulary(
    store: DocumentStore,
    filename: Optional[str],
    cache: LookupCache,
) -> Tuple[Optional[VocabularyMap], Optional[str]]:
    selected = filename or next(iter(store.list_files("vocabulary")), None)
    if not selected:
        return None, None
    try:
        return cache.vocabulary_map(store, selected), selected
    except DocumentStoreError as e:
        logger.warning(f"Failed to load vocabulary for relation context: {e}")
        return None, selected


def load_design_relation_context(
    store: DocumentStore,
    selection: Optional[Dict[str, Optional[str]]] = None,
    include_domain: bool = False,
    include_vocabulary: bool = False,
    fallback: Optional[bool] = None,
    cache: Optional[LookupCache] = None,
) -> Tuple[MappingContext, FileSelection]:
    """
    Load one file per document type into a MappingContext.

    Args:
        store: Document store
        selection: Filename per document type; missing types fall back
        include_domain: Load the domain document as well
        include_vocabulary: Build the vocabulary map (failures are logged
            and leave the map out)
        fallback: Use the first available file when none is given
            (defaults to ``settings.fallback_to_first_file``)
        cache: Lookup cache shared across loads

    Returns:
        (context, files actually selected)

    Raises:
        DocumentStoreError: If a definition or domain document cannot be loaded
    """
    selection = {k: _clean(v) for k, v in (selection or {}).items()}
    if fallback is None:
        fallback = get_settings().fallback_to_first_file
    cache = cache or LookupCache()

    collections: Dict[str, List[DesignEntry]] = {}
    files = FileSelection()
    for doc_type in DEFINITION_TYPES:
        entries, selected = _load_entries(store, doc_type, selection.get(doc_type), fallback)
        collections[doc_type] = entries
        setattr(files, doc_type, selected)

    domains: List[DesignEntry] = []
    if include_domain:
        domains, files.domain = _load_entries(store, "domain", selection.get("domain"), fallback)

    vocabulary_map = None
    if include_vocabulary:
        vocabulary_map, files.vocabulary = _load_vocabulary(
            store, selection.get("vocabulary"), cache
        )

    context = MappingContext(
        databases=collections["database"],
        entities=collections["entity"],
        attributes=collections["attribute"],
        tables=collections["table"],
        columns=collections["column"],
        domains=domains,
        vocabulary_map=vocabulary_map,
        domain_map={d.id: d for d in domains} if include_domain else None,
    )

    logger.info(
        "Loaded relation context: "
        + ", ".join(f"{t}={getattr(files, t)}" for t in DEFINITION_TYPES)
    )
    return context, files

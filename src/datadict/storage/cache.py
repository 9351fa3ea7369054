"""Explicit lookup cache for derived maps (no module-level state)."""

from typing import Dict, Optional, Tuple
from datadict.config.logging import get_logger
from datadict.models.context import VocabularyRef
from datadict.models.entries import DocumentData
from .store import DocumentStore

logger = get_logger(__name__)

VocabularyMap = Dict[str, VocabularyRef]


def build_vocabulary_map(data: DocumentData) -> VocabularyMap:
    """
    Index vocabulary entries by case-folded standard name and abbreviation.

    Entries missing either name are skipped.
    """
    vocabulary: VocabularyMap = {}
    for entry in data.entries:
        standard_name = (entry.standard_name or "").strip()
        abbreviation = (entry.abbreviation or "").strip()
        if not standard_name or not abbreviation:
            continue
        ref = VocabularyRef(
            standard_name=standard_name,
            abbreviation=abbreviation,
            domain_category=entry.domain_category,
        )
        vocabulary[standard_name.lower()] = ref
        vocabulary[abbreviation.lower()] = ref
    return vocabulary


class LookupCache:
    """
    Vocabulary maps keyed by filename.

    An entry is reused while the file's modification time is unchanged.
    Pass one instance to every context load that should share lookups.
    """

    def __init__(self):
        self._vocabulary: Dict[str, Tuple[int, VocabularyMap]] = {}

    def vocabulary_map(self, store: DocumentStore, filename: str) -> VocabularyMap:
        """
        Vocabulary map of ``filename``, loading it on a miss.

        Raises:
            DocumentStoreError: If the vocabulary document cannot be loaded
        """
        path = store.resolve("vocabulary", filename)
        mtime = path.stat().st_mtime_ns if path.is_file() else -1

        cached = self._vocabulary.get(filename)
        if cached is not None and cached[0] == mtime:
            return cached[1]

        vocabulary = build_vocabulary_map(store.load("vocabulary", filename))
        self._vocabulary[filename] = (mtime, vocabulary)
        logger.debug(f"Cached vocabulary map for {filename} ({len(vocabulary)} keys)")
        return vocabulary

    def invalidate(self, filename: Optional[str] = None) -> None:
        """Drop one cached file, or everything when ``filename`` is None."""
        if filename is None:
            self._vocabulary.clear()
        else:
            self._vocabulary.pop(filename, None)

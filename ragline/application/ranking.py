"""
Name: Retrieval Ordering

Responsibilities:
  - Turn raw vector store hits into a RetrievalResult
  - Order by descending score, ties broken by document id ascending
  - Keep at most k hits, one per document id

Collaborators:
  - application.pipeline: calls rank_results after every search
  - domain.entities: ScoredDocument, RetrievalResult

Notes:
  - Stores already sort by similarity; ordering is re-applied here so the
    result does not depend on the store's own tie handling
"""

from typing import Iterable, List, Set

from ..domain.entities import DocumentId, RetrievalResult, ScoredDocument


def _sort_key(hit: ScoredDocument) -> tuple[float, DocumentId]:
    return (-hit.score, hit.document_id)


def rank_results(hits: Iterable[ScoredDocument], k: int) -> RetrievalResult:
    """
    R: Deterministic top-k selection.

    Args:
        hits: Store hits in any order
        k: Maximum number of results (must be > 0)

    Returns:
        RetrievalResult with len <= k
    """
    if k <= 0:
        raise ValueError("k must be greater than 0")

    # R: Stable sort, so equal (score, id) pairs keep the store's order
    ordered = sorted(hits, key=_sort_key)

    seen: Set[DocumentId] = set()
    selected: List[ScoredDocument] = []
    for hit in ordered:
        if hit.document_id in seen:
            continue
        seen.add(hit.document_id)
        selected.append(hit)
        if len(selected) == k:
            break

    return RetrievalResult(items=tuple(selected))

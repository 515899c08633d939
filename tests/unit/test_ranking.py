"""
Name: Retrieval Ordering Unit Tests

Responsibilities:
  - Verify descending score order with id tie-break
  - Verify top-k truncation and duplicate handling

Collaborators:
  - ragline.application.ranking: Module under test
"""

import pytest

from ragline.application.ranking import rank_results
from ragline.domain.entities import Document, ScoredDocument


def _hit(doc_id: str, score: float) -> ScoredDocument:
    return ScoredDocument(document=Document(id=doc_id, text=doc_id), score=score)


@pytest.mark.unit
class TestRankResults:
    def test_top3_with_tie_breaks_by_id(self, sample_hits):
        """R: scores [0.9, 0.9, 0.7, 0.5, 0.1] -> d1, d2, d3."""
        result = rank_results(sample_hits, 3)

        assert result.document_ids == ["d1", "d2", "d3"]
        assert [item.score for item in result] == [0.9, 0.9, 0.7]

    def test_is_deterministic_regardless_of_input_order(self, sample_hits):
        first = rank_results(sample_hits, 5)
        second = rank_results(list(reversed(sample_hits)), 5)

        assert first.document_ids == second.document_ids

    def test_returns_all_when_fewer_than_k(self):
        result = rank_results([_hit("b", 0.2), _hit("a", 0.3)], 10)

        assert result.document_ids == ["a", "b"]

    def test_empty_hits_give_empty_result(self):
        result = rank_results([], 5)

        assert len(result) == 0
        assert result.document_ids == []

    def test_duplicate_ids_keep_best_score(self):
        result = rank_results([_hit("a", 0.1), _hit("a", 0.8), _hit("b", 0.5)], 3)

        assert result.document_ids == ["a", "b"]
        assert result.items[0].score == 0.8

    def test_rejects_non_positive_k(self):
        with pytest.raises(ValueError):
            rank_results([_hit("a", 0.1)], 0)

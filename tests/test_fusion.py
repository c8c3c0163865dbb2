"""Tests for query expansion and reciprocal rank fusion."""

import pytest

from shared.models.rag import RankedResult
from shared.rag.query_expansion import expand_query
from shared.rag.rrf import reciprocal_rank_fusion


def _ranked(*ids: str) -> list[RankedResult]:
    return [RankedResult(id=doc_id, score=10.0 - rank) for rank, doc_id in enumerate(ids)]


class TestExpandQuery:
    def test_word_synonyms_appended(self):
        assert expand_query("dotnet skills") == "dotnet skills .net c# csharp"

    def test_phrase_synonyms(self):
        assert expand_query("machine learning jobs") == "machine learning jobs ai ml artificial intelligence"

    def test_original_kept_verbatim(self):
        assert expand_query("Tell me about RAG").startswith("Tell me about RAG ")

    def test_each_synonym_once(self):
        expanded = expand_query("ai ml")
        additions = expanded[len("ai ml "):]
        assert additions.count("artificial intelligence") == 1

    def test_no_synonyms(self):
        assert expand_query("guitar lessons") == "guitar lessons"


class TestReciprocalRankFusion:
    def test_rank_based_scores(self):
        fused = reciprocal_rank_fusion([_ranked("a", "b"), _ranked("b", "c")])
        assert [result.id for result in fused] == ["b", "a", "c"]
        assert fused[0].score == pytest.approx(1 / 61 + 1 / 62)

    def test_top_n(self):
        fused = reciprocal_rank_fusion([_ranked("a", "b", "c", "d")], top_n=2)
        assert [result.id for result in fused] == ["a", "b"]

    def test_input_scores_ignored(self):
        low = [RankedResult(id="x", score=0.001)]
        high = [RankedResult(id="y", score=1000.0)]
        fused = reciprocal_rank_fusion([low, high])
        assert fused[0].score == fused[1].score

    def test_empty(self):
        assert reciprocal_rank_fusion([]) == []
        assert reciprocal_rank_fusion([[], []]) == []

    def test_list_order_does_not_change_scores(self):
        first = _ranked("a", "b", "c")
        second = _ranked("c", "d", "a", "e")

        forward = {result.id: result.score for result in reciprocal_rank_fusion([first, second], top_n=10)}
        backward = {result.id: result.score for result in reciprocal_rank_fusion([second, first], top_n=10)}
        assert forward == pytest.approx(backward)

    def test_single_list_keeps_its_order(self):
        ranked = _ranked("d", "a", "c", "b", "e", "f", "g")
        fused = reciprocal_rank_fusion([ranked], top_n=5)
        assert [result.id for result in fused] == ["d", "a", "c", "b", "e"]

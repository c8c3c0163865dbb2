"""Reciprocal Rank Fusion of ranked result lists."""

from shared.models.rag import RankedResult

DEFAULT_K = 60
DEFAULT_TOP_N = 5


def reciprocal_rank_fusion(
    ranked_lists: list[list[RankedResult]],
    k: int = DEFAULT_K,
    top_n: int = DEFAULT_TOP_N,
) -> list[RankedResult]:
    """Merge ranked lists by rank alone.

    A document at 0-based rank r in a list contributes 1 / (k + r + 1). Input scores
    are never compared across lists.

    Args:
        ranked_lists (list[list[RankedResult]]): Lists sorted best first.
        k (int): Rank damping constant.
        top_n (int): Maximum number of fused results.

    Returns:
        list[RankedResult]: Fused results, best first, at most top_n.
    """
    scores: dict[str, float] = {}
    for ranked in ranked_lists:
        for rank, result in enumerate(ranked):
            scores[result.id] = scores.get(result.id, 0.0) + 1 / (k + rank + 1)

    fused = [RankedResult(id=doc_id, score=score) for doc_id, score in scores.items()]
    fused.sort(key=lambda result: result.score, reverse=True)
    return fused[:top_n]

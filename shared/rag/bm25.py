"""Okapi BM25 over the chunk corpus."""

import math
from collections import Counter
from typing import Callable

from shared.models.rag import BM25Doc, BM25Index, Chunk, RankedResult
from shared.rag.text_utils import tokenize

K1 = 1.5
B = 0.75

Tokenizer = Callable[[str], list[str]]


def build_bm25_index(chunks: list[Chunk], tokenize_fn: Tokenizer = tokenize) -> BM25Index:
    """Accumulate term frequencies, document lengths and smoothed idf.

    idf(t) = log((N - df(t) + 0.5) / (df(t) + 0.5) + 1)

    Args:
        chunks (list[Chunk]): Passages to index, in order.
        tokenize_fn (Tokenizer): Must be the same tokenizer used at query time.

    Returns:
        BM25Index: The inverted statistics. avg_dl is 0 for an empty corpus.
    """
    docs: dict[str, BM25Doc] = {}
    total_len = 0
    for chunk in chunks:
        tokens = tokenize_fn(chunk.content)
        docs[chunk.id] = BM25Doc(len=len(tokens), tf=dict(Counter(tokens)))
        total_len += len(tokens)

    doc_count = len(docs)
    df: Counter = Counter()
    for doc in docs.values():
        df.update(doc.tf.keys())

    idf = {term: math.log((doc_count - freq + 0.5) / (freq + 0.5) + 1) for term, freq in df.items()}
    avg_dl = total_len / doc_count if doc_count else 0.0

    return BM25Index(avg_dl=avg_dl, doc_count=doc_count, docs=docs, idf=idf)


def score_bm25(query: str, index: BM25Index, tokenize_fn: Tokenizer = tokenize) -> list[RankedResult]:
    """Score every document against the query.

    Each distinct query term counts once. Terms unknown to the index contribute
    nothing. Ties keep index insertion order.

    Args:
        query (str): Raw query text.
        index (BM25Index): The built index.
        tokenize_fn (Tokenizer): Tokenizer matching the one used at build time.

    Returns:
        list[RankedResult]: Documents with a positive score, best first.
    """
    terms = list(dict.fromkeys(tokenize_fn(query)))
    if not terms or not index.docs or index.avg_dl <= 0:
        return []

    scores: list[RankedResult] = []
    for doc_id, doc in index.docs.items():
        score = 0.0
        for term in terms:
            term_idf = index.idf.get(term)
            if not term_idf:
                continue
            term_tf = doc.tf.get(term, 0)
            if term_tf == 0:
                continue
            numerator = term_tf * (K1 + 1)
            denominator = term_tf + K1 * (1 - B + B * (doc.len / index.avg_dl))
            score += term_idf * (numerator / denominator)
        if score > 0:
            scores.append(RankedResult(id=doc_id, score=score))

    # sort is stable, so equal scores keep insertion order
    scores.sort(key=lambda result: result.score, reverse=True)
    return scores

"""Hybrid retrieval: expanded-query BM25 fused with HyDE by reciprocal rank."""

import json
import os

from services.rag.HydeGenerator import HydeGenerator
from shared.helper.HelperConfig import HelperConfig
from shared.knowledge.corpus import KNOWLEDGE
from shared.knowledge.lookup import search_knowledge
from shared.models.knowledge import Knowledge
from shared.models.rag import BM25Index, Chunk, RankedResult
from shared.rag.bm25 import score_bm25
from shared.rag.query_expansion import expand_query
from shared.rag.rag_index import load_rag_index
from shared.rag.rrf import reciprocal_rank_fusion

TOP_N = 5


class RagPipeline:
    """Answers search_knowledge calls.

    Falls back to the keyword search of the corpus when the index cannot be loaded
    or the fused ranking is empty; the caller never sees a retrieval error.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        hyde_generator: HydeGenerator,
        index_dir: str | None = None,
        knowledge: Knowledge = KNOWLEDGE,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._hyde = hyde_generator
        self._knowledge = knowledge
        default_dir = os.path.join(helper_config.get_root_dir(), "data")
        self.index_dir = index_dir or helper_config.get_string_val("RAG_INDEX_DIR", default=default_dir)

    ##########################################
    ############### CORE #####################
    ##########################################

    def _load(self) -> tuple[BM25Index, list[Chunk]] | None:
        try:
            return load_rag_index(self.index_dir)
        except (OSError, ValueError) as e:
            self.logging.warning("RAG index unavailable in %s, using keyword search: %s", self.index_dir, e)
            return None

    def _fallback(self, query: str) -> str:
        return json.dumps(search_knowledge(query, self._knowledge))

    async def rank(self, query: str, index: BM25Index) -> list[RankedResult]:
        """Fuse the BM25 ranking of the expanded query with the HyDE ranking of the original one."""
        bm25_results = score_bm25(expand_query(query), index)
        hyde_results = await self._hyde.retrieve(query, index)

        ranked_lists = [bm25_results]
        if hyde_results:
            ranked_lists.append(hyde_results)
        return reciprocal_rank_fusion(ranked_lists, top_n=TOP_N)

    async def search(self, query: str) -> str:
        """Retrieve passages for a query.

        Args:
            query (str): The user's question as passed by the model.

        Returns:
            str: JSON array of {"topic", "content"}, never empty.
        """
        loaded = self._load()
        if loaded is None:
            return self._fallback(query)
        index, chunks = loaded

        chunk_map = {chunk.id: chunk for chunk in chunks}
        fused = await self.rank(query, index)
        results = [
            {"topic": chunk_map[result.id].topic, "content": chunk_map[result.id].content}
            for result in fused
            if result.id in chunk_map
        ]
        self.logging.debug("RAG search '%s' -> %d passage(s)", query, len(results))

        if not results:
            return self._fallback(query)
        return json.dumps(results)

"""Hypothetical-document retrieval (HyDE) over the BM25 index.

The LLM writes a short paragraph that would answer the question; that paragraph is
scored against the index like a query. Strictly best-effort.
"""

import asyncio

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.rag import BM25Index, RankedResult
from shared.rag.bm25 import score_bm25

HYDE_TIMEOUT = 3.0      # seconds for the whole LLM call
HYDE_MAX_TOKENS = 200
HYDE_SYSTEM_PROMPT = (
    "You are a knowledge base assistant. Given a question, write a short factual paragraph that would answer it. "
    "Write as if you are describing a real person's professional background. Be specific with technologies, "
    "companies, and achievements."
)


class HydeGenerator:
    def __init__(self, helper_config: HelperConfig, llm_client: LLMClientInterface | None, timeout: float = HYDE_TIMEOUT):
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client
        self.timeout = timeout

    async def generate(self, query: str) -> str:
        """Ask the LLM for a hypothetical answer paragraph.

        Raises:
            asyncio.TimeoutError: If the call exceeds the timeout.
            Exception: Any client error.
        """
        return await asyncio.wait_for(
            self._llm_client.do_complete_text(
                system=HYDE_SYSTEM_PROMPT,
                prompt=query,
                max_tokens=HYDE_MAX_TOKENS,
                timeout=self.timeout,
            ),
            timeout=self.timeout,
        )

    async def retrieve(self, query: str, index: BM25Index) -> list[RankedResult]:
        """Score the hypothetical paragraph against the index.

        Never raises: a missing client or key, a timeout or any backend error yields [].

        Args:
            query (str): The original (unexpanded) user query.
            index (BM25Index): The loaded index.

        Returns:
            list[RankedResult]: BM25 ranking of the paragraph, possibly empty.
        """
        if self._llm_client is None or not self._llm_client.has_api_key():
            return []
        try:
            paragraph = await self.generate(query)
        except asyncio.TimeoutError:
            self.logging.warning("HyDE timed out after %.1fs, using keyword ranking only.", self.timeout)
            return []
        except Exception as e:
            self.logging.warning("HyDE failed, using keyword ranking only: %s", e)
            return []
        return score_bm25(paragraph, index)

"""Index build entry point.

Chunks the portfolio corpus, computes the BM25 statistics and writes
chunks.json plus bm25-index.json to RAG_INDEX_DIR (default <ROOT_DIR>/data).
Run once per deploy, before the server starts.

Usage:
    python -m indexer.index_runner
"""

import os

from shared.helper.HelperConfig import HelperConfig
from shared.knowledge.corpus import KNOWLEDGE
from shared.logging.logging_setup import setup_logging
from shared.models.knowledge import Knowledge
from shared.models.rag import BM25Index
from shared.rag.bm25 import build_bm25_index
from shared.rag.chunker import chunk_knowledge
from shared.rag.rag_index import write_rag_index


def build_index(index_dir: str, knowledge: Knowledge = KNOWLEDGE) -> BM25Index:
    """Build both retrieval artifacts into a directory.

    Args:
        index_dir (str): Target directory, created if missing.
        knowledge (Knowledge): The corpus to index.

    Returns:
        BM25Index: The index that was written.
    """
    chunks = chunk_knowledge(knowledge)
    index = build_bm25_index(chunks)
    write_rag_index(index_dir, index, chunks)
    return index


def main() -> None:
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    index_dir = config.get_string_val("RAG_INDEX_DIR", default=os.path.join(config.get_root_dir(), "data"))

    index = build_index(index_dir)
    logger.info(
        "Indexed %d chunks, %d unique terms, average document length %.1f into %s",
        index.doc_count,
        len(index.idf),
        index.avg_dl,
        index_dir,
    )


if __name__ == "__main__":
    main()

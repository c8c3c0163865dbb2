"""Read and write the compiled retrieval artifacts.

Layout of an index directory:
  chunks.json      array of Chunk records (pretty-printed)
  bm25-index.json  the BM25Index record with camelCase keys
"""

import json
import os
import threading

from shared.models.rag import BM25Index, Chunk

CHUNKS_FILE = "chunks.json"
INDEX_FILE = "bm25-index.json"

_cache: dict[str, tuple[BM25Index, list[Chunk]]] = {}
_cache_lock = threading.Lock()


def load_rag_index(index_dir: str) -> tuple[BM25Index, list[Chunk]]:
    """Load the artifacts of a directory, caching them for the life of the process.

    Args:
        index_dir (str): Directory holding chunks.json and bm25-index.json.

    Returns:
        tuple[BM25Index, list[Chunk]]: The index and the chunks it was built from.

    Raises:
        OSError: If an artifact is missing or unreadable.
        ValueError: If an artifact does not parse into its model.
    """
    key = os.path.abspath(index_dir)
    with _cache_lock:
        cached = _cache.get(key)
    if cached is not None:
        return cached

    with open(os.path.join(key, INDEX_FILE), "r", encoding="utf-8") as f:
        index = BM25Index.model_validate(json.load(f))
    with open(os.path.join(key, CHUNKS_FILE), "r", encoding="utf-8") as f:
        chunks = [Chunk.model_validate(item) for item in json.load(f)]

    with _cache_lock:
        _cache[key] = (index, chunks)
    return index, chunks


def write_rag_index(index_dir: str, index: BM25Index, chunks: list[Chunk]) -> tuple[str, str]:
    """Write both artifacts, replacing any previous build, and drop the cached copy.

    Returns:
        tuple[str, str]: Paths of the chunks file and the index file.
    """
    os.makedirs(index_dir, exist_ok=True)
    chunks_path = os.path.join(index_dir, CHUNKS_FILE)
    index_path = os.path.join(index_dir, INDEX_FILE)

    with open(chunks_path, "w", encoding="utf-8") as f:
        json.dump([chunk.model_dump() for chunk in chunks], f, indent=2, ensure_ascii=False)
    with open(index_path, "w", encoding="utf-8") as f:
        json.dump(index.model_dump(by_alias=True), f, ensure_ascii=False)

    clear_cache()
    return chunks_path, index_path


def clear_cache() -> None:
    with _cache_lock:
        _cache.clear()

"""Models shared by the retrieval pipeline and the offline index build."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ChunkCategory = Literal["about", "project", "experience", "skills", "education", "interests", "portfolio"]


class Chunk(BaseModel):
    """Atomic retrievable passage produced from the corpus at index-build time.

    Attributes:
        id:       Stable identifier, unique across the corpus (e.g. "project-enterprise-agentic-chatbot-framework").
        topic:    Short human-readable title.
        category: Corpus section the passage comes from.
        content:  Plain text used for scoring and returned to the model.
        metadata: Free-form details about the source record.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    topic: str
    category: ChunkCategory
    content: str
    metadata: dict[str, Any] = {}


class RankedResult(BaseModel):
    """A document id with a strictly positive score. Lists of these are sorted descending."""

    id: str
    score: float


class BM25Doc(BaseModel):
    len: int
    tf: dict[str, int]


class BM25Index(BaseModel):
    """Inverted statistics of the chunk corpus.

    Serialized with the camelCase keys used by the `bm25-index.json` artifact.
    """

    model_config = ConfigDict(populate_by_name=True)

    avg_dl: float = Field(alias="avgDl")
    doc_count: int = Field(alias="docCount")
    docs: dict[str, BM25Doc]
    idf: dict[str, float]


class Passage(BaseModel):
    """A retrieval result as handed to the model: topic plus content."""

    topic: str
    content: str

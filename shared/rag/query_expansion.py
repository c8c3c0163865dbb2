"""Additive query expansion through a static synonym lexicon."""

SYNONYM_MAP: dict[str, list[str]] = {
    "dotnet": [".net", "c#", "csharp"],
    ".net": ["dotnet", "c#", "csharp"],
    "c#": ["csharp", "dotnet", ".net"],
    "csharp": ["c#", "dotnet", ".net"],
    "ai": ["artificial intelligence", "machine learning", "llm", "ml"],
    "ml": ["machine learning", "ai", "artificial intelligence"],
    "llm": ["large language model", "ai", "claude", "gpt"],
    "rag": ["retrieval augmented generation", "vector search", "semantic search"],
    "mcp": ["model context protocol", "tool calling", "ai agent"],
    "langchain": ["langgraph", "llm orchestration"],
    "langgraph": ["langchain", "agent orchestration"],
    "react": ["frontend", "typescript", "web"],
    "flutter": ["dart", "mobile", "cross-platform"],
    "docker": ["container", "deployment", "devops"],
    "azure": ["cloud", "microsoft", "devops"],
    "grpc": ["protocol", "transport", "signalr"],
    "signalr": ["protocol", "transport", "grpc", "websocket"],
    "sse": ["server-sent events", "streaming", "event stream"],
    "websocket": ["real-time", "streaming", "signalr"],
    "idesign": ["architecture", "methodology", "juval lowy", "clean architecture"],
    "solid": ["design principles", "architecture", "clean code"],
    "ddd": ["domain-driven design", "architecture"],
    "devops": ["ci/cd", "pipeline", "deployment", "docker"],
    "security": ["authentication", "jwt", "encryption", "owasp"],
    "jwt": ["authentication", "token", "security"],
    "python": ["fastapi", "langchain", "pydantic"],
    "fastapi": ["python", "api", "backend"],
    "sql": ["database", "t-sql", "postgresql", "sqlite"],
    "vector": ["embedding", "qdrant", "faiss", "semantic search"],
    "qdrant": ["vector database", "semantic search", "embedding"],
    "faiss": ["vector database", "semantic search", "embedding"],
    "music": ["guitar", "vocalist", "songwriting", "album"],
    "game": ["mobile game", "windows phone", "app"],
    "education": ["diploma", "degree", "school", "college"],
    "chatbot": ["ai assistant", "agent", "bot", "chat"],
    "portfolio": ["website", "site", "this site"],
    "experience": ["work", "career", "job", "employment"],
    "senior": ["lead", "principal", "architect"],
    "machine learning": ["ai", "ml", "artificial intelligence"],
    "knowledge base": ["rag", "semantic search", "documentation"],
    "model context protocol": ["mcp", "tool calling"],
}


def expand_query(query: str) -> str:
    """Append synonyms of the query's words and phrases.

    The original query is kept verbatim; synonyms are appended once each, in
    first-seen order.

    Args:
        query (str): Raw user query.

    Returns:
        str: The query, followed by a space and the synonyms when any were found.
    """
    lower = query.lower()
    additions: dict[str, None] = {}

    for word in lower.split():
        for synonym in SYNONYM_MAP.get(word, []):
            additions.setdefault(synonym)

    for phrase, synonyms in SYNONYM_MAP.items():
        if " " in phrase and phrase in lower:
            for synonym in synonyms:
                additions.setdefault(synonym)

    if not additions:
        return query
    return query + " " + " ".join(additions)

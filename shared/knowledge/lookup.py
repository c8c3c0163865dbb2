"""Direct accessors over the knowledge corpus.

These back the lookup tools and serve as the keyword fallback of the retrieval
pipeline. All functions are pure and return JSON-serialisable dicts/lists.
"""

import re

from shared.knowledge.corpus import KNOWLEDGE
from shared.models.knowledge import Knowledge
from shared.rag.text_utils import STOPWORDS

_ABOUT_WORDS = ("about", "who", "background", "summary", "bio")
_EXPERIENCE_WORDS = ("experience", "work", "career", "job")
_SKILL_WORDS = ("skill", "tech", "stack", "language", "framework", "tool")
_EDUCATION_WORDS = ("education", "diploma", "degree", "school", "study")
_INTEREST_WORDS = ("interest", "hobby", "music", "personal", "game", "app")


def _mentions(query: str, words: tuple[str, ...]) -> bool:
    return any(word in query for word in words)


def _about_content(knowledge: Knowledge) -> str:
    return knowledge.about.summary + " Values: " + "; ".join(knowledge.about.values)


def search_knowledge(query: str, knowledge: Knowledge = KNOWLEDGE) -> list[dict]:
    """Keyword search over the corpus.

    A record matches when the query mentions its section (e.g. "project", "career")
    or, for a non-empty query, when the query is a substring of its name, title or
    description. When nothing matches, the About summary is returned.

    Args:
        query (str): Free-text question.
        knowledge (Knowledge): Corpus to search.

    Returns:
        list[dict]: Non-empty list of {"topic", "content"} entries.
    """
    q = query.lower().strip()
    results: list[dict] = []

    if _mentions(q, _ABOUT_WORDS):
        results.append({"topic": "About", "content": _about_content(knowledge)})

    for project in knowledge.projects:
        if (
            "project" in q
            or (q and q in project.name.lower())
            or (q and q in project.description.lower())
            or any(tech.lower() in q for tech in project.tech)
        ):
            results.append({
                "topic": f"Project: {project.name}",
                "content": f"{project.description} Tech: {', '.join(project.tech)}. Highlights: {'; '.join(project.highlights)}",
            })

    for exp in knowledge.experience:
        if (
            _mentions(q, _EXPERIENCE_WORDS)
            or (q and q in exp.company.lower())
            or (exp.short_name and exp.short_name.lower() in q.split())
            or (q and q in exp.title.lower())
        ):
            note = f"{exp.note}. " if exp.note else ""
            results.append({
                "topic": f"{exp.title} at {exp.company} ({exp.period})",
                "content": note + "Responsibilities: " + "; ".join(exp.responsibilities),
            })

    if _mentions(q, _SKILL_WORDS):
        langs = "; ".join(f"{lang.name} ({lang.level}): {lang.description}" for lang in knowledge.skills.languages)
        results.append({
            "topic": "Technical Skills",
            "content": (
                f"Languages: {langs}. Frameworks: {'; '.join(knowledge.skills.frameworks)}. "
                f"Architectural concepts: {'; '.join(knowledge.skills.concepts)}"
            ),
        })

    if _mentions(q, _EDUCATION_WORDS):
        results.append({
            "topic": "Education",
            "content": ". ".join(f"{edu.qualification} from {edu.institution} - {edu.achievement}" for edu in knowledge.education),
        })

    if _mentions(q, _INTEREST_WORDS):
        results.append({
            "topic": "Personal Interests",
            "content": f"Software: {'; '.join(knowledge.interests.software)}. Music: {'; '.join(knowledge.interests.music)}",
        })

    if not results:
        results.append({"topic": "About", "content": knowledge.about.summary})

    return results


def get_project_details(name: str, knowledge: Knowledge = KNOWLEDGE) -> dict:
    """Look up a featured project by name or category keyword.

    Returns:
        dict: {"found": True, "project": {...}} or {"found": False, "message": ...}.
    """
    q = name.lower().strip()
    for project in knowledge.projects:
        if q and (q in project.name.lower() or q in project.category.lower()):
            return {"found": True, "project": project.model_dump()}
    available = ", ".join(project.name for project in knowledge.projects)
    return {"found": False, "message": f"No project found matching '{name}'. Available projects: {available}"}


def get_experience(company: str, knowledge: Knowledge = KNOWLEDGE) -> dict:
    """Look up a work experience entry by company name or abbreviation.

    Returns:
        dict: {"found": True, "experience": {...}} or {"found": False, "message": ...}.
    """
    q = company.lower().strip()
    for exp in knowledge.experience:
        if q and (q in exp.company.lower() or (exp.short_name and q in exp.short_name.lower())):
            return {"found": True, "experience": exp.model_dump(exclude_none=True)}
    companies = ", ".join(exp.company for exp in knowledge.experience)
    return {"found": False, "message": f"No experience found for '{company}'. Companies: {companies}"}


def get_skills_by_category(category: str, knowledge: Knowledge = KNOWLEDGE) -> dict:
    """Return one skill category ("languages", "frameworks", "concepts") or all of them."""
    q = category.lower().strip()
    skills = knowledge.skills.model_dump()
    if q in ("all", "everything"):
        return skills
    if "lang" in q:
        return {"languages": skills["languages"]}
    if "frame" in q or "tool" in q:
        return {"frameworks": skills["frameworks"]}
    if "concept" in q or "arch" in q or "method" in q:
        return {"concepts": skills["concepts"]}
    return skills


def _topic_words(key: str) -> str:
    # "ragPipeline" -> "rag pipeline"
    return re.sub(r"([a-z])([A-Z])", r"\1 \2", key).lower()


def get_portfolio_info(topic: str, knowledge: Knowledge = KNOWLEDGE) -> dict:
    """Describe how the portfolio site is built.

    Matching order: exact topic key, then a key or title contained in the query,
    then any query word found in a section. Unmatched queries get the overview
    together with the list of available topics.

    Returns:
        dict: {"topic", "title", "description"} for a match, or
            {"overview": ..., "available_topics": [...]} otherwise.
    """
    q = topic.lower().strip()
    sections = knowledge.portfolio

    def _found(key: str) -> dict:
        section = sections[key]
        return {"topic": key, "title": section.title, "description": section.description}

    for key in sections:
        if q in (key.lower(), _topic_words(key)):
            return _found(key)

    if q:
        for key, section in sections.items():
            if _topic_words(key) in q or key.lower() in q or section.title.lower() in q:
                return _found(key)

        words = [word for word in re.split(r"[^a-z0-9]+", q) if len(word) >= 3 and word not in STOPWORDS]
        for key, section in sections.items():
            haystack = f"{_topic_words(key)} {section.title} {section.description}".lower()
            if any(word in haystack for word in words):
                return _found(key)

    overview = sections.get("overview")
    return {
        "overview": overview.description if overview else "",
        "available_topics": list(sections.keys()),
    }

"""Flatten the structured corpus into atomic, labelled passages."""

import re

from shared.models.knowledge import Knowledge
from shared.models.rag import Chunk


def slugify(name: str) -> str:
    """Lowercase, collapse runs of non-alphanumerics to "-" and trim leading/trailing "-"."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _kebab(key: str) -> str:
    # "ragPipeline" -> "rag-pipeline"
    return re.sub(r"[A-Z]", lambda match: "-" + match.group(0).lower(), key)


def chunk_knowledge(knowledge: Knowledge) -> list[Chunk]:
    """Produce the ordered chunk list for the corpus.

    Pure function of its input: identical corpora yield identical chunks, and ids only
    change when a source record is renamed.

    Args:
        knowledge (Knowledge): The corpus record.

    Returns:
        list[Chunk]: About, projects, experience, skills, education, interests and
            portfolio passages, in that order.
    """
    chunks: list[Chunk] = [
        Chunk(
            id="about-summary",
            topic="About",
            category="about",
            content=knowledge.about.summary + " Values: " + "; ".join(knowledge.about.values),
            metadata={"type": "about"},
        )
    ]

    for project in knowledge.projects:
        chunks.append(Chunk(
            id="project-" + slugify(project.name),
            topic="Project: " + project.name,
            category="project",
            content=(
                f"{project.name}. {project.category}. {project.description}"
                f" Technologies: {', '.join(project.tech)}. Highlights: {'; '.join(project.highlights)}"
            ),
            metadata={"name": project.name, "tech": list(project.tech)},
        ))

    for exp in knowledge.experience:
        heading = f"{exp.title} at {exp.company} ({exp.period})"
        content = heading + ". "
        if exp.note:
            content += exp.note + ". "
        if exp.short_name:
            content += f"Also known as {exp.short_name}. "
        content += "Responsibilities: " + "; ".join(exp.responsibilities)
        chunks.append(Chunk(
            id="experience-" + slugify(exp.company),
            topic=heading,
            category="experience",
            content=content,
            metadata={"company": exp.company, "period": exp.period},
        ))

    languages = "; ".join(f"{lang.name} ({lang.level}): {lang.description}" for lang in knowledge.skills.languages)
    chunks.extend([
        Chunk(
            id="skills-languages",
            topic="Technical Skills - Languages",
            category="skills",
            content="Programming languages: " + languages,
            metadata={"type": "languages"},
        ),
        Chunk(
            id="skills-frameworks",
            topic="Technical Skills - Frameworks & Tools",
            category="skills",
            content="Frameworks and tools: " + "; ".join(knowledge.skills.frameworks),
            metadata={"type": "frameworks"},
        ),
        Chunk(
            id="skills-concepts",
            topic="Technical Skills - Architectural Concepts",
            category="skills",
            content="Architectural concepts and methodologies: " + "; ".join(knowledge.skills.concepts),
            metadata={"type": "concepts"},
        ),
    ])

    for edu in knowledge.education:
        subjects = f" Subjects: {', '.join(edu.subjects)}." if edu.subjects else ""
        chunks.append(Chunk(
            id="education-" + slugify(edu.institution),
            topic="Education: " + edu.institution,
            category="education",
            content=f"{edu.qualification} from {edu.institution}. {edu.achievement}.{subjects}",
            metadata={"institution": edu.institution},
        ))

    chunks.extend([
        Chunk(
            id="interests-software",
            topic="Personal Interests - Software",
            category="interests",
            content="Software interests: " + "; ".join(knowledge.interests.software),
            metadata={"type": "software"},
        ),
        Chunk(
            id="interests-music",
            topic="Personal Interests - Music",
            category="interests",
            content="Music interests: " + "; ".join(knowledge.interests.music),
            metadata={"type": "music"},
        ),
    ])

    for key, section in knowledge.portfolio.items():
        chunks.append(Chunk(
            id="portfolio-" + _kebab(key),
            topic=section.title,
            category="portfolio",
            content=f"{section.title}. {section.description}",
            metadata={"section": key},
        ))

    return chunks

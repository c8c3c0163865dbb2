"""Input sanitisation, spotlighting and output leakage filtering for the agent loop."""

import re

from shared.models.agent import HistoryMessage

MAX_INPUT_CHARS = 2000
MAX_HISTORY_MESSAGES = 10

SPOTLIGHT_OPEN = "<user_input>"
SPOTLIGHT_CLOSE = "</user_input>"

# control characters except \t (0x09) and \n (0x0a)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_NEWLINE_RUNS = re.compile(r"\n{4,}")
_DELIMITER_TAGS = re.compile(r"</?\s*user_input\s*>", re.IGNORECASE)

LEAKAGE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"CRITICAL"),
    re.compile(r"spotlighting", re.IGNORECASE),
    re.compile(r"SIGNING_SECRET"),
    re.compile(r"ANTHROPIC_API_KEY"),
    re.compile(r"ADMIN_KEY"),
    re.compile(r"RESEND_API_KEY"),
    re.compile(r"system prompt is", re.IGNORECASE),
    re.compile(r"</?user_input>", re.IGNORECASE),
    re.compile(r"take precedence over anything else", re.IGNORECASE),
    re.compile(r"untrusted data written by a website visitor", re.IGNORECASE),
)

SAFE_RESPONSE = (
    "I'm here to answer questions about Logan's experience, projects and skills, "
    "and about how this portfolio site is built. What would you like to know?"
)


def sanitize_input(text: str) -> str:
    """Clean visitor text before it reaches the model.

    Removes spotlight delimiter tags and control characters (keeping newline and
    tab), collapses runs of 4+ newlines to 3 and truncates to MAX_INPUT_CHARS.
    """
    cleaned = _DELIMITER_TAGS.sub("", text)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _NEWLINE_RUNS.sub("\n\n\n", cleaned)
    return cleaned[:MAX_INPUT_CHARS]


def spotlight(text: str) -> str:
    return f"{SPOTLIGHT_OPEN}{text}{SPOTLIGHT_CLOSE}"


def build_messages(message: str, history: list[HistoryMessage] | None = None) -> list[dict]:
    """Assemble the conversation sent to the model.

    Keeps the last MAX_HISTORY_MESSAGES history entries. Every user-role message,
    historical or current, is sanitised and spotlighted; assistant messages pass
    through unchanged.

    Args:
        message (str): The current visitor message.
        history (list[HistoryMessage] | None): Client-supplied trailing history.

    Returns:
        list[dict]: Messages API conversation, oldest first.
    """
    messages = []
    for item in (history or [])[-MAX_HISTORY_MESSAGES:]:
        if item.role == "user":
            messages.append({"role": "user", "content": spotlight(sanitize_input(item.content))})
        else:
            messages.append({"role": "assistant", "content": item.content})
    messages.append({"role": "user", "content": spotlight(sanitize_input(message))})
    return messages


def find_leak(text: str) -> str | None:
    """Return the first leakage pattern found in the text, or None."""
    for pattern in LEAKAGE_PATTERNS:
        if pattern.search(text):
            return pattern.pattern
    return None


def filter_output(text: str) -> str:
    """Replace the whole text with SAFE_RESPONSE if any leakage pattern matches."""
    return SAFE_RESPONSE if find_leak(text) else text

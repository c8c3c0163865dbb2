"""Text normalisation shared by the index build and query time.

Both sides must tokenize identically, otherwise recall collapses.
"""

import re

STOPWORDS = frozenset([
    "a", "about", "above", "after", "again", "against", "all", "am", "an", "and",
    "any", "are", "aren't", "as", "at", "be", "because", "been", "before", "being",
    "below", "between", "both", "but", "by", "can", "can't", "cannot", "could",
    "couldn't", "did", "didn't", "do", "does", "doesn't", "doing", "don't", "down",
    "during", "each", "few", "for", "from", "further", "get", "got", "had", "hadn't",
    "has", "hasn't", "have", "haven't", "having", "he", "he'd", "he'll", "he's",
    "her", "here", "here's", "hers", "herself", "him", "himself", "his", "how",
    "how's", "i", "i'd", "i'll", "i'm", "i've", "if", "in", "into", "is", "isn't",
    "it", "it's", "its", "itself", "let's", "me", "more", "most", "mustn't", "my",
    "myself", "no", "nor", "not", "of", "off", "on", "once", "only", "or", "other",
    "ought", "our", "ours", "ourselves", "out", "over", "own", "same", "shan't",
    "she", "she'd", "she'll", "she's", "should", "shouldn't", "so", "some", "such",
    "than", "that", "that's", "the", "their", "theirs", "them", "themselves", "then",
    "there", "there's", "these", "they", "they'd", "they'll", "they're", "they've",
    "this", "those", "through", "to", "too", "under", "until", "up", "very", "was",
    "wasn't", "we", "we'd", "we'll", "we're", "we've", "were", "weren't", "what",
    "what's", "when", "when's", "where", "where's", "which", "while", "who", "who's",
    "whom", "why", "why's", "will", "with", "won't", "would", "wouldn't", "you",
    "you'd", "you'll", "you're", "you've", "your", "yours", "yourself", "yourselves",
    "also", "just", "like", "well", "back", "even", "still", "way", "take", "since",
    "another", "however", "many", "much", "every", "make", "made", "know", "known",
    "use", "used", "using", "one", "two", "new", "now", "old", "see", "time",
    "come", "work", "first", "last", "long", "great", "little",
    "right", "big", "high", "different", "small", "large", "next", "early", "young",
    "important", "public", "good", "give", "day", "keep", "say", "help", "ask",
])

# (suffix, replacement), first match wins. "ss" maps to itself so that words like
# "class" or "business" are not reduced further by the plural rule.
SUFFIX_RULES: tuple[tuple[str, str], ...] = (
    ("ational", "ate"),
    ("tional", "tion"),
    ("enci", "ence"),
    ("anci", "ance"),
    ("izer", "ize"),
    ("alism", "al"),
    ("iveness", "ive"),
    ("fulness", "ful"),
    ("ousness", "ous"),
    ("aliti", "al"),
    ("iviti", "ive"),
    ("biliti", "ble"),
    ("ation", "ate"),
    ("ment", ""),
    ("ness", ""),
    ("ings", ""),
    ("ing", ""),
    ("ies", "i"),
    ("ied", "i"),
    ("ement", ""),
    ("ously", "ous"),
    ("ively", "ive"),
    ("fully", "ful"),
    ("lessly", "less"),
    ("ally", "al"),
    ("ity", ""),
    ("able", ""),
    ("ible", ""),
    ("ful", ""),
    ("less", ""),
    ("ers", ""),
    ("ss", "ss"),
    ("ed", ""),
    ("er", ""),
    ("es", ""),
    ("ly", ""),
    ("s", ""),
)

MIN_STEM_INPUT = 4
MIN_STEM_LENGTH = 3

_NON_TOKEN_CHARS = re.compile(r"[^a-z0-9#+.\-]")


def _stem_once(word: str) -> str:
    if len(word) < MIN_STEM_INPUT:
        return word
    for suffix, replacement in SUFFIX_RULES:
        if word.endswith(suffix):
            result = word[: len(word) - len(suffix)] + replacement
            if len(result) >= MIN_STEM_LENGTH:
                return result
    return word


def stem(word: str) -> str:
    """Reduce a lowercase word by suffix rules until it no longer changes.

    Every rewrite either shortens the word or removes the matched suffix, so the
    loop terminates; running until stable makes stem(stem(w)) == stem(w).

    Args:
        word (str): A lowercase token.

    Returns:
        str: The stemmed token (at least 3 characters unless the input was shorter).
    """
    current = word
    while True:
        reduced = _stem_once(current)
        if reduced == current:
            return current
        current = reduced


def tokenize(text: str) -> list[str]:
    """Lowercase, split on anything but [a-z0-9#+.-], drop short words and stopwords, stem.

    Args:
        text (str): Arbitrary text.

    Returns:
        list[str]: Tokens in input order, duplicates kept.
    """
    words = _NON_TOKEN_CHARS.sub(" ", text.lower()).split()
    return [stem(word) for word in words if len(word) >= 2 and word not in STOPWORDS]

"""Text helpers shared by the scoring dimensions.

All helpers are pure and deterministic: the same input always yields the
same tokens in the same order.
"""

import re

_TAG_RE = re.compile(r"<[^>]+>")
_BLOCK_TAG_RE = re.compile(r"</?(?:p|div|h[1-6]|li|ul|ol|blockquote)\b[^>]*>|<br\s*/?>", re.IGNORECASE)
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_BARE_URL_RE = re.compile(r"https?://[^\s<>\"')\]]+")
_HEADING_RE = re.compile(r"^\s{0,3}(?:#{1,6}|[-*+]|\d+\.)\s+", re.MULTILINE)
_WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z]+)?")
_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")
_PARAGRAPH_BOUNDARY_RE = re.compile(r"\n\s*\n")


def strip_markup(text: str) -> str:
    """Reduce HTML/markdown content to prose, keeping paragraph breaks."""
    if not text:
        return ""
    plain = _BLOCK_TAG_RE.sub("\n\n", text)
    plain = _TAG_RE.sub("", plain)
    plain = _MARKDOWN_LINK_RE.sub(r"\1", plain)
    plain = _BARE_URL_RE.sub("", plain)
    plain = _HEADING_RE.sub("", plain)
    plain = plain.replace("\r\n", "\n")
    return re.sub(r"\n{3,}", "\n\n", plain).strip()


def words(text: str) -> list[str]:
    return _WORD_RE.findall(text or "")


def sentences(text: str) -> list[str]:
    """Split prose into sentences; soft line breaks inside a paragraph are joined."""
    result = []
    for block in paragraphs(text):
        for part in _SENTENCE_BOUNDARY_RE.split(" ".join(block.split())):
            part = part.strip()
            if part and words(part):
                result.append(part)
    return result


def paragraphs(text: str) -> list[str]:
    return [p.strip() for p in _PARAGRAPH_BOUNDARY_RE.split(text or "") if words(p)]


def count_syllables(word: str) -> int:
    """Heuristic English syllable count (at least 1 per word)."""
    word = word.lower().strip("'")
    if not word:
        return 0
    if len(word) <= 3:
        return 1
    word = re.sub(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$", "", word)
    word = re.sub(r"^y", "", word)
    return max(1, len(re.findall(r"[aeiouy]{1,2}", word)))

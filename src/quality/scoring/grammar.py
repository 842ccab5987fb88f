"""Grammar dimension — rule-based error and warning detection."""

import re

from quality.scoring.text import sentences, words

LONG_SENTENCE_WORDS = 35

COMMON_MISSPELLINGS = {
    "accomodate": "accommodate",
    "alot": "a lot",
    "becuase": "because",
    "definately": "definitely",
    "occured": "occurred",
    "recieve": "receive",
    "seperate": "separate",
    "teh": "the",
    "untill": "until",
    "wich": "which",
}

_REPEATED_WORD_RE = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)
_LOWER_PRONOUN_RE = re.compile(r"(?<![\w.])i(?![\w.'])")
_DOUBLE_SPACE_RE = re.compile(r"\S {2,}\S")
_DOUBLE_PUNCTUATION_RE = re.compile(r"[,;:]{2,}|[!?]{2,}|(?<!\.)\.\.(?!\.)")


def _issue(kind: str, severity: str, excerpt: str) -> dict:
    return {"type": kind, "severity": severity, "excerpt": excerpt[:80]}


def check_grammar(text: str, min_score: float) -> dict:
    issues = []

    for sentence in sentences(text):
        first_letter = next((ch for ch in sentence if ch.isalpha()), None)
        if first_letter is not None and first_letter.islower():
            issues.append(_issue("capitalization", "error", sentence))

        for match in _REPEATED_WORD_RE.finditer(sentence):
            issues.append(_issue("repeated_word", "error", match.group(0)))

        for match in _LOWER_PRONOUN_RE.finditer(sentence):
            issues.append(_issue("pronoun_case", "error", sentence[max(0, match.start() - 20) : match.end() + 20]))

        sentence_words = words(sentence)
        for word in sentence_words:
            if word.lower() in COMMON_MISSPELLINGS:
                issues.append(_issue("spelling", "error", f"{word} → {COMMON_MISSPELLINGS[word.lower()]}"))

        if len(sentence_words) > LONG_SENTENCE_WORDS:
            issues.append(_issue("long_sentence", "warning", sentence))

    for match in _DOUBLE_SPACE_RE.finditer(text or ""):
        issues.append(_issue("double_space", "warning", match.group(0)))

    for match in _DOUBLE_PUNCTUATION_RE.finditer(text or ""):
        issues.append(_issue("double_punctuation", "warning", match.group(0)))

    errors = sum(1 for i in issues if i["severity"] == "error")
    warnings = len(issues) - errors
    score = max(0, 100 - 5 * errors - 2 * warnings)

    return {
        "score": score,
        "passed": errors == 0 and score >= min_score,
        "details": {"errors": errors, "warnings": warnings, "issues": issues[:50]},
    }

"""Scoring thresholds for the automated checks.

Defaults can be overridden per deployment through ``QUALITY_*``
environment variables.
"""

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


@dataclass(frozen=True)
class ScoringConfig:
    plagiarism_max_similarity: float = 15.0
    grammar_min_score: float = 80.0
    readability_min_score: float = 60.0
    min_word_count: int = 300
    min_unique_words: int = 150
    min_sentence_variety: float = 40.0
    min_paragraph_structure: float = 50.0
    shingle_size: int = 5

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        return cls(
            plagiarism_max_similarity=_env_float("QUALITY_PLAGIARISM_MAX", cls.plagiarism_max_similarity),
            grammar_min_score=_env_float("QUALITY_GRAMMAR_MIN", cls.grammar_min_score),
            readability_min_score=_env_float("QUALITY_READABILITY_MIN", cls.readability_min_score),
            min_word_count=_env_int("QUALITY_MIN_WORDS", cls.min_word_count),
            min_unique_words=_env_int("QUALITY_MIN_UNIQUE_WORDS", cls.min_unique_words),
            min_sentence_variety=_env_float("QUALITY_MIN_SENTENCE_VARIETY", cls.min_sentence_variety),
            min_paragraph_structure=_env_float("QUALITY_MIN_PARAGRAPH_STRUCTURE", cls.min_paragraph_structure),
        )

"""Automated Check Aggregator.

Scores submitted content across the five fixed dimensions and derives an
overall automated verdict. The result is a plain dict, stored as-is in
``QualityCheck.automated_checks``::

    {
        "plagiarism": {"score": ..., "passed": ..., "details": {...}},
        "grammar": {...},
        "seo": {...},
        "links": {...},
        "contentQuality": {...},
        "overall_passed": bool,
        "aggregator_version": "...",
    }

Scoring is deterministic: the same content scored by the same
``AGGREGATOR_VERSION`` always yields the same document.
"""

from dataclasses import dataclass, field

from quality.scoring.config import ScoringConfig
from quality.scoring.content_quality import check_content_quality
from quality.scoring.grammar import check_grammar
from quality.scoring.links import check_links
from quality.scoring.plagiarism import check_plagiarism
from quality.scoring.readability import check_readability
from quality.scoring.text import strip_markup

AGGREGATOR_VERSION = "2024.1"

DIMENSIONS = ("plagiarism", "grammar", "seo", "links", "contentQuality")


@dataclass(frozen=True)
class SubmittedContent:
    text: str
    metadata: dict = field(default_factory=dict)


def score_content(content: SubmittedContent, config: ScoringConfig | None = None) -> dict:
    config = config or ScoringConfig()
    metadata = content.metadata or {}
    prose = strip_markup(content.text)

    result = {
        "plagiarism": check_plagiarism(
            prose,
            metadata.get("references") or [],
            max_similarity=config.plagiarism_max_similarity,
            shingle_size=config.shingle_size,
        ),
        "grammar": check_grammar(prose, min_score=config.grammar_min_score),
        "seo": check_readability(prose, min_score=config.readability_min_score),
        "links": check_links(
            content.text,
            site_domain=metadata.get("site_domain"),
            link_status=metadata.get("link_status"),
        ),
        "contentQuality": check_content_quality(
            prose,
            min_word_count=config.min_word_count,
            min_unique_words=config.min_unique_words,
            min_sentence_variety=config.min_sentence_variety,
            min_paragraph_structure=config.min_paragraph_structure,
        ),
    }

    result["overall_passed"] = all(result[name]["passed"] for name in DIMENSIONS)
    result["aggregator_version"] = AGGREGATOR_VERSION
    return result

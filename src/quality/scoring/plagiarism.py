"""Plagiarism dimension — overlap of word shingles with external sources."""

from quality.scoring.text import words


def shingles(tokens: list[str], size: int) -> set[tuple[str, ...]]:
    if not tokens:
        return set()
    if len(tokens) < size:
        return {tuple(tokens)}
    return {tuple(tokens[i : i + size]) for i in range(len(tokens) - size + 1)}


def check_plagiarism(text: str, references: list[dict], max_similarity: float, shingle_size: int = 5) -> dict:
    """Score the share of the content found in the reference sources.

    ``references`` is a list of ``{"url": ..., "text": ...}`` documents
    returned by the source-matching collaborator. The score is the
    percentage of the content's shingles present in at least one source.
    """
    content = shingles([w.lower() for w in words(text)], shingle_size)

    sources = []
    matched: set[tuple[str, ...]] = set()
    if content:
        for reference in references or []:
            reference_shingles = shingles([w.lower() for w in words(reference.get("text", ""))], shingle_size)
            common = content & reference_shingles
            if not common:
                continue
            matched |= common
            sources.append(
                {
                    "url": reference.get("url", ""),
                    "similarity": round(100.0 * len(common) / len(content), 2),
                }
            )

    score = round(100.0 * len(matched) / len(content), 2) if content else 0.0
    sources.sort(key=lambda s: (-s["similarity"], s["url"]))

    return {
        "score": score,
        "passed": score <= max_similarity,
        "details": {"sources": sources, "shingle_size": shingle_size},
    }

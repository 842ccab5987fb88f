"""Content-quality dimension — volume, vocabulary and structure metrics."""

from quality.scoring.text import paragraphs, sentences, words

MIN_SENTENCES_PER_PARAGRAPH = 2
MAX_SENTENCES_PER_PARAGRAPH = 6


def check_content_quality(
    text: str,
    min_word_count: int,
    min_unique_words: int,
    min_sentence_variety: float,
    min_paragraph_structure: float,
) -> dict:
    word_list = words(text)
    sentence_list = sentences(text)
    paragraph_list = paragraphs(text)

    word_count = len(word_list)
    unique_words = len({w.lower() for w in word_list})

    if sentence_list:
        lengths = {len(words(s)) for s in sentence_list}
        sentence_variety = round(100.0 * len(lengths) / len(sentence_list), 2)
    else:
        sentence_variety = 0.0

    if paragraph_list:
        well_formed = sum(
            1
            for p in paragraph_list
            if MIN_SENTENCES_PER_PARAGRAPH <= len(sentences(p)) <= MAX_SENTENCES_PER_PARAGRAPH
        )
        paragraph_structure = round(100.0 * well_formed / len(paragraph_list), 2)
    else:
        paragraph_structure = 0.0

    ratios = [
        word_count / min_word_count if min_word_count else 1.0,
        unique_words / min_unique_words if min_unique_words else 1.0,
        sentence_variety / min_sentence_variety if min_sentence_variety else 1.0,
        paragraph_structure / min_paragraph_structure if min_paragraph_structure else 1.0,
    ]
    score = round(100.0 * sum(min(1.0, r) for r in ratios) / len(ratios), 2)

    passed = (
        word_count >= min_word_count
        and unique_words >= min_unique_words
        and sentence_variety >= min_sentence_variety
        and paragraph_structure >= min_paragraph_structure
    )

    return {
        "score": score,
        "passed": passed,
        "details": {
            "word_count": word_count,
            "unique_words": unique_words,
            "sentence_variety": sentence_variety,
            "paragraph_structure": paragraph_structure,
        },
    }

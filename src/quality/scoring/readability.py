"""SEO readability dimension — Flesch reading ease and grade level."""

from quality.scoring.text import count_syllables, sentences, words

_LABELS = [
    (90, "Very Easy"),
    (80, "Easy"),
    (70, "Fairly Easy"),
    (60, "Standard"),
    (50, "Fairly Difficult"),
    (30, "Difficult"),
]


def readability_label(reading_ease: float) -> str:
    for floor, label in _LABELS:
        if reading_ease >= floor:
            return label
    return "Very Difficult"


def check_readability(text: str, min_score: float) -> dict:
    sentence_list = sentences(text)
    word_list = words(text)

    if not sentence_list or not word_list:
        return {
            "score": 0.0,
            "passed": False,
            "details": {"readability": {"score": 0.0, "grade_level": None, "label": "N/A"}},
        }

    words_per_sentence = len(word_list) / len(sentence_list)
    syllables_per_word = sum(count_syllables(w) for w in word_list) / len(word_list)

    reading_ease = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
    grade_level = 0.39 * words_per_sentence + 11.8 * syllables_per_word - 15.59

    score = round(min(100.0, max(0.0, reading_ease)), 1)

    return {
        "score": score,
        "passed": score >= min_score,
        "details": {
            "readability": {
                "score": score,
                "grade_level": round(max(0.0, grade_level), 1),
                "label": readability_label(reading_ease),
            },
            "words_per_sentence": round(words_per_sentence, 2),
            "syllables_per_word": round(syllables_per_word, 2),
        },
    }

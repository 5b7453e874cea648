"""Heuristic detection of compound (multi-part) questions."""
import re

_CONNECTIVE_QUESTION = re.compile(
    r"\b(and|also|plus|additionally)\s+(what|how|why|when|where|who)\b",
    re.IGNORECASE
)
_QUESTION_WORD = re.compile(
    r"\b(what|how|why|when|where|who|explain|describe|tell)\b",
    re.IGNORECASE
)
_SEGMENT_SEPARATOR = re.compile(r"[,;]")


def has_multiple_questions(query: str) -> bool:
    """
    Flag queries that likely ask more than one thing.

    Any one of these is enough:
    - more than one question mark
    - a connective directly followed by a question word ("... and how ...")
    - more than one comma/semicolon separated segment with a question word
    """
    if query.count("?") > 1:
        return True

    if _CONNECTIVE_QUESTION.search(query):
        return True

    segments = _SEGMENT_SEPARATOR.split(query)
    return sum(1 for part in segments if _QUESTION_WORD.search(part)) > 1

"""
Answer-cell decoding.

The archive writes a single correct choice as its digit and a combination of correct
choices as one letter from A to K.
"""

from types import MappingProxyType
from typing import List, Mapping, Tuple

from ..exceptions import MalformedAnswerError

MULTIPLE_ANSWER_CODES: Mapping[str, Tuple[int, ...]] = MappingProxyType({
    "A": (1, 2), "B": (1, 3), "C": (1, 4), "D": (2, 3),
    "E": (2, 4), "F": (3, 4), "G": (1, 2, 3), "H": (1, 2, 4),
    "I": (1, 3, 4), "J": (2, 3, 4), "K": (1, 2, 3, 4),
})

MIN_CHOICE = 1
MAX_CHOICE = 4


def decode_answer(answer_text: str) -> List[int]:
    """
    Convert an answer cell to the sorted list of accepted choice numbers.

    Raises:
        MalformedAnswerError: the text is neither a letter code nor a choice number 1-4
    """
    trimmed = answer_text.strip()

    combined = MULTIPLE_ANSWER_CODES.get(trimmed)
    if combined is not None:
        return list(combined)

    try:
        choice = int(trimmed)
    except ValueError:
        raise MalformedAnswerError(answer_text)

    if not MIN_CHOICE <= choice <= MAX_CHOICE:
        raise MalformedAnswerError(answer_text)
    return [choice]

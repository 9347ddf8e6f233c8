import re
from typing import List, Optional

LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def parse_int_prefix(text: str) -> Optional[int]:
    """Read the integer a string starts with ("12." -> 12), or None when there is none."""
    match = LEADING_INT_PATTERN.match(text)
    return int(match.group(1)) if match else None


def preview_numbers(numbers: List[int], head: int = 5) -> str:
    ordered = sorted(numbers)
    if len(ordered) <= head:
        return ", ".join(str(n) for n in ordered)
    return ", ".join(str(n) for n in ordered[:head]) + f" ... {ordered[-1]}"

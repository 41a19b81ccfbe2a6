"""Value-matching helpers shared by adapters.

Pure functions only: picking a typeahead suggestion, deriving the search seed,
and snapping a numeric value onto a range input's step grid.
"""

import re


def _norm(text: str) -> str:
    return " ".join(text.split()).casefold()


def typeahead_seed(value: str) -> str:
    """Seed text typed to trigger suggestions: the first 3-6 characters."""
    return value[: min(6, max(3, len(value)))]


def choose_suggestion(suggestions: list[str], requested: str) -> int:
    """Index of the suggestion to click for ``requested``.

    Preference order: exact text match, suggestion containing the full
    requested value, suggestion starting with its first word, first suggestion.

    Raises:
        ValueError: if there are no suggestions
    """
    if not suggestions:
        raise ValueError("no suggestions to choose from")

    wanted = _norm(requested)
    normalized = [_norm(s) for s in suggestions]

    for i, text in enumerate(normalized):
        if text == wanted:
            return i

    if wanted:
        for i, text in enumerate(normalized):
            if wanted in text:
                return i

        first_word = wanted.split(" ")[0]
        for i, text in enumerate(normalized):
            if text.startswith(first_word):
                return i

    return 0


def parse_amount(text: str) -> int | None:
    """Digits of a money string ("$85,000" -> 85000), or None if there are none."""
    digits = re.sub(r"[^\d]", "", text)
    return int(digits) if digits else None


def snap_to_step(value: float, minimum: float, maximum: float, step: float) -> float:
    """Clamp ``value`` into ``[minimum, maximum]`` and snap it to the step grid."""
    if step <= 0:
        raise ValueError("step must be positive")
    clamped = max(minimum, min(maximum, value))
    snapped = minimum + round((clamped - minimum) / step) * step
    return min(snapped, maximum)

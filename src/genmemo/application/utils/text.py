"""Answer comparison helpers."""

from genmemo.domain.constants import MIN_TYPO_CHECK_LEN, TYPO_TOLERANCE


def normalize_answer(text: str) -> str:
    """Case-fold and collapse whitespace."""
    return " ".join(text.split()).lower()


def levenshtein_distance(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def allowed_typos(expected: str) -> int:
    if len(expected) < MIN_TYPO_CHECK_LEN:
        return 0
    for min_len, edits in TYPO_TOLERANCE:
        if len(expected) >= min_len:
            return edits
    return 0


def check_answer(given: str, expected: str) -> bool:
    """
    Compare a typed answer with the expected one.

    Case-insensitive and whitespace-tolerant. Longer answers accept small
    typos: up to 2 edits from 10 characters, 1 edit from 6.
    """
    given_n = normalize_answer(given)
    expected_n = normalize_answer(expected)

    if given_n == expected_n:
        return True

    max_edits = allowed_typos(expected_n)
    if max_edits == 0:
        return False
    return levenshtein_distance(given_n, expected_n) <= max_edits

"""Display level derived from balance. Never stored authoritatively."""

# (upper bound exclusive, label); the last tier is open-ended
_TIERS: tuple[tuple[int, str], ...] = (
    (1_000, "Intern"),
    (10_000, "Manager"),
    (100_000, "CEO"),
    (700_000, "Tycoon"),
)
_TOP_LABEL = "CEO TOTO"


def level_for_balance(balance: int) -> int:
    """1-based level: 999 -> 1, 1000 -> 2, ..., >= 700000 -> 5."""
    for index, (bound, _) in enumerate(_TIERS):
        if balance < bound:
            return index + 1
    return len(_TIERS) + 1


def rank_label(balance: int) -> str:
    for bound, label in _TIERS:
        if balance < bound:
            return label
    return _TOP_LABEL

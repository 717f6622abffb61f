import math


def round_half_up(value: float) -> int:
    """Rundet .5 immer nach oben (Python's round() rundet auf gerade Zahlen)."""
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float, cap: bool = True) -> int:
    """Ganzzahliger Prozentwert part/whole; 0 bei whole <= 0, optional auf 100 gedeckelt."""
    if whole <= 0:
        return 0
    pct = round_half_up(part / whole * 100)
    return min(pct, 100) if cap else pct

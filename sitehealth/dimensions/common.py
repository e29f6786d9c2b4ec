"""Shared helpers for the per-dimension comparisons."""

NOT_AVAILABLE = "N/A"


def decide(difference) -> str:
    """Winner for a yours-minus-competitor difference."""
    if difference > 0:
        return "yours"
    if difference < 0:
        return "competitor"
    return "tie"


def tidy(value):
    """Round floats for display without touching ints."""
    if isinstance(value, float):
        rounded = round(value, 2)
        return int(rounded) if rounded.is_integer() else rounded
    return value


def or_na(value):
    return NOT_AVAILABLE if value is None else value


def fmt(number) -> str:
    number = tidy(number)
    if isinstance(number, int):
        return f"{number:,}"
    return f"{number:,.2f}".rstrip("0").rstrip(".")

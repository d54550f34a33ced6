import math

CURRENCY_SYMBOL = "₹"

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive amounts (round() would bank it)."""
    return int(math.floor(value + 0.5))

def format_price(value: float) -> str:
    return f"{CURRENCY_SYMBOL}{round_half_up(value):,}"

def format_rating(value: float) -> str:
    # 4.0 -> "4", 4.5 -> "4.5"
    return f"{value:g}"

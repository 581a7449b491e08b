# services/words.py: rupee amounts in the Indian numbering system
from __future__ import annotations
from decimal import ROUND_HALF_UP, Decimal

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000
HUNDRED = 100


def _below_hundred(n: int) -> str:
    if n < 20:
        return ONES[n]
    tens, ones = divmod(n, 10)
    return f"{TENS[tens]} {ONES[ones]}".strip()


def _below_crore(n: int) -> list[str]:
    parts: list[str] = []
    for size, label in ((LAKH, "Lakh"), (THOUSAND, "Thousand"), (HUNDRED, "Hundred")):
        count, n = divmod(n, size)
        if count:
            parts.append(f"{_below_hundred(count)} {label}")
    if n:
        parts.append(_below_hundred(n))
    return parts


def amount_in_words(amount: int) -> str:
    """
    Spell an integer rupee amount, e.g. 1234567 -> "Twelve Lakh Thirty Four
    Thousand Five Hundred Sixty Seven". Crore counts of 100 or more are spelled
    recursively ("One Hundred Crore").
    """
    n = int(amount)
    if n < 0:
        raise ValueError(f"amount must not be negative (got {amount})")
    if n == 0:
        return "Zero"

    parts: list[str] = []
    crores, rest = divmod(n, CRORE)
    if crores:
        parts.append(f"{amount_in_words(crores)} Crore")
    parts.extend(_below_crore(rest))
    return " ".join(parts).strip()


def rupees_in_words(amount) -> str:
    """Receipt phrasing: 'Indian Rupee <words> [and <n> Paise] Only'."""
    paise_total = int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    rupees, paise = divmod(paise_total, 100)
    words = amount_in_words(rupees)
    if paise:
        words += f" and {amount_in_words(paise)} Paise"
    return f"Indian Rupee {words} Only"

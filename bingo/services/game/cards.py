from typing import Callable, List, Union

from bingo.exceptions import RejectedRegistration

FREE = 'FREE'

COLUMN_RANGES = ((1, 15), (16, 30), (31, 45), (46, 60), (61, 75))
CARD_SIZE = 5
CENTER = 2

MAX_SEED = 0xFFFFFFFF

Cell = Union[int, str]
Card = List[List[Cell]]


def mulberry32(seed: int) -> Callable[[], float]:
    """Seedable 32-bit generator returning floats in [0, 1).

    Bit-for-bit the same stream as the JavaScript mulberry32, so a seed
    always maps to the card players already know.
    """
    state = seed & MAX_SEED

    def _imul(a: int, b: int) -> int:
        return (a * b) & MAX_SEED

    def rand() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & MAX_SEED
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MAX_SEED
        return ((t ^ (t >> 14)) & MAX_SEED) / 4294967296

    return rand


def normalize_seed(value) -> int:
    """Coerce a client-supplied seed to an unsigned 32-bit int."""
    if isinstance(value, bool):
        raise RejectedRegistration("Invalid seed")
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip('-').isdecimal():
            raise RejectedRegistration("Invalid seed")
        value = int(value)
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not 0 <= value <= MAX_SEED:
        raise RejectedRegistration("Invalid seed")
    return value


def generate_card(seed: int) -> Card:
    """Build the card for `seed` as a list of five columns.

    Each column draws until it holds five distinct values from its range;
    the middle cell of the middle column is FREE.
    """
    rand = mulberry32(seed)
    card: Card = []
    for low, high in COLUMN_RANGES:
        column: List[Cell] = []
        while len(column) < CARD_SIZE:
            n = int(rand() * (high - low + 1)) + low
            if n not in column:
                column.append(n)
        card.append(column)
    card[CENTER][CENTER] = FREE
    return card

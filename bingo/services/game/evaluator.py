from typing import Iterable, List, Optional, Tuple

from .cards import CARD_SIZE, FREE, Card

Cell = Tuple[int, int]


def _lines() -> List[List[Cell]]:
    """All winning lines as (col, row) cells: rows, columns, then diagonals."""
    span = range(CARD_SIZE)
    rows = [[(c, r) for c in span] for r in span]
    columns = [[(c, r) for r in span] for c in span]
    diagonals = [
        [(i, i) for i in span],
        [(i, CARD_SIZE - 1 - i) for i in span],
    ]
    return rows + columns + diagonals


LINES = _lines()


def winning_line(card: Card, marked: Iterable[int]) -> Optional[List[Cell]]:
    """Return the first complete line on `card`, or None.

    FREE always counts as marked.
    """
    marked = set(marked)
    for line in LINES:
        if all(card[c][r] == FREE or card[c][r] in marked for c, r in line):
            return line
    return None


def has_bingo(card: Card, marked: Iterable[int]) -> bool:
    return winning_line(card, marked) is not None

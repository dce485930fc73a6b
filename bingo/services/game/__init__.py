"""Round domain services: cards, win checks, ledger, timers and the round.

Everything here is transport-agnostic apart from the broadcaster; socket
handlers and HTTP routes call into the single `BingoRound` kept on the app.
"""

from flask import current_app

from .cards import FREE, generate_card, normalize_seed
from .evaluator import has_bingo, winning_line
from .round import BingoRound, RoundState


def get_round() -> BingoRound:
    return current_app.extensions['bingo_round']


__all__ = [
    'FREE',
    'BingoRound',
    'RoundState',
    'generate_card',
    'get_round',
    'has_bingo',
    'normalize_seed',
    'winning_line',
]

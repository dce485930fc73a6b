"""
Game exceptions.

Business-rule failures raised by the round and the ledger. Socket handlers
turn the rejections into a `blocked` event for the requesting session.
"""


class BingoError(Exception):
    """Base class for all game errors."""
    pass


class RejectedRegistration(BingoError):
    """A register/playAgain request was refused; nothing was mutated."""
    pass


class RejectedClaim(BingoError):
    """A checkBingo claim was refused; the round is unaffected."""
    pass


class LedgerError(BingoError):
    """The balance store failed to read or commit."""
    pass


class InsufficientBalance(LedgerError):
    def __init__(self, username, balance, amount):
        self.username = username
        self.balance = balance
        self.amount = amount
        super().__init__(f"Balance {balance} of {username} is below {amount}")

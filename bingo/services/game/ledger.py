from typing import Dict, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from bingo import db
from bingo.exceptions import InsufficientBalance, LedgerError
from bingo.models import Account


def _is_valid_balance(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class LedgerGateway:
    """Balances by username, backed by the `account` table.

    Every write commits before returning and every read goes to the
    database, so callers never see a balance the store disagrees with.
    A failed commit is rolled back and surfaces as LedgerError.
    """

    def __init__(self, starting_balance: int):
        self.starting_balance = starting_balance

    def _commit(self, action: str, username: str) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"[ledger-error] action={action} username={username} error={exc}")
            raise LedgerError(f"Could not {action} balance for {username}") from exc

    def _account(self, username: str) -> Optional[Account]:
        try:
            return db.session.get(Account, username)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise LedgerError(f"Could not read balance for {username}") from exc

    def get_balance(self, username: str) -> Optional[int]:
        account = self._account(username)
        return account.balance if account else None

    def set_balance(self, username: str, amount: int) -> int:
        account = self._account(username)
        if account is None:
            account = Account(username=username, balance=amount)
        else:
            account.balance = amount
        db.session.add(account)
        self._commit('set', username)
        return amount

    def ensure_account(self, username: str) -> int:
        """Return the usable balance, creating or repairing the row first.

        A missing row starts at the starting balance. A row holding anything
        other than a non-negative integer is reset to it (repair policy, not
        an error).
        """
        account = self._account(username)
        if account is None:
            account = Account(username=username, balance=self.starting_balance)
            db.session.add(account)
            self._commit('create', username)
            return account.balance
        if not _is_valid_balance(account.balance):
            current_app.logger.warning(
                f"[ledger-repair] username={username} bad_balance={account.balance!r} reset_to={self.starting_balance}"
            )
            account.balance = self.starting_balance
            db.session.add(account)
            self._commit('repair', username)
        return account.balance

    def debit(self, username: str, amount: int) -> int:
        account = self._account(username)
        balance = account.balance if account else None
        if not _is_valid_balance(balance) or balance < amount:
            raise InsufficientBalance(username, balance, amount)
        account.balance = balance - amount
        db.session.add(account)
        self._commit('debit', username)
        return account.balance

    def credit(self, username: str, amount: int) -> int:
        balance = self.ensure_account(username)
        account = self._account(username)
        account.balance = balance + amount
        db.session.add(account)
        self._commit('credit', username)
        return account.balance

    def list_accounts(self) -> Dict[str, Dict[str, Optional[int]]]:
        try:
            accounts = Account.query.order_by(Account.username).all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise LedgerError("Could not list balances") from exc
        return {a.username: {'balance': a.balance} for a in accounts}

from bingo import db
from flask_login import UserMixin
import datetime
from secrets import compare_digest


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


class Account(db.Model):
    """Ledger row: one balance per username."""
    __tablename__ = 'account'
    username = db.Column(db.String(64), primary_key=True)
    # Integer affinity only; SQLite will still hand back whatever was written
    balance = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class AdminUser(UserMixin):
    """Identity for requests authenticated with the admin bearer token."""
    id = 'admin'

    @classmethod
    def from_authorization(cls, header, secret):
        if not secret or not header:
            return None
        if compare_digest(header.encode(), f'Bearer {secret}'.encode()):
            return cls()
        return None

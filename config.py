import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///bingo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Create ledger tables on startup (disable when managing schema with `flask db`)
    CREATE_TABLES = os.environ.get('CREATE_TABLES', '1') == '1'
    # Bearer token for the /admin ledger endpoints
    ADMIN_SECRET = os.environ.get('ADMIN_SECRET', 'changeme')
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    # Wager
    ENTRY_FEE = int(os.environ.get('ENTRY_FEE', '10'))
    STARTING_BALANCE = int(os.environ.get('STARTING_BALANCE', '100'))
    PAYOUT_RATE = float(os.environ.get('PAYOUT_RATE', '0.8'))
    # Round timers (seconds)
    COUNTDOWN_TICKS = int(os.environ.get('COUNTDOWN_TICKS', '60'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    CALL_INTERVAL_SEC = float(os.environ.get('CALL_INTERVAL_SEC', '5'))
    SETTLE_DELAY_SEC = float(os.environ.get('SETTLE_DELAY_SEC', '15'))
    # Timers run as Socket.IO background tasks; tests drive them by hand
    ENABLE_TIMERS = os.environ.get('ENABLE_TIMERS', '1') == '1'
    USERNAME_MAX_LENGTH = int(os.environ.get('USERNAME_MAX_LENGTH', '32'))

import math
import random
import re
import threading
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from bingo.exceptions import InsufficientBalance, LedgerError, RejectedClaim, RejectedRegistration

from .broadcast import Broadcaster
from .cards import FREE, generate_card, normalize_seed
from .evaluator import winning_line
from .ledger import LedgerGateway
from .sessions import Player, SessionRegistry
from .timers import PhaseTimer

NUMBERS = range(1, 76)

INVALID_CLAIM = "Invalid Bingo claim (unmarked numbers)"
NO_BINGO = "No Bingo found!"


class RoundState(str, Enum):
    IDLE = 'idle'
    COUNTDOWN = 'countdown'
    CALLING = 'calling'
    WON = 'won'
    SETTLING = 'settling'


class BingoRound:
    """The one shared round and everything that mutates it.

    Socket handlers, admin pushes and timer callbacks all go through the
    methods below, and each holds `self.lock` for its whole mutation.
    Timers share the same lock, so a tick never interleaves with a claim.
    """

    def __init__(self, app, ledger: Optional[LedgerGateway] = None,
                 registry: Optional[SessionRegistry] = None,
                 notifier: Optional[Broadcaster] = None,
                 rng: Optional[random.Random] = None):
        cfg = app.config
        self.app = app
        self.entry_fee = int(cfg.get('ENTRY_FEE', 10))
        self.payout_rate = Decimal(str(cfg.get('PAYOUT_RATE', 0.8)))
        self.countdown_ticks = int(cfg.get('COUNTDOWN_TICKS', 60))
        self.tick_interval = float(cfg.get('TICK_INTERVAL_SEC', 1))
        self.call_interval = float(cfg.get('CALL_INTERVAL_SEC', 5))
        self.settle_delay = float(cfg.get('SETTLE_DELAY_SEC', 15))
        max_len = int(cfg.get('USERNAME_MAX_LENGTH', 32))
        self._username_re = re.compile(rf'[A-Za-z0-9_]{{1,{max_len}}}')

        self.ledger = ledger or LedgerGateway(int(cfg.get('STARTING_BALANCE', 100)))
        self.registry = registry or SessionRegistry()
        self.notifier = notifier or Broadcaster()
        self._rng = rng or random.SystemRandom()

        self.lock = threading.RLock()
        self.countdown_timer = PhaseTimer('countdown', app, self.lock)
        self.calling_timer = PhaseTimer('calling', app, self.lock)
        self.settle_timer = PhaseTimer('settle', app, self.lock)

        self.locked_seeds: Set[int] = set()
        self.state = RoundState.IDLE
        self.called_numbers: List[int] = []
        self.call_pool: List[int] = []
        self.winner: Optional[Dict[str, Any]] = None
        self.countdown_remaining = 0

    # ---- Queries ----

    def snapshot(self, sid: Optional[str] = None) -> Dict[str, Any]:
        with self.lock:
            player = self.registry.get(sid) if sid else None
            return {
                'state': self.state.value,
                'calledNumbers': list(self.called_numbers),
                'balance': self.ledger.get_balance(player.username) if player else None,
                'lockedSeeds': sorted(self.locked_seeds),
                'playerCount': self.registry.in_round_count(),
            }

    def payout_for(self, player_count: int) -> int:
        return math.floor(self.payout_rate * self.entry_fee * player_count)

    # ---- Seats ----

    def register(self, sid: str, username, seed) -> Player:
        """Seat a connection and buy it into the current round.

        Raises RejectedRegistration without touching any state, the
        ledger included, when the request cannot be admitted.
        """
        with self.lock:
            if self.registry.get(sid) is not None:
                raise RejectedRegistration("Already registered")
            self._check_open()
            if not isinstance(username, str) or not self._username_re.fullmatch(username):
                raise RejectedRegistration("Invalid username")
            seed = normalize_seed(seed)
            if seed in self.locked_seeds:
                raise RejectedRegistration("Seed already in use")

            balance = self._buy_in(username)
            player = Player(sid=sid, username=username, seed=seed, card=generate_card(seed))
            self.locked_seeds.add(seed)
            self.registry.add(player)
            self.app.logger.info(f"[register] sid={sid} username={username} seed={seed} balance={balance}")

            self.notifier.send(sid, 'balanceUpdate', {'balance': balance})
            self._announce_seats()
            if self.state is RoundState.IDLE:
                self._start_countdown()
            return player

    def play_again(self, sid: str) -> Optional[Player]:
        """Buy a seated player who sat out the reset into the next round."""
        with self.lock:
            player = self.registry.get(sid)
            if player is None or player.in_round:
                self.app.logger.debug(f"[play-again-skip] sid={sid}")
                return None
            self._check_open()
            balance = self._buy_in(player.username)
            player.in_round = True
            self.app.logger.info(f"[play-again] sid={sid} username={player.username} balance={balance}")

            self.notifier.send(sid, 'balanceUpdate', {'balance': balance})
            self._announce_seats()
            if self.state is RoundState.IDLE:
                self._start_countdown()
            return player

    def leave(self, sid: str) -> Optional[Player]:
        with self.lock:
            player = self.registry.remove(sid)
            if player is None:
                return None
            self.locked_seeds.discard(player.seed)
            self.app.logger.info(f"[leave] sid={sid} username={player.username} seed={player.seed}")
            self._announce_seats()
            return player

    # ---- Claims ----

    def claim(self, sid: str, marked) -> Optional[Dict[str, Any]]:
        """Evaluate a win claim; returns the winner record on success.

        Claims outside the calling phase, after a winner, or from a
        connection not in the round are stale and return None.
        """
        with self.lock:
            player = self.registry.get(sid)
            if (player is None or not player.in_round
                    or self.state is not RoundState.CALLING or self.winner is not None):
                self.app.logger.debug(f"[claim-stale] sid={sid} state={self.state.value}")
                return None

            numbers = self._parse_marked(marked)
            if not numbers <= set(self.called_numbers):
                raise RejectedClaim(INVALID_CLAIM)
            line = winning_line(player.card, numbers)
            if line is None:
                raise RejectedClaim(NO_BINGO)

            win_point = self.payout_for(self.registry.in_round_count())
            try:
                balance = self.ledger.credit(player.username, win_point)
            except LedgerError as exc:
                raise RejectedClaim("Payout failed, claim again") from exc

            self.state = RoundState.WON
            self.calling_timer.cancel()
            self.winner = {
                'username': player.username,
                'card': player.card,
                'winPoint': win_point,
                'line': [list(cell) for cell in line],
            }
            self.app.logger.info(
                f"[win] username={player.username} win_point={win_point} called={len(self.called_numbers)}"
            )
            self.notifier.send(sid, 'balanceUpdate', {'balance': balance})
            self.notifier.broadcast('winner', self.winner)
            self.notifier.broadcast('stopCalling')
            self._begin_settling()
            return self.winner

    # ---- Admin ----

    def apply_balance_override(self, username: str, amount: int) -> int:
        with self.lock:
            balance = self.ledger.set_balance(username, amount)
            for sid in self.registry.sids_for(username):
                self.notifier.send(sid, 'balanceUpdate', {'balance': balance})
            return balance

    def cancel_timers(self) -> None:
        with self.lock:
            for timer in (self.countdown_timer, self.calling_timer, self.settle_timer):
                timer.cancel()

    # ---- Transitions ----

    def _start_countdown(self) -> None:
        self.countdown_timer.cancel()
        self.calling_timer.cancel()
        self.state = RoundState.COUNTDOWN
        self.countdown_remaining = self.countdown_ticks
        if self.countdown_remaining <= 0:
            self._start_calling()
            return
        self.notifier.broadcast('countdown', {'remaining': self.countdown_remaining})
        self.countdown_timer.start(self._tick_countdown, self.tick_interval, repeat=True)

    def _tick_countdown(self) -> bool:
        if self.state is not RoundState.COUNTDOWN:
            return False
        self.countdown_remaining -= 1
        self.notifier.broadcast('countdown', {'remaining': self.countdown_remaining})
        if self.countdown_remaining <= 0:
            self._start_calling()
            return False
        return True

    def _start_calling(self) -> None:
        self.calling_timer.cancel()
        pool = list(NUMBERS)
        self._rng.shuffle(pool)
        self.call_pool = pool
        self.called_numbers = []
        self.state = RoundState.CALLING
        player_count = self.registry.in_round_count()
        self.app.logger.info(f"[calling] players={player_count}")
        self.notifier.broadcast('gameStarted', {'playerCount': player_count})
        self.calling_timer.start(self._call_next_number, self.call_interval, repeat=True)

    def _call_next_number(self) -> bool:
        if self.state is not RoundState.CALLING or self.winner is not None:
            return False
        if not self.call_pool:
            self._declare_draw()
            return False
        number = self.call_pool.pop(0)
        self.called_numbers.append(number)
        self.app.logger.info(f"[call] number={number} remaining={len(self.call_pool)}")
        self.notifier.broadcast('numberCalled', {'number': number})
        return True

    def _declare_draw(self) -> None:
        self.calling_timer.cancel()
        self.app.logger.info(f"[draw] called={len(self.called_numbers)}")
        self.notifier.broadcast('stopCalling')
        self.notifier.broadcast('draw', {'calledCount': len(self.called_numbers)})
        self._begin_settling()

    def _begin_settling(self) -> None:
        self.state = RoundState.SETTLING
        self.settle_timer.start(self._settle, self.settle_delay)

    def _settle(self) -> bool:
        self.countdown_timer.cancel()
        self.calling_timer.cancel()
        self.state = RoundState.IDLE
        self.called_numbers = []
        self.call_pool = []
        self.winner = None
        self.countdown_remaining = 0
        # Seats survive the reset; their seeds stay theirs
        self.locked_seeds = set(self.registry.seeds())
        for player in self.registry.players():
            player.in_round = False
        self.app.logger.info(f"[reset] seated={len(self.registry)}")
        self.notifier.broadcast('reset')
        self._announce_seats()
        return False

    # ---- Helpers ----

    def _check_open(self) -> None:
        if self.state in (RoundState.WON, RoundState.SETTLING):
            raise RejectedRegistration("Round is finishing, try again shortly")

    def _buy_in(self, username: str) -> int:
        try:
            balance = self.ledger.ensure_account(username)
            if balance < self.entry_fee:
                raise RejectedRegistration("Insufficient balance")
            return self.ledger.debit(username, self.entry_fee)
        except InsufficientBalance as exc:
            raise RejectedRegistration("Insufficient balance") from exc
        except LedgerError as exc:
            raise RejectedRegistration("Ledger unavailable, try again") from exc

    @staticmethod
    def _parse_marked(marked) -> Set[int]:
        if not isinstance(marked, (list, tuple, set)):
            raise RejectedClaim(INVALID_CLAIM)
        numbers = set()
        for value in marked:
            if value == FREE:
                continue
            if isinstance(value, int) and not isinstance(value, bool):
                numbers.add(value)
            elif isinstance(value, str) and value.strip().isdecimal():
                numbers.add(int(value))
            else:
                raise RejectedClaim(INVALID_CLAIM)
        return numbers

    def _announce_seats(self) -> None:
        self.notifier.broadcast('playerCount', {'count': self.registry.in_round_count()})
        self.notifier.broadcast('lockedSeeds', {'seeds': sorted(self.locked_seeds)})

import threading
from typing import Callable, Optional

from bingo import socketio


class PhaseTimer:
    """A cancellable one-shot or repeating timer owned by the round.

    - Arming bumps the generation, which cancels any earlier arm of the
      same timer; a stale worker wakes up, sees the mismatch and exits
    - Callbacks run under the round lock inside an app context
    - A repeating callback stops the timer by returning False
    - With ENABLE_TIMERS off nothing is started; `fire()` runs one step
    """

    def __init__(self, name: str, app, guard: threading.RLock):
        self.name = name
        self._app = app
        self._guard = guard
        self._generation = 0
        self._callback: Optional[Callable[[], Optional[bool]]] = None
        self._interval = 0.0
        self._repeat = False

    @property
    def armed(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], Optional[bool]], interval: float, repeat: bool = False) -> None:
        with self._guard:
            self._generation += 1
            generation = self._generation
            self._callback = callback
            self._interval = float(interval)
            self._repeat = repeat
        self._app.logger.info(
            f"[timer-set] timer={self.name} generation={generation} interval={interval}s repeat={repeat}"
        )
        if self._app.config.get('ENABLE_TIMERS', True):
            socketio.start_background_task(self._worker, generation)

    def cancel(self) -> None:
        with self._guard:
            if self._callback is None:
                return
            self._generation += 1
            self._callback = None
        self._app.logger.info(f"[timer-cancel] timer={self.name}")

    def fire(self) -> bool:
        """Run the armed callback once. Returns whether the timer is still armed."""
        return self._fire(self._generation)

    def _fire(self, generation: int) -> bool:
        with self._guard:
            if self._callback is None or generation != self._generation:
                self._app.logger.debug(f"[timer-abort] timer={self.name} generation={generation}")
                return False
            callback = self._callback
            self._app.logger.debug(f"[timer-fire] timer={self.name} generation={generation}")
            with self._app.app_context():
                keep_going = callback()
            # The callback may have cancelled or re-armed this very timer
            if generation != self._generation:
                return False
            if not self._repeat or keep_going is False:
                self._callback = None
                return False
            return True

    def _worker(self, generation: int) -> None:
        while True:
            socketio.sleep(self._interval)
            if not self._fire(generation):
                return

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .cards import Card


@dataclass
class Player:
    sid: str
    username: str
    seed: int
    card: Card
    # Paid into the current round; cleared on reset until the next buy-in
    in_round: bool = True


class SessionRegistry:
    """Live connections and the seat each one holds."""

    def __init__(self):
        self._lock = threading.Lock()
        self._players: Dict[str, Player] = {}

    def add(self, player: Player) -> None:
        with self._lock:
            self._players[player.sid] = player

    def remove(self, sid: str) -> Optional[Player]:
        with self._lock:
            return self._players.pop(sid, None)

    def get(self, sid: str) -> Optional[Player]:
        with self._lock:
            return self._players.get(sid)

    def players(self) -> List[Player]:
        with self._lock:
            return list(self._players.values())

    def seeds(self) -> List[int]:
        return [p.seed for p in self.players()]

    def in_round_count(self) -> int:
        return sum(1 for p in self.players() if p.in_round)

    def sids_for(self, username: str) -> List[str]:
        return [p.sid for p in self.players() if p.username == username]

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)

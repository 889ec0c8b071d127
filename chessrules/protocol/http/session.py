from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...engine.move import Move
from ...engine.position import Position
from ...engine.types import Variant


@dataclass
class GameSession:
    """A game in progress: a stack of immutable positions plus move texts.

    ``positions[0]`` is the root; every played move pushes the resulting
    position and records its UCI and SAN spelling.
    """

    positions: List[Position]
    uci_history: List[str] = field(default_factory=list)
    san_history: List[str] = field(default_factory=list)

    @classmethod
    def new(cls, variant: Variant = Variant.STANDARD, chess960_index: Optional[int] = None) -> "GameSession":
        return cls(positions=[Position.initial(variant, chess960_index)])

    @classmethod
    def from_position(cls, pos: Position) -> "GameSession":
        return cls(positions=[pos])

    @property
    def position(self) -> Position:
        return self.positions[-1]

    def push(self, move: Move) -> Position:
        """Play ``move`` (validated) on top of the current position."""
        pos = self.position
        after = pos.play(move)
        self.positions.append(after)
        self.uci_history.append(pos.uci(move))
        self.san_history.append(pos.san(move))
        return after

    def undo(self) -> Position:
        """Drop the last move.

        Raises:
            ValueError: If no move has been played.
        """
        if len(self.positions) <= 1:
            raise ValueError("no moves to undo")
        self.positions.pop()
        self.uci_history.pop()
        self.san_history.pop()
        return self.position


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Update/replace session state
    - Delete sessions
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, GameSession] = {}

    def create(self, game: Optional[GameSession] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = GameSession.new()
        with self._lock:
            self._games[gid] = game
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._games.get(game_id)

    def set(self, game_id: str, game: GameSession) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def delete(self, game_id: str) -> bool:
        """Remove a session; returns whether it existed."""
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

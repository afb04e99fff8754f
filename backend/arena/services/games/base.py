from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from arena.errors import InvalidMove

DRAW = 'draw'

# (event name, payload) pairs addressed to a single recipient
Notification = Tuple[str, Optional[Dict[str, Any]]]


class GameResult(ABC):
    """Outcome of one accepted action, keyed by player identity.

    Each result knows how to render itself from one player's point of
    view, so rooms never need to know which game produced it.
    """

    @abstractmethod
    def notifications_for(self, player_id, opponent_id) -> List[Notification]:
        ...


class GameEngine(ABC):
    """Shared contract for two-player, round-based games."""

    mode: str = ''
    total_rounds: int = 1

    def __init__(self, player1_id, player2_id):
        if player1_id == player2_id:
            raise ValueError('a game needs two distinct players')
        self.player1_id = player1_id
        self.player2_id = player2_id
        self.current_round = 1
        self.scores = {player1_id: 0, player2_id: 0}
        self.history: List[Dict[str, Any]] = []
        self.finished = False

    def opponent_of(self, player_id):
        if player_id == self.player1_id:
            return self.player2_id
        if player_id == self.player2_id:
            return self.player1_id
        raise InvalidMove('You are not a player in this game', player_id)

    def submit_action(self, player_id, action: str, value) -> GameResult:
        """Dispatch an inbound socket action to the matching engine method."""
        handler = self.actions().get(action)
        if handler is None:
            raise InvalidMove(f'{action} is not a {self.mode} action', player_id)
        return handler(player_id, value)

    @abstractmethod
    def actions(self) -> Dict[str, Any]:
        ...

    def role_of(self, player_id) -> Optional[str]:
        return None

    def get_scores(self) -> Dict[Any, int]:
        return dict(self.scores)

    def get_history(self) -> List[Dict[str, Any]]:
        return list(self.history)

    def is_finished(self) -> bool:
        return self.finished

    def get_winner(self):
        """Higher total score wins; equal totals are a draw."""
        s1 = self.scores[self.player1_id]
        s2 = self.scores[self.player2_id]
        if s1 > s2:
            return self.player1_id
        if s2 > s1:
            return self.player2_id
        return DRAW

    def _ensure_active(self, player_id) -> None:
        if self.finished:
            raise InvalidMove('The match is already over', player_id)
        if player_id not in self.scores:
            raise InvalidMove('You are not a player in this game', player_id)

from typing import Dict, Optional, Tuple

from .connections import Connection
from .games import GAME_MODES, PRISONERS_DILEMMA, normalize_game_mode


class MatchmakingQueue:
    """One waiting slot per game mode.

    A second eligible arrival pairs with the waiter immediately, so no
    deeper queue is ever needed.
    """

    def __init__(self, default_mode: str = PRISONERS_DILEMMA):
        self.default_mode = normalize_game_mode(default_mode)
        self._waiting: Dict[str, Optional[Connection]] = {mode: None for mode in GAME_MODES}

    def waiting(self, game_mode: str) -> Optional[Connection]:
        return self._waiting.get(game_mode)

    def enqueue_or_pair(self, game_mode, connection: Connection) -> Tuple[str, Optional[Connection]]:
        """Return ``(mode, waiter)`` when paired, ``(mode, None)`` when queued.

        The waiter becomes player 1 and ``connection`` player 2.
        """
        mode = normalize_game_mode(game_mode, self.default_mode)
        waiter = self._waiting[mode]
        if (waiter is not None
                and waiter.alive
                and waiter.sid != connection.sid
                and waiter.user_id != connection.user_id):
            self._waiting[mode] = None
            self.discard(connection)
            return mode, waiter

        self.discard(connection)
        self._waiting[mode] = connection
        return mode, None

    def discard(self, connection: Connection) -> bool:
        """Clear every slot held by ``connection``."""
        removed = False
        for mode, waiter in self._waiting.items():
            if waiter is not None and waiter.sid == connection.sid:
                self._waiting[mode] = None
                removed = True
        return removed

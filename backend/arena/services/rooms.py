import logging
from typing import Any, Callable, Dict, Optional

from arena.errors import InvalidMove
from .connections import Connection
from .games import DRAW, GameEngine, GameResult

# record_match(game_mode, player1_id, player2_id, p1_score, p2_score, winner_id)
ResultSink = Callable[[str, Any, Any, int, int, Any], None]
EngineFactory = Callable[[str, Any, Any], GameEngine]


class Room:
    """Two connections bound to one game engine.

    The room only talks to the engine through the shared engine contract
    and lets each result render its own per-player messages.
    """

    def __init__(self, room_id: str, game_mode: str, player1: Connection, player2: Connection,
                 engine_factory: EngineFactory, result_sink: Optional[ResultSink] = None,
                 logger: Optional[logging.Logger] = None):
        self.room_id = room_id
        self.game_mode = game_mode
        self.player1_id = player1.user_id
        self.player2_id = player2.user_id
        self.seats: Dict[Any, Connection] = {player1.user_id: player1, player2.user_id: player2}
        self._engine_factory = engine_factory
        self._result_sink = result_sink
        self.logger = logger or logging.getLogger('arena')
        self.engine: Optional[GameEngine] = None
        self.rematch_requests: set = set()
        self.closed = False
        self._install_engine()

    @property
    def connections(self):
        return list(self.seats.values())

    @property
    def in_progress(self) -> bool:
        return self.engine is not None and not self.engine.is_finished()

    def opponent_id(self, player_id):
        return self.player2_id if player_id == self.player1_id else self.player1_id

    def _install_engine(self) -> None:
        self.engine = self._engine_factory(self.game_mode, self.player1_id, self.player2_id)
        self.rematch_requests = set()

    def start(self) -> None:
        """Announce round 1 of the current engine to both players."""
        for pid, conn in self.seats.items():
            payload = {
                'gameMode': self.game_mode,
                'round': 1,
                'totalRounds': self.engine.total_rounds,
                'opponentName': self.seats[self.opponent_id(pid)].name,
            }
            role = self.engine.role_of(pid)
            if role is not None:
                payload['role'] = role
            conn.deliver('match-found', payload)

    def handle_action(self, connection: Connection, action: str, value) -> Optional[GameResult]:
        """Apply one player action; invalid input is reported to that player only."""
        pid = connection.user_id
        try:
            if self.engine is None:
                raise InvalidMove('There is no match in progress', pid)
            result = self.engine.submit_action(pid, action, value)
        except InvalidMove as exc:
            connection.deliver('error-msg', {'message': exc.message})
            return None

        self._broadcast(result)
        if self.engine.is_finished():
            self._finish_match()
        return result

    def _broadcast(self, result: GameResult) -> None:
        for pid, conn in self.seats.items():
            for event, payload in result.notifications_for(pid, self.opponent_id(pid)):
                conn.deliver(event, payload)

    def _finish_match(self) -> None:
        engine = self.engine
        self.engine = None
        winner = engine.get_winner()
        scores = engine.get_scores()
        winner_id = None if winner == DRAW else winner

        if self._result_sink is not None:
            try:
                self._result_sink(self.game_mode, self.player1_id, self.player2_id,
                                  scores[self.player1_id], scores[self.player2_id], winner_id)
            except Exception:
                self.logger.exception(f"[record-match-failed] room={self.room_id} mode={self.game_mode}")

        history = engine.get_history()
        for pid, conn in self.seats.items():
            if winner == DRAW:
                outcome = 'draw'
            elif winner == pid:
                outcome = 'win'
            else:
                outcome = 'loss'
            conn.deliver('match-result', {
                'outcome': outcome,
                'finalScores': scores,
                'history': history,
            })
        self.logger.info(
            f"[match-finished] room={self.room_id} mode={self.game_mode} "
            f"scores={scores} winner={winner_id}"
        )

    def request_rematch(self, connection: Connection) -> bool:
        """Record rematch intent; returns True when a new match started."""
        pid = connection.user_id
        if self.in_progress:
            connection.deliver('error-msg', {'message': 'The match is still in progress'})
            return False
        if pid in self.rematch_requests:
            return False

        self.rematch_requests.add(pid)
        self.seats[self.opponent_id(pid)].deliver('rematch-requested')
        if len(self.rematch_requests) < 2:
            return False

        self._install_engine()
        self.logger.info(f"[rematch] room={self.room_id} mode={self.game_mode}")
        self.start()
        return True

    def close(self, leaving: Connection) -> None:
        """Tear the room down because ``leaving`` is gone."""
        if self.closed:
            return
        self.closed = True
        self.engine = None
        self.rematch_requests = set()
        for conn in self.seats.values():
            if conn.sid != leaving.sid:
                conn.deliver('opponent-disconnected')

"""Process-wide arena state: the matchmaking slots and the room registry.

One :class:`ArenaContext` lives on the Flask app (``app.extensions['arena']``).
Every public method takes the context lock, so socket handlers running on
different threads never mutate a room or queue slot at the same time.
"""

import logging
import threading
import uuid
from typing import Dict, Optional

from .connections import Connection
from .games import DEFAULT_TOTAL_ROUNDS, PRISONERS_DILEMMA, create_engine
from .matchmaking import MatchmakingQueue
from .rooms import ResultSink, Room


class ArenaContext:

    def __init__(self, result_sink: Optional[ResultSink] = None, logger: Optional[logging.Logger] = None,
                 pd_total_rounds: int = DEFAULT_TOTAL_ROUNDS, default_mode: str = PRISONERS_DILEMMA):
        self.result_sink = result_sink
        self.logger = logger or logging.getLogger('arena')
        self.queue = MatchmakingQueue(default_mode)
        self.pd_total_rounds = pd_total_rounds
        self.connections: Dict[str, Connection] = {}
        self.rooms: Dict[str, Room] = {}
        self.room_by_sid: Dict[str, str] = {}
        self.lock = threading.RLock()

    def create_engine(self, game_mode, player1_id, player2_id):
        return create_engine(game_mode, player1_id, player2_id, pd_total_rounds=self.pd_total_rounds)

    def connect(self, connection: Connection) -> None:
        with self.lock:
            self.connections[connection.sid] = connection

    def room_for(self, connection: Connection) -> Optional[Room]:
        room_id = self.room_by_sid.get(connection.sid)
        return self.rooms.get(room_id) if room_id else None

    def join_queue(self, connection: Connection, game_mode) -> Optional[Room]:
        """Queue ``connection`` or pair it with the waiting player."""
        with self.lock:
            if not connection.is_authenticated:
                connection.deliver('error-msg', {'message': 'Please log in first'})
                return None

            current = self.room_for(connection)
            if current is not None:
                if current.in_progress:
                    connection.deliver('error-msg', {'message': 'You are already in a match'})
                    return None
                # leaving a finished room for a new opponent retires it
                self._retire(current, connection)

            mode, waiter = self.queue.enqueue_or_pair(game_mode, connection)
            if waiter is None:
                connection.deliver('queue-joined', {'gameMode': mode})
                self.logger.info(f"[queue] mode={mode} user={connection.user_id} sid={connection.sid}")
                return None

            room = Room(
                f"room_{uuid.uuid4().hex[:12]}", mode, waiter, connection,
                engine_factory=self.create_engine,
                result_sink=self.result_sink,
                logger=self.logger,
            )
            self.rooms[room.room_id] = room
            self.room_by_sid[waiter.sid] = room.room_id
            self.room_by_sid[connection.sid] = room.room_id
            self.logger.info(
                f"[match] room={room.room_id} mode={mode} "
                f"p1={waiter.user_id} ({waiter.name}) p2={connection.user_id} ({connection.name})"
            )
            room.start()
            return room

    def dispatch(self, connection: Connection, action: str, value) -> None:
        """Route a game action to the connection's room; unbound connections are ignored."""
        with self.lock:
            room = self.room_for(connection)
            if room is None:
                return
            room.handle_action(connection, action, value)

    def rematch(self, connection: Connection) -> None:
        with self.lock:
            room = self.room_for(connection)
            if room is None:
                return
            room.request_rematch(connection)

    def disconnect(self, sid: str) -> Optional[Connection]:
        with self.lock:
            connection = self.connections.pop(sid, None)
            if connection is None:
                return None
            connection.close()
            if self.queue.discard(connection):
                self.logger.info(f"[queue-left] user={connection.user_id} sid={sid}")

            room = self.room_for(connection)
            if room is not None:
                self._retire(room, connection)
                self.logger.info(f"[disconnect] room={room.room_id} user={connection.user_id} sid={sid}")
            return connection

    def _retire(self, room: Room, leaving: Connection) -> None:
        room.close(leaving)
        for conn in room.connections:
            self.room_by_sid.pop(conn.sid, None)
        self.rooms.pop(room.room_id, None)

from typing import Any, Dict, Optional


class Connection:
    """A player's live socket plus the identity resolved when it connected.

    The underlying socket can go away at any time, so every outbound
    message goes through :meth:`deliver`, which drops it once the
    connection is closed.
    """

    def __init__(self, sid: str, user_id=None, name: Optional[str] = None):
        self.sid = sid
        self.user_id = user_id
        self.name = name
        self.alive = True

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def close(self) -> None:
        self.alive = False

    def deliver(self, event: str, payload: Optional[Dict[str, Any]] = None) -> bool:
        if not self.alive:
            return False
        self._send(event, payload)
        return True

    def _send(self, event: str, payload: Optional[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def __repr__(self):
        return f'<{type(self).__name__} sid={self.sid} user={self.user_id}>'

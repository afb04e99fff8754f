"""Exception hierarchy for the arena domain.

Engines raise these; the room layer turns them into ``error-msg`` events
for the offending connection.
"""


class ArenaError(Exception):
    """Base exception for all arena errors."""


class InvalidMove(ArenaError):
    """An action that violates the current game state's preconditions."""

    def __init__(self, message: str, player_id=None):
        self.player_id = player_id
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.args[0]


class UnknownGameMode(ArenaError):
    """Raised when an engine is requested for a mode that does not exist."""

"""Game domain services: the rules of each game mode.

Engines here are pure state machines with no knowledge of sockets or the
database, so both the socket handlers and the tests can drive them
directly.
"""

from arena.errors import UnknownGameMode
from .base import DRAW, GameEngine, GameResult
from .prisoners_dilemma import PrisonersDilemma, DEFAULT_TOTAL_ROUNDS
from .ultimatum import UltimatumGame

PRISONERS_DILEMMA = PrisonersDilemma.mode
ULTIMATUM = UltimatumGame.mode
GAME_MODES = (PRISONERS_DILEMMA, ULTIMATUM)


def normalize_game_mode(game_mode, default: str = PRISONERS_DILEMMA) -> str:
    """Unknown or missing modes fall back to ``default``."""
    return game_mode if game_mode in GAME_MODES else default


def create_engine(game_mode: str, player1_id, player2_id,
                  pd_total_rounds: int = DEFAULT_TOTAL_ROUNDS) -> GameEngine:
    if game_mode == PRISONERS_DILEMMA:
        return PrisonersDilemma(player1_id, player2_id, total_rounds=pd_total_rounds)
    if game_mode == ULTIMATUM:
        return UltimatumGame(player1_id, player2_id)
    raise UnknownGameMode(game_mode)

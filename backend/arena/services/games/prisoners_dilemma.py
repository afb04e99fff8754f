"""Iterated Prisoner's Dilemma.

Both players choose simultaneously each round; the round resolves as soon
as the second choice arrives.

Payoff matrix (row = player A, column = player B):

    cooperate / cooperate -> 3 / 3
    cooperate / defect    -> 0 / 5
    defect    / cooperate -> 5 / 0
    defect    / defect    -> 1 / 1
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from arena.errors import InvalidMove
from .base import GameEngine, GameResult, Notification

COOPERATE = 'cooperate'
DEFECT = 'defect'
CHOICES = (COOPERATE, DEFECT)

PAYOFF_MATRIX = {
    (COOPERATE, COOPERATE): (3, 3),
    (COOPERATE, DEFECT): (0, 5),
    (DEFECT, COOPERATE): (5, 0),
    (DEFECT, DEFECT): (1, 1),
}

DEFAULT_TOTAL_ROUNDS = 5


@dataclass
class ChoiceRecorded(GameResult):
    """A choice was stored; the opponent has not chosen yet."""

    player_id: Any
    round: int

    def notifications_for(self, player_id, opponent_id) -> List[Notification]:
        if player_id != self.player_id:
            return []
        return [('choice-received', {'round': self.round})]


@dataclass
class RoundResolved(GameResult):
    round: int
    choices: Dict[Any, str]
    payoffs: Dict[Any, int]
    scores: Dict[Any, int]

    def notifications_for(self, player_id, opponent_id) -> List[Notification]:
        return [('round-result', {
            'round': self.round,
            'myChoice': self.choices[player_id],
            'opponentChoice': self.choices[opponent_id],
            'myPayoff': self.payoffs[player_id],
            'opponentPayoff': self.payoffs[opponent_id],
            'myScore': self.scores[player_id],
            'opponentScore': self.scores[opponent_id],
        })]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'round': self.round,
            'choices': dict(self.choices),
            'payoffs': dict(self.payoffs),
            'scores': dict(self.scores),
        }


class PrisonersDilemma(GameEngine):
    mode = 'prisoners_dilemma'

    def __init__(self, player1_id, player2_id, total_rounds: int = DEFAULT_TOTAL_ROUNDS):
        super().__init__(player1_id, player2_id)
        if int(total_rounds) < 1:
            raise ValueError('total_rounds must be positive')
        self.total_rounds = int(total_rounds)
        self.pending_choices: Dict[Any, str] = {}

    def actions(self):
        return {'make-choice': self.submit_choice}

    def submit_choice(self, player_id, choice) -> GameResult:
        self._ensure_active(player_id)
        if choice not in CHOICES:
            raise InvalidMove('Choice must be cooperate or defect', player_id)
        if player_id in self.pending_choices:
            raise InvalidMove('You already chose this round', player_id)

        self.pending_choices[player_id] = choice
        if len(self.pending_choices) < 2:
            return ChoiceRecorded(player_id=player_id, round=self.current_round)
        return self._resolve_round()

    def _resolve_round(self) -> RoundResolved:
        c1 = self.pending_choices[self.player1_id]
        c2 = self.pending_choices[self.player2_id]
        p1_pay, p2_pay = PAYOFF_MATRIX[(c1, c2)]

        self.scores[self.player1_id] += p1_pay
        self.scores[self.player2_id] += p2_pay

        result = RoundResolved(
            round=self.current_round,
            choices={self.player1_id: c1, self.player2_id: c2},
            payoffs={self.player1_id: p1_pay, self.player2_id: p2_pay},
            scores=dict(self.scores),
        )
        self.history.append(result.to_dict())
        self.pending_choices = {}
        self.current_round += 1
        if self.current_round > self.total_rounds:
            self.finished = True
        return result

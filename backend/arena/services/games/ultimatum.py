"""Two-round Ultimatum game.

Round 1: player 1 proposes how to split 10 points, player 2 accepts or
rejects. Round 2: the roles swap. Accepting pays both sides their share;
rejecting pays nobody.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from arena.errors import InvalidMove
from .base import GameEngine, GameResult, Notification

POT = 10
PROPOSER = 'proposer'
RESPONDER = 'responder'


@dataclass
class Proposal(GameResult):
    round: int
    proposer_id: Any
    responder_id: Any
    proposer_split: int
    responder_split: int

    def notifications_for(self, player_id, opponent_id) -> List[Notification]:
        payload = {
            'round': self.round,
            'proposerSplit': self.proposer_split,
            'responderSplit': self.responder_split,
        }
        if player_id == self.proposer_id:
            return [('proposal-submitted', payload)]
        return [('proposal-received', payload)]


@dataclass
class UltimatumRoundResolved(GameResult):
    round: int
    proposer_id: Any
    responder_id: Any
    proposer_split: int
    responder_split: int
    accepted: bool
    proposer_points: int
    responder_points: int
    scores: Dict[Any, int]
    # set when another round follows
    next_round: Optional[int] = None
    next_proposer_id: Any = None

    def notifications_for(self, player_id, opponent_id) -> List[Notification]:
        was_proposer = player_id == self.proposer_id
        notes = [('ultimatum-round-result', {
            'round': self.round,
            'role': PROPOSER if was_proposer else RESPONDER,
            'proposerSplit': self.proposer_split,
            'responderSplit': self.responder_split,
            'accepted': self.accepted,
            'myPoints': self.proposer_points if was_proposer else self.responder_points,
            'opponentPoints': self.responder_points if was_proposer else self.proposer_points,
            'myScore': self.scores[player_id],
            'opponentScore': self.scores[opponent_id],
        })]
        if self.next_round is not None:
            notes.append(('ultimatum-next-round', {
                'round': self.next_round,
                'role': PROPOSER if player_id == self.next_proposer_id else RESPONDER,
            }))
        return notes

    def to_dict(self) -> Dict[str, Any]:
        return {
            'round': self.round,
            'proposerId': self.proposer_id,
            'responderId': self.responder_id,
            'proposerSplit': self.proposer_split,
            'responderSplit': self.responder_split,
            'accepted': self.accepted,
            'proposerPoints': self.proposer_points,
            'responderPoints': self.responder_points,
            'scores': dict(self.scores),
        }


class UltimatumGame(GameEngine):
    mode = 'ultimatum'
    total_rounds = 2

    def __init__(self, player1_id, player2_id):
        super().__init__(player1_id, player2_id)
        self.current_proposer_id = player1_id
        self.current_responder_id = player2_id
        self.pending_proposal: Optional[Dict[str, int]] = None

    def actions(self):
        return {
            'propose-split': self.submit_proposal,
            'respond-to-proposal': self.submit_response,
        }

    def role_of(self, player_id) -> Optional[str]:
        if player_id == self.current_proposer_id:
            return PROPOSER
        if player_id == self.current_responder_id:
            return RESPONDER
        return None

    def submit_proposal(self, player_id, proposer_split) -> Proposal:
        self._ensure_active(player_id)
        if player_id != self.current_proposer_id:
            raise InvalidMove('It is not your turn to propose', player_id)
        if self.pending_proposal is not None:
            raise InvalidMove('A proposal is already on the table', player_id)
        # bool is an int subclass but never a valid split
        if isinstance(proposer_split, bool) or not isinstance(proposer_split, int):
            raise InvalidMove('Invalid proposal', player_id)
        if not 0 <= proposer_split <= POT:
            raise InvalidMove('Invalid proposal', player_id)

        responder_split = POT - proposer_split
        self.pending_proposal = {
            'proposer_split': proposer_split,
            'responder_split': responder_split,
        }
        return Proposal(
            round=self.current_round,
            proposer_id=self.current_proposer_id,
            responder_id=self.current_responder_id,
            proposer_split=proposer_split,
            responder_split=responder_split,
        )

    def submit_response(self, player_id, accepted) -> UltimatumRoundResolved:
        self._ensure_active(player_id)
        if player_id != self.current_responder_id:
            raise InvalidMove('It is not your turn to respond', player_id)
        if self.pending_proposal is None:
            raise InvalidMove('There is no proposal to respond to', player_id)
        if not isinstance(accepted, bool):
            raise InvalidMove('Invalid response', player_id)

        proposer_split = self.pending_proposal['proposer_split']
        responder_split = self.pending_proposal['responder_split']
        proposer_points = proposer_split if accepted else 0
        responder_points = responder_split if accepted else 0

        self.scores[self.current_proposer_id] += proposer_points
        self.scores[self.current_responder_id] += responder_points

        result = UltimatumRoundResolved(
            round=self.current_round,
            proposer_id=self.current_proposer_id,
            responder_id=self.current_responder_id,
            proposer_split=proposer_split,
            responder_split=responder_split,
            accepted=accepted,
            proposer_points=proposer_points,
            responder_points=responder_points,
            scores=dict(self.scores),
        )
        self.history.append(result.to_dict())
        self.pending_proposal = None

        if self.current_round >= self.total_rounds:
            self.finished = True
        else:
            self.current_round += 1
            self.current_proposer_id, self.current_responder_id = (
                self.current_responder_id, self.current_proposer_id
            )
            result.next_round = self.current_round
            result.next_proposer_id = self.current_proposer_id
        return result

"""Match persistence, player statistics and leaderboards."""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import case, func, or_, select, union_all
from sqlalchemy.exc import SQLAlchemyError

from arena import db, socketio
from arena.models import Friendship, Match, User


class DatabaseResultSink:
    """Result sink that stores finished matches in the ``game_match`` table.

    Writes are fire-and-forget: they run as a Socket.IO background task
    (inline under TESTING) and a failed write is logged, never raised.
    """

    def __init__(self, app):
        self.app = app

    def __call__(self, game_mode, player1_id, player2_id, p1_score, p2_score, winner_id) -> None:
        if self.app.config.get('TESTING'):
            self.record_match(game_mode, player1_id, player2_id, p1_score, p2_score, winner_id)
        else:
            socketio.start_background_task(
                self.record_match, game_mode, player1_id, player2_id, p1_score, p2_score, winner_id
            )

    def record_match(self, game_mode, player1_id, player2_id, p1_score, p2_score, winner_id) -> None:
        with self.app.app_context():
            try:
                match = Match(
                    game_type=game_mode,
                    player1_id=player1_id,
                    player2_id=player2_id,
                    p1_score=p1_score,
                    p2_score=p2_score,
                    winner_id=winner_id,
                )
                db.session.add(match)
                db.session.commit()
                self.app.logger.info(
                    f"[record-match] id={match.id} mode={game_mode} "
                    f"p1={player1_id}:{p1_score} p2={player2_id}:{p2_score} winner={winner_id}"
                )
            except SQLAlchemyError:
                db.session.rollback()
                self.app.logger.exception(
                    f"[record-match-failed] mode={game_mode} p1={player1_id} p2={player2_id}"
                )


def player_stats(user_id: int) -> Dict[str, int]:
    row = db.session.query(
        func.count(Match.id),
        func.coalesce(func.sum(case((Match.winner_id == user_id, 1), else_=0)), 0),
        func.coalesce(func.sum(case(
            ((Match.winner_id.isnot(None)) & (Match.winner_id != user_id), 1), else_=0)), 0),
        func.coalesce(func.sum(case((Match.winner_id.is_(None), 1), else_=0)), 0),
        func.coalesce(func.sum(case(
            (Match.player1_id == user_id, Match.p1_score), else_=Match.p2_score)), 0),
    ).filter(or_(Match.player1_id == user_id, Match.player2_id == user_id)).one()

    games_played, wins, losses, draws, total_score = row
    return {
        'games_played': int(games_played or 0),
        'wins': int(wins or 0),
        'losses': int(losses or 0),
        'draws': int(draws or 0),
        'total_score': int(total_score or 0),
    }


def accepted_friend_ids(user_id: int) -> List[int]:
    rows = Friendship.query.filter(
        Friendship.status == 'accepted',
        or_(Friendship.user_id == user_id, Friendship.friend_id == user_id),
    ).all()
    ids = set()
    for f in rows:
        ids.add(f.friend_id if f.user_id == user_id else f.user_id)
    ids.discard(user_id)
    return sorted(ids)


def ranked_users(user_ids: Optional[Iterable[int]] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Rank users by wins, then total score, both descending, in one grouped query.

    Each match contributes one row per side, so a user's aggregates come from
    the rows where they were player 1 or player 2.
    """
    sides = union_all(
        select(Match.player1_id.label('user_id'), Match.p1_score.label('score'), Match.winner_id.label('winner_id')),
        select(Match.player2_id.label('user_id'), Match.p2_score.label('score'), Match.winner_id.label('winner_id')),
    ).subquery()

    games_played = func.count(sides.c.user_id).label('games_played')
    wins = func.coalesce(func.sum(case((sides.c.winner_id == sides.c.user_id, 1), else_=0)), 0).label('wins')
    losses = func.coalesce(func.sum(case(
        ((sides.c.winner_id.isnot(None)) & (sides.c.winner_id != sides.c.user_id), 1), else_=0)), 0).label('losses')
    draws = func.coalesce(func.sum(case((sides.c.winner_id.is_(None) & sides.c.user_id.isnot(None), 1), else_=0)), 0).label('draws')
    total_score = func.coalesce(func.sum(sides.c.score), 0).label('total_score')

    query = db.session.query(User.id, User.username, games_played, wins, losses, draws, total_score) \
        .outerjoin(sides, sides.c.user_id == User.id) \
        .group_by(User.id, User.username) \
        .order_by(wins.desc(), total_score.desc(), User.id)
    if user_ids is not None:
        query = query.filter(User.id.in_(list(user_ids)))
    if limit is not None:
        query = query.limit(limit)

    return [
        {
            'rank': i + 1,
            'id': row.id,
            'username': row.username,
            'games_played': int(row.games_played or 0),
            'wins': int(row.wins or 0),
            'losses': int(row.losses or 0),
            'draws': int(row.draws or 0),
            'total_score': int(row.total_score or 0),
        }
        for i, row in enumerate(query.all())
    ]


def friends_leaderboard(user_id: int) -> List[Dict[str, Any]]:
    return ranked_users([user_id] + accepted_friend_ids(user_id))


def global_leaderboard(limit: int = 20) -> List[Dict[str, Any]]:
    return ranked_users(limit=limit)


def recent_matches(user_id: int, limit: int = 10) -> List[Dict[str, Any]]:
    matches = Match.query.filter(or_(Match.player1_id == user_id, Match.player2_id == user_id)) \
        .order_by(Match.created_at.desc(), Match.id.desc()) \
        .limit(limit).all()
    return [m.to_dict() for m in matches]

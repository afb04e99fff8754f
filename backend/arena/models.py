from arena import db, bcrypt
from flask_login import UserMixin


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Match(db.Model):
    """A finished match, written once by the result sink."""
    __tablename__ = 'game_match'
    id = db.Column(db.Integer, primary_key=True)
    game_type = db.Column(db.String(32), nullable=False, index=True)
    player1_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    player2_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    p1_score = db.Column(db.Integer, nullable=False, default=0)
    p2_score = db.Column(db.Integer, nullable=False, default=0)
    # NULL means a draw
    winner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'game_type': self.game_type,
            'player1_id': self.player1_id,
            'player2_id': self.player2_id,
            'p1_score': self.p1_score,
            'p2_score': self.p2_score,
            'winner_id': self.winner_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Friendship(db.Model):
    __tablename__ = 'friendship'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'friend_id', name='uq_friendship_pair'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    friend_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default='pending')  # pending, accepted
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    user = db.relationship('User', foreign_keys=[user_id])
    friend = db.relationship('User', foreign_keys=[friend_id])

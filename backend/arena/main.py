from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from arena import db
from arena.models import User
from arena.services.results import player_stats, recent_matches

main = Blueprint('main', __name__)


def _credentials():
    data = request.get_json(silent=True) or {}
    username = str(data.get('username') or '').strip()
    password = str(data.get('password') or '')
    return username, password, bool(data.get('remember_me'))


@main.route('/register', methods=['POST'])
def register():
    username, password, remember = _credentials()
    if not username or not password:
        return jsonify({'error': 'Username and password required'}), 400

    cfg = current_app.config
    min_len = int(cfg.get('USERNAME_MIN_LEN', 2))
    max_len = int(cfg.get('USERNAME_MAX_LEN', 20))
    if not min_len <= len(username) <= max_len:
        return jsonify({'error': f'Username must be {min_len}-{max_len} characters'}), 400
    min_pw = int(cfg.get('PASSWORD_MIN_LEN', 4))
    if len(password) < min_pw:
        return jsonify({'error': f'Password must be at least {min_pw} characters'}), 400

    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already taken'}), 409

    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user, remember=remember)
    current_app.logger.info(f"[register] user={user.id} username={user.username}")
    return jsonify(user.to_dict()), 201


@main.route('/login', methods=['POST'])
def login():
    username, password, remember = _credentials()
    if not username or not password:
        return jsonify({'error': 'Username and password required'}), 400
    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        login_user(user, remember=remember)
        return jsonify(user.to_dict())
    return jsonify({'error': 'Invalid username or password'}), 401


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'ok': True})


@main.route('/me', methods=['GET'])
@login_required
def me():
    payload = current_user.to_dict()
    payload['created_at'] = current_user.created_at.isoformat() if current_user.created_at else None
    payload['stats'] = player_stats(current_user.id)
    payload['recent_matches'] = recent_matches(current_user.id)
    return jsonify(payload)

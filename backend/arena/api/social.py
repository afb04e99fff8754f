from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from sqlalchemy import and_, or_
from arena import db
from arena.models import User, Friendship
from arena.services.results import friends_leaderboard, global_leaderboard


social = Blueprint('social', __name__)


@social.route('/friends', methods=['GET'])
@login_required
def list_friends():
    """
    Returns every friendship row touching the current user, seen from their side.
    """
    uid = current_user.id
    rows = Friendship.query.filter(
        or_(Friendship.user_id == uid, Friendship.friend_id == uid)
    ).order_by(Friendship.created_at).all()

    friends = {}
    for f in rows:
        outgoing = f.user_id == uid
        other = f.friend if outgoing else f.user
        # accepted pairs have a row in each direction; report them once
        if other.id in friends and friends[other.id]['status'] == 'accepted':
            continue
        friends[other.id] = {
            'id': other.id,
            'username': other.username,
            'status': f.status,
            'created_at': f.created_at.isoformat() if f.created_at else None,
            'direction': 'outgoing' if outgoing else 'incoming',
        }
    return jsonify(list(friends.values())), 200


@social.route('/friends/add', methods=['POST'])
@login_required
def add_friend():
    data = request.get_json(silent=True) or {}
    username = str(data.get('username') or '').strip()
    if not username:
        return jsonify({'error': 'Username required'}), 400

    target = User.query.filter_by(username=username).first()
    if not target:
        return jsonify({'error': 'User not found'}), 404
    if target.id == current_user.id:
        return jsonify({'error': "You can't add yourself"}), 400

    existing = Friendship.query.filter(or_(
        and_(Friendship.user_id == current_user.id, Friendship.friend_id == target.id),
        and_(Friendship.user_id == target.id, Friendship.friend_id == current_user.id),
    )).first()
    if existing:
        return jsonify({'error': 'Friend request already exists'}), 409

    db.session.add(Friendship(user_id=current_user.id, friend_id=target.id, status='pending'))
    db.session.commit()
    current_app.logger.info(f"[friend-request] from={current_user.id} to={target.id}")
    return jsonify({'ok': True, 'message': f'Friend request sent to {target.username}'}), 201


@social.route('/friends/accept', methods=['POST'])
@login_required
def accept_friend():
    """
    Accepts a pending request sent to the current user by ``user_id``.
    """
    data = request.get_json(silent=True) or {}
    # older clients post camelCase userId
    requester_id = data.get('user_id') or data.get('userId')
    if not requester_id:
        return jsonify({'error': 'user_id required'}), 400

    pending = Friendship.query.filter_by(
        user_id=requester_id, friend_id=current_user.id, status='pending'
    ).first()
    if not pending:
        return jsonify({'error': 'No pending friend request from that user'}), 404

    pending.status = 'accepted'
    reverse = Friendship.query.filter_by(user_id=current_user.id, friend_id=requester_id).first()
    if reverse:
        reverse.status = 'accepted'
    else:
        db.session.add(Friendship(user_id=current_user.id, friend_id=requester_id, status='accepted'))
    db.session.commit()
    return jsonify({'ok': True}), 200


@social.route('/leaderboard', methods=['GET'])
@login_required
def leaderboard():
    """
    Ranks the current user and their accepted friends.
    """
    return jsonify(friends_leaderboard(current_user.id)), 200


@social.route('/leaderboard/global', methods=['GET'])
@login_required
def leaderboard_global():
    limit = int(current_app.config.get('LEADERBOARD_LIMIT', 20))
    return jsonify(global_leaderboard(limit)), 200

"""
Session authentication for the JSON API.

Identity comes from an upstream provider; this blueprint only upserts the
user record and keeps its id in the Flask session.
"""

from functools import wraps
from datetime import datetime
from flask import Blueprint, request, jsonify, session, current_app, g

from dinnerlog import db
from dinnerlog.models import User

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def user_required(f):
    """Decorator to require a logged-in user. Sets g.user."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = get_current_user()
        if not user:
            return jsonify({'success': False, 'error': 'Unauthorized'}), 401
        g.user = user
        return f(*args, **kwargs)
    return decorated_function


def get_current_user():
    """Get the currently logged-in user."""
    user_id = session.get('user_id')
    if user_id:
        return db.session.get(User, user_id)
    return None


def set_user_session(user):
    """Set session variables for a logged-in user."""
    session['user_id'] = user.id
    session.permanent = True
    current_app.logger.info(f"set_user_session: user={user.id}")


def upsert_user(data):
    """Create the user or refresh its profile fields."""
    user = db.session.get(User, data['id'])
    if user is None:
        user = User(id=data['id'])
        db.session.add(user)
    for field in ('email', 'first_name', 'last_name', 'profile_image_url'):
        if field in data:
            setattr(user, field, data[field])
    user.updated_at = datetime.utcnow()
    db.session.commit()
    return user


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log in with the claims handed over by the identity provider."""
    data = request.get_json(silent=True) or {}
    user_id = str(data.get('id') or '').strip()
    if not user_id:
        return jsonify({'success': False, 'error': 'User id is required'}), 400

    data['id'] = user_id
    user = upsert_user(data)
    set_user_session(user)
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'success': True})


@auth_bp.route('/user')
@user_required
def current_user():
    return jsonify(g.user.to_dict())

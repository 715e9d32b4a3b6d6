from functools import wraps
from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from models import db, User
from errors import Unauthorized

TOKEN_SALT = "booking-auth"


def _serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def generate_token(user):
    return _serializer().dumps({"user_id": user.id})


def get_current_user():
    """
    Resolves the bearer token on the current request to an active User.

    Raises:
        Unauthorized: token missing, malformed, expired, or user unknown/inactive
    """
    header = request.headers.get("Authorization", "")
    token = header.replace("Bearer ", "", 1).strip()
    if not token:
        raise Unauthorized("Access denied. No token provided.")

    try:
        payload = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        raise Unauthorized("Token expired. Please login again.")
    except BadSignature:
        raise Unauthorized("Invalid token.")

    user = db.session.get(User, payload.get("user_id"))
    if not user or not user.is_active:
        raise Unauthorized("Invalid token or user not found.")
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.current_user = get_current_user()
        return view(*args, **kwargs)
    return wrapper

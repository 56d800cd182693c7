# Overview: Flask API routes for accounts and sessions.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import route_authorizer
from ..extensions import db
from ..models import User
from ..permissions import USER_PERMISSIONS
from ..services import auth_service, session_service
from ..services.auth_service import AccountExistsError, PasswordValidationError

users_bp = Blueprint("users", __name__, url_prefix="/api/users")
authorize = route_authorizer(USER_PERMISSIONS)


@users_bp.get("/", strict_slashes=False)
@authorize("/")
def list_users_route():
    users = db.session.query(User).order_by(User.id.asc()).all()
    return jsonify([u.to_public_dict() for u in users])


@users_bp.post("/signup")
@authorize("/signup")
def signup_route():
    """Register a non-admin account. Admins are promoted through the CLI."""
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    if not username or not password:
        return jsonify({"error": "username and password required"}), 400

    try:
        user = auth_service.create_user(
            username=username,
            password=password,
            firstname=data.get("firstname"),
            lastname=data.get("lastname"),
        )
    except AccountExistsError as e:
        return jsonify({"error": str(e)}), 409
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"success": True, "status": "Registration Successful!", "user": user.to_public_dict()}), 200


@users_bp.post("/login")
@authorize("/login")
def login_route():
    """Exchange credentials for a bearer token."""
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    if not username or not password:
        return jsonify({"error": "username and password required"}), 400

    user = auth_service.authenticate(username, password)
    if not user:
        return jsonify({"success": False, "error": "Invalid credentials"}), 401

    session, token = session_service.create_session(user.id)
    current_app.logger.info("User %s logged in", user.username)

    return jsonify({
        "success": True,
        "status": "Login Successful!",
        "token": token,
        "user": user.to_public_dict(),
        "session": session.to_dict(),
    }), 200


@users_bp.get("/logout")
@authorize("/logout")
def logout_route():
    token = request.headers["Authorization"].split(" ", 1)[1].strip()
    session_service.revoke_session(token)
    current_app.logger.info("User %s logged out", g.current_user.username)
    return jsonify({"success": True, "status": "Logged out"}), 200

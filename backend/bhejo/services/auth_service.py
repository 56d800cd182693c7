# Overview: Service-layer operations for accounts; password hashing and credential checks.

"""
Account service backing the verify-user / verify-admin capability checks.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, with upper, lower, digit and special characters
- Session tokens managed separately (see session_service.py)
"""

import bcrypt
import re
from ..extensions import db
from ..models import User
from ..time_utils import utcnow


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class AccountExistsError(ValueError):
    """Raised when a username is already taken."""


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt cost factor 12."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison; malformed hashes never verify."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    username: str,
    password: str,
    firstname: str | None = None,
    lastname: str | None = None,
    admin: bool = False,
) -> User:
    """
    Create a new account.

    Raises:
        AccountExistsError: If the username is taken
        PasswordValidationError: If password doesn't meet requirements
    """
    existing = db.session.query(User).filter(User.username == username).first()
    if existing:
        raise AccountExistsError("A user with that username is already registered")

    user = User(
        username=username,
        password_hash=hash_password(password),
        firstname=firstname,
        lastname=lastname,
        admin=admin,
    )

    db.session.add(user)
    db.session.commit()
    return user


def authenticate(username: str, password: str) -> User | None:
    """
    Authenticate user with username and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    user = db.session.query(User).filter(
        User.username == username,
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None


def set_admin(username: str, admin: bool = True) -> User:
    """Grant or drop the admin capability on an existing account."""
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise ValueError(f"User {username} not found")

    user.admin = admin
    db.session.commit()
    return user

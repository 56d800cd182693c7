"""
Pytest fixtures for the bhejo backend tests.

Each test gets its own app with an in-memory database and a temporary
upload folder.
"""

import io

import pytest
from bhejo import create_app
from bhejo.extensions import db
from bhejo.models import User, Product
from bhejo.services import session_service
from bhejo.services.auth_service import hash_password


ALLOWED_ORIGIN = "http://localhost:3000"
TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def password_hash():
    """One bcrypt hash shared by all test accounts."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'IMAGE_STORAGE': 'local',
        'UPLOAD_FOLDER': str(tmp_path / "uploads"),
        'CORS_ALLOWED_ORIGINS': (ALLOWED_ORIGIN, "http://localhost:5000"),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def make_user(app, password_hash):
    def _make_user(username: str, admin: bool = False) -> User:
        user = User(
            username=username,
            firstname=username.title(),
            lastname="Tester",
            password_hash=password_hash,
            admin=admin,
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture(scope='function')
def user(make_user):
    return make_user("alice")


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user("root", admin=True)


@pytest.fixture(scope='function')
def user_headers(user):
    return auth_headers(user)


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture(scope='function')
def make_product(app, user):
    def _make_product(owner=None, views=0, approved=False, **attributes) -> Product:
        product = Product(
            owner_id=(owner or user).id,
            images=["client/public/uploads/Not_available.jpg", "", "", ""],
            views=views,
            approved=approved,
            attributes=attributes,
        )
        db.session.add(product)
        db.session.commit()
        return product
    return _make_product


def auth_headers(user: User) -> dict:
    """Helper to create Authorization headers for a fresh session."""
    _, token = session_service.create_session(user.id)
    return {'Authorization': f'Bearer {token}'}


def image_file(name: str = "photo.png", content: bytes = b"\x89PNG fake"):
    """A (stream, filename) pair for multipart test uploads."""
    return (io.BytesIO(content), name)

"""Shared pytest fixtures for board service tests."""

from unittest.mock import Mock, patch

import jwt
import pytest

from app import create_app
from config import TestingConfig
from board.models import db
from board.services import CommentService, PostService

TOKEN_SECRET = "board-service-test-secret-key-0123456789"


def make_token(user_id, claim="userId"):
    """Token signed with a test key; the auth service is mocked and claims are decoded locally."""
    return jwt.encode({claim: user_id, "sub": f"user-{user_id}"}, TOKEN_SECRET, algorithm="HS256")


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    try:
        yield app
    finally:
        with app.app_context():
            db.session.remove()
            db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_service():
    """Identity service that accepts every token."""
    with patch("board.auth_utils.requests.get") as mocked:
        mocked.return_value = Mock(status_code=200)
        yield mocked


@pytest.fixture
def auth_headers(auth_service):
    def _headers(user_id=1):
        return {"Authorization": f"Bearer {make_token(user_id)}"}
    return _headers


@pytest.fixture
def make_post(app):
    def _make(author=1, title="title", content="content", expiration=None):
        with app.app_context():
            return PostService.create_post(author, title, content, expiration).id
    return _make


@pytest.fixture
def make_comment(app):
    def _make(post_id, author=1, content="comment"):
        with app.app_context():
            return CommentService.create_comment(post_id, author, content).id
    return _make

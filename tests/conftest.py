import itertools
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app import create_app
from config import TestingConfig
from models import db, User, Profile
from repositories import InMemorySwipeRepository
from utils.profiles import StaticProfileResolver

USER_IDS = ['U1', 'U2', 'U3', 'U4', 'U5', 'U6']
TEST_SECRET = TestingConfig.JWT_SECRET


@pytest.fixture
def repository():
    return InMemorySwipeRepository()


@pytest.fixture
def profiles():
    return StaticProfileResolver({
        user_id: {'id': user_id, 'name': f'User {user_id}'} for user_id in USER_IDS
    })


@pytest.fixture
def clock(monkeypatch):
    """Make the in-memory repository stamp rows one second apart"""
    base = datetime(2025, 1, 1, 12, 0, 0)
    ticks = itertools.count()
    monkeypatch.setattr(
        'repositories.memory.utcnow',
        lambda: base + timedelta(seconds=next(ticks))
    )
    return base


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def sql_users(app):
    for index, user_id in enumerate(USER_IDS):
        user = User(
            id=user_id,
            name=f'User {user_id}',
            email=f'{user_id.lower()}@example.com',
        )
        located = index % 2 == 0
        user.profile = Profile(
            age=25 + index,
            gender='female' if located else 'male',
            bio=f'Bio of {user_id}',
            interests=['Hiking', 'Coffee'],
            photos=[f'https://img.example.com/{user_id}.jpg'],
            latitude=-1.2921 if located else None,
            longitude=36.8219 if located else None,
        )
        db.session.add(user)
    db.session.commit()
    return USER_IDS


@pytest.fixture
def client(app, sql_users):
    return app.test_client()


def make_token(user_id, secret=TEST_SECRET, expires_in=3600, **claims):
    payload = {
        'sub': user_id,
        'exp': datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm='HS256')


@pytest.fixture
def auth_headers():
    def _headers(user_id, **kwargs):
        return {'Authorization': f'Bearer {make_token(user_id, **kwargs)}'}
    return _headers
